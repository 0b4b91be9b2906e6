"""
Account service: registration, credential checks, profiles and the teacher
roster. Tokens are issued here once credentials have been verified.
"""

from __future__ import annotations

import logging

from exam_platform.auth.jwt_handler import TokenPayload, create_access_token, token_lifetime_seconds
from exam_platform.auth.password import hash_password, verify_password
from exam_platform.errors import Forbidden, Unauthenticated
from exam_platform.models import (
    LoginRequest,
    LoginResponse,
    RosterAddRequest,
    RosterAddResponse,
    RosterEntry,
    StudentSummary,
    TokenResponse,
    User,
    UserCreate,
    UserResponse,
    UserRole,
)
from exam_platform.models.common import utcnow
from exam_platform.models.user import check_national_id
from exam_platform.storage.repo import RosterRepository, UserRepository

logger = logging.getLogger(__name__)

SELF_REGISTER_ROLES = (UserRole.student, UserRole.teacher)


def issue_token(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(user_id=user.user_id, email=user.email, role=user.role),
        token_type="bearer",
        expires_in=token_lifetime_seconds(),
    )


class AccountService:
    def __init__(self, users: UserRepository, rosters: RosterRepository) -> None:
        self.users = users
        self.rosters = rosters

    async def register(self, request: UserCreate) -> User:
        """
        Create a new account.

        Students and teachers may self-register; admin accounts cannot be
        created through this path.
        """
        if request.role not in SELF_REGISTER_ROLES:
            raise Forbidden("Admin accounts cannot self-register")

        user = User(
            name=request.name.strip(),
            email=request.email.lower(),
            national_id=request.national_id,
            password_hash=hash_password(request.password),
            role=request.role,
        )
        created = await self.users.create(user)
        logger.info(f"New user registered: {created.email} ({created.role})")
        return created

    async def authenticate(self, request: LoginRequest) -> LoginResponse:
        if request.national_id:
            user = await self.users.find_by_national_id(request.national_id.strip())
        else:
            user = await self.users.find_by_email(str(request.email).lower())

        if user is None or not verify_password(request.password, user.password_hash):
            raise Unauthenticated("Invalid credentials")

        now = utcnow()
        await self.users.record_login(user.user_id, now)
        user.last_login = now
        logger.info(f"User logged in: {user.email}")

        return LoginResponse(user=UserResponse.from_user(user), token=issue_token(user))

    async def profile(self, current: TokenPayload) -> User:
        return await self.users.get(current.user_id)

    async def refresh(self, current: TokenPayload) -> TokenResponse:
        # the account must still exist for a token to be renewed
        user = await self.users.get(current.user_id)
        return issue_token(user)

    async def add_students(self, teacher: TokenPayload, request: RosterAddRequest) -> RosterAddResponse:
        """
        Link existing student accounts to the teacher.

        Identifiers that match no student, or students already linked, are skipped.
        """
        candidates: list[User] = []
        skipped = 0
        for email in request.emails:
            user = await self.users.find_by_email(str(email).lower())
            if user is None:
                skipped += 1
            else:
                candidates.append(user)
        for national_id in request.national_ids:
            try:
                national_id = check_national_id(national_id)
            except ValueError:
                skipped += 1
                continue
            user = await self.users.find_by_national_id(national_id)
            if user is None:
                skipped += 1
            else:
                candidates.append(user)

        added = 0
        for user in candidates:
            if user.role != UserRole.student:
                skipped += 1
                continue
            if await self.rosters.add(RosterEntry(teacher_id=teacher.user_id, student_id=user.user_id)):
                added += 1
            else:
                skipped += 1

        logger.info(f"Teacher {teacher.user_id} roster update: added={added} skipped={skipped}")
        return RosterAddResponse(added=added, skipped=skipped)

    async def list_students(self, teacher: TokenPayload) -> list[StudentSummary]:
        students = []
        for student_id in await self.rosters.list_student_ids(teacher.user_id):
            user = await self.users.get(student_id)
            students.append(
                StudentSummary(
                    user_id=user.user_id, name=user.name, email=user.email, national_id=user.national_id
                )
            )
        students.sort(key=lambda s: s.name)
        return students
