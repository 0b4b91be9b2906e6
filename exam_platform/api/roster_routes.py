from __future__ import annotations

from fastapi import Depends

from exam_platform.auth.dependencies import require_teacher
from exam_platform.auth.jwt_handler import TokenPayload
from exam_platform.models import RosterAddRequest, RosterAddResponse, StudentSummary
from exam_platform.services import AccountService
from exam_platform.wiring import get_accounts


async def add_students(
    request: RosterAddRequest,
    teacher: TokenPayload = Depends(require_teacher),
    accounts: AccountService = Depends(get_accounts),
) -> RosterAddResponse:
    """Link registered students to the calling teacher by email or national id."""
    return await accounts.add_students(teacher, request)


async def list_students(
    teacher: TokenPayload = Depends(require_teacher),
    accounts: AccountService = Depends(get_accounts),
) -> list[StudentSummary]:
    return await accounts.list_students(teacher)
