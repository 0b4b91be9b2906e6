from __future__ import annotations

import threading
from datetime import datetime
from typing import Dict, List, Optional

from exam_platform.errors import Conflict, NotFound
from exam_platform.models import Answer, Assignment, Attempt, AttemptStatus, Exam, RosterEntry, User
from exam_platform.storage.repo import (
    AssignmentRepository,
    AttemptRepository,
    ExamRepository,
    RosterRepository,
    Storage,
    UserRepository,
)


# Stored models are copied on the way in and out so callers never hold live rows.


class InMemoryUserRepository(UserRepository):
    def __init__(self) -> None:
        self.users: Dict[str, User] = {}
        self._lock = threading.Lock()

    async def create(self, user: User) -> User:
        with self._lock:
            for existing in self.users.values():
                if existing.email == user.email:
                    raise Conflict("Email already registered")
                if existing.national_id == user.national_id:
                    raise Conflict("National id already registered")
            self.users[user.user_id] = user.model_copy(deep=True)
        return user

    async def get(self, user_id: str) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise NotFound("User not found")
        return user.model_copy(deep=True)

    async def find_by_email(self, email: str) -> Optional[User]:
        for user in self.users.values():
            if user.email == email:
                return user.model_copy(deep=True)
        return None

    async def find_by_national_id(self, national_id: str) -> Optional[User]:
        for user in self.users.values():
            if user.national_id == national_id:
                return user.model_copy(deep=True)
        return None

    async def record_login(self, user_id: str, when: datetime) -> None:
        with self._lock:
            user = self.users.get(user_id)
            if user is None:
                raise NotFound("User not found")
            user.last_login = when


class InMemoryExamRepository(ExamRepository):
    def __init__(self) -> None:
        self.exams: Dict[str, Exam] = {}
        self._lock = threading.Lock()

    async def create(self, exam: Exam) -> Exam:
        with self._lock:
            if exam.exam_id in self.exams:
                raise Conflict("Exam already exists")
            self.exams[exam.exam_id] = exam.model_copy(deep=True)
        return exam

    async def get(self, exam_id: str) -> Exam:
        exam = self.exams.get(exam_id)
        if exam is None:
            raise NotFound("Exam not found")
        return exam.model_copy(deep=True)

    async def list_by_author(self, author_id: str) -> list[Exam]:
        exams = [e for e in self.exams.values() if e.created_by == author_id]
        exams.sort(key=lambda e: e.created_at, reverse=True)
        return [e.model_copy(deep=True) for e in exams]

    async def list_open(self) -> list[Exam]:
        exams = [e for e in self.exams.values() if e.is_published and e.is_active]
        exams.sort(key=lambda e: e.created_at, reverse=True)
        return [e.model_copy(deep=True) for e in exams]

    async def update_flags(self, exam_id: str, flags: dict, updated_at: datetime) -> Exam:
        with self._lock:
            exam = self.exams.get(exam_id)
            if exam is None:
                raise NotFound("Exam not found")
            updated = exam.model_copy(update={**flags, "updated_at": updated_at}, deep=True)
            self.exams[exam_id] = updated
        return updated.model_copy(deep=True)


class InMemoryAttemptRepository(AttemptRepository):
    def __init__(self) -> None:
        self.attempts: Dict[str, Attempt] = {}
        self._lock = threading.Lock()

    def _for_pair(self, exam_id: str, user_id: str) -> List[Attempt]:
        return [a for a in self.attempts.values() if a.exam_id == exam_id and a.user_id == user_id]

    async def latest_for(self, exam_id: str, user_id: str) -> Optional[Attempt]:
        attempts = self._for_pair(exam_id, user_id)
        if not attempts:
            return None
        return max(attempts, key=lambda a: a.started_at).model_copy(deep=True)

    async def insert_if_absent(self, attempt: Attempt) -> Attempt:
        with self._lock:
            existing = self._for_pair(attempt.exam_id, attempt.user_id)
            if existing:
                return max(existing, key=lambda a: a.started_at).model_copy(deep=True)
            self.attempts[attempt.attempt_id] = attempt.model_copy(deep=True)
        return attempt

    async def get(self, attempt_id: str) -> Attempt:
        attempt = self.attempts.get(attempt_id)
        if attempt is None:
            raise NotFound("Attempt not found")
        return attempt.model_copy(deep=True)

    async def list_for_user(self, user_id: str) -> list[Attempt]:
        attempts = [a for a in self.attempts.values() if a.user_id == user_id]
        attempts.sort(key=lambda a: a.started_at, reverse=True)
        return [a.model_copy(deep=True) for a in attempts]

    async def complete(
        self, attempt_id: str, answers: list[Answer], score: float, completed_at: datetime
    ) -> Optional[Attempt]:
        with self._lock:
            attempt = self.attempts.get(attempt_id)
            if attempt is None or attempt.status != AttemptStatus.in_progress:
                return None
            completed = attempt.model_copy(
                update={
                    "status": AttemptStatus.completed.value,
                    "score": score,
                    "completed_at": completed_at,
                    "answers": [a.model_copy() for a in answers],
                },
                deep=True,
            )
            self.attempts[attempt_id] = completed
        return completed.model_copy(deep=True)


class InMemoryRosterRepository(RosterRepository):
    def __init__(self) -> None:
        self.entries: List[RosterEntry] = []
        self._lock = threading.Lock()

    async def add(self, entry: RosterEntry) -> bool:
        with self._lock:
            for e in self.entries:
                if e.teacher_id == entry.teacher_id and e.student_id == entry.student_id:
                    return False
            self.entries.append(entry.model_copy())
        return True

    async def list_student_ids(self, teacher_id: str) -> list[str]:
        return [e.student_id for e in self.entries if e.teacher_id == teacher_id]


class InMemoryAssignmentRepository(AssignmentRepository):
    def __init__(self) -> None:
        self.assignments: List[Assignment] = []
        self._lock = threading.Lock()

    async def add(self, assignment: Assignment) -> bool:
        with self._lock:
            for a in self.assignments:
                if a.exam_id == assignment.exam_id and a.student_id == assignment.student_id:
                    return False
            self.assignments.append(assignment.model_copy())
        return True

    async def list_for_student(self, student_id: str) -> list[Assignment]:
        return [a.model_copy() for a in self.assignments if a.student_id == student_id]

    async def list_for_exam(self, exam_id: str) -> list[Assignment]:
        return [a.model_copy() for a in self.assignments if a.exam_id == exam_id]


class InMemoryStorage(Storage):
    def __init__(self) -> None:
        super().__init__(
            users=InMemoryUserRepository(),
            exams=InMemoryExamRepository(),
            attempts=InMemoryAttemptRepository(),
            rosters=InMemoryRosterRepository(),
            assignments=InMemoryAssignmentRepository(),
        )
