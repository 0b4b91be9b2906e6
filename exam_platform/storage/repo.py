from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from exam_platform.models import Answer, Assignment, Attempt, Exam, RosterEntry, User


class UserRepository(ABC):
    @abstractmethod
    async def create(self, user: User) -> User:
        """Insert a user; raises Conflict if the email or national id is taken."""
        raise NotImplementedError

    @abstractmethod
    async def get(self, user_id: str) -> User:
        raise NotImplementedError

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    async def find_by_national_id(self, national_id: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    async def record_login(self, user_id: str, when: datetime) -> None:
        raise NotImplementedError


class ExamRepository(ABC):
    @abstractmethod
    async def create(self, exam: Exam) -> Exam:
        raise NotImplementedError

    @abstractmethod
    async def get(self, exam_id: str) -> Exam:
        raise NotImplementedError

    @abstractmethod
    async def list_by_author(self, author_id: str) -> list[Exam]:
        raise NotImplementedError

    @abstractmethod
    async def list_open(self) -> list[Exam]:
        """Published and active exams, newest first."""
        raise NotImplementedError

    @abstractmethod
    async def update_flags(self, exam_id: str, flags: dict, updated_at: datetime) -> Exam:
        raise NotImplementedError


class AttemptRepository(ABC):
    @abstractmethod
    async def latest_for(self, exam_id: str, user_id: str) -> Optional[Attempt]:
        raise NotImplementedError

    @abstractmethod
    async def insert_if_absent(self, attempt: Attempt) -> Attempt:
        """Store ``attempt`` unless (exam_id, user_id) already has one; return the stored attempt."""
        raise NotImplementedError

    @abstractmethod
    async def get(self, attempt_id: str) -> Attempt:
        raise NotImplementedError

    @abstractmethod
    async def list_for_user(self, user_id: str) -> list[Attempt]:
        raise NotImplementedError

    @abstractmethod
    async def complete(
        self, attempt_id: str, answers: list[Answer], score: float, completed_at: datetime
    ) -> Optional[Attempt]:
        """
        Atomically move an in-progress attempt to completed with its answers and score.

        Returns None, writing nothing, when the attempt is no longer in progress.
        """
        raise NotImplementedError


class RosterRepository(ABC):
    @abstractmethod
    async def add(self, entry: RosterEntry) -> bool:
        """Returns False when the link already exists."""
        raise NotImplementedError

    @abstractmethod
    async def list_student_ids(self, teacher_id: str) -> list[str]:
        raise NotImplementedError


class AssignmentRepository(ABC):
    @abstractmethod
    async def add(self, assignment: Assignment) -> bool:
        """Returns False when the exam is already assigned to that student."""
        raise NotImplementedError

    @abstractmethod
    async def list_for_student(self, student_id: str) -> list[Assignment]:
        raise NotImplementedError

    @abstractmethod
    async def list_for_exam(self, exam_id: str) -> list[Assignment]:
        raise NotImplementedError


class Storage:
    """Bundle of repositories sharing one backend connection."""

    def __init__(
        self,
        users: UserRepository,
        exams: ExamRepository,
        attempts: AttemptRepository,
        rosters: RosterRepository,
        assignments: AssignmentRepository,
    ) -> None:
        self.users = users
        self.exams = exams
        self.attempts = attempts
        self.rosters = rosters
        self.assignments = assignments

    async def connect(self) -> None:
        return None

    async def close(self) -> None:
        return None
