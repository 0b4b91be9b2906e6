from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from exam_platform.errors import Conflict, Internal, NotFound
from exam_platform.models import Answer, Assignment, Attempt, AttemptStatus, Exam, RosterEntry, User
from exam_platform.storage.repo import (
    AssignmentRepository,
    AttemptRepository,
    ExamRepository,
    RosterRepository,
    Storage,
    UserRepository,
)

logger = logging.getLogger(__name__)


class MongoUserRepository(UserRepository):
    def __init__(self, collection: Any) -> None:
        self.users = collection

    async def create(self, user: User) -> User:
        try:
            await self.users.insert_one(user.model_dump())
        except DuplicateKeyError as e:
            key = (e.details or {}).get("keyPattern", {})
            if "national_id" in key:
                raise Conflict("National id already registered")
            raise Conflict("Email already registered")
        return user

    async def get(self, user_id: str) -> User:
        doc = await self.users.find_one({"user_id": user_id})
        if not doc:
            raise NotFound("User not found")
        return User.model_validate(doc)

    async def find_by_email(self, email: str) -> Optional[User]:
        doc = await self.users.find_one({"email": email})
        return User.model_validate(doc) if doc else None

    async def find_by_national_id(self, national_id: str) -> Optional[User]:
        doc = await self.users.find_one({"national_id": national_id})
        return User.model_validate(doc) if doc else None

    async def record_login(self, user_id: str, when: datetime) -> None:
        await self.users.update_one({"user_id": user_id}, {"$set": {"last_login": when}})


class MongoExamRepository(ExamRepository):
    def __init__(self, collection: Any) -> None:
        self.exams = collection

    async def create(self, exam: Exam) -> Exam:
        try:
            await self.exams.insert_one(exam.model_dump())
        except DuplicateKeyError:
            raise Conflict("Exam already exists")
        return exam

    async def get(self, exam_id: str) -> Exam:
        doc = await self.exams.find_one({"exam_id": exam_id})
        if not doc:
            raise NotFound("Exam not found")
        return Exam.model_validate(doc)

    async def list_by_author(self, author_id: str) -> list[Exam]:
        cursor = self.exams.find({"created_by": author_id}).sort("created_at", DESCENDING)
        docs = await cursor.to_list(length=10_000)
        return [Exam.model_validate(d) for d in docs]

    async def list_open(self) -> list[Exam]:
        cursor = self.exams.find({"is_published": True, "is_active": True}).sort("created_at", DESCENDING)
        docs = await cursor.to_list(length=10_000)
        return [Exam.model_validate(d) for d in docs]

    async def update_flags(self, exam_id: str, flags: dict, updated_at: datetime) -> Exam:
        doc = await self.exams.find_one_and_update(
            {"exam_id": exam_id},
            {"$set": {**flags, "updated_at": updated_at}},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise NotFound("Exam not found")
        return Exam.model_validate(doc)


class MongoAttemptRepository(AttemptRepository):
    """
    Attempts are stored one document per (exam, user), answers embedded.

    The unique index on (exam_id, user_id) stops duplicate attempts, and
    submission is a single conditional document update, so answers, score and
    status always land together.
    """

    def __init__(self, collection: Any) -> None:
        self.attempts = collection

    async def latest_for(self, exam_id: str, user_id: str) -> Optional[Attempt]:
        doc = await self.attempts.find_one(
            {"exam_id": exam_id, "user_id": user_id}, sort=[("started_at", DESCENDING)]
        )
        return Attempt.model_validate(doc) if doc else None

    async def insert_if_absent(self, attempt: Attempt) -> Attempt:
        try:
            await self.attempts.insert_one(attempt.model_dump())
            return attempt
        except DuplicateKeyError:
            logger.info(f"Attempt for exam {attempt.exam_id} / user {attempt.user_id} created concurrently")
        existing = await self.latest_for(attempt.exam_id, attempt.user_id)
        if existing is None:
            raise Internal("Attempt vanished after duplicate insert")
        return existing

    async def get(self, attempt_id: str) -> Attempt:
        doc = await self.attempts.find_one({"attempt_id": attempt_id})
        if not doc:
            raise NotFound("Attempt not found")
        return Attempt.model_validate(doc)

    async def list_for_user(self, user_id: str) -> list[Attempt]:
        cursor = self.attempts.find({"user_id": user_id}).sort("started_at", DESCENDING)
        docs = await cursor.to_list(length=10_000)
        return [Attempt.model_validate(d) for d in docs]

    async def complete(
        self, attempt_id: str, answers: list[Answer], score: float, completed_at: datetime
    ) -> Optional[Attempt]:
        doc = await self.attempts.find_one_and_update(
            {"attempt_id": attempt_id, "status": AttemptStatus.in_progress.value},
            {
                "$set": {
                    "status": AttemptStatus.completed.value,
                    "score": score,
                    "completed_at": completed_at,
                    "answers": [a.model_dump() for a in answers],
                }
            },
            return_document=ReturnDocument.AFTER,
        )
        return Attempt.model_validate(doc) if doc else None


class MongoRosterRepository(RosterRepository):
    def __init__(self, collection: Any) -> None:
        self.rosters = collection

    async def add(self, entry: RosterEntry) -> bool:
        try:
            await self.rosters.insert_one(entry.model_dump())
        except DuplicateKeyError:
            return False
        return True

    async def list_student_ids(self, teacher_id: str) -> list[str]:
        cursor = self.rosters.find({"teacher_id": teacher_id}).sort("added_at", ASCENDING)
        docs = await cursor.to_list(length=10_000)
        return [d["student_id"] for d in docs]


class MongoAssignmentRepository(AssignmentRepository):
    def __init__(self, collection: Any) -> None:
        self.assignments = collection

    async def add(self, assignment: Assignment) -> bool:
        try:
            await self.assignments.insert_one(assignment.model_dump())
        except DuplicateKeyError:
            return False
        return True

    async def list_for_student(self, student_id: str) -> list[Assignment]:
        cursor = self.assignments.find({"student_id": student_id}).sort("assigned_at", ASCENDING)
        docs = await cursor.to_list(length=10_000)
        return [Assignment.model_validate(d) for d in docs]

    async def list_for_exam(self, exam_id: str) -> list[Assignment]:
        cursor = self.assignments.find({"exam_id": exam_id}).sort("assigned_at", ASCENDING)
        docs = await cursor.to_list(length=10_000)
        return [Assignment.model_validate(d) for d in docs]


class MongoStorage(Storage):
    def __init__(self, mongo_uri: str, db_name: str) -> None:
        self.client = AsyncIOMotorClient(mongo_uri, tz_aware=True, serverSelectionTimeoutMS=5000)
        self.db = self.client[db_name]
        super().__init__(
            users=MongoUserRepository(self.db["users"]),
            exams=MongoExamRepository(self.db["exams"]),
            attempts=MongoAttemptRepository(self.db["exam_attempts"]),
            rosters=MongoRosterRepository(self.db["teacher_students"]),
            assignments=MongoAssignmentRepository(self.db["exam_assignments"]),
        )

    async def connect(self) -> None:
        try:
            await self.client.admin.command("ping")
            await self.db["users"].create_index("user_id", unique=True)
            await self.db["users"].create_index("email", unique=True)
            await self.db["users"].create_index("national_id", unique=True)
            await self.db["exams"].create_index("exam_id", unique=True)
            await self.db["exams"].create_index([("created_by", ASCENDING), ("created_at", DESCENDING)])
            await self.db["exam_attempts"].create_index("attempt_id", unique=True)
            await self.db["exam_attempts"].create_index(
                [("exam_id", ASCENDING), ("user_id", ASCENDING)], unique=True
            )
            await self.db["teacher_students"].create_index(
                [("teacher_id", ASCENDING), ("student_id", ASCENDING)], unique=True
            )
            await self.db["exam_assignments"].create_index(
                [("exam_id", ASCENDING), ("student_id", ASCENDING)], unique=True
            )
            await self.db["exam_assignments"].create_index("student_id")
        except PyMongoError as e:
            logger.error(f"MongoDB init failed: {str(e)}")
            raise Internal("Database unavailable") from e
        logger.info("MongoDB connected")

    async def close(self) -> None:
        self.client.close()
        logger.info("MongoDB connection closed")
