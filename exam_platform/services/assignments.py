"""
Exam assignments: a teacher hands one of their exams to students on their
roster, optionally with a due date, and each student sees the assigned exams
still waiting for them.
"""

from __future__ import annotations

import logging

from exam_platform.auth.jwt_handler import TokenPayload
from exam_platform.errors import NotFound
from exam_platform.models import (
    AssignedExam,
    Assignment,
    AssignmentCreate,
    AssignmentProgress,
    AssignmentResponse,
)
from exam_platform.services.attempts import AttemptTracker
from exam_platform.services.catalog import ExamCatalog
from exam_platform.storage.repo import AssignmentRepository, RosterRepository, UserRepository

logger = logging.getLogger(__name__)


class AssignmentService:
    def __init__(
        self,
        catalog: ExamCatalog,
        tracker: AttemptTracker,
        assignments: AssignmentRepository,
        rosters: RosterRepository,
        users: UserRepository,
    ) -> None:
        self.catalog = catalog
        self.tracker = tracker
        self.assignments = assignments
        self.rosters = rosters
        self.users = users

    async def assign_exam(
        self, exam_id: str, teacher: TokenPayload, request: AssignmentCreate
    ) -> AssignmentResponse:
        """
        Assign the teacher's exam to students on their roster.

        Students not on the roster, or already assigned this exam, are skipped.
        The exam does not have to be published yet.
        """
        await self.catalog.get_managed_exam(exam_id, teacher)
        roster = set(await self.rosters.list_student_ids(teacher.user_id))

        assigned = 0
        skipped = 0
        for student_id in dict.fromkeys(request.student_ids):
            if student_id not in roster:
                skipped += 1
                continue
            entry = Assignment(
                exam_id=exam_id,
                student_id=student_id,
                assigned_by=teacher.user_id,
                due_date=request.due_date,
            )
            if await self.assignments.add(entry):
                assigned += 1
            else:
                skipped += 1

        logger.info(f"Exam {exam_id} assigned by {teacher.user_id}: assigned={assigned} skipped={skipped}")
        return AssignmentResponse(assigned=assigned, skipped=skipped)

    async def list_assigned_exams(self, student_id: str) -> list[AssignedExam]:
        """Assigned exams that are open and not yet completed, soonest due first; undated ones last."""
        done = await self.tracker.completed_exam_ids(student_id)
        items = []
        for assignment in await self.assignments.list_for_student(student_id):
            if assignment.exam_id in done:
                continue
            try:
                exam = await self.catalog.get_open_exam(assignment.exam_id)
            except NotFound:
                continue
            items.append(
                AssignedExam(
                    exam_id=exam.exam_id,
                    title=exam.title,
                    description=exam.description,
                    duration_minutes=exam.duration_minutes,
                    category=exam.category,
                    question_count=len(exam.questions),
                    assigned_at=assignment.assigned_at,
                    due_date=assignment.due_date,
                )
            )
        items.sort(key=lambda e: (e.due_date is None, e.due_date or e.assigned_at, e.assigned_at))
        return items

    async def list_exam_assignments(self, exam_id: str, actor: TokenPayload) -> list[AssignmentProgress]:
        await self.catalog.get_managed_exam(exam_id, actor)
        progress = []
        for assignment in await self.assignments.list_for_exam(exam_id):
            try:
                name = (await self.users.get(assignment.student_id)).name
            except NotFound:
                name = None
            progress.append(
                AssignmentProgress(
                    student_id=assignment.student_id,
                    student_name=name,
                    assigned_at=assignment.assigned_at,
                    due_date=assignment.due_date,
                    is_completed=exam_id in await self.tracker.completed_exam_ids(assignment.student_id),
                )
            )
        return progress
