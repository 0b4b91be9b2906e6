"""
Attempt tracker: the lifecycle of a user's single attempt at an exam.

    in-progress --submit--> completed   (terminal)

One attempt per (exam, user) ever exists; retakes are rejected. The storage
layer supplies the atomicity: creation is insert-if-absent on (exam, user)
and completion is one conditional write guarded on ``in-progress``, so a
concurrent second submission is rejected instead of double-scored.
"""

from __future__ import annotations

import logging
from typing import Mapping

from exam_platform.auth.jwt_handler import TokenPayload
from exam_platform.errors import AlreadyCompleted, Forbidden, NoActiveAttempt, NotFound
from exam_platform.models import (
    AnswerDetail,
    Attempt,
    AttemptListItem,
    AttemptResult,
    AttemptStatus,
    Exam,
    ScoreResult,
    SubmittedValue,
    UserRole,
)
from exam_platform.models.common import utcnow
from exam_platform.observability import get_tracer
from exam_platform.services.catalog import ExamCatalog
from exam_platform.services.scoring import grade_submission
from exam_platform.storage.repo import AttemptRepository

logger = logging.getLogger(__name__)


class AttemptTracker:
    def __init__(self, catalog: ExamCatalog, attempts: AttemptRepository) -> None:
        self.catalog = catalog
        self.attempts = attempts

    async def start_or_resume_attempt(self, exam_id: str, user_id: str) -> Attempt:
        with get_tracer().start_as_current_span("attempt.start_or_resume") as span:
            span.set_attribute("exam.id", exam_id)
            span.set_attribute("user.id", user_id)

            await self.catalog.get_open_exam(exam_id)

            attempt = await self.attempts.latest_for(exam_id, user_id)
            if attempt is None:
                attempt = await self.attempts.insert_if_absent(Attempt(exam_id=exam_id, user_id=user_id))
                logger.info(f"Attempt {attempt.attempt_id} started: exam={exam_id} user={user_id}")

            # insert_if_absent hands back a concurrent winner, which may already be completed
            if attempt.status == AttemptStatus.completed:
                span.set_attribute("attempt.rejected", "already_completed")
                raise AlreadyCompleted("You have already completed this exam. Retakes are not allowed.")

            span.set_attribute("attempt.id", attempt.attempt_id)
            return attempt

    async def submit_attempt(
        self, exam_id: str, user_id: str, answers: Mapping[str, SubmittedValue]
    ) -> ScoreResult:
        with get_tracer().start_as_current_span("attempt.submit") as span:
            span.set_attribute("exam.id", exam_id)
            span.set_attribute("user.id", user_id)

            answer_key = await self.catalog.get_questions_with_correct_answers(exam_id)

            attempt = await self.attempts.latest_for(exam_id, user_id)
            if attempt is None or attempt.status != AttemptStatus.in_progress:
                raise NoActiveAttempt()

            graded, result = grade_submission(attempt.attempt_id, answer_key, answers)

            completed = await self.attempts.complete(attempt.attempt_id, graded, result.score, utcnow())
            if completed is None:
                # another submission for this attempt committed first
                logger.warning(f"Concurrent submission rejected for attempt {attempt.attempt_id}")
                raise NoActiveAttempt()

            span.set_attribute("attempt.id", attempt.attempt_id)
            span.set_attribute("attempt.score", result.score)
            logger.info(
                f"Attempt {attempt.attempt_id} completed: score={result.score} "
                f"correct={result.correct_answers}/{result.total_questions}"
            )
            return result

    async def list_attempts(self, user_id: str) -> list[AttemptListItem]:
        items = []
        exams: dict[str, Exam | None] = {}
        for attempt in await self.attempts.list_for_user(user_id):
            if attempt.exam_id not in exams:
                exams[attempt.exam_id] = await self._find_exam(attempt.exam_id)
            exam = exams[attempt.exam_id]
            items.append(
                AttemptListItem(
                    attempt_id=attempt.attempt_id,
                    exam_id=attempt.exam_id,
                    exam_title=exam.title if exam else None,
                    question_count=len(exam.questions) if exam else 0,
                    status=attempt.status,
                    score=attempt.score,
                    started_at=attempt.started_at,
                    completed_at=attempt.completed_at,
                )
            )
        return items

    async def completed_exam_ids(self, user_id: str) -> set[str]:
        return {
            a.exam_id
            for a in await self.attempts.list_for_user(user_id)
            if a.status == AttemptStatus.completed
        }

    async def get_attempt_result(self, attempt_id: str, viewer: TokenPayload) -> AttemptResult:
        """
        Detailed result of one attempt.

        Visible to the candidate, the exam's author and admins.
        """
        attempt = await self.attempts.get(attempt_id)
        exam = await self._find_exam(attempt.exam_id)

        allowed = (
            viewer.user_id == attempt.user_id
            or viewer.role == UserRole.admin
            or (exam is not None and exam.created_by == viewer.user_id)
        )
        if not allowed:
            raise Forbidden("You cannot view this attempt")

        questions = {q.question_id: q for q in exam.questions} if exam else {}
        details = []
        for answer in attempt.answers:
            q = questions.get(answer.question_id)
            details.append(
                AnswerDetail(
                    question_id=answer.question_id,
                    question_text=q.text if q else None,
                    question_type=q.type if q else None,
                    points=q.points if q else None,
                    submitted_text=answer.submitted_text,
                    is_correct=answer.is_correct,
                    points_awarded=answer.points_awarded,
                )
            )

        return AttemptResult(
            attempt_id=attempt.attempt_id,
            exam_id=attempt.exam_id,
            exam_title=exam.title if exam else None,
            user_id=attempt.user_id,
            status=attempt.status,
            score=attempt.score,
            started_at=attempt.started_at,
            completed_at=attempt.completed_at,
            answers=details,
        )

    async def _find_exam(self, exam_id: str) -> Exam | None:
        try:
            return await self.catalog.get_exam(exam_id)
        except NotFound:
            return None
