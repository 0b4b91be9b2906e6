"""
Exam catalog: authoring, publication flags and the read views the attempt
tracker and candidates need.
"""

from __future__ import annotations

import logging

from exam_platform.auth.jwt_handler import TokenPayload
from exam_platform.errors import Forbidden, NotFound, ValidationFailed
from exam_platform.models import (
    AnswerKeyEntry,
    AnswerOption,
    Exam,
    ExamCreate,
    ExamFlagsUpdate,
    ExamMeta,
    Question,
    StudentExamView,
    StudentOption,
    StudentQuestion,
    UserRole,
)
from exam_platform.models.common import new_id, utcnow
from exam_platform.storage.repo import ExamRepository

logger = logging.getLogger(__name__)

AUTHOR_ROLES = (UserRole.teacher, UserRole.admin)


class ExamCatalog:
    def __init__(self, exams: ExamRepository) -> None:
        self.exams = exams

    async def create_exam(self, author: TokenPayload, data: ExamCreate) -> Exam:
        if author.role not in AUTHOR_ROLES:
            raise Forbidden("Only teachers and admins can create exams")

        exam_id = new_id()
        questions: list[Question] = []
        seen_questions: set[str] = set()
        seen_options: set[str] = set()
        for q in data.questions:
            question_id = q.question_id or new_id()
            if question_id in seen_questions:
                raise ValidationFailed(f"Duplicate question id: {question_id}")
            seen_questions.add(question_id)

            options = []
            for o in q.options:
                option_id = o.option_id or new_id()
                if option_id in seen_options:
                    raise ValidationFailed(f"Duplicate option id: {option_id}")
                seen_options.add(option_id)
                options.append(
                    AnswerOption(option_id=option_id, question_id=question_id, text=o.text, is_correct=o.is_correct)
                )

            questions.append(
                Question(
                    question_id=question_id,
                    exam_id=exam_id,
                    text=q.text,
                    type=q.type,
                    points=q.points,
                    options=options,
                )
            )

        exam = Exam(
            exam_id=exam_id,
            title=data.title,
            description=data.description,
            duration_minutes=data.duration_minutes,
            category=data.category,
            created_by=author.user_id,
            questions=questions,
        )
        created = await self.exams.create(exam)
        logger.info(f"Exam {created.exam_id} created by {author.user_id} with {len(questions)} questions")
        return created

    async def get_exam(self, exam_id: str) -> Exam:
        return await self.exams.get(exam_id)

    async def get_exam_meta(self, exam_id: str) -> ExamMeta:
        exam = await self.exams.get(exam_id)
        return ExamMeta(
            duration_minutes=exam.duration_minutes,
            is_published=exam.is_published,
            is_active=exam.is_active,
        )

    async def get_questions_with_correct_answers(self, exam_id: str) -> list[AnswerKeyEntry]:
        exam = await self.exams.get(exam_id)
        return [
            AnswerKeyEntry(
                question_id=q.question_id,
                type=q.type,
                points=q.points,
                correct_option_ids=q.correct_option_ids,
            )
            for q in exam.questions
        ]

    async def get_open_exam(self, exam_id: str) -> Exam:
        """The exam, if candidates may currently take it."""
        exam = await self.exams.get(exam_id)
        if not (exam.is_published and exam.is_active):
            raise NotFound("Exam not found or not available")
        return exam

    async def list_exams_by_author(self, author_id: str) -> list[Exam]:
        return await self.exams.list_by_author(author_id)

    async def list_open_exams(self) -> list[Exam]:
        return await self.exams.list_open()

    async def get_managed_exam(self, exam_id: str, actor: TokenPayload) -> Exam:
        """The exam, if ``actor`` is its author or an admin."""
        exam = await self.exams.get(exam_id)
        if actor.role != UserRole.admin and exam.created_by != actor.user_id:
            raise Forbidden("Only the exam author or an admin can change this exam")
        return exam

    async def update_flags(self, exam_id: str, actor: TokenPayload, update: ExamFlagsUpdate) -> Exam:
        await self.get_managed_exam(exam_id, actor)

        flags = update.model_dump(exclude_none=True)
        if not flags:
            raise ValidationFailed("Nothing to update")
        updated = await self.exams.update_flags(exam_id, flags, utcnow())
        logger.info(f"Exam {exam_id} flags updated by {actor.user_id}: {flags}")
        return updated


def student_view(exam: Exam) -> StudentExamView:
    """Exam payload for candidates. Correctness flags are never included."""
    return StudentExamView(
        exam_id=exam.exam_id,
        title=exam.title,
        description=exam.description,
        duration_minutes=exam.duration_minutes,
        category=exam.category,
        questions=[
            StudentQuestion(
                question_id=q.question_id,
                text=q.text,
                type=q.type,
                points=q.points,
                options=[StudentOption(option_id=o.option_id, text=o.text) for o in q.options],
            )
            for q in exam.questions
        ],
    )
