"""
Exam handlers: authoring for teachers, catalog listings and the exam-taking
endpoints (`GET /exams/{id}` starts or resumes, `POST /exams/{id}/submit` scores).
"""

from __future__ import annotations

from fastapi import Depends

from exam_platform.auth.dependencies import get_current_user, require_author
from exam_platform.auth.jwt_handler import TokenPayload
from exam_platform.models import (
    AttemptSubmit,
    Exam,
    ExamCreate,
    ExamFlagsUpdate,
    ExamSummary,
    StartAttemptResponse,
    SubmitAttemptResponse,
)
from exam_platform.services import AttemptTracker, ExamCatalog, student_view
from exam_platform.wiring import get_catalog, get_tracker


async def create_exam(
    request: ExamCreate,
    author: TokenPayload = Depends(require_author),
    catalog: ExamCatalog = Depends(get_catalog),
) -> Exam:
    """Create an unpublished exam with its questions and answer options."""
    return await catalog.create_exam(author, request)


async def list_authored_exams(
    author: TokenPayload = Depends(require_author),
    catalog: ExamCatalog = Depends(get_catalog),
) -> list[ExamSummary]:
    exams = await catalog.list_exams_by_author(author.user_id)
    return [ExamSummary.from_exam(e) for e in exams]


async def list_available_exams(
    current: TokenPayload = Depends(get_current_user),
    catalog: ExamCatalog = Depends(get_catalog),
    tracker: AttemptTracker = Depends(get_tracker),
) -> list[ExamSummary]:
    """Published, active exams the caller has not completed yet."""
    done = await tracker.completed_exam_ids(current.user_id)
    return [ExamSummary.from_exam(e) for e in await catalog.list_open_exams() if e.exam_id not in done]


async def update_exam_flags(
    exam_id: str,
    request: ExamFlagsUpdate,
    author: TokenPayload = Depends(require_author),
    catalog: ExamCatalog = Depends(get_catalog),
) -> ExamSummary:
    exam = await catalog.update_flags(exam_id, author, request)
    return ExamSummary.from_exam(exam)


async def start_or_resume_attempt(
    exam_id: str,
    current: TokenPayload = Depends(get_current_user),
    catalog: ExamCatalog = Depends(get_catalog),
    tracker: AttemptTracker = Depends(get_tracker),
) -> StartAttemptResponse:
    attempt = await tracker.start_or_resume_attempt(exam_id, current.user_id)
    exam = await catalog.get_exam(exam_id)
    return StartAttemptResponse(exam=student_view(exam), attempt=attempt)


async def submit_attempt(
    exam_id: str,
    request: AttemptSubmit,
    current: TokenPayload = Depends(get_current_user),
    tracker: AttemptTracker = Depends(get_tracker),
) -> SubmitAttemptResponse:
    result = await tracker.submit_attempt(exam_id, current.user_id, request.answers)
    return SubmitAttemptResponse(result=result)
