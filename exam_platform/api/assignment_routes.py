"""
Assignment handlers: teachers assign their exams to rostered students;
students list what is waiting for them.
"""

from __future__ import annotations

from fastapi import Depends

from exam_platform.auth.dependencies import get_current_user, require_author, require_teacher
from exam_platform.auth.jwt_handler import TokenPayload
from exam_platform.models import AssignedExam, AssignmentCreate, AssignmentProgress, AssignmentResponse
from exam_platform.services import AssignmentService
from exam_platform.wiring import get_assignments


async def assign_exam(
    exam_id: str,
    request: AssignmentCreate,
    teacher: TokenPayload = Depends(require_teacher),
    assignments: AssignmentService = Depends(get_assignments),
) -> AssignmentResponse:
    """Assign an exam to students on the caller's roster, with an optional due date."""
    return await assignments.assign_exam(exam_id, teacher, request)


async def list_exam_assignments(
    exam_id: str,
    author: TokenPayload = Depends(require_author),
    assignments: AssignmentService = Depends(get_assignments),
) -> list[AssignmentProgress]:
    return await assignments.list_exam_assignments(exam_id, author)


async def list_assigned_exams(
    current: TokenPayload = Depends(get_current_user),
    assignments: AssignmentService = Depends(get_assignments),
) -> list[AssignedExam]:
    return await assignments.list_assigned_exams(current.user_id)
