"""
Operation table: every operation kind maps to exactly one handler.

`validate_operations` runs when the app is built; an operation without a
route, or two operations on the same method and path, stop the app from
starting.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from fastapi import APIRouter, status

from exam_platform.api import assignment_routes, attempt_routes, auth_routes, exam_routes, roster_routes
from exam_platform.api.operations import Operation
from exam_platform.models import (
    AssignedExam,
    AssignmentProgress,
    AssignmentResponse,
    AttemptListItem,
    AttemptResult,
    Exam,
    ExamSummary,
    LoginResponse,
    RosterAddResponse,
    StartAttemptResponse,
    StudentSummary,
    SubmitAttemptResponse,
    TokenResponse,
    UserResponse,
)


@dataclass(frozen=True)
class Route:
    method: str
    path: str
    endpoint: Callable[..., Any]
    response_model: Any = None
    status_code: int = status.HTTP_200_OK
    tag: Optional[str] = None


# Static paths come before /exams/{exam_id} so they are matched first.
OPERATIONS: dict[Operation, Route] = {
    Operation.REGISTER: Route(
        "POST", "/auth/register", auth_routes.register, UserResponse, status.HTTP_201_CREATED, "authentication"
    ),
    Operation.LOGIN: Route("POST", "/auth/login", auth_routes.login, LoginResponse, tag="authentication"),
    Operation.CURRENT_USER: Route("GET", "/auth/me", auth_routes.current_user, UserResponse, tag="authentication"),
    Operation.REFRESH_TOKEN: Route(
        "POST", "/auth/refresh", auth_routes.refresh_token, TokenResponse, tag="authentication"
    ),
    Operation.CREATE_EXAM: Route(
        "POST", "/exams", exam_routes.create_exam, Exam, status.HTTP_201_CREATED, "exams"
    ),
    Operation.LIST_AUTHORED_EXAMS: Route(
        "GET", "/exams/authored", exam_routes.list_authored_exams, list[ExamSummary], tag="exams"
    ),
    Operation.LIST_AVAILABLE_EXAMS: Route(
        "GET", "/exams/available", exam_routes.list_available_exams, list[ExamSummary], tag="exams"
    ),
    Operation.LIST_ASSIGNED_EXAMS: Route(
        "GET", "/exams/assigned", assignment_routes.list_assigned_exams, list[AssignedExam], tag="assignments"
    ),
    Operation.UPDATE_EXAM_FLAGS: Route(
        "PATCH", "/exams/{exam_id}", exam_routes.update_exam_flags, ExamSummary, tag="exams"
    ),
    Operation.START_OR_RESUME: Route(
        "GET", "/exams/{exam_id}", exam_routes.start_or_resume_attempt, StartAttemptResponse, tag="exams"
    ),
    Operation.SUBMIT_ATTEMPT: Route(
        "POST", "/exams/{exam_id}/submit", exam_routes.submit_attempt, SubmitAttemptResponse, tag="exams"
    ),
    Operation.ASSIGN_EXAM: Route(
        "POST",
        "/exams/{exam_id}/assignments",
        assignment_routes.assign_exam,
        AssignmentResponse,
        tag="assignments",
    ),
    Operation.LIST_EXAM_ASSIGNMENTS: Route(
        "GET",
        "/exams/{exam_id}/assignments",
        assignment_routes.list_exam_assignments,
        list[AssignmentProgress],
        tag="assignments",
    ),
    Operation.LIST_MY_ATTEMPTS: Route(
        "GET", "/attempts", attempt_routes.list_my_attempts, list[AttemptListItem], tag="attempts"
    ),
    Operation.GET_ATTEMPT_RESULT: Route(
        "GET", "/attempts/{attempt_id}", attempt_routes.get_attempt_result, AttemptResult, tag="attempts"
    ),
    Operation.ADD_STUDENTS: Route(
        "POST", "/teacher/students", roster_routes.add_students, RosterAddResponse, tag="teacher"
    ),
    Operation.LIST_STUDENTS: Route(
        "GET", "/teacher/students", roster_routes.list_students, list[StudentSummary], tag="teacher"
    ),
}


def validate_operations(table: Mapping[Operation, Route]) -> None:
    missing = [op.value for op in Operation if op not in table]
    if missing:
        raise RuntimeError(f"operations without a route: {', '.join(missing)}")

    seen: dict[tuple[str, str], Operation] = {}
    for op, route in table.items():
        key = (route.method.upper(), route.path)
        if key in seen:
            raise RuntimeError(f"{op.value} and {seen[key].value} both map to {key[0]} {key[1]}")
        seen[key] = op


def build_router(table: Mapping[Operation, Route] = OPERATIONS) -> APIRouter:
    validate_operations(table)
    router = APIRouter()
    for op, route in table.items():
        router.add_api_route(
            route.path,
            route.endpoint,
            methods=[route.method],
            response_model=route.response_model,
            status_code=route.status_code,
            tags=[route.tag] if route.tag else None,
            name=op.value,
        )
    return router
