from __future__ import annotations

from enum import Enum


class Operation(str, Enum):
    REGISTER = "register"
    LOGIN = "login"
    CURRENT_USER = "current_user"
    REFRESH_TOKEN = "refresh_token"

    CREATE_EXAM = "create_exam"
    LIST_AUTHORED_EXAMS = "list_authored_exams"
    LIST_AVAILABLE_EXAMS = "list_available_exams"
    UPDATE_EXAM_FLAGS = "update_exam_flags"
    START_OR_RESUME = "start_or_resume"
    SUBMIT_ATTEMPT = "submit_attempt"

    ASSIGN_EXAM = "assign_exam"
    LIST_EXAM_ASSIGNMENTS = "list_exam_assignments"
    LIST_ASSIGNED_EXAMS = "list_assigned_exams"

    LIST_MY_ATTEMPTS = "list_my_attempts"
    GET_ATTEMPT_RESULT = "get_attempt_result"

    ADD_STUDENTS = "add_students"
    LIST_STUDENTS = "list_students"
