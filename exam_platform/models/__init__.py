# Models module for the exam platform
# Contains Pydantic models for stored entities and API payloads

from exam_platform.models.user import (
    User, UserCreate, UserRole, UserResponse, LoginRequest, LoginResponse,
    TokenResponse, RosterEntry, RosterAddRequest, RosterAddResponse, StudentSummary
)
from exam_platform.models.exam import (
    Exam, Question, AnswerOption, QuestionType,
    ExamCreate, QuestionCreate, AnswerOptionCreate, ExamFlagsUpdate,
    ExamMeta, AnswerKeyEntry, ExamSummary, StudentExamView, StudentQuestion, StudentOption
)
from exam_platform.models.attempt import (
    Attempt, AttemptStatus, Answer, AttemptSubmit, SubmittedValue, ScoreResult,
    StartAttemptResponse, SubmitAttemptResponse, AttemptListItem, AttemptResult, AnswerDetail
)
from exam_platform.models.assignment import (
    Assignment, AssignmentCreate, AssignmentResponse, AssignedExam, AssignmentProgress
)

__all__ = [
    # User models
    "User", "UserCreate", "UserRole", "UserResponse", "LoginRequest", "LoginResponse",
    "TokenResponse", "RosterEntry", "RosterAddRequest", "RosterAddResponse", "StudentSummary",
    # Exam catalog models
    "Exam", "Question", "AnswerOption", "QuestionType",
    "ExamCreate", "QuestionCreate", "AnswerOptionCreate", "ExamFlagsUpdate",
    "ExamMeta", "AnswerKeyEntry", "ExamSummary", "StudentExamView", "StudentQuestion", "StudentOption",
    # Attempt models
    "Attempt", "AttemptStatus", "Answer", "AttemptSubmit", "SubmittedValue", "ScoreResult",
    "StartAttemptResponse", "SubmitAttemptResponse", "AttemptListItem", "AttemptResult", "AnswerDetail",
    # Assignment models
    "Assignment", "AssignmentCreate", "AssignmentResponse", "AssignedExam", "AssignmentProgress",
]
