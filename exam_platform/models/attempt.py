"""
Attempt Model for the exam platform.
Tracks a user's pass at an exam and the answers recorded on submission.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from exam_platform.models.common import new_id, utcnow
from exam_platform.models.exam import StudentExamView


class AttemptStatus(str, Enum):
    in_progress = "in-progress"
    completed = "completed"


# ===== Database Model =====
class Answer(BaseModel):
    """Graded answer to one question. Written once, at submission."""
    answer_id: str = Field(default_factory=new_id)
    attempt_id: str
    question_id: str
    submitted_text: str = ""
    is_correct: Optional[bool] = None
    points_awarded: int = 0


class Attempt(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    attempt_id: str = Field(default_factory=new_id)
    exam_id: str
    user_id: str
    status: AttemptStatus = AttemptStatus.in_progress
    score: Optional[float] = Field(default=None, ge=0, le=100)
    started_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None
    answers: List[Answer] = Field(default_factory=list)


# ===== Request DTOs =====
SubmittedValue = Union[str, List[str], None]


class AttemptSubmit(BaseModel):
    """Submitted answers keyed by question id."""
    answers: Dict[str, SubmittedValue] = Field(default_factory=dict)


# ===== Response DTOs =====
class ScoreResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    score: float
    total_questions: int = Field(alias="totalQuestions")
    correct_answers: int = Field(alias="correctAnswers")


class StartAttemptResponse(BaseModel):
    exam: StudentExamView
    attempt: Attempt


class SubmitAttemptResponse(BaseModel):
    result: ScoreResult


class AttemptListItem(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    attempt_id: str
    exam_id: str
    exam_title: Optional[str] = None
    question_count: int = 0
    status: AttemptStatus
    score: Optional[float] = None
    started_at: datetime
    completed_at: Optional[datetime] = None


class AnswerDetail(BaseModel):
    question_id: str
    question_text: Optional[str] = None
    question_type: Optional[str] = None
    points: Optional[int] = None
    submitted_text: str
    is_correct: Optional[bool] = None
    points_awarded: int


class AttemptResult(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    attempt_id: str
    exam_id: str
    exam_title: Optional[str] = None
    user_id: str
    status: AttemptStatus
    score: Optional[float] = None
    started_at: datetime
    completed_at: Optional[datetime] = None
    answers: List[AnswerDetail] = Field(default_factory=list)
