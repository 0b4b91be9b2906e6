"""
Exam catalog models: exams, their questions and answer options.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from exam_platform.models.common import new_id, utcnow


class QuestionType(str, Enum):
    single_choice = "single_choice"
    multiple_choice = "multiple_choice"
    essay = "essay"


# ===== Database Model =====
class AnswerOption(BaseModel):
    option_id: str = Field(default_factory=new_id)
    question_id: str
    text: str
    is_correct: bool = False


class Question(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    question_id: str = Field(default_factory=new_id)
    exam_id: str
    text: str
    type: QuestionType
    points: int = Field(default=1, ge=1)
    options: List[AnswerOption] = Field(default_factory=list)

    @property
    def correct_option_ids(self) -> list[str]:
        return [o.option_id for o in self.options if o.is_correct]


class Exam(BaseModel):
    """Exam document: metadata plus its full question/option tree."""
    exam_id: str = Field(default_factory=new_id)
    title: str
    description: str = ""
    duration_minutes: int = Field(ge=1)
    category: Optional[str] = None
    created_by: str
    is_published: bool = False
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    questions: List[Question] = Field(default_factory=list)


# ===== Request DTOs =====
class AnswerOptionCreate(BaseModel):
    option_id: Optional[str] = None
    text: str = Field(..., min_length=1)
    is_correct: bool = False

    @field_validator("option_id")
    @classmethod
    def _option_id(cls, value: Optional[str]) -> Optional[str]:
        # multiple_choice answers may arrive as a comma-separated string of ids
        if value is not None and "," in value:
            raise ValueError("option_id must not contain a comma")
        return value


class QuestionCreate(BaseModel):
    question_id: Optional[str] = None
    text: str = Field(..., min_length=1)
    type: QuestionType
    points: int = Field(default=1, ge=1)
    options: List[AnswerOptionCreate] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_options(self) -> "QuestionCreate":
        correct = sum(1 for o in self.options if o.is_correct)
        if self.type == QuestionType.essay:
            if self.options:
                raise ValueError("essay questions take no options")
        elif self.type == QuestionType.single_choice:
            if correct != 1:
                raise ValueError("single_choice questions need exactly one correct option")
        elif correct < 1:
            raise ValueError("multiple_choice questions need at least one correct option")
        return self


class ExamCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    duration_minutes: int = Field(..., ge=1)
    category: Optional[str] = None
    questions: List[QuestionCreate] = Field(default_factory=list)


class ExamFlagsUpdate(BaseModel):
    is_published: Optional[bool] = None
    is_active: Optional[bool] = None


# ===== Collaborator views =====
class ExamMeta(BaseModel):
    duration_minutes: int
    is_published: bool
    is_active: bool


class AnswerKeyEntry(BaseModel):
    """One question of an exam with what counts as its correct answer."""
    model_config = ConfigDict(use_enum_values=True)

    question_id: str
    type: QuestionType
    points: int
    correct_option_ids: List[str] = Field(default_factory=list)


# ===== Response DTOs =====
class ExamSummary(BaseModel):
    exam_id: str
    title: str
    description: str
    duration_minutes: int
    category: Optional[str] = None
    is_published: bool
    is_active: bool
    question_count: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_exam(cls, exam: Exam) -> "ExamSummary":
        return cls(
            exam_id=exam.exam_id,
            title=exam.title,
            description=exam.description,
            duration_minutes=exam.duration_minutes,
            category=exam.category,
            is_published=exam.is_published,
            is_active=exam.is_active,
            question_count=len(exam.questions),
            created_at=exam.created_at,
            updated_at=exam.updated_at,
        )


class StudentOption(BaseModel):
    option_id: str
    text: str


class StudentQuestion(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    question_id: str
    text: str
    type: QuestionType
    points: int
    options: List[StudentOption] = Field(default_factory=list)


class StudentExamView(BaseModel):
    """Exam as shown to a candidate: no correctness flags."""
    exam_id: str
    title: str
    description: str
    duration_minutes: int
    category: Optional[str] = None
    questions: List[StudentQuestion] = Field(default_factory=list)
