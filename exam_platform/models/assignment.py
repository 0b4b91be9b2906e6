"""
Assignment Model for the exam platform.
An assignment hands one exam to one of a teacher's rostered students,
optionally with a due date.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from exam_platform.models.common import new_id, utcnow


# ===== Database Model =====
class Assignment(BaseModel):
    assignment_id: str = Field(default_factory=new_id)
    exam_id: str
    student_id: str
    assigned_by: str
    assigned_at: datetime = Field(default_factory=utcnow)
    due_date: Optional[datetime] = None


# ===== Request DTOs =====
class AssignmentCreate(BaseModel):
    """Students (by user id, from the caller's roster) to assign an exam to."""
    student_ids: List[str] = Field(..., min_length=1)
    due_date: Optional[datetime] = None

    @field_validator("due_date")
    @classmethod
    def _due_date_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # naive timestamps are read as UTC
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


# ===== Response DTOs =====
class AssignmentResponse(BaseModel):
    assigned: int
    skipped: int


class AssignedExam(BaseModel):
    """An open exam waiting for the student, as listed on their dashboard."""
    exam_id: str
    title: str
    description: str
    duration_minutes: int
    category: Optional[str] = None
    question_count: int
    assigned_at: datetime
    due_date: Optional[datetime] = None


class AssignmentProgress(BaseModel):
    student_id: str
    student_name: Optional[str] = None
    assigned_at: datetime
    due_date: Optional[datetime] = None
    is_completed: bool
