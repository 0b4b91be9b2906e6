"""
User Model for the exam platform.
Defines user schema, roles, authentication DTOs and the teacher roster.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from exam_platform.models.common import new_id, utcnow
from exam_platform.settings import settings


class UserRole(str, Enum):
    """User roles for authorization."""
    student = "student"
    teacher = "teacher"
    admin = "admin"


def check_national_id(value: str) -> str:
    value = value.strip()
    if not value.isdigit() or len(value) != settings.national_id_length:
        raise ValueError(f"national_id must be exactly {settings.national_id_length} digits")
    return value


# ===== Database Model =====
class User(BaseModel):
    """User record as persisted by the credential store."""
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    user_id: str = Field(default_factory=new_id)
    name: str
    email: EmailStr
    national_id: str
    password_hash: str
    role: UserRole = UserRole.student
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None
    last_login: Optional[datetime] = None


class RosterEntry(BaseModel):
    """Link between a teacher and one of their students."""
    teacher_id: str
    student_id: str
    added_at: datetime = Field(default_factory=utcnow)


# ===== Request DTOs =====
class UserCreate(BaseModel):
    """Request model for registering a new account."""
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    national_id: str
    password: str = Field(..., min_length=8)
    role: UserRole = UserRole.student

    @field_validator("national_id")
    @classmethod
    def _national_id(cls, value: str) -> str:
        return check_national_id(value)


class LoginRequest(BaseModel):
    """Login with either the national id or the email, plus the password."""
    national_id: Optional[str] = None
    email: Optional[EmailStr] = None
    password: str

    @model_validator(mode="after")
    def _one_identifier(self) -> "LoginRequest":
        if not self.national_id and not self.email:
            raise ValueError("national_id or email is required")
        return self


class RosterAddRequest(BaseModel):
    """Students to link to the calling teacher, by email or national id."""
    emails: List[EmailStr] = Field(default_factory=list)
    national_ids: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _not_empty(self) -> "RosterAddRequest":
        if not self.emails and not self.national_ids:
            raise ValueError("emails or national_ids is required")
        return self


# ===== Response DTOs =====
class UserResponse(BaseModel):
    """Response model for user (excludes password)."""
    model_config = ConfigDict(use_enum_values=True)

    user_id: str
    name: str
    email: EmailStr
    national_id: str
    role: UserRole
    created_at: datetime
    last_login: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls.model_validate(user.model_dump(exclude={"password_hash", "updated_at"}))


class TokenResponse(BaseModel):
    """JWT token response."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token expiration in seconds")


class LoginResponse(BaseModel):
    """Response model for successful login."""
    user: UserResponse
    token: TokenResponse
    message: str = "Login successful"


class RosterAddResponse(BaseModel):
    added: int
    skipped: int


class StudentSummary(BaseModel):
    user_id: str
    name: str
    email: EmailStr
    national_id: str
