"""
Domain errors for the exam platform.

Every failure a caller can observe is one of these. Each carries the HTTP
status it maps to; the app factory registers a handler that renders them
as ``{"error": message}``.
"""

from __future__ import annotations

from fastapi import status


class ExamPlatformError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(ExamPlatformError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AlreadyCompleted(ExamPlatformError):
    """Raised when a user tries to retake an exam they already submitted."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Exam already completed"


class NoActiveAttempt(ExamPlatformError):
    """Raised on submit when no in-progress attempt exists for (exam, user)."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "No active exam attempt found"


class Unauthenticated(ExamPlatformError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class Forbidden(ExamPlatformError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class NotFound(ExamPlatformError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(ExamPlatformError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Already exists"


class Internal(ExamPlatformError):
    pass
