"""
FastAPI Dependencies for Authentication and Authorization.
Provides route protection based on the bearer session token.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from exam_platform.auth.jwt_handler import TokenPayload, verify_token
from exam_platform.errors import Forbidden, Unauthenticated
from exam_platform.models import UserRole

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenPayload:
    """
    Dependency to get current authenticated user from JWT token.

    Raises:
        Unauthenticated: If token is missing, invalid or expired
    """
    if credentials is None:
        raise Unauthenticated("Authentication required. Please provide a valid token.")

    payload = verify_token(credentials.credentials)
    if payload is None:
        raise Unauthenticated("Invalid or expired token")

    return payload


def require_role(allowed_roles: List[UserRole]):
    """
    Dependency factory for role-based authorization.

    Usage:
        @router.get("/teacher-only")
        async def teacher_route(user: TokenPayload = Depends(require_role([UserRole.teacher]))):
            return {"user": user.email}
    """
    allowed = {r.value for r in allowed_roles}

    async def role_checker(
        current_user: TokenPayload = Depends(get_current_user)
    ) -> TokenPayload:
        if current_user.role not in allowed:
            logger.warning(
                f"Access denied for user {current_user.email} with role {current_user.role}. "
                f"Required roles: {sorted(allowed)}"
            )
            raise Forbidden(f"Access denied. Required role(s): {', '.join(sorted(allowed))}")
        return current_user

    return role_checker


# Convenience role checkers
require_author = require_role([UserRole.teacher, UserRole.admin])
require_teacher = require_role([UserRole.teacher])
