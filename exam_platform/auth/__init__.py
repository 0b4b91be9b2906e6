# Auth module: session issuance and verification
# Provides JWT-based authentication and role-based authorization

from exam_platform.auth.jwt_handler import TokenPayload, create_access_token, verify_token
from exam_platform.auth.password import hash_password, verify_password
from exam_platform.auth.dependencies import get_current_user, require_role

__all__ = [
    "TokenPayload",
    "create_access_token",
    "verify_token",
    "hash_password",
    "verify_password",
    "get_current_user",
    "require_role"
]
