"""
Authentication handlers: registration, login and token management.
"""

from __future__ import annotations

from fastapi import Depends

from exam_platform.auth.dependencies import get_current_user
from exam_platform.auth.jwt_handler import TokenPayload
from exam_platform.models import LoginRequest, LoginResponse, TokenResponse, UserCreate, UserResponse
from exam_platform.services import AccountService
from exam_platform.wiring import get_accounts


async def register(request: UserCreate, accounts: AccountService = Depends(get_accounts)) -> UserResponse:
    """
    Register a new account.

    - **national_id**: fixed-length digit string, unique
    - **role**: `student` or `teacher`
    """
    user = await accounts.register(request)
    return UserResponse.from_user(user)


async def login(request: LoginRequest, accounts: AccountService = Depends(get_accounts)) -> LoginResponse:
    """Authenticate with national id (or email) and password; returns a bearer token."""
    return await accounts.authenticate(request)


async def current_user(
    current: TokenPayload = Depends(get_current_user),
    accounts: AccountService = Depends(get_accounts),
) -> UserResponse:
    user = await accounts.profile(current)
    return UserResponse.from_user(user)


async def refresh_token(
    current: TokenPayload = Depends(get_current_user),
    accounts: AccountService = Depends(get_accounts),
) -> TokenResponse:
    return await accounts.refresh(current)
