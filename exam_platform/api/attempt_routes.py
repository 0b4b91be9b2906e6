from __future__ import annotations

from fastapi import Depends

from exam_platform.auth.dependencies import get_current_user
from exam_platform.auth.jwt_handler import TokenPayload
from exam_platform.models import AttemptListItem, AttemptResult
from exam_platform.services import AttemptTracker
from exam_platform.wiring import get_tracker


async def list_my_attempts(
    current: TokenPayload = Depends(get_current_user),
    tracker: AttemptTracker = Depends(get_tracker),
) -> list[AttemptListItem]:
    return await tracker.list_attempts(current.user_id)


async def get_attempt_result(
    attempt_id: str,
    current: TokenPayload = Depends(get_current_user),
    tracker: AttemptTracker = Depends(get_tracker),
) -> AttemptResult:
    return await tracker.get_attempt_result(attempt_id, current)
