"""Validation rules for task suggestion requests."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from .models import TaskSuggestionRequest

FUTURE_TOLERANCE = timedelta(minutes=1)

UTTERANCE_REQUIRED = "Utterance is required and cannot be empty."
USER_ID_REQUIRED = "UserId is required and cannot be empty."
SESSION_ID_REQUIRED = "SessionId is required and cannot be empty."
TIMESTAMP_REQUIRED = "Timestamp is required."
TIMESTAMP_INVALID = "Timestamp must be a valid date and time."


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _is_unset(timestamp: Optional[datetime]) -> bool:
    # 0001-01-01T00:00:00 is what clients serialize for an uninitialised date.
    return timestamp is None or timestamp.replace(tzinfo=None) == datetime.min


class TaskSuggestionRequestValidator:
    """Checks every field and reports all problems at once."""

    def __init__(self, clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)) -> None:
        self._clock = clock

    def validate(self, request: TaskSuggestionRequest) -> List[str]:
        errors: List[str] = []
        if _is_blank(request.utterance):
            errors.append(UTTERANCE_REQUIRED)
        if _is_blank(request.user_id):
            errors.append(USER_ID_REQUIRED)
        if _is_blank(request.session_id):
            errors.append(SESSION_ID_REQUIRED)
        if _is_unset(request.timestamp):
            errors.append(TIMESTAMP_REQUIRED)
        if not self._is_valid_timestamp(request.timestamp):
            errors.append(TIMESTAMP_INVALID)
        return errors

    def _is_valid_timestamp(self, timestamp: Optional[datetime]) -> bool:
        if timestamp is None or _is_unset(timestamp):
            return False
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return timestamp <= self._clock() + FUTURE_TOLERANCE
