"""Pydantic models used by the task suggestion API."""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class KnownTask(str, Enum):
    """Task labels the matcher itself can produce.

    The rule table may map phrases to any other label; those are passed
    through as plain strings.
    """

    RESET_PASSWORD = "ResetPasswordTask"
    CHECK_ORDER_STATUS = "CheckOrderStatusTask"
    NO_TASK_FOUND = "NoTaskFound"


class TaskSuggestionRequest(BaseModel):
    """Request body for `/suggestTask`.

    Fields are optional at the schema level so that missing values are
    reported by the request validator with readable messages.
    """

    model_config = ConfigDict(populate_by_name=True)

    utterance: Optional[str] = None
    user_id: Optional[str] = Field(default=None, alias="userId")
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    timestamp: Optional[datetime] = None


class TaskSuggestionResponse(BaseModel):
    """Suggested task returned on success."""

    task: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ErrorResponse(BaseModel):
    """Envelope returned for every non-2xx response."""

    message: str
    errors: List[str] = Field(default_factory=list)
