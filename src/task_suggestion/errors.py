"""Exceptions raised by the task suggestion core."""
from __future__ import annotations

from typing import List


class TaskSuggestionError(Exception):
    """Base class for task suggestion failures."""


class TransientMatchFailure(TaskSuggestionError):
    """A single match attempt failed and may be retried."""


class OperationExhausted(TaskSuggestionError):
    """Every retry attempt failed."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Operation failed after {attempts} attempts")
        self.attempts = attempts


class RequestValidationFailed(TaskSuggestionError):
    """Request body did not pass validation."""

    def __init__(self, errors: List[str]) -> None:
        super().__init__("Validation failed")
        self.errors = errors
