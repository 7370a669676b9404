"""Keyword-based task suggestion service."""
from __future__ import annotations

from .errors import OperationExhausted, TaskSuggestionError, TransientMatchFailure
from .matcher import TaskMatcher
from .models import KnownTask
from .rules import RuleTable, default_rule_table

__all__ = [
    "KnownTask",
    "OperationExhausted",
    "RuleTable",
    "TaskMatcher",
    "TaskSuggestionError",
    "TransientMatchFailure",
    "default_rule_table",
]
