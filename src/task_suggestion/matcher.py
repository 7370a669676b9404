"""Utterance to task matching with retry around a flaky match step."""
from __future__ import annotations

import random
from typing import Callable, Optional

import structlog

from .errors import TransientMatchFailure
from .models import KnownTask
from .retry import RetryExecutor
from .rules import ORDER_CATEGORY, PASSWORD_CATEGORY, RuleTable, default_rule_table

_logger = structlog.get_logger(__name__)

FailureInjector = Callable[[], bool]


def random_failure_injector(rate: float, rng: Optional[random.Random] = None) -> FailureInjector:
    """Fail each attempt independently with probability ``rate``."""
    if not 0.0 <= rate <= 1.0:
        raise ValueError(f"failure rate must be within [0, 1], got {rate}")
    source = rng or random.Random()

    def should_fail() -> bool:
        return source.random() < rate

    return should_fail


def never_fail() -> bool:
    return False


class TaskMatcher:
    """Suggests a task label for an utterance using a :class:`RuleTable`."""

    def __init__(
        self,
        rules: RuleTable | None = None,
        executor: RetryExecutor | None = None,
        failure_injector: FailureInjector = never_fail,
    ) -> None:
        self.rules = rules or default_rule_table()
        self.executor = executor or RetryExecutor()
        self._should_fail = failure_injector

    async def suggest_task(self, utterance: Optional[str]) -> str:
        _logger.info("suggestion.processing", utterance=utterance)
        if utterance is None or not utterance.strip():
            _logger.warning("utterance.empty")
            return KnownTask.NO_TASK_FOUND.value

        async def attempt() -> str:
            return self.match_once(utterance)

        task = await self.executor.run(attempt)
        _logger.info("suggestion.matched", task=task, utterance=utterance)
        return task

    def match_once(self, utterance: str) -> str:
        """Single match attempt; raises :class:`TransientMatchFailure` when injected."""
        if self._should_fail():
            _logger.warning("match.simulated_failure")
            raise TransientMatchFailure("External dependency failure")

        normalized = utterance.lower()

        task = self.rules.lookup_direct(normalized)
        if task is not None:
            _logger.debug("match.keyword", task=task)
            return task

        if self.rules.is_category_match(PASSWORD_CATEGORY, normalized):
            _logger.debug("match.category", category=PASSWORD_CATEGORY)
            return KnownTask.RESET_PASSWORD.value

        if self.rules.is_category_match(ORDER_CATEGORY, normalized):
            _logger.debug("match.category", category=ORDER_CATEGORY)
            return KnownTask.CHECK_ORDER_STATUS.value

        _logger.debug("match.none", utterance=utterance)
        return KnownTask.NO_TASK_FOUND.value
