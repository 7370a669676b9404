"""Bounded retry with linear backoff for flaky async operations."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

import structlog

from .errors import OperationExhausted

_logger = structlog.get_logger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]
FailureHook = Callable[[int, Exception], None]


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to try and how long to wait between tries."""

    max_attempts: int = 3
    base_delay_seconds: float = 0.1

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay_seconds < 0:
            raise ValueError("base_delay_seconds cannot be negative")

    def delay_before(self, attempt: int) -> float:
        """Delay preceding ``attempt`` (1-indexed); the first attempt never waits."""
        return self.base_delay_seconds * max(attempt - 1, 0)


class RetryExecutor:
    """Runs an async operation until it succeeds or the policy is used up.

    Any ``Exception`` raised by the operation counts as a failed attempt; the
    cause is not inspected. ``asyncio.CancelledError`` is not an
    ``Exception`` and therefore cancels the loop immediately.
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        sleep: SleepFn = asyncio.sleep,
        on_failure: Optional[FailureHook] = None,
    ) -> None:
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._on_failure = on_failure

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        max_attempts = self.policy.max_attempts
        attempt = 0
        while True:
            attempt += 1
            _logger.debug("retry.attempt", attempt=attempt, max_attempts=max_attempts)
            try:
                return await operation()
            except Exception as exc:
                if self._on_failure is not None:
                    self._on_failure(attempt, exc)
                if attempt >= max_attempts:
                    _logger.error("retry.exhausted", attempts=attempt, error=str(exc))
                    raise OperationExhausted(attempt) from exc
                delay = self.policy.delay_before(attempt + 1)
                _logger.warning(
                    "retry.attempt_failed",
                    attempt=attempt,
                    max_attempts=max_attempts,
                    delay_seconds=delay,
                    error=str(exc),
                )
                await self._sleep(delay)
