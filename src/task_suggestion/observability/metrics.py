"""Prometheus counters for task suggestions."""
from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, generate_latest


class SuggestionMetrics:
    """Counters kept in a registry private to one application instance."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self.suggestions = Counter(
            "task_suggestions_total", "Suggestions returned, by task", ["task"], registry=self.registry
        )
        self.retries = Counter(
            "task_match_retries_total", "Match attempts that failed and were retried", registry=self.registry
        )
        self.exhausted = Counter(
            "task_match_exhausted_total", "Requests whose match attempts were all used up", registry=self.registry
        )

    def record_suggestion(self, task: str) -> None:
        self.suggestions.labels(task=task).inc()

    def record_failed_attempt(self, attempt: int, max_attempts: int) -> None:
        if attempt < max_attempts:
            self.retries.inc()
        else:
            self.exhausted.inc()

    def export(self) -> bytes:
        return generate_latest(self.registry)
