"""Static keyword rules mapping utterances to task labels."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

from .models import KnownTask

PASSWORD_CATEGORY = "password"
ORDER_CATEGORY = "order"

DEFAULT_PHRASES: Tuple[Tuple[str, str], ...] = (
    ("reset password", KnownTask.RESET_PASSWORD.value),
    ("forgot password", KnownTask.RESET_PASSWORD.value),
    ("check order", KnownTask.CHECK_ORDER_STATUS.value),
    ("track order", KnownTask.CHECK_ORDER_STATUS.value),
)


@dataclass(frozen=True)
class CategoryKeywords:
    """Noun and action-verb keywords describing one category."""

    nouns: Tuple[str, ...]
    verbs: Tuple[str, ...]

    def matches(self, normalized_utterance: str) -> bool:
        # Either group is enough on its own: a lone "check" is an order match.
        return any(noun in normalized_utterance for noun in self.nouns) or any(
            verb in normalized_utterance for verb in self.verbs
        )


DEFAULT_CATEGORIES: Mapping[str, CategoryKeywords] = {
    PASSWORD_CATEGORY: CategoryKeywords(
        nouns=("password", "login", "sign in", "authenticate"),
        verbs=("reset", "forgot", "forgotten"),
    ),
    ORDER_CATEGORY: CategoryKeywords(
        nouns=("order", "purchase", "delivery", "shipment", "tracking"),
        verbs=("check", "track", "status"),
    ),
}


@dataclass(frozen=True)
class RuleTable:
    """Ordered trigger phrases plus category keyword sets.

    Phrases are kept as a tuple of ``(phrase, task)`` pairs so that match
    precedence follows insertion order when several phrases overlap.
    """

    phrases: Tuple[Tuple[str, str], ...]
    categories: Mapping[str, CategoryKeywords] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        phrases: Iterable[Tuple[str, str]],
        categories: Mapping[str, CategoryKeywords],
    ) -> "RuleTable":
        normalized = tuple((phrase.lower(), task) for phrase, task in phrases)
        frozen_categories = MappingProxyType(
            {
                name: CategoryKeywords(
                    nouns=tuple(noun.lower() for noun in keywords.nouns),
                    verbs=tuple(verb.lower() for verb in keywords.verbs),
                )
                for name, keywords in categories.items()
            }
        )
        return cls(phrases=normalized, categories=frozen_categories)

    def lookup_direct(self, normalized_utterance: str) -> Optional[str]:
        for phrase, task in self.phrases:
            if phrase in normalized_utterance:
                return task
        return None

    def is_category_match(self, category: str, normalized_utterance: str) -> bool:
        if category not in self.categories:
            raise KeyError(f"Unknown keyword category: {category}")
        return self.categories[category].matches(normalized_utterance)


def default_rule_table() -> RuleTable:
    return RuleTable.build(DEFAULT_PHRASES, DEFAULT_CATEGORIES)
