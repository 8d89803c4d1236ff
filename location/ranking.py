"""Suggestion ranking: area-level matches first, then shorter labels."""

from __future__ import annotations

from collections.abc import Iterable

from config import DEFAULT_LOCALITY_TYPES
from location.models import Suggestion


class SuggestionRanker:
    """
    Orders suggestions so localities outrank points of interest.

    The primary key is 0 when the suggestion type contains any locality type
    as a substring, else 1. Ties are broken by label length, shortest first.
    ``sorted`` is stable, so equal keys keep the provider's order.
    """

    def __init__(self, locality_types: Iterable[str] = DEFAULT_LOCALITY_TYPES) -> None:
        self.locality_types = tuple(t.lower() for t in locality_types if t)

    def is_locality(self, suggestion: Suggestion) -> bool:
        place_type = (suggestion.type or "").lower()
        return any(t in place_type for t in self.locality_types)

    def sort_key(self, suggestion: Suggestion) -> tuple[int, int]:
        return (0 if self.is_locality(suggestion) else 1, len(suggestion.label))

    def rank(self, suggestions: Iterable[Suggestion]) -> list[Suggestion]:
        return sorted(suggestions, key=self.sort_key)
