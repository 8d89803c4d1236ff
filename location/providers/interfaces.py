"""
Provider interfaces for autocomplete and address geocoding.
"""

from typing import Protocol

from location.models import GeocodeResult, GeoPoint, Suggestion


class SuggestionProvider(Protocol):
    """Interface for free-text place search (autocomplete)."""

    name: str

    async def search(
        self,
        query: str,
        limit: int = 5,
        *,
        bias: GeoPoint | None = None,
        country_bias: str | None = None,
        language: str = "en",
    ) -> list[Suggestion]:
        """Return normalized suggestions; an empty list on any failure."""
        ...

    async def try_search(
        self,
        query: str,
        limit: int = 5,
        *,
        bias: GeoPoint | None = None,
        country_bias: str | None = None,
        language: str = "en",
    ) -> list[Suggestion] | None:
        """Return normalized suggestions, or None when the upstream failed."""
        ...


class AddressGeocoder(Protocol):
    """Interface for one link of the geocoding fallback chain."""

    name: str

    async def geocode(self, address: str) -> GeocodeResult:
        """Resolve an address; a failed result instead of raising."""
        ...


class ReverseGeocoder(Protocol):
    """Interface for coordinate to address lookups."""

    name: str

    async def reverse(self, lat: float, lon: float) -> GeocodeResult:
        """Resolve a coordinate; a failed result instead of raising."""
        ...
