"""
Location resolution models.

Key models:
- Suggestion: provider-agnostic candidate place returned by autocomplete
- GeocodeResult: tagged success/failure outcome of one address resolution
- GeoPoint: latitude/longitude pair used to bias searches
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GeoPoint(BaseModel):
    lat: float
    lon: float


class Suggestion(_CamelModel):
    """One candidate place, normalized from any upstream provider."""

    provider: str
    display_name: str = ""
    label: str = ""
    subtitle: str = ""
    latitude: float | None = None
    longitude: float | None = None
    street: str = ""
    locality: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""
    type: str = ""  # granular place class, e.g. "village", "restaurant"
    osm_id: int | str | None = None
    osm_type: str | None = None
    place_id: str | None = None
    highlight_label: str | None = None


class GeocodeResult(_CamelModel):
    """Outcome of resolving one address with one or more providers."""

    success: bool
    latitude: float | None = None
    longitude: float | None = None
    formatted_address: str = ""
    street: str = ""
    locality: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""
    provider: str | None = None
    error: str | None = None

    @classmethod
    def failure(cls, error: str, *, provider: str | None = None) -> GeocodeResult:
        return cls(success=False, error=error, provider=provider)

    def to_suggestion(self, *, type_: str = "geocode") -> Suggestion:
        label = self.formatted_address
        return Suggestion(
            provider=self.provider or "unknown",
            display_name=label,
            label=label,
            latitude=self.latitude,
            longitude=self.longitude,
            street=self.street,
            locality=self.locality,
            city=self.city,
            state=self.state,
            postal_code=self.postal_code,
            country=self.country,
            type=type_,
        )
