"""
Mappls (MapmyIndia) geocoding adapter.

Commercial, India-focused geocoder used first in the address fallback chain.
The endpoint URL is deployment configuration; when the key or URL is missing
the adapter reports a failure without touching the network so the chain can
move on.
"""

from __future__ import annotations

import logging
from typing import Any

from config import MAPPLS_API_KEY, MAPPLS_GEOCODE_URL
from location.models import GeocodeResult, GeoPoint, Suggestion
from location.normalize import clean_text, first_present
from location.providers.base import HttpProvider

logger = logging.getLogger(__name__)


def _number(value: Any) -> float | None:
    # Mappls coordinates are JSON numbers; strings are treated as missing.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _first_item(data: Any) -> Any:
    """Pick the first candidate out of the known response envelopes."""
    if not isinstance(data, dict):
        return data
    for key in ("results", "suggestedLocations", "copResults"):
        items = data.get(key)
        if isinstance(items, list) and items:
            return items[0]
        if isinstance(items, dict) and items:
            return items
    if isinstance(data.get("result"), dict):
        return data["result"]
    return data


def parse_mappls_result(
    data: Any, *, fallback_address: str = "", default_country: str = "India"
) -> GeocodeResult:
    """Map a Mappls geocode payload into a GeocodeResult."""
    item = _first_item(data)
    if not isinstance(item, dict):
        return GeocodeResult.failure("Invalid geocode response", provider="mappls")

    geom = item.get("geom") if isinstance(item.get("geom"), dict) else {}
    lat = _number(item.get("latitude"))
    if lat is None:
        lat = _number(item.get("lat"))
    if lat is None:
        lat = _number(geom.get("lat"))
    lon = _number(item.get("longitude"))
    if lon is None:
        lon = _number(item.get("lon"))
    if lon is None:
        lon = _number(geom.get("lon"))
    if lat is None or lon is None:
        return GeocodeResult.failure("Invalid geocode response", provider="mappls")

    components = next(
        (
            item[key]
            for key in ("addressComponents", "address_components", "components")
            if isinstance(item.get(key), dict)
        ),
        {},
    )

    return GeocodeResult(
        success=True,
        latitude=lat,
        longitude=lon,
        formatted_address=first_present(
            item.get("formattedAddress"),
            item.get("formatted_address"),
            item.get("address"),
            fallback_address,
        ),
        street=first_present(components.get("street"), components.get("road")),
        locality=first_present(
            item.get("locality"),
            components.get("locality"),
            components.get("subLocality"),
            components.get("suburb"),
        ),
        city=first_present(
            item.get("city"),
            components.get("city"),
            components.get("district"),
            components.get("town"),
        ),
        state=first_present(item.get("state"), components.get("state"), components.get("region")),
        postal_code=first_present(
            item.get("postalCode"), components.get("pincode"), components.get("postal_code")
        ),
        country=first_present(item.get("country"), components.get("country"))
        or default_country,
        provider="mappls",
    )


class MapplsProvider(HttpProvider):
    name = "mappls"

    def __init__(
        self,
        *,
        api_key: str = MAPPLS_API_KEY,
        geocode_url: str = MAPPLS_GEOCODE_URL,
        country_code: str = "IN",
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._api_key = api_key
        self._geocode_url = geocode_url
        self._country_code = country_code

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key and self._geocode_url)

    async def _geocode(self, address: str) -> GeocodeResult:
        params = {"address": address, "country": self._country_code}
        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }
        data = await self._get_json(
            self._geocode_url,
            params=params,
            headers=headers,
            service_name="Mappls geocode",
        )
        result = parse_mappls_result(
            data, fallback_address=address, default_country=self.default_country
        )
        if not result.success:
            logger.warning("Mappls returned no usable coordinates for %r", address)
        return result

    async def _search(
        self,
        query: str,
        limit: int,
        *,
        bias: GeoPoint | None,
        country_bias: str | None,
        language: str,
    ) -> list[Suggestion]:
        # Geocode-only API: a search yields at most the single best match.
        if not self.is_configured:
            return []
        result = await self._geocode(query)
        if not result.success:
            return []
        return [result.to_suggestion()]
