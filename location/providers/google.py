"""
Google Maps Platform adapter (Geocoding API + Places Text Search).
"""

from __future__ import annotations

from typing import Any

from config import GOOGLE_MAPS_API_KEY, GOOGLE_MAPS_BASE_URL
from core.exceptions import ProviderTransportError
from location.models import GeocodeResult, GeoPoint, Suggestion
from location.normalize import build_suggestion, clean_text, to_float
from location.providers.base import HttpProvider

# Bias radius for text search, in meters.
TEXT_SEARCH_RADIUS_M = 50_000


def _status(data: Any) -> str:
    if not isinstance(data, dict):
        return "UNKNOWN"
    return str(data.get("status") or "UNKNOWN")


def _components(result: dict[str, Any]) -> dict[str, str]:
    """Flatten Google address_components into a Nominatim-like address dict."""
    address: dict[str, str] = {}
    for component in result.get("address_components") or []:
        if not isinstance(component, dict):
            continue
        types = component.get("types") or []
        value = clean_text(component.get("long_name"))
        if not value:
            continue
        if "route" in types:
            address.setdefault("road", value)
        elif "sublocality_level_1" in types or "sublocality" in types:
            address.setdefault("suburb", value)
        elif "neighborhood" in types:
            address.setdefault("neighbourhood", value)
        elif "locality" in types:
            address.setdefault("city", value)
        elif "administrative_area_level_2" in types:
            address.setdefault("district", value)
        elif "administrative_area_level_1" in types:
            address.setdefault("state", value)
        elif "country" in types:
            address.setdefault("country", value)
        elif "postal_code" in types:
            address.setdefault("postcode", value)
    return address


def parse_google_geocode(
    result: Any, *, default_country: str = "India"
) -> GeocodeResult:
    """Map one Geocoding API ``results[]`` item into a GeocodeResult."""
    if not isinstance(result, dict):
        return GeocodeResult.failure("Invalid geocode response", provider="google")
    location = (result.get("geometry") or {}).get("location") or {}
    lat = to_float(location.get("lat"))
    lon = to_float(location.get("lng"))
    if lat is None or lon is None:
        return GeocodeResult.failure("Invalid geocode response", provider="google")

    address = _components(result)
    city = address.get("city") or address.get("district", "")
    return GeocodeResult(
        success=True,
        latitude=lat,
        longitude=lon,
        formatted_address=clean_text(result.get("formatted_address")),
        street=address.get("road", ""),
        locality=address.get("suburb") or address.get("neighbourhood") or city,
        city=city,
        state=address.get("state", ""),
        postal_code=address.get("postcode", ""),
        country=address.get("country") or default_country,
        provider="google",
    )


def parse_google_place(
    result: Any, *, default_country: str = "India"
) -> Suggestion | None:
    """Map one Places Text Search item into a Suggestion."""
    if not isinstance(result, dict):
        return None
    location = (result.get("geometry") or {}).get("location") or {}
    formatted = clean_text(result.get("formatted_address"))
    # Text search has no structured components; country is the trailing segment.
    segments = [part.strip() for part in formatted.split(",") if part.strip()]
    country = segments[-1] if len(segments) > 1 else ""
    types = result.get("types")
    place_type = clean_text(types[0]) if isinstance(types, list) and types else ""

    return build_suggestion(
        "google",
        name=clean_text(result.get("name")),
        place_type=place_type,
        country=country,
        default_country=default_country,
        latitude=to_float(location.get("lat")),
        longitude=to_float(location.get("lng")),
        display_name=formatted,
        place_id=clean_text(result.get("place_id")) or None,
    )


class GoogleProvider(HttpProvider):
    name = "google"
    supports_reverse = True

    def __init__(
        self,
        *,
        api_key: str = GOOGLE_MAPS_API_KEY,
        base_url: str = GOOGLE_MAPS_BASE_URL,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._api_key = api_key
        base = base_url.rstrip("/")
        self._geocode_url = f"{base}/geocode/json"
        self._textsearch_url = f"{base}/place/textsearch/json"

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def _geocode_request(self, params: dict[str, Any], service_name: str) -> Any:
        data = await self._get_json(
            self._geocode_url,
            params={**params, "key": self._api_key},
            service_name=service_name,
        )
        status = _status(data)
        if status == "ZERO_RESULTS":
            return None
        if status != "OK":
            message = data.get("error_message") if isinstance(data, dict) else None
            msg = f"{service_name} error: {status}"
            raise ProviderTransportError(msg, {"status": status, "message": message})
        results = data.get("results") or []
        return results[0] if results else None

    async def _geocode(self, address: str) -> GeocodeResult:
        best = await self._geocode_request({"address": address}, "Google geocode")
        if best is None:
            return GeocodeResult.failure("Address not found", provider=self.name)
        return parse_google_geocode(best, default_country=self.default_country)

    async def _reverse(self, lat: float, lon: float) -> GeocodeResult:
        best = await self._geocode_request(
            {"latlng": f"{lat},{lon}"}, "Google reverse geocode"
        )
        if best is None:
            return GeocodeResult.failure("Location not found", provider=self.name)
        return parse_google_geocode(best, default_country=self.default_country)

    async def _search(
        self,
        query: str,
        limit: int,
        *,
        bias: GeoPoint | None,
        country_bias: str | None,
        language: str,
    ) -> list[Suggestion]:
        if not self.is_configured:
            return []
        params: dict[str, Any] = {
            "query": query,
            "key": self._api_key,
            "language": language,
        }
        if bias is not None:
            params["location"] = f"{bias.lat},{bias.lon}"
            params["radius"] = TEXT_SEARCH_RADIUS_M
        if country_bias:
            params["region"] = country_bias.lower()

        data = await self._get_json(
            self._textsearch_url, params=params, service_name="Google text search"
        )
        status = _status(data)
        if status == "ZERO_RESULTS":
            return []
        if status != "OK":
            msg = f"Google text search error: {status}"
            raise ProviderTransportError(msg, {"status": status})

        suggestions = []
        for item in (data.get("results") or [])[: max(1, limit)]:
            suggestion = parse_google_place(item, default_country=self.default_country)
            if suggestion is not None:
                suggestions.append(suggestion)
        return suggestions
