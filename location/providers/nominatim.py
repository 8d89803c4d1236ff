"""
Nominatim (OpenStreetMap) adapter.

Open-data fallback for the geocoding chain. Also provides reverse geocoding
and OSM id lookups. The public instance allows at most one request per
second, enforced with an outbound limiter.
"""

from __future__ import annotations

import logging
from typing import Any

from config import NOMINATIM_BASE_URL, NOMINATIM_USER_AGENT
from core.exceptions import ProviderParseError
from location.models import GeocodeResult, GeoPoint, Suggestion
from location.normalize import build_suggestion, clean_text, first_present, to_float
from location.providers.base import RECOVERABLE_ERRORS, SHAPE_ERRORS, HttpProvider

logger = logging.getLogger(__name__)

# Half-width of the bias viewbox in degrees (~55 km near the equator).
VIEWBOX_DELTA_DEG = 0.5


def _address(item: dict[str, Any]) -> dict[str, Any]:
    addr = item.get("address")
    return addr if isinstance(addr, dict) else {}


def _city(addr: dict[str, Any]) -> str:
    return first_present(
        addr.get("city"), addr.get("town"), addr.get("village"), addr.get("municipality")
    )


def parse_nominatim_place(
    item: Any, *, default_country: str = "India"
) -> Suggestion | None:
    """Map one Nominatim search/lookup row into a Suggestion."""
    if not isinstance(item, dict):
        return None
    addr = _address(item)
    city = _city(addr)
    display_name = clean_text(item.get("display_name"))
    suburb = first_present(
        addr.get("suburb"), addr.get("neighbourhood"), addr.get("quarter"), addr.get("hamlet")
    )

    name = clean_text(item.get("name"))
    if not name and display_name:
        leading = display_name.split(",")[0].strip()
        if leading.lower() != city.lower():
            name = leading

    return build_suggestion(
        "nominatim",
        name=name,
        city=city,
        state=first_present(addr.get("state"), addr.get("region")),
        sub_locality=suburb,
        explicit_locality=suburb,
        place_type=clean_text(item.get("type")),
        country=clean_text(addr.get("country")),
        default_country=default_country,
        latitude=to_float(item.get("lat")),
        longitude=to_float(item.get("lon")),
        street=first_present(addr.get("road"), addr.get("pedestrian")),
        postal_code=clean_text(addr.get("postcode")),
        display_name=display_name,
        osm_id=item.get("osm_id"),
        osm_type=clean_text(item.get("osm_type")) or None,
    )


def parse_nominatim_reverse(
    data: Any, *, default_country: str = "India"
) -> GeocodeResult:
    """Map a Nominatim /reverse payload into a GeocodeResult."""
    if not isinstance(data, dict) or not isinstance(data.get("address"), dict):
        return GeocodeResult.failure("Location not found", provider="nominatim")
    addr = data["address"]
    city = first_present(
        addr.get("city"),
        addr.get("town"),
        addr.get("village"),
        addr.get("municipality"),
        addr.get("county"),
        addr.get("state_district"),
    )
    state = first_present(addr.get("state"), addr.get("region"))
    suburb = first_present(addr.get("suburb"), addr.get("neighbourhood"))
    street = first_present(addr.get("road"), addr.get("pedestrian"))
    postcode = clean_text(addr.get("postcode"))

    parts = [part for part in (clean_text(addr.get("road")), suburb, city, state, postcode) if part]
    return GeocodeResult(
        success=True,
        latitude=to_float(data.get("lat")),
        longitude=to_float(data.get("lon")),
        formatted_address=", ".join(parts) or clean_text(data.get("display_name")),
        street=street,
        locality=suburb or city,
        city=city,
        state=state,
        postal_code=postcode,
        country=clean_text(addr.get("country")) or default_country,
        provider="nominatim",
    )


class NominatimProvider(HttpProvider):
    name = "nominatim"
    supports_reverse = True

    def __init__(
        self,
        *,
        base_url: str = NOMINATIM_BASE_URL,
        user_agent: str = NOMINATIM_USER_AGENT,
        requests_per_second: float | None = 1.0,
        **kwargs: Any,
    ) -> None:
        super().__init__(requests_per_second=requests_per_second, **kwargs)
        base = base_url.rstrip("/")
        self._search_url = f"{base}/search"
        self._reverse_url = f"{base}/reverse"
        self._lookup_url = f"{base}/lookup"
        self._user_agent = user_agent

    def _headers(self) -> dict[str, str]:
        return {"User-Agent": self._user_agent, "Accept": "application/json"}

    @staticmethod
    def _viewbox(bias: GeoPoint) -> str:
        # Nominatim expects left,top,right,bottom
        left = f"{bias.lon - VIEWBOX_DELTA_DEG:.4f}"
        right = f"{bias.lon + VIEWBOX_DELTA_DEG:.4f}"
        top = f"{bias.lat + VIEWBOX_DELTA_DEG:.4f}"
        bottom = f"{bias.lat - VIEWBOX_DELTA_DEG:.4f}"
        return f"{left},{top},{right},{bottom}"

    @staticmethod
    def _lookup_prefix(osm_type: str) -> str | None:
        mapping = {
            "node": "N",
            "n": "N",
            "way": "W",
            "w": "W",
            "relation": "R",
            "rel": "R",
            "r": "R",
        }
        return mapping.get(str(osm_type or "").strip().lower())

    async def _search_raw(
        self,
        query: str,
        limit: int,
        *,
        bias: GeoPoint | None = None,
        country_bias: str | None = None,
        language: str = "en",
    ) -> list[Any]:
        params: dict[str, Any] = {
            "q": query,
            "format": "jsonv2",
            "addressdetails": 1,
            "limit": limit,
            "dedupe": 1,
            "accept-language": language,
        }
        if country_bias:
            params["countrycodes"] = country_bias.lower()
        if bias is not None:
            params["viewbox"] = self._viewbox(bias)
            params["bounded"] = 1

        results = await self._get_json(
            self._search_url,
            params=params,
            headers=self._headers(),
            service_name="Nominatim search",
        )
        if not isinstance(results, list):
            msg = "Nominatim search error: unexpected response"
            raise ProviderParseError(msg, {"url": self._search_url})
        return results

    async def _search(
        self,
        query: str,
        limit: int,
        *,
        bias: GeoPoint | None,
        country_bias: str | None,
        language: str,
    ) -> list[Suggestion]:
        results = await self._search_raw(
            query, limit, bias=bias, country_bias=country_bias, language=language
        )
        suggestions = []
        for item in results:
            suggestion = parse_nominatim_place(item, default_country=self.default_country)
            if suggestion is not None:
                suggestions.append(suggestion)
        return suggestions

    async def _geocode(self, address: str) -> GeocodeResult:
        results = await self._search_raw(address, 1)
        for item in results:
            place = parse_nominatim_place(item, default_country=self.default_country)
            if place is None or place.latitude is None or place.longitude is None:
                continue
            return GeocodeResult(
                success=True,
                latitude=place.latitude,
                longitude=place.longitude,
                formatted_address=place.display_name or address,
                street=place.street,
                locality=place.locality,
                city=place.city,
                state=place.state,
                postal_code=place.postal_code,
                country=place.country,
                provider=self.name,
            )
        return GeocodeResult.failure("Address not found", provider=self.name)

    async def _reverse(self, lat: float, lon: float) -> GeocodeResult:
        params = {
            "format": "jsonv2",
            "lat": lat,
            "lon": lon,
            "zoom": 18,
            "addressdetails": 1,
        }
        data = await self._get_json(
            self._reverse_url,
            params=params,
            headers=self._headers(),
            service_name="Nominatim reverse",
            none_on=(404,),
        )
        result = parse_nominatim_reverse(data, default_country=self.default_country)
        if result.success and result.latitude is None:
            result.latitude, result.longitude = lat, lon
        return result

    async def lookup(self, osm_id: int | str, osm_type: str) -> Suggestion | None:
        """Fetch one OSM feature by id. Returns None when missing or on failure."""
        prefix = self._lookup_prefix(osm_type)
        if not prefix:
            logger.warning("Nominatim lookup skipped: invalid osm_type %r", osm_type)
            return None
        try:
            osm_id_value = int(osm_id)
        except (TypeError, ValueError):
            logger.warning("Nominatim lookup skipped: invalid osm_id %r", osm_id)
            return None

        params = {
            "osm_ids": f"{prefix}{osm_id_value}",
            "format": "json",
            "addressdetails": 1,
        }
        try:
            results = await self._get_json(
                self._lookup_url,
                params=params,
                headers=self._headers(),
                service_name="Nominatim lookup",
            )
        except RECOVERABLE_ERRORS as exc:
            logger.warning("Nominatim lookup error for %s%s: %s", prefix, osm_id_value, exc)
            return None
        if not isinstance(results, list) or not results:
            return None
        try:
            place = parse_nominatim_place(results[0], default_country=self.default_country)
        except SHAPE_ERRORS as exc:
            logger.warning("Nominatim lookup returned an unexpected payload: %s", exc)
            return None
        if place is not None:
            place.osm_id = osm_id_value
            place.osm_type = prefix
        return place
