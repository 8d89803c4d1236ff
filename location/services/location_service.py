"""
Location resolution service.

Ties the query cache, provider adapters and ranker together behind the two
operations callers use (autocomplete ``search`` and ``geocode_address``) plus
reverse geocoding, place details and free-text address resolution.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from core.cache import TTLCache, make_cache_key
from core.constants import DEFAULT_DETAILS_CACHE_TTL_SECONDS
from core.exceptions import ValidationException
from location.models import GeocodeResult, GeoPoint, Suggestion
from location.normalize import filter_by_country, normalize_address_key
from location.providers.factory import build_providers
from location.ranking import SuggestionRanker

if TYPE_CHECKING:
    from config import LocationSettings
    from location.providers.interfaces import (
        AddressGeocoder,
        ReverseGeocoder,
        SuggestionProvider,
    )
    from location.providers.nominatim import NominatimProvider

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
MAX_SEARCH_LIMIT = 50
# ~11 m at the equator; nearby taps share one reverse-geocode entry.
REVERSE_COORD_PRECISION = 4
# Free-text fallback keeps this many trailing lines (the locality part of a
# printed address).
FREE_TEXT_TAIL_LINES = 3
FREE_TEXT_TAIL_MIN_CHARS = 10


class LocationService:
    """
    Cache-backed orchestration over the configured provider adapters.

    Autocomplete uses a single adapter for latency. Address and reverse
    geocoding walk an ordered chain one provider at a time and stop at the
    first success. Failed resolutions are never cached.
    """

    def __init__(
        self,
        autocomplete_provider: SuggestionProvider,
        geocoders: Sequence[AddressGeocoder],
        *,
        cache: TTLCache | None = None,
        ranker: SuggestionRanker | None = None,
        reverse_geocoders: Sequence[ReverseGeocoder] = (),
        details_provider: NominatimProvider | None = None,
        default_country_bias: str | None = None,
        details_ttl: float = DEFAULT_DETAILS_CACHE_TTL_SECONDS,
    ) -> None:
        self.autocomplete_provider = autocomplete_provider
        self.geocoders = list(geocoders)
        self.reverse_geocoders = list(reverse_geocoders)
        self.details_provider = details_provider
        self.cache = cache if cache is not None else TTLCache()
        self.ranker = ranker or SuggestionRanker()
        self.default_country_bias = default_country_bias
        self.details_ttl = details_ttl

    @classmethod
    def from_settings(
        cls, settings: LocationSettings, *, cache: TTLCache | None = None
    ) -> LocationService:
        providers = build_providers(settings)
        if cache is None:
            cache = TTLCache(
                default_ttl=settings.cache_ttl_seconds,
                max_entries=settings.cache_max_entries,
            )
        return cls(
            providers.autocomplete,
            providers.geocoders,
            cache=cache,
            ranker=SuggestionRanker(settings.locality_types),
            reverse_geocoders=providers.reverse_geocoders,
            details_provider=providers.details,
            default_country_bias=settings.default_country_bias,
            details_ttl=settings.details_cache_ttl_seconds,
        )

    async def search(
        self,
        query: str,
        limit: int = 10,
        *,
        language: str = "en",
        lat: float | None = None,
        lon: float | None = None,
        country_bias: str | None = None,
    ) -> list[Suggestion]:
        """Autocomplete: ranked, country-filtered suggestions for ``query``."""
        text = (query or "").strip()
        if len(text) < MIN_QUERY_LENGTH:
            raise ValidationException(
                f"Query must be at least {MIN_QUERY_LENGTH} characters",
                {"field": "q"},
            )
        limit = max(1, min(int(limit), MAX_SEARCH_LIMIT))
        bias_country = country_bias or self.default_country_bias

        key = make_cache_key(
            "search",
            {
                "query": text,
                "limit": limit,
                "language": language,
                "lat": lat,
                "lon": lon,
                "country_bias": bias_country,
            },
        )
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Search cache hit for %r", text)
            return [s.model_copy() for s in cached]

        bias = GeoPoint(lat=lat, lon=lon) if lat is not None and lon is not None else None
        raw = await self.autocomplete_provider.try_search(
            text,
            limit,
            bias=bias,
            country_bias=bias_country,
            language=language,
        )
        if raw is None:
            # Upstream failure; not cached so the next call retries.
            logger.warning(
                "Search %r via %s failed", text, self.autocomplete_provider.name
            )
            return []
        filtered = filter_by_country(raw, bias_country)
        ranked = self.ranker.rank(filtered)
        self.cache.set(key, [s.model_copy() for s in ranked])
        logger.info(
            "Search %r via %s: %d raw, %d kept",
            text,
            self.autocomplete_provider.name,
            len(raw),
            len(ranked),
        )
        return list(ranked)

    async def geocode_address(self, address: str) -> GeocodeResult:
        """Resolve one address through the provider chain, first success wins."""
        normalized = normalize_address_key(address or "")
        if not normalized:
            return GeocodeResult.failure("Address is required")

        key = make_cache_key("geocode", {"address": normalized})
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Geocode cache hit for %r", normalized)
            return cached.model_copy()

        errors: list[str] = []
        for provider in self.geocoders:
            try:
                result = await provider.geocode(address.strip())
            except Exception as exc:
                logger.exception("Geocoder %s raised for %r", provider.name, address)
                errors.append(f"{provider.name}: {exc}")
                continue
            if result.success:
                self.cache.set(key, result.model_copy())
                logger.info("Geocoded %r via %s", normalized, provider.name)
                return result
            logger.debug(
                "Geocoder %s failed for %r: %s", provider.name, normalized, result.error
            )
            errors.append(f"{provider.name}: {result.error}")

        logger.warning("All geocoders failed for %r", normalized)
        message = "All geocoding providers failed"
        if errors:
            message = f"{message} ({'; '.join(errors)})"
        return GeocodeResult.failure(message)

    async def reverse_geocode(self, lat: float, lon: float) -> GeocodeResult:
        """Resolve a coordinate to an address through reverse-capable providers."""
        if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
            raise ValidationException(
                "Coordinates out of range", {"lat": lat, "lon": lon}
            )
        key = make_cache_key(
            "reverse",
            {
                "lat": round(lat, REVERSE_COORD_PRECISION),
                "lon": round(lon, REVERSE_COORD_PRECISION),
            },
        )
        cached = self.cache.get(key)
        if cached is not None:
            return cached.model_copy()

        for provider in self.reverse_geocoders:
            try:
                result = await provider.reverse(lat, lon)
            except Exception:
                logger.exception("Reverse geocoder %s raised", provider.name)
                continue
            if result.success:
                self.cache.set(key, result.model_copy())
                return result
        return GeocodeResult.failure("Could not resolve location")

    async def place_details(
        self, osm_id: int | str, osm_type: str
    ) -> Suggestion | None:
        """Look up one OSM feature by id; None when unknown."""
        if self.details_provider is None:
            return None
        key = make_cache_key("details", {"osm_id": str(osm_id), "osm_type": osm_type})
        cached = self.cache.get(key)
        if cached is not None:
            return cached.model_copy()

        place = await self.details_provider.lookup(osm_id, osm_type)
        if place is not None:
            self.cache.set(key, place.model_copy(), ttl=self.details_ttl)
        return place

    async def resolve_free_text_address(self, text: str) -> GeocodeResult:
        """
        Geocode a multi-line address, e.g. text read off a shop sign.

        When the whole text fails, retry with only the trailing lines, which
        usually hold the locality, city and PIN code.
        """
        lines = [line.strip() for line in (text or "").splitlines() if line.strip()]
        if not lines:
            return GeocodeResult.failure("Address is required")

        full = ", ".join(lines)
        result = await self.geocode_address(full)
        if result.success:
            return result

        tail = ", ".join(lines[-FREE_TEXT_TAIL_LINES:])
        if tail != full and len(tail) > FREE_TEXT_TAIL_MIN_CHARS:
            logger.debug("Retrying free-text geocode with trailing lines: %r", tail)
            return await self.geocode_address(tail)
        return result
