"""
Factory for resolving the configured provider adapters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from config import LocationSettings
from core.exceptions import ValidationException
from location.providers.base import HttpProvider
from location.providers.google import GoogleProvider
from location.providers.mappls import MapplsProvider
from location.providers.nominatim import NominatimProvider
from location.providers.photon import PhotonProvider

logger = logging.getLogger(__name__)

KNOWN_PROVIDERS = ("photon", "nominatim", "mappls", "google")


@dataclass
class ProviderSet:
    """Adapters wired for one LocationService instance."""

    autocomplete: HttpProvider
    geocoders: list[HttpProvider] = field(default_factory=list)
    reverse_geocoders: list[HttpProvider] = field(default_factory=list)
    details: NominatimProvider | None = None


def _create(name: str, settings: LocationSettings) -> HttpProvider:
    common = {
        "default_country": settings.default_country,
        "timeout_seconds": settings.provider_timeout_seconds,
    }
    if name == "photon":
        return PhotonProvider(base_url=settings.photon_base_url, **common)
    if name == "nominatim":
        return NominatimProvider(
            base_url=settings.nominatim_base_url,
            user_agent=settings.nominatim_user_agent,
            requests_per_second=settings.nominatim_requests_per_second,
            **common,
        )
    if name == "mappls":
        return MapplsProvider(
            api_key=settings.mappls_api_key,
            geocode_url=settings.mappls_geocode_url,
            **common,
        )
    if name == "google":
        return GoogleProvider(api_key=settings.google_maps_api_key, **common)
    msg = f"Unknown location provider: {name!r}"
    raise ValidationException(msg, {"code": "unknown_provider", "known": KNOWN_PROVIDERS})


def build_providers(settings: LocationSettings) -> ProviderSet:
    """
    Build the autocomplete adapter and the ordered geocoding chain.

    One instance is created per provider name so that the Nominatim
    outbound limiter and each circuit breaker are shared across roles.
    Providers missing credentials are left out of the geocoding chain.
    """
    instances: dict[str, HttpProvider] = {}

    def get(name: str) -> HttpProvider:
        if name not in instances:
            instances[name] = _create(name, settings)
        return instances[name]

    autocomplete = get(settings.autocomplete_provider)

    geocoders: list[HttpProvider] = []
    for name in settings.geocode_priority:
        provider = get(name)
        if not provider.is_configured:
            logger.info("Skipping %s in geocode chain: not configured", name)
            continue
        geocoders.append(provider)
    if not geocoders:
        logger.warning("No configured geocoders; falling back to nominatim")
        geocoders.append(get("nominatim"))

    reverse_geocoders = [p for p in geocoders if p.supports_reverse]
    details = get("nominatim")
    if not reverse_geocoders:
        reverse_geocoders.append(details)

    logger.info(
        "Location providers: autocomplete=%s geocode=%s",
        autocomplete.name,
        ",".join(p.name for p in geocoders),
    )
    return ProviderSet(
        autocomplete=autocomplete,
        geocoders=geocoders,
        reverse_geocoders=reverse_geocoders,
        details=details,
    )
