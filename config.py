"""Centralized configuration for environment variables and external APIs.

This module is the single source of truth for configuration used across the
application. Import constants from here rather than calling os.getenv directly
in multiple places.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Final

from dotenv import load_dotenv

from core.constants import (
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_DETAILS_CACHE_TTL_SECONDS,
    DEFAULT_MAX_TRACKED_CLIENTS,
    DEFAULT_RATE_GLOBAL_MAX,
    DEFAULT_RATE_PER_CLIENT_MAX,
    DEFAULT_RATE_WINDOW_MS,
)

# Load environment variables from .env if present
load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name, "")
    items = tuple(item.strip().lower() for item in raw.split(",") if item.strip())
    return items or default


# --- Provider endpoints ---
PHOTON_BASE_URL: Final[str] = os.getenv("PHOTON_BASE_URL", "https://photon.komoot.io")
NOMINATIM_BASE_URL: Final[str] = os.getenv(
    "NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org"
)
NOMINATIM_USER_AGENT: Final[str] = os.getenv("NOMINATIM_USER_AGENT", "AasPaas-App/1.0")
GOOGLE_MAPS_BASE_URL: Final[str] = "https://maps.googleapis.com/maps/api"

# --- Provider credentials ---
MAPPLS_API_KEY: Final[str] = os.getenv("MAPPLS_API_KEY", "")
MAPPLS_GEOCODE_URL: Final[str] = os.getenv("MAPPLS_GEOCODE_URL", "")
GOOGLE_MAPS_API_KEY: Final[str] = os.getenv("GOOGLE_MAPS_API_KEY", "")

DEFAULT_COUNTRY: Final[str] = os.getenv("LOCATION_DEFAULT_COUNTRY", "India")
DEFAULT_COUNTRY_BIAS: Final[str] = os.getenv("LOCATION_COUNTRY_BIAS", "IN")

DEFAULT_GEOCODE_PRIORITY: Final[tuple[str, ...]] = ("mappls", "google", "nominatim")
DEFAULT_LOCALITY_TYPES: Final[tuple[str, ...]] = (
    "village",
    "hamlet",
    "suburb",
    "neighbourhood",
    "residential",
    "district",
    "locality",
    "quarter",
)


@dataclass(frozen=True)
class LocationSettings:
    """Runtime settings for the location resolution service.

    Build from the environment with :meth:`from_env`, or construct directly
    in tests to get isolated limits and TTLs.
    """

    rate_window_ms: int = DEFAULT_RATE_WINDOW_MS
    rate_per_client_max: int = DEFAULT_RATE_PER_CLIENT_MAX
    rate_global_max: int = DEFAULT_RATE_GLOBAL_MAX
    max_tracked_clients: int = DEFAULT_MAX_TRACKED_CLIENTS
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS
    details_cache_ttl_seconds: float = DEFAULT_DETAILS_CACHE_TTL_SECONDS
    cache_max_entries: int | None = None
    provider_timeout_seconds: float = 8.0
    autocomplete_provider: str = "photon"
    geocode_priority: tuple[str, ...] = DEFAULT_GEOCODE_PRIORITY
    locality_types: tuple[str, ...] = DEFAULT_LOCALITY_TYPES
    default_country: str = DEFAULT_COUNTRY
    default_country_bias: str | None = DEFAULT_COUNTRY_BIAS
    nominatim_requests_per_second: float = 1.0
    photon_base_url: str = PHOTON_BASE_URL
    nominatim_base_url: str = NOMINATIM_BASE_URL
    nominatim_user_agent: str = NOMINATIM_USER_AGENT
    mappls_api_key: str = MAPPLS_API_KEY
    mappls_geocode_url: str = MAPPLS_GEOCODE_URL
    google_maps_api_key: str = GOOGLE_MAPS_API_KEY
    cors_origins: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_env(cls) -> LocationSettings:
        max_entries = _env_int("LOCATION_CACHE_MAX_ENTRIES", 0)
        return cls(
            rate_window_ms=_env_int("LOCATION_RL_WINDOW_MS", DEFAULT_RATE_WINDOW_MS),
            rate_per_client_max=_env_int("LOCATION_RL_MAX", DEFAULT_RATE_PER_CLIENT_MAX),
            rate_global_max=_env_int("LOCATION_RL_GLOBAL_MAX", DEFAULT_RATE_GLOBAL_MAX),
            max_tracked_clients=_env_int(
                "LOCATION_RL_MAX_TRACKED_CLIENTS", DEFAULT_MAX_TRACKED_CLIENTS
            ),
            cache_ttl_seconds=_env_int(
                "LOCATION_CACHE_TTL_MS", int(DEFAULT_CACHE_TTL_SECONDS * 1000)
            )
            / 1000,
            details_cache_ttl_seconds=_env_int(
                "LOCATION_DETAILS_CACHE_TTL_MS",
                int(DEFAULT_DETAILS_CACHE_TTL_SECONDS * 1000),
            )
            / 1000,
            cache_max_entries=max_entries or None,
            provider_timeout_seconds=_env_float("LOCATION_PROVIDER_TIMEOUT_S", 8.0),
            autocomplete_provider=os.getenv(
                "LOCATION_AUTOCOMPLETE_PROVIDER", "photon"
            ).strip().lower()
            or "photon",
            geocode_priority=_env_list(
                "LOCATION_GEOCODE_PRIORITY", DEFAULT_GEOCODE_PRIORITY
            ),
            locality_types=_env_list("LOCATION_LOCALITY_TYPES", DEFAULT_LOCALITY_TYPES),
            default_country=DEFAULT_COUNTRY,
            default_country_bias=DEFAULT_COUNTRY_BIAS or None,
            nominatim_requests_per_second=_env_float("NOMINATIM_MAX_RPS", 1.0),
            cors_origins=tuple(
                origin.strip()
                for origin in os.getenv("CORS_ALLOWED_ORIGINS", "").split(",")
                if origin.strip()
            ),
        )


__all__ = [
    "DEFAULT_COUNTRY",
    "DEFAULT_COUNTRY_BIAS",
    "DEFAULT_GEOCODE_PRIORITY",
    "DEFAULT_LOCALITY_TYPES",
    "GOOGLE_MAPS_API_KEY",
    "GOOGLE_MAPS_BASE_URL",
    "MAPPLS_API_KEY",
    "MAPPLS_GEOCODE_URL",
    "NOMINATIM_BASE_URL",
    "NOMINATIM_USER_AGENT",
    "PHOTON_BASE_URL",
    "LocationSettings",
]
