"""
Shared plumbing for HTTP geocoding provider adapters.

Subclasses implement ``_search`` / ``_geocode`` / ``_reverse`` and are free
to raise. The public ``search`` / ``geocode`` / ``reverse`` wrappers catch
transport and parse failures and degrade to an empty list or a failed
``GeocodeResult``, so one broken upstream never aborts a resolution.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp
from aiolimiter import AsyncLimiter

from core.exceptions import ExternalServiceError, ProviderParseError
from core.http.circuit_breaker import CircuitBreaker, CircuitOpen
from core.http.request import request_json
from core.http.retry import retry_async
from core.http.session import get_session
from location.models import GeocodeResult, GeoPoint, Suggestion

logger = logging.getLogger(__name__)

# Errors an adapter recovers from instead of propagating.
RECOVERABLE_ERRORS: tuple[type[BaseException], ...] = (
    ExternalServiceError,
    CircuitOpen,
    aiohttp.ClientError,
    asyncio.TimeoutError,
)
# Raised by mapping code when an upstream payload has an unexpected shape.
SHAPE_ERRORS: tuple[type[BaseException], ...] = (
    KeyError,
    IndexError,
    TypeError,
    ValueError,
    AttributeError,
)


class HttpProvider:
    """Base class for adapters that fetch JSON over the shared aiohttp session."""

    name = "provider"
    supports_reverse = False

    def __init__(
        self,
        *,
        default_country: str = "India",
        timeout_seconds: float = 8.0,
        requests_per_second: float | None = None,
        breaker: CircuitBreaker | None = None,
    ) -> None:
        self.default_country = default_country
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._limiter = (
            AsyncLimiter(1, 1.0 / requests_per_second) if requests_per_second else None
        )
        self._breaker = breaker or CircuitBreaker(self.name)

    @property
    def is_configured(self) -> bool:
        return True

    async def _get_json(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        service_name: str | None = None,
        none_on: tuple[int, ...] | None = None,
    ) -> Any:
        self._breaker.check()
        try:
            data = await self._fetch(
                url,
                params=params,
                headers=headers,
                service_name=service_name or self.name,
                none_on=none_on,
            )
        except Exception:
            self._breaker.record_failure()
            raise
        self._breaker.record_success()
        return data

    @retry_async()
    async def _fetch(
        self,
        url: str,
        *,
        params: dict[str, Any] | None,
        headers: dict[str, str] | None,
        service_name: str,
        none_on: tuple[int, ...] | None,
    ) -> Any:
        session = await get_session()
        if self._limiter is None:
            return await request_json(
                "GET",
                url,
                session=session,
                params=params,
                headers=headers,
                service_name=service_name,
                none_on=none_on,
                timeout=self._timeout,
            )
        async with self._limiter:
            return await request_json(
                "GET",
                url,
                session=session,
                params=params,
                headers=headers,
                service_name=service_name,
                none_on=none_on,
                timeout=self._timeout,
            )

    async def search(
        self,
        query: str,
        limit: int = 5,
        *,
        bias: GeoPoint | None = None,
        country_bias: str | None = None,
        language: str = "en",
    ) -> list[Suggestion]:
        results = await self.try_search(
            query,
            limit,
            bias=bias,
            country_bias=country_bias,
            language=language,
        )
        return results if results is not None else []

    async def try_search(
        self,
        query: str,
        limit: int = 5,
        *,
        bias: GeoPoint | None = None,
        country_bias: str | None = None,
        language: str = "en",
    ) -> list[Suggestion] | None:
        """Like ``search`` but returns None when the upstream call failed."""
        try:
            return await self._search(
                query,
                limit,
                bias=bias,
                country_bias=country_bias,
                language=language,
            )
        except RECOVERABLE_ERRORS as exc:
            logger.warning("%s search error for %r: %s", self.name, query, exc)
            return None
        except SHAPE_ERRORS as exc:
            logger.warning("%s search returned an unexpected payload: %s", self.name, exc)
            return None

    async def geocode(self, address: str) -> GeocodeResult:
        if not self.is_configured:
            return GeocodeResult.failure(f"{self.name} is not configured", provider=self.name)
        try:
            return await self._geocode(address)
        except RECOVERABLE_ERRORS as exc:
            logger.warning("%s geocode error for %r: %s", self.name, address, exc)
            return GeocodeResult.failure(str(exc), provider=self.name)
        except SHAPE_ERRORS as exc:
            logger.warning("%s geocode returned an unexpected payload: %s", self.name, exc)
            return GeocodeResult.failure(
                f"{self.name} returned an unexpected payload", provider=self.name
            )

    async def reverse(self, lat: float, lon: float) -> GeocodeResult:
        if not (self.supports_reverse and self.is_configured):
            return GeocodeResult.failure(
                f"{self.name} does not support reverse geocoding", provider=self.name
            )
        try:
            return await self._reverse(lat, lon)
        except RECOVERABLE_ERRORS as exc:
            logger.warning("%s reverse error for %s,%s: %s", self.name, lat, lon, exc)
            return GeocodeResult.failure(str(exc), provider=self.name)
        except SHAPE_ERRORS as exc:
            logger.warning("%s reverse returned an unexpected payload: %s", self.name, exc)
            return GeocodeResult.failure(
                f"{self.name} returned an unexpected payload", provider=self.name
            )

    async def _search(
        self,
        query: str,
        limit: int,
        *,
        bias: GeoPoint | None,
        country_bias: str | None,
        language: str,
    ) -> list[Suggestion]:
        raise NotImplementedError

    async def _geocode(self, address: str) -> GeocodeResult:
        raise NotImplementedError

    async def _reverse(self, lat: float, lon: float) -> GeocodeResult:
        raise NotImplementedError

    def _expect(self, condition: bool, message: str) -> None:
        if not condition:
            raise ProviderParseError(f"{self.name}: {message}")
