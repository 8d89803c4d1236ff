"""Global constants for the core package.

This module contains shared constants used across the application core.
"""

from typing import Final

# HTTP Client Constants
HTTP_CONNECTION_LIMIT: Final[int] = 20
HTTP_TIMEOUT_CONNECT: Final[float] = 5.0
HTTP_TIMEOUT_SOCK_READ: Final[float] = 10.0
HTTP_TIMEOUT_TOTAL: Final[float] = 15.0
HTTP_USER_AGENT: Final[str] = "AasPaas-App/1.0"

# Query cache
DEFAULT_CACHE_TTL_SECONDS: Final[float] = 5 * 60
DEFAULT_DETAILS_CACHE_TTL_SECONDS: Final[float] = 30 * 60

# Ingress rate limiting
DEFAULT_RATE_WINDOW_MS: Final[int] = 60_000
DEFAULT_RATE_PER_CLIENT_MAX: Final[int] = 120
DEFAULT_RATE_GLOBAL_MAX: Final[int] = 600
DEFAULT_MAX_TRACKED_CLIENTS: Final[int] = 10_000
