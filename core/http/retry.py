"""Retry utilities for async HTTP operations.

This module provides retry decorators using tenacity for resilient HTTP calls.
"""

from __future__ import annotations

import asyncio
import logging

from aiohttp import (
    ClientConnectorError,
    ClientError,
    ServerDisconnectedError,
)
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)


def retry_async(
    max_retries: int = 1,
    retry_delay: float = 0.5,
    backoff_factor: float = 2.0,
    retry_exceptions: tuple = (
        ClientConnectorError,
        ServerDisconnectedError,
        ClientError,
        asyncio.TimeoutError,
    ),
):
    """Factory that returns a tenacity retry decorator configured with provided parameters.

    Only transport-level aiohttp failures are retried. HTTP status errors
    surface as ``ProviderTransportError`` from ``request_json`` and are not
    retried.

    Args:
        max_retries: Maximum number of retry attempts (in addition to the first attempt).
        retry_delay: Initial delay between retries in seconds (used as multiplier).
        backoff_factor: Exponential backoff base for increasing delay between retries.
        retry_exceptions: Tuple of exception types that should trigger a retry.

    Returns:
        A tenacity retry decorator configured with the specified parameters.
    """
    return retry(
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_exponential(multiplier=retry_delay, exp_base=backoff_factor),
        retry=retry_if_exception_type(retry_exceptions),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
