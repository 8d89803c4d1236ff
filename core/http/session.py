"""HTTP session management for aiohttp.

One ClientSession is shared by every provider adapter in the process. It is
recreated when the running event loop changes (test runs, reloads) or after
it has been closed.
"""

from __future__ import annotations

import asyncio
import logging

import aiohttp

from core.constants import (
    HTTP_CONNECTION_LIMIT,
    HTTP_TIMEOUT_CONNECT,
    HTTP_TIMEOUT_SOCK_READ,
    HTTP_TIMEOUT_TOTAL,
    HTTP_USER_AGENT,
)

logger = logging.getLogger(__name__)


class SessionState:
    """State container for the aiohttp session to avoid bare module globals."""

    session: aiohttp.ClientSession | None = None


def _bound_to_other_loop(session: aiohttp.ClientSession) -> bool:
    try:
        current_loop = asyncio.get_running_loop()
    except RuntimeError:
        return False
    return session.loop is not current_loop or session.loop.is_closed()


async def get_session() -> aiohttp.ClientSession:
    """Get or create the shared aiohttp ClientSession.

    Returns:
        Shared aiohttp ClientSession bound to the running event loop.
    """
    session = SessionState.session
    if session is not None and not session.closed and _bound_to_other_loop(session):
        logger.info("Detected event loop change. Creating new session.")
        try:
            if not session.loop.is_closed():
                await session.close()
        except Exception as e:
            logger.warning("Error closing stale session: %s", e)
        SessionState.session = None

    if SessionState.session is None or SessionState.session.closed:
        timeout = aiohttp.ClientTimeout(
            total=HTTP_TIMEOUT_TOTAL,
            connect=HTTP_TIMEOUT_CONNECT,
            sock_read=HTTP_TIMEOUT_SOCK_READ,
        )
        connector = aiohttp.TCPConnector(
            limit=HTTP_CONNECTION_LIMIT,
            enable_cleanup_closed=True,
        )
        SessionState.session = aiohttp.ClientSession(
            timeout=timeout,
            headers={
                "User-Agent": HTTP_USER_AGENT,
                "Accept": "application/json",
            },
            connector=connector,
        )
        logger.debug("Created new aiohttp session")

    return SessionState.session


async def cleanup_session() -> None:
    """Close the shared session."""
    if SessionState.session and not SessionState.session.closed:
        try:
            await SessionState.session.close()
            logger.info("Closed aiohttp session")
        except Exception as e:
            logger.warning("Error closing session: %s", e)

    SessionState.session = None
