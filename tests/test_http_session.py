import pytest

from core.constants import HTTP_USER_AGENT
from core.http.session import SessionState, cleanup_session, get_session


@pytest.mark.asyncio
async def test_get_session_reuses_open_session() -> None:
    first = await get_session()
    second = await get_session()

    assert first is second
    assert first.headers["User-Agent"] == HTTP_USER_AGENT

    await cleanup_session()


@pytest.mark.asyncio
async def test_cleanup_session_closes_and_resets() -> None:
    session = await get_session()

    await cleanup_session()

    assert session.closed
    assert SessionState.session is None


@pytest.mark.asyncio
async def test_get_session_replaces_closed_session() -> None:
    first = await get_session()
    await first.close()

    second = await get_session()

    assert second is not first
    assert not second.closed
    await cleanup_session()
