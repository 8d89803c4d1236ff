import json

import pytest

from core.exceptions import ProviderParseError, ProviderTransportError
from core.http.request import request_json
from tests.http_fakes import FakeResponse, FakeSession


class _BrokenJsonResponse(FakeResponse):
    async def json(self):
        raise json.JSONDecodeError("Expecting value", "<html>", 0)


@pytest.mark.asyncio
async def test_request_json_returns_payload() -> None:
    session = FakeSession(get_responses=[FakeResponse(status=200, json_data={"ok": 1})])

    data = await request_json(
        "GET",
        "https://provider.test/search",
        session=session,
        params={"q": "pune"},
        service_name="Provider",
    )

    assert data == {"ok": 1}
    assert session.requests[0][2]["params"] == {"q": "pune"}


@pytest.mark.asyncio
async def test_request_json_none_on_status() -> None:
    session = FakeSession(get_responses=[FakeResponse(status=404)])

    data = await request_json(
        "GET",
        "https://provider.test/reverse",
        session=session,
        none_on=(404,),
    )

    assert data is None


@pytest.mark.asyncio
async def test_request_json_429_carries_retry_after() -> None:
    session = FakeSession(
        get_responses=[FakeResponse(status=429, headers={"Retry-After": "7"})],
    )

    with pytest.raises(ProviderTransportError) as raised:
        await request_json("GET", "https://provider.test", session=session)

    assert raised.value.details["retry_after"] == 7


@pytest.mark.asyncio
async def test_request_json_unexpected_status_includes_body() -> None:
    session = FakeSession(get_responses=[FakeResponse(status=500, text_data="boom")])

    with pytest.raises(ProviderTransportError) as raised:
        await request_json(
            "GET", "https://provider.test", session=session, service_name="Photon"
        )

    assert raised.value.message == "Photon error: 500"
    assert raised.value.details["body"] == "boom"


@pytest.mark.asyncio
async def test_request_json_invalid_body_is_parse_error() -> None:
    session = FakeSession(get_responses=[_BrokenJsonResponse(status=200)])

    with pytest.raises(ProviderParseError):
        await request_json("GET", "https://provider.test", session=session)
