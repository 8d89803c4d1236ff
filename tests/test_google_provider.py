from unittest.mock import AsyncMock

import pytest

from location.models import GeoPoint
from location.providers.google import (
    GoogleProvider,
    parse_google_geocode,
    parse_google_place,
)
from tests.http_fakes import FakeResponse, FakeSession

GEOCODE_RESULT = {
    "formatted_address": "MG Road, Ashok Nagar, Bengaluru, Karnataka 560001, India",
    "geometry": {"location": {"lat": 12.9756, "lng": 77.6066}},
    "address_components": [
        {"long_name": "Mahatma Gandhi Road", "types": ["route"]},
        {"long_name": "Ashok Nagar", "types": ["sublocality_level_1", "sublocality"]},
        {"long_name": "Bengaluru", "types": ["locality", "political"]},
        {"long_name": "Karnataka", "types": ["administrative_area_level_1"]},
        {"long_name": "India", "types": ["country", "political"]},
        {"long_name": "560001", "types": ["postal_code"]},
    ],
}


def _patch_session(monkeypatch: pytest.MonkeyPatch, *responses) -> FakeSession:
    session = FakeSession(get_responses=list(responses))
    monkeypatch.setattr(
        "location.providers.base.get_session",
        AsyncMock(return_value=session),
    )
    return session


def _provider() -> GoogleProvider:
    return GoogleProvider(api_key="test-key", base_url="https://google.test/maps/api")


def test_parse_google_geocode_reads_components() -> None:
    result = parse_google_geocode(GEOCODE_RESULT)

    assert result.success is True
    assert result.street == "Mahatma Gandhi Road"
    assert result.locality == "Ashok Nagar"
    assert result.city == "Bengaluru"
    assert result.state == "Karnataka"
    assert result.postal_code == "560001"
    assert result.country == "India"


def test_parse_google_geocode_rejects_missing_geometry() -> None:
    result = parse_google_geocode({"formatted_address": "x"})

    assert result.success is False


def test_parse_google_place_without_name_labels_with_address() -> None:
    place = parse_google_place(
        {
            "formatted_address": "100 Feet Rd, Indiranagar, Bengaluru, India",
            "geometry": {"location": {"lat": 12.9719, "lng": 77.6412}},
            "types": ["premise"],
        },
    )

    assert place is not None
    assert place.label == "100 Feet Rd, Indiranagar, Bengaluru, India"
    assert place.type == "premise"
    assert place.country == "India"


def test_parse_google_place_ignores_non_list_types() -> None:
    place = parse_google_place(
        {
            "name": "Third Wave Coffee",
            "formatted_address": "Indiranagar, Bengaluru, India",
            "types": "cafe",
        },
    )

    assert place is not None
    assert place.type == ""


@pytest.mark.asyncio
async def test_geocode_ok(monkeypatch: pytest.MonkeyPatch) -> None:
    session = _patch_session(
        monkeypatch,
        FakeResponse(status=200, json_data={"status": "OK", "results": [GEOCODE_RESULT]}),
    )

    result = await _provider().geocode("MG Road, Bengaluru")

    assert result.success is True
    assert result.provider == "google"
    _, url, kwargs = session.requests[0]
    assert url == "https://google.test/maps/api/geocode/json"
    assert kwargs["params"]["address"] == "MG Road, Bengaluru"
    assert kwargs["params"]["key"] == "test-key"


@pytest.mark.asyncio
async def test_geocode_zero_results_is_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_session(
        monkeypatch,
        FakeResponse(status=200, json_data={"status": "ZERO_RESULTS", "results": []}),
    )

    result = await _provider().geocode("zzzz")

    assert result.success is False
    assert result.error == "Address not found"


@pytest.mark.asyncio
async def test_geocode_denied_status_fails_open(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_session(
        monkeypatch,
        FakeResponse(
            status=200,
            json_data={"status": "REQUEST_DENIED", "error_message": "bad key"},
        ),
    )

    result = await _provider().geocode("MG Road")

    assert result.success is False
    assert "REQUEST_DENIED" in result.error


@pytest.mark.asyncio
async def test_missing_key_is_not_configured(monkeypatch: pytest.MonkeyPatch) -> None:
    session = _patch_session(monkeypatch)
    provider = GoogleProvider(api_key="")

    result = await provider.geocode("MG Road")

    assert provider.is_configured is False
    assert result.success is False
    assert session.requests == []


@pytest.mark.asyncio
async def test_reverse_uses_latlng(monkeypatch: pytest.MonkeyPatch) -> None:
    session = _patch_session(
        monkeypatch,
        FakeResponse(status=200, json_data={"status": "OK", "results": [GEOCODE_RESULT]}),
    )

    result = await _provider().reverse(12.9756, 77.6066)

    assert result.success is True
    assert session.requests[0][2]["params"]["latlng"] == "12.9756,77.6066"


@pytest.mark.asyncio
async def test_text_search_maps_places(monkeypatch: pytest.MonkeyPatch) -> None:
    session = _patch_session(
        monkeypatch,
        FakeResponse(
            status=200,
            json_data={
                "status": "OK",
                "results": [
                    {
                        "name": "Third Wave Coffee",
                        "place_id": "abc123",
                        "formatted_address": "Indiranagar, Bengaluru, Karnataka, India",
                        "types": ["cafe", "food"],
                        "geometry": {"location": {"lat": 12.97, "lng": 77.64}},
                    },
                ],
            },
        ),
    )

    results = await _provider().search(
        "third wave", 5, bias=GeoPoint(lat=12.9, lon=77.6)
    )

    assert len(results) == 1
    assert results[0].label == "Third Wave Coffee"
    assert results[0].type == "cafe"
    assert results[0].country == "India"
    assert results[0].place_id == "abc123"
    params = session.requests[0][2]["params"]
    assert params["location"] == "12.9,77.6"
    assert params["radius"] == 50_000
