from unittest.mock import AsyncMock

import pytest

from location.models import GeoPoint
from location.providers.photon import PhotonProvider, parse_photon_feature
from tests.http_fakes import FakeResponse, FakeSession


def _feature(**props):
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [77.6408, 12.9784]},
        "properties": props,
    }


def test_parse_photon_feature_maps_fields() -> None:
    suggestion = parse_photon_feature(
        _feature(
            name="Indiranagar",
            city="Bengaluru",
            state="Karnataka",
            country="India",
            osm_value="suburb",
            osm_key="place",
            osm_id=123,
            osm_type="R",
            postcode="560038",
        ),
    )

    assert suggestion is not None
    assert suggestion.provider == "photon"
    assert suggestion.label == "Indiranagar, Bengaluru, Karnataka"
    assert suggestion.type == "suburb"
    assert suggestion.locality == "Indiranagar"
    assert suggestion.latitude == pytest.approx(12.9784)
    assert suggestion.longitude == pytest.approx(77.6408)
    assert suggestion.postal_code == "560038"
    assert suggestion.osm_id == 123


def test_parse_photon_feature_village_is_its_own_locality() -> None:
    suggestion = parse_photon_feature(
        _feature(name="Kunigal", county="Tumakuru", state="Karnataka", osm_value="village"),
    )

    assert suggestion.locality == "Kunigal"
    assert suggestion.city == "Tumakuru"
    assert suggestion.country == "India"


def test_parse_photon_feature_prefers_suburb_as_locality() -> None:
    suggestion = parse_photon_feature(
        _feature(
            name="Toit",
            suburb="Indiranagar",
            city="Bengaluru",
            osm_value="pub",
        ),
    )

    assert suggestion.locality == "Indiranagar"
    assert suggestion.subtitle == "pub, Bengaluru"


def test_parse_photon_feature_tolerates_missing_geometry() -> None:
    suggestion = parse_photon_feature({"properties": {"name": "Somewhere"}})

    assert suggestion.latitude is None
    assert suggestion.longitude is None
    assert suggestion.label == "Somewhere"
    assert parse_photon_feature("garbage") is None


@pytest.mark.asyncio
async def test_photon_search_sends_bias_and_normalizes(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    response = FakeResponse(
        status=200,
        json_data={
            "type": "FeatureCollection",
            "features": [
                _feature(name="Indiranagar", city="Bengaluru", osm_value="suburb"),
                _feature(name="Indiranagar Club", city="Bengaluru", osm_value="club"),
            ],
        },
    )
    session = FakeSession(get_responses=[response])
    monkeypatch.setattr(
        "location.providers.base.get_session",
        AsyncMock(return_value=session),
    )

    provider = PhotonProvider(base_url="https://photon.test")
    results = await provider.search(
        "indiranagar", 5, bias=GeoPoint(lat=12.97, lon=77.59), language="en"
    )

    assert [s.label for s in results] == [
        "Indiranagar, Bengaluru",
        "Indiranagar Club, Bengaluru",
    ]
    method, url, kwargs = session.requests[0]
    assert method == "GET"
    assert url == "https://photon.test/api/"
    assert kwargs["params"]["q"] == "indiranagar"
    assert kwargs["params"]["limit"] == "5"
    assert kwargs["params"]["lat"] == "12.97"
    assert kwargs["params"]["lon"] == "77.59"


@pytest.mark.asyncio
async def test_photon_search_fails_open_on_http_error(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    session = FakeSession(get_responses=[FakeResponse(status=503, text_data="down")])
    monkeypatch.setattr(
        "location.providers.base.get_session",
        AsyncMock(return_value=session),
    )

    results = await PhotonProvider(base_url="https://photon.test").search("pune")

    assert results == []


@pytest.mark.asyncio
async def test_photon_search_fails_open_on_unexpected_shape(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    session = FakeSession(get_responses=[FakeResponse(status=200, json_data=["nope"])])
    monkeypatch.setattr(
        "location.providers.base.get_session",
        AsyncMock(return_value=session),
    )

    results = await PhotonProvider(base_url="https://photon.test").search("pune")

    assert results == []


@pytest.mark.asyncio
async def test_photon_geocode_uses_first_feature(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    response = FakeResponse(
        status=200,
        json_data={"features": [_feature(name="Baner", city="Pune", osm_value="suburb")]},
    )
    session = FakeSession(get_responses=[response])
    monkeypatch.setattr(
        "location.providers.base.get_session",
        AsyncMock(return_value=session),
    )

    result = await PhotonProvider(base_url="https://photon.test").geocode("Baner, Pune")

    assert result.success is True
    assert result.provider == "photon"
    assert result.formatted_address == "Baner, Pune"
    assert session.requests[0][2]["params"]["limit"] == "1"


@pytest.mark.asyncio
async def test_photon_try_search_separates_failure_from_no_hits(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    session = FakeSession(
        get_responses=[
            FakeResponse(status=503, text_data="down"),
            FakeResponse(
                status=200,
                json_data={"type": "FeatureCollection", "features": []},
            ),
        ],
    )
    monkeypatch.setattr(
        "location.providers.base.get_session",
        AsyncMock(return_value=session),
    )
    provider = PhotonProvider(base_url="https://photon.test")

    assert await provider.try_search("pune") is None
    assert await provider.try_search("pune") == []
