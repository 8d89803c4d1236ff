"""
Location API: autocomplete, geocoding, reverse geocoding and place details.

The resolution endpoints sit behind the fixed-window rate limiter so a
rejected request never reaches an upstream provider.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request

from core.api import api_route
from core.exceptions import ResourceNotFoundException
from location.normalize import highlight_label
from location.ratelimit import enforce_rate_limit
from location.services.location_service import LocationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/location", tags=["location"])


def get_location_service(request: Request) -> LocationService:
    return request.app.state.location_service


ServiceDep = Annotated[LocationService, Depends(get_location_service)]


@router.get(
    "/autocomplete",
    response_model=dict[str, Any],
    dependencies=[Depends(enforce_rate_limit)],
)
@api_route(logger)
async def autocomplete(
    service: ServiceDep,
    q: Annotated[str, Query(description="Free-text place query")],
    limit: Annotated[
        int,
        Query(ge=1, le=20, description="Maximum number of suggestions"),
    ] = 10,
    lang: Annotated[str, Query(description="Result language")] = "en",
    lat: Annotated[
        float | None,
        Query(ge=-90, le=90, description="Latitude to bias results toward"),
    ] = None,
    lon: Annotated[
        float | None,
        Query(ge=-180, le=180, description="Longitude to bias results toward"),
    ] = None,
    country: Annotated[
        str | None,
        Query(description="Country bias, e.g. IN"),
    ] = None,
):
    """Ranked place suggestions with the matched text wrapped in ``<mark>``."""
    suggestions = await service.search(
        q,
        limit,
        language=lang,
        lat=lat,
        lon=lon,
        country_bias=country,
    )
    return {
        "suggestions": [
            s.model_copy(
                update={"highlight_label": highlight_label(s.label, q)}
            ).model_dump(by_alias=True)
            for s in suggestions
        ],
    }


@router.get(
    "/geocode",
    response_model=dict[str, Any],
    dependencies=[Depends(enforce_rate_limit)],
)
@api_route(logger)
async def geocode(
    service: ServiceDep,
    address: Annotated[str, Query(min_length=1, description="Address to resolve")],
):
    result = await service.geocode_address(address)
    return result.model_dump(by_alias=True)


@router.get(
    "/reverse",
    response_model=dict[str, Any],
    dependencies=[Depends(enforce_rate_limit)],
)
@api_route(logger)
async def reverse_geocode(
    service: ServiceDep,
    lat: Annotated[float, Query(ge=-90, le=90)],
    lon: Annotated[float, Query(ge=-180, le=180)],
):
    result = await service.reverse_geocode(lat, lon)
    return result.model_dump(by_alias=True)


@router.get("/details", response_model=dict[str, Any])
@api_route(logger)
async def place_details(
    service: ServiceDep,
    osm_id: Annotated[str, Query(description="OpenStreetMap id")],
    osm_type: Annotated[str, Query(description="node, way or relation (N/W/R)")],
):
    place = await service.place_details(osm_id, osm_type)
    if place is None:
        msg = f"Place {osm_type}{osm_id} not found"
        raise ResourceNotFoundException(msg)
    return {"place": place.model_dump(by_alias=True)}
