"""
Photon (komoot) adapter.

Photon answers free-text queries with a GeoJSON FeatureCollection built from
OpenStreetMap data. It is the default autocomplete source.
Docs: https://photon.readthedocs.io/en/latest/api.html
"""

from __future__ import annotations

import logging
from typing import Any

from config import PHOTON_BASE_URL
from location.models import GeocodeResult, GeoPoint, Suggestion
from location.normalize import build_suggestion, clean_text, first_present, to_float
from location.providers.base import HttpProvider

logger = logging.getLogger(__name__)


def parse_photon_feature(
    feature: Any, *, default_country: str = "India"
) -> Suggestion | None:
    """Map one Photon GeoJSON feature into a Suggestion."""
    if not isinstance(feature, dict):
        return None
    geometry = feature.get("geometry") or {}
    coordinates = geometry.get("coordinates") if isinstance(geometry, dict) else None
    lon = lat = None
    if isinstance(coordinates, list) and len(coordinates) >= 2:
        lon, lat = to_float(coordinates[0]), to_float(coordinates[1])

    props = feature.get("properties") or {}
    if not isinstance(props, dict):
        props = {}

    # osm_value carries the granular subtype ("village", "restaurant")
    place_type = first_present(props.get("osm_value"), props.get("type"), props.get("osm_key"))
    city = first_present(props.get("city"), props.get("town"), props.get("county"))
    suburb = clean_text(props.get("suburb"))

    return build_suggestion(
        "photon",
        name=clean_text(props.get("name")),
        city=city,
        state=clean_text(props.get("state")),
        sub_locality=suburb,
        explicit_locality=first_present(
            suburb, props.get("neighbourhood"), props.get("district")
        ),
        place_type=place_type,
        country=clean_text(props.get("country")),
        default_country=default_country,
        latitude=lat,
        longitude=lon,
        street=clean_text(props.get("street")),
        postal_code=clean_text(props.get("postcode")),
        osm_id=props.get("osm_id"),
        osm_type=clean_text(props.get("osm_type")) or None,
    )


class PhotonProvider(HttpProvider):
    name = "photon"

    def __init__(self, *, base_url: str = PHOTON_BASE_URL, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._search_url = f"{base_url.rstrip('/')}/api/"

    async def _search(
        self,
        query: str,
        limit: int,
        *,
        bias: GeoPoint | None,
        country_bias: str | None,
        language: str,
    ) -> list[Suggestion]:
        params: dict[str, Any] = {
            "q": query,
            "lang": language,
            "limit": str(limit),
        }
        if bias is not None:
            params["lat"] = str(bias.lat)
            params["lon"] = str(bias.lon)

        data = await self._get_json(
            self._search_url, params=params, service_name="Photon search"
        )
        self._expect(isinstance(data, dict), "expected a FeatureCollection object")
        features = data.get("features") or []
        self._expect(isinstance(features, list), "features is not a list")

        suggestions = []
        for feature in features:
            suggestion = parse_photon_feature(
                feature, default_country=self.default_country
            )
            if suggestion is not None:
                suggestions.append(suggestion)
        logger.debug("Photon returned %d suggestions for %r", len(suggestions), query)
        return suggestions

    async def _geocode(self, address: str) -> GeocodeResult:
        suggestions = await self._search(
            address, 1, bias=None, country_bias=None, language="en"
        )
        for suggestion in suggestions:
            if suggestion.latitude is None or suggestion.longitude is None:
                continue
            return GeocodeResult(
                success=True,
                latitude=suggestion.latitude,
                longitude=suggestion.longitude,
                formatted_address=suggestion.label or address,
                street=suggestion.street,
                locality=suggestion.locality,
                city=suggestion.city,
                state=suggestion.state,
                postal_code=suggestion.postal_code,
                country=suggestion.country,
                provider=self.name,
            )
        return GeocodeResult.failure("Address not found", provider=self.name)
