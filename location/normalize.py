"""
Address heuristics shared by every provider adapter.

Each adapter pulls name, city, state, suburb and place type out of its own
upstream schema and hands them to :func:`build_suggestion`, which applies
the naming, locality, label and subtitle rules in one place.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from location.models import Suggestion

# Place types whose own name is the locality when no suburb is given.
AREA_PLACE_TYPES = frozenset({"village", "hamlet", "residential", "suburb"})

# Territory code -> country name as returned by upstream providers.
COUNTRY_NAMES: dict[str, str] = {
    "IN": "india",
    "US": "united states",
    "USA": "united states",
    "GB": "united kingdom",
    "UK": "united kingdom",
    "FR": "france",
    "DE": "germany",
    "ES": "spain",
    "IT": "italy",
    "NL": "netherlands",
    "CA": "canada",
    "AU": "australia",
    "NP": "nepal",
    "BD": "bangladesh",
    "LK": "sri lanka",
    "PK": "pakistan",
    "AE": "united arab emirates",
    "SG": "singapore",
}


def clean_text(value: Any) -> str:
    """Return a stripped string for str/number values, else an empty string."""
    if isinstance(value, bool) or value is None:
        return ""
    if isinstance(value, (str, int, float)):
        return str(value).strip()
    return ""


def to_float(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def first_present(*values: Any) -> str:
    for value in values:
        text = clean_text(value)
        if text:
            return text
    return ""


def resolve_name(name: str, city: str, sub_locality: str) -> str:
    """Explicit name, then city, then sub-locality."""
    return first_present(name, city, sub_locality)


def infer_locality(explicit_locality: str, place_type: str, name: str) -> str:
    if explicit_locality:
        return explicit_locality
    if place_type.lower() in AREA_PLACE_TYPES:
        return name
    return ""


def assemble_label(name: str, city: str, state: str) -> str:
    parts: list[str] = []
    if name:
        parts.append(name)
    if city and city.lower() != name.lower():
        parts.append(city)
    if state and state.lower() != city.lower():
        parts.append(state)
    return ", ".join(parts) or name


def assemble_subtitle(place_type: str, city: str, state: str) -> str:
    return ", ".join(part for part in (place_type, city, state) if part)


def build_suggestion(
    provider: str,
    *,
    name: str = "",
    city: str = "",
    state: str = "",
    sub_locality: str = "",
    explicit_locality: str = "",
    place_type: str = "",
    country: str = "",
    default_country: str = "India",
    latitude: float | None = None,
    longitude: float | None = None,
    street: str = "",
    postal_code: str = "",
    display_name: str = "",
    osm_id: int | str | None = None,
    osm_type: str | None = None,
    place_id: str | None = None,
) -> Suggestion:
    resolved_name = resolve_name(name, city, sub_locality)
    locality = infer_locality(explicit_locality, place_type, resolved_name)
    display = display_name or resolved_name
    return Suggestion(
        provider=provider,
        display_name=display,
        label=assemble_label(resolved_name, city, state) or display,
        subtitle=assemble_subtitle(place_type, city, state),
        latitude=latitude,
        longitude=longitude,
        street=street,
        locality=locality,
        city=city,
        state=state,
        postal_code=postal_code,
        country=country or default_country,
        type=place_type,
        osm_id=osm_id,
        osm_type=osm_type,
        place_id=place_id,
    )


def country_matches(country: str, country_bias: str) -> bool:
    bias = country_bias.strip()
    if not bias:
        return True
    normalized = country.strip().lower()
    accepted = {bias.lower()}
    mapped = COUNTRY_NAMES.get(bias.upper())
    if mapped:
        accepted.add(mapped)
    return normalized in accepted


def filter_by_country(
    suggestions: Iterable[Suggestion], country_bias: str | None
) -> list[Suggestion]:
    """Drop suggestions whose normalized country does not match the bias."""
    if not country_bias:
        return list(suggestions)
    return [s for s in suggestions if country_matches(s.country, country_bias)]


def normalize_address_key(address: str) -> str:
    return address.strip().casefold()


def highlight_label(label: str, query: str) -> str:
    """Wrap the first case-insensitive occurrence of ``query`` in ``<mark>``."""
    needle = query.strip()
    if not needle:
        return label
    idx = label.lower().find(needle.lower())
    if idx == -1:
        return label
    end = idx + len(needle)
    return f"{label[:idx]}<mark>{label[idx:end]}</mark>{label[end:]}"
