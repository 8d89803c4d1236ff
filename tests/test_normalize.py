import pytest

from location.models import Suggestion
from location.normalize import (
    assemble_label,
    assemble_subtitle,
    build_suggestion,
    country_matches,
    filter_by_country,
    highlight_label,
    infer_locality,
    normalize_address_key,
    resolve_name,
)


def test_label_joins_name_city_state() -> None:
    assert (
        assemble_label("Indiranagar", "Bengaluru", "Karnataka")
        == "Indiranagar, Bengaluru, Karnataka"
    )


def test_label_omits_state_equal_to_city() -> None:
    assert assemble_label("Connaught Place", "Delhi", "delhi") == "Connaught Place, Delhi"


def test_label_omits_city_equal_to_name() -> None:
    assert assemble_label("Mumbai", "mumbai", "Maharashtra") == "Mumbai, Maharashtra"


def test_label_falls_back_to_bare_name() -> None:
    assert assemble_label("Hampi", "", "") == "Hampi"
    assert assemble_label("", "", "") == ""


def test_resolve_name_prefers_name_then_city_then_sub_locality() -> None:
    assert resolve_name("Cafe", "Pune", "Baner") == "Cafe"
    assert resolve_name("", "Pune", "Baner") == "Pune"
    assert resolve_name("", "", "Baner") == "Baner"


@pytest.mark.parametrize("place_type", ["village", "hamlet", "residential", "suburb"])
def test_area_types_use_own_name_as_locality(place_type: str) -> None:
    assert infer_locality("", place_type, "Kunigal") == "Kunigal"


def test_explicit_locality_wins() -> None:
    assert infer_locality("Koramangala", "village", "Kunigal") == "Koramangala"


def test_point_of_interest_has_no_inferred_locality() -> None:
    assert infer_locality("", "restaurant", "Truffles") == ""


def test_subtitle_skips_empty_parts() -> None:
    assert assemble_subtitle("suburb", "", "Karnataka") == "suburb, Karnataka"


def test_build_suggestion_defaults_country() -> None:
    suggestion = build_suggestion(
        "photon",
        name="Indiranagar",
        city="Bengaluru",
        state="Karnataka",
        place_type="suburb",
        default_country="India",
    )

    assert suggestion.label == "Indiranagar, Bengaluru, Karnataka"
    assert suggestion.subtitle == "suburb, Bengaluru, Karnataka"
    assert suggestion.country == "India"
    assert suggestion.locality == "Indiranagar"
    assert suggestion.display_name == "Indiranagar"


def test_build_suggestion_label_uses_city_when_name_missing() -> None:
    suggestion = build_suggestion("nominatim", city="Mysuru", state="Karnataka")

    assert suggestion.label == "Mysuru, Karnataka"


def test_build_suggestion_label_falls_back_to_display_name() -> None:
    suggestion = build_suggestion(
        "google",
        display_name="100 Feet Rd, Indiranagar, Bengaluru, India",
    )

    assert suggestion.label == "100 Feet Rd, Indiranagar, Bengaluru, India"


@pytest.mark.parametrize(
    ("country", "bias", "expected"),
    [
        ("India", "IN", True),
        ("india", "in", True),
        ("France", "IN", False),
        ("United States", "US", True),
        ("IN", "IN", True),
        ("Anything", "", True),
    ],
)
def test_country_matches(country: str, bias: str, expected: bool) -> None:
    assert country_matches(country, bias) is expected


def test_filter_by_country_drops_foreign_results() -> None:
    india = Suggestion(provider="photon", label="Pune", country="India")
    france = Suggestion(provider="photon", label="Paris", country="France")

    assert filter_by_country([india, france], "IN") == [india]
    assert filter_by_country([india, france], None) == [india, france]


def test_normalize_address_key_trims_and_casefolds() -> None:
    assert normalize_address_key("  221B Baker Street, LONDON ") == (
        "221b baker street, london"
    )


def test_highlight_label_marks_first_match() -> None:
    assert (
        highlight_label("Indiranagar, Bengaluru", "nagar")
        == "Indira<mark>nagar</mark>, Bengaluru"
    )
    assert highlight_label("Pune", "xyz") == "Pune"
    assert highlight_label("Pune", "  ") == "Pune"
