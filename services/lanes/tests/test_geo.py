"""
Tests for services.lanes.geo (names, states, distance)

Covers:
  1. Market suffix, directional and abbreviation normalisation
  2. Dedup keys treat spelling variants as the same city
  3. Market name cleaning and St/Saint variants for the precise fetch
  4. State / province code normalisation
  5. Haversine distances and bounding boxes
"""

import math

import pytest

from services.lanes.geo.distance import (
    EARTH_RADIUS_MILES,
    BoundingBox,
    haversine_miles,
)
from services.lanes.geo.names import (
    candidate_key,
    clean_market_name,
    market_city_variants,
    normalize_city_name,
    overlay_key,
)
from services.lanes.geo.states import market_state, normalize_state_code


# ---------------------------------------------------------------------------
# normalize_city_name
# ---------------------------------------------------------------------------

class TestNormalizeCityName:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Chicago Mkt", "chicago"),
            ("Chicago Market", "chicago"),
            ("chicago mkt  ", "chicago"),
            ("Ft. Wayne", "fortwayne"),
            ("Fort Wayne", "fortwayne"),
            ("N. Platte", "northplatte"),
            ("W Memphis", "westmemphis"),
            ("St Louis Market", "saintlouis"),
            ("Saint Louis", "saintlouis"),
            ("Mt. Vernon", "mountvernon"),
            ("Winston-Salem", "winstonsalem"),
            ("O'Fallon", "ofallon"),
        ],
    )
    def test_normalises(self, raw, expected):
        assert normalize_city_name(raw) == expected

    def test_words_starting_with_abbreviations_untouched(self):
        assert normalize_city_name("Stuart") == "stuart"
        assert normalize_city_name("Fortuna") == "fortuna"
        assert normalize_city_name("Northport") == "northport"

    def test_empty_and_none(self):
        assert normalize_city_name("") == ""
        assert normalize_city_name(None) == ""

    def test_market_name_matches_its_city(self):
        assert normalize_city_name("Ft Wayne Mkt") == normalize_city_name("Fort Wayne")


class TestKeys:
    def test_candidate_key_collapses_variants(self):
        assert candidate_key("St. Louis", "missouri") == candidate_key("Saint Louis", "MO")

    def test_candidate_key_keeps_states_apart(self):
        assert candidate_key("Portland", "OR") != candidate_key("Portland", "ME")

    def test_overlay_key_format(self):
        assert overlay_key(" Redwood ", "or") == "REDWOOD, OR"


# ---------------------------------------------------------------------------
# Market names
# ---------------------------------------------------------------------------

class TestMarketNames:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Chattanooga Mkt", "Chattanooga"),
            ("Ft Wayne Mkt", "Fort Wayne"),
            ("N. Platte Market", "North Platte"),
            ("St Louis Mkt", "St Louis"),
            (None, ""),
        ],
    )
    def test_clean_market_name(self, raw, expected):
        assert clean_market_name(raw) == expected

    def test_saint_variants(self):
        assert market_city_variants("St Louis") == ["St Louis", "St. Louis", "Saint Louis"]

    def test_no_variants_for_plain_names(self):
        assert market_city_variants("Chattanooga") == ["Chattanooga"]


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------

class TestStates:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("TX", "TX"),
            (" tx ", "TX"),
            ("Texas", "TX"),
            ("new jersey", "NJ"),
            ("Ontario", "ON"),
            ("Britsh Columbia", "BR"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_normalize_state_code(self, raw, expected):
        assert normalize_state_code(raw) == expected

    def test_market_state(self):
        assert market_state("TN_CHA") == "TN"
        assert market_state("ON_TOR") == "ON"

    @pytest.mark.parametrize("code", [None, "", "UNKNOWN", "TNCHA", "t1_ABC"])
    def test_market_state_without_prefix(self, code):
        assert market_state(code) is None


# ---------------------------------------------------------------------------
# Distance
# ---------------------------------------------------------------------------

class TestHaversine:
    def test_zero_distance(self):
        assert haversine_miles(41.8781, -87.6298, 41.8781, -87.6298) == 0.0

    def test_chicago_to_dallas(self):
        miles = haversine_miles(41.8781, -87.6298, 32.7767, -96.7970)
        assert 795 < miles < 810

    def test_symmetric(self):
        a = haversine_miles(41.0, -87.0, 33.0, -96.0)
        b = haversine_miles(33.0, -96.0, 41.0, -87.0)
        assert a == pytest.approx(b)

    def test_one_degree_latitude(self):
        miles = haversine_miles(40.0, -90.0, 41.0, -90.0)
        assert miles == pytest.approx(EARTH_RADIUS_MILES * math.pi / 180, rel=1e-9)

    def test_nan_propagates(self):
        assert math.isnan(haversine_miles(float("nan"), 0.0, 1.0, 1.0))


class TestBoundingBox:
    def test_around(self):
        box = BoundingBox.around(40.0, -90.0, 1.5)
        assert box == BoundingBox(38.5, 41.5, -91.5, -88.5)
        assert box.contains(40.0, -90.0)
        assert not box.contains(42.0, -90.0)

    def test_around_radius_uses_miles_per_degree(self):
        box = BoundingBox.around_radius(30.0, -87.0, 150.0)
        assert box.height == pytest.approx(2 * 150 / 69)
        assert box.width == pytest.approx(2 * 150 / 53)

    def test_spanning_pads_both_points(self):
        box = BoundingBox.spanning([(41.0, -87.0), (39.0, -90.0)], padding=3.0)
        assert box == BoundingBox(36.0, 44.0, -93.0, -84.0)
