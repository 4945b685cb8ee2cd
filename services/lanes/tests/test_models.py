"""
Tests for services.lanes.generation.models

Covers:
  1. CityCandidate.from_row column handling and bad-row skipping
  2. First-writer-wins dedup on the normalised key
  3. Lane accepts camelCase, snake_case and table column names
  4. Missing coordinates raise LaneInputError
"""

import uuid

import pytest
from pydantic import ValidationError

from services.lanes.errors import LaneInputError
from services.lanes.generation.models import (
    UNKNOWN_MARKET,
    CityCandidate,
    Lane,
    RankedResult,
    Side,
    candidates_from_rows,
    dedupe_candidates,
)


class TestCityCandidate:
    def test_from_row(self, row_factory):
        row = row_factory("Aurora", "Illinois", "41.7606", "-88.3201", zip_code=" 60505 ",
                          kma_code="IL_CHI", kma_name="Chicago Mkt", row_id=12)
        c = CityCandidate.from_row(row)
        assert (c.name, c.state, c.latitude, c.longitude) == ("Aurora", "IL", 41.7606, -88.3201)
        assert c.postal_code == "60505"
        assert c.market_code == "IL_CHI"
        assert c.city_id == "12"

    def test_from_row_missing_coordinates(self):
        with pytest.raises((KeyError, TypeError, ValueError)):
            CityCandidate.from_row({"city": "Aurora", "state": "IL", "latitude": None, "longitude": 1.0})

    def test_candidates_from_rows_skips_bad_rows(self, row_factory):
        rows = [
            row_factory("Aurora", "IL", 41.76, -88.32),
            {"city": "Broken", "state_or_province": "IL", "latitude": "n/a", "longitude": -88.0},
            row_factory("", "IL", 41.0, -88.0),
        ]
        assert [c.name for c in candidates_from_rows(rows)] == ["Aurora"]

    def test_with_distance_copies(self):
        c = CityCandidate("Aurora", "IL", 41.76, -88.32)
        d = c.with_distance(30.25)
        assert d.distance_miles == 30.25
        assert c.distance_miles == 0.0

    def test_to_dict_unknown_market(self):
        payload = CityCandidate("Aurora", "IL", 41.76, -88.32, distance_miles=30.26).to_dict()
        assert payload["kmaCode"] == UNKNOWN_MARKET
        assert payload["distance"] == 30.3

    def test_dedupe_first_writer_wins(self):
        first = CityCandidate("St. Louis", "MO", 38.6, -90.2, market_code="MO_STL")
        second = CityCandidate("Saint Louis", "MO", 38.7, -90.3)
        assert dedupe_candidates([first, second]) == [first]


class TestRankedResult:
    def test_markets_and_flatten(self):
        result = RankedResult(Side.ORIGIN, [
            CityCandidate("Chicago", "IL", 0, 0, market_code="IL_CHI"),
            CityCandidate("Gary", "IN", 0, 0, market_code="IN_GAR"),
            CityCandidate("Chicago", "IL", 0, 0, market_code="IL_CHI"),
        ])
        assert list(result.markets) == ["IL_CHI", "IN_GAR"]
        assert [c.name for c in result.flatten()] == ["Chicago", "Gary"]
        assert len(result) == 3


class TestLane:
    def test_camel_case_body(self):
        lane = Lane.model_validate({
            "laneId": "L1", "originCity": "Chicago", "originState": "Illinois", "originLat": 41.88,
            "originLon": -87.63, "destinationCity": "Dallas", "destinationState": "TX",
            "destLat": 32.78, "destLon": -96.80,
        })
        assert lane.origin_state == "IL"
        assert lane.destination().city == "Dallas"

    def test_table_columns(self):
        lane_id = uuid.uuid4()
        lane = Lane.model_validate({
            "id": lane_id, "origin_city": "Chicago", "origin_state": "IL", "origin_latitude": 41.88,
            "origin_longitude": -87.63, "dest_city": "Dallas", "dest_state": "tx",
            "dest_latitude": 32.78, "dest_longitude": -96.80,
        })
        assert lane.id == str(lane_id)
        assert lane.dest_state == "TX"
        assert lane.endpoint(Side.ORIGIN).latitude == 41.88

    def test_integer_id(self):
        lane = Lane(id=42, origin_city="A", origin_state="IL", dest_city="B", dest_state="IN")
        assert lane.id == "42"

    def test_missing_destination_coordinates(self):
        lane = Lane(id="L1", origin_city="Chicago", origin_state="IL", origin_lat=41.88, origin_lon=-87.63,
                    dest_city="Dallas", dest_state="TX")
        assert lane.origin().state == "IL"
        with pytest.raises(LaneInputError, match="destination coordinates"):
            lane.destination()

    def test_missing_required_field(self):
        with pytest.raises(ValidationError):
            Lane.model_validate({"id": "L1", "originCity": "Chicago"})
