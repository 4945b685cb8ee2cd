"""
Tests for services.lanes.generation.regions

Covers:
  1. Trigger matching per side and first-match-wins ordering
  2. States fetched per policy
  3. Hard exclusions (allowed states, blocked markets)
  4. Selection only applies on the configured sides
"""

import pytest

from services.lanes.generation.models import Side
from services.lanes.generation.regions import (
    NYC_LONG_ISLAND_MARKETS,
    POLICIES,
    Coverage,
    RegionPolicy,
    Selection,
    match_policies,
)

_BY_NAME = {p.name: p for p in POLICIES}


class TestMatchPolicies:
    def test_no_policy_for_plain_lane(self):
        assert match_policies("IL", "OH") == {}

    def test_new_england_destination_only(self):
        assert match_policies("IL", "MA") == {Side.DESTINATION: _BY_NAME["new_england"]}
        assert match_policies("MA", "IL") == {}

    def test_florida_both_sides(self):
        active = match_policies("FL", "FL")
        assert active[Side.ORIGIN].name == "florida"
        assert active[Side.DESTINATION].name == "florida"

    def test_texas_origin_and_nj_destination(self):
        active = match_policies("TX", "NJ")
        assert active[Side.ORIGIN].name == "texas"
        assert active[Side.DESTINATION].name == "new_jersey"

    def test_canada_destination(self):
        assert match_policies("MI", "ON")[Side.DESTINATION].name == "canada"
        assert match_policies("ON", "MI") == {}

    def test_first_match_wins(self):
        first = RegionPolicy(name="first", trigger_states=frozenset({"IL"}))
        second = RegionPolicy(name="second", trigger_states=frozenset({"IL"}))
        active = match_policies("IL", "OH", policies=(first, second))
        assert active == {Side.ORIGIN: first}


class TestPolicyBehaviour:
    def test_states_to_fetch(self):
        assert _BY_NAME["new_england"].states_to_fetch("VT") == ("MA", "NH", "ME", "VT", "RI", "CT", "NY")
        assert _BY_NAME["texas"].states_to_fetch("TX") == ("TX",)
        assert _BY_NAME["florida"].states_to_fetch("FL") == ()

    def test_new_england_admits(self):
        ne = _BY_NAME["new_england"]
        assert ne.admits("VT", "VT_BUR")
        assert ne.admits("NY", "NY_ALB")
        assert not ne.admits("PA", "PA_ALL")
        for code in NYC_LONG_ISLAND_MARKETS:
            assert not ne.admits("NY", code)

    def test_new_jersey_blocks_nyc_but_not_states(self):
        nj = _BY_NAME["new_jersey"]
        assert nj.admits("PA", "PA_PHI")
        assert not nj.admits("NY", "NY_BKN")

    def test_texas_selection_is_destination_only(self):
        tx = _BY_NAME["texas"]
        assert tx.selection_for(Side.DESTINATION) is Selection.PER_MARKET_TOP
        assert tx.selection_for(Side.ORIGIN) is Selection.MARKET_BALANCED

    @pytest.mark.parametrize(
        "name,coverage",
        [
            ("new_england", Coverage.UNBOUNDED),
            ("florida", Coverage.POLICY_PLUS_NEARBY),
            ("texas", Coverage.POLICY_PLUS_NEARBY),
            ("new_jersey", Coverage.POLICY_PLUS_NEARBY),
            ("canada", Coverage.POLICY_ONLY),
        ],
    )
    def test_coverage(self, name, coverage):
        assert _BY_NAME[name].coverage is coverage
