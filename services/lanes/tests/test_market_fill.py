"""
Tests for services.lanes.generation.market_fill

Covers:
  1. Active markets and touched states (including market home states)
  2. Second-wave fetch skips states whose hubs were already fetched
  3. Fill rows kept only when near or inside an active market
"""

import pytest

from services.lanes.generation.fetcher import CandidateFetcher
from services.lanes.generation.market_fill import (
    active_markets,
    fetch_market_fill,
    keep_fill_candidates,
    touched_states,
)
from services.lanes.generation.models import UNKNOWN_MARKET, CityCandidate


def _candidate(name, state, market, market_name=None, distance=10.0):
    return CityCandidate(name, state, 0.0, 0.0, market_code=market, market_name=market_name,
                         distance_miles=distance)


class TestMarketsAndStates:
    def test_active_markets_skip_unknown(self):
        markets = active_markets([
            _candidate("Rossville", "GA", "TN_CHA"),
            _candidate("Dalton", "GA", "TN_CHA", "Chattanooga Mkt"),
            _candidate("Nowhere", "GA", UNKNOWN_MARKET),
        ])
        assert markets == {"TN_CHA": "Chattanooga Mkt"}

    def test_touched_states_include_market_home(self):
        states = touched_states([_candidate("Fort Payne", "AL", "TN_CHA")])
        assert states == {"AL", "TN"}


@pytest.mark.asyncio
class TestFetchMarketFill:
    async def test_cross_border_fill(self, city_repo, row_factory):
        city_repo.rows = [
            row_factory("Chattanooga", "TN", 35.0456, -85.3097, kma_code="TN_CHA", kma_name="Chattanooga Mkt"),
            row_factory("Birmingham", "AL", 33.5186, -86.8104, kma_code="AL_BHM", kma_name="Birmingham Mkt"),
        ]
        nearby = [_candidate("Fort Payne", "AL", "TN_CHA", "Chattanooga Mkt")]

        rows = await fetch_market_fill(CandidateFetcher(city_repo), nearby, skip_hub_states={"AL"})

        assert [r["city"] for r in rows] == ["Chattanooga"]
        queried_states = {state for state, _, _ in city_repo.state_calls}
        assert queried_states == {"TN"}

    async def test_nothing_to_fill(self, city_repo):
        rows = await fetch_market_fill(CandidateFetcher(city_repo), [], skip_hub_states=())
        assert rows == []


class TestKeepFillCandidates:
    def test_near_or_active_market(self):
        kept = keep_fill_candidates(
            [
                _candidate("Near", "IL", "IL_RCK", distance=40.0),
                _candidate("Far Same Market", "IL", "IL_CHI", distance=140.0),
                _candidate("Far Other Market", "IN", "IN_IND", distance=180.0),
                _candidate("Far Unknown", "IN", UNKNOWN_MARKET, distance=180.0),
            ],
            markets={"IL_CHI", UNKNOWN_MARKET},
            radius_miles=100.0,
        )
        assert [c.name for c in kept] == ["Near", "Far Same Market"]
