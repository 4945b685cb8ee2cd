"""
Second fetch wave: make sure every market the nearby pool touches is
represented by its own centre.

After ranking inputs for a side are known, the markets they fall in are
known too. That allows two follow-up fetches the first wave could not make:

  - freight hubs of every touched state (a Chicago lane reaches into IN and WI)
  - the city each touched market is named after (TN_CHA -> Chattanooga, TN),
    which is often just outside the search box

Fetched rows are kept only when they are within the standard radius of the
side's endpoint or belong to a market the side already has.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence
from typing import Any

from services.lanes.generation.fetcher import CandidateFetcher, merge_rows
from services.lanes.generation.models import UNKNOWN_MARKET, CityCandidate
from services.lanes.geo.states import market_state

logger = logging.getLogger(__name__)


def active_markets(candidates: Iterable[CityCandidate]) -> dict[str, str | None]:
    """Market code -> market name for every resolved market among `candidates`."""
    markets: dict[str, str | None] = {}
    for c in candidates:
        code = c.market_code
        if not code or code == UNKNOWN_MARKET:
            continue
        if markets.get(code) is None:
            markets[code] = c.market_name
    return markets


def touched_states(candidates: Iterable[CityCandidate]) -> set[str]:
    """States of the candidates plus the home states of their markets."""
    states: set[str] = set()
    for c in candidates:
        if c.state:
            states.add(c.state)
        home = market_state(c.market_code)
        if home:
            states.add(home)
    return states


async def fetch_market_fill(
    fetcher: CandidateFetcher,
    candidates: Sequence[CityCandidate],
    skip_hub_states: Iterable[str] = (),
) -> list[dict[str, Any]]:
    """Hub and market-city rows for the markets `candidates` touch."""
    skip = set(skip_hub_states)
    hub_states = sorted(touched_states(candidates) - skip)
    markets = active_markets(candidates)

    batches = await asyncio.gather(
        *(fetcher.fetch_hubs(state) for state in hub_states),
        fetcher.fetch_market_cities(markets),
    )
    rows = merge_rows(*batches)
    logger.info(
        "Market fill: hubs for %d states, %d market cities -> %d rows",
        len(hub_states), len(markets), len(rows),
    )
    return rows


def keep_fill_candidates(
    candidates: Iterable[CityCandidate],
    markets: Iterable[str],
    radius_miles: float,
) -> list[CityCandidate]:
    """Fill rows worth offering: near the endpoint, or inside a market the side already has."""
    wanted = set(markets)
    return [
        c for c in candidates
        if c.distance_miles <= radius_miles or (c.market_code in wanted and c.market_code != UNKNOWN_MARKET)
    ]
