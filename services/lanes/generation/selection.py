"""
Selectors used instead of market balancing when a region policy asks for it.

  state diversity   N nearest per priority state, then nearest of the rest
  per-market top    N nearest per market (market city first), no total cap
  all               every candidate, nearest first
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from services.lanes.generation.market_balance import group_by_market
from services.lanes.generation.models import CityCandidate, RankedResult, Side, dedupe_candidates

logger = logging.getLogger(__name__)


def _by_distance(candidates: Iterable[CityCandidate]) -> list[CityCandidate]:
    return sorted(dedupe_candidates(candidates), key=lambda c: (c.distance_miles, c.key))


def select_state_diversity(
    candidates: Iterable[CityCandidate],
    side: Side,
    priority_states: Sequence[str],
    per_state_limit: int,
    total_desired: int,
) -> RankedResult:
    ordered = _by_distance(candidates)
    selected: list[CityCandidate] = []
    picked: set[tuple[str, str]] = set()

    for state in priority_states:
        if len(selected) >= total_desired:
            break
        room = min(per_state_limit, total_desired - len(selected))
        for c in [c for c in ordered if c.state == state][:room]:
            selected.append(c)
            picked.add(c.key)

    for c in ordered:
        if len(selected) >= total_desired:
            break
        if c.key not in picked:
            selected.append(c)
            picked.add(c.key)

    counts: dict[str, int] = {}
    for c in selected:
        counts[c.state] = counts.get(c.state, 0) + 1
    logger.info("%s: state diversity picked %d (%s)", side.value, len(selected),
                ", ".join(f"{s}={n}" for s, n in sorted(counts.items())))
    return RankedResult(side=side, candidates=selected)


def select_top_per_market(
    candidates: Iterable[CityCandidate],
    side: Side,
    per_market_limit: int,
) -> RankedResult:
    groups = group_by_market(dedupe_candidates(candidates))
    selected: list[CityCandidate] = []
    for _, members in groups:
        selected.extend(members[:per_market_limit])
    logger.info("%s: top %d per market over %d markets -> %d", side.value, per_market_limit,
                len(groups), len(selected))
    return RankedResult(side=side, candidates=selected)


def select_all(candidates: Iterable[CityCandidate], side: Side) -> RankedResult:
    return RankedResult(side=side, candidates=_by_distance(candidates))
