"""
Market resolution, grouping and quota-based ranking.

A lane side gets at most `total_desired` options. Without balancing, the
nearest 100 cities around a big metro all sit in one freight market, which
is useless to a broker. balance_by_market() spreads the list:

  1. group by market code
  2. order groups by their nearest member (ties by code)
  3. sort each group by distance, market city first
  4. take up to `quota` per group, quota = max(20, total // max(groups, 2))
  5. round-robin one more per group until the target is met

The output stays market-grouped: every group contributes a prefix of its
sorted members, in group order.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Iterable, Sequence

from services.lanes.generation.models import (
    UNKNOWN_MARKET,
    CityCandidate,
    RankedResult,
    Side,
    dedupe_candidates,
)
from services.lanes.geo.names import normalize_city_name
from services.lanes.repositories.cities import MarketPrefixRepository

logger = logging.getLogger(__name__)

DEFAULT_TOTAL_DESIRED = 100
QUOTA_FLOOR = 20
POSTAL_PREFIX_LEN = 3


# ---------------------------------------------------------------------------
# Market resolution
# ---------------------------------------------------------------------------

def postal_prefix(postal_code: str | None) -> str | None:
    """'60601' -> '606', 'M5V 3L9' -> 'M5V'. None when too short to look up."""
    if not postal_code:
        return None
    prefix = postal_code.strip().replace(" ", "")[:POSTAL_PREFIX_LEN].upper()
    return prefix if len(prefix) == POSTAL_PREFIX_LEN else None


async def resolve_markets(
    candidates: Sequence[CityCandidate],
    prefixes: MarketPrefixRepository,
) -> list[CityCandidate]:
    """
    Return copies of `candidates` that all carry a market code.

    Candidates without one are looked up by postal prefix, one lookup per
    distinct prefix, all issued concurrently. Anything still unresolved
    (no postal code, no zip3 row, failed lookup) becomes UNKNOWN.
    """
    wanted = {
        p for p in (postal_prefix(c.postal_code) for c in candidates if not c.market_code)
        if p is not None
    }
    resolved: dict[str, str | None] = {}
    if wanted:
        ordered = sorted(wanted)
        results = await asyncio.gather(*(prefixes.lookup(p) for p in ordered), return_exceptions=True)
        failures = 0
        for prefix, result in zip(ordered, results):
            if isinstance(result, BaseException):
                failures += 1
                logger.warning("Market lookup failed for prefix %s: %s", prefix, result)
                resolved[prefix] = None
            else:
                resolved[prefix] = result
        logger.info(
            "Resolved %d/%d postal prefixes to markets (%d failed)",
            sum(1 for v in resolved.values() if v), len(ordered), failures,
        )

    out: list[CityCandidate] = []
    for c in candidates:
        if c.market_code:
            out.append(c)
            continue
        prefix = postal_prefix(c.postal_code)
        code = resolved.get(prefix) if prefix else None
        out.append(dataclasses.replace(c, market_code=code or UNKNOWN_MARKET))
    return out


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------

def is_market_city(candidate: CityCandidate) -> bool:
    """True when the candidate is the city its market is named after."""
    if not candidate.market_name:
        return False
    target = normalize_city_name(candidate.market_name)
    return bool(target) and normalize_city_name(candidate.name) == target


def promote_market_city(group: Sequence[CityCandidate]) -> list[CityCandidate]:
    """Move the first market city in `group` to index 0, keeping the rest in order."""
    ordered = list(group)
    for i, c in enumerate(ordered):
        if is_market_city(c):
            if i:
                ordered.insert(0, ordered.pop(i))
            break
    return ordered


def group_by_market(candidates: Iterable[CityCandidate]) -> list[tuple[str, list[CityCandidate]]]:
    """
    Group by market code, each group sorted by distance with its market
    city first. Groups are ordered by nearest member, then by code.
    """
    groups: dict[str, list[CityCandidate]] = {}
    for c in candidates:
        groups.setdefault(c.market_code or UNKNOWN_MARKET, []).append(c)

    ranked: list[tuple[str, list[CityCandidate]]] = []
    for code, members in groups.items():
        members.sort(key=lambda c: (c.distance_miles, c.key))
        ranked.append((code, promote_market_city(members)))
    ranked.sort(key=lambda item: (min(c.distance_miles for c in item[1]), item[0]))
    return ranked


# ---------------------------------------------------------------------------
# Balancing
# ---------------------------------------------------------------------------

def market_quota(group_count: int, total_desired: int, quota_floor: int = QUOTA_FLOOR) -> int:
    return max(quota_floor, total_desired // max(group_count, 2))


def balance_by_market(
    candidates: Iterable[CityCandidate],
    side: Side,
    total_desired: int = DEFAULT_TOTAL_DESIRED,
    quota_floor: int = QUOTA_FLOOR,
) -> RankedResult:
    """Pick up to `total_desired` candidates spread across markets."""
    groups = group_by_market(dedupe_candidates(candidates))
    if not groups or total_desired <= 0:
        return RankedResult(side=side)

    quota = market_quota(len(groups), total_desired, quota_floor)
    taken = [0] * len(groups)
    total = 0

    # Quota phase
    for i, (_, members) in enumerate(groups):
        if total >= total_desired:
            break
        n = min(quota, len(members), total_desired - total)
        taken[i] = n
        total += n

    # Round-robin backfill from whatever each group has left
    while total < total_desired:
        progressed = False
        for i, (_, members) in enumerate(groups):
            if total >= total_desired:
                break
            if taken[i] < len(members):
                taken[i] += 1
                total += 1
                progressed = True
        if not progressed:
            break

    selected: list[CityCandidate] = []
    for (_, members), n in zip(groups, taken):
        selected.extend(members[:n])

    logger.info(
        "%s: %d candidates across %d markets (quota %d) -> %d selected",
        side.value, sum(len(m) for _, m in groups), len(groups), quota, len(selected),
    )
    return RankedResult(side=side, candidates=selected)
