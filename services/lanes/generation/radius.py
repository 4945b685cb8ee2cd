"""
Progressive radius widening for sparse areas.

Rural endpoints often have only a handful of cities inside the standard
radius. Each step below is (radius in miles, minimum selected count): when
fewer than the minimum are selected, everything in the pool within the
wider radius is added. Expansion never fetches and never removes.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from services.lanes.generation.models import CityCandidate

logger = logging.getLogger(__name__)

RADIUS_STEPS: tuple[tuple[float, int], ...] = (
    (150.0, 30),
    (200.0, 15),
)


def within_radius(pool: Sequence[CityCandidate], miles: float) -> list[CityCandidate]:
    return [c for c in pool if c.distance_miles <= miles]


def expand_radius(
    pool: Sequence[CityCandidate],
    selected: Sequence[CityCandidate],
    steps: Sequence[tuple[float, int]] = RADIUS_STEPS,
) -> list[CityCandidate]:
    """
    Widen `selected` with pool members inside each step's radius while the
    count stays under that step's minimum. Pool and selected carry distances
    to the same endpoint.
    """
    out = list(selected)
    keys = {c.key for c in out}
    for miles, minimum in steps:
        if len(out) >= minimum:
            continue
        before = len(out)
        for c in sorted(within_radius(pool, miles), key=lambda c: c.distance_miles):
            if c.key not in keys:
                out.append(c)
                keys.add(c.key)
        logger.info("Only %d candidates, expanded to %.0f mi: %d", before, miles, len(out))
    return out
