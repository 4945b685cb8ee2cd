"""
Raw candidate retrieval from the city store.

Fetch paths:
  lane box       one box around both endpoints (±3°), or two ±1.5° boxes when
                 the lane itself spans more than 6°; a single box for a long
                 lane fills the store's row cap with cities in between
  state          whole state / province, or a named list within it
  neighborhood   radius around a fixed reference point (region policies)
  hubs           curated major freight hubs of a state
  market cities  the city a market is named after ("Chattanooga Mkt" -> Chattanooga, TN)

Only the lane box propagates errors; the caller decides whether an empty
box is fatal. Every other path is optional and returns [] on failure.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Mapping, Sequence
from typing import Any

from services.lanes.generation.hubs import hubs_for_state
from services.lanes.generation.models import LaneEndpoint
from services.lanes.generation.regions import Neighborhood
from services.lanes.geo.distance import BoundingBox, haversine_miles
from services.lanes.geo.names import candidate_key, clean_market_name, market_city_variants
from services.lanes.geo.states import market_state, normalize_state_code
from services.lanes.repositories.cities import CityRepository

logger = logging.getLogger(__name__)

LANE_SPLIT_THRESHOLD_DEG = 6.0
LANE_BOX_PADDING_DEG = 3.0
SPLIT_BOX_PADDING_DEG = 1.5

Row = dict[str, Any]


def merge_rows(*batches: Sequence[Row]) -> list[Row]:
    """Merge row batches on the (city, state) key, first writer wins."""
    merged: dict[tuple[str, str], Row] = {}
    for batch in batches:
        for row in batch:
            key = candidate_key(row.get("city"), row.get("state_or_province") or row.get("state"))
            if key not in merged:
                merged[key] = row
    return list(merged.values())


class CandidateFetcher:
    """
    Usage:
        fetcher = CandidateFetcher(PgCityRepository(pool))
        rows = await fetcher.fetch_lane_box(lane.origin(), lane.destination())
    """

    def __init__(
        self,
        cities: CityRepository,
        split_threshold_deg: float = LANE_SPLIT_THRESHOLD_DEG,
        box_padding_deg: float = LANE_BOX_PADDING_DEG,
        split_padding_deg: float = SPLIT_BOX_PADDING_DEG,
    ) -> None:
        self._cities = cities
        self._split_threshold_deg = split_threshold_deg
        self._box_padding_deg = box_padding_deg
        self._split_padding_deg = split_padding_deg

    # ------------------------------------------------------------------
    # Lane box
    # ------------------------------------------------------------------

    def lane_boxes(self, origin: LaneEndpoint, dest: LaneEndpoint) -> list[BoundingBox]:
        """Boxes to query for a lane: one shared box, or one per endpoint for long lanes."""
        lat_span = abs(origin.latitude - dest.latitude)
        lon_span = abs(origin.longitude - dest.longitude)
        if lat_span > self._split_threshold_deg or lon_span > self._split_threshold_deg:
            return [
                BoundingBox.around(origin.latitude, origin.longitude, self._split_padding_deg),
                BoundingBox.around(dest.latitude, dest.longitude, self._split_padding_deg),
            ]
        return [
            BoundingBox.spanning(
                [(origin.latitude, origin.longitude), (dest.latitude, dest.longitude)],
                padding=self._box_padding_deg,
            )
        ]

    async def fetch_lane_box(self, origin: LaneEndpoint, dest: LaneEndpoint) -> list[Row]:
        boxes = self.lane_boxes(origin, dest)
        if len(boxes) > 1:
            logger.info(
                "Long lane (%.1f x %.1f deg), querying %d endpoint boxes",
                abs(origin.latitude - dest.latitude),
                abs(origin.longitude - dest.longitude),
                len(boxes),
            )
        batches = await asyncio.gather(*(
            self._cities.query_bounding_box(box.lat_min, box.lat_max, box.lng_min, box.lng_max)
            for box in boxes
        ))
        rows = merge_rows(*batches)
        logger.debug("Lane box returned %d cities", len(rows))
        return rows

    # ------------------------------------------------------------------
    # Optional paths
    # ------------------------------------------------------------------

    async def fetch_state(
        self,
        state: str,
        city_names: Sequence[str] | None = None,
        require_market: bool = False,
    ) -> list[Row]:
        label = f"state {state}" if city_names is None else f"{len(city_names)} named cities in {state}"
        rows = await self._optional(
            label,
            self._cities.query_by_state(state, city_names, require_market=require_market),
        )
        if city_names is not None and len(rows) < len(city_names):
            logger.info("Found %d of %d requested cities in %s", len(rows), len(city_names), state)
        return rows

    async def fetch_neighborhood(self, hood: Neighborhood) -> list[Row]:
        box = BoundingBox.around_radius(hood.latitude, hood.longitude, hood.radius_miles)
        rows = await self._optional(
            f"neighborhood {hood.name}",
            self._cities.query_bounding_box(box.lat_min, box.lat_max, box.lng_min, box.lng_max),
        )
        kept: list[Row] = []
        for row in rows:
            if normalize_state_code(row.get("state_or_province") or row.get("state")) not in hood.states:
                continue
            try:
                dist = haversine_miles(hood.latitude, hood.longitude, float(row["latitude"]), float(row["longitude"]))
            except (KeyError, TypeError, ValueError):
                continue
            if dist <= hood.radius_miles:
                kept.append(row)
        logger.info("Fetched %d cities within %.0f mi of %s", len(kept), hood.radius_miles, hood.name)
        return kept

    async def fetch_hubs(self, state: str) -> list[Row]:
        names = hubs_for_state(state)
        if not names:
            return []
        rows = await self._optional(f"hubs {state}", self._cities.query_by_state(state, names))
        logger.debug("Fetched %d hubs for %s", len(rows), state)
        return rows

    async def fetch_market_cities(self, markets: Mapping[str, str | None]) -> list[Row]:
        """
        Fetch the city each market is named after, one query per market.

        markets: market code -> market name, e.g. {"TN_CHA": "Chattanooga Mkt"}.
        The state comes from the market code prefix, not the candidate, so
        cross-border markets (TN_CHA seen from an AL origin) resolve correctly.
        """
        async def _one(code: str, name: str | None) -> Row | None:
            state = market_state(code)
            target = clean_market_name(name)
            if not state or not target:
                return None
            rows = await self._cities.query_by_state(state, market_city_variants(target))
            return rows[0] if rows else None

        items = list(markets.items())
        results = await asyncio.gather(*(_one(code, name) for code, name in items), return_exceptions=True)
        found: list[Row] = []
        for (code, _), result in zip(items, results):
            if isinstance(result, BaseException):
                logger.warning("Market city fetch failed for %s: %s", code, result)
                continue
            if result is not None:
                found.append(result)
        return found

    async def _optional(self, label: str, query: Awaitable[list[Row]]) -> list[Row]:
        try:
            return list(await query)
        except Exception:
            logger.exception("City fetch failed (%s), continuing without it", label)
            return []
