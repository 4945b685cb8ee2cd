"""
Lane option generator: origin/destination pair -> two market-balanced
candidate lists.

Flow:
  1. Validate endpoints, match region policies per side
  2. Start the correction / blacklist overlay refresh (TTL cached, never
     raises); it runs alongside wave 1 and is abandoned at the deadline
  3. Wave 1, concurrently and under the deadline:
       lane bounding box, policy fetches for covered sides,
       freight hubs for uncovered sides
     A box fetch cut off by the deadline is not an empty box; the lane
     fails only when nothing at all arrived
  4. Ingest: rows -> candidates, drop blacklisted, apply corrections,
     dedup, resolve markets by postal prefix
  5. Per side (uncovered sides concurrently):
       uncovered  nearby pool -> wave 2 market fill -> radius expansion
                  -> market-balanced ranking
       covered    policy pool -> exclusions -> policy selection
  6. Re-assert exclusions and the blacklist, final dedup

Only LaneInputError and EmptyCandidatePoolError leave this module; every
optional fetch degrades to fewer candidates.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
from collections.abc import Awaitable, Iterable, Sequence
from typing import Any

from services.lanes.errors import EmptyCandidatePoolError, LaneNotFoundError
from services.lanes.generation.fetcher import CandidateFetcher
from services.lanes.generation.market_balance import (
    DEFAULT_TOTAL_DESIRED,
    balance_by_market,
    resolve_markets,
)
from services.lanes.generation.market_fill import (
    active_markets,
    fetch_market_fill,
    keep_fill_candidates,
)
from services.lanes.generation.models import (
    UNKNOWN_MARKET,
    CityCandidate,
    Lane,
    LaneEndpoint,
    LaneOptions,
    RankedResult,
    Side,
    candidates_from_rows,
    dedupe_candidates,
)
from services.lanes.generation.radius import expand_radius
from services.lanes.generation.regions import (
    POLICIES,
    Coverage,
    RegionPolicy,
    Selection,
    match_policies,
)
from services.lanes.generation.selection import (
    select_all,
    select_state_diversity,
    select_top_per_market,
)
from services.lanes.geo.distance import haversine_miles
from services.lanes.overlay.store import OverlayStore
from services.lanes.repositories.cities import CityRepository, MarketPrefixRepository
from services.lanes.repositories.lanes import LaneRepository

logger = logging.getLogger(__name__)

STANDARD_RADIUS_MI = 100.0

_BOX = "box"


def _policy_label(policy: RegionPolicy, state: str) -> str:
    return f"policy:{policy.name}:{state}"


def _hubs_label(state: str) -> str:
    return f"hubs:{state}"


class OptionGenerator:
    """
    Usage:
        generator = OptionGenerator(PgCityRepository(pool), PgMarketPrefixRepository(pool), overlay)
        options = await generator.generate_options(lane)
        options.to_dict()
    """

    def __init__(
        self,
        cities: CityRepository,
        prefixes: MarketPrefixRepository,
        overlay: OverlayStore,
        *,
        desired_per_side: int = DEFAULT_TOTAL_DESIRED,
        standard_radius_mi: float = STANDARD_RADIUS_MI,
        deadline_s: float | None = None,
        policies: tuple[RegionPolicy, ...] = POLICIES,
    ) -> None:
        self._fetcher = CandidateFetcher(cities)
        self._prefixes = prefixes
        self._overlay = overlay
        self._desired = desired_per_side
        self._radius = standard_radius_mi
        self._deadline_s = deadline_s
        self._policies = policies

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def generate_for_lane_id(self, lane_id: str, lanes: LaneRepository) -> LaneOptions:
        lane = await lanes.get(lane_id)
        if lane is None:
            raise LaneNotFoundError(lane_id)
        return await self.generate_options(lane)

    async def generate_options(self, lane: Lane, deadline_s: float | None = None) -> LaneOptions:
        started = time.monotonic()
        budget = deadline_s if deadline_s is not None else self._deadline_s
        deadline = started + budget if budget is not None else None

        # Raises LaneInputError before any I/O
        endpoints = {Side.ORIGIN: lane.origin(), Side.DESTINATION: lane.destination()}
        policies = match_policies(
            endpoints[Side.ORIGIN].state, endpoints[Side.DESTINATION].state, self._policies
        )

        # Ingestion needs the overlay, fetching does not
        overlay_refresh = asyncio.ensure_future(self._overlay.refresh())

        # ---- Wave 1 ----
        jobs: dict[str, Awaitable[list[dict[str, Any]]]] = {
            _BOX: self._fetcher.fetch_lane_box(endpoints[Side.ORIGIN], endpoints[Side.DESTINATION]),
        }
        for side, endpoint in endpoints.items():
            policy = policies.get(side)
            if policy is not None:
                jobs.setdefault(_policy_label(policy, endpoint.state), self._fetch_policy(policy, endpoint))
            else:
                jobs.setdefault(_hubs_label(endpoint.state), self._fetcher.fetch_hubs(endpoint.state))
        try:
            batches, unfinished = await self._run_wave(jobs, self._remaining(deadline))
        except asyncio.CancelledError:
            overlay_refresh.cancel()
            raise

        box_cut_off = _BOX in unfinished
        if not batches[_BOX] and not policies and not box_cut_off:
            overlay_refresh.cancel()
            raise EmptyCandidatePoolError(self._empty_message(lane, endpoints))
        if box_cut_off:
            logger.warning("Lane %s: bounding box fetch cut off by the deadline, using partial pool", lane.id)
        elif not batches[_BOX]:
            logger.warning("Lane %s: bounding box returned nothing, relying on region policy fetches", lane.id)

        await self._await_overlay(overlay_refresh, deadline)

        # ---- Ingest ----
        pool, keys_by_label = self._ingest_batches(batches)
        if not pool and not policies:
            raise EmptyCandidatePoolError(self._empty_message(lane, endpoints))
        pool = await self._resolve(pool, deadline)
        logger.info("Lane %s: pool of %d unique cities", lane.id, len(pool))

        hub_labels = [label for label in batches if label.startswith("hubs:")]
        hub_states = {label.split(":", 1)[1] for label in hub_labels}
        hub_keys: set[tuple[str, str]] = set()
        for label in hub_labels:
            hub_keys |= keys_by_label[label]

        # ---- Per side ----
        # Uncovered sides run together so their wave 2 fetches overlap
        uncovered = [side for side in endpoints if side not in policies]
        ranked = await asyncio.gather(*(
            self._uncovered_side(side, endpoints[side], pool, hub_keys, hub_states, deadline)
            for side in uncovered
        ))
        results: dict[Side, RankedResult] = dict(zip(uncovered, ranked))
        for side, policy in policies.items():
            endpoint = endpoints[side]
            policy_keys = keys_by_label.get(_policy_label(policy, endpoint.state), set())
            results[side] = self._covered_side(side, endpoint, pool, policy, policy_keys)

        options = LaneOptions(
            lane_id=lane.id,
            origin_options=self._finalize(results[Side.ORIGIN], policies.get(Side.ORIGIN)),
            dest_options=self._finalize(results[Side.DESTINATION], policies.get(Side.DESTINATION)),
            active_policies={side.value: policy.name for side, policy in policies.items()},
        )
        logger.info(
            "Lane %s: %d origin / %d destination options in %.0fms",
            lane.id,
            len(options.origin_options),
            len(options.dest_options),
            (time.monotonic() - started) * 1000,
        )
        return options

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def _fetch_policy(self, policy: RegionPolicy, endpoint: LaneEndpoint) -> list[dict[str, Any]]:
        jobs = [
            self._fetcher.fetch_state(state, require_market=policy.require_market)
            for state in policy.states_to_fetch(endpoint.state)
        ]
        if policy.named_cities:
            jobs.append(self._fetcher.fetch_state(endpoint.state, policy.named_cities))
        if policy.neighborhood is not None:
            jobs.append(self._fetcher.fetch_neighborhood(policy.neighborhood))
        batches = await asyncio.gather(*jobs)
        rows = [row for batch in batches for row in batch]
        logger.info("Policy %s fetched %d rows for %s", policy.name, len(rows), endpoint.state)
        return rows

    async def _run_wave(
        self,
        jobs: dict[str, Awaitable[list[dict[str, Any]]]],
        timeout: float | None,
    ) -> tuple[dict[str, list[dict[str, Any]]], set[str]]:
        """
        Run labelled fetches concurrently. Anything unfinished at `timeout`
        is cancelled; failed and cancelled fetches contribute no rows.

        Returns rows per label and the labels the deadline cut off.
        """
        tasks = {label: asyncio.ensure_future(job) for label, job in jobs.items()}
        try:
            _, pending = await asyncio.wait(tasks.values(), timeout=timeout)
        except asyncio.CancelledError:
            for task in tasks.values():
                task.cancel()
            raise

        unfinished = {label for label, task in tasks.items() if task in pending}
        if pending:
            logger.warning(
                "Deadline reached with %d/%d fetches unfinished (%s), using partial pool",
                len(pending), len(tasks), ", ".join(sorted(unfinished)),
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        out: dict[str, list[dict[str, Any]]] = {}
        for label, task in tasks.items():
            if task in pending or task.cancelled():
                out[label] = []
                continue
            exc = task.exception()
            if exc is not None:
                logger.error("Fetch %s failed: %s", label, exc, exc_info=exc)
                out[label] = []
            else:
                out[label] = task.result()
        return out, unfinished

    async def _await_overlay(self, refresh: asyncio.Future, deadline: float | None) -> None:
        """Wait for the overlay refresh within the deadline; on timeout the cached tables stay in use."""
        try:
            await asyncio.wait_for(refresh, timeout=self._remaining(deadline))
        except asyncio.TimeoutError:
            logger.warning("Deadline reached during overlay refresh, using cached correction and blacklist tables")

    @staticmethod
    def _empty_message(lane: Lane, endpoints: dict[Side, LaneEndpoint]) -> str:
        return (
            f"No cities found around lane {lane.id!r} "
            f"({endpoints[Side.ORIGIN].city}, {endpoints[Side.ORIGIN].state} -> "
            f"{endpoints[Side.DESTINATION].city}, {endpoints[Side.DESTINATION].state})"
        )

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def _apply_overlay(self, candidates: Iterable[CityCandidate]) -> list[CityCandidate]:
        """Drop blacklisted cities and rename corrected ones."""
        out: list[CityCandidate] = []
        dropped = corrected = 0
        for c in candidates:
            if self._overlay.is_blacklisted(c.name, c.state):
                dropped += 1
                continue
            city, state = self._overlay.correct_city(c.name, c.state)
            if (city, state) != (c.name, c.state):
                corrected += 1
                c = dataclasses.replace(c, name=city, state=state)
                if self._overlay.is_blacklisted(city, state):
                    dropped += 1
                    continue
            out.append(c)
        if dropped or corrected:
            logger.debug("Overlay dropped %d and corrected %d cities", dropped, corrected)
        return out

    def _ingest(self, rows: Iterable[dict[str, Any]]) -> list[CityCandidate]:
        return dedupe_candidates(self._apply_overlay(candidates_from_rows(rows)))

    def _ingest_batches(
        self,
        batches: dict[str, list[dict[str, Any]]],
    ) -> tuple[list[CityCandidate], dict[str, set[tuple[str, str]]]]:
        """Merge labelled batches into one pool, remembering which keys each label produced."""
        keys_by_label: dict[str, set[tuple[str, str]]] = {}
        merged: list[CityCandidate] = []
        for label, rows in batches.items():
            candidates = self._ingest(rows)
            keys_by_label[label] = {c.key for c in candidates}
            merged.extend(candidates)
        return dedupe_candidates(merged), keys_by_label

    async def _resolve(self, candidates: list[CityCandidate], deadline: float | None) -> list[CityCandidate]:
        try:
            return await asyncio.wait_for(
                resolve_markets(candidates, self._prefixes), timeout=self._remaining(deadline)
            )
        except asyncio.TimeoutError:
            logger.warning("Deadline reached during market lookup, %d cities left unresolved",
                           sum(1 for c in candidates if not c.market_code))
            return [
                c if c.market_code else dataclasses.replace(c, market_code=UNKNOWN_MARKET)
                for c in candidates
            ]

    # ------------------------------------------------------------------
    # Sides
    # ------------------------------------------------------------------

    async def _uncovered_side(
        self,
        side: Side,
        endpoint: LaneEndpoint,
        pool: Sequence[CityCandidate],
        hub_keys: set[tuple[str, str]],
        hub_states: set[str],
        deadline: float | None,
    ) -> RankedResult:
        annotated = _with_distances(pool, endpoint)
        nearby = [c for c in annotated if c.distance_miles <= self._radius]
        markets = active_markets(nearby)

        # Far hubs from wave 1 stay when their market is one the side already has
        far_hubs = [c for c in annotated if c.key in hub_keys and c.distance_miles > self._radius]
        side_pool = nearby + keep_fill_candidates(far_hubs, markets, self._radius)

        fill = await self._market_fill(nearby, hub_states, deadline)
        fill = keep_fill_candidates(_with_distances(fill, endpoint), markets, self._radius)
        side_pool = dedupe_candidates(side_pool + fill)

        side_pool = expand_radius(dedupe_candidates(annotated + fill), side_pool)
        logger.info("%s: %d nearby, %d after fill and expansion", side.value, len(nearby), len(side_pool))
        return balance_by_market(side_pool, side, total_desired=self._desired)

    async def _market_fill(
        self,
        nearby: Sequence[CityCandidate],
        hub_states: set[str],
        deadline: float | None,
    ) -> list[CityCandidate]:
        if not nearby:
            return []
        try:
            rows = await asyncio.wait_for(
                fetch_market_fill(self._fetcher, nearby, skip_hub_states=hub_states),
                timeout=self._remaining(deadline),
            )
        except asyncio.TimeoutError:
            logger.warning("Deadline reached during market fill, skipping it")
            return []
        return await self._resolve(self._ingest(rows), deadline)

    def _covered_side(
        self,
        side: Side,
        endpoint: LaneEndpoint,
        pool: Sequence[CityCandidate],
        policy: RegionPolicy,
        policy_keys: set[tuple[str, str]],
    ) -> RankedResult:
        annotated = _with_distances(pool, endpoint)
        if policy.coverage is Coverage.POLICY_ONLY:
            side_pool = [c for c in annotated if c.key in policy_keys]
        elif policy.coverage is Coverage.POLICY_PLUS_NEARBY:
            side_pool = [c for c in annotated if c.key in policy_keys or c.distance_miles <= self._radius]
        else:
            side_pool = list(annotated)

        before = len(side_pool)
        side_pool = [c for c in side_pool if policy.admits(c.state, c.market_code)]
        logger.info("%s: policy %s pool %d (%d excluded)", side.value, policy.name, len(side_pool),
                    before - len(side_pool))

        selection = policy.selection_for(side)
        if selection is Selection.STATE_DIVERSITY:
            return select_state_diversity(
                side_pool, side, policy.priority_states, policy.per_state_limit, self._desired
            )
        if selection is Selection.PER_MARKET_TOP:
            return select_top_per_market(side_pool, side, policy.per_market_limit)
        if selection is Selection.ALL:
            return select_all(side_pool, side)
        return balance_by_market(side_pool, side, total_desired=self._desired)

    def _finalize(self, result: RankedResult, policy: RegionPolicy | None) -> list[CityCandidate]:
        """Exclusions and blacklist once more after ranking, then dedup."""
        kept = [
            c for c in result.flatten()
            if not self._overlay.is_blacklisted(c.name, c.state)
            and (policy is None or policy.admits(c.state, c.market_code))
        ]
        if len(kept) != len(result):
            logger.warning("%s: %d candidates removed after ranking", result.side.value, len(result) - len(kept))
        return kept

    @staticmethod
    def _remaining(deadline: float | None) -> float | None:
        if deadline is None:
            return None
        return max(0.0, deadline - time.monotonic())


def _with_distances(candidates: Iterable[CityCandidate], endpoint: LaneEndpoint) -> list[CityCandidate]:
    return [
        c.with_distance(haversine_miles(endpoint.latitude, endpoint.longitude, c.latitude, c.longitude))
        for c in candidates
    ]
