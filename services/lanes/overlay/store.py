"""
City name corrections and blacklist overlay.

The posting board rejects some city spellings outright and expects others
under a different name. Two tables describe that:

  city_corrections    'REDWOOD, OR' -> ('Redmond', 'OR')
  blacklisted_cities  'SHANNONDALE, WV'

Both are loaded through injected async loaders and cached per process with
a TTL (60s default). Each table refreshes on its own schedule. Refresh swaps
the whole table in one assignment, so readers never see a half-built table
and never need a lock. A failing loader keeps the stale table and logs; the
overlay must never block option generation.

A small built-in table is always consulted as well, so the overlay works
before the first successful load.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

from services.lanes.geo.names import overlay_key
from services.lanes.geo.states import normalize_state_code

logger = logging.getLogger(__name__)

DEFAULT_TTL_S = 60.0

# Cities the posting board rejects. Always excluded.
FALLBACK_BLACKLIST: frozenset[str] = frozenset({
    "SHANNONDALE, WV",
    "BROWNSDALE, FL",
    "MOSKOEITE CORNER, CA",
    "NEW HOPE, OR",
    "EPHESUS, GA",
    "SOUTH ROSEMARY, NC",
    "RAINBOW LAKES ESTATES, FL",
    "BRIAR CHAPEL, NC",
    "COATS BEND, AL",
    "VILLAGE SHIRES, PA",
    "CHUMUCKLA, FL",
    "WHITFIELD, PA",
    "LINCOLN PARK, GA",
    "TUCKAHOE, VA",
    "AUCILLA, FL",
    "ENSLEY, FL",
    "FOREST HEIGHTS, TX",
    "SOUTHWEST CITY, MO",
    "TENKILLER, OK",
    "CEDAR VALLEY, OK",
    "CANYON LAKE, TX",
    "ROCKY MOUNTAIN, OK",
    "LORANE, PA",
    "SCENIC OAKS, TX",
    "GRANTLEY, PA",
})

FALLBACK_CORRECTIONS: dict[str, tuple[str, str]] = {
    "REDWOOD, OR": ("Redmond", "OR"),
    "BELLWOOD, VA": ("Elkwood", "VA"),
    "DASHER, GA": ("Jasper", "GA"),
    "ENSLEY, FL": ("Ensley", "AL"),
    "SUNNY SIDE, GA": ("Sunnyside", "GA"),
}


@dataclass(frozen=True)
class CorrectionEntry:
    incorrect_city: str
    incorrect_state: str
    correct_city: str
    correct_state: str


@dataclass(frozen=True)
class BlacklistEntry:
    city: str
    state: str


E = TypeVar("E")
T = TypeVar("T")


class _TTLTable(Generic[E, T]):
    """
    One lazily refreshed table.

    `value` is replaced wholesale on refresh; the lock only keeps concurrent
    requests from issuing the same load twice.
    """

    def __init__(
        self,
        name: str,
        loader: Callable[[], Awaitable[Iterable[E]]] | None,
        build: Callable[[Iterable[E]], T],
        empty: T,
        ttl_s: float,
        clock: Callable[[], float],
    ) -> None:
        self.name = name
        self.value: T = empty
        self.loaded_at: float | None = None
        self._loader = loader
        self._build = build
        self._ttl_s = ttl_s
        self._clock = clock
        self._lock = asyncio.Lock()

    def is_stale(self) -> bool:
        if self._loader is None:
            return False
        if self.loaded_at is None:
            return True
        return self._clock() - self.loaded_at >= self._ttl_s

    async def refresh(self, force: bool = False) -> None:
        if self._loader is None:
            return
        if not force and not self.is_stale():
            return
        async with self._lock:
            # Another request may have refreshed while we waited
            if not force and not self.is_stale():
                return
            try:
                entries = await self._loader()
                table = self._build(entries)
            except Exception:
                logger.exception("overlay: %s load failed, keeping %s cached table", self.name,
                                 "empty" if self.loaded_at is None else "stale")
                return
            self.value = table
            self.loaded_at = self._clock()
            logger.debug("overlay: %s refreshed (%d entries)", self.name, len(table))


def _build_corrections(entries: Iterable[CorrectionEntry]) -> dict[str, tuple[str, str]]:
    table: dict[str, tuple[str, str]] = {}
    for e in entries:
        table[overlay_key(e.incorrect_city, normalize_state_code(e.incorrect_state))] = (
            e.correct_city.strip(),
            normalize_state_code(e.correct_state),
        )
    return table


def _build_blacklist(entries: Iterable[BlacklistEntry]) -> frozenset[str]:
    return frozenset(overlay_key(e.city, normalize_state_code(e.state)) for e in entries)


class OverlayStore:
    """
    Process-wide correction + blacklist cache.

    Usage:
        store = OverlayStore(corrections.load_all, blacklist.load_all)
        await store.refresh()
        city, state = store.correct_city("Redwood", "OR")
        if store.is_blacklisted(city, state): ...
    """

    def __init__(
        self,
        correction_loader: Callable[[], Awaitable[Iterable[CorrectionEntry]]] | None = None,
        blacklist_loader: Callable[[], Awaitable[Iterable[BlacklistEntry]]] | None = None,
        ttl_s: float = DEFAULT_TTL_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._corrections: _TTLTable[CorrectionEntry, dict[str, tuple[str, str]]] = _TTLTable(
            "corrections", correction_loader, _build_corrections, {}, ttl_s, clock,
        )
        self._blacklist: _TTLTable[BlacklistEntry, frozenset[str]] = _TTLTable(
            "blacklist", blacklist_loader, _build_blacklist, frozenset(), ttl_s, clock,
        )

    async def refresh(self, force: bool = False) -> None:
        """Reload whichever tables are past their TTL. Never raises."""
        await asyncio.gather(
            self._corrections.refresh(force=force),
            self._blacklist.refresh(force=force),
        )

    def correct_city(self, city: str, state: str) -> tuple[str, str]:
        """Return the accepted (city, state) for a known-bad spelling, else the input."""
        key = overlay_key(city, state)
        # Read the current table once; a refresh may swap it concurrently
        corrections = self._corrections.value
        if key in corrections:
            return corrections[key]
        if key in FALLBACK_CORRECTIONS:
            return FALLBACK_CORRECTIONS[key]
        return city, state

    def is_blacklisted(self, city: str, state: str) -> bool:
        key = overlay_key(city, state)
        return key in FALLBACK_BLACKLIST or key in self._blacklist.value

    @property
    def correction_count(self) -> int:
        return len(self._corrections.value)

    @property
    def blacklist_count(self) -> int:
        return len(self._blacklist.value)
