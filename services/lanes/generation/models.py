"""
Typed records for lane option generation.

CityCandidate replaces the loose row dicts coming out of the city store:
state codes are normalised once in from_row() and every comparison after
that goes through CityCandidate.key.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from services.lanes.errors import LaneInputError
from services.lanes.geo.names import candidate_key
from services.lanes.geo.states import normalize_state_code

logger = logging.getLogger(__name__)

UNKNOWN_MARKET = "UNKNOWN"


class Side(str, enum.Enum):
    ORIGIN = "origin"
    DESTINATION = "destination"


# ---------------------------------------------------------------------------
# Candidates
# ---------------------------------------------------------------------------

@dataclass
class CityCandidate:
    """One city that could be posted against a lane side."""
    name: str
    state: str
    latitude: float
    longitude: float
    postal_code: str | None = None
    market_code: str | None = None      # None until resolved, then never None
    market_name: str | None = None
    distance_miles: float = 0.0         # to the endpoint of the side this copy belongs to
    is_manually_added: bool = False
    city_id: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        return candidate_key(self.name, self.state)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> CityCandidate:
        """
        Build a candidate from a `cities` row.

        Accepts the store's column names (city, state_or_province, zip,
        kma_code, kma_name) as well as already-normalised names (state).
        Raises KeyError/TypeError/ValueError when coordinates are unusable.
        """
        postal = row.get("zip") or row.get("postal_code")
        city_id = row.get("id")
        return cls(
            name=str(row.get("city") or "").strip(),
            state=normalize_state_code(row.get("state_or_province") or row.get("state")),
            latitude=float(row["latitude"]),
            longitude=float(row["longitude"]),
            postal_code=str(postal).strip() if postal else None,
            market_code=row.get("kma_code") or None,
            market_name=row.get("kma_name") or None,
            is_manually_added=bool(row.get("is_manually_added") or False),
            city_id=str(city_id) if city_id is not None else None,
        )

    def with_distance(self, miles: float) -> CityCandidate:
        """Copy annotated with the distance to one lane endpoint."""
        return dataclasses.replace(self, distance_miles=miles)

    def to_dict(self) -> dict[str, Any]:
        """Shape handed to the HTTP / export layers."""
        return {
            "id": self.city_id,
            "city": self.name,
            "state": self.state,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "zip": self.postal_code,
            "kmaCode": self.market_code or UNKNOWN_MARKET,
            "kmaName": self.market_name,
            "distance": round(self.distance_miles, 1),
            "isManuallyAdded": self.is_manually_added,
        }


def candidates_from_rows(rows: Iterable[Mapping[str, Any]]) -> list[CityCandidate]:
    """Convert rows, skipping any that lack a name or usable coordinates."""
    out: list[CityCandidate] = []
    for row in rows:
        try:
            candidate = CityCandidate.from_row(row)
        except (KeyError, TypeError, ValueError):
            logger.debug("Skipping city row without coordinates: %r", row.get("city"))
            continue
        if not candidate.name:
            continue
        out.append(candidate)
    return out


def dedupe_candidates(candidates: Iterable[CityCandidate]) -> list[CityCandidate]:
    """First-writer-wins dedup on the normalised (name, state) key."""
    seen: set[tuple[str, str]] = set()
    out: list[CityCandidate] = []
    for c in candidates:
        key = c.key
        if key in seen:
            continue
        seen.add(key)
        out.append(c)
    return out


# ---------------------------------------------------------------------------
# Lane input
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LaneEndpoint:
    city: str
    state: str
    latitude: float
    longitude: float


class Lane(BaseModel):
    """
    Generator input. Accepts the camelCase body the HTTP layer receives as
    well as the snake_case column names of the `lanes` table.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., min_length=1, validation_alias=AliasChoices("id", "laneId", "lane_id"))
    origin_city: str = Field(..., validation_alias=AliasChoices("originCity", "origin_city"))
    origin_state: str = Field(..., validation_alias=AliasChoices("originState", "origin_state"))
    origin_lat: float | None = Field(
        default=None, validation_alias=AliasChoices("originLat", "origin_lat", "origin_latitude")
    )
    origin_lon: float | None = Field(
        default=None, validation_alias=AliasChoices("originLon", "origin_lon", "origin_longitude")
    )
    dest_city: str = Field(
        ...,
        validation_alias=AliasChoices("destCity", "destinationCity", "dest_city", "destination_city"),
    )
    dest_state: str = Field(
        ...,
        validation_alias=AliasChoices("destState", "destinationState", "dest_state", "destination_state"),
    )
    dest_lat: float | None = Field(
        default=None, validation_alias=AliasChoices("destLat", "dest_lat", "dest_latitude")
    )
    dest_lon: float | None = Field(
        default=None, validation_alias=AliasChoices("destLon", "dest_lon", "dest_longitude")
    )

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v: Any) -> Any:
        # lanes.id may come back from asyncpg as int or uuid.UUID
        return v if v is None or isinstance(v, str) else str(v)

    @field_validator("origin_state", "dest_state")
    @classmethod
    def _state_code(cls, v: str) -> str:
        return normalize_state_code(v)

    def origin(self) -> LaneEndpoint:
        return self._endpoint("origin", self.origin_city, self.origin_state, self.origin_lat, self.origin_lon)

    def destination(self) -> LaneEndpoint:
        return self._endpoint("destination", self.dest_city, self.dest_state, self.dest_lat, self.dest_lon)

    def endpoint(self, side: Side) -> LaneEndpoint:
        return self.origin() if side is Side.ORIGIN else self.destination()

    def _endpoint(
        self,
        label: str,
        city: str,
        state: str,
        lat: float | None,
        lon: float | None,
    ) -> LaneEndpoint:
        if lat is None or lon is None:
            raise LaneInputError(f"Lane {self.id!r} missing {label} coordinates")
        return LaneEndpoint(city=city, state=state, latitude=lat, longitude=lon)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

@dataclass
class RankedResult:
    """Selected candidates for one side, in final display order."""
    side: Side
    candidates: list[CityCandidate] = field(default_factory=list)

    @property
    def markets(self) -> dict[str, list[CityCandidate]]:
        """Market code -> candidates, in order of first appearance."""
        grouped: dict[str, list[CityCandidate]] = {}
        for c in self.candidates:
            grouped.setdefault(c.market_code or UNKNOWN_MARKET, []).append(c)
        return grouped

    def flatten(self) -> list[CityCandidate]:
        return dedupe_candidates(self.candidates)

    def __len__(self) -> int:
        return len(self.candidates)


@dataclass
class LaneOptions:
    """Both option lists for one lane."""
    lane_id: str
    origin_options: list[CityCandidate]
    dest_options: list[CityCandidate]
    active_policies: dict[str, str] = field(default_factory=dict)   # side -> policy name

    def to_dict(self) -> dict[str, Any]:
        return {
            "laneId": self.lane_id,
            "originOptions": [c.to_dict() for c in self.origin_options],
            "destOptions": [c.to_dict() for c in self.dest_options],
            "activePolicies": dict(self.active_policies),
        }
