"""
Region override policies.

Some regions do not work with the plain 100-mile market search:

  New England  dense, small states; brokers want every NE + upstate NY city,
               never the NYC / Long Island markets.
  Florida      long deadheads are normal; a fixed list of major FL cities plus
               the Panhandle area around McDavid, FL is always offered.
  Texas        statewide coverage; destinations take the best 10 per market.
  New Jersey   statewide coverage, NYC / Long Island blocked, NJ-first ordering.
  Canada       only the destination province's own cities.

Each rule is a RegionPolicy value. match_policies() evaluates the ordered
POLICIES table once per lane; the first policy whose trigger matches a lane
side covers that side. A covered side takes its pool from the policy fetch
and skips hub fetch, market fill and radius expansion.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from services.lanes.generation.models import Side
from services.lanes.geo.states import CANADIAN_PROVINCES

logger = logging.getLogger(__name__)


class Coverage(str, enum.Enum):
    POLICY_ONLY = "policy_only"                  # only rows fetched for the policy
    POLICY_PLUS_NEARBY = "policy_plus_nearby"    # policy rows + other-state rows within the standard radius
    UNBOUNDED = "unbounded"                      # the whole merged pool, no distance ceiling


class Selection(str, enum.Enum):
    MARKET_BALANCED = "market_balanced"
    STATE_DIVERSITY = "state_diversity"
    PER_MARKET_TOP = "per_market_top"
    ALL = "all"


@dataclass(frozen=True)
class Neighborhood:
    """Fixed reference point whose surroundings are always fetched."""
    name: str
    latitude: float
    longitude: float
    radius_miles: float
    states: frozenset[str]


@dataclass(frozen=True)
class RegionPolicy:
    name: str
    trigger_states: frozenset[str]
    trigger_sides: frozenset[Side] = frozenset({Side.ORIGIN, Side.DESTINATION})

    # Fetch behaviour
    fetch_states: tuple[str, ...] = ()        # whole states fetched unconditionally
    fetch_trigger_state: bool = False         # also fetch the matched endpoint's own state
    named_cities: tuple[str, ...] = ()        # fetched from the matched endpoint's state
    neighborhood: Neighborhood | None = None
    require_market: bool = False              # state fetches skip rows without a market code

    # Pool / filtering
    coverage: Coverage = Coverage.POLICY_PLUS_NEARBY
    allowed_states: frozenset[str] | None = None
    excluded_markets: frozenset[str] = frozenset()

    # Selection
    selection: Selection = Selection.MARKET_BALANCED
    selection_sides: frozenset[Side] = frozenset({Side.ORIGIN, Side.DESTINATION})
    priority_states: tuple[str, ...] = ()
    per_state_limit: int = 15
    per_market_limit: int = 10

    def matches(self, side: Side, state: str) -> bool:
        return side in self.trigger_sides and state in self.trigger_states

    def selection_for(self, side: Side) -> Selection:
        return self.selection if side in self.selection_sides else Selection.MARKET_BALANCED

    def admits(self, state: str, market_code: str | None) -> bool:
        """False for candidates this policy hard-excludes, whatever their distance."""
        if self.allowed_states is not None and state not in self.allowed_states:
            return False
        return market_code not in self.excluded_markets

    def states_to_fetch(self, matched_state: str) -> tuple[str, ...]:
        states = list(self.fetch_states)
        if self.fetch_trigger_state and matched_state not in states:
            states.append(matched_state)
        return tuple(states)


NEW_ENGLAND_STATES = frozenset({"MA", "NH", "ME", "VT", "RI", "CT"})

NYC_LONG_ISLAND_MARKETS = frozenset({
    "NY_BRN", "NY_BKN", "NY_NYC", "NY_QUE", "NY_BRX", "NY_STA", "NY_NAS", "NY_SUF",
})

MAJOR_FLORIDA_CITIES: tuple[str, ...] = (
    "Tallahassee", "Lake City", "Jacksonville", "Gainesville", "St Augustine",
    "Daytona Beach", "Ocala", "Orlando", "The Villages", "Kissimmee",
    "Bartow", "Lakeland", "Tampa", "Sarasota", "Clearwater",
    "St. Petersburg", "Bradenton", "Sebring", "Melbourne", "Fort Pierce",
    "Vero Beach", "Punta Gorda", "Fort Myers", "Cape Coral", "Fort Lauderdale",
    "Boynton Beach", "Boca Raton", "West Palm Beach", "Doral", "Port St Lucie",
    "Delray Beach", "Miami", "Homestead", "Naples", "Bonita Springs",
    "Hollywood", "Pembroke Pines", "Hialeah", "Lehigh Acres", "Labelle",
    "Ft Meade", "Auburndale", "Zephyrhills", "Dade City", "Silver Springs",
    "Panama City", "Alachua", "Lady Lake", "Belleview", "Clermont",
    "Oviedo", "Apopka", "Winter Park", "Winter Garden", "Bay Lake",
    "Polk City", "Land O Lakes", "New Port Richey", "Odessa", "Spring Hill",
    "Holiday", "Williston",
)

MCDAVID_FL = Neighborhood(
    name="McDavid, FL",
    latitude=30.8632,
    longitude=-87.3222,
    radius_miles=150.0,
    states=frozenset({"FL", "AL", "MS", "GA"}),
)


POLICIES: tuple[RegionPolicy, ...] = (
    RegionPolicy(
        name="new_england",
        trigger_states=NEW_ENGLAND_STATES,
        trigger_sides=frozenset({Side.DESTINATION}),
        fetch_states=("MA", "NH", "ME", "VT", "RI", "CT", "NY"),
        coverage=Coverage.UNBOUNDED,
        allowed_states=NEW_ENGLAND_STATES | {"NY", "NJ"},
        excluded_markets=NYC_LONG_ISLAND_MARKETS,
        selection=Selection.STATE_DIVERSITY,
        priority_states=("MA", "NH", "VT", "RI", "ME", "CT", "NJ"),
        per_state_limit=15,
    ),
    RegionPolicy(
        name="florida",
        trigger_states=frozenset({"FL"}),
        named_cities=MAJOR_FLORIDA_CITIES,
        neighborhood=MCDAVID_FL,
        coverage=Coverage.POLICY_PLUS_NEARBY,
        selection=Selection.MARKET_BALANCED,
    ),
    RegionPolicy(
        name="texas",
        trigger_states=frozenset({"TX"}),
        fetch_trigger_state=True,
        coverage=Coverage.POLICY_PLUS_NEARBY,
        selection=Selection.PER_MARKET_TOP,
        selection_sides=frozenset({Side.DESTINATION}),
        per_market_limit=10,
    ),
    RegionPolicy(
        name="new_jersey",
        trigger_states=frozenset({"NJ"}),
        fetch_trigger_state=True,
        require_market=True,
        coverage=Coverage.POLICY_PLUS_NEARBY,
        excluded_markets=NYC_LONG_ISLAND_MARKETS,
        selection=Selection.STATE_DIVERSITY,
        priority_states=("NJ", "PA", "NY", "CT", "MA"),
        per_state_limit=20,
    ),
    RegionPolicy(
        name="canada",
        trigger_states=CANADIAN_PROVINCES,
        trigger_sides=frozenset({Side.DESTINATION}),
        fetch_trigger_state=True,
        require_market=True,
        coverage=Coverage.POLICY_ONLY,
        selection=Selection.ALL,
    ),
)


def match_policies(
    origin_state: str,
    dest_state: str,
    policies: tuple[RegionPolicy, ...] = POLICIES,
) -> dict[Side, RegionPolicy]:
    """Map each lane side to the first policy that covers it. Uncovered sides are absent."""
    states = {Side.ORIGIN: origin_state, Side.DESTINATION: dest_state}
    active: dict[Side, RegionPolicy] = {}
    for side, state in states.items():
        for policy in policies:
            if policy.matches(side, state):
                active[side] = policy
                break
    if active:
        logger.info(
            "Region policies: %s",
            ", ".join(f"{side.value}={policy.name}" for side, policy in active.items()),
        )
    return active
