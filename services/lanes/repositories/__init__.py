"""
Repository layer for the lane option generator.

Protocols describe what the generator needs; Pg* classes implement them
over an asyncpg pool.
"""

from services.lanes.repositories.cities import (
    CityRepository,
    MarketPrefixRepository,
    PgCityRepository,
    PgMarketPrefixRepository,
)
from services.lanes.repositories.lanes import LaneRepository, PgLaneRepository
from services.lanes.repositories.overlay import (
    BlacklistRepository,
    CorrectionRepository,
    PgBlacklistRepository,
    PgCorrectionRepository,
)

__all__ = [
    "CityRepository",
    "MarketPrefixRepository",
    "PgCityRepository",
    "PgMarketPrefixRepository",
    "LaneRepository",
    "PgLaneRepository",
    "BlacklistRepository",
    "CorrectionRepository",
    "PgBlacklistRepository",
    "PgCorrectionRepository",
]
