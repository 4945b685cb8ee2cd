"""
City store access.

The option generator only sees the CityRepository / MarketPrefixRepository
protocols. PgCityRepository and PgMarketPrefixRepository implement them over
an asyncpg pool against the `cities` and `zip3s` tables.

Rows are returned as plain dicts with the store's column names:
    id, city, state_or_province, latitude, longitude, zip, kma_code, kma_name
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol

logger = logging.getLogger(__name__)

# Hosted city stores cap result sets; the lane-box split exists because of it.
DEFAULT_ROW_LIMIT = 1000

_CITY_COLUMNS = 'id, city, state_or_province, latitude, longitude, zip, kma_code, kma_name'


class CityRepository(Protocol):
    """Read-only queries over the city store."""

    async def query_bounding_box(
        self,
        min_lat: float,
        max_lat: float,
        min_lon: float,
        max_lon: float,
    ) -> list[dict[str, Any]]:
        ...

    async def query_by_state(
        self,
        state: str,
        city_names: Sequence[str] | None = None,
        require_market: bool = False,
    ) -> list[dict[str, Any]]:
        ...


class MarketPrefixRepository(Protocol):
    """Postal prefix (zip3 / FSA) -> market code."""

    async def lookup(self, postal_prefix: str) -> str | None:
        ...


class PgCityRepository:
    """
    asyncpg-backed CityRepository.

    Usage:
        repo = PgCityRepository(pool)
        rows = await repo.query_bounding_box(40.0, 43.0, -89.0, -86.0)
    """

    def __init__(self, db, row_limit: int = DEFAULT_ROW_LIMIT) -> None:
        self._db = db
        self._row_limit = row_limit

    async def query_bounding_box(
        self,
        min_lat: float,
        max_lat: float,
        min_lon: float,
        max_lon: float,
    ) -> list[dict[str, Any]]:
        rows = await self._db.fetch(
            f"""
            SELECT {_CITY_COLUMNS}
            FROM cities
            WHERE latitude BETWEEN $1 AND $2
              AND longitude BETWEEN $3 AND $4
            LIMIT $5
            """,
            min_lat,
            max_lat,
            min_lon,
            max_lon,
            self._row_limit,
        )
        if len(rows) >= self._row_limit:
            logger.warning(
                "City box query hit row limit (%d) for lat[%.2f, %.2f] lon[%.2f, %.2f]",
                self._row_limit, min_lat, max_lat, min_lon, max_lon,
            )
        return [dict(row) for row in rows]

    async def query_by_state(
        self,
        state: str,
        city_names: Sequence[str] | None = None,
        require_market: bool = False,
    ) -> list[dict[str, Any]]:
        """
        All cities in a state, or only the named ones (case-insensitive).
        No row limit: full-state coverage is the point of this query.
        """
        market_clause = "AND kma_code IS NOT NULL" if require_market else ""
        if city_names is None:
            rows = await self._db.fetch(
                f"""
                SELECT {_CITY_COLUMNS}
                FROM cities
                WHERE state_or_province = $1
                  {market_clause}
                ORDER BY city
                """,
                state,
            )
        else:
            if not city_names:
                return []
            rows = await self._db.fetch(
                f"""
                SELECT {_CITY_COLUMNS}
                FROM cities
                WHERE state_or_province = $1
                  AND lower(city) = ANY($2::text[])
                  {market_clause}
                ORDER BY city
                """,
                state,
                [name.lower() for name in city_names],
            )
        return [dict(row) for row in rows]


class PgMarketPrefixRepository:
    """asyncpg-backed MarketPrefixRepository over `zip3s`."""

    def __init__(self, db) -> None:
        self._db = db

    async def lookup(self, postal_prefix: str) -> str | None:
        row = await self._db.fetchrow(
            "SELECT kma_code FROM zip3s WHERE zip3 = $1 LIMIT 1",
            postal_prefix,
        )
        if row is None:
            return None
        return row["kma_code"] or None
