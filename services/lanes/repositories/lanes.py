"""Lane lookup by id (the `lanes` table)."""

from __future__ import annotations

import logging
from typing import Protocol

from services.lanes.generation.models import Lane

logger = logging.getLogger(__name__)


class LaneRepository(Protocol):
    async def get(self, lane_id: str) -> Lane | None:
        ...


class PgLaneRepository:
    def __init__(self, db) -> None:
        self._db = db

    async def get(self, lane_id: str) -> Lane | None:
        """Fetch a single lane. Returns None if not found."""
        row = await self._db.fetchrow(
            """
            SELECT id,
                   origin_city, origin_state, origin_latitude, origin_longitude,
                   COALESCE(destination_city, dest_city) AS dest_city,
                   COALESCE(destination_state, dest_state) AS dest_state,
                   dest_latitude, dest_longitude
            FROM lanes
            WHERE id = $1
            """,
            lane_id,
        )
        if row is None:
            return None
        return Lane.model_validate(dict(row))
