"""
Loaders for the correction and blacklist overlay tables.

Only ever read here; the tables are maintained by the admin tooling.
"""

from __future__ import annotations

from typing import Protocol

from services.lanes.overlay.store import BlacklistEntry, CorrectionEntry


class CorrectionRepository(Protocol):
    async def load_all(self) -> list[CorrectionEntry]:
        ...


class BlacklistRepository(Protocol):
    async def load_all(self) -> list[BlacklistEntry]:
        ...


class PgCorrectionRepository:
    def __init__(self, db) -> None:
        self._db = db

    async def load_all(self) -> list[CorrectionEntry]:
        rows = await self._db.fetch(
            """
            SELECT incorrect_city, incorrect_state, correct_city, correct_state
            FROM city_corrections
            """
        )
        return [
            CorrectionEntry(
                incorrect_city=row["incorrect_city"],
                incorrect_state=row["incorrect_state"],
                correct_city=row["correct_city"],
                correct_state=row["correct_state"],
            )
            for row in rows
        ]


class PgBlacklistRepository:
    def __init__(self, db) -> None:
        self._db = db

    async def load_all(self) -> list[BlacklistEntry]:
        rows = await self._db.fetch("SELECT city, state FROM blacklisted_cities")
        return [BlacklistEntry(city=row["city"], state=row["state"]) for row in rows]
