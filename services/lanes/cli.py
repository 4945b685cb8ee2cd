"""
Generate posting options for one lane from the command line.

    python -m services.lanes.cli <lane-id> [--per-side 100] [--radius 100] [--deadline 8] [-v]

Prints the LaneOptions JSON to stdout. Exit codes:
    0  success
    1  configuration problem (no database URL)
    2  lane not found / unusable lane input
    3  no candidate cities around the lane
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

import asyncpg
from dotenv import load_dotenv

from services.lanes.config import settings
from services.lanes.errors import EmptyCandidatePoolError, LaneInputError
from services.lanes.generation.engine import OptionGenerator
from services.lanes.overlay.store import OverlayStore
from services.lanes.repositories import (
    PgBlacklistRepository,
    PgCityRepository,
    PgCorrectionRepository,
    PgLaneRepository,
    PgMarketPrefixRepository,
)
from services.lanes.sentry import setup_sentry

logger = logging.getLogger(__name__)

EXIT_CONFIG = 1
EXIT_BAD_LANE = 2
EXIT_EMPTY_POOL = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate origin/destination posting options for a lane")
    parser.add_argument("lane_id", help="Lane id (lanes.id)")
    parser.add_argument("--database-url", default=settings.database_url)
    parser.add_argument("--per-side", type=int, default=settings.options_per_side,
                        help="Maximum options per side")
    parser.add_argument("--radius", type=float, default=settings.standard_radius_mi,
                        help="Standard search radius in miles")
    parser.add_argument("--deadline", type=float, default=settings.generation_deadline_s,
                        help="Seconds before partial results are used")
    parser.add_argument("--indent", type=int, default=2)
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def build_generator(pool, per_side: int, radius: float, deadline: float | None) -> OptionGenerator:
    overlay = OverlayStore(
        correction_loader=PgCorrectionRepository(pool).load_all,
        blacklist_loader=PgBlacklistRepository(pool).load_all,
        ttl_s=settings.overlay_cache_ttl_s,
    )
    return OptionGenerator(
        PgCityRepository(pool, row_limit=settings.city_query_row_limit),
        PgMarketPrefixRepository(pool),
        overlay,
        desired_per_side=per_side,
        standard_radius_mi=radius,
        deadline_s=deadline,
    )


async def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose or settings.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    setup_sentry()

    if not args.database_url:
        logger.error("DATABASE_URL not set")
        return EXIT_CONFIG

    pool = await asyncpg.create_pool(args.database_url)
    try:
        generator = build_generator(pool, args.per_side, args.radius, args.deadline)
        options = await generator.generate_for_lane_id(args.lane_id, PgLaneRepository(pool))
    except LaneInputError as exc:
        logger.error("%s", exc)
        return EXIT_BAD_LANE
    except EmptyCandidatePoolError as exc:
        logger.error("%s", exc)
        return EXIT_EMPTY_POOL
    finally:
        await pool.close()

    print(json.dumps(options.to_dict(), indent=args.indent or None))
    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
