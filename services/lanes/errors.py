"""
Failures that abort option generation for a lane.

Everything else in the pipeline (overlay loaders, postal-prefix lookups,
region and hub fetches) degrades with a log line instead of raising.
"""

from __future__ import annotations


class OptionGenerationError(Exception):
    """Base class for errors surfaced to the caller of the option generator."""


class LaneInputError(OptionGenerationError):
    """The lane cannot be processed as given (e.g. missing coordinates)."""


class LaneNotFoundError(LaneInputError):
    """No lane exists for the requested id."""

    def __init__(self, lane_id: str) -> None:
        super().__init__(f"Lane {lane_id!r} not found")
        self.lane_id = lane_id


class EmptyCandidatePoolError(OptionGenerationError):
    """The bounding-box search found no cities and no region policy covers the lane."""
