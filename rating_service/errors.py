"""Exception hierarchy for the rating service."""

from __future__ import annotations


class RatingServiceError(Exception):
    """Base class for errors raised by the rating service."""


class StoreError(RatingServiceError):
    """Raised when the backing triple store cannot be read or updated."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class DeltaFormatError(RatingServiceError):
    """Raised by strict delta parsing when the payload has an unknown shape."""
