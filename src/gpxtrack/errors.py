# gpxtrack/errors

"""
gpxtrack.errors

Central exception hierarchy for gpxtrack.

Rationale:
  - Analysis code raises specific, meaningful errors.
  - Callers can catch GpxTrackError (broad) or specific subclasses (narrow).
  - Index-like failures also subclass IndexError, malformed values ValueError,
    so generic handlers keep working.
"""

from __future__ import annotations

from typing import Optional


class GpxTrackError(RuntimeError):
    """Base class for all gpxtrack runtime errors."""


# ---- Input / data errors -----------------------

class MalformedInputError(GpxTrackError, ValueError):
    """A required coordinate value (latitude/longitude) is absent or not a number."""

class EmptyCollectionError(GpxTrackError):
    """An operation needs at least one point but the sequence is empty."""


# ---- Lookup errors -----------------------------

class OutOfBoundsError(GpxTrackError, IndexError):
    """A requested cumulative distance lies outside the segment's distance range."""

    def __init__(self, target: float, lower: float, upper: float) -> None:
        super().__init__(
            f"distance {target!r} outside segment range [{lower!r}, {upper!r}]"
        )
        self.target = target
        self.lower = lower
        self.upper = upper

class NoSuchSegmentError(GpxTrackError, IndexError):
    """A segment index was requested that the track does not have."""

    def __init__(self, index: int, count: int) -> None:
        super().__init__(f"segment {index} does not exist (track has {count})")
        self.index = index
        self.count = count


# ---- Document / adapter errors -----------------

class DocumentError(GpxTrackError):
    """Errors raised while reading a GPX document."""

class MissingSegmentsError(DocumentError):
    """The document adapter could not enumerate segments for a track at all."""

    def __init__(self, track_name: Optional[str] = None) -> None:
        label = track_name if track_name is not None else "<unnamed>"
        super().__init__(f"unable to find track segments for track {label}")
        self.track_name = track_name

class InvalidGpxError(DocumentError):
    """GPX text could not be parsed as XML."""


# ---- CLI errors --------------------------------

class FzfNotFoundError(GpxTrackError):
    """fzf is required but not available on PATH."""
