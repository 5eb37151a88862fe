# gpxtrack/analyze/accumulate.py
"""
Segment accumulation: running distance and elevation gain/loss.

`accumulate` walks one segment's raw points in order and returns a fresh
sequence of AnnotatedPoint objects carrying the totals as of each point
(inclusive), plus the segment totals. Input points are never modified.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from gpxtrack.analyze.geodesy import Coordinate, positional_distance


@dataclass(frozen=True)
class AnnotatedPoint:
    latitude: float
    longitude: float
    elevation: float
    distance_from_start: float
    elevation_gain_from_start: float
    elevation_loss_from_start: float
    key: int  # index of the source point in its raw segment

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude, self.elevation)


@dataclass(frozen=True)
class SegmentInfo:
    points: tuple[AnnotatedPoint, ...] = ()
    total_distance: float = 0.0
    total_elevation_gain: float = 0.0
    total_elevation_loss: float = 0.0

    def __len__(self) -> int:
        return len(self.points)

    @property
    def is_empty(self) -> bool:
        return not self.points


@dataclass
class _DistanceState:
    total: float = 0.0
    last: Optional[Coordinate] = None

    def step(self, current: Coordinate) -> float:
        self.total += positional_distance(self.last, current)
        self.last = current
        return self.total


@dataclass
class _ElevationState:
    gain: float
    loss: float
    previous: float

    def step(self, elevation: float) -> None:
        diff = elevation - self.previous
        if diff >= 0:
            self.gain += diff
        else:
            self.loss += -diff
        self.previous = elevation


def accumulate(points: Sequence[Coordinate]) -> SegmentInfo:
    """
    Annotate an ordered segment with cumulative distance and elevation totals.

    Empty input returns an all-zero SegmentInfo. The first point gets distance
    0 and no gain/loss.
    """
    if not points:
        return SegmentInfo()

    distance = _DistanceState()
    elevation = _ElevationState(gain=0.0, loss=0.0, previous=points[0].elevation)
    annotated: list[AnnotatedPoint] = []

    for key, pt in enumerate(points):
        total = distance.step(pt)
        elevation.step(pt.elevation)
        annotated.append(
            AnnotatedPoint(
                latitude=pt.latitude,
                longitude=pt.longitude,
                elevation=pt.elevation,
                distance_from_start=total,
                elevation_gain_from_start=elevation.gain,
                elevation_loss_from_start=elevation.loss,
                key=key,
            )
        )

    return SegmentInfo(
        points=tuple(annotated),
        total_distance=distance.total,
        total_elevation_gain=elevation.gain,
        total_elevation_loss=elevation.loss,
    )


def accumulate_all(
        segments: Iterable[Sequence[Coordinate]], *,
        max_workers: Optional[int] = None,
) -> tuple[SegmentInfo, ...]:
    """
    Accumulate every segment independently, preserving segment order.

    With max_workers > 1 the segments are spread over a thread pool. Any
    failure propagates and no partial result is returned.
    """
    segments = list(segments)
    if max_workers is None or max_workers <= 1 or len(segments) <= 1:
        return tuple(accumulate(seg) for seg in segments)

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return tuple(pool.map(accumulate, segments))
