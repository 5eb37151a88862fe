# gpxtrack/analyze/locate.py
"""
Search over accumulated segments.

- locate_distance: the point at a travelled distance, linearly interpolated
  between the two bracketing points.
- find_nearest: the recorded point closest to a query coordinate.

Both work on AnnotatedPoint sequences as produced by
gpxtrack.analyze.accumulate.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from gpxtrack.analyze.accumulate import AnnotatedPoint
from gpxtrack.analyze.geodesy import Coordinate, DistanceMetric, positional_distance
from gpxtrack.errors import EmptyCollectionError, OutOfBoundsError


@dataclass(frozen=True)
class LocateResult:
    closest_point_index: int
    estimated_coordinate: Coordinate


@dataclass(frozen=True)
class NearestResult:
    index: int
    distance: float
    key: int


def find_bracket(points: Sequence[AnnotatedPoint], target: float) -> tuple[int, int]:
    """
    Return (lower, upper) with upper - lower <= 1 and
    points[lower].distance_from_start <= target <= points[upper].distance_from_start.

    lower == upper when the target hits a point's distance exactly.
    """
    if not points:
        raise EmptyCollectionError("cannot locate a distance in an empty segment")

    first = points[0].distance_from_start
    last = points[-1].distance_from_start
    if math.isnan(target) or target < first or target > last:
        raise OutOfBoundsError(target, first, last)

    lower, upper = 0, len(points) - 1
    while upper - lower > 1:
        mid = (lower + upper) // 2
        d = points[mid].distance_from_start
        if d == target:
            return mid, mid
        if d < target:
            lower = mid
        else:
            upper = mid

    if points[lower].distance_from_start == target:
        return lower, lower
    if points[upper].distance_from_start == target:
        return upper, upper
    return lower, upper


def _interpolate(lo: AnnotatedPoint, hi: AnnotatedPoint, p: float) -> Coordinate:
    return Coordinate(
        lo.latitude + p * (hi.latitude - lo.latitude),
        lo.longitude + p * (hi.longitude - lo.longitude),
        lo.elevation + p * (hi.elevation - lo.elevation),
    )


def locate_distance(points: Sequence[AnnotatedPoint], target: float) -> LocateResult:
    """
    Find the point at cumulative distance `target` (meters).

    Raises:
      EmptyCollectionError if points is empty
      OutOfBoundsError if target is outside [first, last] distance
    """
    lower, upper = find_bracket(points, target)
    lo = points[lower]

    if lower == upper:
        return LocateResult(closest_point_index=lower, estimated_coordinate=lo.coordinate)

    hi = points[upper]
    # find_bracket only returns distinct ends when lo < target < hi
    p = (target - lo.distance_from_start) / (hi.distance_from_start - lo.distance_from_start)

    if abs(target - lo.distance_from_start) <= abs(hi.distance_from_start - target):
        closest = lower
    else:
        closest = upper

    return LocateResult(closest_point_index=closest, estimated_coordinate=_interpolate(lo, hi, p))


def find_nearest(
        points: Sequence[AnnotatedPoint],
        query: Coordinate, *,
        metric: DistanceMetric = positional_distance,
) -> NearestResult:
    """
    Return the point closest to `query` under `metric`.

    Ties go to the first occurrence.
    """
    if not points:
        raise EmptyCollectionError("cannot search for the nearest point in an empty segment")

    best_index = 0
    best_distance = metric(query, points[0].coordinate)
    for i in range(1, len(points)):
        d = metric(query, points[i].coordinate)
        if d < best_distance:
            best_index = i
            best_distance = d

    return NearestResult(index=best_index, distance=best_distance, key=points[best_index].key)
