# gpxtrack/analyze/geodesy.py
"""
Coordinate model and positional distance for gpxtrack.

The engine measures everything with a single model: each geodetic point is
converted to Cartesian coordinates on the reference ellipsoid (elevation added
along the normal) and distance is the straight-line distance between the two
triples. Accumulation and the default nearest search both use
`positional_distance`.

`surface_distance` (great-circle via the `haversine` package, elevation added by
Pythagoras) is only an alternative metric a caller can hand to the nearest
search. It is never used for accumulation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Optional

from haversine import haversine, Unit

from gpxtrack.errors import MalformedInputError

# Reference ellipsoid
EARTH_RADIUS_M = 6378137.0
FLATTENING = 1.0 / 298.257224

_DEG_TO_RAD = math.pi / 180.0


def _as_number(value: Any, field: str, *, required: bool) -> Optional[float]:
    if value is None:
        if required:
            raise MalformedInputError(f"{field} is required")
        return None
    if isinstance(value, bool):
        raise MalformedInputError(f"{field} must be numeric, got {value!r}")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            if required:
                raise MalformedInputError(f"{field} is required")
            return None
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise MalformedInputError(f"{field} must be numeric, got {value!r}") from e
    if not math.isfinite(number):
        raise MalformedInputError(f"{field} must be finite, got {value!r}")
    return number


@dataclass(frozen=True)
class Coordinate:
    """
    A geodetic position: latitude/longitude in degrees, elevation in meters.

    Latitude and longitude are mandatory; an absent or non-numeric value raises
    MalformedInputError here rather than leaking NaN into later sums.
    Elevation defaults to 0.0.
    """

    latitude: float
    longitude: float
    elevation: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "latitude", _as_number(self.latitude, "latitude", required=True))
        object.__setattr__(self, "longitude", _as_number(self.longitude, "longitude", required=True))
        ele = _as_number(self.elevation, "elevation", required=False)
        object.__setattr__(self, "elevation", 0.0 if ele is None else ele)

    @classmethod
    def parse(cls, lat: Optional[str], lon: Optional[str], ele: Optional[str] = None) -> "Coordinate":
        """
        Build a Coordinate from raw text values (e.g. XML attributes).

        Unlike latitude/longitude, elevation text that is not a number is
        treated as missing and becomes 0.0.
        """
        try:
            elevation = _as_number(ele, "elevation", required=False)
        except MalformedInputError:
            elevation = None
        return cls(lat, lon, 0.0 if elevation is None else elevation)


def to_cartesian(coord: Coordinate) -> tuple[float, float, float]:
    """Convert a coordinate to (x, y, z) meters on the reference ellipsoid."""
    cos_lat = math.cos(coord.latitude * _DEG_TO_RAD)
    sin_lat = math.sin(coord.latitude * _DEG_TO_RAD)
    cos_lon = math.cos(coord.longitude * _DEG_TO_RAD)
    sin_lon = math.sin(coord.longitude * _DEG_TO_RAD)

    one_minus_f_sq = (1.0 - FLATTENING) ** 2
    c = 1.0 / math.sqrt(cos_lat * cos_lat + one_minus_f_sq * sin_lat * sin_lat)
    s = one_minus_f_sq * c
    alt = coord.elevation

    x = (EARTH_RADIUS_M * c + alt) * cos_lat * cos_lon
    y = (EARTH_RADIUS_M * c + alt) * cos_lat * sin_lon
    z = (EARTH_RADIUS_M * s + alt) * sin_lat
    return (x, y, z)


def positional_distance(a: Optional[Coordinate], b: Optional[Coordinate]) -> float:
    """
    3-D distance in meters between two coordinates.

    An absent point on either side yields 0.0 (seeds accumulation at the first
    point of a segment).
    """
    if a is None or b is None:
        return 0.0
    if a == b:
        return 0.0
    ax, ay, az = to_cartesian(a)
    bx, by, bz = to_cartesian(b)
    return math.sqrt((bx - ax) ** 2 + (by - ay) ** 2 + (bz - az) ** 2)


def surface_distance(a: Optional[Coordinate], b: Optional[Coordinate]) -> float:
    """Great-circle distance (haversine) combined with the elevation difference."""
    if a is None or b is None:
        return 0.0
    horizontal = haversine((a.latitude, a.longitude), (b.latitude, b.longitude), unit=Unit.METERS)
    return math.hypot(horizontal, b.elevation - a.elevation)


DistanceMetric = Callable[[Optional[Coordinate], Optional[Coordinate]], float]

METRICS: dict[str, DistanceMetric] = {
    "ellipsoid": positional_distance,
    "surface": surface_distance,
}


def get_metric(name: str) -> DistanceMetric:
    try:
        return METRICS[name]
    except KeyError:
        raise ValueError(
            f"unknown distance metric {name!r} (expected one of: {', '.join(sorted(METRICS))})"
        ) from None
