# gpxtrack/analyze/track.py
"""
Track handles and the per-track segment cache for gpxtrack.

A Track wraps a name and a loader for its raw segments. The first request for
segment data runs the accumulator over every segment and keeps the result for
the life of the handle; every query after that reads the cached tuples.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Optional, Sequence, Union
from xml.etree import ElementTree as ET

from gpxtrack.analyze.accumulate import SegmentInfo, accumulate_all
from gpxtrack.analyze.geodesy import Coordinate, DistanceMetric, positional_distance
from gpxtrack.analyze.locate import LocateResult, NearestResult, find_nearest, locate_distance
from gpxtrack.errors import MissingSegmentsError, NoSuchSegmentError
from gpxtrack.formats.gpx import track_name, track_segments

RawSegments = Sequence[Sequence[Coordinate]]
SegmentLoader = Callable[[], Optional[RawSegments]]

_UNCOMPUTED = object()


class TrackCache:
    """
    Compute-once holder for a track's accumulated segments.

    Holds a sentinel until the first successful computation. Concurrent first
    callers are serialized on a lock, so the computation runs once and every
    caller gets the same object. A failing computation stores nothing.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: Any = _UNCOMPUTED

    @property
    def is_populated(self) -> bool:
        return self._value is not _UNCOMPUTED

    def get(self, compute: Callable[[], Any]) -> Any:
        value = self._value
        if value is not _UNCOMPUTED:
            return value
        with self._lock:
            if self._value is _UNCOMPUTED:
                self._value = compute()
            return self._value

    def clear(self) -> None:
        with self._lock:
            self._value = _UNCOMPUTED


class Track:
    """One named path made of one or more segments."""

    def __init__(
            self,
            name: Optional[str],
            load_segments: SegmentLoader, *,
            max_workers: Optional[int] = None,
    ) -> None:
        self._name = name
        self._load_segments = load_segments
        self._max_workers = max_workers
        self._cache = TrackCache()

    @classmethod
    def from_segments(
            cls,
            segments: Optional[RawSegments],
            name: Optional[str] = None, *,
            max_workers: Optional[int] = None,
    ) -> "Track":
        """Build a track from in-memory point lists (None means no segment list)."""
        frozen = None if segments is None else tuple(tuple(seg) for seg in segments)
        return cls(name, lambda: frozen, max_workers=max_workers)

    @classmethod
    def from_element(cls, trk: ET.Element, *, max_workers: Optional[int] = None) -> "Track":
        """Build a track from a GPX <trk> element; points are read on first use."""
        return cls(track_name(trk), lambda: track_segments(trk), max_workers=max_workers)

    def __repr__(self) -> str:
        state = "loaded" if self._cache.is_populated else "pending"
        return f"Track(name={self._name!r}, {state})"

    def get_name(self) -> Optional[str]:
        """The track's name, or None if the document has no name for it."""
        return self._name

    @property
    def name(self) -> Optional[str]:
        return self._name

    def _accumulate_segments(self) -> tuple[SegmentInfo, ...]:
        raw = self._load_segments()
        if raw is None:
            raise MissingSegmentsError(self._name)
        return accumulate_all(raw, max_workers=self._max_workers)

    def load_all_segment_info(self) -> tuple[SegmentInfo, ...]:
        """
        Accumulated info for every segment, in document order.

        Computed on the first call and cached for the lifetime of the track.

        Raises:
          MissingSegmentsError if the adapter cannot enumerate segments
          MalformedInputError if a point has a bad latitude/longitude
        """
        return self._cache.get(self._accumulate_segments)

    def get_segment_info(self, segment_index: int) -> SegmentInfo:
        infos = self.load_all_segment_info()
        if not 0 <= segment_index < len(infos):
            raise NoSuchSegmentError(segment_index, len(infos))
        return infos[segment_index]

    def get_segment_lengths(self) -> list[float]:
        """Total distance of each segment in meters."""
        return [info.total_distance for info in self.load_all_segment_info()]

    def get_point_at_distance(self, target_distance: float, segment_index: int = 0) -> LocateResult:
        """
        Locate the point `target_distance` meters into a segment.

        Raises:
          NoSuchSegmentError, EmptyCollectionError, OutOfBoundsError
        """
        info = self.get_segment_info(segment_index)
        return locate_distance(info.points, target_distance)

    def find_nearest_in_track(
            self,
            coordinate: Coordinate,
            segment_index: Optional[int] = None, *,
            metric: DistanceMetric = positional_distance,
    ) -> Union[NearestResult, list[NearestResult]]:
        """
        Nearest recorded point to `coordinate`.

        With a segment index, returns one NearestResult for that segment.
        Without one, returns a list with one result per segment in order.
        """
        if segment_index is not None:
            info = self.get_segment_info(segment_index)
            return find_nearest(info.points, coordinate, metric=metric)
        return [
            find_nearest(info.points, coordinate, metric=metric)
            for info in self.load_all_segment_info()
        ]

    def summary(self) -> dict[str, Any]:
        infos = self.load_all_segment_info()
        return {
            "name": self._name,
            "segments": len(infos),
            "points": sum(len(info) for info in infos),
            "distance_m": sum(info.total_distance for info in infos),
            "elevation_gain_m": sum(info.total_elevation_gain for info in infos),
            "elevation_loss_m": sum(info.total_elevation_loss for info in infos),
        }

