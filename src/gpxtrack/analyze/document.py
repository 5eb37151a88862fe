# gpxtrack/analyze/document.py
"""
Document-level entry points: list a GPX file's tracks and their names.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional
from xml.etree import ElementTree as ET

from gpxtrack.analyze.track import Track
from gpxtrack.formats.gpx import find_tracks, parse_gpx_string, read_gpx, track_name

NO_NAME = "No Name"


class GpxDocument:
    """A parsed GPX document."""

    def __init__(self, root: ET.Element, *, source: Optional[Path] = None) -> None:
        self.root = root
        self.source = source

    @classmethod
    def from_string(cls, text: str) -> "GpxDocument":
        return cls(parse_gpx_string(text))

    @classmethod
    def from_path(cls, path: Path) -> "GpxDocument":
        path = Path(path)
        return cls(read_gpx(path).getroot(), source=path)

    def __repr__(self) -> str:
        return f"GpxDocument(source={self.source!r}, tracks={len(find_tracks(self.root))})"


def get_track_names(document: GpxDocument) -> list[str]:
    """Name of every track in document order; unnamed tracks are listed as "No Name"."""
    names = []
    for trk in find_tracks(document.root):
        name = track_name(trk)
        names.append(NO_NAME if name is None else name)
    return names


def get_tracks(document: GpxDocument, *, max_workers: Optional[int] = None) -> list[Track]:
    """Track handles for every <trk>, in document order."""
    return [Track.from_element(trk, max_workers=max_workers) for trk in find_tracks(document.root)]
