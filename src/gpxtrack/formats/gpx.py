# gpxtrack/formats/gpx.py
"""
GPX helpers for gpxtrack

This module is intentionally format-focused:
- GPX namespace handling
- safely reading GPX into an ElementTree
- pulling tracks, names, segments and points out of the tree

Key design principle:
  Keep analysis (distances, searches, caching) in gpxtrack.analyze,
  separate from XML traversal (here).

Namespaces:
  GPX 1.1 is the reference format. Elements are looked up in whatever
  namespace the document's root uses, so GPX 1.0 files and files with no
  namespace work the same way.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional
from xml.etree import ElementTree as ET

from gpxtrack.analyze.geodesy import Coordinate
from gpxtrack.errors import InvalidGpxError, MalformedInputError

# GPX 1.1 default namespace
GPX_NS = {"gpx": "http://www.topografix.com/GPX/1/1"}


def qn(tag: str, ns: str = GPX_NS["gpx"]) -> str:
    """
    Build an ElementTree-qualified name for a GPX tag.

    ElementTree represents namespaced tags internally as
      "{namespace-uri}tag"
    An empty namespace gives the bare tag.
    """
    return f"{{{ns}}}{tag}" if ns else tag


def namespace_of(elem: ET.Element) -> str:
    """Namespace URI of an element's tag ("" when unqualified)."""
    tag = elem.tag
    if isinstance(tag, str) and tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return ""


def local_name(elem: ET.Element) -> str:
    tag = elem.tag
    if isinstance(tag, str) and "}" in tag:
        return tag.split("}", 1)[1]
    return tag


def read_gpx(path: Path) -> ET.ElementTree:
    """
    Read a GPX file into an ElementTree.

    Raises:
      InvalidGpxError if the file is not well-formed XML
      OSError if the file cannot be read
    """
    try:
        return ET.parse(path)
    except ET.ParseError as e:
        raise InvalidGpxError(f"Could not parse GPX file {path}: {e}") from e


def parse_gpx_string(text: str) -> ET.Element:
    """
    Parse GPX text and return the root element.

    Raises:
      InvalidGpxError if the text is not well-formed XML
    """
    try:
        return ET.fromstring(text)
    except ET.ParseError as e:
        raise InvalidGpxError(f"Could not parse GPX text: {e}") from e


def find_tracks(root: ET.Element) -> list[ET.Element]:
    """Return the <trk> children of the <gpx> root, in document order."""
    return root.findall(qn("trk", namespace_of(root)))


def track_name(trk: ET.Element) -> Optional[str]:
    """
    Return the track's <name> text, or None if the track has no <name>.

    An empty <name/> element gives "".
    """
    node = trk.find(qn("name", namespace_of(trk)))
    if node is None:
        return None
    return (node.text or "").strip()


def coordinate_from_trkpt(trkpt: ET.Element) -> Coordinate:
    """
    Build a Coordinate from a <trkpt> element.

    lat/lon attributes are required; <ele> is optional and a missing or
    unparseable value becomes 0.0.

    Raises:
      MalformedInputError naming the bad attribute
    """
    ele = trkpt.findtext(qn("ele", namespace_of(trkpt)))
    try:
        return Coordinate.parse(trkpt.get("lat"), trkpt.get("lon"), ele)
    except MalformedInputError as e:
        raise MalformedInputError(f"<{local_name(trkpt)}> {e}") from e


def track_segments(trk: ET.Element) -> Optional[list[list[Coordinate]]]:
    """
    Extract the ordered points of every <trkseg> in a track.

    Returns None when `trk` is not a <trk> element at all (no segment list can
    be produced); a track without segments gives an empty list.
    """
    if local_name(trk) != "trk":
        return None
    ns = namespace_of(trk)
    return [
        [coordinate_from_trkpt(pt) for pt in seg.findall(qn("trkpt", ns))]
        for seg in trk.findall(qn("trkseg", ns))
    ]
