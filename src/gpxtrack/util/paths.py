# gpxtrack/util/paths.py
from __future__ import annotations

import re
from pathlib import Path

_slug_bad = re.compile(r"[^a-z0-9]+")

def ensure_dir(path: Path) -> None:
    """Ensure a directory exists."""
    path.mkdir(parents=True, exist_ok=True)

def slugify(text: str | None, *, default: str = "untitled") -> str:
    """Create a path-safe slug (lowercase, a-z0-9 and single underscores)."""
    s = (text or "").strip().lower()
    s = _slug_bad.sub("_", s).strip("_")
    return s or default

def list_gpx_files(root: Path) -> list[Path]:
    """All *.gpx files under `root`, sorted; empty if root is not a directory."""
    if not root.is_dir():
        return []
    return sorted(p for p in root.rglob("*.gpx") if p.is_file())
