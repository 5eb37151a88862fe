# gpxtrack/visualize/plot.py
"""
Plotting routines for gpxtrack
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

import matplotlib.pyplot as plt

from gpxtrack.analyze.accumulate import SegmentInfo


def _finish(fig, out_path: Optional[Path]):
    if out_path is not None:
        out_path = Path(out_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(out_path, dpi=120)
    return fig


def plot_elevation_profile(info: SegmentInfo, *, title: str = "Elevation profile",
                           out_path: Optional[Path] = None):
    """Elevation against cumulative distance (km) for one segment."""
    km = [p.distance_from_start / 1000.0 for p in info.points]
    ele = [p.elevation for p in info.points]

    fig, ax = plt.subplots(figsize=(10, 4))
    ax.plot(km, ele, linewidth=1.2)
    if ele:
        ax.fill_between(km, ele, min(ele), alpha=0.2)
    ax.set_xlabel("Distance (km)")
    ax.set_ylabel("Elevation (m)")
    ax.set_title(
        f"{title}  (+{info.total_elevation_gain:.0f} m / -{info.total_elevation_loss:.0f} m)"
    )
    ax.grid(True, alpha=0.3)
    return _finish(fig, out_path)


def plot_track(infos: Sequence[SegmentInfo], *, title: str = "Track",
               out_path: Optional[Path] = None):
    """Segments drawn in lon/lat, coloured by distance from each segment's start."""
    fig, ax = plt.subplots(figsize=(8, 6))
    sc = None
    for info in infos:
        if info.is_empty:
            continue
        lons = [p.longitude for p in info.points]
        lats = [p.latitude for p in info.points]
        dist = [p.distance_from_start / 1000.0 for p in info.points]
        sc = ax.scatter(lons, lats, c=dist, s=5, cmap="viridis")
    if sc is not None:
        fig.colorbar(sc, ax=ax, label="Distance from segment start (km)")
    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")
    ax.set_title(title)
    return _finish(fig, out_path)
