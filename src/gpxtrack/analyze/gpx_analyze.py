#!/usr/bin/env python3
"""
gpx_analyze.py: per-segment distance and elevation report for GPX files.

Usage:
  gpxtrack-analyze track.gpx [more.gpx ...] [--tsv]
  gpxtrack-analyze track.gpx --segment 1 --at-distance 1500
  gpxtrack-analyze track.gpx --nearest 32.6,-116.4[,1200] [--metric surface]
  gpxtrack-analyze --plot                           (pick files with fzf, plots to plot_root)

Exit status:
  0  all selected files analyzed
  1  at least one file, track or query failed (others are still reported)
  2  nothing to analyze
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence

import matplotlib.pyplot as plt

from gpxtrack.analyze.accumulate import SegmentInfo
from gpxtrack.analyze.document import NO_NAME, GpxDocument, get_tracks
from gpxtrack.analyze.geodesy import METRICS, Coordinate, get_metric
from gpxtrack.analyze.track import Track
from gpxtrack.config import load_config
from gpxtrack.errors import EmptyCollectionError, GpxTrackError, MalformedInputError
from gpxtrack.util.fzf import fzf_select_paths
from gpxtrack.util.logging import log, warn
from gpxtrack.util.paths import ensure_dir, list_gpx_files, slugify
from gpxtrack.visualize.plot import plot_elevation_profile

TSV_HEADER = "file\ttrack\tname\tsegment\tpoints\tdistance_m\televation_gain_m\televation_loss_m"


def parse_coordinate(text: str) -> Coordinate:
    """Parse "LAT,LON" or "LAT,LON,ELE" from the command line."""
    parts = [p.strip() for p in text.split(",")]
    if len(parts) not in (2, 3):
        raise argparse.ArgumentTypeError(f"expected LAT,LON[,ELE], got {text!r}")
    try:
        return Coordinate(*parts)
    except MalformedInputError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def print_report(path: Path, track_index: int, track: Track, *, tsv: bool) -> None:
    infos = track.load_all_segment_info()
    summary = track.summary()
    name = NO_NAME if summary["name"] is None else summary["name"]
    if tsv:
        for i, info in enumerate(infos):
            print(
                f"{path}\t"
                f"{track_index}\t"
                f"{name}\t"
                f"{i}\t"
                f"{len(info)}\t"
                f"{info.total_distance:.2f}\t"
                f"{info.total_elevation_gain:.2f}\t"
                f"{info.total_elevation_loss:.2f}"
            )
        return

    print(f"\n{path} [track {track_index}] {name}")
    print(f"  segments      : {summary['segments']}")
    print(f"  points        : {summary['points']}")
    print(f"  distance (m)  : {summary['distance_m']:.2f}")
    print(f"  gain (m)      : {summary['elevation_gain_m']:.2f}")
    print(f"  loss (m)      : {summary['elevation_loss_m']:.2f}")
    for i, info in enumerate(infos):
        print(f"  segment {i}")
        print(f"    points        : {len(info)}")
        print(f"    distance (m)  : {info.total_distance:.2f}")
        print(f"    gain (m)      : {info.total_elevation_gain:.2f}")
        print(f"    loss (m)      : {info.total_elevation_loss:.2f}")


def _run_queries(track: Track, label: str, args: argparse.Namespace, segment: int, metric) -> bool:
    """Run --at-distance / --nearest for one track. Returns False if a query failed."""
    ok = True
    if args.at_distance is not None:
        try:
            res = track.get_point_at_distance(args.at_distance, segment)
        except GpxTrackError as e:
            warn(f"{label}: cannot locate {args.at_distance} m in segment {segment}: {e}")
            ok = False
        else:
            c = res.estimated_coordinate
            print(
                f"  at {args.at_distance:.2f} m (segment {segment}): "
                f"lat={c.latitude:.6f} lon={c.longitude:.6f} ele={c.elevation:.1f} "
                f"closest point #{res.closest_point_index}"
            )

    if args.nearest is not None:
        if args.segment is not None:
            indices = [args.segment]
        else:
            indices = range(len(track.load_all_segment_info()))
        for seg in indices:
            try:
                res = track.find_nearest_in_track(args.nearest, seg, metric=metric)
            except EmptyCollectionError:
                if args.segment is not None:
                    warn(f"{label}: segment {seg} has no points, no nearest point")
                    ok = False
                elif args.verbose:
                    log(f"{label}: segment {seg} has no points, no nearest point")
                continue
            except GpxTrackError as e:
                warn(f"{label}: nearest-point search failed in segment {seg}: {e}")
                ok = False
                continue
            print(
                f"  nearest (segment {seg}): point #{res.key} "
                f"at {res.distance:.2f} m"
            )
    return ok


def _write_plots(track: Track, infos: Sequence[SegmentInfo], path: Path,
                 track_index: int, label: str, plot_dir: Path) -> None:
    ensure_dir(plot_dir)
    stem = f"{slugify(path.stem)}_{track_index}_{slugify(track.get_name(), default='track')}"
    for i, info in enumerate(infos):
        if info.is_empty:
            continue
        out = plot_dir / f"{stem}_seg{i}.png"
        fig = plot_elevation_profile(info, title=f"{label} / segment {i}", out_path=out)
        plt.close(fig)
        log(f"Wrote: {out}")


def analyze_file(path: Path, args: argparse.Namespace, *, segment: int, metric,
                 max_workers: Optional[int]) -> bool:
    """Report every track in one file. Returns False if anything failed."""
    try:
        doc = GpxDocument.from_path(path)
    except (GpxTrackError, OSError) as e:
        warn(f"Skipping {path}: {e}")
        return False

    tracks = get_tracks(doc, max_workers=max_workers)
    if args.verbose:
        log(f"{path}: {len(tracks)} track(s)")

    ok = True
    for idx, track in enumerate(tracks):
        name = track.get_name()
        label = NO_NAME if name is None else name
        try:
            infos = track.load_all_segment_info()
        except GpxTrackError as e:
            warn(f"Skipping track {idx} ({label}) in {path}: {e}")
            ok = False
            continue

        print_report(path, idx, track, tsv=args.tsv)
        if not _run_queries(track, label, args, segment, metric):
            ok = False
        if args.plot_dir is not None:
            _write_plots(track, infos, path, idx, label, args.plot_dir)
    return ok


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="gpxtrack: distance and elevation report for GPX file(s).")
    ap.add_argument("gpx", nargs="*",
                    help="One or more GPX files. If omitted, pick from the work root with fzf.")
    ap.add_argument("--work-root", default=None,
                    help="Where to look for GPX files (default: from config or ~/GPS/_work)")
    ap.add_argument("--tsv", action="store_true",
                    help="Print tab-separated output, one row per segment (good for piping).")
    ap.add_argument("--segment", type=int, default=None,
                    help=("Segment index. --at-distance uses it, falling back to analyze.default_segment; "
                          "--nearest searches only this segment, or every non-empty segment when omitted."))
    ap.add_argument("--at-distance", type=float, default=None, metavar="METERS",
                    help="Report the interpolated position this far into the segment.")
    ap.add_argument("--nearest", type=parse_coordinate, default=None, metavar="LAT,LON[,ELE]",
                    help="Report the recorded point closest to this coordinate.")
    ap.add_argument("--metric", choices=sorted(METRICS), default=None,
                    help="Distance metric for --nearest (default: from config, ellipsoid).")
    ap.add_argument("--plot-dir", type=Path, default=None,
                    help="Write an elevation profile PNG per segment into this directory.")
    ap.add_argument("--plot", action="store_true",
                    help="Write elevation profile PNGs into the configured plot root (ignored with --plot-dir).")
    ap.add_argument("--verbose", action="store_true",
                    help="More logging.")
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = load_config()

    segment = args.segment if args.segment is not None else cfg.analyze.default_segment
    metric = get_metric(args.metric or cfg.analyze.nearest_metric)
    if args.plot_dir is not None:
        args.plot_dir = args.plot_dir.expanduser()
    elif args.plot:
        args.plot_dir = cfg.paths.plot_root

    if args.gpx:
        selected = [Path(p).expanduser() for p in args.gpx]
    else:
        work_root = Path(args.work_root).expanduser() if args.work_root else cfg.paths.work_root
        gpx_files = list_gpx_files(work_root)
        if not gpx_files:
            warn(f"No GPX files found under {work_root}")
            return 2
        selected = fzf_select_paths(
            gpx_files,
            header="Select GPX file(s) to analyze:",
            multi=True,
        )
        if not selected:
            log("Nothing selected.")
            return 2

    if args.tsv:
        print(TSV_HEADER)

    failed = 0
    for path in selected:
        if not path.is_file():
            warn(f"Skipping (not a file): {path}")
            failed += 1
            continue
        if not analyze_file(path, args, segment=segment, metric=metric,
                            max_workers=cfg.analyze.max_workers):
            failed += 1

    if args.verbose:
        log(f"Analyzed {len(selected) - failed} of {len(selected)} file(s).")
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
