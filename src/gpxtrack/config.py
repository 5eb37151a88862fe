"""
gpxtrack configuration loader

This module centralizes *all* configuration handling for gpxtrack.

Design goals:
- Keep the CLI Unix-friendly: CLI flags override everything.
- Provide sensible defaults if no config exists.
- Allow per-machine config without committing personal paths:
    ~/.config/gpxtrack/config.toml
- Allow repo-local config:
    <repo_root>/config/config.toml
- Allow environment variable overrides for automation.

Precedence (highest to lowest) for any given value:
1) CLI argument (handled by gpxtrack.analyze.gpx_analyze)
2) Environment variables (GPXTRACK_*)
3) User config: ~/.config/gpxtrack/config.toml
4) Repo config: <repo_root>/config/config.toml
5) Hard defaults (~/GPS/... paths, ellipsoid metric)

This module uses Python's built-in tomllib on Python 3.11+, or `tomli` if installed.

Example config.toml:

    [paths]
    runtime_root = "~/GPS"
    work_root = "~/GPS/_work"
    plot_root = "~/GPS/_plots"

    [analyze]
    default_segment = 0
    nearest_metric = "ellipsoid"   # or "surface"
    max_workers = 4
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from gpxtrack.analyze.geodesy import METRICS

# ---------------------------------------------------------------------------
# TOML loading helpers
# ---------------------------------------------------------------------------
def _load_toml(path: Path) -> dict[str, Any]:
    """
    Parse a TOML file at `path`.

    Behavior:
    - If the file does not exist, return an empty dict (non-fatal).
    - If the file exists but is invalid TOML, raise a RuntimeError
      with a clear, user-facing message.
    """
    if not path.is_file():
        return {}

    try:
        try:
            import tomllib
            return tomllib.loads(path.read_text(encoding="utf-8")) or {}
        except ModuleNotFoundError:
            import tomli
            return tomli.loads(path.read_text(encoding="utf-8")) or {}
    except Exception as e:
        raise RuntimeError(f"Failed to parse TOML config: {path} ({e})") from e


# ---------------------------------------------------------------------------
# Generic coercion helpers
# ---------------------------------------------------------------------------
def _deep_get(d: dict[str, Any], dotted_key: str) -> Any:
    """
    Fetch nested dictionary values using dot-separated keys.

    Example:
        _deep_get(cfg, "paths.work_root")

    Returns None if any part of the path is missing.
    """
    cur: Any = d
    for part in dotted_key.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return None
        cur = cur[part]
    return cur


def _as_path(v: Any) -> Optional[Path]:
    """
    Coerce a config value into a pathlib.Path if possible.

    Returns None if value cannot be interpreted as a path.
    """
    if v is None:
        return None
    if isinstance(v, Path):
        return v.expanduser()
    if isinstance(v, str):
        return Path(v).expanduser()
    return None


def _as_int(v: Any) -> Optional[int]:
    """
    Coerce a config value into an int; None if it is not one.

    Booleans are rejected (TOML `true` is not a worker count).
    """
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v
    if isinstance(v, str):
        try:
            return int(v.strip())
        except ValueError:
            return None
    return None


def _as_metric(v: Any) -> Optional[str]:
    """Accept only the names of known distance metrics."""
    if v is None:
        return None
    s = str(v).strip().lower()
    return s if s in METRICS else None


def _env_path(var: str) -> Optional[Path]:
    val = os.environ.get(var)
    return Path(val).expanduser() if val else None


# ---------------------------------------------------------------------------
# Repo discovery + defaults
# ---------------------------------------------------------------------------
def find_repo_root(start: Path) -> Optional[Path]:
    """
    Walk upward from `start` looking for the repo root.

    Heuristic:
    - The presence of a `config/` directory marks the repo root
    """
    start = start.resolve()
    for p in [start] + list(start.parents):
        if (p / "config").is_dir():
            return p
    return None


def default_runtime_root() -> Path:
    """
    Default runtime root if nothing is configured.

    work_root and plot_root derive from this path unless explicitly overridden.
    """
    return Path.home() / "GPS"


# ---------------------------------------------------------------------------
# Typed config dataclasses
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class GpxTrackPaths:
    """Resolved filesystem paths used by gpxtrack."""

    runtime_root: Path
    work_root: Path
    plot_root: Path


@dataclass(frozen=True)
class AnalyzeConfig:
    """
    Analysis defaults.

    - default_segment: segment used by --at-distance when --segment is not given
    - nearest_metric: "ellipsoid" (engine model) or "surface" (haversine)
    - max_workers: thread pool size for per-segment accumulation (None: sequential)
    """

    default_segment: int = 0
    nearest_metric: str = "ellipsoid"
    max_workers: Optional[int] = None


@dataclass(frozen=True)
class GpxTrackConfig:
    """
    Fully merged gpxtrack configuration.

    Attributes:
    - paths: resolved filesystem layout
    - analyze: analysis defaults
    - source: provenance map showing where each value came from
    """

    paths: GpxTrackPaths
    analyze: AnalyzeConfig
    source: dict[str, str]


# ---------------------------------------------------------------------------
# Main config loader
# ---------------------------------------------------------------------------
_PATH_KEYS = ("paths.runtime_root", "paths.work_root", "paths.plot_root")

_ENV_PATHS = {
    "GPXTRACK_RUNTIME_ROOT": "paths.runtime_root",
    "GPXTRACK_WORK_ROOT": "paths.work_root",
    "GPXTRACK_PLOT_ROOT": "paths.plot_root",
}


def load_config(
    repo_root: Optional[Path] = None,
    repo_config_path: Optional[Path] = None,
    user_config_path: Optional[Path] = None,
) -> GpxTrackConfig:
    """
    Load, merge, and normalize all gpxtrack configuration.

    This function is the single authoritative entry point
    for configuration access.
    """

    # Locate repo and config files
    if repo_root is None:
        repo_root = find_repo_root(Path(__file__).resolve())
    if repo_config_path is None and repo_root is not None:
        repo_config_path = repo_root / "config" / "config.toml"
    if user_config_path is None:
        user_config_path = Path.home() / ".config" / "gpxtrack" / "config.toml"

    repo_cfg = _load_toml(repo_config_path) if repo_config_path else {}
    user_cfg = _load_toml(user_config_path) if user_config_path else {}
    labels = {
        "repo": f"repo:{repo_config_path}",
        "user": f"user:{user_config_path}",
    }

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------
    paths: dict[str, Path] = {
        "paths.runtime_root": default_runtime_root(),
        "paths.work_root": default_runtime_root() / "_work",
        "paths.plot_root": default_runtime_root() / "_plots",
    }
    src = {k: "default" for k in _PATH_KEYS}

    for cfg, label in ((repo_cfg, "repo"), (user_cfg, "user")):
        for k in _PATH_KEYS:
            v = _as_path(_deep_get(cfg, k))
            if v is None:
                continue
            paths[k] = v
            src[k] = labels[label]

    for env, key in _ENV_PATHS.items():
        v = _env_path(env)
        if v is None:
            continue
        paths[key] = v
        src[key] = f"env:{env}"

    # Derive subfolders if runtime_root changed
    runtime_root = paths["paths.runtime_root"]
    if src["paths.work_root"] == "default":
        paths["paths.work_root"] = runtime_root / "_work"
    if src["paths.plot_root"] == "default":
        paths["paths.plot_root"] = runtime_root / "_plots"

    # ------------------------------------------------------------------
    # Analyze settings
    # ------------------------------------------------------------------
    default_segment = 0
    nearest_metric = "ellipsoid"
    max_workers: Optional[int] = None
    src.update({
        "analyze.default_segment": "default",
        "analyze.nearest_metric": "default",
        "analyze.max_workers": "default",
    })

    for cfg, label in ((repo_cfg, "repo"), (user_cfg, "user")):
        seg = _as_int(_deep_get(cfg, "analyze.default_segment"))
        if seg is not None and seg >= 0:
            default_segment = seg
            src["analyze.default_segment"] = labels[label]

        metric = _as_metric(_deep_get(cfg, "analyze.nearest_metric"))
        if metric is not None:
            nearest_metric = metric
            src["analyze.nearest_metric"] = labels[label]

        workers = _as_int(_deep_get(cfg, "analyze.max_workers"))
        if workers is not None and workers > 0:
            max_workers = workers
            src["analyze.max_workers"] = labels[label]

    env_metric = _as_metric(os.environ.get("GPXTRACK_NEAREST_METRIC"))
    if env_metric is not None:
        nearest_metric = env_metric
        src["analyze.nearest_metric"] = "env:GPXTRACK_NEAREST_METRIC"

    return GpxTrackConfig(
        paths=GpxTrackPaths(
            runtime_root=paths["paths.runtime_root"].expanduser(),
            work_root=paths["paths.work_root"].expanduser(),
            plot_root=paths["paths.plot_root"].expanduser(),
        ),
        analyze=AnalyzeConfig(
            default_segment=default_segment,
            nearest_metric=nearest_metric,
            max_workers=max_workers,
        ),
        source=src,
    )
