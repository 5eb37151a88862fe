# gpxtrack/util/fzf.py
"""
GPX file picker backed by `fzf`
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from shutil import which

from gpxtrack.errors import FzfNotFoundError, GpxTrackError

# fzf exits 1 when nothing matched and 130 when the user pressed Esc / Ctrl-C
_NO_SELECTION = (1, 130)


def _fzf_command(header: str, multi: bool) -> list[str]:
    # match on column 1 (file name), column 2 carries the full path
    cmd = ["fzf", "--delimiter=\t", "--nth=1", "--with-nth=1",
           "--height=60%", "--layout=reverse", "--border", "--header", header]
    if multi:
        cmd.append("--multi")
    return cmd


def fzf_select_paths(paths: list[Path], *, header: str, multi: bool = True) -> list[Path]:
    """
    Let the user pick GPX files from `paths`; returns the chosen paths, resolved.

    An aborted selection gives an empty list.

    Raises:
      FzfNotFoundError if fzf is not on PATH
      GpxTrackError if fzf itself fails
    """
    if not which("fzf"):
        raise FzfNotFoundError("fzf not found on PATH. Install fzf or pass GPX files explicitly.")

    menu = "".join(f"{p.name}\t{p}\n" for p in paths)
    proc = subprocess.run(
        _fzf_command(header, multi),
        input=menu.encode(),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
    if proc.returncode in _NO_SELECTION:
        return []
    if proc.returncode != 0:
        raise GpxTrackError(f"fzf failed: {proc.stderr.decode(errors='replace').strip()}")

    chosen = []
    for line in proc.stdout.decode().splitlines():
        _, _, full = line.strip().partition("\t")
        if full:
            chosen.append(Path(full).expanduser().resolve())
    return chosen
