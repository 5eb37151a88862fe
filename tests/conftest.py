from pathlib import Path

import matplotlib
import pytest

matplotlib.use("Agg")

from gpxtrack.analyze.geodesy import Coordinate


@pytest.fixture
def sample_gpx_path() -> Path:
    return Path(__file__).parent / "data" / "sample.gpx"


@pytest.fixture
def equator_points() -> list[Coordinate]:
    """Four points along the equator, 0.001 deg apart, elevations 100/110/105/120."""
    return [
        Coordinate(0.0, 0.0, 100.0),
        Coordinate(0.0, 0.001, 110.0),
        Coordinate(0.0, 0.002, 105.0),
        Coordinate(0.0, 0.003, 120.0),
    ]
