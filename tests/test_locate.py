import pytest

from gpxtrack.analyze.accumulate import AnnotatedPoint, accumulate
from gpxtrack.analyze.geodesy import Coordinate, surface_distance
from gpxtrack.analyze.locate import find_bracket, find_nearest, locate_distance
from gpxtrack.errors import EmptyCollectionError, OutOfBoundsError


def _points(distances, lats=None, lons=None, eles=None):
    n = len(distances)
    lats = lats or [float(i) for i in range(n)]
    lons = lons or [10.0 + i for i in range(n)]
    eles = eles or [100.0 * (i + 1) for i in range(n)]
    return [
        AnnotatedPoint(
            latitude=lats[i], longitude=lons[i], elevation=eles[i],
            distance_from_start=distances[i],
            elevation_gain_from_start=0.0, elevation_loss_from_start=0.0,
            key=i,
        )
        for i in range(n)
    ]


@pytest.fixture
def line():
    return _points([0.0, 10.0, 20.0, 30.0])


@pytest.mark.parametrize("i", [0, 1, 2, 3])
def test_exact_distance_returns_point_itself(line, i):
    res = locate_distance(line, line[i].distance_from_start)
    assert res.closest_point_index == i
    assert res.estimated_coordinate == line[i].coordinate


def test_interpolates_midway_and_ties_go_to_lower(line):
    res = locate_distance(line, 15.0)
    assert res.closest_point_index == 1
    c = res.estimated_coordinate
    assert c.latitude == pytest.approx(1.5)
    assert c.longitude == pytest.approx(11.5)
    assert c.elevation == pytest.approx(250.0)


@pytest.mark.parametrize("target, closest", [(12.0, 1), (17.0, 2), (29.9, 3), (0.1, 0)])
def test_closest_index(line, target, closest):
    assert locate_distance(line, target).closest_point_index == closest


def test_interpolation_proportion(line):
    c = locate_distance(line, 27.5).estimated_coordinate
    assert c.latitude == pytest.approx(2.75)
    assert c.elevation == pytest.approx(375.0)


@pytest.mark.parametrize("target", [-10.0, -1e-9, 30.000001, 99999999.0, float("nan")])
def test_out_of_bounds(line, target):
    with pytest.raises(OutOfBoundsError):
        locate_distance(line, target)


def test_out_of_bounds_carries_range(line):
    with pytest.raises(OutOfBoundsError) as exc:
        locate_distance(line, 31.0)
    assert exc.value.lower == 0.0
    assert exc.value.upper == 30.0
    assert isinstance(exc.value, IndexError)


def test_empty_points():
    with pytest.raises(EmptyCollectionError):
        locate_distance([], 0.0)


def test_single_point():
    pts = _points([0.0])
    res = locate_distance(pts, 0.0)
    assert res.closest_point_index == 0
    assert res.estimated_coordinate == pts[0].coordinate
    with pytest.raises(OutOfBoundsError):
        locate_distance(pts, 0.5)


def test_repeated_distance_does_not_divide_by_zero():
    pts = _points([0.0, 10.0, 10.0, 20.0])
    res = locate_distance(pts, 10.0)
    assert res.closest_point_index in (1, 2)
    assert res.estimated_coordinate == pts[res.closest_point_index].coordinate


def test_find_bracket(line):
    assert find_bracket(line, 15.0) == (1, 2)
    assert find_bracket(line, 20.0) == (2, 2)
    assert find_bracket(line, 0.0) == (0, 0)
    assert find_bracket(line, 30.0) == (3, 3)


def test_bracket_on_long_segment():
    pts = _points([float(d) for d in range(0, 1000, 7)])
    lower, upper = find_bracket(pts, 500.5)
    assert upper - lower == 1
    assert pts[lower].distance_from_start <= 500.5 <= pts[upper].distance_from_start


def test_locate_is_deterministic(line):
    assert locate_distance(line, 23.3) == locate_distance(line, 23.3)


def test_locate_on_accumulated_segment(equator_points):
    info = accumulate(equator_points)
    last = info.points[-1]
    res = locate_distance(info.points, last.distance_from_start)
    assert res.closest_point_index == 3
    assert res.estimated_coordinate == equator_points[3]

    half = info.points[1].distance_from_start / 2
    c = locate_distance(info.points, half).estimated_coordinate
    assert c.latitude == 0.0
    assert c.longitude == pytest.approx(0.0005)
    assert c.elevation == pytest.approx(105.0)


def test_nearest_exact_point(equator_points):
    info = accumulate(equator_points)
    res = find_nearest(info.points, equator_points[2])
    assert res.index == 2
    assert res.key == 2
    assert res.distance == 0.0


def test_nearest_between_points(equator_points):
    info = accumulate(equator_points)
    res = find_nearest(info.points, Coordinate(0.0001, 0.0026, 118.0))
    assert res.index == 3
    assert res.distance > 0


def test_nearest_ties_go_to_first():
    pts = _points([0.0, 5.0, 10.0, 15.0],
                  lats=[1.0, 2.0, 3.0, 2.0], lons=[1.0, 2.0, 3.0, 2.0], eles=[0.0, 0.0, 0.0, 0.0])
    res = find_nearest(pts, Coordinate(2.0, 2.0, 0.0))
    assert res.index == 1


def test_nearest_with_surface_metric(equator_points):
    info = accumulate(equator_points)
    res = find_nearest(info.points, Coordinate(0.0, 0.001, 110.0), metric=surface_distance)
    assert res.index == 1
    assert res.distance == pytest.approx(0.0, abs=1e-6)


def test_nearest_empty():
    with pytest.raises(EmptyCollectionError):
        find_nearest([], Coordinate(0.0, 0.0))
