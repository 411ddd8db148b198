import math

import pytest

from navigation.tracking.geo_utils import (
    bearing,
    closest_point_on_polyline,
    closest_point_on_segment,
    distance_between,
    haversine_distance,
    normalize_heading,
    polyline_length,
    project_onto_segment,
    shortest_angular_delta,
    smoothstep,
)
from navigation.tracking.models import Coord

from conftest import ORIGIN, east_of, north_of


def test_haversine_along_meridian_is_exact():
    target = north_of(ORIGIN, 250)
    assert haversine_distance(ORIGIN.lat, ORIGIN.lon, target.lat, target.lon) == pytest.approx(250.0, abs=1e-6)


def test_closest_point_on_segment_interior_projection():
    a = ORIGIN
    b = north_of(ORIGIN, 100)
    p = east_of(north_of(ORIGIN, 40), 10)
    closest = closest_point_on_segment(p, a, b)
    assert distance_between(closest, north_of(ORIGIN, 40)) < 0.01
    assert distance_between(p, closest) == pytest.approx(10.0, abs=0.01)


def test_closest_point_on_segment_clamps_to_endpoints():
    a = ORIGIN
    b = north_of(ORIGIN, 100)
    assert closest_point_on_segment(north_of(ORIGIN, -30), a, b) == a
    assert closest_point_on_segment(north_of(ORIGIN, 130), a, b) == b


def test_degenerate_segment_returns_start():
    p = east_of(ORIGIN, 20)
    assert closest_point_on_segment(p, ORIGIN, ORIGIN) == ORIGIN


def test_projection_lies_on_segment_and_minimises_distance():
    segments = [
        ((0.0, 0.0), (10.0, 0.0)),
        ((-5.0, 3.0), (7.0, -9.0)),
        ((2.0, 2.0), (2.0, 2.0)),
        ((1.0, -4.0), (1.0, 6.0)),
    ]
    points = [(x * 1.7, y * 2.3) for x in range(-4, 5) for y in range(-4, 5)]
    for (ax, ay), (bx, by) in segments:
        for px, py in points:
            x, y, t = project_onto_segment(px, py, ax, ay, bx, by)
            assert 0.0 <= t <= 1.0
            assert x == pytest.approx(ax + t * (bx - ax))
            assert y == pytest.approx(ay + t * (by - ay))
            best = math.hypot(px - x, py - y)
            for i in range(101):
                s = i / 100
                sx, sy = ax + s * (bx - ax), ay + s * (by - ay)
                assert best <= math.hypot(px - sx, py - sy) + 1e-9


def test_closest_point_on_polyline_finds_global_minimum():
    # U-turn: up 100 m, across 40 m, back down. Point sits near the return leg.
    top_left = north_of(ORIGIN, 100)
    top_right = east_of(top_left, 40)
    bottom_right = east_of(ORIGIN, 40)
    polyline = [ORIGIN, top_left, top_right, bottom_right]

    p = east_of(north_of(ORIGIN, 20), 35)
    closest, d = closest_point_on_polyline(p, polyline)
    assert d == pytest.approx(5.0, abs=0.01)
    # Lands on the return leg, level with the point.
    assert distance_between(closest, east_of(north_of(ORIGIN, 20), 40)) < 0.01


def test_closest_point_on_polyline_single_vertex():
    p = north_of(ORIGIN, 12)
    closest, d = closest_point_on_polyline(p, [ORIGIN])
    assert closest == ORIGIN
    assert d == pytest.approx(12.0, abs=1e-6)


def test_closest_point_on_polyline_with_repeated_vertices():
    polyline = [ORIGIN, ORIGIN, north_of(ORIGIN, 50), north_of(ORIGIN, 50)]
    _, d = closest_point_on_polyline(east_of(north_of(ORIGIN, 25), 8), polyline)
    assert d == pytest.approx(8.0, abs=0.01)


def test_closest_point_on_empty_polyline_raises():
    with pytest.raises(ValueError):
        closest_point_on_polyline(ORIGIN, [])


@pytest.mark.parametrize("target, expected", [
    (lambda: north_of(ORIGIN, 100), 0.0),
    (lambda: east_of(ORIGIN, 100), 90.0),
    (lambda: north_of(ORIGIN, -100), 180.0),
    (lambda: east_of(ORIGIN, -100), 270.0),
])
def test_bearing_cardinal_directions(target, expected):
    assert bearing(ORIGIN, target()) == pytest.approx(expected, abs=0.01)


def test_bearing_of_identical_points_is_zero():
    assert bearing(ORIGIN, Coord(ORIGIN.lat, ORIGIN.lon)) == 0.0


def test_bearing_is_in_range():
    for dx in (-30, 0, 30):
        for dy in (-30, 0, 30):
            b = bearing(ORIGIN, east_of(north_of(ORIGIN, dy), dx))
            assert 0.0 <= b < 360.0


@pytest.mark.parametrize("start, end, expected", [
    (350.0, 10.0, 20.0),
    (10.0, 350.0, -20.0),
    (0.0, 180.0, 180.0),
    (180.0, 0.0, 180.0),
    (90.0, 90.0, 0.0),
    (359.0, 1.0, 2.0),
])
def test_shortest_angular_delta_examples(start, end, expected):
    assert shortest_angular_delta(start, end) == expected


def test_shortest_angular_delta_properties():
    headings = [float(h) for h in range(0, 360, 7)]
    for h1 in headings:
        for h2 in headings:
            delta = shortest_angular_delta(h1, h2)
            assert -180.0 < delta <= 180.0
            assert (h1 + delta - h2) % 360.0 == 0.0


def test_normalize_heading():
    assert normalize_heading(-10.0) == 350.0
    assert normalize_heading(360.0) == 0.0
    assert normalize_heading(725.0) == 5.0
    assert normalize_heading(-1e-17) == 0.0


def test_smoothstep():
    assert smoothstep(0.0) == 0.0
    assert smoothstep(1.0) == 1.0
    assert smoothstep(0.5) == 0.5
    assert smoothstep(-2.0) == 0.0
    assert smoothstep(3.0) == 1.0
    assert smoothstep(0.25) == pytest.approx(3 * 0.0625 - 2 * 0.015625)


def test_polyline_length():
    assert polyline_length([ORIGIN, north_of(ORIGIN, 30), north_of(ORIGIN, 80)]) == pytest.approx(80.0, abs=1e-6)
    assert polyline_length([ORIGIN]) == 0.0
