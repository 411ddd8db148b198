# geo_utils.py
# Pure mathematical / geographic helper functions.
# No side effects, no imports from other project modules except models.

import math
from typing import Sequence, Tuple

from .models import Coord


EARTH_RADIUS_M = 6_371_000.0

# Segments shorter than this (squared, in m^2) are treated as a single point.
_DEGENERATE_SEGMENT_M2 = 1e-12


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between two points in metres.

    Args:
        lat1, lon1: Origin in decimal degrees.
        lat2, lon2: Destination in decimal degrees.

    Returns:
        Distance in metres.
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance_between(a: Coord, b: Coord) -> float:
    return haversine_distance(a.lat, a.lon, b.lat, b.lon)


def calculate_bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Forward azimuth (bearing) from point 1 to point 2 in degrees [0, 360).

    Identical points have no defined heading; 0 is returned for them.

    Args:
        lat1, lon1: Origin in decimal degrees.
        lat2, lon2: Destination in decimal degrees.

    Returns:
        Bearing in degrees.
    """
    if lat1 == lat2 and lon1 == lon2:
        return 0.0
    rlat1, rlon1 = math.radians(lat1), math.radians(lon1)
    rlat2, rlon2 = math.radians(lat2), math.radians(lon2)
    d_lon = rlon2 - rlon1
    y = math.sin(d_lon) * math.cos(rlat2)
    x = math.cos(rlat1) * math.sin(rlat2) - math.sin(rlat1) * math.cos(rlat2) * math.cos(d_lon)
    return normalize_heading(math.degrees(math.atan2(y, x)))


def bearing(origin: Coord, target: Coord) -> float:
    return calculate_bearing(origin.lat, origin.lon, target.lat, target.lon)


def normalize_heading(degrees: float) -> float:
    """Wrap any angle into [0, 360)."""
    wrapped = degrees % 360.0
    # -1e-17 % 360 rounds to 360.0
    return 0.0 if wrapped >= 360.0 else wrapped


def shortest_angular_delta(from_deg: float, to_deg: float) -> float:
    """
    Signed rotation in (-180, 180] that takes from_deg onto to_deg.

    Used for camera heading so that 359 -> 1 turns 2 degrees instead of 358.
    """
    delta = (to_deg - from_deg) % 360.0
    if delta > 180.0:
        delta -= 360.0
    return delta


def smoothstep(t: float) -> float:
    """Ease-in-out curve 3t^2 - 2t^3 on t clamped to [0, 1]."""
    t = max(0.0, min(1.0, t))
    return t * t * (3.0 - 2.0 * t)


def interpolate_coord(start: Coord, end: Coord, fraction: float) -> Coord:
    return Coord(
        start.lat + (end.lat - start.lat) * fraction,
        start.lon + (end.lon - start.lon) * fraction,
    )


def polyline_length(polyline: Sequence[Coord]) -> float:
    return sum(
        distance_between(polyline[i], polyline[i + 1])
        for i in range(len(polyline) - 1)
    )


# ---------------------------------------------------------------------------
# Projection onto segments and polylines
# ---------------------------------------------------------------------------

def _to_xy_m(lat0: float, lon0: float, lat: float, lon: float) -> Tuple[float, float]:
    """
    Equirectangular approximation: lat/lon to local metres around (lat0, lon0).
    Accurate enough for snapping a fix onto a nearby route.
    """
    x = math.radians(lon - lon0) * EARTH_RADIUS_M * math.cos(math.radians(lat0))
    y = math.radians(lat - lat0) * EARTH_RADIUS_M
    return x, y


def _from_xy_m(lat0: float, lon0: float, x: float, y: float) -> Coord:
    lat = lat0 + math.degrees(y / EARTH_RADIUS_M)
    lon = lon0 + math.degrees(x / (EARTH_RADIUS_M * math.cos(math.radians(lat0))))
    return Coord(lat, lon)


def project_onto_segment(
    px: float, py: float,
    ax: float, ay: float,
    bx: float, by: float,
) -> Tuple[float, float, float]:
    """
    Planar orthogonal projection of P onto segment AB.

    Returns:
        (x, y, t) where t is the segment parameter clamped to [0, 1].
        A zero-length segment yields A with t = 0.
    """
    dx = bx - ax
    dy = by - ay
    seg_len2 = dx * dx + dy * dy
    if seg_len2 <= _DEGENERATE_SEGMENT_M2:
        return ax, ay, 0.0

    t = ((px - ax) * dx + (py - ay) * dy) / seg_len2
    t = max(0.0, min(1.0, t))
    return ax + t * dx, ay + t * dy, t


def closest_point_on_segment(point: Coord, segment_start: Coord, segment_end: Coord) -> Coord:
    """
    Point on the segment closest to `point`.

    Endpoints are returned unchanged when the projection falls outside the
    segment, and segment_start when the segment has zero length.
    """
    # Local frame centred on the fix, so the fix itself is the origin.
    lat0, lon0 = point.lat, point.lon
    ax, ay = _to_xy_m(lat0, lon0, segment_start.lat, segment_start.lon)
    bx, by = _to_xy_m(lat0, lon0, segment_end.lat, segment_end.lon)

    x, y, t = project_onto_segment(0.0, 0.0, ax, ay, bx, by)
    if t <= 0.0:
        return segment_start
    if t >= 1.0:
        return segment_end
    return _from_xy_m(lat0, lon0, x, y)


def closest_point_on_polyline(point: Coord, polyline: Sequence[Coord]) -> Tuple[Coord, float]:
    """
    Closest point on a polyline and its distance from `point` in metres.

    Every segment is checked; there is no early exit, so the result is the
    global minimum even on paths that double back on themselves.

    Raises:
        ValueError: if the polyline has no vertices.
    """
    if not polyline:
        raise ValueError("Polyline needs at least 1 point")

    if len(polyline) == 1:
        return polyline[0], distance_between(point, polyline[0])

    best = polyline[0]
    best_dist = float("inf")
    for i in range(len(polyline) - 1):
        candidate = closest_point_on_segment(point, polyline[i], polyline[i + 1])
        d = distance_between(point, candidate)
        if d < best_dist:
            best_dist = d
            best = candidate
    return best, best_dist
