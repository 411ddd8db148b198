import math
from datetime import datetime
from typing import List, Optional, Sequence

import pytest

from navigation.tracking.geo_utils import EARTH_RADIUS_M
from navigation.tracking.interfaces import DirectionsProvider, MapSurface
from navigation.tracking.models import (
    BoundingRegion,
    CameraPose,
    Coord,
    LocationFix,
    Route,
    RouteStep,
    TransportType,
)

ORIGIN = Coord(51.5, -0.12)
FIXED_NOW = datetime(2024, 11, 12, 9, 30, 0)


def north_of(coord: Coord, metres: float) -> Coord:
    """Exact offset along a meridian."""
    return Coord(coord.lat + math.degrees(metres / EARTH_RADIUS_M), coord.lon)


def east_of(coord: Coord, metres: float) -> Coord:
    return Coord(
        coord.lat,
        coord.lon + math.degrees(metres / (EARTH_RADIUS_M * math.cos(math.radians(coord.lat)))),
    )


def fix_at(coord: Coord) -> LocationFix:
    return LocationFix(coord=coord, timestamp=FIXED_NOW)


def make_step(points: Sequence[Coord], distance_m: float, time_s: float, instruction: str) -> RouteStep:
    return RouteStep(
        polyline=tuple(points),
        instruction=instruction,
        distance_m=distance_m,
        expected_travel_time_s=time_s,
    )


def make_route(*steps: RouteStep, transport_type: TransportType = TransportType.AUTOMOBILE) -> Route:
    return Route(
        steps=tuple(steps),
        distance_m=sum(s.distance_m for s in steps),
        expected_travel_time_s=sum(s.expected_travel_time_s for s in steps),
        transport_type=transport_type,
    )


class FakeDirections(DirectionsProvider):
    """Records requests; answers immediately unless deferred."""

    def __init__(self, route: Optional[Route] = None, defer: bool = False):
        self.route = route
        self.defer = defer
        self.requests: List[tuple] = []
        self.pending: List = []

    def request_route(self, source, destination, transport_type, completion) -> None:
        self.requests.append((source, destination, transport_type))
        if self.defer:
            self.pending.append(completion)
        else:
            completion(self.route)

    def respond(self, route: Optional[Route]) -> None:
        completion = self.pending.pop(0)
        completion(route)


class RecordingMapSurface(MapSurface):
    def __init__(self):
        self.poses: List[CameraPose] = []
        self.regions: List[tuple] = []
        self.routes: List[list] = []
        self.trails: List[list] = []
        self.trail_clears = 0

    def set_camera(self, pose: CameraPose) -> None:
        self.poses.append(pose)

    def fit_region(self, region: BoundingRegion, padding: float, animated: bool) -> None:
        self.regions.append((region, padding, animated))

    def show_route(self, polyline) -> None:
        self.routes.append(list(polyline))

    def show_traversed_path(self, polyline) -> None:
        self.trails.append(list(polyline))

    def clear_traversed_path(self) -> None:
        self.trail_clears += 1


@pytest.fixture
def two_step_route() -> Route:
    """Straight north: step 0 is 100 m / 60 s, step 1 is 200 m / 120 s."""
    step0 = make_step(
        [ORIGIN, north_of(ORIGIN, 50), north_of(ORIGIN, 100)], 100.0, 60.0, "Head north"
    )
    step1 = make_step(
        [north_of(ORIGIN, 100), north_of(ORIGIN, 200), north_of(ORIGIN, 300)], 200.0, 120.0,
        "Continue straight",
    )
    return make_route(step0, step1)


@pytest.fixture
def single_step_route() -> Route:
    return make_route(make_step([ORIGIN, north_of(ORIGIN, 100)], 100.0, 60.0, "Drive to destination"))


@pytest.fixture
def l_shaped_route() -> Route:
    """50 m north, then 50 m east."""
    corner = north_of(ORIGIN, 50)
    return make_route(
        make_step([ORIGIN, corner], 50.0, 30.0, "Head north"),
        make_step([corner, east_of(corner, 50)], 50.0, 30.0, "Turn right"),
    )


@pytest.fixture
def map_surface() -> RecordingMapSurface:
    return RecordingMapSurface()
