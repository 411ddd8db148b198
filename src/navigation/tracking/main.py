# main.py
# Entry point: drives a canned route through NavigationSession with the
# route simulator standing in for GPS.
# In production, pass a real DirectionsProvider, MapSurface and
# LocationSource instead of the demo classes below.
#
# Run with: python -m navigation.tracking.main

import asyncio
import logging
from typing import List, Optional, Sequence, Tuple

from .geo_utils import polyline_length
from .interfaces import DirectionsProvider, MapSurface, RouteCompletion
from .models import BoundingRegion, CameraPose, Coord, Route, RouteStep, TransportType
from .nav_config import NavConfig
from .navigator import NavigationSession

# ------------------------------------------------------------------
# Logging setup: configure once here, all modules inherit
# ------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)

# ------------------------------------------------------------------
# Config: tweak thresholds here, not inside the modules
# ------------------------------------------------------------------
config = NavConfig(
    corridor_width_m=25.0,
    step_arrival_threshold_m=20.0,
    simulation_speed_mps=30.0,
    frame_rate_hz=30.0,
)

# ------------------------------------------------------------------
# Demo route (Trafalgar Square → Covent Garden, London)
# ------------------------------------------------------------------
DEMO_STEPS: List[Tuple[str, Sequence[Tuple[float, float]]]] = [
    ("Head north-east on Strand", [
        (51.50809, -0.12806), (51.50860, -0.12630), (51.50905, -0.12475),
    ]),
    ("Turn left onto Bedford Street", [
        (51.50905, -0.12475), (51.50990, -0.12440), (51.51090, -0.12400),
    ]),
    ("Turn right onto Henrietta Street", [
        (51.51090, -0.12400), (51.51110, -0.12300), (51.51130, -0.12220),
    ]),
    ("Arrive at Covent Garden", [
        (51.51130, -0.12220), (51.51175, -0.12240),
    ]),
]

AVERAGE_SPEED_MPS = 8.0


def build_demo_route(transport_type: TransportType = TransportType.AUTOMOBILE) -> Route:
    steps = []
    for instruction, points in DEMO_STEPS:
        polyline = tuple(Coord(lat, lon) for lat, lon in points)
        length = polyline_length(polyline)
        steps.append(RouteStep(
            polyline=polyline,
            instruction=instruction,
            distance_m=length,
            expected_travel_time_s=length / AVERAGE_SPEED_MPS,
            transport_type=transport_type,
        ))
    return Route(
        steps=tuple(steps),
        distance_m=sum(s.distance_m for s in steps),
        expected_travel_time_s=sum(s.expected_travel_time_s for s in steps),
        transport_type=transport_type,
    )


class DemoDirections(DirectionsProvider):
    """Always answers with the canned demo route."""

    def request_route(
        self,
        source: Coord,
        destination: Coord,
        transport_type: TransportType,
        completion: RouteCompletion,
    ) -> None:
        completion(build_demo_route(transport_type))


class LoggingMapSurface(MapSurface):
    """Map surface that only reports what it would draw."""

    def __init__(self) -> None:
        self.last_pose: Optional[CameraPose] = None
        self.frames = 0

    def set_camera(self, pose: CameraPose) -> None:
        self.last_pose = pose
        self.frames += 1

    def fit_region(self, region: BoundingRegion, padding: float, animated: bool) -> None:
        logger.info(f"Overview: {region} (padding {padding})")

    def show_route(self, polyline: Sequence[Coord]) -> None:
        logger.info(f"Route overlay with {len(polyline)} points")

    def show_traversed_path(self, polyline: Sequence[Coord]) -> None:
        pass

    def clear_traversed_path(self) -> None:
        pass


async def run_demo() -> None:
    surface = LoggingMapSurface()
    session = NavigationSession(DemoDirections(), surface, config=config)

    start = Coord(*DEMO_STEPS[0][1][0])
    destination = Coord(*DEMO_STEPS[-1][1][-1])
    session.start_navigation(start, destination)

    simulator = session.simulate()
    done = asyncio.Event()
    simulator.finished.connect(done.set)

    print("\n--- Simulated drive ---")
    await session.ticker.start()
    try:
        await done.wait()
    finally:
        await session.ticker.stop()
        session.stop_navigation()

    print("\n--- Session complete ---")
    print(f"    Camera frames pushed: {surface.frames}")
    if surface.last_pose:
        print(f"    Final camera heading: {surface.last_pose.heading_deg:.1f}°")
    print(f"    Events logged: {len(session.event_log.history)}")


def main() -> None:
    asyncio.run(run_demo())


if __name__ == "__main__":
    main()
