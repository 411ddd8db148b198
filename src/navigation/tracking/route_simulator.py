# route_simulator.py
# Synthetic location source for demo mode.
# Walks a route at constant speed and produces (fix, heading) samples,
# so the tracker and camera can be exercised without a live GPS.

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple

import numpy as np

from .events import Signal
from .geo_utils import bearing, distance_between, interpolate_coord
from .interfaces import LocationListener, LocationSource
from .models import Coord, LocationFix, Route, SimulationPoint
from .nav_config import NavConfig
from .ticker import DisplayTicker, TickHandle

logger = logging.getLogger(__name__)


class RouteSimulator(LocationSource):
    """Simulates travel along a route for demo mode and tests."""

    def __init__(
        self,
        route: Route,
        speed_mps: Optional[float] = None,
        config: Optional[NavConfig] = None,
        ticker: Optional[DisplayTicker] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.config = config or NavConfig()
        self.route = route
        self.speed_mps = speed_mps if speed_mps is not None else self.config.simulation_speed_mps
        if self.speed_mps <= 0:
            raise ValueError("speed_mps must be positive")

        self.ticker = ticker
        self._clock = clock or datetime.now
        self.location_updated = Signal("location_updated")
        self.finished = Signal("finished")

        self.points: Tuple[SimulationPoint, ...] = self._generate_points()
        self._distances = np.array([p.distance_from_start_m for p in self.points], dtype=float)

        self.running = False
        self.is_finished = False
        self.elapsed_s = 0.0
        self._started_at: Optional[datetime] = None
        self._tick_handle: Optional[TickHandle] = None

    # ------------------------------------------------------------------
    # Point generation
    # ------------------------------------------------------------------

    def _generate_points(self) -> Tuple[SimulationPoint, ...]:
        """Densify every step polyline to one point per point_spacing_m."""
        vertices: List[Tuple[Coord, int]] = []
        for step_index, step in enumerate(self.route.steps):
            for coord in step.polyline:
                if vertices and vertices[-1][0] == coord:
                    continue
                vertices.append((coord, step_index))

        if not vertices:
            raise ValueError("Route has no geometry to simulate.")

        spacing = self.config.point_spacing_m
        points: List[SimulationPoint] = []
        total = 0.0
        for (start, _), (end, step_index) in zip(vertices, vertices[1:]):
            segment = distance_between(start, end)
            heading = bearing(start, end)
            # Tolerance keeps a 100.0 m segment from rounding down to 19 spacings.
            count = max(1, int(segment / spacing + 1e-9))
            for j in range(count):
                fraction = j / count
                points.append(SimulationPoint(
                    coord=interpolate_coord(start, end, fraction),
                    heading_deg=heading,
                    distance_from_start_m=total + segment * fraction,
                    step_index=step_index,
                ))
            total += segment

        last_coord, last_step = vertices[-1]
        points.append(SimulationPoint(
            coord=last_coord,
            heading_deg=points[-1].heading_deg if points else 0.0,
            distance_from_start_m=total,
            step_index=last_step,
        ))
        logger.debug(f"Simulation prepared: {len(points)} points over {total:.0f} m")
        return tuple(points)

    @property
    def total_distance_m(self) -> float:
        return float(self._distances[-1])

    # ------------------------------------------------------------------
    # Sampling
    # ------------------------------------------------------------------

    def sample_at(
        self, distance_m: float, timestamp: Optional[datetime] = None
    ) -> Optional[Tuple[LocationFix, float]]:
        """
        Interpolated fix and look-ahead heading at a distance along the route.

        Returns:
            (fix, heading) or None once the distance reaches the end.
        """
        if distance_m >= self._distances[-1]:
            return None
        distance_m = max(0.0, distance_m)

        # First point strictly beyond the target distance
        i2 = int(np.searchsorted(self._distances, distance_m, side="right"))
        i1 = max(0, i2 - 1)
        p1, p2 = self.points[i1], self.points[i2]

        span = p2.distance_from_start_m - p1.distance_from_start_m
        fraction = (distance_m - p1.distance_from_start_m) / span if span > 0 else 0.0
        coord = interpolate_coord(p1.coord, p2.coord, fraction)

        # Heading towards a point a few samples ahead for smoother turns
        end_index = min(i2 + self.config.heading_lookahead_points, len(self.points) - 1)
        future = self.points[end_index].coord
        heading = bearing(coord, future) if future != coord else p1.heading_deg

        fix = LocationFix(
            coord=coord,
            timestamp=timestamp or self._clock(),
            horizontal_accuracy=self.config.simulated_accuracy_m,
            course=heading,
        )
        return fix, heading

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    def subscribe(self, listener: LocationListener) -> LocationListener:
        return self.location_updated.connect(listener)

    def unsubscribe(self, listener: LocationListener) -> None:
        self.location_updated.disconnect(listener)

    def start(self) -> None:
        """Start playback from the beginning of the route."""
        if self.running:
            return
        self.running = True
        self.is_finished = False
        self.elapsed_s = 0.0
        self._started_at = self._clock()
        if self.ticker is not None:
            self._tick_handle = self.ticker.register(self.advance)
        logger.info(f"Simulation started at {self.speed_mps:.1f} m/s over {self.total_distance_m:.0f} m")

    def stop(self) -> None:
        """Stop playback and release the ticker. Safe to call when stopped."""
        self.running = False
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def advance(self, dt: float) -> Optional[Tuple[LocationFix, float]]:
        """Move playback forward by dt seconds and emit one sample."""
        if not self.running:
            return None

        self.elapsed_s += dt
        distance_m = self.elapsed_s * self.speed_mps
        timestamp = self._started_at + timedelta(seconds=self.elapsed_s)
        sample = self.sample_at(distance_m, timestamp)
        if sample is None:
            self.stop()
            self.is_finished = True
            logger.info("Simulation reached the end of the route.")
            self.finished.emit()
            return None

        self.location_updated.emit(*sample)
        return sample
