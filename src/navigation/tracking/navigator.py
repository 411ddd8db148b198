# navigator.py
# Public entry point for the navigation engine.
# Owns no business logic. Wires the location source, tracker, camera,
# directions provider and map surface together.

import logging
from datetime import datetime
from typing import Callable, Optional

from .camera_controller import CameraController
from .events import NavigationEvents, Signal
from .interfaces import DirectionsProvider, LocationSource, MapSurface
from .models import Coord, LocationFix, ProgressResult, Route, RouteProgress, TransportType
from .nav_config import NavConfig
from .nav_logger import NavLogger
from .route_simulator import RouteSimulator
from .route_tracker import RouteTracker
from .ticker import DisplayTicker

logger = logging.getLogger(__name__)


class NavigationSession:
    """
    High-level navigation facade.

    Typical lifecycle:
        session = NavigationSession(directions, map_surface)
        session.start_navigation(Coord(51.5074, -0.1278), Coord(51.5155, -0.0922))

        # Real location source:
        session.use_location_source(gps)
        # ...or demo mode:
        session.simulate()

        # Host render loop:
        session.live_step_updated.connect(refresh_banner)
        session.ticker.tick(dt)

        session.stop_navigation()

    Args:
        directions:      Route provider used for the first route and reroutes.
        map_surface:     Receives camera poses and overlays.
        location_source: Optional real location source.
        config:          Optional NavConfig; defaults to NavConfig().
        ticker:          Shared display ticker; one is created if omitted.
    """

    def __init__(
        self,
        directions: DirectionsProvider,
        map_surface: MapSurface,
        location_source: Optional[LocationSource] = None,
        config: Optional[NavConfig] = None,
        ticker: Optional[DisplayTicker] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.config = config or NavConfig()
        self.events = NavigationEvents()
        self.ticker = ticker or DisplayTicker(self.config.frame_rate_hz)

        self._directions = directions
        self._map = map_surface

        # Specialist modules
        self._tracker = RouteTracker(self.config, directions, self.events, clock)
        self._camera = CameraController(map_surface, self.config)
        self._logger = NavLogger(self.events, clock).attach()
        self._camera.attach(self.ticker)

        # Per-frame NavigationStep for live UI counters (distance, ETA).
        self.live_step_updated = Signal("live_step_updated")
        self._live_tick = self.ticker.register(self._publish_live_step)

        self._location_source: Optional[LocationSource] = None
        self._simulator: Optional[RouteSimulator] = None

        self.events.route_updated.connect(self._on_route_updated)
        if location_source is not None:
            self.use_location_source(location_source)

    # ------------------------------------------------------------------
    # Navigation control
    # ------------------------------------------------------------------

    def start_navigation(
        self,
        source: Coord,
        destination: Coord,
        transport_type: Optional[TransportType] = None,
    ) -> None:
        """
        Request a route and begin tracking once it arrives.

        Failures are reported through events.route_request_failed.
        """
        transport_type = transport_type or self.config.default_transport_type
        logger.info(f"Calculating route: {source} → {destination} ({transport_type.value})")
        self._directions.request_route(
            source,
            destination,
            transport_type,
            lambda route: self._on_initial_route(source, destination, route),
        )

    def _on_initial_route(self, source: Coord, destination: Coord, route: Optional[Route]) -> None:
        if route is None or not route.steps:
            logger.warning(f"Route calculation failed: {source} → {destination}")
            self.events.route_request_failed.emit(source, destination)
            return

        self._tracker.load_route(route)
        self._camera.show_route_overview(route, animated=True)
        logger.info(f"Route ready: {len(route.steps)} steps. First: {route.steps[0].instruction}")

    def _on_route_updated(self, route: Route) -> None:
        self._map.show_route(route.polyline)
        self._map.clear_traversed_path()

    def stop_navigation(self) -> None:
        """End the session and release every tick registration."""
        self._tracker.stop()
        self._detach_location_source()
        if self._simulator is not None:
            self._simulator.stop()
            self._simulator = None
        self._camera.close()
        self._live_tick.cancel()
        self._logger.detach()
        logger.info("Navigation stopped.")

    # ------------------------------------------------------------------
    # Location sources
    # ------------------------------------------------------------------

    def use_location_source(self, source: LocationSource) -> None:
        """Switch to a new location source; the previous one is stopped."""
        self._detach_location_source()
        self._location_source = source
        source.subscribe(self.handle_location)
        source.start()

    def _detach_location_source(self) -> None:
        if self._location_source is None:
            return
        self._location_source.unsubscribe(self.handle_location)
        self._location_source.stop()
        self._location_source = None

    def simulate(self, speed_mps: Optional[float] = None) -> RouteSimulator:
        """Drive the current route with a RouteSimulator instead of GPS."""
        route = self._tracker.route
        if route is None:
            raise RuntimeError("No route loaded; call start_navigation() first.")

        simulator = RouteSimulator(route, speed_mps, self.config, ticker=self.ticker)
        self._simulator = simulator
        if not self._camera.is_following:
            self._camera.toggle_follow_mode()
        self.use_location_source(simulator)
        return simulator

    # ------------------------------------------------------------------
    # Location update: called for every fix
    # ------------------------------------------------------------------

    def handle_location(self, fix: LocationFix, heading: Optional[float] = None) -> ProgressResult:
        """
        Process a new fix: tracker first, then the camera.

        Args:
            fix:     Current location fix.
            heading: Optional travel heading for camera rotation.

        Returns:
            ProgressResult from the tracker.
        """
        result = self._tracker.check_progress(fix)

        trail = self._tracker.traversed_path
        if len(trail) >= 2:
            self._map.show_traversed_path(trail)

        self._camera.update_camera(fix, heading)
        return result

    def _publish_live_step(self, dt: float) -> None:
        if not len(self.live_step_updated) or not self._tracker.is_active:
            return
        step = self._tracker.live_navigation_step()
        if step is not None:
            self.live_step_updated.emit(step)

    # ------------------------------------------------------------------
    # Camera
    # ------------------------------------------------------------------

    def toggle_follow_mode(self) -> bool:
        return self._camera.toggle_follow_mode()

    def show_route_overview(self, animated: bool = True) -> None:
        if self._tracker.route is not None:
            self._camera.show_route_overview(self._tracker.route, animated)

    # ------------------------------------------------------------------
    # Convenience read-only properties
    # ------------------------------------------------------------------

    @property
    def tracker(self) -> RouteTracker:
        return self._tracker

    @property
    def camera(self) -> CameraController:
        return self._camera

    @property
    def event_log(self) -> NavLogger:
        return self._logger

    @property
    def simulator(self) -> Optional[RouteSimulator]:
        return self._simulator

    @property
    def progress(self) -> Optional[RouteProgress]:
        return self._tracker.progress

    @property
    def is_active(self) -> bool:
        return self._tracker.is_active

    @property
    def remaining_steps(self) -> int:
        return self._tracker.remaining_steps
