# route_tracker.py
# State machine that tracks a traveler's position against an active route.
# Call load_route() once, then check_progress() on every location fix.

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple

from .events import NavigationEvents, Signal
from .geo_utils import closest_point_on_polyline, distance_between
from .interfaces import DirectionsProvider
from .models import (
    Coord,
    EventKind,
    LocationFix,
    NavEvent,
    NavigationStep,
    ProgressResult,
    Route,
    RouteProgress,
    RouteStatus,
    RouteStep,
)
from .nav_config import NavConfig

logger = logging.getLogger(__name__)


class RouteTracker:
    """
    Stateful progress tracker for a single navigation session.

    The corridor check projects every fix onto the full route polyline, so
    a traveler who is already on a later step is never reported off-route.

    Usage:
        tracker = RouteTracker(config, directions=provider)
        tracker.events.step_changed.connect(show_instruction)
        tracker.load_route(route)

        # Inside the location loop:
        result = tracker.check_progress(fix)
    """

    def __init__(
        self,
        config: Optional[NavConfig] = None,
        directions: Optional[DirectionsProvider] = None,
        events: Optional[NavigationEvents] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.config = config or NavConfig()
        self.directions = directions
        self.events = events or NavigationEvents()
        self._clock = clock or datetime.now

        self._route: Optional[Route] = None
        self._route_polyline: List[Coord] = []
        self._progress: Optional[RouteProgress] = None
        self._traversed: List[Coord] = []
        self._active: bool = False
        self._arrived: bool = False
        self._reroute_pending: bool = False
        # Bumped on every load_route/stop; reroute replies from an older
        # generation are dropped.
        self._generation: int = 0
        # Collects events emitted by a provider that answers synchronously.
        self._reply_events: Optional[List[NavEvent]] = None

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def load_route(self, route: Route) -> None:
        """Load a new route and reset state. Progress is primed by the next fix."""
        if not route.steps:
            raise ValueError("Route has no steps.")

        self._route = route
        self._route_polyline = route.polyline
        self._progress = None
        self._traversed = []
        self._active = True
        self._arrived = False
        self._reroute_pending = False
        self._generation += 1

        logger.info(
            f"Route loaded: {len(route.steps)} steps, "
            f"{route.distance_m:.0f} m, {route.expected_travel_time_s:.0f} s."
        )
        self._emit(self._collected(), EventKind.ROUTE_UPDATED, self.events.route_updated, route)

    def stop(self) -> None:
        """Forcibly end navigation. Pending reroute replies are discarded."""
        self._active = False
        self._reroute_pending = False
        self._generation += 1

    # ------------------------------------------------------------------
    # Read-only properties
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def has_arrived(self) -> bool:
        return self._arrived

    @property
    def is_rerouting(self) -> bool:
        return self._reroute_pending

    @property
    def route(self) -> Optional[Route]:
        return self._route

    @property
    def progress(self) -> Optional[RouteProgress]:
        return self._progress

    @property
    def step_index(self) -> int:
        return self._progress.step_index if self._progress else 0

    @property
    def current_step(self) -> Optional[RouteStep]:
        if self._route is None:
            return None
        return self._route.steps[self.step_index]

    @property
    def remaining_steps(self) -> int:
        if self._route is None:
            return 0
        return max(0, len(self._route.steps) - self.step_index)

    @property
    def traversed_path(self) -> List[Coord]:
        return list(self._traversed)

    # ------------------------------------------------------------------
    # Core method: call on every location fix
    # ------------------------------------------------------------------

    def check_progress(self, fix: LocationFix) -> ProgressResult:
        """
        Compare a location fix to the active route.

        Args:
            fix: Current location fix.

        Returns:
            ProgressResult with status, the new progress snapshot and the
            events emitted while handling this fix, in emission order.
        """
        if self._route is None or not self._active:
            if self._arrived:
                return ProgressResult(
                    status=RouteStatus.FINISHED,
                    message="You have reached your destination.",
                    progress=self._progress,
                    distance_to_next_m=0.0,
                    current_step=self.current_step,
                )
            return ProgressResult(
                status=RouteStatus.INACTIVE,
                message="Navigation is not active.",
            )

        route = self._route
        events: List[NavEvent] = []
        self._traversed.append(fix.coord)

        # First fix after a route is set only primes progress.
        if self._progress is None:
            self._progress = RouteProgress(
                route=route,
                step_index=0,
                distance_remaining_m=route.distance_m,
                time_remaining_s=route.expected_travel_time_s,
                distance_to_step_end_m=route.steps[0].distance_m,
            )

        # 1. Corridor check against the whole route
        _, off_route_m = closest_point_on_polyline(fix.coord, self._route_polyline)
        if off_route_m > self.config.corridor_width_m:
            return self._handle_deviation(fix, off_route_m, events)

        # 2. Step advance: at most one step per fix
        step_index = self._progress.step_index
        to_step_end = self._distance_to_step_end(fix.coord, step_index)
        advanced = False
        arrived = False
        if to_step_end < self.config.step_arrival_threshold_m:
            if step_index + 1 < len(route.steps):
                step_index += 1
                advanced = True
                to_step_end = self._distance_to_step_end(fix.coord, step_index)
            else:
                arrived = True

        # 3. Remaining distance and time
        remaining_m, remaining_s = self._remaining(step_index, to_step_end)
        progress = RouteProgress(
            route=route,
            step_index=step_index,
            distance_remaining_m=remaining_m,
            time_remaining_s=remaining_s,
            distance_to_step_end_m=to_step_end,
        )
        self._progress = progress
        step = progress.current_step

        if advanced:
            logger.info(f"Advanced to step {step_index}: {step.instruction}")
            self._emit(events, EventKind.STEP_CHANGED, self.events.step_changed,
                       self._navigation_step(progress))

        # 4. Live distance counter, every accepted fix
        self._emit(events, EventKind.DISTANCE_UPDATED, self.events.distance_updated, to_step_end)

        if arrived:
            self._active = False
            self._arrived = True
            logger.info("Destination reached.")
            self._emit(events, EventKind.ARRIVED, self.events.arrived)
            return ProgressResult(
                status=RouteStatus.FINISHED,
                message="You have reached your destination.",
                progress=progress,
                events=events,
                distance_to_next_m=to_step_end,
                current_step=step,
                distance_from_route_m=off_route_m,
            )

        logger.debug(
            f"Step {step_index}: {to_step_end:.1f} m to maneuver, "
            f"{remaining_m:.0f} m / {remaining_s:.0f} s remaining."
        )
        return ProgressResult(
            status=RouteStatus.STEP_ADVANCED if advanced else RouteStatus.PROGRESSING,
            message=step.instruction if advanced else f"{int(to_step_end)} m to next maneuver. ({step.instruction})",
            progress=progress,
            events=events,
            distance_to_next_m=to_step_end,
            current_step=step,
            distance_from_route_m=off_route_m,
        )

    update = check_progress

    def live_navigation_step(self) -> Optional[NavigationStep]:
        """NavigationStep for the current progress, for per-frame UI refresh."""
        if self._progress is None:
            return None
        return self._navigation_step(self._progress)

    # ------------------------------------------------------------------
    # Deviation and rerouting
    # ------------------------------------------------------------------

    def _handle_deviation(
        self, fix: LocationFix, off_route_m: float, events: List[NavEvent]
    ) -> ProgressResult:
        # A synchronous provider may replace the route inside _request_reroute.
        # The result still reports the deviated route's progress; its events
        # include the route_updated or route_request_failed from the reply.
        progress = self._progress
        if not self._reroute_pending:
            logger.warning(f"Off route by {off_route_m:.1f} m, requesting a new route.")
            self._emit(events, EventKind.ROUTE_DEVIATED, self.events.route_deviated)
            self._reply_events = events
            try:
                self._request_reroute(fix.coord)
            finally:
                self._reply_events = None

        return ProgressResult(
            status=RouteStatus.OFF_ROUTE,
            message="You are off the route. Recalculating.",
            progress=progress,
            events=events,
            distance_to_next_m=progress.distance_to_step_end_m,
            current_step=progress.current_step,
            distance_from_route_m=off_route_m,
        )

    def _request_reroute(self, source: Coord) -> None:
        route = self._route
        destination = route.destination
        if self.directions is None or destination is None:
            logger.warning("No directions provider configured; cannot reroute.")
            return

        self._reroute_pending = True
        generation = self._generation
        # The deviated route is kept until the provider answers.
        self.directions.request_route(
            source,
            destination,
            route.transport_type,
            lambda new_route: self._on_reroute(source, destination, new_route, generation),
        )

    def _on_reroute(
        self,
        source: Coord,
        destination: Coord,
        new_route: Optional[Route],
        generation: int,
    ) -> None:
        if generation != self._generation or not self._active:
            logger.debug("Ignoring reroute reply for a replaced or stopped route.")
            return

        self._reroute_pending = False
        if new_route is None or not new_route.steps:
            logger.warning(f"No route found from {source} to {destination}.")
            self._emit(self._collected(), EventKind.ROUTE_REQUEST_FAILED,
                       self.events.route_request_failed, source, destination)
            return
        self.load_route(new_route)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _distance_to_step_end(self, position: Coord, step_index: int) -> float:
        end = self._route.steps[step_index].end_coord
        if end is None:
            return 0.0
        return distance_between(position, end)

    def _remaining(self, step_index: int, to_step_end: float) -> Tuple[float, float]:
        steps = self._route.steps
        current = steps[step_index]

        fraction = to_step_end / current.distance_m if current.distance_m > 0 else 0.0
        distance = to_step_end
        time = current.expected_travel_time_s * fraction
        for step in steps[step_index + 1:]:
            distance += step.distance_m
            time += step.expected_travel_time_s
        return max(0.0, distance), max(0.0, time)

    def _navigation_step(self, progress: RouteProgress) -> NavigationStep:
        step = progress.current_step
        return NavigationStep(
            instruction=step.instruction,
            notice=step.notice,
            distance_m=progress.distance_to_step_end_m,
            transport_type=progress.route.transport_type,
            eta=self._clock() + timedelta(seconds=progress.time_remaining_s),
            remaining_distance_m=progress.distance_remaining_m,
            remaining_time_s=progress.time_remaining_s,
        )

    def _collected(self) -> List[NavEvent]:
        return self._reply_events if self._reply_events is not None else []

    @staticmethod
    def _emit(events: List[NavEvent], kind: EventKind, signal: Signal, *args) -> None:
        payload = args[0] if len(args) == 1 else (args or None)
        events.append(NavEvent(kind, payload))
        signal.emit(*args)
