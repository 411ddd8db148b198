# nav_logger.py
# Session event log for the navigation system.
# Subscribes to NavigationEvents and records every event in memory and
# through the standard logging module.

import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from .events import NavigationEvents, Signal
from .models import EventKind, NavEvent, NavigationStep, Route

# Standard Python logger, configured once in main.py
logger = logging.getLogger(__name__)


class NavLogger:
    """
    Records navigation events for one session.

    Args:
        events: The NavigationEvents bundle to observe.
        clock:  Timestamp source; defaults to datetime.now.
    """

    def __init__(
        self,
        events: NavigationEvents,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.events = events
        self._clock = clock or datetime.now
        self.history: List[Tuple[datetime, NavEvent]] = []
        self._connections: List[Tuple[Signal, Callable]] = []

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def attach(self) -> "NavLogger":
        if self._connections:
            return self
        handlers = [
            (self.events.step_changed, self._on_step_changed),
            (self.events.distance_updated, self._on_distance_updated),
            (self.events.route_deviated, self._on_route_deviated),
            (self.events.route_updated, self._on_route_updated),
            (self.events.route_request_failed, self._on_route_request_failed),
            (self.events.arrived, self._on_arrived),
        ]
        for signal, handler in handlers:
            signal.connect(handler)
            self._connections.append((signal, handler))
        return self

    def detach(self) -> None:
        for signal, handler in self._connections:
            signal.disconnect(handler)
        self._connections = []

    def events_of(self, kind: EventKind) -> List[NavEvent]:
        return [event for _, event in self.history if event.kind is kind]

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _record(self, kind: EventKind, payload=None) -> None:
        self.history.append((self._clock(), NavEvent(kind, payload)))

    def _on_step_changed(self, step: NavigationStep) -> None:
        self._record(EventKind.STEP_CHANGED, step)
        logger.info(
            f"Next: {step.instruction} in {step.formatted_distance}, "
            f"ETA {step.formatted_eta} ({step.remaining_distance_m:.0f} m left)"
        )

    def _on_distance_updated(self, distance_m: float) -> None:
        self._record(EventKind.DISTANCE_UPDATED, distance_m)
        logger.debug(f"{distance_m:.0f} m to next maneuver")

    def _on_route_deviated(self) -> None:
        self._record(EventKind.ROUTE_DEVIATED)
        logger.warning("Route deviation detected.")

    def _on_route_updated(self, route: Route) -> None:
        self._record(EventKind.ROUTE_UPDATED, route)
        logger.info(f"Route updated: {len(route.steps)} steps, {route.distance_m:.0f} m")

    def _on_route_request_failed(self, source, destination) -> None:
        self._record(EventKind.ROUTE_REQUEST_FAILED, (source, destination))
        logger.error(f"Route request failed: {source} → {destination}")

    def _on_arrived(self) -> None:
        self._record(EventKind.ARRIVED)
        logger.info("Arrived at destination.")
