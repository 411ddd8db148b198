# events.py
# Typed, synchronous event channels.
# One Signal per event kind; listeners run in connection order on the
# thread that emitted.

from typing import Callable, List


Listener = Callable[..., None]


class Signal:
    """
    A single event channel.

    Usage:
        deviated = Signal("route_deviated")
        deviated.connect(on_deviated)
        deviated.emit()
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._listeners: List[Listener] = []

    def connect(self, listener: Listener) -> Listener:
        """Subscribe a listener. Returns it so it can be disconnected later."""
        self._listeners.append(listener)
        return listener

    def disconnect(self, listener: Listener) -> None:
        """Remove a listener. Unknown listeners are ignored."""
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def emit(self, *args) -> None:
        # Copy so listeners may disconnect themselves while being called.
        for listener in list(self._listeners):
            listener(*args)

    def __len__(self) -> int:
        return len(self._listeners)

    def __repr__(self) -> str:
        return f"Signal({self.name!r}, listeners={len(self._listeners)})"


class NavigationEvents:
    """
    All output events of a navigation session.

        step_changed(NavigationStep)
        distance_updated(float)              metres to the next maneuver
        route_deviated()
        route_updated(Route)
        route_request_failed(Coord, Coord)   source, destination
        arrived()
    """

    def __init__(self) -> None:
        self.step_changed = Signal("step_changed")
        self.distance_updated = Signal("distance_updated")
        self.route_deviated = Signal("route_deviated")
        self.route_updated = Signal("route_updated")
        self.route_request_failed = Signal("route_request_failed")
        self.arrived = Signal("arrived")

    def all(self) -> List[Signal]:
        return [
            self.step_changed,
            self.distance_updated,
            self.route_deviated,
            self.route_updated,
            self.route_request_failed,
            self.arrived,
        ]
