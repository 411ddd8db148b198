# interfaces.py
# Contracts for the collaborators the engine talks to but does not own:
# the directions provider, the location source and the map surface.

from typing import Callable, Optional, Sequence

from .models import BoundingRegion, CameraPose, Coord, LocationFix, Route, TransportType

RouteCompletion = Callable[[Optional[Route]], None]
LocationListener = Callable[[LocationFix, Optional[float]], None]


class DirectionsProvider:
    """External route computation, treated as a black box."""

    def request_route(
        self,
        source: Coord,
        destination: Coord,
        transport_type: TransportType,
        completion: RouteCompletion,
    ) -> None:
        """
        Compute the single best route and hand it to `completion`.

        `completion` receives None when no route was found. It may be
        called before this method returns or at any later point on the
        navigation thread.
        """
        raise NotImplementedError


class LocationSource:
    """Source of location fixes, real or simulated."""

    def subscribe(self, listener: LocationListener) -> LocationListener:
        """Register a listener called with (fix, heading); heading may be None."""
        raise NotImplementedError

    def unsubscribe(self, listener: LocationListener) -> None:
        raise NotImplementedError

    def start(self) -> None:
        raise NotImplementedError

    def stop(self) -> None:
        raise NotImplementedError


class MapSurface:
    """
    Rendering collaborator. Receives poses and overlays, draws nothing
    on the engine's behalf.
    """

    def set_camera(self, pose: CameraPose) -> None:
        raise NotImplementedError

    def fit_region(self, region: BoundingRegion, padding: float, animated: bool) -> None:
        raise NotImplementedError

    def show_route(self, polyline: Sequence[Coord]) -> None:
        raise NotImplementedError

    def show_traversed_path(self, polyline: Sequence[Coord]) -> None:
        raise NotImplementedError

    def clear_traversed_path(self) -> None:
        raise NotImplementedError
