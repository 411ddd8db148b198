# Route-tracking and camera-follow engine for turn-by-turn navigation.

from .camera_controller import CameraController
from .events import NavigationEvents, Signal
from .interfaces import DirectionsProvider, LocationSource, MapSurface
from .models import (
    BoundingRegion,
    CameraPose,
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
    SimulationPoint,
    TransportType,
)
from .nav_config import NavConfig
from .navigator import NavigationSession
from .route_simulator import RouteSimulator
from .route_tracker import RouteTracker
from .ticker import DisplayTicker

__all__ = [
    "BoundingRegion",
    "CameraController",
    "CameraPose",
    "Coord",
    "DirectionsProvider",
    "DisplayTicker",
    "EventKind",
    "LocationFix",
    "LocationSource",
    "MapSurface",
    "NavConfig",
    "NavEvent",
    "NavigationEvents",
    "NavigationSession",
    "NavigationStep",
    "ProgressResult",
    "Route",
    "RouteProgress",
    "RouteSimulator",
    "RouteStatus",
    "RouteStep",
    "RouteTracker",
    "Signal",
    "SimulationPoint",
    "TransportType",
]
