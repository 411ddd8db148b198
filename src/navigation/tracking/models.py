# models.py
# Shared data structures and enums used across all modules.

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional, Tuple


# ---------------------------------------------------------------------------
# Coordinates and location fixes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Coord:
    """Immutable geographic coordinate."""
    lat: float
    lon: float

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lon": self.lon}

    @staticmethod
    def from_dict(d: dict) -> "Coord":
        return Coord(float(d["lat"]), float(d["lon"]))


@dataclass(frozen=True)
class LocationFix:
    """A single timestamped position sample from a location source."""
    coord: Coord
    timestamp: datetime = field(default_factory=datetime.now)
    horizontal_accuracy: float = 10.0    # metres
    course: Optional[float] = None       # degrees, None when unknown


# ---------------------------------------------------------------------------
# Route
# ---------------------------------------------------------------------------

class TransportType(Enum):
    AUTOMOBILE = "automobile"
    WALKING    = "walking"
    TRANSIT    = "transit"
    ANY        = "any"


@dataclass(frozen=True)
class RouteStep:
    """One maneuver-to-maneuver segment of a route."""
    polyline: Tuple[Coord, ...]
    instruction: str
    distance_m: float
    expected_travel_time_s: float
    notice: Optional[str] = None
    transport_type: TransportType = TransportType.AUTOMOBILE

    @property
    def end_coord(self) -> Optional[Coord]:
        return self.polyline[-1] if self.polyline else None

    def to_dict(self) -> dict:
        return {
            "polyline": [c.to_dict() for c in self.polyline],
            "instruction": self.instruction,
            "distance_m": self.distance_m,
            "expected_travel_time_s": self.expected_travel_time_s,
            "notice": self.notice,
            "transport_type": self.transport_type.value,
        }

    @staticmethod
    def from_dict(d: dict) -> "RouteStep":
        return RouteStep(
            polyline=tuple(Coord.from_dict(c) for c in d["polyline"]),
            instruction=d["instruction"],
            distance_m=float(d["distance_m"]),
            expected_travel_time_s=float(d["expected_travel_time_s"]),
            notice=d.get("notice"),
            transport_type=TransportType(d.get("transport_type", "automobile")),
        )


@dataclass(frozen=True)
class Route:
    """
    Ordered plan of steps with geometry and timing, produced by a
    directions provider. Never mutated after construction.
    """
    steps: Tuple[RouteStep, ...]
    distance_m: float
    expected_travel_time_s: float
    transport_type: TransportType = TransportType.AUTOMOBILE

    @property
    def polyline(self) -> List[Coord]:
        """All step polylines joined, with consecutive duplicates dropped."""
        points: List[Coord] = []
        for step in self.steps:
            for coord in step.polyline:
                if not points or points[-1] != coord:
                    points.append(coord)
        return points

    @property
    def destination(self) -> Optional[Coord]:
        points = self.polyline
        return points[-1] if points else None

    def to_dict(self) -> dict:
        return {
            "steps": [s.to_dict() for s in self.steps],
            "distance_m": self.distance_m,
            "expected_travel_time_s": self.expected_travel_time_s,
            "transport_type": self.transport_type.value,
        }

    @staticmethod
    def from_dict(d: dict) -> "Route":
        steps = tuple(RouteStep.from_dict(s) for s in d["steps"])
        return Route(
            steps=steps,
            distance_m=float(d.get("distance_m", sum(s.distance_m for s in steps))),
            expected_travel_time_s=float(
                d.get("expected_travel_time_s", sum(s.expected_travel_time_s for s in steps))
            ),
            transport_type=TransportType(d.get("transport_type", "automobile")),
        )


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RouteProgress:
    """Snapshot of where the traveler is on the active route."""
    route: Route
    step_index: int
    distance_remaining_m: float
    time_remaining_s: float
    distance_to_step_end_m: float

    @property
    def current_step(self) -> RouteStep:
        return self.route.steps[self.step_index]

    @property
    def next_step(self) -> Optional[RouteStep]:
        if self.step_index + 1 < len(self.route.steps):
            return self.route.steps[self.step_index + 1]
        return None


@dataclass(frozen=True)
class NavigationStep:
    """Instruction data handed to the UI on every step change."""
    instruction: str
    notice: Optional[str]
    distance_m: float                   # to the next maneuver
    transport_type: TransportType
    eta: datetime
    remaining_distance_m: float
    remaining_time_s: float

    @property
    def formatted_distance(self) -> str:
        if self.distance_m < 1000:
            return f"{int(self.distance_m)}m"
        return f"{self.distance_m / 1000:.1f} km"

    @property
    def formatted_eta(self) -> str:
        return self.eta.strftime("%H:%M")


# ---------------------------------------------------------------------------
# Camera
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CameraPose:
    center: Coord
    distance_m: float       # distance from ground, altitude proxy
    pitch_deg: float
    heading_deg: float      # [0, 360)


@dataclass(frozen=True)
class BoundingRegion:
    """Axis-aligned lat/lon box."""
    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float

    @property
    def center(self) -> Coord:
        return Coord(
            (self.min_lat + self.max_lat) / 2,
            (self.min_lon + self.max_lon) / 2,
        )


# ---------------------------------------------------------------------------
# Simulation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SimulationPoint:
    coord: Coord
    heading_deg: float
    distance_from_start_m: float
    step_index: int


# ---------------------------------------------------------------------------
# Navigation status
# ---------------------------------------------------------------------------

class RouteStatus(Enum):
    INACTIVE       = "inactive"
    PROGRESSING    = "progressing"
    STEP_ADVANCED  = "step_advanced"
    OFF_ROUTE      = "off_route"
    FINISHED       = "finished"


class EventKind(Enum):
    STEP_CHANGED         = "step_changed"
    DISTANCE_UPDATED     = "distance_updated"
    ROUTE_DEVIATED       = "route_deviated"
    ROUTE_UPDATED        = "route_updated"
    ROUTE_REQUEST_FAILED = "route_request_failed"
    ARRIVED              = "arrived"


@dataclass(frozen=True)
class NavEvent:
    kind: EventKind
    payload: Any = None


@dataclass
class ProgressResult:
    """Returned by RouteTracker.check_progress() every location update."""
    status: RouteStatus
    message: str
    progress: Optional[RouteProgress] = None
    events: List[NavEvent] = field(default_factory=list)
    distance_to_next_m: Optional[float] = None      # metres
    current_step: Optional[RouteStep] = None
    distance_from_route_m: Optional[float] = None   # metres

    def has_event(self, kind: EventKind) -> bool:
        return any(e.kind is kind for e in self.events)
