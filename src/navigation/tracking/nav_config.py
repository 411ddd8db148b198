# nav_config.py
# All tuneable constants in one place.
# Pass a NavConfig instance to every module that needs settings.

from dataclasses import dataclass

from .models import TransportType


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

CORRIDOR_WIDTH_M: float = 25.0
STEP_ARRIVAL_THRESHOLD_M: float = 20.0
SIMULATION_SPEED_MPS: float = 30.0

EASING_CURVES: frozenset = frozenset({"ease_out", "linear"})


# ---------------------------------------------------------------------------
# Main config
# ---------------------------------------------------------------------------

@dataclass
class NavConfig:
    # Progress tracking
    corridor_width_m: float = CORRIDOR_WIDTH_M                  # off-route beyond this lateral distance
    step_arrival_threshold_m: float = STEP_ARRIVAL_THRESHOLD_M  # distance to step end that counts as reached
    default_transport_type: TransportType = TransportType.AUTOMOBILE

    # Simulation
    simulation_speed_mps: float = SIMULATION_SPEED_MPS
    point_spacing_m: float = 5.0           # densified point spacing along the route
    heading_lookahead_points: int = 5      # smooths noisy local bearings
    simulated_accuracy_m: float = 10.0

    # Camera
    rotation_duration_s: float = 0.5
    camera_animation_duration_s: float = 0.3
    camera_easing: str = "ease_out"        # "ease_out" | "linear"
    camera_distance_m: float = 300.0
    camera_pitch_deg: float = 65.0
    overview_padding: float = 100.0        # edge padding for route overview

    # Display tick
    frame_rate_hz: float = 60.0

    def __post_init__(self) -> None:
        positive = {
            "corridor_width_m": self.corridor_width_m,
            "step_arrival_threshold_m": self.step_arrival_threshold_m,
            "simulation_speed_mps": self.simulation_speed_mps,
            "point_spacing_m": self.point_spacing_m,
            "rotation_duration_s": self.rotation_duration_s,
            "camera_animation_duration_s": self.camera_animation_duration_s,
            "camera_distance_m": self.camera_distance_m,
            "frame_rate_hz": self.frame_rate_hz,
        }
        for name, value in positive.items():
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        if self.heading_lookahead_points < 1:
            raise ValueError("heading_lookahead_points must be at least 1")
        if self.overview_padding < 0:
            raise ValueError("overview_padding must not be negative")
        if self.camera_easing not in EASING_CURVES:
            raise ValueError(
                f"camera_easing must be one of {sorted(EASING_CURVES)}, got {self.camera_easing!r}"
            )

    @property
    def frame_interval_s(self) -> float:
        return 1.0 / self.frame_rate_hz
