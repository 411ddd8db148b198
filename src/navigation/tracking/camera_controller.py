# camera_controller.py
# Turns a location + heading stream into smooth follow-camera motion.
# Heading rotation runs on its own eased, shortest-path timeline so GPS
# bearing noise and 359 -> 1 wraparound never snap the view.

import logging
from typing import Optional

from shapely.geometry import LineString, Point

from .geo_utils import interpolate_coord, normalize_heading, shortest_angular_delta, smoothstep
from .interfaces import MapSurface
from .models import BoundingRegion, CameraPose, Coord, LocationFix, Route
from .nav_config import NavConfig
from .ticker import DisplayTicker, TickHandle

logger = logging.getLogger(__name__)


def ease_out(t: float) -> float:
    t = max(0.0, min(1.0, t))
    return 1.0 - (1.0 - t) ** 2


def linear(t: float) -> float:
    return max(0.0, min(1.0, t))


EASINGS = {"ease_out": ease_out, "linear": linear}


def route_bounds(route: Route) -> BoundingRegion:
    """Bounding box of the full route polyline."""
    coords = [(c.lon, c.lat) for c in route.polyline]
    if not coords:
        raise ValueError("Route has no geometry.")
    geometry = LineString(coords) if len(coords) > 1 else Point(coords[0])
    min_lon, min_lat, max_lon, max_lat = geometry.bounds
    return BoundingRegion(min_lat=min_lat, min_lon=min_lon, max_lat=max_lat, max_lon=max_lon)


class CameraController:
    """
    Follow camera for a navigation map.

    Call update_camera() on every fix and advance(dt) on every display tick
    (or attach() to a DisplayTicker). Position, pitch and distance use one
    eased animation; heading uses a separate smoothstep rotation.

    Args:
        map_surface:  Receives the camera pose and overview regions.
        config:       NavConfig for pitch, distance and animation timing.
        initial_pose: Starting pose. When omitted, the first fix places the
                      camera directly and only later fixes animate.
    """

    def __init__(
        self,
        map_surface: MapSurface,
        config: Optional[NavConfig] = None,
        initial_pose: Optional[CameraPose] = None,
    ) -> None:
        self.map_surface = map_surface
        self.config = config or NavConfig()
        self._ease = EASINGS[self.config.camera_easing]

        self.pose = initial_pose or CameraPose(
            center=Coord(0.0, 0.0),
            distance_m=self.config.camera_distance_m,
            pitch_deg=self.config.camera_pitch_deg,
            heading_deg=0.0,
        )
        self.is_following = True
        # Without a seeded pose the first fix is snapped to, not animated to.
        self._has_position = initial_pose is not None

        # Rotation state
        self.last_heading = self.pose.heading_deg
        self.target_heading = self.pose.heading_deg
        self.is_rotating = False
        self._rotation_start_time = 0.0
        self._rotation_start_heading = self.pose.heading_deg

        # Position / pitch / distance animation
        self._anim_from: Optional[CameraPose] = None
        self._anim_to: Optional[CameraPose] = None
        self._anim_start_time = 0.0

        self._now = 0.0
        self._tick_handle: Optional[TickHandle] = None

    # ------------------------------------------------------------------
    # Tick registration
    # ------------------------------------------------------------------

    def attach(self, ticker: DisplayTicker) -> None:
        if self._tick_handle is None:
            self._tick_handle = ticker.register(self.advance)

    def close(self) -> None:
        """Release the display tick. Must be called on teardown."""
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    @property
    def is_animating(self) -> bool:
        return self.is_rotating or self._anim_to is not None

    # ------------------------------------------------------------------
    # Location updates
    # ------------------------------------------------------------------

    def update_camera(self, fix: LocationFix, heading: Optional[float] = None) -> bool:
        """
        Retarget the camera on a new fix.

        Returns:
            False when follow mode is off and the update was ignored.
        """
        if not self.is_following:
            return False

        if not self._has_position:
            self._snap_to(fix, heading)
            return True

        # Heading is excluded here; the rotation below owns it.
        self._anim_from = self.pose
        self._anim_to = CameraPose(
            center=fix.coord,
            distance_m=self.config.camera_distance_m,
            pitch_deg=self.config.camera_pitch_deg,
            heading_deg=self.pose.heading_deg,
        )
        self._anim_start_time = self._now

        if heading is not None:
            heading = normalize_heading(heading)
            if heading != self.target_heading:
                self.target_heading = heading
                if not self.is_rotating:
                    self.is_rotating = True
                    self._rotation_start_time = self._now
                    self._rotation_start_heading = self.pose.heading_deg
        return True

    def _snap_to(self, fix: LocationFix, heading: Optional[float]) -> None:
        heading = normalize_heading(heading) if heading is not None else self.pose.heading_deg
        self.pose = CameraPose(
            center=fix.coord,
            distance_m=self.config.camera_distance_m,
            pitch_deg=self.config.camera_pitch_deg,
            heading_deg=heading,
        )
        self.last_heading = self.target_heading = heading
        self._has_position = True
        self.map_surface.set_camera(self.pose)

    def advance(self, dt: float) -> None:
        """Step rotation and position animations by dt seconds."""
        self._now += dt
        if not self.is_animating:
            return

        heading = self.pose.heading_deg
        if self.is_rotating:
            heading = self._rotation_heading()

        center = self.pose.center
        distance = self.pose.distance_m
        pitch = self.pose.pitch_deg
        if self._anim_to is not None:
            ratio = (self._now - self._anim_start_time) / self.config.camera_animation_duration_s
            eased = self._ease(ratio)
            start, end = self._anim_from, self._anim_to
            center = interpolate_coord(start.center, end.center, eased)
            distance = start.distance_m + (end.distance_m - start.distance_m) * eased
            pitch = start.pitch_deg + (end.pitch_deg - start.pitch_deg) * eased
            if ratio >= 1.0:
                center, distance, pitch = end.center, end.distance_m, end.pitch_deg
                self._anim_from = self._anim_to = None

        self.pose = CameraPose(center=center, distance_m=distance, pitch_deg=pitch, heading_deg=heading)
        self.map_surface.set_camera(self.pose)

    def _rotation_heading(self) -> float:
        ratio = (self._now - self._rotation_start_time) / self.config.rotation_duration_s
        ratio = max(0.0, min(1.0, ratio))
        delta = shortest_angular_delta(self._rotation_start_heading, self.target_heading)
        heading = normalize_heading(self._rotation_start_heading + delta * smoothstep(ratio))
        if ratio >= 1.0:
            self.is_rotating = False
            self.last_heading = self.target_heading
            heading = self.target_heading
        return heading

    # ------------------------------------------------------------------
    # Modes
    # ------------------------------------------------------------------

    def toggle_follow_mode(self) -> bool:
        self.is_following = not self.is_following
        logger.debug(f"Follow mode {'on' if self.is_following else 'off'}")
        return self.is_following

    def show_route_overview(self, route: Route, animated: bool = True) -> BoundingRegion:
        """Fit the whole route on screen. Turns follow mode off."""
        region = route_bounds(route)
        self.map_surface.fit_region(region, self.config.overview_padding, animated)

        self.is_following = False
        # Freeze where we are; the overview owns the camera now.
        self._anim_from = self._anim_to = None
        if self.is_rotating:
            self.is_rotating = False
            self.last_heading = self.pose.heading_deg
            self.target_heading = self.pose.heading_deg
        return region
