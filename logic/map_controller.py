"""
Map controller.

Single owner of the map's mutable state: the pin collection, the selected
pin, add mode, the live location and the camera. Event handlers receive the
controller itself rather than reaching for module-level state, and
:meth:`MapController.teardown` releases every subscription the controller
holds.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-19
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from logic.clustering import ClusterFeature, ClusterSource
from logic.config import load_config
from logic.interaction import ClickOutcome, InteractionDispatcher
from logic.live_location import LiveLocationOverlay, OrientationSubscription
from logic.projection import Coordinate, from_lon_lat
from logic.styles import Style, StyleResolver, hit_radius
from logic.view import DEFAULT_SIZE, DisplayMode, MapView, TileLayers, monotonic_ms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedFeature:
    feature: ClusterFeature
    style: Style
    pixel: Coordinate


class MapController:
    """Map state and behaviour for one map instance.

    Args:
        on_pin_click: Called with a pin's data when a single pin is clicked.
        on_map_click: Called with (lat, lng) when the empty map is clicked in
            add mode.
        on_add_mode_change: Called when the controller leaves add mode by
            itself (after a pin or map click).
        on_render_request: Called whenever the map needs a redraw.
        config: Map configuration; loaded from map_config.json if omitted.
        size: Viewport (width, height) in pixels.
        clock: Millisecond clock shared by animations.
        scheduler: Frame scheduler for the live-location halo.
    """

    def __init__(
        self,
        on_pin_click: Callable[[Dict[str, Any]], None] = lambda pin: None,
        on_map_click: Callable[[float, float], None] = lambda lat, lng: None,
        on_add_mode_change: Callable[[bool], None] = lambda active: None,
        on_render_request: Callable[[], None] = lambda: None,
        config: Optional[Dict[str, Any]] = None,
        size: Tuple[int, int] = DEFAULT_SIZE,
        clock: Callable[[], float] = monotonic_ms,
        scheduler=None,
    ):
        self.config = config or load_config()
        self.on_render_request = on_render_request
        self.render_requests = 0
        self.disposed = False

        clustering = self.config["clustering"]
        animation = self.config["animation"]
        self.animation_settings = animation

        self.pins: List[Dict[str, Any]] = []
        self.selected_pin_id: Optional[str] = None

        self.cluster_source = ClusterSource(
            distance=clustering["distance"],
            min_distance=clustering["min_distance"],
        )
        self.styles = StyleResolver()

        lon, lat = self.config["initial_center"]
        self.view = MapView(
            center=from_lon_lat(lon, lat),
            zoom=self.config["initial_zoom"],
            size=size,
            clock=clock,
        )
        self.tile_layers = TileLayers(self.config["tile_sources"])

        self.dispatcher = InteractionDispatcher(
            view=self.view,
            hit_test=self.feature_at_pixel,
            on_pin_click=on_pin_click,
            on_map_click=on_map_click,
            on_add_mode_change=on_add_mode_change,
            max_zoom=self.config["max_zoom"],
            zoom_margin=animation["cluster_zoom_margin"],
            duration=animation["cluster_zoom_duration_ms"],
        )

        self.live_location = LiveLocationOverlay(
            request_render=self.request_render,
            clock=clock,
            scheduler=scheduler,
        )
        self.orientation: Optional[OrientationSubscription] = None

        self._zoom_to_user_pending = False
        self._zoom_to_user_active = False
        self._zoom_to_user_callback: Optional[Callable[[], None]] = None
        self._remove_animation_listener = self.view.on_animation_end(self._on_animation_end)

    # ------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------

    def set_pins(self, pins: List[Dict[str, Any]]) -> None:
        self.pins = list(pins)
        self.cluster_source.set_pins(self.pins)
        self.request_render()

    def add_pin(self, pin: Dict[str, Any]) -> None:
        self.set_pins([pin] + self.pins)

    def set_selected_pin(self, pin_id: Optional[str]) -> None:
        if pin_id == self.selected_pin_id:
            return
        self.selected_pin_id = pin_id
        self.styles.set_selected(pin_id)
        self.cluster_source.refresh()
        self.request_render()

    @property
    def add_mode(self) -> bool:
        return self.dispatcher.add_mode

    def set_add_mode(self, active: bool) -> None:
        self.dispatcher.set_add_mode(active)

    @property
    def cursor(self) -> str:
        return self.dispatcher.cursor

    def set_user_location(self, lat: Optional[float], lng: Optional[float]) -> None:
        self.live_location.set_position(lat, lng)
        self._maybe_zoom_to_user()

    def set_user_heading(self, heading: Optional[float]) -> None:
        self.live_location.set_heading(heading)

    def set_display_mode(self, mode) -> None:
        self.tile_layers.set_mode(mode)
        self.request_render()

    @property
    def display_mode(self) -> DisplayMode:
        return self.tile_layers.mode

    def start_orientation(self, source: Any) -> None:
        """Follow device orientation events from ``source`` until teardown."""
        self.stop_orientation()
        self.orientation = OrientationSubscription(source, self.set_user_heading)
        self.orientation.start()

    def stop_orientation(self) -> None:
        if self.orientation is not None:
            self.orientation.stop()
            self.orientation = None

    # ------------------------------------------------------------
    # Zoom to user
    # ------------------------------------------------------------

    def request_zoom_to_user(self, on_complete: Optional[Callable[[], None]] = None) -> bool:
        """Ask for a one-shot animated zoom to the live location.

        The zoom runs as soon as a live location is known. ``on_complete`` is
        called once the animation has finished, after which a new request is
        needed for another zoom.

        Returns:
            False if a previous request has not completed yet.
        """
        if self._zoom_to_user_pending or self._zoom_to_user_active:
            return False
        self._zoom_to_user_pending = True
        self._zoom_to_user_callback = on_complete
        self._maybe_zoom_to_user()
        return True

    @property
    def zoom_to_user_in_progress(self) -> bool:
        return self._zoom_to_user_pending or self._zoom_to_user_active

    def _maybe_zoom_to_user(self) -> None:
        location = self.live_location.location
        if not self._zoom_to_user_pending or location is None:
            return

        started = self.view.animate(
            location.coordinate,
            self.animation_settings["user_zoom_level"],
            self.animation_settings["user_zoom_duration_ms"],
            callback=self._on_zoom_to_user_done,
        )
        if started:
            self._zoom_to_user_pending = False
            self._zoom_to_user_active = True

    def _on_zoom_to_user_done(self, completed: bool) -> None:
        self._zoom_to_user_active = False
        callback, self._zoom_to_user_callback = self._zoom_to_user_callback, None
        if callback is not None:
            callback()

    def _on_animation_end(self, completed: bool) -> None:
        # a zoom-to-user request queued behind another animation runs now,
        # whether that animation finished or was cancelled
        self._maybe_zoom_to_user()

    # ------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------

    def request_render(self) -> None:
        self.render_requests += 1
        self.on_render_request()

    def render(self, now: Optional[float] = None) -> List[RenderedFeature]:
        """Advance animations and return the pin features to draw this frame."""
        if self.view.update(now):
            self.request_render()
        return self.rendered_features()

    def clusters(self) -> List[ClusterFeature]:
        return self.cluster_source.get_clusters(self.view.resolution)

    def rendered_features(self) -> List[RenderedFeature]:
        features = []
        for cluster in self.clusters():
            features.append(
                RenderedFeature(
                    feature=cluster,
                    style=self.styles.resolve(cluster, self.selected_pin_id),
                    pixel=self.view.pixel_for_coordinate(cluster.coordinate),
                )
            )
        return features

    def feature_at_pixel(self, pixel: Coordinate) -> Optional[ClusterFeature]:
        """Topmost pin feature whose marker covers ``pixel``, nearest first."""
        best = None
        best_distance = math.inf
        for rendered in self.rendered_features():
            distance = math.hypot(pixel[0] - rendered.pixel[0], pixel[1] - rendered.pixel[1])
            if distance <= hit_radius(rendered.style) and distance < best_distance:
                best = rendered.feature
                best_distance = distance
        return best

    # ------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------

    def click(self, pixel: Coordinate) -> ClickOutcome:
        self._ensure_alive()
        outcome = self.dispatcher.handle_click(pixel)
        if outcome == ClickOutcome.CLUSTER_ZOOM:
            self.request_render()
        return outcome

    def pointer_move(self, pixel: Coordinate) -> Optional[str]:
        self._ensure_alive()
        return self.dispatcher.handle_pointer_move(pixel)

    def _ensure_alive(self) -> None:
        if self.disposed:
            raise RuntimeError("Map controller has been torn down")

    # ------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------

    def teardown(self) -> None:
        """Release listeners, timers and the map state. Safe to call twice."""
        if self.disposed:
            return
        self.disposed = True
        self.stop_orientation()
        self.live_location.dispose()
        self._remove_animation_listener()
        self.view.dispose()
        self.cluster_source.set_pins([])
        self.styles.invalidate()
        self.pins = []
        self.on_render_request = lambda: None
        logger.debug("Map controller torn down")
