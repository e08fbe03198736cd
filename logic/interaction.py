"""
Pointer interaction handling.

Turns clicks and pointer moves on the map into one of:

- a cluster zoom (click on a marker that groups several pins),
- a pin activation (click on a single pin),
- a new-pin location (click on empty map while add mode is on).

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-19
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional

from logic.clustering import ClusterFeature
from logic.projection import Coordinate, get_center, to_lon_lat
from logic.view import MapView

logger = logging.getLogger(__name__)

CURSOR_POINTER = "pointer"
CURSOR_CROSSHAIR = "crosshair"
CURSOR_DEFAULT = ""


class ClickOutcome(str, Enum):
    CLUSTER_ZOOM = "cluster_zoom"
    CLUSTER_IGNORED = "cluster_ignored"
    PIN = "pin"
    MAP = "map"
    NONE = "none"


class InteractionDispatcher:
    """Dispatches pointer events to the application callbacks.

    Args:
        view: Map view used for coordinate conversion and cluster zooms.
        hit_test: Returns the rendered feature under a pixel, or None.
        on_pin_click: Called with the pin data of a clicked singleton.
        on_map_click: Called with (lat, lng) of an empty-map click in add mode.
        on_add_mode_change: Called with the new flag when add mode changes.
        max_zoom: Deepest zoom a cluster click may reach.
        zoom_margin: Subtracted from the fitted zoom so members are not at the edge.
        duration: Cluster zoom animation duration in milliseconds.
    """

    def __init__(
        self,
        view: MapView,
        hit_test: Callable[[Coordinate], Optional[ClusterFeature]],
        on_pin_click: Callable[[Dict[str, Any]], None] = lambda pin: None,
        on_map_click: Callable[[float, float], None] = lambda lat, lng: None,
        on_add_mode_change: Callable[[bool], None] = lambda active: None,
        max_zoom: float = 19,
        zoom_margin: float = 0.5,
        duration: float = 500,
    ):
        self.view = view
        self.hit_test = hit_test
        self.on_pin_click = on_pin_click
        self.on_map_click = on_map_click
        self.on_add_mode_change = on_add_mode_change
        self.max_zoom = max_zoom
        self.zoom_margin = zoom_margin
        self.duration = duration
        self.add_mode = False
        self.cursor = CURSOR_DEFAULT

    def set_add_mode(self, active: bool) -> None:
        active = bool(active)
        self.cursor = CURSOR_CROSSHAIR if active else CURSOR_DEFAULT
        if active == self.add_mode:
            return
        self.add_mode = active
        self.on_add_mode_change(active)

    def handle_click(self, pixel: Coordinate) -> ClickOutcome:
        """Handle a click at a viewport pixel.

        Args:
            pixel: (x, y) position in the viewport.

        Returns:
            What the click did.
        """
        feature = self.hit_test(pixel)

        if feature is not None:
            if feature.size > 1:
                return self._zoom_to_cluster(feature)

            self.on_pin_click(feature.pins[0])
            if self.add_mode:
                self.set_add_mode(False)
            return ClickOutcome.PIN

        if self.add_mode:
            lng, lat = to_lon_lat(*self.view.coordinate_for_pixel(pixel))
            self.on_map_click(lat, lng)
            self.set_add_mode(False)
            return ClickOutcome.MAP

        return ClickOutcome.NONE

    def _zoom_to_cluster(self, feature: ClusterFeature) -> ClickOutcome:
        if self.view.is_animating():
            return ClickOutcome.CLUSTER_IGNORED

        extent = feature.extent()
        zoom = self.view.zoom_for_extent(extent)
        if zoom is not None:
            target_zoom = min(zoom, self.max_zoom) - self.zoom_margin
        else:
            target_zoom = self.view.zoom + 1

        logger.debug("Zooming to cluster of %d pins at zoom %.2f", feature.size, target_zoom)
        self.view.animate(get_center(extent), target_zoom, self.duration)
        return ClickOutcome.CLUSTER_ZOOM

    def handle_pointer_move(self, pixel: Coordinate) -> Optional[str]:
        """Update the cursor for a hover position.

        Returns:
            The new cursor, or None when hover handling was skipped because
            the view is moving.
        """
        if self.view.is_interacting() or self.view.is_animating():
            return None

        if self.hit_test(pixel) is not None:
            self.cursor = CURSOR_POINTER
        elif self.add_mode:
            self.cursor = CURSOR_CROSSHAIR
        else:
            self.cursor = CURSOR_DEFAULT
        return self.cursor
