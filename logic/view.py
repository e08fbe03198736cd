"""
Map view and tile layers.

The view owns the camera (center, zoom) for a viewport of a given pixel size.
Camera moves go through :meth:`MapView.animate`, which refuses to start while
another animation is running and reports completion through a callback, so
callers can treat requests as one-shot.

Time is read from an injectable millisecond clock and advanced by calling
:meth:`MapView.update` from the render loop.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-18
"""

import logging
import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from logic.projection import (
    Coordinate,
    Extent,
    coordinate_to_pixel,
    pixel_to_coordinate,
    resolution_for_extent,
    resolution_for_zoom,
    zoom_for_resolution,
)

logger = logging.getLogger(__name__)

DEFAULT_SIZE = (1024, 768)
MIN_ZOOM = 0
MAX_ZOOM = 28


def monotonic_ms() -> float:
    return time.monotonic() * 1000


def ease_in_out(t: float) -> float:
    """Smooth start and end, used for all camera animations."""
    return t - math.sin(2 * math.pi * t) / (2 * math.pi)


@dataclass
class ViewState:
    center: Coordinate
    zoom: float
    animating: bool = False
    interacting: bool = False


@dataclass
class _Animation:
    start_time: float
    duration: float
    source_center: Coordinate
    source_zoom: float
    target_center: Coordinate
    target_zoom: float
    callback: Optional[Callable[[bool], None]]


class MapView:
    """Camera for the map viewport.

    Args:
        center: Initial center in map coordinates.
        zoom: Initial zoom level.
        size: Viewport (width, height) in pixels.
        clock: Returns the current time in milliseconds.
    """

    def __init__(
        self,
        center: Coordinate,
        zoom: float,
        size: Tuple[int, int] = DEFAULT_SIZE,
        clock: Callable[[], float] = monotonic_ms,
    ):
        self.state = ViewState(center=tuple(center), zoom=self._constrain_zoom(zoom))
        self.size = size
        self.clock = clock
        self._animation: Optional[_Animation] = None
        self._end_listeners: List[Callable[[bool], None]] = []

    @staticmethod
    def _constrain_zoom(zoom: float) -> float:
        return max(MIN_ZOOM, min(MAX_ZOOM, zoom))

    @property
    def center(self) -> Coordinate:
        return self.state.center

    @property
    def zoom(self) -> float:
        return self.state.zoom

    @property
    def resolution(self) -> float:
        return resolution_for_zoom(self.state.zoom)

    def is_animating(self) -> bool:
        return self.state.animating

    def is_interacting(self) -> bool:
        return self.state.interacting

    def set_size(self, size: Tuple[int, int]) -> None:
        self.size = size

    # ------------------------------------------------------------
    # Coordinate conversion
    # ------------------------------------------------------------

    def pixel_for_coordinate(self, coordinate: Coordinate) -> Coordinate:
        return coordinate_to_pixel(coordinate, self.state.center, self.resolution, self.size)

    def coordinate_for_pixel(self, pixel: Coordinate) -> Coordinate:
        return pixel_to_coordinate(pixel, self.state.center, self.resolution, self.size)

    def zoom_for_extent(self, extent: Extent) -> Optional[float]:
        """Zoom level that fits ``extent`` in the viewport, if one exists."""
        return zoom_for_resolution(resolution_for_extent(extent, self.size))

    # ------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------

    def begin_interaction(self) -> None:
        self.state.interacting = True

    def end_interaction(self) -> None:
        self.state.interacting = False

    def pan_by(self, dx: float, dy: float) -> None:
        """Move the camera by a pixel delta during a drag gesture."""
        if self.state.animating:
            return
        resolution = self.resolution
        x, y = self.state.center
        self.state.center = (x - dx * resolution, y + dy * resolution)

    # ------------------------------------------------------------
    # Animation
    # ------------------------------------------------------------

    def on_animation_end(self, listener: Callable[[bool], None]) -> Callable[[], None]:
        """Register a listener called with ``completed`` after every animation.

        Returns:
            Function that removes the listener.
        """
        self._end_listeners.append(listener)

        def remove():
            if listener in self._end_listeners:
                self._end_listeners.remove(listener)

        return remove

    def animate(
        self,
        center: Coordinate,
        zoom: float,
        duration: float,
        callback: Optional[Callable[[bool], None]] = None,
    ) -> bool:
        """Start an animated move to ``center`` and ``zoom``.

        Args:
            center: Target center in map coordinates.
            zoom: Target zoom level.
            duration: Duration in milliseconds.
            callback: Called with True when the animation finishes, or False
                if it is cancelled.

        Returns:
            False if another animation is already in flight and this request
            was ignored.
        """
        if self.state.animating:
            logger.debug("Ignoring animation request while another is in flight")
            return False

        self._animation = _Animation(
            start_time=self.clock(),
            duration=max(0.0, float(duration)),
            source_center=self.state.center,
            source_zoom=self.state.zoom,
            target_center=tuple(center),
            target_zoom=self._constrain_zoom(zoom),
            callback=callback,
        )
        self.state.animating = True
        self.update()
        return True

    def update(self, now: Optional[float] = None) -> bool:
        """Advance the running animation.

        Args:
            now: Current time in milliseconds; read from the clock if omitted.

        Returns:
            True while an animation is still running.
        """
        animation = self._animation
        if animation is None:
            return False

        now = self.clock() if now is None else now
        elapsed = now - animation.start_time
        fraction = 1.0 if animation.duration == 0 else min(1.0, elapsed / animation.duration)
        progress = ease_in_out(fraction)

        sx, sy = animation.source_center
        tx, ty = animation.target_center
        self.state.center = (sx + (tx - sx) * progress, sy + (ty - sy) * progress)
        self.state.zoom = animation.source_zoom + (animation.target_zoom - animation.source_zoom) * progress

        if fraction >= 1.0:
            self.state.center = animation.target_center
            self.state.zoom = animation.target_zoom
            self._finish(True)
            return False
        return True

    def cancel_animations(self) -> None:
        """Stop the running animation where it is."""
        if self._animation is not None:
            self._finish(False)

    def _finish(self, completed: bool) -> None:
        animation = self._animation
        self._animation = None
        self.state.animating = False
        if animation.callback is not None:
            animation.callback(completed)
        for listener in list(self._end_listeners):
            listener(completed)

    def dispose(self) -> None:
        self.cancel_animations()
        self._end_listeners.clear()


# ============================================================
# Tile layers
# ============================================================


class DisplayMode(str, Enum):
    STANDARD = "standard"
    SATELLITE = "satellite"


@dataclass(frozen=True)
class TileLayer:
    name: str
    url: str
    visible: bool = True
    max_zoom: int = 19


class TileLayers:
    """Base map plus the satellite overlays.

    In standard mode the base layer shows street tiles and the
    transportation/places overlays are hidden. In satellite mode the base
    layer shows imagery and both overlays are visible. Switching replaces the
    whole layer tuple at once, so no caller ever sees a half-switched state.

    Args:
        sources: Tile source settings keyed by ``standard``, ``satellite``,
            ``transportation`` and ``places``.
    """

    OVERLAYS = ("transportation", "places")

    def __init__(self, sources: Dict[str, Dict]):
        self.sources = sources
        self.mode = DisplayMode.STANDARD
        self.layers: Tuple[TileLayer, ...] = self._build(DisplayMode.STANDARD)

    def _source(self, key: str) -> Tuple[str, int]:
        source = self.sources[key]
        return source["url"], source.get("max_zoom", 19)

    def _build(self, mode: DisplayMode) -> Tuple[TileLayer, ...]:
        satellite = mode == DisplayMode.SATELLITE
        url, max_zoom = self._source("satellite" if satellite else "standard")
        layers = [TileLayer(name="base", url=url, visible=True, max_zoom=max_zoom)]
        for key in self.OVERLAYS:
            overlay_url, overlay_max = self._source(key)
            layers.append(TileLayer(name=key, url=overlay_url, visible=satellite, max_zoom=overlay_max))
        return tuple(layers)

    def set_mode(self, mode) -> None:
        mode = DisplayMode(mode)
        if mode == self.mode:
            return
        self.layers = self._build(mode)
        self.mode = mode
        logger.debug("Display mode switched to %s", mode.value)

    def get(self, name: str) -> TileLayer:
        return next(layer for layer in self.layers if layer.name == name)

    def visible_layers(self) -> List[TileLayer]:
        return [layer for layer in self.layers if layer.visible]
