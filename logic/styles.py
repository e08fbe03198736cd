"""
Feature styling.

Maps rendered features to style descriptors. The descriptors are plain frozen
dataclasses so they can be compared in tests, serialised for the API and drawn
by the server-side renderer.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-18
"""

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Tuple

from logic.clustering import ClusterFeature

PIN_COLOR = "#3b82f6"
SELECTED_PIN_COLOR = "#ef4444"
WHITE = "white"
CLUSTER_STROKE_COLOR = "#fff"
CLUSTER_FONT = "bold 12px sans-serif"

PIN_RADIUS = 10
SELECTED_PIN_RADIUS = 12
PIN_STROKE_WIDTH = 3
CLUSTER_BASE_RADIUS = 15
CLUSTER_RADIUS_STEP = 0.5
CLUSTER_RADIUS_CAP = 20
CLUSTER_STROKE_WIDTH = 2

LIVE_LOCATION_COLOR = "#22c55e"
LIVE_LOCATION_RGB = (34, 197, 94)
HALO_CYCLE_MS = 2000
HALO_BASE_RADIUS = 12
HALO_GROWTH = 2
HALO_MAX_OPACITY = 0.5
DOT_RADIUS = 8
CONE_RADIUS = 30
CONE_OFFSET = 20


@dataclass(frozen=True)
class Fill:
    color: str


@dataclass(frozen=True)
class Stroke:
    color: str
    width: float


@dataclass(frozen=True)
class CircleStyle:
    radius: float
    fill: Fill
    stroke: Stroke


@dataclass(frozen=True)
class RegularShape:
    """A regular polygon marker (used for the heading cone).

    Attributes:
        points: Number of vertices.
        radius: Circumradius in pixels.
        rotation: Clockwise rotation in radians.
        angle: Angle of the first vertex in radians.
        displacement: Pixel offset (x, y) of the shape, y up, before rotation.
        fill: Fill colour.
        stroke: Outline.
    """

    points: int
    radius: float
    rotation: float
    angle: float
    displacement: Tuple[float, float]
    fill: Fill
    stroke: Stroke


@dataclass(frozen=True)
class Text:
    text: str
    font: str
    fill: Fill


@dataclass(frozen=True)
class Style:
    image: Any
    text: Optional[Text] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["image"]["kind"] = type(self.image).__name__
        return data


def rgba(alpha: float) -> str:
    r, g, b = LIVE_LOCATION_RGB
    return f"rgba({r}, {g}, {b}, {alpha})"


def cluster_radius(size: int) -> float:
    return CLUSTER_BASE_RADIUS + min(size, CLUSTER_RADIUS_CAP) * CLUSTER_RADIUS_STEP


def pin_style(selected: bool) -> Style:
    """Style for a single pin."""
    return Style(
        image=CircleStyle(
            radius=SELECTED_PIN_RADIUS if selected else PIN_RADIUS,
            fill=Fill(SELECTED_PIN_COLOR if selected else PIN_COLOR),
            stroke=Stroke(WHITE, PIN_STROKE_WIDTH),
        )
    )


def cluster_style(size: int) -> Style:
    """Style for a cluster of ``size`` pins, labelled with its count."""
    return Style(
        image=CircleStyle(
            radius=cluster_radius(size),
            fill=Fill(PIN_COLOR),
            stroke=Stroke(CLUSTER_STROKE_COLOR, CLUSTER_STROKE_WIDTH),
        ),
        text=Text(text=str(size), font=CLUSTER_FONT, fill=Fill(CLUSTER_STROKE_COLOR)),
    )


class StyleResolver:
    """Resolves cluster features to styles, memoized by style key.

    Singletons are keyed by their selection flag and clusters by their size,
    so at most two pin styles and one style per cluster size are ever built.
    The cache is dropped whenever the selection changes.
    """

    def __init__(self):
        self._cache: Dict[Any, Style] = {}
        self._selected_id: Optional[str] = None

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def invalidate(self) -> None:
        self._cache.clear()

    def set_selected(self, pin_id: Optional[str]) -> None:
        if pin_id != self._selected_id:
            self._selected_id = pin_id
            self.invalidate()

    def resolve(self, feature: ClusterFeature, selected_id: Optional[str] = None) -> Style:
        """Style for a rendered feature.

        Args:
            feature: Cluster feature (a singleton when it has one member).
            selected_id: Currently selected pin id.

        Returns:
            Style descriptor; equal inputs always give equal styles.
        """
        self.set_selected(selected_id)

        if feature.size == 1:
            selected = selected_id is not None and feature.pins[0].get("id") == selected_id
            key = f"pin-{selected}"
            if key not in self._cache:
                self._cache[key] = pin_style(selected)
            return self._cache[key]

        key = feature.size
        if key not in self._cache:
            self._cache[key] = cluster_style(feature.size)
        return self._cache[key]


def hit_radius(style: Style) -> float:
    """Clickable radius of a style's marker, including its outline."""
    image = style.image
    return image.radius + image.stroke.width / 2


def halo_phase(elapsed_ms: float) -> float:
    """Position within the 2 second pulse cycle, in [0, 1)."""
    return (elapsed_ms % HALO_CYCLE_MS) / HALO_CYCLE_MS


def live_location_styles(elapsed_ms: float, heading: Optional[float] = None) -> List[Style]:
    """Layered styles for the live-location marker, bottom first.

    The halo grows from 12 to 36 pixels while fading from 0.5 to 0 opacity
    over each 2 second cycle. With a heading, a translucent cone pointing in
    that direction is drawn beneath the halo and dot.

    Args:
        elapsed_ms: Time since the animation started.
        heading: Compass heading in degrees, or None.

    Returns:
        List of styles to draw in order.
    """
    cycle = halo_phase(elapsed_ms)
    scale = 1 + cycle * HALO_GROWTH
    opacity = HALO_MAX_OPACITY * (1 - cycle)

    styles = [
        Style(
            image=CircleStyle(
                radius=HALO_BASE_RADIUS * scale,
                fill=Fill(rgba(opacity)),
                stroke=Stroke(rgba(opacity), 2),
            )
        ),
        Style(
            image=CircleStyle(
                radius=DOT_RADIUS,
                fill=Fill(LIVE_LOCATION_COLOR),
                stroke=Stroke(WHITE, 3),
            )
        ),
    ]

    if heading is not None:
        styles.insert(
            0,
            Style(
                image=RegularShape(
                    points=3,
                    radius=CONE_RADIUS,
                    rotation=math.radians(heading),
                    angle=0.0,
                    displacement=(0.0, -CONE_OFFSET),
                    fill=Fill(rgba(0.3)),
                    stroke=Stroke(rgba(0.6), 1),
                )
            ),
        )

    return styles
