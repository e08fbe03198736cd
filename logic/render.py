"""
Server-side map rendering for image generation.

This module draws the clustered pins of a map view into a PNG, using the same
style descriptors the interactive map uses. Tiles are not fetched; pins are
drawn on a plain background.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-21
"""

import io
import math
import re
from typing import List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from logic.map_controller import RenderedFeature
from logic.styles import CircleStyle, RegularShape, Style

BACKGROUND = (243, 244, 246, 255)  # #f3f4f6
NAMED_COLORS = {"white": "#ffffff", "black": "#000000"}

_RGBA_RE = re.compile(r"rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*([\d.]+)\s*)?\)")


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Convert hex color string to RGB tuple.

    Args:
        hex_color: Hex color string (e.g., "#3b82f6" or "#fff").

    Returns:
        RGB tuple (r, g, b).
    """
    hex_color = hex_color.lstrip('#')
    if len(hex_color) == 3:
        hex_color = ''.join(c * 2 for c in hex_color)
    return tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))


def parse_color(color: str) -> Tuple[int, int, int, int]:
    """Convert a CSS colour (hex, rgb(), rgba() or a few names) to RGBA.

    Args:
        color: CSS colour string.

    Returns:
        RGBA tuple with alpha in 0-255.

    Raises:
        ValueError: If the colour format is not recognised.
    """
    color = NAMED_COLORS.get(color.strip().lower(), color.strip())
    if color.startswith('#'):
        return hex_to_rgb(color) + (255,)

    match = _RGBA_RE.fullmatch(color)
    if not match:
        raise ValueError(f"Unsupported colour: {color}")
    r, g, b, a = match.groups()
    alpha = 255 if a is None else round(float(a) * 255)
    return int(r), int(g), int(b), alpha


def _load_font(size: int, bold: bool = False) -> ImageFont.ImageFont:
    name = "DejaVuSans-Bold.ttf" if bold else "DejaVuSans.ttf"
    try:
        return ImageFont.truetype(f"/usr/share/fonts/truetype/dejavu/{name}", size)
    except OSError:
        # Fall back to default font if DejaVu not available
        return ImageFont.load_default()


def draw_centered_text(
    draw: ImageDraw.ImageDraw,
    text: str,
    position: Tuple[float, float],
    font: ImageFont.ImageFont,
    fill: Tuple[int, int, int, int],
) -> None:
    """Draw text centred on a point."""
    bbox = draw.textbbox((0, 0), text, font=font)
    text_width = bbox[2] - bbox[0]
    text_height = bbox[3] - bbox[1]
    x = position[0] - text_width / 2 - bbox[0]
    y = position[1] - text_height / 2 - bbox[1]
    draw.text((x, y), text, font=font, fill=fill)


def draw_circle(draw: ImageDraw.ImageDraw, center: Tuple[float, float], image: CircleStyle) -> None:
    cx, cy = center
    r = image.radius
    draw.ellipse(
        [(cx - r, cy - r), (cx + r, cy + r)],
        fill=parse_color(image.fill.color),
        outline=parse_color(image.stroke.color),
        width=max(1, round(image.stroke.width)),
    )


def regular_shape_points(center: Tuple[float, float], shape: RegularShape) -> List[Tuple[float, float]]:
    """Screen-space vertices of a regular shape.

    The displacement is rotated together with the shape, y up.
    """
    dx, dy = shape.displacement
    sin_r, cos_r = math.sin(shape.rotation), math.cos(shape.rotation)
    # rotate the (x, y-up) displacement clockwise, then flip y for the screen
    ox = dx * cos_r + dy * sin_r
    oy = -(-dx * sin_r + dy * cos_r)
    cx, cy = center[0] + ox, center[1] + oy

    points = []
    for i in range(shape.points):
        theta = shape.angle + shape.rotation + 2 * math.pi * i / shape.points
        points.append((cx + shape.radius * math.sin(theta), cy - shape.radius * math.cos(theta)))
    return points


def draw_style(draw: ImageDraw.ImageDraw, center: Tuple[float, float], style: Style, font=None) -> None:
    """Draw one style descriptor at a pixel position."""
    image = style.image
    if isinstance(image, CircleStyle):
        draw_circle(draw, center, image)
    elif isinstance(image, RegularShape):
        draw.polygon(
            regular_shape_points(center, image),
            fill=parse_color(image.fill.color),
            outline=parse_color(image.stroke.color),
        )

    if style.text is not None:
        draw_centered_text(draw, style.text.text, center, font or _load_font(12, bold=True), parse_color(style.text.fill.color))


def render_features_to_image(
    features: List[RenderedFeature],
    size: Tuple[int, int],
    live_location: Optional[Tuple[Tuple[float, float], List[Style]]] = None,
) -> bytes:
    """Render pin features to a PNG image.

    Args:
        features: Rendered clusters with their styles and pixel positions.
        size: Image (width, height).
        live_location: Optional (pixel, styles) of the live-location marker,
            drawn above the pins.

    Returns:
        PNG image as bytes.
    """
    img = Image.new('RGBA', size, BACKGROUND)
    overlay = Image.new('RGBA', size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    font = _load_font(12, bold=True)

    for rendered in features:
        draw_style(draw, rendered.pixel, rendered.style, font)

    if live_location is not None:
        pixel, styles = live_location
        for style in styles:
            draw_style(draw, pixel, style, font)

    img = Image.alpha_composite(img, overlay)

    # Convert to PNG bytes
    img_bytes = io.BytesIO()
    img.save(img_bytes, format='PNG')
    img_bytes.seek(0)

    return img_bytes.getvalue()
