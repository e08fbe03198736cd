"""
Tests for the PNG renderer.

Run with: python -m pytest tests/test_render.py -v
"""

import io
import math

import pytest
from PIL import Image

from logic.render import hex_to_rgb, parse_color, regular_shape_points, render_features_to_image
from logic.styles import live_location_styles


def test_hex_to_rgb():
    assert hex_to_rgb("#3b82f6") == (59, 130, 246)
    assert hex_to_rgb("#fff") == (255, 255, 255)


def test_parse_color():
    assert parse_color("white") == (255, 255, 255, 255)
    assert parse_color("#ef4444") == (239, 68, 68, 255)
    assert parse_color("rgba(34, 197, 94, 0.5)") == (34, 197, 94, 128)
    assert parse_color("rgb(1, 2, 3)") == (1, 2, 3, 255)


def test_parse_color_rejects_unknown():
    with pytest.raises(ValueError):
        parse_color("hsl(10, 20%, 30%)")


def test_cone_points_north():
    cone = live_location_styles(0, heading=0)[0].image
    points = regular_shape_points((100, 100), cone)

    assert len(points) == 3
    # shape is moved 20px down the screen, first vertex straight up from there
    assert points[0] == pytest.approx((100, 120 - 30))


def test_cone_rotates_with_heading():
    cone = live_location_styles(0, heading=90)[0].image
    points = regular_shape_points((100, 100), cone)

    # heading east: displacement now points west, first vertex east of it
    assert points[0] == pytest.approx((80 + 30, 100))
    assert cone.rotation == pytest.approx(math.pi / 2)


def test_empty_render():
    png = render_features_to_image([], (64, 32))
    image = Image.open(io.BytesIO(png))
    assert image.format == "PNG"
    assert image.size == (64, 32)


def test_live_location_drawn():
    png = render_features_to_image([], (64, 64), live_location=((32, 32), live_location_styles(0)))
    image = Image.open(io.BytesIO(png)).convert("RGB")
    assert image.getpixel((32, 32)) == (34, 197, 94)
