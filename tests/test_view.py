"""
Tests for the map view, projection helpers and tile layers.

Run with: python -m pytest tests/test_view.py -v
"""

import pytest

from logic.config import get_default_config
from logic.projection import (
    MAX_RESOLUTION,
    buffer_coordinate,
    from_lon_lat,
    resolution_for_zoom,
    to_lon_lat,
    zoom_for_resolution,
)
from logic.view import DisplayMode, MapView, TileLayers, ease_in_out


class TestProjection:
    """Tests for Web Mercator helpers."""

    def test_origin(self):
        assert from_lon_lat(0, 0) == pytest.approx((0.0, 0.0), abs=1e-9)

    def test_round_trip(self):
        x, y = from_lon_lat(24.74376, 45.82746)
        assert to_lon_lat(x, y) == pytest.approx((24.74376, 45.82746))

    def test_zoom_halves_resolution(self):
        assert resolution_for_zoom(0) == MAX_RESOLUTION
        assert resolution_for_zoom(1) == pytest.approx(MAX_RESOLUTION / 2)
        assert zoom_for_resolution(resolution_for_zoom(14)) == pytest.approx(14)

    def test_zoom_for_bad_resolution(self):
        assert zoom_for_resolution(0) is None
        assert zoom_for_resolution(-5) is None
        assert zoom_for_resolution(float("inf")) is None


class TestMapView:
    """Tests for MapView."""

    def make_view(self, clock, zoom=7):
        return MapView(center=from_lon_lat(24.74376, 45.82746), zoom=zoom, size=(800, 600), clock=clock)

    def test_pixel_conversion_round_trip(self, clock):
        view = self.make_view(clock)
        assert view.pixel_for_coordinate(view.center) == pytest.approx((400, 300))

        coordinate = from_lon_lat(23.1, 46.5)
        pixel = view.pixel_for_coordinate(coordinate)
        assert view.coordinate_for_pixel(pixel) == pytest.approx(coordinate)

    def test_zoom_is_clamped(self, clock):
        assert MapView(center=(0, 0), zoom=40, clock=clock).zoom == 28
        assert MapView(center=(0, 0), zoom=-3, clock=clock).zoom == 0

    def test_animation_reaches_target(self, clock):
        view = self.make_view(clock)
        target = from_lon_lat(23.1, 46.5)

        assert view.animate(target, 12, 500)
        assert view.is_animating()

        clock.advance(250)
        assert view.update()
        assert 7 < view.zoom < 12

        clock.advance(250)
        assert not view.update()
        assert not view.is_animating()
        assert view.center == pytest.approx(target)
        assert view.zoom == 12

    def test_second_animation_is_ignored(self, clock):
        view = self.make_view(clock)
        first = from_lon_lat(23.1, 46.5)

        assert view.animate(first, 10, 500)
        assert not view.animate((0.0, 0.0), 3, 500)

        clock.advance(500)
        view.update()
        assert view.center == pytest.approx(first)
        assert view.zoom == 10

    def test_zero_duration_completes_immediately(self, clock):
        view = self.make_view(clock)
        done = []

        assert view.animate((0.0, 0.0), 3, 0, callback=done.append)

        assert done == [True]
        assert not view.is_animating()
        assert view.zoom == 3

    def test_callback_and_listeners(self, clock):
        view = self.make_view(clock)
        calls = []
        remove = view.on_animation_end(lambda completed: calls.append(("listener", completed)))

        view.animate((0.0, 0.0), 3, 100, callback=lambda completed: calls.append(("callback", completed)))
        clock.advance(100)
        view.update()

        assert calls == [("callback", True), ("listener", True)]

        remove()
        view.animate((1.0, 1.0), 4, 0)
        assert len(calls) == 2

    def test_cancel_reports_incomplete(self, clock):
        view = self.make_view(clock)
        done = []
        view.animate((0.0, 0.0), 3, 500, callback=done.append)

        view.cancel_animations()

        assert done == [False]
        assert not view.is_animating()

    def test_pan_by(self, clock):
        view = self.make_view(clock)
        x, y = view.center
        view.pan_by(10, -20)

        resolution = view.resolution
        assert view.center == pytest.approx((x - 10 * resolution, y - 20 * resolution))

    def test_pan_ignored_while_animating(self, clock):
        view = self.make_view(clock)
        view.animate((0.0, 0.0), 3, 500)
        center = view.center
        view.pan_by(50, 50)
        assert view.center == center

    def test_interaction_flag(self, clock):
        view = self.make_view(clock)
        view.begin_interaction()
        assert view.is_interacting()
        view.end_interaction()
        assert not view.is_interacting()

    def test_zoom_for_extent(self, clock):
        view = self.make_view(clock)
        extent = buffer_coordinate((0.0, 0.0), 300 * resolution_for_zoom(10))
        assert view.zoom_for_extent(extent) == pytest.approx(10)

    def test_zoom_for_single_point_extent(self, clock):
        view = self.make_view(clock)
        assert view.zoom_for_extent([5.0, 5.0, 5.0, 5.0]) is None


def test_ease_in_out_endpoints():
    assert ease_in_out(0) == 0
    assert ease_in_out(1) == pytest.approx(1)
    assert ease_in_out(0.5) == pytest.approx(0.5)


class TestTileLayers:
    """Tests for the standard/satellite layer switch."""

    def make_layers(self):
        return TileLayers(get_default_config()["tile_sources"])

    def test_standard_mode(self):
        layers = self.make_layers()
        sources = get_default_config()["tile_sources"]

        assert layers.mode == DisplayMode.STANDARD
        assert layers.get("base").url == sources["standard"]["url"]
        assert [layer.name for layer in layers.visible_layers()] == ["base"]

    def test_satellite_mode(self):
        layers = self.make_layers()
        sources = get_default_config()["tile_sources"]

        layers.set_mode(DisplayMode.SATELLITE)

        assert layers.get("base").url == sources["satellite"]["url"]
        assert [layer.name for layer in layers.visible_layers()] == ["base", "transportation", "places"]

    def test_switch_back(self):
        layers = self.make_layers()
        layers.set_mode("satellite")
        layers.set_mode("standard")
        assert layers.mode == DisplayMode.STANDARD
        assert not layers.get("transportation").visible
        assert not layers.get("places").visible

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            self.make_layers().set_mode("terrain")
