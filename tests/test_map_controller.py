"""
Tests for the map controller and pointer interaction.

Run with: python -m pytest tests/test_map_controller.py -v
"""

import pytest

from logic.interaction import ClickOutcome
from logic.map_controller import MapController
from logic.projection import from_lon_lat, get_center
from logic.view import DisplayMode

SIZE = (800, 600)


def make_pin(pin_id, lat, lng):
    return {"id": pin_id, "lat": lat, "lng": lng, "title": pin_id}


class Recorder:
    """Collects controller callbacks."""

    def __init__(self):
        self.pin_clicks = []
        self.map_clicks = []
        self.add_mode_changes = []
        self.renders = 0

    def on_pin_click(self, pin):
        self.pin_clicks.append(pin)

    def on_map_click(self, lat, lng):
        self.map_clicks.append((lat, lng))

    def on_add_mode_change(self, active):
        self.add_mode_changes.append(active)

    def on_render_request(self):
        self.renders += 1


class FakeOrientationSource:
    def __init__(self):
        self.listeners = []

    def subscribe(self, listener):
        self.listeners.append(listener)
        return lambda: self.listeners.remove(listener)

    def emit(self, heading):
        for listener in list(self.listeners):
            listener(heading)


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def controller(recorder, map_config, clock, scheduler):
    ctrl = MapController(
        on_pin_click=recorder.on_pin_click,
        on_map_click=recorder.on_map_click,
        on_add_mode_change=recorder.on_add_mode_change,
        on_render_request=recorder.on_render_request,
        config=map_config,
        size=SIZE,
        clock=clock,
        scheduler=scheduler,
    )
    yield ctrl
    ctrl.teardown()


def only_feature(controller):
    (rendered,) = controller.rendered_features()
    return rendered


class TestClusterClicks:
    """Clicking clusters zooms the view; clicking pins never does."""

    def test_cluster_click_zooms_to_members(self, controller, clock):
        controller.set_pins([make_pin("a", 45.0, 24.0), make_pin("b", 45.01, 24.01)])
        rendered = only_feature(controller)
        assert rendered.feature.size == 2

        extent = rendered.feature.extent()
        expected_zoom = min(controller.view.zoom_for_extent(extent), 19) - 0.5

        assert controller.click(rendered.pixel) == ClickOutcome.CLUSTER_ZOOM
        assert controller.view.is_animating()

        clock.advance(500)
        controller.render()

        assert not controller.view.is_animating()
        assert controller.view.center == pytest.approx(get_center(extent))
        assert controller.view.zoom == pytest.approx(expected_zoom)

    def test_cluster_zoom_capped_at_max_zoom(self, controller, clock):
        controller.set_pins([make_pin("a", 45.0, 24.0), make_pin("b", 45.00001, 24.00001)])
        rendered = only_feature(controller)

        controller.click(rendered.pixel)
        clock.advance(500)
        controller.render()

        assert controller.view.zoom == pytest.approx(18.5)

    def test_cluster_at_single_point_zooms_one_level(self, controller, clock):
        controller.set_pins([make_pin("a", 45.0, 24.0), make_pin("b", 45.0, 24.0)])
        rendered = only_feature(controller)

        controller.click(rendered.pixel)
        clock.advance(500)
        controller.render()

        assert controller.view.zoom == pytest.approx(8)
        assert controller.view.center == pytest.approx(from_lon_lat(24.0, 45.0))

    def test_cluster_click_ignored_while_animating(self, controller):
        controller.set_pins([make_pin("a", 45.0, 24.0), make_pin("b", 45.01, 24.01)])
        rendered = only_feature(controller)
        controller.view.animate((0.0, 0.0), 3, 500)

        assert controller.click(rendered.pixel) == ClickOutcome.CLUSTER_IGNORED

    def test_pin_click_selects_without_zooming(self, controller, recorder):
        pin = make_pin("a", 45.0, 24.0)
        controller.set_pins([pin])
        rendered = only_feature(controller)
        zoom, center = controller.view.zoom, controller.view.center

        assert controller.click(rendered.pixel) == ClickOutcome.PIN

        assert recorder.pin_clicks == [pin]
        assert not controller.view.is_animating()
        assert controller.view.zoom == zoom
        assert controller.view.center == center

    def test_click_near_marker_edge(self, controller, recorder):
        controller.set_pins([make_pin("a", 45.0, 24.0)])
        x, y = only_feature(controller).pixel

        assert controller.click((x + 11, y)) == ClickOutcome.PIN
        assert controller.click((x + 13, y)) == ClickOutcome.NONE

    def test_empty_click_without_add_mode(self, controller, recorder):
        assert controller.click((10, 10)) == ClickOutcome.NONE
        assert recorder.map_clicks == []


class TestAddMode:
    """Add mode turns an empty-map click into a new pin location."""

    def test_map_click_reports_location_once(self, controller, recorder):
        controller.set_add_mode(True)
        assert controller.cursor == "crosshair"

        pixel = controller.view.pixel_for_coordinate(from_lon_lat(23.1, 46.5))
        assert controller.click(pixel) == ClickOutcome.MAP

        assert len(recorder.map_clicks) == 1
        assert recorder.map_clicks[0] == pytest.approx((46.5, 23.1))
        assert not controller.add_mode
        assert controller.cursor == ""
        assert recorder.add_mode_changes == [True, False]

        controller.click(pixel)
        assert len(recorder.map_clicks) == 1

    def test_pin_click_leaves_add_mode(self, controller, recorder):
        controller.set_pins([make_pin("a", 45.0, 24.0)])
        controller.set_add_mode(True)

        assert controller.click(only_feature(controller).pixel) == ClickOutcome.PIN

        assert not controller.add_mode
        assert recorder.map_clicks == []
        assert len(recorder.pin_clicks) == 1


class TestCursor:
    """Hover feedback."""

    def test_pointer_over_feature(self, controller):
        controller.set_pins([make_pin("a", 45.0, 24.0)])
        assert controller.pointer_move(only_feature(controller).pixel) == "pointer"

    def test_default_cursor_over_empty_map(self, controller):
        assert controller.pointer_move((5, 5)) == ""

    def test_crosshair_in_add_mode(self, controller):
        controller.set_add_mode(True)
        assert controller.pointer_move((5, 5)) == "crosshair"

    def test_hover_skipped_while_view_moves(self, controller):
        controller.set_pins([make_pin("a", 45.0, 24.0)])
        pixel = only_feature(controller).pixel

        controller.view.begin_interaction()
        assert controller.pointer_move(pixel) is None
        controller.view.end_interaction()

        controller.view.animate((0.0, 0.0), 3, 500)
        assert controller.pointer_move(pixel) is None
        assert controller.cursor == ""


class TestZoomToUser:
    """One-shot zoom to the live location."""

    def test_waits_for_location(self, controller, clock):
        done = []
        assert controller.request_zoom_to_user(lambda: done.append(True))
        assert controller.zoom_to_user_in_progress
        assert not controller.view.is_animating()

        controller.set_user_location(46.5, 23.1)
        assert controller.view.is_animating()

        clock.advance(800)
        controller.render()

        assert done == [True]
        assert not controller.zoom_to_user_in_progress
        assert controller.view.zoom == 14
        assert controller.view.center == pytest.approx(from_lon_lat(23.1, 46.5))

    def test_second_request_ignored_until_complete(self, controller, clock):
        controller.set_user_location(46.5, 23.1)

        assert controller.request_zoom_to_user()
        assert not controller.request_zoom_to_user()

        clock.advance(800)
        controller.render()

        assert controller.request_zoom_to_user()

    def test_location_updates_do_not_rezoom(self, controller, clock):
        controller.set_user_location(46.5, 23.1)
        controller.request_zoom_to_user()
        clock.advance(800)
        controller.render()

        controller.set_user_location(46.6, 23.2)

        assert not controller.view.is_animating()

    def test_runs_after_current_animation(self, controller, clock):
        controller.set_user_location(46.5, 23.1)
        controller.view.animate((0.0, 0.0), 3, 500)

        assert controller.request_zoom_to_user()
        assert controller.zoom_to_user_in_progress

        clock.advance(500)
        controller.render()
        assert controller.view.is_animating()

        clock.advance(800)
        controller.render()
        assert controller.view.zoom == 14

    def test_teardown_releases_pending_callback(self, controller):
        done = []
        controller.set_user_location(46.5, 23.1)
        controller.request_zoom_to_user(lambda: done.append(True))

        controller.teardown()

        assert done == [True]

    def test_runs_after_cancelled_animation(self, controller, clock):
        controller.set_user_location(46.5, 23.1)
        controller.view.animate((0.0, 0.0), 3, 500)
        assert controller.request_zoom_to_user()

        controller.view.cancel_animations()
        assert controller.view.is_animating()

        clock.advance(800)
        controller.render()

        assert not controller.zoom_to_user_in_progress
        assert controller.view.zoom == 14


class TestWithoutEventLoop:
    """Controller used from plain synchronous code."""

    def test_user_location_without_running_loop(self, map_config, clock):
        ctrl = MapController(config=map_config, size=SIZE, clock=clock)
        try:
            ctrl.set_user_location(46.5, 23.1)

            assert ctrl.live_location.has_feature
            assert not ctrl.live_location.ticker.active
            assert ctrl.render() == []
        finally:
            ctrl.teardown()


class TestControllerState:
    """Pins, selection, display mode and teardown."""

    def test_set_pins_requests_render(self, controller, recorder):
        before = recorder.renders
        controller.set_pins([make_pin("a", 45.0, 24.0)])
        assert recorder.renders == before + 1

    def test_add_pin_prepends(self, controller):
        controller.set_pins([make_pin("a", 45.0, 24.0)])
        controller.add_pin(make_pin("b", 40.0, 20.0))
        assert [p["id"] for p in controller.pins] == ["b", "a"]

    def test_selection_restyles_pin(self, controller):
        controller.set_pins([make_pin("a", 45.0, 24.0)])
        assert only_feature(controller).style.image.radius == 10
        revision = controller.cluster_source.revision

        controller.set_selected_pin("a")

        assert controller.cluster_source.revision == revision + 1
        assert only_feature(controller).style.image.radius == 12

        controller.set_selected_pin(None)
        assert only_feature(controller).style.image.radius == 10

    def test_display_mode_toggle(self, controller):
        assert controller.display_mode == DisplayMode.STANDARD

        controller.set_display_mode("satellite")
        assert controller.display_mode == DisplayMode.SATELLITE
        assert len(controller.tile_layers.visible_layers()) == 3

        controller.set_display_mode(DisplayMode.STANDARD)
        assert len(controller.tile_layers.visible_layers()) == 1

    def test_live_location_not_clustered(self, controller):
        controller.set_pins([make_pin("a", 46.5, 23.1)])
        controller.set_user_location(46.5, 23.1)

        assert len(controller.rendered_features()) == 1
        assert controller.live_location.has_feature

    def test_orientation_updates_heading(self, controller):
        source = FakeOrientationSource()
        controller.set_user_location(46.5, 23.1)
        controller.start_orientation(source)

        source.emit(45)

        assert controller.live_location.features()[0].heading == 45

    def test_teardown_releases_everything(self, controller, scheduler):
        source = FakeOrientationSource()
        controller.set_user_location(46.5, 23.1)
        controller.start_orientation(source)
        controller.set_pins([make_pin("a", 45.0, 24.0)])

        controller.teardown()

        assert source.listeners == []
        assert not controller.live_location.ticker.active
        assert scheduler.pending == []
        assert controller.clusters() == []
        with pytest.raises(RuntimeError):
            controller.click((0, 0))

        controller.teardown()
