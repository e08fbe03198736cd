"""
Map session.

Application state around one map: loading pins from the API, the open pin
detail panel, the add-pin flow, the display name and the "locate me" button.
API and geolocation failures never propagate out of the session; they are
stored as a user-facing message in ``error``. Calling ``submit_pin`` without
a picked location or ``submit_comment`` without an open pin is a programming
error and raises ``RuntimeError``.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-20
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Set, Tuple

from logic.api_client import ApiError, PinsClient
from logic.map_controller import MapController
from logic.names import generate_random_name

logger = logging.getLogger(__name__)

LOAD_PINS_ERROR = "Failed to load pins. Please refresh the page."
LOAD_PIN_ERROR = "Failed to load location details."
CREATE_PIN_ERROR = "Failed to create pin. Please try again."
CREATE_COMMENT_ERROR = "Failed to post comment. Please try again."
GEOLOCATION_UNSUPPORTED = "Geolocation is not supported by your browser."
GEOLOCATION_FAILED = "Unable to get your location. Please check your browser permissions."


class GeolocationError(Exception):
    """Raised by geolocation providers when no position can be obtained."""


class MapSession:
    """Glue between the API client and a :class:`MapController`.

    Args:
        client: API client.
        geolocation: Provider with an async
            ``get_current_position(timeout_ms, high_accuracy)`` returning
            ``(lat, lng)``; None when the platform has no geolocation.
        display_name: Stored display name, if the user picked one.
        controller_options: Extra keyword arguments for the controller.
    """

    def __init__(
        self,
        client: PinsClient,
        geolocation: Any = None,
        display_name: Optional[str] = None,
        **controller_options,
    ):
        self.client = client
        self.geolocation = geolocation
        self.display_name = display_name

        self.loading = False
        self.locating = False
        self.error: Optional[str] = None
        self.pin_detail: Optional[Dict[str, Any]] = None
        self.pin_detail_error: Optional[str] = None
        self.add_pin_coords: Optional[Tuple[float, float]] = None
        self._tasks: Set[asyncio.Task] = set()

        self.map = MapController(
            on_pin_click=self._on_pin_click,
            on_map_click=self._on_map_click,
            **controller_options,
        )

    # ------------------------------------------------------------
    # Map callbacks
    # ------------------------------------------------------------

    def _on_pin_click(self, pin: Dict[str, Any]) -> None:
        self.map.set_selected_pin(pin["id"])
        self._spawn(self.open_pin(pin["id"]))

    def _on_map_click(self, lat: float, lng: float) -> None:
        self.add_pin_coords = (lat, lng)

    def _spawn(self, coro) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # no loop: the caller loads the detail with open_pin() itself
            coro.close()
            return
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    # ------------------------------------------------------------
    # Pins
    # ------------------------------------------------------------

    async def load_pins(self) -> bool:
        self.loading = True
        try:
            pins = await self.client.fetch_pins()
        except ApiError as e:
            logger.error("Loading pins failed: %s", e)
            self.error = LOAD_PINS_ERROR
            return False
        finally:
            self.loading = False
        self.map.set_pins(pins)
        return True

    async def open_pin(self, pin_id: str) -> Optional[Dict[str, Any]]:
        """Load a pin's detail into the detail panel.

        Concurrent loads are not ordered: whichever response arrives last
        fills the panel.
        """
        self.pin_detail_error = None
        try:
            detail = await self.client.fetch_pin(pin_id)
        except ApiError as e:
            logger.error("Loading pin %s failed: %s", pin_id, e)
            self.pin_detail_error = LOAD_PIN_ERROR
            return None
        self.pin_detail = detail
        return detail

    def close_pin(self) -> None:
        self.map.set_selected_pin(None)
        self.pin_detail = None

    def start_add_pin(self) -> None:
        self.map.set_add_mode(True)

    def cancel_add_pin(self) -> None:
        self.map.set_add_mode(False)
        self.add_pin_coords = None

    async def submit_pin(self, title: str, description: str, author_name: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Create a pin at the location picked in add mode."""
        if self.add_pin_coords is None:
            raise RuntimeError("No location picked for the new pin")
        lat, lng = self.add_pin_coords
        author_name = (author_name or self.ensure_display_name()).strip()
        try:
            pin = await self.client.create_pin(lat, lng, title, description, author_name)
        except ApiError as e:
            logger.error("Creating pin failed: %s", e)
            self.error = CREATE_PIN_ERROR
            return None
        if self.display_name is None:
            self.display_name = author_name
        self.add_pin_coords = None
        self.map.add_pin(pin)
        return pin

    async def submit_comment(self, content: str, author_name: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Post a comment on the open pin and show it at the top of the thread."""
        if self.pin_detail is None:
            raise RuntimeError("No pin is open")
        author_name = (author_name or self.ensure_display_name()).strip()
        try:
            comment = await self.client.create_comment(self.pin_detail["id"], author_name, content)
        except ApiError as e:
            logger.error("Posting comment failed: %s", e)
            self.pin_detail_error = CREATE_COMMENT_ERROR
            return None
        comments = self.pin_detail.setdefault("comments", [])
        comments.insert(0, comment)
        return comment

    def ensure_display_name(self) -> str:
        if not self.display_name:
            self.display_name = generate_random_name()
        return self.display_name

    # ------------------------------------------------------------
    # Locate me
    # ------------------------------------------------------------

    async def locate_me(self) -> bool:
        """Find the user's position and zoom to it once.

        Returns:
            True if a position was obtained. Calls made while a previous
            request is still outstanding return False immediately.
        """
        if self.locating:
            return False
        if self.geolocation is None:
            self.error = GEOLOCATION_UNSUPPORTED
            return False

        settings = self.map.config["geolocation"]
        self.locating = True
        try:
            lat, lng = await self.geolocation.get_current_position(
                timeout_ms=settings["timeout_ms"],
                high_accuracy=settings["high_accuracy"],
            )
        except (GeolocationError, asyncio.TimeoutError) as e:
            logger.warning("Geolocation failed: %s", e)
            self.error = GEOLOCATION_FAILED
            return False
        finally:
            self.locating = False

        self.map.set_user_location(lat, lng)
        self.map.request_zoom_to_user()
        return True

    # ------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------

    def teardown(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        self.map.teardown()
