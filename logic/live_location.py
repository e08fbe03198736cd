"""
Live location overlay.

Shows the user's own position as a single unclustered marker with a pulsing
halo and, when the device reports a compass heading, a direction cone.

The halo is driven by a :class:`FrameTicker` that only runs while a position
is shown, and device orientation arrives through an
:class:`OrientationSubscription` that is started and stopped explicitly.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-19
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from logic.projection import Coordinate, from_lon_lat
from logic.styles import Style, live_location_styles
from logic.view import monotonic_ms

logger = logging.getLogger(__name__)

# ~60 frames per second
FRAME_INTERVAL_S = 1 / 60


@dataclass(frozen=True)
class LiveLocation:
    lat: float
    lng: float
    heading: Optional[float] = None

    @property
    def coordinate(self) -> Coordinate:
        return from_lon_lat(self.lng, self.lat)


def normalize_heading(heading: Optional[float]) -> Optional[float]:
    """Bring a compass heading into [0, 360), passing None through."""
    if heading is None:
        return None
    return float(heading) % 360.0


class FrameTicker:
    """Repeating frame callback that runs only while started.

    Args:
        callback: Called once per frame.
        interval: Seconds between frames.
        scheduler: Object with ``call_later(delay, fn)`` returning a handle
            with ``cancel()``. Defaults to the running asyncio loop.
    """

    def __init__(self, callback: Callable[[], None], interval: float = FRAME_INTERVAL_S, scheduler=None):
        self.callback = callback
        self.interval = interval
        self.scheduler = scheduler
        self._handle = None

    @property
    def active(self) -> bool:
        return self._handle is not None

    def _get_scheduler(self):
        if self.scheduler is None:
            self.scheduler = asyncio.get_running_loop()
        return self.scheduler

    def start(self) -> None:
        """Start ticking.

        Without a scheduler and outside a running event loop (for example a
        one-off server-side render) there is nothing to drive frames, so the
        ticker stays inactive.
        """
        if self._handle is not None:
            return
        try:
            scheduler = self._get_scheduler()
        except RuntimeError:
            logger.warning("No running event loop; live-location animation disabled")
            return
        self._handle = scheduler.call_later(self.interval, self._tick)

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _tick(self) -> None:
        if self._handle is None:
            return
        self._handle = self._get_scheduler().call_later(self.interval, self._tick)
        self.callback()


class OrientationSubscription:
    """Cancellable subscription to device orientation events.

    Args:
        source: Event source with ``subscribe(listener)`` returning an
            unsubscribe function. Listeners receive headings in degrees, or
            None when the sensor has no fix.
        on_heading: Called with each normalized heading.
    """

    def __init__(self, source: Any, on_heading: Callable[[Optional[float]], None]):
        self.source = source
        self.on_heading = on_heading
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    def start(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self.source.subscribe(self._handle)

    def stop(self) -> None:
        if self._unsubscribe is not None:
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            unsubscribe()

    def _handle(self, heading: Optional[float]) -> None:
        if self._unsubscribe is None:
            return
        self.on_heading(normalize_heading(heading))


class LiveLocationOverlay:
    """Holds at most one live-location feature and animates its halo.

    Args:
        request_render: Called whenever the overlay needs to be redrawn.
        clock: Millisecond clock used for the halo phase.
        scheduler: Passed to the :class:`FrameTicker`.
    """

    def __init__(
        self,
        request_render: Callable[[], None] = lambda: None,
        clock: Callable[[], float] = monotonic_ms,
        scheduler=None,
    ):
        self.request_render = request_render
        self.clock = clock
        self.location: Optional[LiveLocation] = None
        self.heading: Optional[float] = None
        self.started_at = clock()
        self.ticker = FrameTicker(self.request_render, scheduler=scheduler)

    def set_position(self, lat: Optional[float], lng: Optional[float]) -> None:
        """Show the marker at a position, or clear it when either value is None."""
        if lat is None or lng is None:
            if self.location is not None:
                self.location = None
                self.ticker.stop()
                self.request_render()
            return

        self.location = LiveLocation(lat=float(lat), lng=float(lng), heading=self.heading)
        self.ticker.start()
        self.request_render()

    def clear(self) -> None:
        self.set_position(None, None)

    def set_heading(self, heading: Optional[float]) -> None:
        """Update the cone direction without moving the marker."""
        heading = normalize_heading(heading)
        if heading == self.heading:
            return
        self.heading = heading
        if self.location is not None:
            self.location = LiveLocation(lat=self.location.lat, lng=self.location.lng, heading=heading)
            self.request_render()

    @property
    def has_feature(self) -> bool:
        return self.location is not None

    def features(self) -> List[LiveLocation]:
        return [self.location] if self.location is not None else []

    def styles(self, now: Optional[float] = None) -> List[Style]:
        """Styles for the current frame, or an empty list with no position."""
        if self.location is None:
            return []
        now = self.clock() if now is None else now
        return live_location_styles(now - self.started_at, self.heading)

    def dispose(self) -> None:
        self.ticker.stop()
        self.location = None
