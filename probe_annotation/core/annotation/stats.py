"""
Cached pixel statistics for probe markers.
"""

import logging
import time
import weakref
from typing import Callable, Optional

from ...utils.throttle import Throttle, TimerFactory
from .events import AnnotationEvent, EventEmitter, EventType
from .state import ImageInfo, Marker, PixelStats
from .utils import in_image_bounds, round_point

logger = logging.getLogger(__name__)

DEFAULT_THROTTLE_SECONDS = 0.110


class PixelStatsCache:
    """
    Computes and caches the pixel values under each marker.

    The first computation for a marker runs directly so the first paint is
    correct. Later recomputations go through a per-marker throttle so a
    marker redrawn every frame is not re-read every frame.

    Args:
        pixel_access: Object providing ``get_stored_pixels(surface, x, y, w, h)``
            and ``get_rgb_pixels(surface, x, y, w, h)``
        throttle_seconds: Minimum time between two recomputations of a marker
        events: Optional emitter notified with ``STATS_UPDATED``
    """

    def __init__(
        self,
        pixel_access,
        throttle_seconds: float = DEFAULT_THROTTLE_SECONDS,
        events: Optional[EventEmitter] = None,
        clock: Callable[[], float] = time.monotonic,
        timer_factory: Optional[TimerFactory] = None,
    ):
        self.pixel_access = pixel_access
        self.throttle_seconds = throttle_seconds
        self.events = events
        self._clock = clock
        self._timer_factory = timer_factory
        self._throttles = weakref.WeakKeyDictionary()
        self._refreshing = False

    def compute_stats(self, image: ImageInfo, surface, marker: Marker) -> PixelStats:
        """
        Read the pixel under the marker anchor and cache it on the marker.

        Returns an empty ``PixelStats`` when the anchor is outside the image.
        Always clears ``marker.invalidated``.
        """
        x, y = round_point(marker.anchor)
        stats = PixelStats()

        if in_image_bounds(x, y, image):
            stats.x = x
            stats.y = y
            if image.color:
                stats.stored_pixels = self.pixel_access.get_rgb_pixels(surface, x, y, 1, 1)
            else:
                stats.stored_pixels = self.pixel_access.get_stored_pixels(
                    surface, x, y, 1, 1
                )
        else:
            logger.debug("Marker at (%s, %s) is outside %s", x, y, image.image_id)

        marker.stats = stats
        marker.invalidated = False

        if self.events is not None:
            self.events.emit(
                AnnotationEvent(
                    EventType.STATS_UPDATED, {"marker": marker, "stats": stats}
                )
            )
        return stats

    def refresh(self, image: ImageInfo, surface, marker: Marker):
        """
        Bring an invalidated marker's stats up to date.

        Returns True when the stats were recomputed synchronously.
        """
        if not marker.invalidated:
            return False
        if marker.stats is None:
            self.compute_stats(image, surface, marker)
            return True
        self._refreshing = True
        try:
            self._throttle_for(marker)(image, surface, marker)
        finally:
            self._refreshing = False
        return not marker.invalidated

    def flush(self):
        """Run every pending throttled recomputation now."""
        for throttle in list(self._throttles.values()):
            throttle.flush()

    def _recompute(self, image: ImageInfo, surface, marker: Marker):
        self.compute_stats(image, surface, marker)
        # Trailing runs happen between frames and need a repaint to show up
        if not self._refreshing and self.events is not None:
            self.events.request_redraw(surface)

    def _throttle_for(self, marker: Marker) -> Throttle:
        throttle = self._throttles.get(marker)
        if throttle is None:
            throttle = Throttle(
                self._recompute,
                self.throttle_seconds,
                clock=self._clock,
                timer_factory=self._timer_factory,
            )
            self._throttles[marker] = throttle
        return throttle
