"""
Pointer interaction for the probe tool.

Hit-tests markers, tracks the drag state and issues risk requests.
Risk requests run as asyncio tasks on the running loop; their completion
handlers write the marker label back on the same loop, so no locking is
needed around marker fields.
"""

import asyncio
import itertools
import logging
from gettext import gettext as _
from typing import List, Optional, Sequence

from .events import AnnotationEvent, EventEmitter, EventType
from .state import CALCULATING_LABEL, Marker, Point, PointerEvent
from .utils import distance, truncate_risk_label

logger = logging.getLogger(__name__)

FID_LIVE_COUNT = "live_count"
FID_SEQUENCE = "sequence"


class InteractionController:
    """
    Handles pointer events for probe markers.

    Args:
        store: Marker store with ``get(surface, tool_name)``
        transform: Object with ``pixel_to_canvas(surface, point)``
        estimator: Object with a coroutine ``estimate(image_id, point)``
        events: Emitter used for redraw requests and risk notifications
        tool_name: Key of this tool's markers in the store
        hit_radius: Canvas distance, in pixels, within which a pointer hits
        label_length: Number of description characters kept for display
        fallback_label: Label shown when an estimate fails
        fid_mode: ``"live_count"`` assigns labels at first render,
            ``"sequence"`` assigns a stable id at creation
    """

    def __init__(
        self,
        store,
        transform,
        estimator,
        events: Optional[EventEmitter] = None,
        tool_name: str = "AIProbe",
        hit_radius: float = 5.0,
        label_length: int = 5,
        calculating_label: str = CALCULATING_LABEL,
        fallback_label: str = "error",
        fid_mode: str = FID_LIVE_COUNT,
    ):
        if fid_mode not in (FID_LIVE_COUNT, FID_SEQUENCE):
            raise ValueError(f"Unknown fid mode: {fid_mode}")
        self.store = store
        self.transform = transform
        self.estimator = estimator
        self.events = events or EventEmitter()
        self.tool_name = tool_name
        self.hit_radius = hit_radius
        self.label_length = label_length
        self.calculating_label = calculating_label
        self.fallback_label = fallback_label
        self.fid_mode = fid_mode
        self._sequence = itertools.count(1)
        self._pending = set()

    # Hit testing

    def point_near_marker(self, surface, marker: Marker, coords: Point) -> bool:
        """Check whether a canvas point is within the hit radius of a marker."""
        if marker is None or getattr(marker, "anchor", None) is None:
            logger.warning(
                "invalid parameters supplied to tool %s's point_near_marker",
                self.tool_name,
            )
            return False
        if marker.visible is False:
            return False
        marker_coords = self.transform.pixel_to_canvas(surface, marker.anchor)
        return distance(marker_coords, coords) < self.hit_radius

    def hit_test(
        self, surface, markers: Sequence[Marker], coords: Point
    ) -> Optional[int]:
        """
        Index of the first visible marker near ``coords``, in store order.

        Returns None when no marker is hit.
        """
        for index, marker in enumerate(markers):
            if self.point_near_marker(surface, marker, coords):
                return index
        return None

    def _markers_for(self, surface) -> List[Marker]:
        return self.store.get(surface, self.tool_name) or []

    def _marker_under_pointer(self, evt: PointerEvent) -> Optional[Marker]:
        if evt.canvas is None:
            return None
        markers = self._markers_for(evt.surface)
        index = self.hit_test(evt.surface, markers, evt.canvas)
        if index is None:
            return None
        return markers[index]

    # Pointer handling

    def on_pointer_down(self, evt: PointerEvent) -> Optional[Marker]:
        """Start a drag session on the marker under the pointer, if any."""
        marker = self._marker_under_pointer(evt)
        if marker is None:
            return None

        marker.is_dragging = True
        self.events.emit(AnnotationEvent(EventType.DRAG_STARTED, {"marker": marker}))
        return marker

    def on_pointer_move(self, evt: PointerEvent) -> Optional[asyncio.Task]:
        """
        Consume a pending drag on the marker under the pointer.

        Invalidates the cached stats and fires a new risk request, showing
        the calculating label until it resolves. When no request can be
        made the current label is kept. The drag flag is cleared right
        away, so the next move starts another request instead of waiting
        for this one.
        """
        marker = self._marker_under_pointer(evt)
        if marker is None or not marker.is_dragging:
            return None

        marker.is_dragging = False
        marker.invalidated = True

        task = None
        if evt.image is None:
            logger.warning("Pointer move without image; risk not requested")
        elif self._running_loop(evt.image.image_id) is not None:
            marker.risk_label = self.calculating_label
            task = self.request_risk(evt.surface, evt.image.image_id, marker)

        self.events.request_redraw(evt.surface)
        return task

    # Marker creation

    def create_marker(self, evt: Optional[PointerEvent]) -> Optional[Marker]:
        """
        Build a marker at the pointer's image position and request its risk.

        Returns None, after logging, when the event carries no image
        coordinates. The marker is not added to the store.
        """
        if evt is None or evt.image_point is None or evt.image is None:
            logger.error(
                _("required event data not supplied to tool %s's create_marker"),
                self.tool_name,
            )
            return None

        marker = Marker(
            anchor=evt.image_point,
            visible=True,
            active=True,
            is_dragging=False,
            fid=0,
            invalidated=True,
            risk_label=self.calculating_label,
        )
        if self.fid_mode == FID_SEQUENCE:
            marker.fid = next(self._sequence)

        self.events.emit(AnnotationEvent(EventType.MARKER_CREATED, {"marker": marker}))
        self.request_risk(evt.surface, evt.image.image_id, marker)
        return marker

    # Risk requests

    def request_risk(self, surface, image_id: str, marker: Marker) -> Optional[asyncio.Task]:
        """
        Fire a risk request for a marker on the running event loop.

        Overlapping requests are independent: whichever completes last
        writes the label.
        """
        loop = self._running_loop(image_id)
        if loop is None:
            return None

        self.events.emit(
            AnnotationEvent(
                EventType.RISK_REQUESTED, {"marker": marker, "image_id": image_id}
            )
        )
        task = loop.create_task(self._resolve_risk(surface, image_id, marker))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def _running_loop(self, image_id: str):
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; risk not requested for %s", image_id)
            return None

    async def _resolve_risk(self, surface, image_id: str, marker: Marker):
        try:
            result = await self.estimator.estimate(image_id, marker.anchor)
            label = truncate_risk_label(result.description, self.label_length)
        except Exception as e:
            # Failures end up on the marker instead of in the loop's handler
            logger.warning("Risk estimation failed for %s: %s", image_id, e)
            marker.risk_label = self.fallback_label
            self.events.emit(
                AnnotationEvent(EventType.RISK_FAILED, {"marker": marker, "error": str(e)})
            )
        else:
            marker.risk_label = label
            self.events.emit(
                AnnotationEvent(
                    EventType.RISK_COMPLETED, {"marker": marker, "result": result}
                )
            )
        self.events.request_redraw(surface)
        return marker.risk_label

    @property
    def pending_requests(self) -> int:
        return len(self._pending)

    async def wait_for_pending(self):
        """Wait until every risk request issued so far has completed."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
