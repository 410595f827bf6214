"""
The probe tool as seen by a host interaction/render loop.
"""

import abc
import logging
from typing import List, Optional

from .events import EventEmitter
from .interaction import FID_LIVE_COUNT, InteractionController
from .render import RenderPipeline
from .state import ImageInfo, Marker, PointerEvent

logger = logging.getLogger(__name__)


class AnnotationTool(abc.ABC):
    """Capabilities a host loop expects from an annotation tool."""

    name: str

    @abc.abstractmethod
    def hit_test(self, evt: PointerEvent) -> Optional[int]:
        ...

    @abc.abstractmethod
    def on_pointer_down(self, evt: PointerEvent):
        ...

    @abc.abstractmethod
    def on_pointer_move(self, evt: PointerEvent):
        ...

    @abc.abstractmethod
    def create_measurement(self, evt: PointerEvent):
        ...

    @abc.abstractmethod
    def render(self, surface, image: ImageInfo):
        ...


class ProbeTool(AnnotationTool):
    """
    Probe tool: a point marker showing the pixel under it and a remote
    risk estimate.

    Ties the interaction controller and the render pipeline to a shared
    marker store. Hosts forward pointer events and call ``render`` once
    per frame.
    """

    def __init__(
        self,
        store,
        controller: InteractionController,
        pipeline: RenderPipeline,
        legacy_tool_name: Optional[str] = "Probe",
    ):
        self.store = store
        self.controller = controller
        self.pipeline = pipeline
        self.legacy_tool_name = legacy_tool_name

    @property
    def name(self) -> str:
        return self.controller.tool_name

    @property
    def events(self) -> EventEmitter:
        return self.controller.events

    def markers(self, surface) -> Optional[List[Marker]]:
        return self.store.get(surface, self.name)

    def hit_test(self, evt: PointerEvent) -> Optional[int]:
        if evt.canvas is None:
            return None
        return self.controller.hit_test(
            evt.surface, self.markers(evt.surface) or [], evt.canvas
        )

    def on_pointer_down(self, evt: PointerEvent):
        return self.controller.on_pointer_down(evt)

    def on_pointer_move(self, evt: PointerEvent):
        return self.controller.on_pointer_move(evt)

    def create_measurement(self, evt: PointerEvent) -> Optional[Marker]:
        """Create a marker from a placement gesture and add it to the store."""
        marker = self.controller.create_marker(evt)
        if marker is not None:
            self.store.add(evt.surface, self.name, marker)
        return marker

    def marker_count(self, surface) -> int:
        """
        Best-effort count of the probe markers on a surface, including the
        legacy probe tool's markers.
        """
        count = 0
        for tool_name in (self.name, self.legacy_tool_name):
            if tool_name is None:
                continue
            try:
                count += len(self.store.get(surface, tool_name))
            except TypeError:
                count += 0
        return count

    def render(self, surface, image: ImageInfo) -> List[Marker]:
        markers = self.markers(surface)
        if not markers:
            return []
        count = self.marker_count(surface) if self.controller.fid_mode == FID_LIVE_COUNT else 0
        return self.pipeline.render_frame(surface, image, markers, marker_count=count)
