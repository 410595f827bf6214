"""
Adapter driving the probe tool on OpenCV canvases.

Bridges ProbeTool with numpy-backed surfaces: builds the tool from a
configuration, turns raw coordinates into pointer events and renders
frames into the surface canvas.
"""

import logging
import time
from typing import Callable, Optional

import numpy as np
from easydict import EasyDict as edict

from ..core.annotation import (
    AnnotationEvent,
    EventEmitter,
    EventType,
    InteractionController,
    Marker,
    PixelStatsCache,
    Point,
    PointerEvent,
    ProbeTool,
    RenderPipeline,
    ToolStateStore,
)
from ..core.risk import MetadataRegistry, PredictionClient, RiskEstimator
from ..utils.config import default_config
from ..utils.throttle import TimerFactory
from .canvas import CanvasSurface, OpenCVHost
from .style import RenderStyle

logger = logging.getLogger(__name__)


def _timeout(value) -> Optional[float]:
    return None if value in (None, "", "None") else float(value)


def build_probe_tool(
    cfg: Optional[edict] = None,
    host: Optional[OpenCVHost] = None,
    metadata: Optional[MetadataRegistry] = None,
    estimator=None,
    store: Optional[ToolStateStore] = None,
    events: Optional[EventEmitter] = None,
    clock: Callable[[], float] = time.monotonic,
    timer_factory: Optional[TimerFactory] = None,
) -> ProbeTool:
    """
    Wire a ProbeTool from configuration.

    Args:
        cfg: Configuration, see ``utils.config.default_config``
        host: Transform, pixel access and drawing collaborator
        metadata: Metadata used by the default estimator
        estimator: Replaces the HTTP estimator when given
    """
    cfg = cfg or default_config()
    host = host or OpenCVHost()
    store = store or ToolStateStore()
    events = events or EventEmitter()

    if estimator is None:
        estimator = RiskEstimator(
            metadata or MetadataRegistry(),
            client=PredictionClient(cfg.risk.endpoint, timeout=_timeout(cfg.risk.timeout)),
            model_name=cfg.risk.model_name,
        )

    style = RenderStyle(
        tool_color=cfg.render.tool_color,
        active_color=cfg.render.active_color,
        font_size=int(cfg.render.font_size),
        handle_radius=int(cfg.render.handle_radius),
    )
    controller = InteractionController(
        store,
        host,
        estimator,
        events=events,
        tool_name=cfg.tool_name,
        hit_radius=float(cfg.interaction.hit_radius),
        label_length=int(cfg.risk.label_length),
        calculating_label=cfg.risk.calculating_label,
        fallback_label=cfg.risk.fallback_label,
        fid_mode=cfg.interaction.fid_mode,
    )
    stats_cache = PixelStatsCache(
        host,
        throttle_seconds=float(cfg.render.stats_throttle_ms) / 1000.0,
        events=events,
        clock=clock,
        timer_factory=timer_factory,
    )
    pipeline = RenderPipeline(
        stats_cache, host, host, style, label_offset=float(cfg.render.label_offset)
    )
    return ProbeTool(store, controller, pipeline, legacy_tool_name=cfg.legacy_tool_name)


class OpenCVProbeAdapter:
    """
    Adapter connecting ProbeTool to CanvasSurface objects.

    Provides:
    - Image-space and canvas-space entry points for pointer gestures
    - Redraw handling, re-rendering the surface when the tool asks for it
    - Access to the rendered canvas
    """

    def __init__(
        self,
        tool: ProbeTool,
        host: OpenCVHost,
        update_image_callback: Optional[Callable[[CanvasSurface], None]] = None,
    ):
        self.tool = tool
        self.host = host
        self.update_image_callback = update_image_callback

        self.tool.events.on(EventType.REDRAW_REQUESTED, self._on_redraw_requested)

    def _on_redraw_requested(self, event: AnnotationEvent):
        surface = event.data.get("surface")
        if isinstance(surface, CanvasSurface):
            self.render(surface)
            if self.update_image_callback:
                self.update_image_callback(surface)

    def _event(self, surface: CanvasSurface, canvas: Point) -> PointerEvent:
        return PointerEvent(
            surface=surface,
            image=surface.image,
            canvas=canvas,
            image_point=self.host.canvas_to_pixel(surface, canvas),
        )

    def place(self, surface: CanvasSurface, x: float, y: float) -> Optional[Marker]:
        """Place a marker at an image-space position."""
        image_point = Point(float(x), float(y))
        evt = PointerEvent(
            surface=surface,
            image=surface.image,
            canvas=self.host.pixel_to_canvas(surface, image_point),
            image_point=image_point,
        )
        return self.tool.create_measurement(evt)

    def press(self, surface: CanvasSurface, canvas_x: float, canvas_y: float):
        return self.tool.on_pointer_down(self._event(surface, Point(canvas_x, canvas_y)))

    def move(self, surface: CanvasSurface, canvas_x: float, canvas_y: float):
        return self.tool.on_pointer_move(self._event(surface, Point(canvas_x, canvas_y)))

    def render(self, surface: CanvasSurface) -> np.ndarray:
        """Repaint the surface and draw the markers on top."""
        surface.reset_canvas()
        self.tool.render(surface, surface.image)
        return surface.canvas
