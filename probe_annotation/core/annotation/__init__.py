"""
Core probe annotation module - UI-agnostic marker logic.

This module provides the probe tool's state machine (hit-testing, drag
tracking, cached pixel stats, risk labels) that any host canvas can
drive by forwarding pointer events and render ticks.
"""

from .events import AnnotationEvent, EventType, EventEmitter
from .interaction import InteractionController
from .render import RenderPipeline
from .state import ImageInfo, Marker, PixelStats, Point, PointerEvent
from .stats import PixelStatsCache
from .store import ToolStateStore
from .tool import AnnotationTool, ProbeTool

__all__ = [
    "AnnotationEvent",
    "EventType",
    "EventEmitter",
    "InteractionController",
    "RenderPipeline",
    "ImageInfo",
    "Marker",
    "PixelStats",
    "Point",
    "PointerEvent",
    "PixelStatsCache",
    "ToolStateStore",
    "AnnotationTool",
    "ProbeTool",
]
