"""
Event system for the probe tool.

Lets the tool tell the host about redraws and risk results without
depending on a specific canvas or UI framework.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of events the probe tool emits."""

    # Marker events
    MARKER_CREATED = "marker_created"
    DRAG_STARTED = "drag_started"

    # Risk estimation events
    RISK_REQUESTED = "risk_requested"
    RISK_COMPLETED = "risk_completed"
    RISK_FAILED = "risk_failed"

    # Derived data events
    STATS_UPDATED = "stats_updated"

    # Host requests
    REDRAW_REQUESTED = "redraw_requested"


@dataclass
class AnnotationEvent:
    """Event that occurs while using the probe tool."""

    event_type: EventType
    data: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if self.data is None:
            self.data = {}


class EventEmitter:
    """
    Simple event emitter for pub/sub pattern.

    Allows components to subscribe to events without tight coupling.
    """

    def __init__(self):
        self._listeners: Dict[EventType, List[Callable]] = {}

    def on(self, event_type: EventType, callback: Callable[[AnnotationEvent], None]):
        """Subscribe to an event type."""
        if event_type not in self._listeners:
            self._listeners[event_type] = []
        self._listeners[event_type].append(callback)

    def off(self, event_type: EventType, callback: Callable[[AnnotationEvent], None]):
        """Unsubscribe from an event type."""
        if event_type in self._listeners:
            self._listeners[event_type].remove(callback)

    def emit(self, event: AnnotationEvent):
        """Emit an event to all subscribers."""
        for callback in list(self._listeners.get(event.event_type, [])):
            try:
                callback(event)
            except Exception:
                # Listener errors must not break the interaction loop
                logger.exception("Error in %s listener", event.event_type.value)

    def request_redraw(self, surface: Any):
        self.emit(AnnotationEvent(EventType.REDRAW_REQUESTED, {"surface": surface}))

    def clear(self):
        """Clear all event listeners."""
        self._listeners.clear()
