"""
Event system for the overlay editor.

Provides a decoupled way for the annotation core to notify UI components
about state changes without depending on specific UI frameworks.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of events that can occur while editing a document."""

    # Document events
    DOCUMENT_LOADED = "document_loaded"
    DOCUMENT_EXPORTED = "document_exported"
    CALIBRATION_CHANGED = "calibration_changed"

    # Region events
    REGION_ADDED = "region_added"
    REGION_UPDATED = "region_updated"
    REGION_REMOVED = "region_removed"
    REGIONS_RESTYLED = "regions_restyled"

    # Interaction events
    SELECTION_CHANGED = "selection_changed"
    VIEWPORT_CHANGED = "viewport_changed"
    MODE_CHANGED = "mode_changed"
    GESTURE_UPDATED = "gesture_updated"


@dataclass
class AnnotationEvent:
    """Event that occurs during editing."""

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
        for callback in list(self._listeners.get(event.event_type, ())):
            try:
                callback(event)
            except Exception:
                # Log but don't crash on listener errors
                logger.exception(f"Error in listener for {event.event_type.value}")

    def clear(self):
        """Clear all event listeners."""
        self._listeners.clear()
