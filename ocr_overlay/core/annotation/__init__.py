"""
Core annotation module - UI-agnostic overlay editing logic.

This module provides coordinate spaces, the region model, hit-testing,
viewport handling, the pointer interaction state machine and OCR JSON
import/export, usable with any UI framework (OpenCV, Tkinter, Web, CLI).
"""

from .session import AnnotationSession
from .events import AnnotationEvent, EventType, EventEmitter
from .geometry import Box, PageCalibration, Point, ViewportState
from .hit_testing import HitTester, hit_test, point_in_polygon
from .interaction import DRAG_THRESHOLD, MIN_REGION_SIZE, InteractionState, Mode
from .render import PendingBox, RegionSprite, RenderFrame
from .schema import ParsedDocument, SchemaAdapter
from .state import Region, RegionStore
from .utils import Color, with_alpha
from .viewport import SCALE_MAX, SCALE_MIN, WHEEL_SCALE_MAX, ViewportTransform

__all__ = [
    "AnnotationSession",
    "AnnotationEvent",
    "EventType",
    "EventEmitter",
    "Box",
    "PageCalibration",
    "Point",
    "ViewportState",
    "HitTester",
    "hit_test",
    "point_in_polygon",
    "DRAG_THRESHOLD",
    "MIN_REGION_SIZE",
    "InteractionState",
    "Mode",
    "PendingBox",
    "RegionSprite",
    "RenderFrame",
    "ParsedDocument",
    "SchemaAdapter",
    "Region",
    "RegionStore",
    "Color",
    "with_alpha",
    "SCALE_MAX",
    "SCALE_MIN",
    "WHEEL_SCALE_MAX",
    "ViewportTransform",
]
