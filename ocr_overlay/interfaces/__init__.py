"""
Interfaces module - UI adapters for annotation core.

Provides adapters to connect the core overlay editing logic
with concrete canvases (OpenCV windows, offscreen rendering).
"""

from .gui_adapter import GUIAnnotationAdapter

__all__ = ['GUIAnnotationAdapter']
