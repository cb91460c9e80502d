"""
Viewport transform: scale and pan offset of the image inside its container.
"""

import logging
from typing import Optional, Tuple

from .geometry import Point, ViewportState

logger = logging.getLogger(__name__)

SCALE_MIN = 0.1
SCALE_MAX = 5.0
# Continuous (wheel) zoom may go further than the buttons/keys
WHEEL_SCALE_MAX = 10.0

ZOOM_IN_FACTOR = 1.1
ZOOM_OUT_FACTOR = 0.9
WHEEL_IN_FACTOR = 1.06
WHEEL_OUT_FACTOR = 0.94

Size = Tuple[float, float]


def clamp_scale(scale: float, upper: float = SCALE_MAX) -> float:
    return min(max(scale, SCALE_MIN), upper)


def fit_to_container(container_size: Size, image_size: Size) -> float:
    """
    Scale at which the whole image fits the container.

    Not capped at 1: small images are enlarged, large ones shrunk. The
    result is still kept inside the scale bounds.
    """
    container_w, container_h = container_size
    image_w, image_h = image_size
    if image_w <= 0 or image_h <= 0:
        raise ValueError(f"Image size must be positive, got {image_w}x{image_h}")
    return clamp_scale(min(container_w / image_w, container_h / image_h))


def center(container_size: Size, image_size: Size, scale: float) -> Point:
    """Translation that centers the scaled image in the container."""
    container_w, container_h = container_size
    image_w, image_h = image_size
    return Point(
        (container_w - image_w * scale) / 2.0,
        (container_h - image_h * scale) / 2.0,
    )


def zoom(scale: float, zoom_in: bool) -> float:
    """
    One discrete zoom step.

    Zooming in saturates at SCALE_MAX; a scale already above it (reached by
    wheel zoom) is never reduced by a zoom-in step.
    """
    if zoom_in:
        return min(scale * ZOOM_IN_FACTOR, max(scale, SCALE_MAX))
    return clamp_scale(scale * ZOOM_OUT_FACTOR, upper=max(scale, SCALE_MAX))


def anchored_translation(
    anchor: Point, translation: Point, old_scale: float, new_scale: float
) -> Point:
    """Translation that keeps the screen point `anchor` over the same image point."""
    ratio = new_scale / old_scale
    return Point(
        anchor.x - (anchor.x - translation.x) * ratio,
        anchor.y - (anchor.y - translation.y) * ratio,
    )


def wheel_zoom(viewport: ViewportState, pointer: Point, zoom_in: bool) -> ViewportState:
    """One wheel notch, anchored under the pointer."""
    factor = WHEEL_IN_FACTOR if zoom_in else WHEEL_OUT_FACTOR
    new_scale = clamp_scale(viewport.scale * factor, upper=WHEEL_SCALE_MAX)
    translation = anchored_translation(
        pointer, viewport.translation, viewport.scale, new_scale
    )
    return ViewportState(scale=new_scale, translation=translation)


def pan(start_translation: Point, pointer_delta: Point) -> Point:
    return start_translation + pointer_delta


class ViewportTransform:
    """
    Mutable holder of the current ViewportState.

    Every operation replaces `state` with a new immutable ViewportState.
    """

    def __init__(self, state: Optional[ViewportState] = None):
        self.state = state or ViewportState()

    @property
    def scale(self) -> float:
        return self.state.scale

    @property
    def translation(self) -> Point:
        return self.state.translation

    def fit(self, container_size: Size, image_size: Size) -> ViewportState:
        """Fit the image into the container and center it."""
        scale = fit_to_container(container_size, image_size)
        self.state = ViewportState(
            scale=scale, translation=center(container_size, image_size, scale)
        )
        logger.debug(f"Fit viewport: {self.state}")
        return self.state

    def zoom_in(self, anchor: Optional[Point] = None) -> ViewportState:
        return self._step(True, anchor)

    def zoom_out(self, anchor: Optional[Point] = None) -> ViewportState:
        return self._step(False, anchor)

    def _step(self, zoom_in: bool, anchor: Optional[Point]) -> ViewportState:
        new_scale = zoom(self.state.scale, zoom_in)
        translation = self.state.translation
        if anchor is not None:
            translation = anchored_translation(
                anchor, translation, self.state.scale, new_scale
            )
        self.state = ViewportState(scale=new_scale, translation=translation)
        return self.state

    def wheel(self, pointer: Point, delta: float) -> ViewportState:
        """
        Apply a wheel event.

        Args:
            pointer: Pointer position in screen space
            delta: Wheel delta, positive zooms in, zero is ignored
        """
        if delta:
            self.state = wheel_zoom(self.state, pointer, delta > 0)
        return self.state

    def set_translation(self, translation: Point) -> ViewportState:
        self.state = ViewportState(scale=self.state.scale, translation=translation)
        return self.state
