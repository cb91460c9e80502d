"""
GUI adapter for the overlay editing session.

Bridges the AnnotationSession with OpenCV windows and offscreen canvases.
"""

import logging
from typing import Callable, Optional, Tuple

import cv2
import numpy as np

from ..core.annotation import AnnotationEvent, AnnotationSession, EventType
from ..core.annotation.render import PendingBox, RegionSprite

logger = logging.getLogger(__name__)

BACKGROUND_BGR = (40, 40, 40)
LABEL_FONT = cv2.FONT_HERSHEY_SIMPLEX
LABEL_SCALE = 0.45
MARK_RADIUS = 5

KEY_ESCAPE = 27
KEY_BACKSPACE = 8
KEY_DELETE = 127

# Key -> session method name
KEY_BINDINGS = {
    ord("+"): "zoom_in",
    ord("="): "zoom_in",
    ord("-"): "zoom_out",
    ord("f"): "fit_to_container",
    ord("d"): "toggle_draw_mode",
    ord("m"): "toggle_multi_select_mode",
    ord("x"): "delete_selected",
    KEY_BACKSPACE: "delete_selected",
    KEY_DELETE: "delete_selected",
    ord("k"): "toggle_mark",
    ord("r"): "restyle",
    KEY_ESCAPE: "cancel",
}

REDRAW_EVENTS = (
    EventType.DOCUMENT_LOADED,
    EventType.CALIBRATION_CHANGED,
    EventType.REGION_ADDED,
    EventType.REGION_UPDATED,
    EventType.REGION_REMOVED,
    EventType.REGIONS_RESTYLED,
    EventType.SELECTION_CHANGED,
    EventType.VIEWPORT_CHANGED,
    EventType.MODE_CHANGED,
    EventType.GESTURE_UPDATED,
)


def rgba_to_bgr(rgba) -> Tuple[int, int, int]:
    r, g, b = rgba[:3]
    return (int(b), int(g), int(r))


def to_bgr_image(image: np.ndarray) -> np.ndarray:
    """Normalize a decoded image to 8-bit, 3-channel BGR."""
    if image.dtype != np.uint8:
        image = cv2.normalize(image, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
    return image


def blend_polygon(canvas: np.ndarray, points: np.ndarray, rgba) -> None:
    """Alpha-blend a filled polygon onto the canvas in place."""
    alpha = float(rgba[3])
    if alpha <= 0:
        return
    mask = np.zeros(canvas.shape[:2], dtype=np.uint8)
    cv2.fillPoly(mask, [points], 255)
    area = mask > 0
    if not area.any():
        return
    color = np.array(rgba_to_bgr(rgba), dtype=np.float32)
    canvas[area] = (alpha * color + (1 - alpha) * canvas[area]).astype(np.uint8)


class GUIAnnotationAdapter:
    """
    Adapter connecting AnnotationSession to an OpenCV canvas.

    Provides a compatibility layer that:
    - Translates OpenCV mouse and keyboard callbacks to session calls
    - Translates session events to a GUI redraw callback
    - Paints the session's render frame over the image
    """

    def __init__(
        self,
        session: AnnotationSession,
        update_image_callback: Optional[Callable] = None,
    ):
        """
        Initialize adapter.

        Args:
            session: Core editing session
            update_image_callback: Called whenever the canvas needs a redraw
        """
        self.session = session
        self.update_image_callback = update_image_callback

        # Subscribe to session events
        self._setup_event_handlers()

    def _setup_event_handlers(self):
        """Setup event handlers for session events."""
        for event_type in REDRAW_EVENTS:
            self.session.events.on(event_type, self._on_state_changed)

    def _on_state_changed(self, event: AnnotationEvent):
        """Handle any change that affects the picture."""
        if self.update_image_callback:
            self.update_image_callback()

    # Input

    def handle_mouse(self, event: int, x: int, y: int, flags: int, param=None):
        """Mouse callback suitable for `cv2.setMouseCallback`."""
        if event == cv2.EVENT_LBUTTONDOWN:
            self.session.pointer_down(x, y)
        elif event == cv2.EVENT_MOUSEMOVE:
            if not self.session.is_idle:
                self.session.pointer_move(x, y)
        elif event == cv2.EVENT_LBUTTONUP:
            self.session.pointer_up(x, y)
        elif event == cv2.EVENT_MOUSEWHEEL:
            self.session.wheel(x, y, cv2.getMouseWheelDelta(flags))

    def handle_key(self, key: int) -> bool:
        """
        Apply a keyboard shortcut.

        Args:
            key: Key code as returned by `cv2.waitKey`

        Returns:
            True if the key was bound
        """
        if key < 0:
            return False
        action = KEY_BINDINGS.get(key & 0xFF)
        if action is None:
            return False
        logger.debug(f"Key {key} -> {action}")
        getattr(self.session, action)()
        return True

    # Output

    def get_visualization(
        self,
        image: np.ndarray,
        container_size: Optional[Tuple[int, int]] = None,
    ) -> np.ndarray:
        """
        Get visualization for display.

        Args:
            image: Decoded image (gray, BGR or BGRA)
            container_size: (width, height) of the canvas; the configured
                container size when omitted

        Returns:
            BGR canvas with image and overlay
        """
        if container_size is None:
            viewport_cfg = self.session.config.viewport
            container_size = (viewport_cfg.container_width, viewport_cfg.container_height)
        width, height = int(container_size[0]), int(container_size[1])

        frame = self.session.render_frame()
        state = frame.viewport
        transform = np.float32(
            [
                [state.scale, 0, state.translation.x],
                [0, state.scale, state.translation.y],
            ]
        )
        canvas = cv2.warpAffine(
            to_bgr_image(image),
            transform,
            (width, height),
            flags=cv2.INTER_LINEAR,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=BACKGROUND_BGR,
        )

        for sprite in frame.items:
            self._draw_sprite(canvas, sprite)
        if frame.pending is not None:
            self._draw_pending(canvas, frame.pending)
        return canvas

    def _draw_sprite(self, canvas: np.ndarray, sprite: RegionSprite):
        points = np.round(np.array(sprite.points, dtype=np.float64)).astype(np.int32)
        blend_polygon(canvas, points, sprite.fill)
        cv2.polylines(
            canvas,
            [points],
            isClosed=True,
            color=rgba_to_bgr(sprite.stroke),
            thickness=max(1, int(round(sprite.stroke_width))),
        )

        left, top = int(points[:, 0].min()), int(points[:, 1].min())
        (text_w, text_h), baseline = cv2.getTextSize(sprite.label, LABEL_FONT, LABEL_SCALE, 1)
        label_box = np.array(
            [
                [left, top - text_h - baseline - 2],
                [left + text_w + 4, top - text_h - baseline - 2],
                [left + text_w + 4, top],
                [left, top],
            ],
            dtype=np.int32,
        )
        blend_polygon(canvas, label_box, sprite.label_background)
        cv2.putText(
            canvas,
            sprite.label,
            (left + 2, top - baseline - 1),
            LABEL_FONT,
            LABEL_SCALE,
            (255, 255, 255),
            1,
            cv2.LINE_AA,
        )

        if sprite.marked:
            right = int(points[:, 0].max())
            cv2.circle(canvas, (right, top), MARK_RADIUS, rgba_to_bgr(sprite.stroke), -1)
            cv2.circle(canvas, (right, top), MARK_RADIUS + 1, (255, 255, 255), 1)

    def _draw_pending(self, canvas: np.ndarray, pending: PendingBox):
        points = np.round(np.array(pending.points, dtype=np.float64)).astype(np.int32)
        cv2.polylines(
            canvas, [points], isClosed=True, color=rgba_to_bgr(pending.stroke), thickness=1
        )
