"""
Tests for the OpenCV adapter.

Rendering is checked on offscreen canvases; no window is opened.
"""

from unittest.mock import Mock

import cv2
import numpy as np
import pytest

from ocr_overlay.core.annotation import AnnotationSession
from ocr_overlay.interfaces.gui_adapter import (
    BACKGROUND_BGR,
    GUIAnnotationAdapter,
    blend_polygon,
    to_bgr_image,
)

WHITE = (255, 255, 255)


@pytest.fixture
def page_document():
    """One quad on a 300x200 page whose image has the same size."""
    return {
        "image_width": 300,
        "image_height": 200,
        "ocr_results": [
            {
                "text": "header",
                "confidence": 0.9,
                "vertices": [[20, 20], [120, 20], [120, 80], [20, 80]],
            }
        ],
    }


@pytest.fixture
def white_image():
    return np.full((200, 300, 3), 255, dtype=np.uint8)


@pytest.fixture
def adapter(config, page_document):
    session = AnnotationSession(config)
    session.load_document(page_document, image_size=(300, 200))
    session.fit_to_container(300, 200)
    return GUIAnnotationAdapter(session, update_image_callback=Mock())


class TestVisualization:
    """Tests for painting the render frame."""

    def test_region_fill_blended(self, adapter, white_image):
        canvas = adapter.get_visualization(white_image, (300, 200))

        assert canvas.shape == (200, 300, 3)
        assert tuple(canvas[50, 70]) != WHITE
        assert tuple(canvas[190, 290]) == WHITE

    def test_background_outside_image(self, adapter, white_image):
        adapter.session.fit_to_container(400, 300)
        canvas = adapter.get_visualization(white_image, (400, 300))

        assert canvas.shape == (300, 400, 3)
        np.testing.assert_array_equal(canvas[0, 0], BACKGROUND_BGR)

    def test_grayscale_image(self, adapter):
        gray = np.full((200, 300), 255, dtype=np.uint8)
        canvas = adapter.get_visualization(gray, (300, 200))
        assert canvas.shape == (200, 300, 3)

    def test_default_container(self, adapter, white_image):
        canvas = adapter.get_visualization(white_image)
        assert canvas.shape == (800, 1280, 3)

    def test_pending_box_drawn(self, adapter, white_image):
        adapter.session.toggle_draw_mode()
        adapter.session.pointer_down(150, 100)
        adapter.session.pointer_move(250, 180)

        canvas = adapter.get_visualization(white_image, (300, 200))
        assert tuple(canvas[100, 200]) != WHITE
        assert tuple(canvas[140, 200]) == WHITE


class TestImageHelpers:
    def test_to_bgr_image_16bit(self):
        image = np.linspace(0, 65535, 100, dtype=np.uint16).reshape(10, 10)
        converted = to_bgr_image(image)
        assert converted.dtype == np.uint8
        assert converted.shape == (10, 10, 3)

    def test_to_bgr_image_bgra(self):
        image = np.zeros((4, 4, 4), dtype=np.uint8)
        assert to_bgr_image(image).shape == (4, 4, 3)

    def test_blend_polygon(self):
        canvas = np.zeros((10, 10, 3), dtype=np.uint8)
        points = np.array([[0, 0], [9, 0], [9, 9], [0, 9]], dtype=np.int32)
        blend_polygon(canvas, points, (255, 0, 0, 0.5))
        # Red in BGR order
        assert tuple(canvas[5, 5]) == (0, 0, 127)

    def test_blend_polygon_transparent(self):
        canvas = np.zeros((10, 10, 3), dtype=np.uint8)
        points = np.array([[0, 0], [9, 0], [9, 9], [0, 9]], dtype=np.int32)
        blend_polygon(canvas, points, (255, 0, 0, 0.0))
        assert not canvas.any()


class TestInput:
    """Tests for mouse and keyboard translation."""

    def test_click_selects(self, adapter):
        adapter.handle_mouse(cv2.EVENT_LBUTTONDOWN, 70, 50, 0)
        adapter.handle_mouse(cv2.EVENT_LBUTTONUP, 70, 50, 0)

        assert adapter.session.selected_id == 1
        adapter.update_image_callback.assert_called()

    def test_hover_ignored_when_idle(self, adapter):
        adapter.update_image_callback.reset_mock()
        adapter.handle_mouse(cv2.EVENT_MOUSEMOVE, 10, 10, 0)
        adapter.update_image_callback.assert_not_called()

    def test_drag_pans(self, adapter):
        adapter.handle_mouse(cv2.EVENT_LBUTTONDOWN, 200, 150, 0)
        adapter.handle_mouse(cv2.EVENT_MOUSEMOVE, 230, 150, 0)
        adapter.handle_mouse(cv2.EVENT_LBUTTONUP, 230, 150, 0)
        assert adapter.session.viewport.translation.x == pytest.approx(30)

    def test_zoom_key(self, config):
        adapter = GUIAnnotationAdapter(AnnotationSession(config))
        assert adapter.handle_key(ord("+"))
        assert adapter.session.viewport.scale == pytest.approx(1.1)

    def test_draw_key(self, adapter):
        assert adapter.handle_key(ord("d"))
        assert adapter.session.mode.value == "draw"
        assert adapter.handle_key(27)
        assert adapter.session.mode.value == "navigate"

    def test_delete_key(self, adapter):
        adapter.session.select(1)
        assert adapter.handle_key(127)
        assert len(adapter.session.store) == 0

    def test_unbound_keys(self, adapter):
        assert not adapter.handle_key(-1)
        assert not adapter.handle_key(ord("z"))
