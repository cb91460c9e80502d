"""
Tests for the viewport transform.
"""

import pytest

from ocr_overlay.core.annotation.geometry import Point, ViewportState, screen_to_image
from ocr_overlay.core.annotation.viewport import (
    SCALE_MAX,
    SCALE_MIN,
    WHEEL_SCALE_MAX,
    ViewportTransform,
    center,
    fit_to_container,
    pan,
    wheel_zoom,
    zoom,
)


class TestFitAndCenter:
    """Tests for fit-to-container."""

    def test_shrinks_large_image(self):
        assert fit_to_container((800, 600), (1600, 1200)) == 0.5

    def test_not_capped_at_one(self):
        """Small images are enlarged past 100%."""
        assert fit_to_container((800, 600), (200, 100)) == 4.0

    def test_limited_by_narrower_axis(self):
        assert fit_to_container((1000, 500), (100, 100)) == 5.0
        assert fit_to_container((400, 1000), (800, 200)) == 0.5

    def test_kept_inside_scale_bounds(self):
        assert fit_to_container((2000, 2000), (10, 10)) == SCALE_MAX
        assert fit_to_container((10, 10), (2000, 2000)) == SCALE_MIN

    def test_invalid_image_size(self):
        with pytest.raises(ValueError):
            fit_to_container((800, 600), (0, 100))

    def test_center(self):
        assert center((800, 600), (1600, 1200), 0.5) == Point(0, 0)
        assert center((800, 600), (200, 100), 4.0) == Point(0, 100)

    def test_transform_fit(self):
        transform = ViewportTransform()
        state = transform.fit((800, 600), (200, 100))
        assert state.scale == 4.0
        assert state.translation == Point(0, 100)
        assert transform.state is state


class TestZoom:
    """Tests for discrete and wheel zoom."""

    def test_discrete_steps(self):
        assert zoom(1.0, True) == pytest.approx(1.1)
        assert zoom(1.0, False) == pytest.approx(0.9)

    def test_zoom_in_saturates(self):
        scale = 1.0
        for _ in range(100):
            scale = zoom(scale, True)
            assert scale <= SCALE_MAX
        assert scale == SCALE_MAX

    def test_zoom_out_saturates(self):
        scale = 1.0
        for _ in range(100):
            scale = zoom(scale, False)
            assert scale >= SCALE_MIN
        assert scale == SCALE_MIN

    def test_zoom_in_never_reduces_wheel_scale(self):
        assert zoom(8.0, True) == 8.0
        assert zoom(8.0, False) == pytest.approx(7.2)

    def test_wheel_zoom_saturates_higher(self):
        transform = ViewportTransform()
        for _ in range(200):
            transform.wheel(Point(0, 0), 1)
            assert transform.scale <= WHEEL_SCALE_MAX
        assert transform.scale == WHEEL_SCALE_MAX

        for _ in range(200):
            transform.wheel(Point(0, 0), -1)
        assert transform.scale == SCALE_MIN

    def test_wheel_zoom_keeps_pointer_fixed(self):
        """The image point under the pointer stays under the pointer."""
        viewport = ViewportState(scale=2.0, translation=Point(10, 20))
        pointer = Point(137, 91)

        for zoom_in in (True, False):
            zoomed = wheel_zoom(viewport, pointer, zoom_in)
            before = screen_to_image(pointer, viewport)
            after = screen_to_image(pointer, zoomed)
            assert after.x == pytest.approx(before.x, rel=1e-9)
            assert after.y == pytest.approx(before.y, rel=1e-9)

    def test_wheel_factors(self):
        viewport = ViewportState(scale=1.0)
        assert wheel_zoom(viewport, Point(0, 0), True).scale == pytest.approx(1.06)
        assert wheel_zoom(viewport, Point(0, 0), False).scale == pytest.approx(0.94)

    def test_zero_wheel_delta_ignored(self):
        transform = ViewportTransform()
        transform.wheel(Point(5, 5), 0)
        assert transform.state == ViewportState()

    def test_anchored_discrete_zoom(self):
        transform = ViewportTransform()
        anchor = Point(100, 50)
        before = screen_to_image(anchor, transform.state)
        transform.zoom_in(anchor)
        after = screen_to_image(anchor, transform.state)
        assert after.x == pytest.approx(before.x)
        assert after.y == pytest.approx(before.y)


class TestPan:
    """Tests for panning."""

    def test_pan_adds_delta(self):
        assert pan(Point(1, 2), Point(3, -4)) == Point(4, -2)

    def test_set_translation_keeps_scale(self):
        transform = ViewportTransform(ViewportState(scale=2.5))
        transform.set_translation(Point(7, 8))
        assert transform.scale == 2.5
        assert transform.translation == Point(7, 8)
