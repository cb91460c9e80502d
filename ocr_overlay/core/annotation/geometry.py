"""
Coordinate spaces for the overlay.

Four spaces are involved when a pointer touches an annotation:

    screen --(- translation, / scale)--> image pixels --(/ scale factor)--> page

Screen space is the pointer position relative to the visible container.
Image pixel space matches the decoded raster (the canvas is sized to it,
so canvas pixels and image pixels coincide). Page space is whatever the
OCR JSON used for its vertices, possibly a different resolution.

All functions here are pure.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

Vertex = Tuple[float, float]


@dataclass(frozen=True)
class Point:
    """2D point, space given by context."""

    x: float
    y: float

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def distance_to(self, other: "Point") -> float:
        return ((self.x - other.x) ** 2 + (self.y - other.y) ** 2) ** 0.5

    def as_tuple(self) -> Vertex:
        return (self.x, self.y)


@dataclass(frozen=True)
class Box:
    """Axis-aligned box, origin top-left."""

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(
                f"Box dimensions must be non-negative, got {self.width}x{self.height}"
            )

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def corners(self) -> Tuple[Vertex, Vertex, Vertex, Vertex]:
        """Clockwise from top-left: TL, TR, BR, BL."""
        return (
            (self.x, self.y),
            (self.right, self.y),
            (self.right, self.bottom),
            (self.x, self.bottom),
        )

    def contains_point(self, x: float, y: float) -> bool:
        """Inclusive on every edge."""
        return self.x <= x <= self.right and self.y <= y <= self.bottom

    def contains_box(self, other: "Box") -> bool:
        return (
            self.x <= other.x
            and self.y <= other.y
            and other.right <= self.right
            and other.bottom <= self.bottom
        )

    def scaled(self, sx: float, sy: float) -> "Box":
        return Box(self.x * sx, self.y * sy, self.width * sx, self.height * sy)


@dataclass(frozen=True)
class PageCalibration:
    """
    Page-to-image scale, derived from declared page size vs decoded image size.

    Missing or non-positive dimensions on either side make the matching
    factor 1.0, i.e. page space is taken to be image pixel space.
    """

    page_width: Optional[float] = None
    page_height: Optional[float] = None
    image_pixel_width: Optional[float] = None
    image_pixel_height: Optional[float] = None

    @staticmethod
    def _factor(pixels, page) -> float:
        if not pixels or not page or pixels <= 0 or page <= 0:
            return 1.0
        return float(pixels) / float(page)

    @property
    def scale_factor_x(self) -> float:
        return self._factor(self.image_pixel_width, self.page_width)

    @property
    def scale_factor_y(self) -> float:
        return self._factor(self.image_pixel_height, self.page_height)

    @property
    def has_page_size(self) -> bool:
        return bool(self.page_width) and bool(self.page_height)

    @property
    def has_image_size(self) -> bool:
        return bool(self.image_pixel_width) and bool(self.image_pixel_height)

    def with_image_size(self, width: float, height: float) -> "PageCalibration":
        return PageCalibration(self.page_width, self.page_height, width, height)

    def with_page_size(
        self, width: Optional[float], height: Optional[float]
    ) -> "PageCalibration":
        return PageCalibration(
            width, height, self.image_pixel_width, self.image_pixel_height
        )


@dataclass(frozen=True)
class ViewportState:
    """Scale and pan offset applied to the image canvas."""

    scale: float = 1.0
    translation: Point = field(default_factory=lambda: Point(0.0, 0.0))

    def __post_init__(self):
        if self.scale <= 0:
            raise ValueError(f"Viewport scale must be positive, got {self.scale}")


def screen_to_image(point: Point, viewport: ViewportState) -> Point:
    return Point(
        (point.x - viewport.translation.x) / viewport.scale,
        (point.y - viewport.translation.y) / viewport.scale,
    )


def image_to_screen(point: Point, viewport: ViewportState) -> Point:
    return Point(
        point.x * viewport.scale + viewport.translation.x,
        point.y * viewport.scale + viewport.translation.y,
    )


def image_to_page(point: Point, calibration: PageCalibration) -> Point:
    return Point(
        point.x / calibration.scale_factor_x, point.y / calibration.scale_factor_y
    )


def page_to_image(point: Point, calibration: PageCalibration) -> Point:
    return Point(
        point.x * calibration.scale_factor_x, point.y * calibration.scale_factor_y
    )


def screen_to_page(
    point: Point, viewport: ViewportState, calibration: PageCalibration
) -> Point:
    """Pointer position to page space."""
    return image_to_page(screen_to_image(point, viewport), calibration)


def page_to_screen(
    point: Point, viewport: ViewportState, calibration: PageCalibration
) -> Point:
    return image_to_screen(page_to_image(point, calibration), viewport)


def normalize_rect(a: Point, b: Point) -> Box:
    """Box spanned by two opposite corners, in either order."""
    return Box(min(a.x, b.x), min(a.y, b.y), abs(b.x - a.x), abs(b.y - a.y))


def envelope(vertices: Sequence[Vertex]) -> Box:
    """Axis-aligned min/max envelope of a polygon."""
    if not vertices:
        raise ValueError("Cannot compute the envelope of no vertices")
    xs = [v[0] for v in vertices]
    ys = [v[1] for v in vertices]
    x_min, y_min = min(xs), min(ys)
    return Box(x_min, y_min, max(xs) - x_min, max(ys) - y_min)
