"""
Hit-testing of image-pixel points against annotation regions.

Regions live in page space; every test scales them by the page
calibration first, so callers always pass image-pixel coordinates.
"""

from typing import Iterable, List, Optional, Sequence

import numpy as np

from .geometry import Box, PageCalibration, Point, Vertex
from .state import Region


def point_in_polygon(x: float, y: float, vertices: Sequence[Vertex]) -> bool:
    """
    Ray-casting point-in-polygon test.

    A horizontal ray is cast from the point towards +x; every edge whose
    y-span straddles the point's y and whose x-intercept lies right of the
    point flips the inside flag.

    Args:
        x: Point x
        y: Point y
        vertices: Polygon vertices in order (open, not repeated)

    Returns:
        True if the point is inside
    """
    polygon = np.asarray(vertices, dtype=np.float64)
    if polygon.ndim != 2 or polygon.shape[0] < 3:
        return False

    xi, yi = polygon[:, 0], polygon[:, 1]
    # Edge i runs from vertex i-1 to vertex i
    xj, yj = np.roll(xi, 1), np.roll(yi, 1)

    straddles = (yi > y) != (yj > y)
    with np.errstate(divide="ignore", invalid="ignore"):
        x_intercept = (xj - xi) * (y - yi) / (yj - yi) + xi
    crossings = straddles & (x < x_intercept)
    return bool(np.count_nonzero(crossings) % 2)


def scaled_bounds(region: Region, calibration: PageCalibration) -> Box:
    """Region bounding box in image pixel space."""
    return region.bounds.scaled(calibration.scale_factor_x, calibration.scale_factor_y)


def region_contains(region: Region, point: Point, calibration: PageCalibration) -> bool:
    sx, sy = calibration.scale_factor_x, calibration.scale_factor_y
    if region.is_quad:
        scaled = [(vx * sx, vy * sy) for vx, vy in region.vertices]
        return point_in_polygon(point.x, point.y, scaled)
    return region.box.scaled(sx, sy).contains_point(point.x, point.y)


def hit_test(
    point: Point, regions: Sequence[Region], calibration: PageCalibration
) -> Optional[int]:
    """
    Find the top-most region under a point.

    Regions are visited from last to first (later ones paint on top).

    Args:
        point: Point in image pixel space
        regions: Regions in creation order
        calibration: Page-to-image calibration

    Returns:
        Region id, or None if no region contains the point
    """
    for region in reversed(list(regions)):
        if region_contains(region, point, calibration):
            return region.id
    return None


def regions_within(
    selection: Box, regions: Iterable[Region], calibration: PageCalibration
) -> List[int]:
    """
    Ids of regions whose whole bounding box lies inside a selection box.

    Args:
        selection: Selection box in page space
        regions: Regions in creation order
        calibration: Page-to-image calibration

    Returns:
        Matching ids in creation order; empty for a zero-area selection
    """
    if selection.width <= 0 or selection.height <= 0:
        return []
    sx, sy = calibration.scale_factor_x, calibration.scale_factor_y
    area = selection.scaled(sx, sy)
    return [
        region.id
        for region in regions
        if area.contains_box(scaled_bounds(region, calibration))
    ]


class HitTester:
    """Hit-testing bound to one calibration."""

    def __init__(self, calibration: Optional[PageCalibration] = None):
        self.calibration = calibration or PageCalibration()

    def hit_test(self, point: Point, regions: Sequence[Region]) -> Optional[int]:
        return hit_test(point, regions, self.calibration)

    def regions_within(self, selection: Box, regions: Iterable[Region]) -> List[int]:
        return regions_within(selection, regions, self.calibration)
