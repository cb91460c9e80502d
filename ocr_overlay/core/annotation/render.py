"""
Projection of editor state into a paintable frame.

A frame lists what to draw in screen space, in paint order. It knows
nothing about how pixels get drawn; see `interfaces.gui_adapter` for an
OpenCV painter.
"""

from dataclasses import dataclass
from typing import AbstractSet, Iterable, Optional, Tuple

from easydict import EasyDict as edict

from .geometry import Box, PageCalibration, Point, Vertex, ViewportState, page_to_screen
from .interaction import Drawing, Gesture, MultiSelecting
from .state import Region
from .utils import RGBA, Color, with_alpha


@dataclass(frozen=True)
class RegionSprite:
    region_id: int
    points: Tuple[Vertex, ...]
    fill: RGBA
    stroke: RGBA
    stroke_width: float
    label: str
    label_background: RGBA
    marked: bool
    selected: bool


@dataclass(frozen=True)
class PendingBox:
    points: Tuple[Vertex, ...]
    kind: str  # "draw" or "select"
    too_small: bool
    stroke: RGBA


@dataclass(frozen=True)
class RenderFrame:
    items: Tuple[RegionSprite, ...]
    pending: Optional[PendingBox]
    viewport: ViewportState


def _to_screen(
    corners: Iterable[Vertex], viewport: ViewportState, calibration: PageCalibration
) -> Tuple[Vertex, ...]:
    return tuple(
        page_to_screen(Point(x, y), viewport, calibration).as_tuple() for x, y in corners
    )


def region_sprite(
    region: Region,
    viewport: ViewportState,
    calibration: PageCalibration,
    style: edict,
    selected: bool = False,
    multi_selected: bool = False,
) -> RegionSprite:
    if selected:
        fill = with_alpha(region.color, style.selected_fill_alpha)
        stroke = with_alpha(Color.parse(style.selected_stroke_color), 1.0)
        stroke_width = style.selected_stroke_width
    elif multi_selected:
        fill = with_alpha(region.color, style.fill_alpha)
        stroke = with_alpha(Color.parse(style.multi_selected_stroke_color), 1.0)
        stroke_width = style.multi_selected_stroke_width
    else:
        fill = with_alpha(region.color, style.fill_alpha)
        stroke = with_alpha(region.color, style.stroke_alpha)
        stroke_width = style.stroke_width

    return RegionSprite(
        region_id=region.id,
        points=_to_screen(region.corners(), viewport, calibration),
        fill=fill,
        stroke=stroke,
        stroke_width=stroke_width,
        label=region.label,
        label_background=with_alpha(region.color, style.label_alpha),
        marked=region.marked,
        selected=selected or multi_selected,
    )


def pending_box(
    gesture: Gesture, viewport: ViewportState, calibration: PageCalibration, style: edict
) -> Optional[PendingBox]:
    if isinstance(gesture, Drawing):
        box: Box = gesture.pending
        too_small = gesture.too_small
        kind = "draw"
    elif isinstance(gesture, MultiSelecting):
        box = gesture.pending
        too_small = False
        kind = "select"
    else:
        return None

    color = Color.parse(style.too_small_color if too_small else style.pending_color)
    return PendingBox(
        points=_to_screen(box.corners(), viewport, calibration),
        kind=kind,
        too_small=too_small,
        stroke=with_alpha(color, 1.0),
    )


def build_frame(
    regions: Iterable[Region],
    viewport: ViewportState,
    calibration: PageCalibration,
    style: edict,
    gesture: Gesture,
    selected_id: Optional[int] = None,
    multi_selection: AbstractSet[int] = frozenset(),
) -> RenderFrame:
    """
    Project regions and the in-flight gesture to screen space.

    Pure: the same inputs always give an equal frame.
    """
    items = tuple(
        region_sprite(
            region,
            viewport,
            calibration,
            style,
            selected=region.id == selected_id,
            multi_selected=region.id in multi_selection,
        )
        for region in regions
    )
    return RenderFrame(
        items=items,
        pending=pending_box(gesture, viewport, calibration, style),
        viewport=viewport,
    )
