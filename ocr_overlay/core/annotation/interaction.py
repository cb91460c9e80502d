"""
Pointer interaction state machine.

The editor is always in one `Mode` (navigate, draw or multi-select) and in
one gesture state (idle, panning, drawing, multi-selecting). Raw pointer
events go through `transition`, which returns the next state plus a list
of effects for the session to apply. Nothing here mutates the region store
or the viewport directly.
"""

import logging
import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from .geometry import (
    Box,
    PageCalibration,
    Point,
    ViewportState,
    normalize_rect,
    screen_to_image,
    screen_to_page,
)
from .hit_testing import hit_test, regions_within
from .state import Region
from .viewport import pan

logger = logging.getLogger(__name__)

# Smallest committed region side, page-space units
MIN_REGION_SIZE = 5.0
# Pointer travel, screen pixels, beyond which a press is a drag
DRAG_THRESHOLD = 5.0


class Mode(Enum):
    NAVIGATE = "navigate"
    DRAW = "draw"
    MULTI_SELECT = "multi_select"


# Gesture states


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Panning:
    origin: Point
    drag_start: Point
    start_translation: Point
    # Pointer position and translation as of the last event this gesture handled
    last_position: Point
    last_translation: Point
    dragged: bool = False

    @property
    def pointer_anchor(self) -> Point:
        """Screen position at which `start_translation` applies."""
        return self.drag_start + self.start_translation


@dataclass(frozen=True)
class Drawing:
    anchor: Point
    pending: Box
    too_small: bool = True


@dataclass(frozen=True)
class MultiSelecting:
    anchor: Point
    pending: Box
    moved: bool = False


Gesture = Union[Idle, Panning, Drawing, MultiSelecting]


@dataclass(frozen=True)
class InteractionState:
    mode: Mode = Mode.NAVIGATE
    gesture: Gesture = field(default_factory=Idle)


# Input events, positions in screen space


@dataclass(frozen=True)
class PointerDown:
    x: float
    y: float

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)


@dataclass(frozen=True)
class PointerMove:
    x: float
    y: float

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)


@dataclass(frozen=True)
class PointerUp:
    x: float
    y: float

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)


@dataclass(frozen=True)
class Cancel:
    pass


@dataclass(frozen=True)
class SetMode:
    mode: Mode


InteractionEvent = Union[PointerDown, PointerMove, PointerUp, Cancel, SetMode]


# Effects for the session to apply


@dataclass(frozen=True)
class SelectRegion:
    region_id: Optional[int]


@dataclass(frozen=True)
class SelectMany:
    region_ids: Tuple[int, ...]


@dataclass(frozen=True)
class SetTranslation:
    translation: Point


@dataclass(frozen=True)
class CommitBox:
    box: Box


@dataclass(frozen=True)
class ModeChanged:
    mode: Mode


Effect = Union[SelectRegion, SelectMany, SetTranslation, CommitBox, ModeChanged]


@dataclass(frozen=True)
class InteractionContext:
    """Read-only view of the session that transitions may consult."""

    viewport: ViewportState
    calibration: PageCalibration
    regions: Sequence[Region] = ()

    def to_page(self, position: Point) -> Point:
        return screen_to_page(position, self.viewport, self.calibration)


def is_too_small(box: Box) -> bool:
    return box.width < MIN_REGION_SIZE or box.height < MIN_REGION_SIZE


def transition(
    state: InteractionState, event: InteractionEvent, context: InteractionContext
) -> Tuple[InteractionState, List[Effect]]:
    """
    Advance the interaction by one event.

    Args:
        state: Current interaction state
        event: Input event
        context: Viewport, calibration and regions at the time of the event

    Returns:
        (next state, effects to apply in order)
    """
    if isinstance(event, SetMode):
        return _set_mode(state, event.mode, context)
    if isinstance(event, Cancel):
        return _cancel(state, context)
    if isinstance(event, PointerDown):
        return _pointer_down(state, event.position, context)
    if isinstance(event, PointerMove):
        return _pointer_move(state, event.position, context)
    if isinstance(event, PointerUp):
        return _pointer_up(state, event.position, context)
    raise TypeError(f"Unknown interaction event: {event!r}")


def _rebase(gesture: Panning, viewport: ViewportState) -> Panning:
    """
    Follow a translation change made outside the gesture.

    Fit and wheel zoom may move the viewport between pointer events. The
    pan then continues from the new translation, which also becomes the
    one a click reverts to.
    """
    current = viewport.translation
    if current == gesture.last_translation:
        return gesture
    logger.debug(f"Viewport moved during pan, rebasing on {current}")
    return dataclasses.replace(
        gesture,
        drag_start=gesture.last_position - current,
        start_translation=current,
        last_translation=current,
    )


def _pan_to(gesture: Panning, position: Point) -> Point:
    return pan(gesture.start_translation, position - gesture.pointer_anchor)


def _abandon_pan(gesture: Gesture, context: InteractionContext) -> List[Effect]:
    if not isinstance(gesture, Panning):
        return []
    return [SetTranslation(_rebase(gesture, context.viewport).start_translation)]


def _set_mode(state: InteractionState, mode: Mode, context: InteractionContext):
    # Switching modes abandons whatever gesture was in flight
    effects = _abandon_pan(state.gesture, context)
    if mode != state.mode:
        effects.append(ModeChanged(mode))
    return InteractionState(mode=mode), effects


def _cancel(state: InteractionState, context: InteractionContext):
    gesture = state.gesture
    effects = _abandon_pan(gesture, context)
    mode = state.mode
    if mode == Mode.DRAW:
        mode = Mode.NAVIGATE
        effects.append(ModeChanged(mode))
    logger.debug(f"Cancelled {type(gesture).__name__} gesture")
    return InteractionState(mode=mode), effects


def _pointer_down(state: InteractionState, position: Point, context: InteractionContext):
    if state.mode == Mode.DRAW:
        anchor = context.to_page(position)
        pending = Box(anchor.x, anchor.y, 0.0, 0.0)
        return InteractionState(state.mode, Drawing(anchor, pending)), []

    if state.mode == Mode.MULTI_SELECT:
        anchor = context.to_page(position)
        pending = Box(anchor.x, anchor.y, 0.0, 0.0)
        return InteractionState(state.mode, MultiSelecting(anchor, pending)), []

    image_point = screen_to_image(position, context.viewport)
    hit = hit_test(image_point, context.regions, context.calibration)
    if hit is not None:
        return InteractionState(state.mode), [SelectRegion(hit)]

    translation = context.viewport.translation
    panning = Panning(
        origin=position,
        drag_start=position - translation,
        start_translation=translation,
        last_position=position,
        last_translation=translation,
    )
    return InteractionState(state.mode, panning), []


def _pointer_move(state: InteractionState, position: Point, context: InteractionContext):
    gesture = state.gesture

    if isinstance(gesture, Drawing):
        pending = normalize_rect(gesture.anchor, context.to_page(position))
        drawing = Drawing(gesture.anchor, pending, too_small=is_too_small(pending))
        return InteractionState(state.mode, drawing), []

    if isinstance(gesture, MultiSelecting):
        pending = normalize_rect(gesture.anchor, context.to_page(position))
        selecting = MultiSelecting(gesture.anchor, pending, moved=True)
        return InteractionState(state.mode, selecting), []

    if isinstance(gesture, Panning):
        gesture = _rebase(gesture, context.viewport)
        translation = _pan_to(gesture, position)
        panning = dataclasses.replace(
            gesture,
            last_position=position,
            last_translation=translation,
            dragged=gesture.dragged
            or position.distance_to(gesture.origin) > DRAG_THRESHOLD,
        )
        return InteractionState(state.mode, panning), [SetTranslation(translation)]

    return state, []


def _pointer_up(state: InteractionState, position: Point, context: InteractionContext):
    gesture = state.gesture

    if isinstance(gesture, Drawing):
        pending = normalize_rect(gesture.anchor, context.to_page(position))
        effects: List[Effect] = []
        if not is_too_small(pending):
            effects.append(CommitBox(pending))
        else:
            logger.debug(f"Discarding drawn box below minimum size: {pending}")
        # Drawing is single-shot
        effects.append(ModeChanged(Mode.NAVIGATE))
        return InteractionState(Mode.NAVIGATE), effects

    if isinstance(gesture, MultiSelecting):
        selected: Tuple[int, ...] = ()
        if gesture.moved:
            pending = normalize_rect(gesture.anchor, context.to_page(position))
            selected = tuple(
                regions_within(pending, context.regions, context.calibration)
            )
        return InteractionState(state.mode), [SelectMany(selected)]

    if isinstance(gesture, Panning):
        gesture = _rebase(gesture, context.viewport)
        dragged = gesture.dragged or position.distance_to(gesture.origin) > DRAG_THRESHOLD
        if dragged:
            return InteractionState(state.mode), [
                SetTranslation(_pan_to(gesture, position))
            ]
        # A click: undo the sub-threshold pan and select under the pointer
        viewport = ViewportState(
            scale=context.viewport.scale, translation=gesture.start_translation
        )
        image_point = screen_to_image(position, viewport)
        hit = hit_test(image_point, context.regions, context.calibration)
        return InteractionState(state.mode), [
            SetTranslation(gesture.start_translation),
            SelectRegion(hit),
        ]

    return state, []
