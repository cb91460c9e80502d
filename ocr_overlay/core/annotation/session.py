"""
Overlay editing session.

Core logic for one open annotation document: regions, calibration,
viewport, selection and pointer interaction.
UI-agnostic - can be used with any interface (GUI, Web, CLI).
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from easydict import EasyDict as edict

from ...utils.config import load_config
from .events import AnnotationEvent, EventEmitter, EventType
from .geometry import PageCalibration, Point
from .interaction import (
    Cancel,
    CommitBox,
    Idle,
    InteractionContext,
    InteractionEvent,
    InteractionState,
    Mode,
    ModeChanged,
    PointerDown,
    PointerMove,
    PointerUp,
    SelectMany,
    SelectRegion,
    SetMode,
    SetTranslation,
    transition,
)
from .render import RenderFrame, build_frame
from .schema import ParsedDocument, SchemaAdapter, dumps
from .state import Region, RegionStore
from .utils import Color, build_palette, palette_color
from .viewport import ViewportTransform

logger = logging.getLogger(__name__)


class AnnotationSession:
    """
    Manages the state and logic of an overlay editing session.

    This class handles:
    - Document import/export through the schema adapter
    - The region store snapshot and its edits
    - Viewport pan/zoom
    - Pointer gestures (pan, draw, single and multi selection)
    - Event emission for UI updates

    The session is UI-agnostic - it emits events that UI components
    can listen to, rather than directly manipulating UI elements.
    Until a document is loaded it shows the built-in demo regions.
    """

    def __init__(self, config: Optional[edict] = None):
        """
        Initialize session.

        Args:
            config: Configuration, defaults to `load_config()`
        """
        self.config = config if config is not None else load_config()
        self.palette: List[Color] = build_palette(
            self.config.palette,
            self.config.palette_colormap,
            self.config.palette_size,
        )
        self.schema = SchemaAdapter(self.palette)

        self.store = RegionStore()
        self.calibration = PageCalibration()
        self.viewport = ViewportTransform()
        self.interaction = InteractionState()
        self.selected_id: Optional[int] = None
        self.multi_selection: frozenset = frozenset()
        self.source = "demo"

        # Event emitter for UI notifications
        self.events = EventEmitter()

        self._load(self.schema.demo(), image_size=None)

    # Document lifecycle

    def load_document(self, data: Any, image_size: Optional[Tuple[float, float]] = None):
        """
        Load regions from decoded OCR JSON.

        Args:
            data: Decoded JSON in any accepted schema
            image_size: Decoded image (width, height); keeps the current
                one when omitted
        """
        self._load(self.schema.import_document(data), image_size)

    def load_json(self, text, image_size: Optional[Tuple[float, float]] = None):
        """Load regions from a JSON string."""
        self._load(self.schema.import_json(text), image_size)

    def load_demo(self):
        self._load(self.schema.demo(), image_size=None)

    def _load(self, parsed: ParsedDocument, image_size: Optional[Tuple[float, float]]):
        if image_size is None:
            image_w = self.calibration.image_pixel_width
            image_h = self.calibration.image_pixel_height
        else:
            image_w, image_h = image_size

        self.store = RegionStore(parsed.regions)
        self.calibration = PageCalibration(
            parsed.page_width, parsed.page_height, image_w, image_h
        )
        self.interaction = InteractionState()
        self.selected_id = None
        self.multi_selection = frozenset()
        self.source = parsed.source

        logger.debug(
            f"Loaded {len(self.store)} region(s) from {parsed.source} document, "
            f"scale factors {self.calibration.scale_factor_x:g}/{self.calibration.scale_factor_y:g}"
        )
        self.events.emit(
            AnnotationEvent(
                EventType.DOCUMENT_LOADED,
                {"source": parsed.source, "num_regions": len(self.store)},
            )
        )

    def set_image_size(self, width: float, height: float):
        """Calibrate against the decoded image's pixel size."""
        self.calibration = self.calibration.with_image_size(width, height)
        self.events.emit(
            AnnotationEvent(
                EventType.CALIBRATION_CHANGED,
                {
                    "scale_factor_x": self.calibration.scale_factor_x,
                    "scale_factor_y": self.calibration.scale_factor_y,
                },
            )
        )

    def export(self) -> Dict[str, Any]:
        """Current document in the current schema."""
        document = self.schema.export_document(self.store, self.calibration)
        self.events.emit(
            AnnotationEvent(
                EventType.DOCUMENT_EXPORTED,
                {"num_regions": len(document["ocr_results"])},
            )
        )
        return document

    def export_json(self) -> str:
        return dumps(self.export())

    # Modes and pointer gestures

    @property
    def mode(self) -> Mode:
        return self.interaction.mode

    def set_mode(self, mode: Mode):
        self._dispatch(SetMode(mode))

    def toggle_draw_mode(self):
        self.set_mode(Mode.NAVIGATE if self.mode == Mode.DRAW else Mode.DRAW)

    def toggle_multi_select_mode(self):
        self.set_mode(
            Mode.NAVIGATE if self.mode == Mode.MULTI_SELECT else Mode.MULTI_SELECT
        )

    def pointer_down(self, x: float, y: float):
        self._dispatch(PointerDown(x, y))

    def pointer_move(self, x: float, y: float):
        self._dispatch(PointerMove(x, y))

    def pointer_up(self, x: float, y: float):
        self._dispatch(PointerUp(x, y))

    def cancel(self):
        """Abandon the gesture in progress (Escape)."""
        self._dispatch(Cancel())

    def _dispatch(self, event: InteractionEvent):
        context = InteractionContext(
            viewport=self.viewport.state,
            calibration=self.calibration,
            regions=self.store.regions,
        )
        previous = self.interaction
        self.interaction, effects = transition(previous, event, context)
        for effect in effects:
            self._apply(effect)
        if self.interaction.gesture != previous.gesture:
            self.events.emit(
                AnnotationEvent(
                    EventType.GESTURE_UPDATED,
                    {"gesture": type(self.interaction.gesture).__name__},
                )
            )

    def _apply(self, effect):
        if isinstance(effect, SelectRegion):
            self._set_selection(effect.region_id, frozenset())
        elif isinstance(effect, SelectMany):
            self._set_selection(None, frozenset(effect.region_ids))
        elif isinstance(effect, SetTranslation):
            self.viewport.set_translation(effect.translation)
            self._emit_viewport()
        elif isinstance(effect, CommitBox):
            self._commit_box(effect)
        elif isinstance(effect, ModeChanged):
            self.events.emit(
                AnnotationEvent(EventType.MODE_CHANGED, {"mode": effect.mode.value})
            )
        else:
            raise TypeError(f"Unknown interaction effect: {effect!r}")

    def _commit_box(self, effect: CommitBox):
        color = palette_color(self.palette, self.store.next_id - 1)
        self.store, region = self.store.create(color=color, box=effect.box)
        logger.debug(f"Drew region {region.id} at {effect.box}")
        self.events.emit(
            AnnotationEvent(EventType.REGION_ADDED, {"region": region.to_dict()})
        )

    # Viewport (never touches regions or interaction state)

    def zoom_in(self):
        self.viewport.zoom_in()
        self._emit_viewport()

    def zoom_out(self):
        self.viewport.zoom_out()
        self._emit_viewport()

    def wheel(self, x: float, y: float, delta: float):
        """Continuous zoom anchored at the pointer; positive delta zooms in."""
        self.viewport.wheel(Point(x, y), delta)
        self._emit_viewport()

    def fit_to_container(
        self, width: Optional[float] = None, height: Optional[float] = None
    ) -> bool:
        """
        Fit and center the image in a container.

        Returns:
            False if there is no image or page size to fit
        """
        if width is None or height is None:
            width = self.config.viewport.container_width
            height = self.config.viewport.container_height
        image_size = self.content_size()
        if image_size is None:
            return False
        self.viewport.fit((width, height), image_size)
        self._emit_viewport()
        return True

    def content_size(self) -> Optional[Tuple[float, float]]:
        """Size of the canvas in image pixels, if known."""
        calibration = self.calibration
        if calibration.has_image_size:
            return (calibration.image_pixel_width, calibration.image_pixel_height)
        if calibration.has_page_size:
            return (calibration.page_width, calibration.page_height)
        return None

    def _emit_viewport(self):
        state = self.viewport.state
        self.events.emit(
            AnnotationEvent(
                EventType.VIEWPORT_CHANGED,
                {
                    "scale": state.scale,
                    "translation": state.translation.as_tuple(),
                },
            )
        )

    # Selection and edits

    @property
    def selected_region(self) -> Optional[Region]:
        return self.store.get(self.selected_id)

    def select(self, region_id: Optional[int]) -> bool:
        """
        Select one region by id, or clear the selection with None.

        Returns:
            False if the id is unknown
        """
        if region_id is not None and region_id not in self.store:
            return False
        self._set_selection(region_id, frozenset())
        return True

    def _set_selection(self, region_id: Optional[int], multi: frozenset):
        if region_id == self.selected_id and multi == self.multi_selection:
            return
        self.selected_id = region_id
        self.multi_selection = multi
        self.events.emit(
            AnnotationEvent(
                EventType.SELECTION_CHANGED,
                {"selected_id": region_id, "multi_selection": sorted(multi)},
            )
        )

    def edit_text(self, text: str) -> bool:
        """Replace the selected region's text. No-op without a selection."""
        if self.selected_region is None:
            return False
        self.store = self.store.update(self.selected_id, text=text)
        self._emit_updated([self.selected_id])
        return True

    def delete_selected(self) -> bool:
        """Remove the selected region. No-op without a selection."""
        if self.selected_region is None:
            return False
        region_id = self.selected_id
        self.store = self.store.remove(region_id)
        self.events.emit(
            AnnotationEvent(EventType.REGION_REMOVED, {"region_id": region_id})
        )
        self._set_selection(None, frozenset())
        return True

    def toggle_mark(self) -> List[int]:
        """
        Flip the marked flag.

        Acts on every multi-selected region (and then clears the
        multi-selection) if there is one, else on the selected region.

        Returns:
            Ids whose flag changed
        """
        if self.multi_selection:
            targets = [rid for rid in self.store.ids() if rid in self.multi_selection]
        elif self.selected_region is not None:
            targets = [self.selected_id]
        else:
            return []

        store = self.store
        for region_id in targets:
            store = store.update(region_id, marked=not store[region_id].marked)
        self.store = store
        self._emit_updated(targets)
        if self.multi_selection:
            self._set_selection(self.selected_id, frozenset())
        return targets

    def restyle(self, palette: Optional[Sequence] = None):
        """
        Recolor every region in store order, cycling through a palette.

        Args:
            palette: Colors or color strings; the session palette if omitted

        Raises:
            ValueError: If the palette is empty or holds an unknown color;
                the session is left unchanged
        """
        if palette is not None:
            colors = [Color.parse(c) for c in palette]
            if not colors:
                raise ValueError("Cannot restyle with an empty palette")
            self.palette = colors
            self.schema = SchemaAdapter(self.palette)
        self.store = self.store.restyle(self.palette)
        self.events.emit(
            AnnotationEvent(
                EventType.REGIONS_RESTYLED,
                {"palette": [c.to_hex() for c in self.palette]},
            )
        )

    def _emit_updated(self, region_ids: Sequence[int]):
        for region_id in region_ids:
            self.events.emit(
                AnnotationEvent(
                    EventType.REGION_UPDATED,
                    {"region": self.store[region_id].to_dict()},
                )
            )

    # Read-only views

    def list_regions(self) -> List[Dict[str, Any]]:
        """Summary rows for a region list panel, in store order."""
        return [
            {
                "id": region.id,
                "label": region.label,
                "text": region.text,
                "marked": region.marked,
                "color": region.color.to_hex(),
                "selected": region.id == self.selected_id
                or region.id in self.multi_selection,
            }
            for region in self.store
        ]

    def render_frame(self) -> RenderFrame:
        """What to paint for the current state."""
        return build_frame(
            self.store,
            self.viewport.state,
            self.calibration,
            self.config.style,
            self.interaction.gesture,
            selected_id=self.selected_id,
            multi_selection=self.multi_selection,
        )

    @property
    def is_idle(self) -> bool:
        return isinstance(self.interaction.gesture, Idle)
