"""
Import/export between OCR result JSON and the region model.

Three input shapes are understood, tried in this order:

1. current:       {"image_width", "image_height", "ocr_results": [...]}
2. legacy pages:  [{"page_width", "page_heigth", "results": [...]}, ...]
3. legacy page:   {"page_width", "page_heigth", "results": [...]}

The legacy height key really is spelled "page_heigth". Anything else, and
anything that fails while being read, yields the built-in demo regions.
Export always writes the current shape.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

from .geometry import Box, PageCalibration, Vertex
from .state import Region
from .utils import Color, palette_color

logger = logging.getLogger(__name__)

LEGACY_HEIGHT_KEY = "page_heigth"
# Used when an empty palette reaches the importer
FALLBACK_COLOR = Color(255, 0, 0)

# x, y, width, height, text
DEMO_REGIONS = (
    (50, 50, 100, 80, "This is a sample annotation area containing text."),
    (200, 150, 150, 100, "Another important section of the document."),
    (100, 300, 200, 120, "This contains key information that needs attention."),
)


@dataclass
class ParsedDocument:
    """Result of reading one annotation document."""

    regions: List[Region] = field(default_factory=list)
    page_width: Optional[float] = None
    page_height: Optional[float] = None
    source: str = "demo"

    @property
    def is_demo(self) -> bool:
        return self.source == "demo"


def _usable_palette(palette: Sequence[Color]) -> List[Color]:
    return list(palette) or [FALLBACK_COLOR]


def _number(value) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _parse_vertices(raw) -> Optional[Tuple[Vertex, ...]]:
    if not isinstance(raw, (list, tuple)) or len(raw) != 4:
        return None
    vertices = []
    for vertex in raw:
        if not isinstance(vertex, (list, tuple)) or len(vertex) != 2:
            return None
        x, y = _number(vertex[0]), _number(vertex[1])
        if x is None or y is None:
            return None
        vertices.append((x, y))
    return tuple(vertices)


def parse_results(items: Iterable[Any], palette: Sequence[Color]) -> List[Region]:
    """
    Turn OCR result items into quad regions.

    Items without exactly four [x, y] vertices are dropped. Ids are
    assigned 1..n in input order and colors cycle through the palette.
    """
    regions: List[Region] = []
    dropped = 0
    for item in items:
        vertices = _parse_vertices(item.get("vertices")) if isinstance(item, dict) else None
        if vertices is None:
            dropped += 1
            continue
        index = len(regions)
        text = item.get("text")
        regions.append(
            Region(
                id=index + 1,
                vertices=vertices,
                text=text if isinstance(text, str) else "",
                confidence=_number(item.get("confidence")),
                color=palette_color(palette, index),
                marked=item.get("marked") is True,
            )
        )
    if dropped:
        logger.warning(f"Dropped {dropped} OCR result(s) without exactly 4 vertices")
    return regions


def match_current(data, palette: Sequence[Color]) -> Optional[ParsedDocument]:
    if not isinstance(data, dict) or not isinstance(data.get("ocr_results"), list):
        return None
    return ParsedDocument(
        regions=parse_results(data["ocr_results"], palette),
        page_width=_number(data.get("image_width")),
        page_height=_number(data.get("image_height")),
        source="current",
    )


def _legacy_page(page, palette: Sequence[Color], source: str) -> ParsedDocument:
    height = page.get(LEGACY_HEIGHT_KEY, page.get("page_height"))
    return ParsedDocument(
        regions=parse_results(page["results"], palette),
        page_width=_number(page.get("page_width")),
        page_height=_number(height),
        source=source,
    )


def match_legacy_pages(data, palette: Sequence[Color]) -> Optional[ParsedDocument]:
    if not isinstance(data, list) or not data:
        return None
    first = data[0]
    if not isinstance(first, dict) or not isinstance(first.get("results"), list):
        return None
    if len(data) > 1:
        logger.warning(f"Only the first of {len(data)} pages is loaded")
    return _legacy_page(first, palette, "legacy_pages")


def match_legacy_page(data, palette: Sequence[Color]) -> Optional[ParsedDocument]:
    if not isinstance(data, dict) or not isinstance(data.get("results"), list):
        return None
    return _legacy_page(data, palette, "legacy_page")


def demo_document(palette: Sequence[Color]) -> ParsedDocument:
    palette = _usable_palette(palette)
    regions = [
        Region(
            id=i + 1,
            box=Box(x, y, width, height),
            text=text,
            confidence=1.0,
            color=palette_color(palette, i),
        )
        for i, (x, y, width, height, text) in enumerate(DEMO_REGIONS)
    ]
    return ParsedDocument(regions=regions, source="demo")


def match_demo(data, palette: Sequence[Color]) -> Optional[ParsedDocument]:
    return demo_document(palette)


Matcher = Callable[[Any, Sequence[Color]], Optional[ParsedDocument]]

SCHEMA_MATCHERS: Tuple[Matcher, ...] = (
    match_current,
    match_legacy_pages,
    match_legacy_page,
    match_demo,
)


def import_document(data, palette: Sequence[Color]) -> ParsedDocument:
    """
    Read decoded JSON into regions. Never raises.

    Args:
        data: Decoded JSON value (dict, list, anything)
        palette: Colors assigned by region index

    Returns:
        Parsed document; the demo document if nothing matched
    """
    palette = _usable_palette(palette)
    for matcher in SCHEMA_MATCHERS:
        try:
            parsed = matcher(data, palette)
        except Exception:
            logger.warning(
                f"Failed to read annotations with {matcher.__name__}, using demo regions",
                exc_info=True,
            )
            return demo_document(palette)
        if parsed is not None:
            if parsed.is_demo:
                logger.warning("Unrecognized annotation structure, using demo regions")
            else:
                logger.debug(
                    f"Read {len(parsed.regions)} region(s) as {parsed.source} schema"
                )
            return parsed
    return demo_document(palette)


def import_json(text, palette: Sequence[Color]) -> ParsedDocument:
    """Decode a JSON string or bytes and import it. Never raises."""
    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        logger.warning("Annotation file is not valid JSON, using demo regions", exc_info=True)
        return demo_document(palette)
    return import_document(data, palette)


def export_region(region: Region) -> dict:
    return {
        "text": region.text,
        "confidence": region.confidence,
        "marked": region.marked,
        "vertices": [[x, y] for x, y in region.corners()],
    }


def export_document(regions: Iterable[Region], calibration: PageCalibration) -> dict:
    """
    Build a current-schema document.

    The declared page size is written when one was read; otherwise the
    decoded image size stands in for it.
    """
    if calibration.has_page_size:
        width, height = calibration.page_width, calibration.page_height
    else:
        width, height = calibration.image_pixel_width, calibration.image_pixel_height
    return {
        "image_width": width or 0,
        "image_height": height or 0,
        "ocr_results": [export_region(r) for r in regions],
    }


def dumps(document: dict, indent: int = 2) -> str:
    return json.dumps(document, indent=indent, ensure_ascii=False)


def companion_json_path(image_path: Path) -> Optional[Path]:
    """
    Find the annotation file paired with an image by base name.

    `scan_01.tif` pairs with `scan_01.json` in the same folder, compared
    case-insensitively.
    """
    image_path = Path(image_path)
    wanted = f"{image_path.stem}.json".lower()
    folder = image_path.parent
    if not folder.is_dir():
        return None
    for candidate in sorted(folder.iterdir()):
        if candidate.is_file() and candidate.name.lower() == wanted:
            return candidate
    return None


class SchemaAdapter:
    """Import/export bound to one palette."""

    def __init__(self, palette: Sequence[Color]):
        self.palette = list(palette)

    def import_document(self, data) -> ParsedDocument:
        return import_document(data, self.palette)

    def import_json(self, text) -> ParsedDocument:
        return import_json(text, self.palette)

    def demo(self) -> ParsedDocument:
        return demo_document(self.palette)

    def export_document(self, regions: Iterable[Region], calibration: PageCalibration) -> dict:
        return export_document(regions, calibration)

    def export_json(self, regions: Iterable[Region], calibration: PageCalibration) -> str:
        return dumps(export_document(regions, calibration))
