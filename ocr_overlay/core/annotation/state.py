"""
Region data model.

Contains the annotation region record and the store that owns the ordered
collection of regions for one open document.
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .geometry import Box, Vertex, envelope
from .utils import Color, palette_color

logger = logging.getLogger(__name__)

DEFAULT_TEXT = "New text region"


def make_label(n: int) -> str:
    return f"Text {n}"


@dataclass(frozen=True)
class Region:
    """
    One annotated area of the page.

    Either `box` (plain region) or `vertices` (quad region) describes the
    geometry, always in page space. For a quad the bounding box is derived
    from the vertices on demand and never stored.
    """

    id: int
    box: Optional[Box] = None
    vertices: Optional[Tuple[Vertex, Vertex, Vertex, Vertex]] = None
    text: str = ""
    # None stands for "unknown"
    confidence: Optional[float] = 1.0
    color: Color = Color(255, 0, 0)
    marked: bool = False
    label: str = ""

    def __post_init__(self):
        if self.vertices is not None:
            vertices = tuple((v[0], v[1]) for v in self.vertices)
            if len(vertices) != 4:
                raise ValueError(
                    f"Quad region needs exactly 4 vertices, got {len(vertices)}"
                )
            object.__setattr__(self, "vertices", vertices)
            object.__setattr__(self, "box", None)
        elif self.box is None:
            raise ValueError("Region needs either a box or vertices")
        if not self.label:
            object.__setattr__(self, "label", make_label(self.id))

    @property
    def is_quad(self) -> bool:
        return self.vertices is not None

    @property
    def bounds(self) -> Box:
        """Bounding box in page space."""
        if self.is_quad:
            return envelope(self.vertices)
        return self.box

    def corners(self) -> Tuple[Vertex, ...]:
        """Outline in page space, clockwise for boxes, as stored for quads."""
        if self.is_quad:
            return self.vertices
        return self.box.corners()

    def to_dict(self):
        """Convert to dictionary for serialization."""
        bounds = self.bounds
        return {
            "id": self.id,
            "label": self.label,
            "text": self.text,
            "confidence": self.confidence,
            "marked": self.marked,
            "color": self.color.to_hex(),
            "is_quad": self.is_quad,
            "x": bounds.x,
            "y": bounds.y,
            "width": bounds.width,
            "height": bounds.height,
            "vertices": [list(v) for v in self.corners()],
        }


class RegionStore:
    """
    Ordered, id-keyed collection of regions.

    The store is a snapshot: every mutating operation returns a new store
    and leaves the receiver untouched. Iteration follows creation order,
    which is also the paint order (last is top-most).

    Ids are never reused. The next id tracks the highest id ever held by
    this lineage of snapshots, so deleting the newest region does not free
    its id.
    """

    def __init__(self, regions: Iterable[Region] = (), next_id: Optional[int] = None):
        self._regions: Dict[int, Region] = {}
        for region in regions:
            if region.id in self._regions:
                raise ValueError(f"Duplicate region id {region.id}")
            self._regions[region.id] = region
        floor = max(self._regions, default=0) + 1
        self._next_id = max(next_id or 1, floor)

    @classmethod
    def _snapshot(cls, regions: Dict[int, Region], next_id: int) -> "RegionStore":
        store = cls.__new__(cls)
        store._regions = regions
        store._next_id = next_id
        return store

    @property
    def next_id(self) -> int:
        return self._next_id

    def __len__(self) -> int:
        return len(self._regions)

    def __iter__(self) -> Iterator[Region]:
        return iter(list(self._regions.values()))

    def __contains__(self, region_id) -> bool:
        return region_id in self._regions

    def __getitem__(self, region_id: int) -> Region:
        return self._regions[region_id]

    def get(self, region_id: Optional[int]) -> Optional[Region]:
        if region_id is None:
            return None
        return self._regions.get(region_id)

    def ids(self) -> List[int]:
        return list(self._regions)

    @property
    def regions(self) -> Tuple[Region, ...]:
        return tuple(self._regions.values())

    def add(self, region: Region) -> "RegionStore":
        """Append a fully built region; its id must be unused."""
        if region.id in self._regions:
            raise ValueError(f"Duplicate region id {region.id}")
        regions = dict(self._regions)
        regions[region.id] = region
        logger.debug(f"Adding region {region.id}")
        return self._snapshot(regions, max(self._next_id, region.id + 1))

    def create(
        self,
        color: Color,
        box: Optional[Box] = None,
        vertices: Optional[Sequence[Vertex]] = None,
        text: str = DEFAULT_TEXT,
        confidence: Optional[float] = 1.0,
        marked: bool = False,
    ) -> Tuple["RegionStore", Region]:
        """
        Create a region with the next free id.

        Returns:
            (new store, created region)
        """
        region = Region(
            id=self._next_id,
            box=box,
            vertices=tuple(vertices) if vertices is not None else None,
            text=text,
            confidence=confidence,
            color=color,
            marked=marked,
        )
        return self.add(region), region

    def update(self, region_id: int, **changes) -> "RegionStore":
        """
        Replace fields of one region.

        Raises:
            KeyError: If the region does not exist
            ValueError: If the change would alter the id
        """
        if "id" in changes and changes["id"] != region_id:
            raise ValueError("Region ids are immutable")
        current = self._regions[region_id]
        if "vertices" in changes and changes["vertices"] is not None:
            changes.setdefault("box", None)
        regions = dict(self._regions)
        regions[region_id] = dataclasses.replace(current, **changes)
        logger.debug(f"Updating region {region_id}: {sorted(changes)}")
        return self._snapshot(regions, self._next_id)

    def remove(self, region_id: int) -> "RegionStore":
        """
        Drop one region.

        Raises:
            KeyError: If the region does not exist
        """
        regions = dict(self._regions)
        del regions[region_id]
        logger.debug(f"Removing region {region_id}")
        return self._snapshot(regions, self._next_id)

    def restyle(self, palette: Sequence[Color]) -> "RegionStore":
        """Reassign colors in store order, cycling through the palette."""
        regions = {
            region.id: dataclasses.replace(region, color=palette_color(palette, i))
            for i, region in enumerate(self._regions.values())
        }
        return self._snapshot(regions, self._next_id)
