"""
Pure color helpers for region styling.

A region carries a structured color identity; every concrete fill, stroke
or label color is derived from it by attaching an alpha.
"""

from typing import Iterable, List, NamedTuple, Sequence, Tuple

from matplotlib import colors as mcolors

RGBA = Tuple[int, int, int, float]


class Color(NamedTuple):
    """An opaque RGB color, components in 0..255."""

    r: int
    g: int
    b: int

    @classmethod
    def parse(cls, value) -> "Color":
        """
        Build a color from anything matplotlib understands.

        Accepts hex strings, named colors, float RGB(A) tuples in [0, 1],
        or an existing Color.
        """
        if isinstance(value, Color):
            return value
        r, g, b = mcolors.to_rgb(value)
        return cls(int(round(r * 255)), int(round(g * 255)), int(round(b * 255)))

    def to_hex(self) -> str:
        return "#{:02x}{:02x}{:02x}".format(*self)

    def to_bgr(self) -> Tuple[int, int, int]:
        """Channel order expected by OpenCV."""
        return (self.b, self.g, self.r)


def with_alpha(color: Color, alpha: float) -> RGBA:
    """
    Attach an opacity to a color.

    Args:
        color: Base color identity
        alpha: Opacity in [0, 1], clamped

    Returns:
        (r, g, b, a) tuple
    """
    alpha = min(max(float(alpha), 0.0), 1.0)
    return (color.r, color.g, color.b, alpha)


def to_css(color: Color, alpha: float = 1.0) -> str:
    r, g, b, a = with_alpha(color, alpha)
    return f"rgba({r}, {g}, {b}, {a:g})"


def palette_from_colormap(name: str = "tab10", size: int = 10) -> List[Color]:
    """
    Sample an ordered palette from a matplotlib colormap.

    Qualitative maps (tab10, tab20, Set1...) are sampled at their listed
    colors; continuous maps are sampled evenly.
    """
    import matplotlib.pyplot as plt

    cmap = plt.get_cmap(name)
    if size <= 0:
        raise ValueError(f"Palette size must be positive, got {size}")

    listed = getattr(cmap, "colors", None)
    # Continuous maps are also ListedColormaps, with 256 entries
    if listed is not None and size <= len(listed) < 256:
        return [Color.parse(c) for c in list(listed)[:size]]
    return [Color.parse(cmap(i / max(size - 1, 1))) for i in range(size)]


def build_palette(values: Iterable = (), colormap: str = "tab10", size: int = 10) -> List[Color]:
    """Parse a configured palette, falling back to a colormap when empty."""
    palette = [Color.parse(v) for v in values]
    if not palette:
        palette = palette_from_colormap(colormap, size)
    return palette


def palette_color(palette: Sequence[Color], index: int) -> Color:
    """Cyclic palette lookup."""
    if not palette:
        raise ValueError("Palette is empty")
    return palette[index % len(palette)]
