import math
from enum import Enum

import numpy as np

Colour = tuple[int, int, int]

GREY_2BIT: tuple[Colour, ...] = (
    (0, 0, 0),
    (104, 104, 104),
    (184, 184, 184),
    (255, 255, 255),
)

GREY_4BIT: tuple[Colour, ...] = tuple((i * 17, i * 17, i * 17) for i in range(16))

GREY_8BIT: tuple[Colour, ...] = tuple((i, i, i) for i in range(256))

# Hand-picked hues, not the pure RGB corners
COLOR_3BIT: tuple[Colour, ...] = (
    (0, 0, 0),
    (0, 249, 45),
    (0, 252, 254),
    (255, 48, 21),
    (255, 62, 253),
    (254, 253, 52),
    (16, 37, 251),
    (255, 255, 255),
)

COLOR_4BIT: tuple[Colour, ...] = COLOR_3BIT + tuple((i * 32, i * 32, i * 32) for i in range(1, 8))


class Palette(Enum):
    MONOCHROME = "none"
    GREY_2BIT = "grey2bit"
    GREY_4BIT = "grey4bit"
    GREY_8BIT = "grey8bit"
    COLOR_3BIT = "color3bit"
    COLOR_4BIT = "color4bit"
    COLOR_FULL = "color"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def colours(self) -> tuple[Colour, ...] | None:
        """Fixed colour table, or None for palettes that never quantize."""
        return _TABLES[self]


_LABELS = {
    Palette.MONOCHROME: "Monochrome",
    Palette.GREY_2BIT: "Grey 2-Bit",
    Palette.GREY_4BIT: "Grey 4-Bit",
    Palette.GREY_8BIT: "Grey 8-Bit",
    Palette.COLOR_3BIT: "Color 3-Bit",
    Palette.COLOR_4BIT: "Color 4-Bit",
    Palette.COLOR_FULL: "Color Full",
}

_TABLES: dict[Palette, tuple[Colour, ...] | None] = {
    Palette.MONOCHROME: None,
    Palette.GREY_2BIT: GREY_2BIT,
    Palette.GREY_4BIT: GREY_4BIT,
    Palette.GREY_8BIT: GREY_8BIT,
    Palette.COLOR_3BIT: COLOR_3BIT,
    Palette.COLOR_4BIT: COLOR_4BIT,
    Palette.COLOR_FULL: None,
}

_ARRAYS = {p: np.array(t, dtype=np.int32) for p, t in _TABLES.items() if t is not None}
for _arr in _ARRAYS.values():
    _arr.flags.writeable = False

# Rows quantized per step; keeps the (rows, entries) distance matrix small for Grey 8-Bit
_CHUNK = 4096


def quantize(palette: Palette, rgb) -> Colour:
    """Nearest palette entry by Manhattan distance over R, G, B.

    Alpha, if present, is ignored. The first entry wins ties. Palettes
    without a table return the input channels unchanged.
    """
    table = palette.colours
    r, g, b = int(rgb[0]), int(rgb[1]), int(rgb[2])
    if table is None:
        return (r, g, b)
    best = table[0]
    best_dist = math.inf
    for entry in table:
        dist = abs(r - entry[0]) + abs(g - entry[1]) + abs(b - entry[2])
        if dist < best_dist:
            best_dist = dist
            best = entry
    return best


def quantize_array(palette: Palette, colours: np.ndarray) -> np.ndarray:
    """Quantize an array of shape (..., 3 or 4) to shape (..., 3) int32."""
    rgb = np.asarray(colours)[..., :3].astype(np.int32)
    table = _ARRAYS.get(palette)
    if table is None:
        return rgb

    flat = rgb.reshape(-1, 3)
    out = np.empty_like(flat)
    for start in range(0, len(flat), _CHUNK):
        chunk = flat[start : start + _CHUNK]
        # (n, entries) Manhattan distances; argmin returns the first minimum
        dist = np.abs(chunk[:, np.newaxis, :] - table[np.newaxis, :, :]).sum(axis=2)
        out[start : start + _CHUNK] = table[np.argmin(dist, axis=1)]
    return out.reshape(rgb.shape)
