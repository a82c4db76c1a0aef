from typing import Sequence

import numpy as np
from PIL import Image

from asciigen.colours import compose_colours
from asciigen.engine import CellGrid, ExportFrame, Grid
from asciigen.model import GlyphSet
from asciigen.palettes import Colour, Palette
from asciigen.sampling import grid_height, normalize, sample_cells
from asciigen.settings import CHAR_PIXEL_SIZE, RenderSettings


def compute_grid(image: Image.Image, width: int, sample_count: int = 1) -> Grid:
    """Sample an image into a grid `width` characters wide.

    The height follows the image's aspect ratio, rounded down. A grid with no
    rows (very wide images) is returned empty.
    """
    if not 1 <= sample_count <= 3:
        raise ValueError(f"sample_count must be between 1 and 3, got {sample_count}")
    if width < 1:
        raise ValueError(f"width must be positive, got {width}")
    height = grid_height(width, image.width, image.height)
    if height == 0:
        return Grid(
            width=width,
            height=0,
            sample_count=sample_count,
            values=np.zeros((0, width, sample_count**2)),
            colours=np.zeros((0, width, 4), dtype=np.uint8),
        )
    values, colours = sample_cells(image, width, height, sample_count)
    return Grid(width=width, height=height, sample_count=sample_count, values=values, colours=colours)


def render_cell(
    values: Sequence[float],
    raw_colour: Sequence[int],
    glyphs: GlyphSet,
    palette: Palette,
    ink: Colour,
    tint: float = 1.0,
    alpha_adjust: float = 0.0,
) -> tuple[str, tuple[int, int, int, float]]:
    """Pick the character and render colour for one tone-mapped cell."""
    char = glyphs.nearest_character(values)
    rgb, alpha = compose_colours(np.array([raw_colour], dtype=np.uint8), palette, ink, tint, alpha_adjust)
    r, g, b = (int(v) for v in rgb[0])
    return char, (r, g, b, float(alpha[0]))


def render_frame(grid: Grid, glyphs: GlyphSet, settings: RenderSettings) -> CellGrid:
    """Tone-map a grid and render every cell. Cells match render_cell one for one."""
    normalized = normalize(grid.values, settings.contrast, settings.brightness)
    chars = glyphs.nearest_grid(normalized)
    colours, alpha = compose_colours(
        grid.colours, settings.palette, settings.ink_rgb, settings.tint, settings.alpha
    )
    return CellGrid(chars=chars, colours=colours, alpha=alpha)


def capture_export_frame(
    grid_width: int, grid_height: int, char_pixel_size: int = CHAR_PIXEL_SIZE, scale: int = 2
) -> ExportFrame:
    return ExportFrame(
        width=grid_width * char_pixel_size * scale,
        height=grid_height * char_pixel_size * scale,
    )


def format_plain(frame: CellGrid) -> str:
    return "\n".join(frame.chars)


def format_colour(frame: CellGrid, background: Colour | None = None) -> str:
    """Wrap each character in ANSI truecolor escape sequences."""
    bg = "\033[48;2;{};{};{}m".format(*background) if background is not None else ""
    out = []
    for r, line in enumerate(frame.chars):
        parts = [bg]
        for c, char in enumerate(line):
            fr, fg, fb = (int(v) for v in frame.colours[r, c])
            parts.append(f"\033[38;2;{fr};{fg};{fb}m{char}")
        parts.append("\033[0m")
        out.append("".join(parts))
    return "\n".join(out)
