import logging
import os
import shutil
import subprocess

import numpy as np
from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

CELL_SIZE = 12
FONT_SIZE = 12
# Text origin inside the cell: x offset and alphabetic baseline
ORIGIN = (2, 10)

_FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationMono-Regular.ttf",
    "/usr/share/fonts/TTF/DejaVuSansMono.ttf",
    "/usr/share/fonts/dejavu-sans-mono-fonts/DejaVuSansMono.ttf",
    "/Library/Fonts/Courier New.ttf",
    "C:\\Windows\\Fonts\\cour.ttf",
]


def find_monospace_font() -> str | None:
    """Locate a monospace TrueType font, asking fontconfig if no known path exists."""
    for path in _FONT_CANDIDATES:
        if os.path.exists(path):
            return path
    if shutil.which("fc-match"):
        result = subprocess.run(["fc-match", "-f", "%{file}", "monospace"], capture_output=True, text=True)
        if result.returncode == 0 and result.stdout.strip():
            return result.stdout.strip()
    return None


def load_font(size: float = FONT_SIZE, font_path: str | None = None) -> ImageFont.FreeTypeFont | None:
    """Load a monospace font at the given size.

    Falls back to Pillow's bundled FreeType font when no monospace font is
    installed. Returns None when no FreeType font can be loaded at all.
    """
    path = font_path or find_monospace_font()
    if path is not None:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            logger.warning("Could not load font %s", path)
    try:
        font = ImageFont.load_default(size)
    except (OSError, TypeError):
        return None
    if isinstance(font, ImageFont.FreeTypeFont):
        return font
    return None


def rasterize_glyph(char: str, sample_count: int, font: ImageFont.FreeTypeFont | None) -> list[float]:
    """Render a character and measure its ink coverage per sub-cell.

    The cell is split into sample_count x sample_count equal regions. Each
    value is the mean alpha of its region divided by 255, listed row by row.
    Returns an empty list when there is no font to render with.
    """
    if not 1 <= sample_count <= 3:
        raise ValueError(f"sample_count must be between 1 and 3, got {sample_count}")
    if font is None:
        logger.warning("No font available to render %r", char)
        return []

    img = Image.new("RGBA", (CELL_SIZE, CELL_SIZE), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    draw.text(ORIGIN, char, fill=(0, 0, 0, 255), font=font, anchor="ls")
    alpha = np.asarray(img, dtype=np.float64)[:, :, 3]

    step = CELL_SIZE // sample_count
    regions = alpha.reshape(sample_count, step, sample_count, step)
    return [float(v) for v in (regions.mean(axis=(1, 3)) / 255.0).ravel()]
