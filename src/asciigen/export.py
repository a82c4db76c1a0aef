import logging
from datetime import datetime, timezone
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from asciigen.engine import CellGrid, ExportFrame
from asciigen.glyph_atlas import load_font
from asciigen.palettes import Colour

logger = logging.getLogger(__name__)


def export_filename(now: datetime | None = None) -> str:
    """File name stamped with the UTC time to the second, e.g. ascii-art-2024-01-15T10-30-00.png."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    stamp = now.strftime("%Y-%m-%dT%H:%M:%S").replace(":", "-")
    return f"ascii-art-{stamp}.png"


def render_png(
    frame: CellGrid,
    export_frame: ExportFrame,
    scale: int,
    background: Colour = (255, 255, 255),
    transparent: bool = False,
) -> Image.Image:
    """Draw a rendered frame onto a canvas exactly the size of export_frame.

    Cell size comes from the export frame, so the canvas keeps the same
    dimensions whatever the current grid resolution or scale. Characters are
    drawn with their render colour's RGB; alpha is not applied.
    """
    size = (export_frame.width, export_frame.height)
    if transparent:
        canvas = Image.new("RGBA", size, (0, 0, 0, 0))
    else:
        canvas = Image.new("RGBA", size, tuple(background) + (255,))
    if frame.rows == 0 or frame.cols == 0:
        return canvas

    unit_w, unit_h = export_frame.cell_size(frame.cols, frame.rows, scale)
    cell_w, cell_h = unit_w * scale, unit_h * scale
    font = load_font(max(1, round(cell_w)))
    if font is None:
        logger.warning("No scalable font available, using Pillow's bitmap font")
        font = ImageFont.load_default()

    draw = ImageDraw.Draw(canvas)
    for r, line in enumerate(frame.chars):
        y = r * cell_h
        for c, char in enumerate(line):
            if char == " ":
                continue
            fill = tuple(int(v) for v in frame.colours[r, c]) + (255,)
            draw.text((c * cell_w, y), char, fill=fill, font=font)
    return canvas


def save_png(image: Image.Image, directory: str | Path = ".", now: datetime | None = None) -> Path:
    path = Path(directory) / export_filename(now)
    path.parent.mkdir(parents=True, exist_ok=True)
    image.save(path, format="PNG")
    logger.info("Exported %dx%d image to %s", image.width, image.height, path)
    return path
