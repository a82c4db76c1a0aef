"""Stateful image-to-text pipeline.

Holds the current grid, export frame and rendered frame for one loaded image
and recomputes them in dependency order:

* a new image rebuilds the grid, captures a new export frame and re-renders
* a layout change (width, sample count, characters) rebuilds the grid and
  re-renders, keeping the export frame
* a style change (tone, palette, colours) only re-renders

Decodes are tagged with increasing tickets so a slow decode that finishes
after a newer one was requested cannot replace fresher state.
"""

import dataclasses
import io
import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import BinaryIO

from PIL import Image

from asciigen.converter import capture_export_frame, compute_grid, render_frame
from asciigen.engine import CellGrid, ExportFrame, Grid
from asciigen.export import render_png, save_png
from asciigen.model import GlyphSet, build_glyph_set
from asciigen.settings import CHAR_PIXEL_SIZE, LAYOUT_FIELDS, STYLE_FIELDS, RenderSettings

logger = logging.getLogger(__name__)

ImageSource = Image.Image | str | Path | bytes | BinaryIO


class State(Enum):
    IDLE = "idle"
    DECODING = "decoding"
    READY = "ready"


def decode_image(source: ImageSource) -> Image.Image:
    """Open and fully decode an image. Only the first frame of animations is used."""
    if isinstance(source, Image.Image):
        return source
    if isinstance(source, bytes):
        source = io.BytesIO(source)
    image = Image.open(source)
    image.load()
    return image


class Pipeline:
    def __init__(self, settings: RenderSettings | None = None, font_path: str | None = None):
        self.settings = (settings or RenderSettings()).validate()
        self.font_path = font_path
        self.state = State.IDLE
        self.image: Image.Image | None = None
        self.grid: Grid | None = None
        self.export_frame: ExportFrame | None = None
        self.frame: CellGrid | None = None
        self._requested = 0
        self._settled_state = State.IDLE

    @property
    def glyphs(self) -> GlyphSet:
        return build_glyph_set(self.settings.characters, self.settings.sample_count, self.font_path)

    def request_decode(self) -> int:
        """Start a decode and return its ticket. Any earlier ticket becomes stale."""
        self._requested += 1
        if self.state is not State.DECODING:
            self._settled_state = self.state
        self.state = State.DECODING
        return self._requested

    def complete_decode(self, ticket: int, source: ImageSource) -> bool:
        """Finish the decode for a ticket. Returns True if the new image was applied."""
        if ticket != self._requested:
            logger.warning("Discarding stale decode %d (latest is %d)", ticket, self._requested)
            return False
        try:
            image = decode_image(source)
        except (OSError, Image.DecompressionBombError) as exc:
            logger.warning("Could not decode image: %s", exc)
            self.state = self._settled_state
            return False

        grid = compute_grid(image, self.settings.width, self.settings.sample_count)
        export_frame = capture_export_frame(grid.width, grid.height, CHAR_PIXEL_SIZE, self.settings.export_scale)
        frame = render_frame(grid, self.glyphs, self.settings)
        self.image, self.grid, self.export_frame, self.frame = image, grid, export_frame, frame
        self.state = State.READY
        logger.debug("Loaded %dx%d image as %dx%d grid", image.width, image.height, grid.width, grid.height)
        return True

    def load(self, source: ImageSource) -> bool:
        return self.complete_decode(self.request_decode(), source)

    def update_layout(self, **changes) -> None:
        """Change width, sample_count or characters and rebuild the grid."""
        unknown = set(changes) - LAYOUT_FIELDS
        if unknown:
            raise ValueError(f"Not layout settings: {', '.join(sorted(unknown))}")
        self.settings = dataclasses.replace(self.settings, **changes).validate()
        if self.image is None:
            return
        grid = compute_grid(self.image, self.settings.width, self.settings.sample_count)
        frame = render_frame(grid, self.glyphs, self.settings)
        self.grid, self.frame = grid, frame
        logger.debug("Rebuilt grid at %dx%d", grid.width, grid.height)

    def update_style(self, **changes) -> None:
        """Change tone, palette or colour settings and re-render the current grid."""
        unknown = set(changes) - STYLE_FIELDS
        if unknown:
            raise ValueError(f"Not style settings: {', '.join(sorted(unknown))}")
        self.settings = dataclasses.replace(self.settings, **changes).validate()
        if self.grid is None:
            return
        self.frame = render_frame(self.grid, self.glyphs, self.settings)

    def render_png(self) -> Image.Image:
        if self.frame is None or self.export_frame is None:
            raise RuntimeError("No image loaded")
        if self.grid.empty or self.export_frame.empty:
            logger.warning(
                "Nothing to export: %dx%d grid, %dx%d export frame",
                self.grid.width,
                self.grid.height,
                self.export_frame.width,
                self.export_frame.height,
            )
            raise RuntimeError("Nothing to export: empty grid or export frame")
        return render_png(
            self.frame,
            self.export_frame,
            self.settings.export_scale,
            background=self.settings.background_rgb,
            transparent=self.settings.transparent,
        )

    def export(self, directory: str | Path = ".", now: datetime | None = None) -> Path:
        return save_png(self.render_png(), directory, now)
