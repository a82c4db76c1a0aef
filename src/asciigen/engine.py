from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

import numpy as np


@dataclass(frozen=True)
class Grid:
    width: int
    height: int
    sample_count: int
    values: np.ndarray  # (height, width, sample_count**2) float64, before tone mapping
    colours: np.ndarray  # (height, width, 4) uint8 RGBA, top-left sample of each cell

    @property
    def empty(self) -> bool:
        return self.width == 0 or self.height == 0


@dataclass(frozen=True)
class ExportFrame:
    width: int
    height: int

    @property
    def empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def cell_size(self, grid_width: int, grid_height: int, scale: int) -> tuple[float, float]:
        """Cell size per unit of scale when drawing a grid into this frame."""
        return (
            self.width / grid_width / scale,
            self.height / grid_height / scale,
        )


@dataclass
class CellGrid:
    chars: list[str]  # one string per row
    colours: np.ndarray  # (rows, cols, 3) uint8
    alpha: np.ndarray  # (rows, cols) float, 0-1

    def __iter__(self) -> Iterator[tuple[str, tuple[int, int, int, float]]]:
        """Yield (character, (r, g, b, a)) for every cell, row by row."""
        for r, line in enumerate(self.chars):
            for c, char in enumerate(line):
                red, green, blue = (int(v) for v in self.colours[r, c])
                yield char, (red, green, blue, float(self.alpha[r, c]))

    @property
    def rows(self) -> int:
        return len(self.chars)

    @property
    def cols(self) -> int:
        return len(self.chars[0]) if self.chars else 0
