import logging
import math
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence

import numpy as np
from PIL import ImageFont

from asciigen.charsets import DEFAULT
from asciigen.glyph_atlas import load_font, rasterize_glyph

logger = logging.getLogger(__name__)


def _normalize(raw: Mapping[str, Sequence[float]]) -> dict[str, tuple[float, ...]]:
    """Rescale all vectors together so the set spans 0-1.

    A single min and max is taken over every value of every glyph. Sets that
    are blank or uniform are returned unchanged.
    """
    values = [v for vector in raw.values() for v in vector]
    if not values:
        return {char: tuple(vector) for char, vector in raw.items()}
    lo, hi = min(values), max(values)
    if hi > 0 and lo != hi:
        diff = hi - lo
        return {char: tuple((v - lo) / diff for v in vector) for char, vector in raw.items()}
    return {char: tuple(vector) for char, vector in raw.items()}


@dataclass(frozen=True)
class GlyphSet:
    sample_count: int
    characters: Mapping[str, tuple[float, ...]] = field(default_factory=dict)

    def __post_init__(self):
        # Shared through the cache, so the mapping is read-only
        object.__setattr__(self, "characters", MappingProxyType(dict(self.characters)))
        # Matrix form for grid matching, rows in character order
        matrix = np.array(list(self.characters.values()), dtype=np.float64).reshape(
            len(self.characters), self.sample_count**2
        )
        matrix.flags.writeable = False
        object.__setattr__(self, "_chars", np.array(list(self.characters)))
        object.__setattr__(self, "_matrix", matrix)

    @classmethod
    def from_vectors(cls, vectors: Mapping[str, Sequence[float]], sample_count: int) -> "GlyphSet":
        """Build from raw coverage vectors, dropping empty ones and normalizing the rest."""
        size = sample_count**2
        kept: dict[str, Sequence[float]] = {}
        for char, vector in vectors.items():
            if len(vector) == 0:
                logger.warning("Excluding %r from glyph set: no coverage data", char)
                continue
            if len(vector) != size:
                raise ValueError(f"Vector for {char!r} has {len(vector)} values, expected {size}")
            kept[char] = vector
        return cls(sample_count=sample_count, characters=_normalize(kept))

    @classmethod
    def build(
        cls,
        characters: Iterable[str] = DEFAULT,
        sample_count: int = 1,
        font: ImageFont.FreeTypeFont | None = None,
    ) -> "GlyphSet":
        if font is None:
            font = load_font()
        raw = {char: rasterize_glyph(char, sample_count, font) for char in dict.fromkeys(characters)}
        return cls.from_vectors(raw, sample_count)

    def __len__(self) -> int:
        return len(self.characters)

    def nearest_character(self, values: Sequence[float]) -> str:
        """Character whose coverage is closest by summed absolute difference.

        Ties go to the character that comes first in the set.
        """
        best_char = ""
        best_dist = math.inf
        for char, vector in self.characters.items():
            dist = sum(abs(a - b) for a, b in zip(vector, values))
            if dist < best_dist:
                best_dist = dist
                best_char = char
        return best_char

    def nearest_grid(self, values: np.ndarray) -> list[str]:
        """Match every cell of a (rows, cols, samples) map. Returns one string per row."""
        rows, _, samples = values.shape
        if samples != self.sample_count**2:
            raise ValueError(f"Value map has {samples} samples per cell, expected {self.sample_count**2}")
        if len(self.characters) == 0:
            return ["" for _ in range(rows)]
        # (rows, cols, num_chars); argmin keeps the first of equal distances
        dist = np.abs(values[:, :, np.newaxis, :] - self._matrix[np.newaxis, np.newaxis, :, :]).sum(axis=3)
        indices = np.argmin(dist, axis=2)
        picked = self._chars[indices]
        return ["".join(picked[r]) for r in range(rows)]


@lru_cache(maxsize=32)
def build_glyph_set(characters: str = DEFAULT, sample_count: int = 1, font_path: str | None = None) -> GlyphSet:
    """Shared, read-only glyph set for a character sequence and sample count."""
    font = load_font(font_path=font_path)
    logger.debug("Rasterizing %d characters at %dx%d samples", len(characters), sample_count, sample_count)
    return GlyphSet.build(characters, sample_count, font=font)
