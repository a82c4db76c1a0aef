import pytest

from asciigen.glyph_atlas import find_monospace_font, load_font
from asciigen.model import GlyphSet

FONT_PATH = find_monospace_font()
needs_font = pytest.mark.skipif(FONT_PATH is None, reason="No monospace font found on system")


@pytest.fixture
def font():
    return load_font(font_path=FONT_PATH)


@pytest.fixture
def ramp():
    """Three flat glyphs: blank, half and full coverage."""
    return GlyphSet.from_vectors({" ": (0.0,), "+": (0.5,), "#": (1.0,)}, sample_count=1)


def make_ramp_glyphs(characters=" .:-=+*#%@", sample_count=1, font_path=None):
    """Flat glyph set with evenly spaced coverage, shaped for sample_count."""
    last = max(1, len(characters) - 1)
    vectors = {c: (i / last,) * sample_count**2 for i, c in enumerate(characters)}
    return GlyphSet.from_vectors(vectors, sample_count=sample_count)
