import numpy as np
import pytest
from PIL import Image

from asciigen.converter import (
    capture_export_frame,
    compute_grid,
    format_colour,
    format_plain,
    render_cell,
    render_frame,
)
from asciigen.model import GlyphSet
from asciigen.palettes import Palette
from asciigen.sampling import normalize
from asciigen.settings import RenderSettings


def make_glyphs():
    """Ten flat glyphs, light to dark, evenly spaced like the default ramp."""
    return GlyphSet.from_vectors({c: (i / 9,) for i, c in enumerate(" .:-=+*#%@")}, sample_count=1)


def test_grid_dimensions_follow_aspect():
    img = Image.new("RGB", (400, 200), (128, 128, 128))
    grid = compute_grid(img, 100, 2)
    assert (grid.width, grid.height, grid.sample_count) == (100, 50, 2)
    assert grid.values.shape == (50, 100, 4)
    assert grid.colours.shape == (50, 100, 4)


def test_very_wide_image_gives_empty_grid():
    img = Image.new("RGB", (1000, 5))
    grid = compute_grid(img, 50, 1)
    assert grid.empty
    frame = render_frame(grid, make_glyphs(), RenderSettings())
    assert frame.chars == []
    assert format_plain(frame) == ""


def test_bad_sample_count():
    with pytest.raises(ValueError, match="sample_count"):
        compute_grid(Image.new("RGB", (10, 10)), 10, 0)


def test_solid_red_end_to_end():
    glyphs = make_glyphs()
    img = Image.new("RGBA", (2, 2), (255, 0, 0, 255))
    grid = compute_grid(img, 2, 1)
    assert (grid.width, grid.height) == (2, 2)
    np.testing.assert_allclose(grid.values, 2 / 3)

    settings = RenderSettings(palette=Palette.GREY_2BIT, tint=1.0, alpha=0.0)
    frame = render_frame(grid, glyphs, settings)
    # Flat map passes through tone mapping, so 2/3 is matched directly
    expected_char = glyphs.nearest_character([2 / 3])
    assert expected_char == "*"
    assert frame.chars == ["**", "**"]
    assert list(frame) == [("*", (0, 0, 0, 1.0))] * 4


def test_transparent_image_end_to_end():
    glyphs = make_glyphs()
    img = Image.new("RGBA", (37, 23), (90, 10, 200, 0))
    grid = compute_grid(img, 20, 1)
    np.testing.assert_array_equal(grid.values, 0.0)
    for palette in Palette:
        if palette is Palette.MONOCHROME:
            continue
        frame = render_frame(grid, glyphs, RenderSettings(palette=palette))
        assert set("".join(frame.chars)) == {" "}
        np.testing.assert_array_equal(frame.colours, 255)


def test_render_cell_monochrome_uses_ink():
    char, colour = render_cell([1.0], (255, 0, 0, 255), make_glyphs(), Palette.MONOCHROME, (1, 2, 3), tint=0.5)
    assert char == "@"
    assert colour == (1, 2, 3, 1.0)


def test_render_cell_quantizes_and_tints():
    char, colour = render_cell([0.0], (250, 40, 30, 255), make_glyphs(), Palette.COLOR_3BIT, (0, 0, 0), tint=0.5)
    assert char == " "
    # Nearest 3-bit entry is (255, 48, 21), halved toward black
    assert colour == (127, 24, 10, 1.0)


def test_render_cell_alpha_adjust():
    _, colour = render_cell([0.5], (10, 20, 30, 102), make_glyphs(), Palette.COLOR_FULL, (0, 0, 0), alpha_adjust=0.1)
    assert colour[:3] == (10, 20, 30)
    assert colour[3] == pytest.approx(0.5)


def test_render_frame_matches_render_cell():
    rng = np.random.default_rng(1)
    pixels = rng.integers(0, 256, size=(12, 16, 4), dtype=np.uint8)
    img = Image.fromarray(pixels)
    grid = compute_grid(img, 16, 1)
    glyphs = make_glyphs()
    settings = RenderSettings(palette=Palette.COLOR_4BIT, contrast=0.3, brightness=-0.1, tint=0.7, ink="#204060")
    frame = render_frame(grid, glyphs, settings)

    normalized = normalize(grid.values, settings.contrast, settings.brightness)
    cells = list(frame)
    assert len(cells) == grid.width * grid.height
    for i, (char, colour) in enumerate(cells):
        r, c = divmod(i, grid.width)
        expected = render_cell(
            normalized[r, c], grid.colours[r, c], glyphs, settings.palette, settings.ink_rgb, settings.tint, settings.alpha
        )
        assert (char, colour) == expected


def test_style_changes_do_not_touch_grid():
    img = Image.new("RGB", (30, 30), (200, 100, 50))
    grid = compute_grid(img, 10, 1)
    before = grid.values.copy()
    render_frame(grid, make_glyphs(), RenderSettings(contrast=1.0, brightness=1.0))
    np.testing.assert_array_equal(grid.values, before)


def test_capture_export_frame():
    frame = capture_export_frame(200, 150, 4, 2)
    assert (frame.width, frame.height) == (1600, 1200)
    assert frame.cell_size(200, 150, 2) == (4.0, 4.0)
    assert frame.cell_size(100, 75, 3) == pytest.approx((16 / 3, 16 / 3))


@pytest.mark.parametrize("scale", [1, 2, 5])
def test_scaled_cell_size_follows_frame(scale):
    frame = capture_export_frame(200, 150, 4, 2)
    width, height = frame.cell_size(100, 75, scale)
    assert width * scale == pytest.approx(16.0)
    assert height * scale == pytest.approx(16.0)


def test_colour_output_contains_ansi_escapes():
    img = Image.new("RGB", (20, 20), (255, 0, 0))
    frame = render_frame(compute_grid(img, 4, 1), make_glyphs(), RenderSettings(palette=Palette.COLOR_FULL))
    result = format_colour(frame, background=(255, 255, 255))
    assert "\033[38;2;255;0;0m" in result
    assert "\033[48;2;255;255;255m" in result
    assert result.count("\033[0m") == 4


def test_plain_output_has_no_escapes():
    img = Image.new("RGB", (20, 10), (0, 0, 0))
    frame = render_frame(compute_grid(img, 4, 1), make_glyphs(), RenderSettings(palette=Palette.MONOCHROME))
    result = format_plain(frame)
    assert "\033" not in result
    assert result.split("\n") == ["@@@@", "@@@@"]
