from dataclasses import dataclass

from asciigen.charsets import DEFAULT
from asciigen.colours import parse_colour
from asciigen.palettes import Colour, Palette

WIDTH_RANGE = (50, 300)
SAMPLE_RANGE = (1, 3)
CONTRAST_RANGE = (-1.0, 1.0)
BRIGHTNESS_RANGE = (-1.0, 1.0)
ALPHA_RANGE = (-1.0, 1.0)
TINT_RANGE = (0.0, 2.0)
SCALE_RANGE = (1, 10)

# Pixels per character cell in the export canvas, before scaling
CHAR_PIXEL_SIZE = 4

# Changes to these rebuild the grid; everything else only re-renders it
LAYOUT_FIELDS = frozenset({"characters", "width", "sample_count"})
STYLE_FIELDS = frozenset(
    {"contrast", "brightness", "palette", "ink", "background", "transparent", "tint", "alpha", "export_scale"}
)


@dataclass(frozen=True)
class RenderSettings:
    characters: str = DEFAULT
    width: int = 200
    sample_count: int = 1
    contrast: float = 0.0
    brightness: float = 0.0
    palette: Palette = Palette.GREY_2BIT
    ink: str = "#000000"
    background: str = "#ffffff"
    transparent: bool = False
    tint: float = 1.0
    alpha: float = 0.0
    export_scale: int = 2

    @property
    def ink_rgb(self) -> Colour:
        return parse_colour(self.ink)

    @property
    def background_rgb(self) -> Colour:
        return parse_colour(self.background)

    def validate(self) -> "RenderSettings":
        """Raise ValueError if any numeric setting is out of range."""
        checks = [
            ("width", self.width, WIDTH_RANGE),
            ("sample_count", self.sample_count, SAMPLE_RANGE),
            ("contrast", self.contrast, CONTRAST_RANGE),
            ("brightness", self.brightness, BRIGHTNESS_RANGE),
            ("alpha", self.alpha, ALPHA_RANGE),
            ("tint", self.tint, TINT_RANGE),
            ("export_scale", self.export_scale, SCALE_RANGE),
        ]
        for name, value, (lo, hi) in checks:
            if not lo <= value <= hi:
                raise ValueError(f"{name} must be between {lo} and {hi}, got {value}")
        if not self.characters:
            raise ValueError("characters must not be empty")
        return self
