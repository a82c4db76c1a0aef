import logging
import re

import numpy as np

from asciigen.palettes import Colour, Palette, quantize_array

logger = logging.getLogger(__name__)

_HEX = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)
_RGBA = re.compile(r"^rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)")

BLACK: Colour = (0, 0, 0)
WHITE: Colour = (255, 255, 255)


def parse_colour(text: str) -> Colour:
    """Parse "#rrggbb", "rrggbb" or "rgb(a)(r, g, b...)". Anything else is black."""
    text = text.strip()
    match = _HEX.match(text)
    if match:
        return tuple(int(part, 16) for part in match.groups())
    match = _RGBA.match(text)
    if match:
        return tuple(min(255, int(part)) for part in match.groups())
    logger.debug("Unrecognised colour %r, using black", text)
    return BLACK


def tint_channels(channels: np.ndarray, ink: Colour, tint: float) -> np.ndarray:
    """Blend channels with the ink colour.

    tint 1 leaves channels as they are, below 1 pulls them toward the ink and
    above 1 pushes them away from it. Results are floored and clamped to 0-255.
    """
    if tint == 1:
        return channels
    ink_arr = np.array(ink, dtype=np.float64)
    blended = np.floor(channels * tint + ink_arr * (1 - tint))
    return np.clip(blended, 0, 255)


def compose_colours(
    raw: np.ndarray,
    palette: Palette,
    ink: Colour,
    tint: float = 1.0,
    alpha_adjust: float = 0.0,
) -> tuple[np.ndarray, np.ndarray]:
    """Turn raw RGBA samples into render colours.

    Args:
        raw: uint8 array (..., 4)

    Returns:
        rgb: uint8 array (..., 3)
        alpha: float64 array (...), 0-1
    """
    raw = np.asarray(raw)
    shape = raw.shape[:-1]
    if palette is Palette.MONOCHROME:
        rgb = np.broadcast_to(np.array(ink, dtype=np.uint8), shape + (3,)).copy()
        return rgb, np.ones(shape)

    source_alpha = raw[..., 3].astype(np.float64)
    alpha = np.clip(source_alpha / 255 + alpha_adjust, 0.0, 1.0)

    base = quantize_array(palette, raw).astype(np.float64)
    channels = tint_channels(base, ink, tint)
    # Fully transparent samples draw as white ink, tinted or not
    channels[source_alpha <= 0] = WHITE
    return channels.astype(np.uint8), alpha
