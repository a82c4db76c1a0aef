import math

import numpy as np
from PIL import Image


def grid_height(width: int, image_width: int, image_height: int) -> int:
    """Rows needed to keep the source aspect ratio at a given column count."""
    aspect = image_width / image_height
    return math.floor(width / aspect)


def sample_cells(image: Image.Image, width: int, height: int, sample_count: int) -> tuple[np.ndarray, np.ndarray]:
    """Sample an image into per-cell brightness values and colours.

    The image is resized so every cell covers sample_count x sample_count
    pixels. Returns:
        values: float64 array (height, width, sample_count**2), row-major
            within each cell. Each value is the inverted, alpha-weighted
            brightness 1 - ((r+g+b)/765 * a + 1 - a) with a in 0-1, so dark
            opaque pixels approach 1 and transparent pixels are 0.
        colours: uint8 array (height, width, 4), the RGBA of each cell's
            top-left sample pixel (not an average).
    """
    s = sample_count
    image = image.convert("RGBA")
    if (image.width, image.height) != (width * s, height * s):
        image = image.resize((width * s, height * s), Image.LANCZOS)
    pixels = np.asarray(image)

    rgba = pixels.astype(np.float64)
    alpha = rgba[:, :, 3] / 255.0
    brightness = rgba[:, :, :3].sum(axis=2) / 765.0
    value = 1 - (brightness * alpha + 1 - alpha)

    # (height, s, width, s) -> (height, width, s, s)
    cells = value.reshape(height, s, width, s).transpose(0, 2, 1, 3)
    values = cells.reshape(height, width, s * s)
    colours = pixels[::s, ::s].copy()
    return values, colours


def normalize(values: np.ndarray, contrast: float = 0.0, brightness: float = 0.0) -> np.ndarray:
    """Stretch a value map to 0-1, then apply contrast and brightness.

    Contrast and brightness lie in -1 to 1. A map with no spread (or one that
    is all zero) is returned unchanged, without contrast or brightness.
    """
    values = np.asarray(values, dtype=np.float64)
    if values.size == 0:
        return values.copy()
    lo = values.min()
    hi = values.max()
    if hi > 0 and lo != hi:
        scaled = (values - lo) / (hi - lo)
        adjusted = (contrast + 1) * (scaled - 0.5) + 0.5 + brightness
        return np.clip(adjusted, 0.0, 1.0)
    return values.copy()
