# frameslot/infrastructure/cv/image_process.py
import io
from typing import Iterable, Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

from frameslot.domain.errors import DecodeFailure

TEMPLATE_FORMAT = "PNG"

def decode_template(image_bytes: bytes) -> np.ndarray:
    """Decode PNG bytes into an (height, width, 4) RGBA uint8 buffer."""
    if not image_bytes:
        raise DecodeFailure("Template image is empty.")
    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            if img.format != TEMPLATE_FORMAT:
                raise DecodeFailure(f"Unsupported template format: {img.format}. Only PNG is accepted.")
            rgba = img.convert("RGBA")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise DecodeFailure(f"Template image could not be read: {e}") from e
    return np.array(rgba, dtype=np.uint8)

def ensure_rgba(pixels: np.ndarray) -> np.ndarray:
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise DecodeFailure(f"Expected an RGBA buffer, got shape {pixels.shape}.")
    if pixels.dtype != np.uint8:
        pixels = pixels.astype(np.uint8)
    return pixels

def marker_mask(pixels: np.ndarray, colors: Iterable[Tuple[int, int, int]], tolerance: int, min_alpha: int) -> np.ndarray:
    """Boolean map of pixels matching any reserved color within tolerance."""
    pixels = ensure_rgba(pixels)
    rgb = pixels[..., :3].astype(np.int16)
    visible = pixels[..., 3] >= min_alpha

    matches = np.zeros(pixels.shape[:2], dtype=bool)
    for color in colors:
        target = np.asarray(color, dtype=np.int16)
        matches |= np.all(np.abs(rgb - target) <= tolerance, axis=-1)
    return matches & visible
