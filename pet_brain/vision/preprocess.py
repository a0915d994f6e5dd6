from __future__ import annotations

from io import BytesIO

import numpy as np
from PIL import Image, UnidentifiedImageError

from pet_brain.core.errors import DecodeError

INPUT_SIZE = 224
TENSOR_SHAPE = (1, 3, INPUT_SIZE, INPUT_SIZE)

# ImageNet normalization used by the MobileNet family.
MEAN = np.array([0.485, 0.456, 0.406], dtype=np.float32)
STD = np.array([0.229, 0.224, 0.225], dtype=np.float32)

# Greyscale modes holding 16-bit samples; Pillow's convert() clips these.
WIDE_GREY_MODES = frozenset({"I", "I;16", "I;16B", "I;16L", "I;16N"})


def _narrow_to_8bit(img: Image.Image) -> Image.Image:
    """Scale 16-bit greyscale samples down to 8-bit ("L") with rounding."""
    samples = np.asarray(img, dtype=np.float64)
    scaled = np.clip(np.rint(samples / 257.0), 0, 255).astype(np.uint8)
    return Image.fromarray(scaled)


def decode_image(data: bytes) -> Image.Image:
    """Decode arbitrary encoded image bytes into an RGB raster."""
    if not data:
        raise DecodeError("Empty image payload")
    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            if img.mode in WIDE_GREY_MODES:
                return _narrow_to_8bit(img).convert("RGB")
            return img.convert("RGB")
    except (
        UnidentifiedImageError,
        OSError,
        SyntaxError,
        ValueError,
        Image.DecompressionBombError,
    ) as exc:
        raise DecodeError(f"Could not decode image: {exc}") from exc


def resize_image(img: Image.Image) -> Image.Image:
    """Resize to the model input with a triangle (bilinear) filter."""
    if img.size == (INPUT_SIZE, INPUT_SIZE):
        return img
    return img.resize((INPUT_SIZE, INPUT_SIZE), resample=Image.Resampling.BILINEAR)


def to_tensor(img: Image.Image) -> np.ndarray:
    """
    Normalize an RGB raster into a (1, 3, H, W) float32 tensor.

    Pillow rasters index as [row, column, channel]; the tensor keeps rows on
    the height axis and columns on the width axis, so tensor[0, c, y, x] is
    the pixel at column x, row y.
    """
    pixels = np.asarray(img, dtype=np.float32)
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise DecodeError(f"Expected an RGB raster, got array of shape {pixels.shape}")
    normalized = (pixels / 255.0 - MEAN) / STD
    return np.ascontiguousarray(normalized.transpose(2, 0, 1)[np.newaxis], dtype=np.float32)


def preprocess(data: bytes) -> np.ndarray:
    return to_tensor(resize_image(decode_image(data)))
