from __future__ import annotations

from io import BytesIO

import numpy as np
import pytest
from PIL import Image

from pet_brain.core.errors import DecodeError
from pet_brain.vision.preprocess import MEAN, STD, TENSOR_SHAPE, decode_image, preprocess


def _expected(rgb: tuple[int, int, int]) -> np.ndarray:
    pixel = np.array(rgb, dtype=np.float32)
    return (pixel / 255.0 - MEAN) / STD


def _split_image(size: tuple[int, int], first, second, vertical: bool) -> bytes:
    """Two-colour image: left/right halves when vertical, top/bottom otherwise."""
    w, h = size
    img = Image.new("RGB", size, color=second)
    box = (0, 0, w // 2, h) if vertical else (0, 0, w, h // 2)
    img.paste(first, box)
    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def test_uniform_image_matches_normalization(image_bytes) -> None:
    tensor = preprocess(image_bytes(color=(40, 120, 200)))

    assert tensor.shape == TENSOR_SHAPE
    assert tensor.dtype == np.float32
    expected = _expected((40, 120, 200))
    for c in range(3):
        assert np.allclose(tensor[0, c], expected[c], atol=1e-6)


def test_non_square_input_is_resized(image_bytes) -> None:
    tensor = preprocess(image_bytes(color=(255, 0, 128), size=(640, 480), fmt="JPEG"))

    assert tensor.shape == TENSOR_SHAPE
    expected = _expected((255, 0, 128))
    # JPEG chroma subsampling shifts values slightly.
    for c in range(3):
        assert abs(float(tensor[0, c].mean()) - float(expected[c])) < 0.1


def test_small_input_is_upscaled(image_bytes) -> None:
    tensor = preprocess(image_bytes(color=(10, 20, 30), size=(7, 3)))
    assert tensor.shape == TENSOR_SHAPE
    assert np.allclose(tensor[0, 2], _expected((10, 20, 30))[2], atol=1e-5)


def test_columns_map_to_width_axis() -> None:
    red, blue = (255, 0, 0), (0, 0, 255)
    tensor = preprocess(_split_image((224, 224), red, blue, vertical=True))

    # Left columns are red, right columns blue, for every row.
    assert np.allclose(tensor[0, 0, :, 0], _expected(red)[0])
    assert np.allclose(tensor[0, 0, :, 223], _expected(blue)[0])
    assert np.allclose(tensor[0, 2, :, 0], _expected(red)[2])
    assert np.allclose(tensor[0, 2, :, 223], _expected(blue)[2])


def test_rows_map_to_height_axis() -> None:
    green, white = (0, 255, 0), (255, 255, 255)
    tensor = preprocess(_split_image((448, 224), green, white, vertical=False))

    assert np.allclose(tensor[0, 0, 0, :], _expected(green)[0], atol=1e-5)
    assert np.allclose(tensor[0, 0, 223, :], _expected(white)[0], atol=1e-5)


def test_resize_is_deterministic() -> None:
    rng = np.random.default_rng(7)
    noise = rng.integers(0, 256, size=(300, 500, 3), dtype=np.uint8)
    buf = BytesIO()
    Image.fromarray(noise).save(buf, format="PNG")
    data = buf.getvalue()

    assert np.array_equal(preprocess(data), preprocess(data))


@pytest.mark.parametrize("mode,color", [("L", 128), ("RGBA", (128, 128, 128, 10)), ("P", 3)])
def test_other_modes_convert_to_rgb(image_bytes, mode, color) -> None:
    img = decode_image(image_bytes(color=color, mode=mode))
    assert img.mode == "RGB"
    assert img.size == (224, 224)


@pytest.mark.parametrize("mode", ["I;16", "I"])
def test_sixteen_bit_grey_is_scaled_not_clipped(image_bytes, mode) -> None:
    tensor = preprocess(image_bytes(color=32768, mode=mode))

    expected = _expected((128, 128, 128))
    for c in range(3):
        assert np.allclose(tensor[0, c], expected[c], atol=1e-6)


@pytest.mark.parametrize("payload", [b"", b"not an image", b"\x00\x01\x02\x03" * 8])
def test_malformed_bytes_raise_decode_error(payload: bytes) -> None:
    with pytest.raises(DecodeError):
        preprocess(payload)
