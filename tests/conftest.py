from __future__ import annotations

from io import BytesIO
from typing import Callable, List

import cv2
import numpy as np
import pytest
from PIL import Image

from pet_brain.vision import engine

FAKE_MODEL_BYTES = b"onnx:fake-mobilenet"


class FakeNet:
    """Stand-in for a cv2.dnn network that returns fixed class scores."""

    def __init__(self, scores: np.ndarray):
        self.scores = np.asarray(scores, dtype=np.float32).reshape(1, -1)
        self.inputs: List[np.ndarray] = []
        self.backend = None
        self.target = None

    def empty(self) -> bool:
        return False

    def setPreferableBackend(self, backend) -> None:
        self.backend = backend

    def setPreferableTarget(self, target) -> None:
        self.target = target

    def setInput(self, blob: np.ndarray) -> None:
        self.inputs.append(blob)

    def forward(self) -> np.ndarray:
        return self.scores


@pytest.fixture
def fake_scores() -> np.ndarray:
    scores = np.linspace(-1.0, 0.0, 1000, dtype=np.float32)
    scores[207] = 9.0  # golden retriever
    scores[208] = 7.5  # labrador retriever
    scores[281] = 5.0  # tabby
    return scores


@pytest.fixture
def fake_onnx(monkeypatch, fake_scores) -> List[FakeNet]:
    """Patch the ONNX reader; returns the list of nets it has built."""
    created: List[FakeNet] = []

    def _read(buffer: np.ndarray) -> FakeNet:
        if not bytes(buffer).startswith(b"onnx:"):
            raise cv2.error("Failed to parse ONNX model")
        net = FakeNet(fake_scores)
        created.append(net)
        return net

    monkeypatch.setattr(engine.cv2.dnn, "readNetFromONNX", _read)
    return created


@pytest.fixture
def image_bytes() -> Callable[..., bytes]:
    def _make(color=(40, 120, 200), size=(224, 224), fmt: str = "PNG", mode: str = "RGB") -> bytes:
        buf = BytesIO()
        Image.new(mode, size, color=color).save(buf, format=fmt)
        return buf.getvalue()

    return _make


@pytest.fixture
def model_bytes() -> bytes:
    return FAKE_MODEL_BYTES
