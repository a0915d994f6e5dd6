from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Tuple

import cv2
import numpy as np

from pet_brain.core.errors import InferenceError, ModelLoadError
from pet_brain.vision.preprocess import TENSOR_SHAPE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineHandle:
    """Runnable network plus the input shape it was prepared for."""

    net: Any
    input_shape: Tuple[int, ...] = TENSOR_SHAPE


def load_model(model_bytes: bytes) -> EngineHandle:
    """Parse serialized ONNX bytes into a runnable OpenCV DNN network."""
    if not model_bytes:
        raise ModelLoadError("Empty model payload")
    buffer = np.frombuffer(model_bytes, dtype=np.uint8)
    try:
        net = cv2.dnn.readNetFromONNX(buffer)
    except cv2.error as exc:
        raise ModelLoadError(f"Could not parse ONNX model: {exc}") from exc
    if net is None or net.empty():
        raise ModelLoadError("ONNX model produced an empty network")

    net.setPreferableBackend(cv2.dnn.DNN_BACKEND_OPENCV)
    net.setPreferableTarget(cv2.dnn.DNN_TARGET_CPU)
    logger.info("Inference engine: loaded ONNX model (%d bytes)", len(model_bytes))
    return EngineHandle(net=net)


def run_model(handle: EngineHandle, tensor: np.ndarray) -> np.ndarray:
    """Forward one tensor and return the flat per-class score vector."""
    if tuple(tensor.shape) != tuple(handle.input_shape):
        raise InferenceError(
            f"Tensor shape {tuple(tensor.shape)} does not match model input {handle.input_shape}"
        )
    if tensor.dtype != np.float32:
        raise InferenceError(f"Tensor dtype must be float32, got {tensor.dtype}")

    try:
        handle.net.setInput(tensor)
        output = handle.net.forward()
    except cv2.error as exc:
        raise InferenceError(f"Model forward failed: {exc}") from exc
    return np.asarray(output, dtype=np.float32).reshape(-1)
