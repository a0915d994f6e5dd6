from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from pet_brain.core.errors import ModelLoadError, NotLoadedError
from pet_brain.core.models import Classification
from pet_brain.vision.engine import EngineHandle, load_model, run_model
from pet_brain.vision.preprocess import preprocess
from pet_brain.vision.ranker import rank_scores

logger = logging.getLogger(__name__)


@dataclass
class ClassifierConfig:
    model_path: Optional[Path]

    @classmethod
    def from_env(cls) -> "ClassifierConfig":
        raw = os.getenv("MODEL_PATH")
        return cls(model_path=Path(raw).expanduser() if raw else None)


class ImageClassifier:
    """
    ImageNet classifier built once at startup and shared by reference.

    The serialized model is held here; runnable networks are cached per thread
    because OpenCV nets are not reentrant. A thread without a handle for the
    current model builds one on first use and reuses it afterwards.
    """

    def __init__(self):
        self._model_bytes: Optional[bytes] = None
        self._generation = 0
        self._local = threading.local()
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: ClassifierConfig) -> "ImageClassifier":
        classifier = cls()
        if config.model_path is not None:
            classifier.load_model_file(config.model_path)
        else:
            logger.info("Classifier: MODEL_PATH not set; waiting for a model upload")
        return classifier

    @property
    def loaded(self) -> bool:
        return self._model_bytes is not None

    def load_model(self, model_bytes: bytes) -> None:
        """Validate and install a model, replacing any previously loaded one."""
        handle = load_model(model_bytes)
        with self._lock:
            self._model_bytes = bytes(model_bytes)
            self._generation += 1
            self._local.handle = handle
            self._local.generation = self._generation

    def load_model_file(self, path: Path) -> None:
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise ModelLoadError(f"Could not read model file {path}: {exc}") from exc
        self.load_model(data)
        logger.info("Classifier: model loaded from %s", path)

    def _handle(self) -> EngineHandle:
        with self._lock:
            generation, model_bytes = self._generation, self._model_bytes
        if getattr(self._local, "generation", None) == generation:
            return self._local.handle
        if model_bytes is None:
            raise NotLoadedError("No model loaded; upload one before classifying")
        # Concurrent first use within one thread is not guarded.
        handle = load_model(model_bytes)
        self._local.handle = handle
        self._local.generation = generation
        logger.debug(
            "Classifier: built engine handle for thread %s", threading.current_thread().name
        )
        return handle

    def classify(self, image_bytes: bytes) -> List[Classification]:
        handle = self._handle()
        tensor = preprocess(image_bytes)
        scores = run_model(handle, tensor)
        results = rank_scores(scores)
        logger.debug(
            "Classifier: top result %s (%.4f)", results[0].label, results[0].score
        )
        return results
