from __future__ import annotations

from typing import List, Sequence, Union

import numpy as np

from pet_brain.core.errors import ShapeMismatchError
from pet_brain.core.models import Classification
from pet_brain.vision.labels import catalog_size, label_for

# Number of classes returned per image. Fixed; not read from the environment.
TOP_K = 3


def rank_scores(
    scores: Union[np.ndarray, Sequence[float]],
    top_k: int = TOP_K,
) -> List[Classification]:
    """
    Map a raw per-class score vector to the top-k labels, best first.

    Ties keep the lower class id first; NaN scores sort last. Ordering uses
    the scores at their own precision; only reported scores are float32.
    """
    vector = np.asarray(scores).reshape(-1)
    if not np.issubdtype(vector.dtype, np.floating):
        vector = vector.astype(np.float64)
    if vector.shape[0] != catalog_size():
        raise ShapeMismatchError(
            f"Score vector has {vector.shape[0]} entries but the catalog has "
            f"{catalog_size()} labels"
        )
    if top_k < 1:
        raise ValueError("top_k must be positive")

    order = np.argsort(-vector, kind="stable")
    return [
        Classification(label=label_for(int(idx)), score=float(np.float32(vector[idx])))
        for idx in order[:top_k]
    ]
