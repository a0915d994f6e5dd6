"""Image preprocessing, inference and ranking for ImageNet classification."""

from .classifier import ClassifierConfig, ImageClassifier
from .labels import LABELS
from .ranker import TOP_K, rank_scores

__all__ = ["ClassifierConfig", "ImageClassifier", "LABELS", "TOP_K", "rank_scores"]
