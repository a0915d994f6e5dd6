#!/usr/bin/env python
"""
Classify a single image against the ImageNet catalog with a local ONNX model.

Example:
  python scripts/classify_image.py ~/Pictures/dog.jpg --model assets/mobilenetv2-7.onnx
  MODEL_PATH=assets/mobilenetv2-7.onnx python scripts/classify_image.py dog.png
"""
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

# Ensure the repo root is on the import path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pet_brain.core.env import configure_logging, load_dotenv_if_present
from pet_brain.core.errors import PetBrainError
from pet_brain.vision import ImageClassifier


def main() -> None:
    parser = argparse.ArgumentParser(description="Print the top ImageNet labels for an image.")
    parser.add_argument("image", type=Path, help="Path to the image file to classify.")
    parser.add_argument(
        "--model",
        type=Path,
        default=None,
        help="ONNX model file (defaults to MODEL_PATH).",
    )
    args = parser.parse_args()

    load_dotenv_if_present()
    configure_logging(default_level="WARNING")

    model_path = args.model or (Path(os.environ["MODEL_PATH"]) if os.getenv("MODEL_PATH") else None)
    if model_path is None:
        sys.exit("No model given; pass --model or set MODEL_PATH.")

    image_path = args.image.expanduser()
    if not image_path.is_file():
        sys.exit(f"File not found: {image_path}")

    classifier = ImageClassifier()
    try:
        classifier.load_model_file(model_path.expanduser())
        results = classifier.classify(image_path.read_bytes())
    except PetBrainError as exc:
        sys.exit(f"Classification failed: {exc}")

    print(f"Image: {image_path}")
    for result in results:
        print(f"- {result.label} ({result.score:.4f})")


if __name__ == "__main__":
    main()
