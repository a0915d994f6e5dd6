#!/usr/bin/env python
"""
Run the HTTP API.

Example:
  MODEL_PATH=assets/mobilenetv2-7.onnx OPENAI_API_KEY=sk-... python scripts/serve.py --port 8000
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import uvicorn

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def main() -> None:
    parser = argparse.ArgumentParser(description="Serve the classification and completion API.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    uvicorn.run("pet_brain.api.http_api:create_app", factory=True, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
