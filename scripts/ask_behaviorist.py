#!/usr/bin/env python
"""
Send one prompt through the completion gateway and print the reply.

Example:
  OPENAI_API_KEY=sk-... python scripts/ask_behaviorist.py "golden retriever"
"""
from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pet_brain.core.env import configure_logging, load_dotenv_if_present
from pet_brain.core.errors import ConfigError
from pet_brain.gateway import CompletionClient, GatewayConfig


def main() -> None:
    parser = argparse.ArgumentParser(description="Ask the pet behaviorist persona a question.")
    parser.add_argument("prompt", help="Prompt text, forwarded verbatim as the user message.")
    parser.add_argument(
        "--show-request",
        action="store_true",
        help="Print the request body (without credentials) before sending.",
    )
    args = parser.parse_args()

    load_dotenv_if_present()
    configure_logging(default_level="WARNING")
    try:
        config = GatewayConfig.from_env()
    except ConfigError as exc:
        sys.exit(str(exc))

    client = CompletionClient(config)
    if args.show_request:
        print(client.build_request(args.prompt).model_dump_json(indent=2))
        print()
    print(asyncio.run(client.complete(args.prompt)))


if __name__ == "__main__":
    main()
