from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

import httpx
from pydantic import ValidationError

from pet_brain.core.env import env_float, env_int
from pet_brain.core.errors import (
    ConfigError,
    EmptyChoicesError,
    GatewayError,
    ParseError,
    reply_for,
)
from pet_brain.core.models import (
    ChatMessage,
    CompletionRequest,
    CompletionResponse,
    OutboundRequest,
)
from pet_brain.gateway.canonical import transform
from pet_brain.gateway.outbound import HttpxExecutor, OutboundExecutor

logger = logging.getLogger(__name__)

_PERSONA_PROMPT = """
I want you to act as a pet behaviorist. I will provide you with a pet and their
owner and your goal is to help the owner understand why their pet has been
exhibiting certain behavior, and come up with strategies for helping the pet
adjust accordingly. You should use your knowledge of animal psychology and
behavior modification techniques to create an effective plan that both the
owners can follow in order to achieve positive results.
""".strip().replace("\n", " ")


@dataclass
class GatewayConfig:
    api_key: str = field(repr=False)
    base_url: str = "https://api.openai.com"
    model: str = "gpt-3.5-turbo"
    max_tokens: int = 150
    timeout: Optional[float] = 60.0

    def __post_init__(self) -> None:
        key = (self.api_key or "").strip()
        if not key:
            raise ConfigError("OPENAI_API_KEY is required for the completion gateway")
        # The key travels in an HTTP header, which only carries printable ASCII.
        if not (key.isascii() and key.isprintable()):
            raise ConfigError("OPENAI_API_KEY contains characters outside printable ASCII")
        if self.max_tokens <= 0:
            raise ConfigError(f"max_tokens must be positive, got {self.max_tokens}")
        try:
            url = httpx.URL(self.base_url)
        except httpx.InvalidURL as exc:
            raise ConfigError(f"Invalid completion base URL {self.base_url!r}: {exc}") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise ConfigError(f"Invalid completion base URL: {self.base_url!r}")
        self.api_key = key

    @classmethod
    def from_env(cls) -> "GatewayConfig":
        return cls(
            api_key=os.getenv("OPENAI_API_KEY", ""),
            base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com"),
            model=os.getenv("OPENAI_MODEL", "gpt-3.5-turbo"),
            max_tokens=env_int("OPENAI_MAX_TOKENS", 150),
            timeout=env_float("OPENAI_HTTP_TIMEOUT", 60.0),
        )

    @property
    def completions_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/v1/chat/completions"


class CompletionClient:
    """Relays a prompt to the chat-completion endpoint with a fixed persona."""

    def __init__(self, config: GatewayConfig, executor: Optional[OutboundExecutor] = None):
        self.config = config
        self.executor = executor or HttpxExecutor(timeout=config.timeout)

    def build_request(self, prompt: str) -> CompletionRequest:
        return CompletionRequest(
            model=self.config.model,
            messages=[
                ChatMessage(role="system", content=_PERSONA_PROMPT),
                ChatMessage(role="user", content=prompt),
            ],
            max_tokens=self.config.max_tokens,
        )

    def build_outbound(self, prompt: str) -> OutboundRequest:
        body = self.build_request(prompt).model_dump_json().encode("utf-8")
        return OutboundRequest(
            url=self.config.completions_url,
            method="POST",
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.config.api_key}",
            },
            body=body,
            transform=transform,
        )

    async def request_completion(self, prompt: str) -> str:
        """Perform one outbound call; raises typed gateway errors."""
        response = await self.executor.execute(self.build_outbound(prompt))
        try:
            parsed = CompletionResponse.model_validate_json(response.body)
        except ValidationError as exc:
            raise ParseError(
                f"status {response.status}: {exc.error_count()} validation error(s)"
            ) from exc
        if not parsed.choices:
            raise EmptyChoicesError("Completion response contained no choices")
        return parsed.choices[0].message.content

    async def complete(self, prompt: str) -> str:
        """Return the reply text, or a descriptive/sentinel string on failure."""
        try:
            return await self.request_completion(prompt)
        except GatewayError as exc:
            logger.warning("Completion gateway failed: %s", exc)
            return reply_for(exc)
