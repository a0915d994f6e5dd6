from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Classification(BaseModel):
    label: str
    score: float


class ChatMessage(BaseModel):
    role: Literal["system", "user"]
    content: str


class CompletionRequest(BaseModel):
    model: str
    messages: List[ChatMessage]
    max_tokens: int = Field(gt=0)


class ChoiceMessage(BaseModel):
    content: str


class CompletionChoice(BaseModel):
    message: ChoiceMessage


class CompletionResponse(BaseModel):
    """Subset of the chat-completion payload we read; other keys are ignored."""

    choices: List[CompletionChoice]


class OutboundResponse(BaseModel):
    """Raw result of an outbound HTTP call, before canonicalization."""

    model_config = ConfigDict(frozen=True)

    status: int
    headers: Dict[str, str] = Field(default_factory=dict)
    body: bytes = b""


class CanonicalResponse(OutboundResponse):
    """Header-free response every observer of the same call agrees on."""

    @field_validator("headers")
    @classmethod
    def _no_headers(cls, v: Dict[str, str]) -> Dict[str, str]:
        if v:
            raise ValueError("canonical responses carry no headers")
        return v


@dataclass(frozen=True)
class OutboundRequest:
    url: str
    method: str
    transform: Callable[[OutboundResponse], CanonicalResponse]
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
