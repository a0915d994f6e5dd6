"""Outbound chat-completion gateway."""

from .canonical import transform
from .client import CompletionClient, GatewayConfig
from .outbound import HttpxExecutor, OutboundExecutor

__all__ = ["CompletionClient", "GatewayConfig", "HttpxExecutor", "OutboundExecutor", "transform"]
