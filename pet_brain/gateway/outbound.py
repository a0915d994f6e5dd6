from __future__ import annotations

import logging
from typing import Optional, Protocol

import httpx

from pet_brain.core.errors import TransportError
from pet_brain.core.models import CanonicalResponse, OutboundRequest, OutboundResponse

logger = logging.getLogger(__name__)


class OutboundExecutor(Protocol):
    async def execute(self, request: OutboundRequest) -> CanonicalResponse: ...


class HttpxExecutor:
    """Performs one outbound HTTP call per request with a fresh httpx client."""

    def __init__(
        self,
        timeout: Optional[float] = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.transport = transport

    async def execute(self, request: OutboundRequest) -> CanonicalResponse:
        logger.debug(
            "Outbound %s %s (%d body bytes)", request.method, request.url, len(request.body)
        )
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(
                    request.method,
                    request.url,
                    headers=request.headers,
                    content=request.body,
                )
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc

        raw = OutboundResponse(
            status=response.status_code,
            headers=dict(response.headers.items()),
            body=response.content,
        )
        return request.transform(raw)
