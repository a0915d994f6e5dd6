from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from pet_brain.core.errors import ConfigError, TransportError
from pet_brain.core.models import CanonicalResponse, OutboundRequest
from pet_brain.gateway import CompletionClient, GatewayConfig, HttpxExecutor, transform


def _config(**overrides) -> GatewayConfig:
    values = {"api_key": "sk-test-secret", "base_url": "https://llm.example.test"}
    values.update(overrides)
    return GatewayConfig(**values)


def _client_with(handler) -> CompletionClient:
    executor = HttpxExecutor(transport=httpx.MockTransport(handler))
    return CompletionClient(_config(), executor=executor)


def _choices_body(*contents: str) -> dict:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "choices": [
            {"index": i, "message": {"role": "assistant", "content": c}, "finish_reason": "stop"}
            for i, c in enumerate(contents)
        ],
    }


def test_request_puts_persona_first_then_prompt() -> None:
    request = CompletionClient(_config()).build_request('My dog "Rex" chews shoes\n')

    assert request.model == "gpt-3.5-turbo"
    assert request.max_tokens == 150
    assert [m.role for m in request.messages] == ["system", "user"]
    assert "pet behaviorist" in request.messages[0].content
    assert request.messages[1].content == 'My dog "Rex" chews shoes\n'


def test_outbound_request_wire_format() -> None:
    outbound = CompletionClient(_config(max_tokens=42)).build_outbound('quote " and \\ slash')

    assert outbound.url == "https://llm.example.test/v1/chat/completions"
    assert outbound.method == "POST"
    assert outbound.headers == {
        "Content-Type": "application/json",
        "Authorization": "Bearer sk-test-secret",
    }
    assert outbound.transform is transform
    body = json.loads(outbound.body)
    assert set(body) == {"model", "messages", "max_tokens"}
    assert body["max_tokens"] == 42
    assert body["messages"][1] == {"role": "user", "content": 'quote " and \\ slash'}


def test_complete_returns_first_choice_content() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_choices_body("hello", "ignored"))

    reply = asyncio.run(_client_with(handler).complete("tabby"))

    assert reply == "hello"
    assert len(seen) == 1
    assert seen[0].method == "POST"
    assert seen[0].headers["authorization"] == "Bearer sk-test-secret"
    assert seen[0].headers["content-type"] == "application/json"
    assert json.loads(seen[0].content)["messages"][1]["content"] == "tabby"


def test_zero_choices_returns_error_sentinel() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"choices": []})

    assert asyncio.run(_client_with(handler).complete("tabby")) == "error"


def test_transport_failure_returns_description() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    reply = asyncio.run(_client_with(handler).complete("tabby"))

    assert reply.startswith("The completion request failed")
    assert "connection refused" in reply
    assert len(calls) == 1


@pytest.mark.parametrize(
    "status,body",
    [
        (200, b"not json"),
        (200, b'{"choices": [{"message": {}}]}'),
        (401, b'{"error": {"message": "Incorrect API key provided"}}'),
    ],
)
def test_unparseable_body_returns_description(status: int, body: bytes) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, content=body)

    reply = asyncio.run(_client_with(handler).complete("tabby"))

    assert reply.startswith("The completion response could not be parsed")
    assert f"status {status}" in reply


def test_response_headers_never_reach_the_parser() -> None:
    class RecordingExecutor:
        def __init__(self):
            self.requests: list[OutboundRequest] = []

        async def execute(self, request: OutboundRequest) -> CanonicalResponse:
            self.requests.append(request)
            return CanonicalResponse(status=200, body=json.dumps(_choices_body("hi")).encode())

    executor = RecordingExecutor()
    client = CompletionClient(_config(), executor=executor)

    assert asyncio.run(client.complete("tabby")) == "hi"
    assert executor.requests[0].transform is transform


def test_httpx_executor_applies_transform() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"x-request-id": "abc"}, content=b"payload")

    executor = HttpxExecutor(transport=httpx.MockTransport(handler))
    outbound = OutboundRequest(
        url="https://llm.example.test/v1/chat/completions",
        method="POST",
        transform=transform,
        body=b"{}",
    )
    canonical = asyncio.run(executor.execute(outbound))

    assert canonical.headers == {}
    assert canonical.body == b"payload"


def test_httpx_executor_wraps_unencodable_header() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("request must not be sent")

    executor = HttpxExecutor(transport=httpx.MockTransport(handler))
    outbound = OutboundRequest(
        url="https://llm.example.test/v1/chat/completions",
        method="POST",
        transform=transform,
        headers={"Authorization": "Bearer sk-abc…"},
        body=b"{}",
    )
    with pytest.raises(TransportError):
        asyncio.run(executor.execute(outbound))


def test_config_hides_api_key() -> None:
    config = _config()
    assert "sk-test-secret" not in repr(config)


@pytest.mark.parametrize(
    "overrides",
    [
        {"api_key": ""},
        {"api_key": "   "},
        {"api_key": "sk-abc…"},
        {"api_key": "sk-abc\x00def"},
        {"max_tokens": 0},
        {"base_url": "llm.example.test"},
        {"base_url": "https://"},
        {"base_url": "ftp://llm.example.test"},
    ],
)
def test_invalid_config_rejected(overrides) -> None:
    with pytest.raises(ConfigError):
        _config(**overrides)


def test_config_strips_printable_key() -> None:
    config = _config(api_key="  sk-test-secret\n")
    assert config.api_key == "sk-test-secret"
    assert config.completions_url == "https://llm.example.test/v1/chat/completions"


def test_config_from_env(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    monkeypatch.setenv("OPENAI_MODEL", "gpt-4o-mini")
    monkeypatch.setenv("OPENAI_MAX_TOKENS", "64")
    monkeypatch.setenv("OPENAI_HTTP_TIMEOUT", "none")
    monkeypatch.delenv("OPENAI_BASE_URL", raising=False)

    config = GatewayConfig.from_env()

    assert config.api_key == "sk-env"
    assert config.model == "gpt-4o-mini"
    assert config.max_tokens == 64
    assert config.timeout is None
    assert config.completions_url == "https://api.openai.com/v1/chat/completions"


def test_config_from_env_requires_key(monkeypatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(ConfigError):
        GatewayConfig.from_env()


def test_config_from_env_rejects_bad_numbers(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    monkeypatch.setenv("OPENAI_MAX_TOKENS", "lots")
    with pytest.raises(ConfigError):
        GatewayConfig.from_env()
