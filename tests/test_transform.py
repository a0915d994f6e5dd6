from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from pet_brain.core.models import CanonicalResponse, OutboundResponse
from pet_brain.gateway.canonical import transform


def _raw(status: int = 200, body: bytes = b'{"choices": []}') -> OutboundResponse:
    return OutboundResponse(
        status=status,
        headers={
            "date": "Sat, 18 Oct 2026 10:00:00 GMT",
            "x-request-id": "req_abc123",
            "set-cookie": "__cf_bm=xyz",
        },
        body=body,
    )


def test_transform_drops_headers_and_keeps_body() -> None:
    raw = _raw()
    canonical = transform(raw)

    assert isinstance(canonical, CanonicalResponse)
    assert canonical.headers == {}
    assert canonical.status == 200
    assert canonical.body == raw.body


def test_transform_is_idempotent() -> None:
    for raw in (_raw(), _raw(status=429, body=b"rate limited"), _raw(body=b"")):
        once = transform(raw)
        assert transform(once) == once
        assert transform(once).headers == {}


def test_observers_with_different_headers_agree() -> None:
    first = OutboundResponse(status=200, headers={"date": "a"}, body=b"same")
    second = OutboundResponse(status=200, headers={"date": "b", "age": "3"}, body=b"same")
    assert transform(first).model_dump() == transform(second).model_dump()


def test_non_200_is_logged_but_passed_through(caplog) -> None:
    raw = _raw(status=500, body=b'{"error": {"message": "boom"}}')
    with caplog.at_level(logging.WARNING, logger="pet_brain.gateway.canonical"):
        canonical = transform(raw)

    assert canonical.status == 500
    assert canonical.body == raw.body
    assert "status 500" in caplog.text
    assert "x-request-id" not in caplog.text


def test_canonical_response_rejects_headers() -> None:
    with pytest.raises(ValidationError):
        CanonicalResponse(status=200, headers={"date": "x"}, body=b"")
