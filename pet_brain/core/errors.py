from __future__ import annotations


class PetBrainError(RuntimeError):
    """Base class for failures raised by the classifier and gateway."""


class ConfigError(PetBrainError):
    """Raised when startup configuration is missing or invalid."""


class DecodeError(PetBrainError):
    """Raised when image bytes cannot be decoded to an RGB raster."""


class ShapeMismatchError(PetBrainError):
    """Score vector length differs from the label catalog (model/catalog skew)."""


class ModelLoadError(PetBrainError):
    """Raised when a serialized model cannot be parsed or prepared."""


class InferenceError(PetBrainError):
    """Raised when the engine rejects a tensor or fails during forward."""


class NotLoadedError(PetBrainError):
    """Raised when classification is requested before any model was loaded."""


class GatewayError(PetBrainError):
    """Base class for outbound completion failures."""


class TransportError(GatewayError):
    """Network or outbound call failure."""


class ParseError(GatewayError):
    """Completion response body is not a valid completion payload."""


class EmptyChoicesError(GatewayError):
    """Well-formed completion response with zero choices."""


EMPTY_CHOICES_REPLY = "error"

_STATUS_CODES: tuple[tuple[type[Exception], int], ...] = (
    (DecodeError, 400),
    (ModelLoadError, 422),
    (NotLoadedError, 503),
    (ShapeMismatchError, 500),
    (InferenceError, 500),
    (TransportError, 502),
    (ParseError, 502),
    (EmptyChoicesError, 502),
)


def status_code_for(exc: Exception) -> int:
    """HTTP status for a classification/model failure surfaced by the API."""
    for error_type, status in _STATUS_CODES:
        if isinstance(exc, error_type):
            return status
    return 500


def reply_for(exc: GatewayError) -> str:
    """
    Flatten a gateway failure into the plain-string reply contract.

    Zero choices collapse to the literal sentinel "error"; transport and parse
    failures become a readable description.
    """
    if isinstance(exc, EmptyChoicesError):
        return EMPTY_CHOICES_REPLY
    if isinstance(exc, TransportError):
        return f"The completion request failed: {exc}"
    if isinstance(exc, ParseError):
        return f"The completion response could not be parsed: {exc}"
    return f"The completion request failed: {exc}"
