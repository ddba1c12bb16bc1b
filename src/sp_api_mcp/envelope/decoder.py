"""Decode raw SP-API response bodies into a uniform envelope."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Generic, Literal, TypeVar

from pydantic import TypeAdapter, ValidationError

from sp_api_mcp.envelope.models import UpstreamError
from sp_api_mcp.errors import EnvelopeDecodeError

T = TypeVar("T")

PayloadLayout = Literal["enveloped", "bare"]

_ERRORS_ADAPTER = TypeAdapter(list[UpstreamError])
_ENVELOPE_KEYS = frozenset({"errors", "pagination"})


@dataclass(frozen=True)
class EnvelopeSchema(Generic[T]):
    """Resource-specific payload schema plus the wire layout it arrives in.

    ``enveloped`` responses wrap the result in ``{"payload": ...}``. ``bare``
    responses (Reports 2021-06-30) are the result object itself, optionally
    carrying a top-level ``errors`` list.
    """

    payload: TypeAdapter[T]
    layout: PayloadLayout = "enveloped"

    @classmethod
    def of(cls, payload_type: Any, layout: PayloadLayout = "enveloped") -> EnvelopeSchema[Any]:
        return cls(payload=TypeAdapter(payload_type), layout=layout)


@dataclass(frozen=True)
class Envelope(Generic[T]):
    payload: T | None
    payload_present: bool
    errors: tuple[UpstreamError, ...] = field(default_factory=tuple)
    next_token: str | None = None


def decode_envelope(body: bytes, schema: EnvelopeSchema[T]) -> Envelope[T]:
    """Parse *body* and validate its payload against *schema*.

    Raises ``EnvelopeDecodeError`` for an empty body, malformed JSON, a
    non-object document or a payload that does not match the schema. An
    absent payload is not an error here; callers decide what it means.
    """
    document = _load_document(body)
    errors = _decode_errors(document.get("errors"))
    raw_payload, present = _extract_payload(document, schema.layout)

    payload: T | None = None
    if present:
        try:
            payload = schema.payload.validate_python(raw_payload)
        except ValidationError as exc:
            raise EnvelopeDecodeError(_describe_validation_error(exc)) from exc

    return Envelope(
        payload=payload,
        payload_present=present,
        errors=errors,
        next_token=_extract_next_token(document, raw_payload if present else None),
    )


def decode_errors(body: bytes) -> tuple[UpstreamError, ...]:
    """Decode only the top-level ``errors`` list of *body*.

    Used to recover structured failure detail from a response whose payload
    does not match its schema.
    """
    return _decode_errors(_load_document(body).get("errors"))


def _load_document(body: bytes) -> dict[str, Any]:
    text = body.decode("utf-8", errors="replace").strip()
    if not text:
        raise EnvelopeDecodeError("response body is empty")
    try:
        document = json.loads(text, parse_float=Decimal)
    except json.JSONDecodeError as exc:
        raise EnvelopeDecodeError(str(exc)) from exc
    if not isinstance(document, dict):
        raise EnvelopeDecodeError(
            f"expected a JSON object, got {type(document).__name__}"
        )
    return document


def _decode_errors(raw: object) -> tuple[UpstreamError, ...]:
    if raw is None:
        return ()
    try:
        return tuple(_ERRORS_ADAPTER.validate_python(raw))
    except ValidationError as exc:
        raise EnvelopeDecodeError(f"errors: {_describe_validation_error(exc)}") from exc


def _extract_payload(document: dict[str, Any], layout: PayloadLayout) -> tuple[object, bool]:
    if layout == "enveloped" or "payload" in document:
        raw = document.get("payload")
        return raw, raw is not None
    remainder = {key: value for key, value in document.items() if key not in _ENVELOPE_KEYS}
    return remainder, bool(remainder)


def _extract_next_token(document: dict[str, Any], raw_payload: object) -> str | None:
    candidates: list[object] = []
    pagination = document.get("pagination")
    if isinstance(pagination, dict):
        candidates.append(pagination.get("nextToken"))
    candidates.append(document.get("nextToken"))
    if isinstance(raw_payload, dict):
        candidates.append(raw_payload.get("NextToken"))
        candidates.append(raw_payload.get("nextToken"))
    for candidate in candidates:
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return None


def _describe_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    message = first["msg"]
    more = exc.error_count() - 1
    text = f"{location}: {message}" if location else message
    if more:
        text += f" (and {more} more)"
    return text
