"""Classify an upstream HTTP exchange as success or a single descriptive failure."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

import httpx

from sp_api_mcp.envelope.models import UpstreamError
from sp_api_mcp.errors import (
    ToolFailure,
    TransportFailure,
    UpstreamStatusError,
    UpstreamStructuredError,
)

BODY_SNIPPET_LIMIT = 512


class ResponseLike(Protocol):
    @property
    def status_code(self) -> int: ...

    @property
    def body(self) -> bytes: ...


def format_upstream_errors(errors: Sequence[UpstreamError]) -> str:
    return "; ".join(text for text in (error.render() for error in errors) if text)


def sanitize_body_snippet(body: bytes) -> str:
    snippet = body.decode("utf-8", errors="replace").strip()
    if not snippet:
        return "no response body"
    if len(snippet) > BODY_SNIPPET_LIMIT:
        snippet = snippet[:BODY_SNIPPET_LIMIT] + "..."
    return snippet


def describe_api_failure(
    operation: str,
    response: ResponseLike | None,
    errors: Sequence[UpstreamError] = (),
) -> ToolFailure | None:
    """Return the failure for this exchange, or ``None`` when it succeeded.

    The checks run in a fixed order: a missing response, then a non-2xx
    status (structured errors preferred over the raw body), then structured
    errors on a 2xx status.
    """
    if response is None:
        return TransportFailure(f"{operation}: no HTTP response returned")

    status = response.status_code
    if status < 200 or status >= 300:
        detail = format_upstream_errors(errors) or sanitize_body_snippet(response.body)
        reason = httpx.codes.get_reason_phrase(status)
        return UpstreamStatusError(
            f"{operation}: request failed with status {status} {reason}: {detail}"
        )

    if errors:
        return UpstreamStructuredError(f"{operation}: {format_upstream_errors(errors)}")

    return None


def ensure_api_response(
    operation: str,
    response: ResponseLike | None,
    errors: Sequence[UpstreamError] = (),
) -> None:
    failure = describe_api_failure(operation, response, errors)
    if failure is not None:
        raise failure
