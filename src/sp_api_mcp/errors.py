"""Failures that surface to callers as declared tool errors."""

from __future__ import annotations


class ToolFailure(Exception):
    """Base class for every failure a tool reports as an ordinary result.

    ``code`` is a stable machine-readable category; ``message`` is the text
    shown to the caller.
    """

    code = "ToolFailure"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class ArgumentError(ToolFailure):
    """Arguments failed validation; the upstream API was never contacted."""

    code = "InvalidArguments"


class ClientNotReadyError(ToolFailure):
    code = "ClientNotReady"


class TransportFailure(ToolFailure):
    """No usable HTTP response: network error, authorization failure or no response."""

    code = "TransportFailure"


class UpstreamStatusError(ToolFailure):
    code = "UpstreamStatus"


class UpstreamStructuredError(ToolFailure):
    """A success status whose envelope still carried structured errors."""

    code = "UpstreamErrors"


class EmptyPayloadError(ToolFailure):
    code = "EmptyPayload"


class EnvelopeDecodeError(ToolFailure):
    code = "DecodeFailure"


__all__ = [
    "ArgumentError",
    "ClientNotReadyError",
    "EmptyPayloadError",
    "EnvelopeDecodeError",
    "ToolFailure",
    "TransportFailure",
    "UpstreamStatusError",
    "UpstreamStructuredError",
]
