"""Response envelope decoding, error classification and pagination."""

from sp_api_mcp.envelope.classifier import (
    describe_api_failure,
    ensure_api_response,
    format_upstream_errors,
    sanitize_body_snippet,
)
from sp_api_mcp.envelope.decoder import Envelope, EnvelopeSchema, decode_envelope, decode_errors
from sp_api_mcp.envelope.models import DecimalString, Money, OrderMoney, UpstreamError
from sp_api_mcp.envelope.pagination import PaginationState, walk_pages

__all__ = [
    "DecimalString",
    "Envelope",
    "EnvelopeSchema",
    "Money",
    "OrderMoney",
    "PaginationState",
    "UpstreamError",
    "decode_envelope",
    "decode_errors",
    "describe_api_failure",
    "ensure_api_response",
    "format_upstream_errors",
    "sanitize_body_snippet",
    "walk_pages",
]
