"""Generic request pipeline shared by every live SP-API tool.

A tool supplies a ``ToolDefinition``: its declared argument schema plus an
``execute`` coroutine that prepares the upstream request, fetches through an
``OperationInvoker`` and projects the decoded payload. Everything else lives
here: the readiness precondition, JSON Schema validation, envelope decoding,
error classification, the empty-payload check and conversion of failures into
declared error results.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import BaseModel

from sp_api_mcp.envelope.classifier import ensure_api_response
from sp_api_mcp.envelope.decoder import Envelope, EnvelopeSchema, decode_envelope, decode_errors
from sp_api_mcp.envelope.models import UpstreamError
from sp_api_mcp.envelope.pagination import PaginationState, walk_pages
from sp_api_mcp.errors import (
    ClientNotReadyError,
    EmptyPayloadError,
    EnvelopeDecodeError,
    ToolFailure,
)
from sp_api_mcp.execution.http_client import UpstreamGateway, UpstreamRequest
from sp_api_mcp.mcp_runtime import ToolResult, ToolSpec
from sp_api_mcp.spapi.client import SellingPartnerClient
from sp_api_mcp.tools.base import error_result, result_from_model, validate_or_raise

logger = logging.getLogger(__name__)

NOT_READY_FALLBACK = "Selling Partner API client is not ready"

T = TypeVar("T")
ItemT = TypeVar("ItemT")


@dataclass(frozen=True)
class Projection:
    data: BaseModel
    summary: str


class OperationInvoker:
    """Runs one upstream operation through decode, classify and payload checks."""

    def __init__(self, gateway: UpstreamGateway) -> None:
        self._gateway = gateway

    async def fetch(
        self,
        tool_name: str,
        operation: str,
        schema: EnvelopeSchema[T],
        request: UpstreamRequest,
    ) -> Envelope[T]:
        """Send *request* and return its envelope with a guaranteed payload.

        ``tool_name`` labels transport, decode and empty-payload failures;
        ``operation`` labels status and structured-error failures.
        """
        response = await self._gateway.send(tool_name, request)
        try:
            envelope = decode_envelope(response.body, schema)
        except EnvelopeDecodeError as exc:
            if not response.is_success:
                ensure_api_response(operation, response, _salvage_errors(response.body))
            raise EnvelopeDecodeError(
                f"failed to decode {tool_name} response: {exc.message}"
            ) from exc

        ensure_api_response(operation, response, envelope.errors)
        if not envelope.payload_present:
            raise EmptyPayloadError(f"{tool_name} response payload is empty")
        return envelope

    async def fetch_all(
        self,
        tool_name: str,
        operation: str,
        schema: EnvelopeSchema[T],
        build_request: Callable[[str | None], UpstreamRequest],
        select_items: Callable[[T], Sequence[ItemT]],
    ) -> PaginationState[ItemT]:
        async def fetch_page(token: str | None) -> Envelope[T]:
            return await self.fetch(tool_name, operation, schema, build_request(token))

        return await walk_pages(fetch_page, select_items)


def _salvage_errors(body: bytes) -> tuple[UpstreamError, ...]:
    try:
        return decode_errors(body)
    except EnvelopeDecodeError:
        return ()


Executor = Callable[[OperationInvoker, dict[str, Any]], Awaitable[Projection]]


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    title: str
    description: str
    input_schema: dict[str, object]
    execute: Executor
    read_only: bool = True
    idempotent: bool = True

    def annotations(self) -> dict[str, bool]:
        return {
            "readOnlyHint": self.read_only,
            "destructiveHint": False,
            "idempotentHint": self.idempotent,
            "openWorldHint": True,
        }


async def dispatch(
    definition: ToolDefinition,
    arguments: dict[str, object],
    client: SellingPartnerClient,
    invoker: OperationInvoker,
) -> ToolResult:
    """Run one tool invocation and return a structured result or a declared error."""
    try:
        status = client.status()
        if not status.ready:
            raise ClientNotReadyError(status.detail.strip() or NOT_READY_FALLBACK)
        validate_or_raise(definition.input_schema, arguments)
        projection = await definition.execute(invoker, arguments)
    except ToolFailure as exc:
        logger.error("Tool %s returned error result: %s", definition.name, exc.message)
        return error_result(exc)
    return result_from_model(projection.data, projection.summary)


def bind_tool(
    definition: ToolDefinition,
    client: SellingPartnerClient,
    invoker: OperationInvoker,
) -> ToolSpec:
    async def handler(arguments: dict[str, object]) -> ToolResult:
        return await dispatch(definition, arguments, client, invoker)

    return ToolSpec(
        name=definition.name,
        description=definition.description,
        input_schema=definition.input_schema,
        handler=handler,
        title=definition.title,
        annotations=definition.annotations(),
    )
