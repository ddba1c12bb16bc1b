"""Send authorized requests to the Selling Partner API."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field

import httpx

from sp_api_mcp.errors import TransportFailure
from sp_api_mcp.spapi.client import AuthError, SellingPartnerClient

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Amzn-Requestid"


@dataclass(frozen=True)
class UpstreamRequest:
    method: str
    path: str
    params: Mapping[str, object] = field(default_factory=dict)
    json_body: Mapping[str, object] | None = None


@dataclass(frozen=True)
class UpstreamResponse:
    status_code: int
    body: bytes
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


def encode_query_params(params: Mapping[str, object]) -> dict[str, str]:
    """Flatten query parameters the way SP-API expects them.

    ``None`` and empty lists are dropped, lists are comma-joined and booleans
    are sent as ``true``/``false``.
    """
    encoded: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            encoded[key] = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            if not value:
                continue
            encoded[key] = ",".join(str(item) for item in value)
        else:
            encoded[key] = str(value)
    return encoded


class UpstreamGateway:
    """Builds, authorizes and sends one HTTP request per call."""

    def __init__(
        self,
        client: SellingPartnerClient,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        verbose: bool = False,
    ) -> None:
        self._client = client
        self._timeout_seconds = timeout_seconds
        self._transport = transport
        self._verbose = verbose

    @property
    def client(self) -> SellingPartnerClient:
        return self._client

    async def send(self, operation: str, request: UpstreamRequest) -> UpstreamResponse:
        url = f"{self._client.endpoint().rstrip('/')}{request.path}"
        async with httpx.AsyncClient(
            timeout=self._timeout_seconds, transport=self._transport
        ) as http:
            http_request = http.build_request(
                request.method,
                url,
                params=encode_query_params(request.params),
                json=dict(request.json_body) if request.json_body is not None else None,
                headers={
                    REQUEST_ID_HEADER: str(uuid.uuid4()),
                    "Accept": "application/json",
                },
            )
            try:
                await self._client.authorize(http_request)
            except AuthError as exc:
                raise TransportFailure(f"{operation}: authorize request: {exc}") from exc

            try:
                response = await http.send(http_request)
            except httpx.HTTPError as exc:
                detail = str(exc) or exc.__class__.__name__
                logger.warning("%s: request to %s failed: %s", operation, url, detail)
                raise TransportFailure(f"{operation} request failed: {detail}") from exc

            body = response.content

        if self._verbose:
            logger.debug(
                "%s - HTTP Status: %d %s",
                operation,
                response.status_code,
                httpx.codes.get_reason_phrase(response.status_code),
            )
            logger.debug("%s - Response Headers: %s", operation, dict(response.headers))
            logger.debug("%s - Response Body: %s", operation, body.decode("utf-8", "replace"))

        return UpstreamResponse(
            status_code=response.status_code,
            body=body,
            headers=dict(response.headers),
        )
