from __future__ import annotations

import asyncio
import contextlib
import json
from collections.abc import Callable
from dataclasses import dataclass, field

import httpx
import pytest

from sp_api_mcp.app import AppContext
from sp_api_mcp.config import Settings, _load_settings_cached
from sp_api_mcp.execution.http_client import UpstreamGateway
from sp_api_mcp.spapi.client import ClientStatus
from sp_api_mcp.tools._dispatch import OperationInvoker

ENDPOINT = "https://sellingpartnerapi-na.amazon.com"


@pytest.fixture(autouse=True)
def _close_default_event_loop() -> None:
    yield
    policy = asyncio.get_event_loop_policy()
    local = getattr(policy, "_local", None)
    loop = getattr(local, "_loop", None) if local is not None else None
    if loop is not None and not loop.is_running() and not loop.is_closed():
        with contextlib.suppress(Exception):
            loop.close()
    if loop is not None:
        with contextlib.suppress(Exception):
            policy.set_event_loop(None)


@pytest.fixture(autouse=True)
def _reset_settings_cache() -> None:
    _load_settings_cached.cache_clear()
    yield
    _load_settings_cached.cache_clear()


@dataclass
class FakeClient:
    ready: bool = True
    detail: str = ""
    authorized: int = 0

    def endpoint(self) -> str:
        return ENDPOINT

    def status(self) -> ClientStatus:
        return ClientStatus(ready=self.ready, detail=self.detail)

    async def authorize(self, request: httpx.Request) -> None:
        self.authorized += 1
        request.headers["x-amz-access-token"] = "Atza|test"


@dataclass
class Upstream:
    """Scripted upstream: returns queued responses and records requests."""

    responses: list[httpx.Response] = field(default_factory=list)
    requests: list[httpx.Request] = field(default_factory=list)
    handler: Callable[[httpx.Request], httpx.Response] | None = None

    def queue_json(self, document: object, status_code: int = 200) -> None:
        self.responses.append(
            httpx.Response(status_code, content=json.dumps(document).encode("utf-8"))
        )

    def queue_raw(self, body: bytes, status_code: int = 200) -> None:
        self.responses.append(httpx.Response(status_code, content=body))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.handler is not None:
            return self.handler(request)
        if not self.responses:
            raise AssertionError(f"unexpected request {request.method} {request.url}")
        return self.responses.pop(0)


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def upstream() -> Upstream:
    return Upstream()


@pytest.fixture
def gateway(fake_client: FakeClient, upstream: Upstream) -> UpstreamGateway:
    return UpstreamGateway(fake_client, transport=httpx.MockTransport(upstream))


@pytest.fixture
def invoker(gateway: UpstreamGateway) -> OperationInvoker:
    return OperationInvoker(gateway)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def app_context(
    settings: Settings,
    fake_client: FakeClient,
    gateway: UpstreamGateway,
    invoker: OperationInvoker,
) -> AppContext:
    return AppContext(
        settings=settings,
        selling_partner=fake_client,
        gateway=gateway,
        invoker=invoker,
    )
