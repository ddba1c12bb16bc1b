"""Starlette HTTP server assembly for the MCP JSON-RPC endpoint."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from contextlib import asynccontextmanager
from types import MappingProxyType
from typing import TYPE_CHECKING

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from sp_api_mcp import __version__
from sp_api_mcp.mcp_runtime import ResourceSpec
from sp_api_mcp.resources.documentation import documentation_resources
from sp_api_mcp.tools import build_tool_registry
from sp_api_mcp.transport.mcp_handler import handle_mcp_request

if TYPE_CHECKING:
    from sp_api_mcp.app import AppContext

logger = logging.getLogger(__name__)


def create_http_app(context: AppContext | None = None) -> Starlette:
    """Create the HTTP MCP server application.

    The tool registry and resource table are built once here and shared by
    every request through ``app.state``.
    """
    if context is None:
        from sp_api_mcp.app import get_app_context

        context = get_app_context()

    settings = context.settings
    registry = build_tool_registry(context)
    resources: Mapping[str, ResourceSpec] = MappingProxyType(
        {resource.uri: resource for resource in documentation_resources()}
    )
    selling_partner = context.selling_partner

    middleware: list[Middleware] = []
    if settings.server.http_allowed_origins:
        from starlette.middleware.cors import CORSMiddleware

        middleware.append(
            Middleware(
                CORSMiddleware,
                allow_origins=list(settings.server.http_allowed_origins),
                allow_methods=["POST", "GET", "OPTIONS"],
                allow_headers=["Content-Type", "Accept", "MCP-Protocol-Version"],
            )
        )

    async def health_handler(request: Request) -> Response:
        return JSONResponse({"status": "healthy", "version": __version__})

    async def ready_handler(request: Request) -> Response:
        status = selling_partner.status()
        if status.ready:
            return JSONResponse({"status": "ready"})
        return JSONResponse(
            {"status": "not_ready", "detail": status.detail or "client is not ready"},
            status_code=503,
        )

    routes = [
        Route("/mcp", endpoint=handle_mcp_request, methods=["POST", "OPTIONS"]),
        Route("/health", endpoint=health_handler, methods=["GET"]),
        Route("/ready", endpoint=ready_handler, methods=["GET"]),
    ]

    @asynccontextmanager
    async def lifespan(app: Starlette):
        logger.info(
            "Starting HTTP server with %d tools and %d resources", len(registry), len(resources)
        )
        status = selling_partner.status()
        if not status.ready:
            logger.warning("Selling Partner client is not ready: %s", status.detail)
        yield
        logger.info("HTTP server stopped")

    app = Starlette(routes=routes, middleware=middleware, lifespan=lifespan)
    app.state.server_name = settings.server.name
    app.state.instructions = settings.server.instructions
    app.state.tool_registry = registry
    app.state.resources = resources
    app.state.http_allowed_origins = settings.server.http_allowed_origins
    app.state.http_allow_missing_origin = settings.server.http_allow_missing_origin
    return app
