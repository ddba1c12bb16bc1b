"""Entrypoint for the Selling Partner API MCP server."""

from __future__ import annotations

import logging
import sys
import threading
from pathlib import Path

if __package__ in (None, ""):
    sys.path.insert(0, str(Path(__file__).resolve().parents[1]))  # pragma: no cover

from sp_api_mcp import __version__
from sp_api_mcp.app import AppContext, get_app_context
from sp_api_mcp.config import load_settings
from sp_api_mcp.logging_utils import configure_logging
from sp_api_mcp.mcp_runtime import MCPServer
from sp_api_mcp.resources.documentation import documentation_resources
from sp_api_mcp.tools import build_tool_registry, register_tools

logger = logging.getLogger(__name__)


def build_server(context: AppContext | None = None) -> MCPServer:
    """Create and configure the MCP server instance."""
    if context is None:
        context = get_app_context()
    settings = context.settings

    server = MCPServer(
        name=settings.server.name,
        version=__version__,
        instructions=settings.server.instructions,
    )

    # FastMCP installs its own handlers on init; reapply ours afterwards.
    configure_logging()

    logger.info("Initializing Selling Partner MCP Server v%s", __version__)
    status = context.selling_partner.status()
    if not status.ready:
        logger.warning("Selling Partner client is not ready: %s", status.detail)

    register_tools(server, build_tool_registry(context))
    resources = documentation_resources()
    for resource in resources:
        server.add_resource(resource)
    logger.info("Registered %d documentation resources", len(resources))
    return server


def run_entrypoint() -> None:
    """Run the server over the configured transport."""
    settings = load_settings()
    mode = settings.server.transport_mode
    if mode == "http":
        _run_http()
        return
    if mode == "sse":
        get_server().run("sse", host=settings.server.host, port=settings.server.port)
        return
    get_server().run()


def _run_http() -> None:
    settings = load_settings()
    configure_logging()
    from sp_api_mcp.transport.http_server import create_http_app

    import uvicorn

    app = create_http_app()
    # Plain HTTP JSON-RPC only; no websocket endpoints.
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        ws="none",
        log_config=None,
    )


_server: MCPServer | None = None
_server_lock = threading.Lock()


def get_server() -> MCPServer:
    """Lazily initialise and return the module-level server instance."""
    global _server
    if _server is not None:
        return _server
    with _server_lock:
        if _server is None:
            _server = build_server()
        return _server


if __name__ == "__main__":  # pragma: no cover
    run_entrypoint()
