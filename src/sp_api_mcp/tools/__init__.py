"""Tool registration helpers.

The registry holds two groups of tools:
- live SP-API tools (orders, sales, FBA inventory, product pricing, reports)
  that run through the shared dispatch pipeline
- placeholder tools for domains that are not implemented yet
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from sp_api_mcp.logging_utils import get_logger
from sp_api_mcp.mcp_runtime import MCPServer, ToolSpec
from sp_api_mcp.tools import fba_inventory, orders, product_pricing, reports, sales
from sp_api_mcp.tools._dispatch import ToolDefinition, bind_tool
from sp_api_mcp.tools.placeholders import placeholder_tools

if TYPE_CHECKING:
    from sp_api_mcp.app import AppContext

__all__ = ["build_tool_registry", "live_tool_definitions", "register_tools"]


def live_tool_definitions() -> tuple[ToolDefinition, ...]:
    return (
        *orders.DEFINITIONS,
        *sales.DEFINITIONS,
        *fba_inventory.DEFINITIONS,
        *product_pricing.DEFINITIONS,
        *reports.DEFINITIONS,
    )


def build_tool_registry(ctx: AppContext) -> Mapping[str, ToolSpec]:
    """Build the immutable name-to-tool registry for this process."""
    tools: dict[str, ToolSpec] = {}
    for definition in live_tool_definitions():
        tools[definition.name] = bind_tool(definition, ctx.selling_partner, ctx.invoker)
    for tool in placeholder_tools():
        if tool.name in tools:
            raise RuntimeError(f"Duplicate tool name: {tool.name}")
        tools[tool.name] = tool
    return MappingProxyType(tools)


def register_tools(server: MCPServer, registry: Mapping[str, ToolSpec]) -> None:
    """Register every tool in *registry* with the MCP server."""
    logger = get_logger(__name__)
    for tool in registry.values():
        server.add_tool(tool)
    logger.info("Registered %d tools: %s", len(registry), ", ".join(registry))
