from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from sp_api_mcp.tools import build_tool_registry, live_tool_definitions, register_tools

LIVE_TOOLS = {
    "orders.listOrders",
    "orders.getOrder",
    "orders.getOrderAddress",
    "orders.getOrderBuyerInfo",
    "orders.getOrderItems",
    "orders.getOrderItemsBuyerInfo",
    "sales.getOrderMetrics",
    "fbaInventory.getInventorySummaries",
    "productPricing.getPricing",
    "productPricing.getCompetitivePricing",
    "reports.getReports",
    "reports.createReport",
    "reports.getReport",
    "reports.getReportDocument",
}


def test_live_definitions_cover_every_operation() -> None:
    names = [definition.name for definition in live_tool_definitions()]
    assert set(names) == LIVE_TOOLS
    assert len(names) == len(set(names))


def test_registry_is_immutable_and_complete(app_context) -> None:
    registry = build_tool_registry(app_context)

    assert LIVE_TOOLS <= set(registry)
    assert "catalog.lookupItem" in registry
    assert len(registry) == len(LIVE_TOOLS) + 7
    with pytest.raises(TypeError):
        registry["x"] = registry["orders.getOrder"]  # type: ignore[index]


def test_every_tool_declares_an_object_schema(app_context) -> None:
    for tool in build_tool_registry(app_context).values():
        assert tool.input_schema["type"] == "object", tool.name
        assert tool.title, tool.name
        assert tool.annotations["destructiveHint"] is False, tool.name


@pytest.mark.asyncio
async def test_registered_handler_runs_dispatch(app_context, fake_client, upstream) -> None:
    fake_client.ready = False
    fake_client.detail = "no credentials"
    registry = build_tool_registry(app_context)

    result = await registry["reports.getReport"].handler({"reportId": "r1"})

    assert result.is_error is True
    assert result.text == "no credentials"
    assert upstream.requests == []


def test_register_tools_adds_all_specs(app_context) -> None:
    server = MagicMock()
    registry = build_tool_registry(app_context)

    register_tools(server, registry)

    assert server.add_tool.call_count == len(registry)
