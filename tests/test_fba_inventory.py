from __future__ import annotations

import pytest

from sp_api_mcp.errors import ArgumentError
from sp_api_mcp.tools import fba_inventory
from sp_api_mcp.tools._dispatch import dispatch

DEFINITION = fba_inventory.DEFINITIONS[0]


def test_marketplace_defaults_to_granularity_id() -> None:
    request = fba_inventory.prepare_inventory_summaries(
        {"granularityType": "Marketplace", "granularityId": "ATVPDKIKX0DER"}
    )
    assert request.params["marketplaceIds"] == ["ATVPDKIKX0DER"]


def test_explicit_marketplaces_win() -> None:
    request = fba_inventory.prepare_inventory_summaries(
        {"granularityType": "Marketplace", "granularityId": "A", "marketplaceIds": ["B"]}
    )
    assert request.params["marketplaceIds"] == ["B"]


def test_start_date_must_be_iso8601() -> None:
    with pytest.raises(ArgumentError, match="startDateTime must be in ISO 8601 format"):
        fba_inventory.prepare_inventory_summaries(
            {"granularityType": "Marketplace", "startDateTime": "yesterday"}
        )


def test_blank_granularity_type_is_rejected() -> None:
    with pytest.raises(ArgumentError, match="granularityType is required"):
        fba_inventory.prepare_inventory_summaries({"granularityType": " "})


@pytest.mark.asyncio
async def test_inventory_summaries_projection(fake_client, invoker, upstream) -> None:
    upstream.queue_json(
        {
            "payload": {
                "granularity": {"granularityType": "Marketplace", "granularityId": "A"},
                "inventorySummaries": [
                    {"asin": "B01", "sellerSku": "SKU-1", "totalQuantity": 4},
                    {"asin": "B02", "sellerSku": "SKU-2", "totalQuantity": 0},
                ],
            },
            "pagination": {"nextToken": "page-2"},
        }
    )

    result = await dispatch(
        DEFINITION,
        {"granularityType": "Marketplace", "granularityId": "A", "details": True},
        fake_client,
        invoker,
    )

    assert result.is_error is False
    assert result.text == (
        "Retrieved 2 inventory summaries, more available via nextToken (granularity: Marketplace)"
    )
    assert result.structured_content["nextToken"] == "page-2"
    assert result.structured_content["inventorySummaries"][0]["sellerSku"] == "SKU-1"
    params = upstream.requests[0].url.params
    assert params["details"] == "true"
    assert params["marketplaceIds"] == "A"
