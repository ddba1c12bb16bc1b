from __future__ import annotations

import pytest

from sp_api_mcp.errors import ArgumentError
from sp_api_mcp.tools import sales
from sp_api_mcp.tools._dispatch import dispatch

DEFINITION = sales.DEFINITIONS[0]

BASE_ARGS = {
    "marketplaceIds": ["ATVPDKIKX0DER"],
    "interval": "2024-01-01T00:00:00Z--2024-01-08T00:00:00Z",
    "granularity": "Day",
    "granularityTimeZone": "US/Pacific",
}


def test_asin_and_sku_are_mutually_exclusive() -> None:
    with pytest.raises(ArgumentError, match="provide either asin or sku, not both"):
        sales.prepare_order_metrics({**BASE_ARGS, "asin": "B01", "sku": "SKU-1"})


def test_time_zone_required_for_day_granularity() -> None:
    args = {key: value for key, value in BASE_ARGS.items() if key != "granularityTimeZone"}
    with pytest.raises(ArgumentError, match="granularityTimeZone is required"):
        sales.prepare_order_metrics(args)


@pytest.mark.parametrize("granularity", ["Hour", "Total"])
def test_time_zone_optional_for_hour_and_total(granularity: str) -> None:
    params = sales.prepare_order_metrics(
        {"marketplaceIds": ["A"], "interval": "x--y", "granularity": granularity}
    )
    assert params["granularity_time_zone"] is None


def test_blank_interval_is_rejected() -> None:
    with pytest.raises(ArgumentError, match="interval is required"):
        sales.prepare_order_metrics({**BASE_ARGS, "interval": "   "})


def test_request_uses_camel_case_query() -> None:
    request = sales.build_request(sales.prepare_order_metrics({**BASE_ARGS, "buyerType": "B2B"}))
    assert request.path == "/sales/v1/orderMetrics"
    assert request.params["marketplaceIds"] == ["ATVPDKIKX0DER"]
    assert request.params["granularityTimeZone"] == "US/Pacific"
    assert request.params["buyerType"] == "B2B"
    assert request.params["asin"] is None


@pytest.mark.asyncio
async def test_order_metrics_projection(fake_client, invoker, upstream) -> None:
    upstream.queue_json(
        {
            "payload": [
                {
                    "interval": "2024-01-01T00:00:00-08:00--2024-01-02T00:00:00-08:00",
                    "unitCount": 3,
                    "orderItemCount": 2,
                    "orderCount": 2,
                    "averageUnitPrice": {"currencyCode": "USD", "amount": 9.99},
                    "totalSales": {"currencyCode": "USD", "amount": "29.97"},
                }
            ]
        }
    )

    result = await dispatch(DEFINITION, {**BASE_ARGS, "buyerType": "B2C"}, fake_client, invoker)

    assert result.is_error is False
    assert result.text == (
        "Retrieved 1 day interval(s) for ATVPDKIKX0DER within "
        "2024-01-01T00:00:00Z--2024-01-08T00:00:00Z (buyer type: B2C)"
    )
    metrics = result.structured_content["metrics"]
    assert metrics[0]["averageUnitPrice"] == {"currencyCode": "USD", "amount": "9.99"}
    assert metrics[0]["totalSales"]["amount"] == "29.97"
    assert result.structured_content["granularityTimeZone"] == "US/Pacific"
    assert upstream.requests[0].url.params["marketplaceIds"] == "ATVPDKIKX0DER"


@pytest.mark.asyncio
async def test_unknown_granularity_rejected_by_schema(fake_client, invoker, upstream) -> None:
    result = await dispatch(DEFINITION, {**BASE_ARGS, "granularity": "Fortnight"}, fake_client, invoker)

    assert result.is_error is True
    assert "granularity" in result.text
    assert upstream.requests == []
