from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import patch

import pytest

from sp_api_mcp.errors import ArgumentError
from sp_api_mcp.tools import product_pricing
from sp_api_mcp.tools._dispatch import dispatch

TOOLS = {definition.name: definition for definition in product_pricing.DEFINITIONS}
PATH = product_pricing.PRICING_PATH
FIXED_NOW = datetime(2024, 3, 1, 12, 34, 56, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock():
    with patch("sp_api_mcp.tools.product_pricing.utc_now", return_value=FIXED_NOW):
        yield FIXED_NOW


@pytest.mark.parametrize(
    "args, message",
    [
        ({"itemType": "Asin", "asins": ["B01"]}, "marketplaceId is required"),
        ({"marketplaceId": "A", "itemType": "Upc"}, "itemType must be 'Asin' or 'Sku'"),
        ({"marketplaceId": "A", "itemType": "Asin"}, "asins list is required"),
        ({"marketplaceId": "A", "itemType": "Sku", "asins": ["B01"]}, "skus list is required"),
        (
            {"marketplaceId": "A", "itemType": "Asin", "asins": [f"B{i}" for i in range(21)]},
            "maximum 20 ASINs allowed",
        ),
    ],
)
def test_pricing_argument_rules(args, message) -> None:
    with pytest.raises(ArgumentError, match=message):
        product_pricing.prepare_pricing(args, PATH, with_condition=True)


def test_twenty_identifiers_are_accepted() -> None:
    request = product_pricing.prepare_pricing(
        {"marketplaceId": "A", "itemType": "Sku", "skus": [f"S{i}" for i in range(20)]},
        PATH,
        with_condition=True,
    )
    assert len(request.params["Skus"]) == 20
    assert request.params["ItemCondition"] is None


def test_extract_items_handles_varied_shapes() -> None:
    assert product_pricing.extract_items([{"ASIN": "B01"}]) == [{"ASIN": "B01"}]
    assert product_pricing.extract_items({"offers": [1, 2]}) == [1, 2]
    assert product_pricing.extract_items({"ASIN": "B01"}) == [{"ASIN": "B01"}]
    assert product_pricing.extract_items("odd") == ["odd"]


def test_extract_items_canonicalizes_amounts() -> None:
    payload = {
        "ASIN": "B01",
        "Product": {
            "Offers": [
                {"BuyingPrice": {"ListingPrice": {"Amount": Decimal("10.00")}}},
                {"BuyingPrice": {"ListingPrice": {"Amount": 12}}},
            ]
        },
    }

    [item] = product_pricing.extract_items(payload)

    offers = item["Product"]["Offers"]
    assert offers[0]["BuyingPrice"]["ListingPrice"]["Amount"] == "10.00"
    assert offers[1]["BuyingPrice"]["ListingPrice"]["Amount"] == "12"


@pytest.mark.asyncio
async def test_empty_pricing_summary_has_no_time(
    fake_client, invoker, upstream, fixed_clock
) -> None:
    upstream.queue_json({"payload": []})

    result = await dispatch(
        TOOLS["productPricing.getPricing"],
        {"marketplaceId": "A", "itemType": "Asin", "asins": ["B01"]},
        fake_client,
        invoker,
    )

    assert result.text == "Product pricing retrieved for 0 items"


@pytest.mark.asyncio
async def test_get_pricing_summary_lists_first_items(
    fake_client, invoker, upstream, fixed_clock
) -> None:
    upstream.queue_raw(
        b'{"payload": ['
        b'{"ASIN": "B01", "status": "Success", "BuyingPrice": {"ListingPrice": '
        b'{"CurrencyCode": "USD", "Amount": 19.90}}},'
        b'{"SellerSKU": "SKU-2"},'
        b'{"ASIN": "B03"},'
        b'{"ASIN": "B04"}'
        b"]}"
    )

    result = await dispatch(
        TOOLS["productPricing.getPricing"],
        {"marketplaceId": "A", "itemType": "Asin", "asins": ["B01", "B03", "B04"]},
        fake_client,
        invoker,
    )

    assert result.is_error is False
    assert result.text == (
        "Product pricing retrieved for 4 items at 12:34:56 UTC - "
        "ASIN B01: USD 19.90; SKU SKU-2; ASIN B03"
    )
    data = result.structured_content
    assert data["operation"] == "GetPricing"
    assert data["itemCount"] == 4
    assert data["pricePoints"][0]["BuyingPrice"]["ListingPrice"]["Amount"] == "19.90"
    assert data["retrievedAt"] == "2024-03-01T12:34:56Z"
    assert upstream.requests[0].url.params["Asins"] == "B01,B03,B04"


@pytest.mark.asyncio
async def test_competitive_pricing_summary(fake_client, invoker, upstream, fixed_clock) -> None:
    upstream.queue_json(
        {
            "payload": [
                {
                    "identifier": {"ASIN": "B01"},
                    "competitivePricing": {"CompetitivePrices": [{}, {}]},
                }
            ]
        }
    )

    result = await dispatch(
        TOOLS["productPricing.getCompetitivePricing"],
        {"marketplaceId": "A", "itemType": "Asin", "asins": ["B01"]},
        fake_client,
        invoker,
    )

    assert result.text == (
        "Competitive pricing retrieved for 1 items at 12:34:56 UTC - "
        "ASIN B01: 2 competitive prices"
    )
    assert upstream.requests[0].url.path == product_pricing.COMPETITIVE_PRICING_PATH
    assert "ItemCondition" not in upstream.requests[0].url.params


@pytest.mark.asyncio
async def test_pricing_errors_go_through_classifier(fake_client, invoker, upstream) -> None:
    upstream.queue_json(
        {"errors": [{"code": "InvalidInput", "message": "Invalid ASIN"}]}, status_code=400
    )

    result = await dispatch(
        TOOLS["productPricing.getPricing"],
        {"marketplaceId": "A", "itemType": "Asin", "asins": ["bad"]},
        fake_client,
        invoker,
    )

    assert result.text == (
        "getPricing: request failed with status 400 Bad Request: Invalid ASIN (InvalidInput)"
    )
