"""Product Pricing API v0 tools."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from pydantic import Field

from sp_api_mcp.envelope.decoder import EnvelopeSchema
from sp_api_mcp.envelope.models import canonical_decimal_string
from sp_api_mcp.errors import ArgumentError
from sp_api_mcp.execution.http_client import UpstreamRequest
from sp_api_mcp.tools._dispatch import OperationInvoker, Projection, ToolDefinition
from sp_api_mcp.tools._helpers import optional_string, trim_string_list
from sp_api_mcp.tools.base import ResultModel
from sp_api_mcp.utils.time import to_iso, utc_now

PRICING_PATH = "/products/pricing/v0/price"
COMPETITIVE_PRICING_PATH = "/products/pricing/v0/competitivePrice"

MAX_IDENTIFIERS = 20
SUMMARY_ITEM_LIMIT = 3
_ITEM_LIST_KEYS = ("offers", "pricing", "competitivePricing")

PRICING_SCHEMA = EnvelopeSchema.of(Any)


class PricingResult(ResultModel):
    operation: str
    marketplace_id: str
    item_type: str
    item_count: int
    price_points: list[Any] = Field(default_factory=list)
    retrieved_at: str


class CompetitivePricingResult(ResultModel):
    operation: str
    marketplace_id: str
    item_type: str
    item_count: int
    competitive_items: list[Any] = Field(default_factory=list)
    retrieved_at: str


def prepare_pricing(args: dict[str, Any], path: str, with_condition: bool) -> UpstreamRequest:
    marketplace_id = optional_string(args, "marketplaceId")
    if marketplace_id is None:
        raise ArgumentError("marketplaceId is required")
    item_type = optional_string(args, "itemType")
    if item_type is None:
        raise ArgumentError("itemType is required")
    if item_type not in ("Asin", "Sku"):
        raise ArgumentError("itemType must be 'Asin' or 'Sku'")

    asins = trim_string_list(args.get("asins"))
    skus = trim_string_list(args.get("skus"))
    if item_type == "Asin" and not asins:
        raise ArgumentError("asins list is required when itemType is 'Asin'")
    if item_type == "Sku" and not skus:
        raise ArgumentError("skus list is required when itemType is 'Sku'")
    if len(asins) > MAX_IDENTIFIERS:
        raise ArgumentError(f"maximum {MAX_IDENTIFIERS} ASINs allowed")
    if len(skus) > MAX_IDENTIFIERS:
        raise ArgumentError(f"maximum {MAX_IDENTIFIERS} SKUs allowed")

    params: dict[str, object] = {
        "MarketplaceId": marketplace_id,
        "ItemType": item_type,
        "Asins": asins,
        "Skus": skus,
    }
    if with_condition:
        params["ItemCondition"] = optional_string(args, "itemCondition")
    return UpstreamRequest("GET", path, params=params)


def extract_items(payload: Any) -> list[Any]:
    """Pull the priced items out of a payload whose shape varies by marketplace.

    Every ``Amount`` value in the result is a canonical decimal string.
    """
    payload = canonical_amounts(payload)
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping):
        for key in _ITEM_LIST_KEYS:
            items = payload.get(key)
            if isinstance(items, list):
                return items
        return [dict(payload)]
    return [payload]


def canonical_amounts(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {
            key: _canonical_amount(item) if key == "Amount" else canonical_amounts(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [canonical_amounts(item) for item in value]
    return value


def _canonical_amount(value: Any) -> Any:
    try:
        amount = canonical_decimal_string(value)
    except ValueError:
        return value
    return value if amount is None else amount


def _mapping(value: object, key: str) -> Mapping[str, Any] | None:
    if isinstance(value, Mapping):
        nested = value.get(key)
        if isinstance(nested, Mapping):
            return nested
    return None


def _identifier_label(source: Mapping[str, Any]) -> str | None:
    asin = source.get("ASIN")
    if isinstance(asin, str):
        return f"ASIN {asin}"
    sku = source.get("SellerSKU")
    if isinstance(sku, str):
        return f"SKU {sku}"
    return None


def describe_price_point(item: Mapping[str, Any]) -> str:
    label = _identifier_label(item) or "Item"
    listing_price = _mapping(_mapping(item, "BuyingPrice"), "ListingPrice")
    if listing_price is not None:
        currency = listing_price.get("CurrencyCode")
        try:
            amount = canonical_decimal_string(listing_price.get("Amount"))
        except ValueError:
            amount = None
        if isinstance(currency, str) and amount is not None:
            label += f": {currency} {amount}"
    return label


def describe_competitive_item(item: Mapping[str, Any]) -> str:
    identifier = _mapping(item, "identifier")
    label = _identifier_label(identifier) if identifier is not None else None
    parts = [label] if label else []
    competitive = _mapping(item, "competitivePricing")
    prices = competitive.get("CompetitivePrices") if competitive is not None else None
    if isinstance(prices, list):
        parts.append(f"{len(prices)} competitive prices")
    return ": ".join(parts)


def summarize(
    headline: str,
    items: list[Any],
    describe: Callable[[Mapping[str, Any]], str],
    retrieved: datetime,
) -> str:
    if items:
        headline += f" at {retrieved:%H:%M:%S} UTC"
    labels = [
        text
        for text in (
            describe(item) for item in items[:SUMMARY_ITEM_LIMIT] if isinstance(item, Mapping)
        )
        if text
    ]
    if not labels:
        return headline
    return f"{headline} - " + "; ".join(labels)


async def get_pricing(invoker: OperationInvoker, args: dict[str, Any]) -> Projection:
    request = prepare_pricing(args, PRICING_PATH, with_condition=True)
    envelope = await invoker.fetch(
        "productPricing.getPricing", "getPricing", PRICING_SCHEMA, request
    )
    items = extract_items(envelope.payload)
    retrieved = utc_now()
    result = PricingResult(
        operation="GetPricing",
        marketplace_id=request.params["MarketplaceId"],
        item_type=request.params["ItemType"],
        item_count=len(items),
        price_points=items,
        retrieved_at=to_iso(retrieved),
    )
    summary = summarize(
        f"Product pricing retrieved for {result.item_count} items",
        items,
        describe_price_point,
        retrieved,
    )
    return Projection(result, summary)


async def get_competitive_pricing(invoker: OperationInvoker, args: dict[str, Any]) -> Projection:
    request = prepare_pricing(args, COMPETITIVE_PRICING_PATH, with_condition=False)
    envelope = await invoker.fetch(
        "productPricing.getCompetitivePricing",
        "getCompetitivePricing",
        PRICING_SCHEMA,
        request,
    )
    items = extract_items(envelope.payload)
    retrieved = utc_now()
    result = CompetitivePricingResult(
        operation="GetCompetitivePricing",
        marketplace_id=request.params["MarketplaceId"],
        item_type=request.params["ItemType"],
        item_count=len(items),
        competitive_items=items,
        retrieved_at=to_iso(retrieved),
    )
    summary = summarize(
        f"Competitive pricing retrieved for {result.item_count} items",
        items,
        describe_competitive_item,
        retrieved,
    )
    return Projection(result, summary)


def _pricing_input_schema(with_condition: bool) -> dict[str, object]:
    properties: dict[str, object] = {
        "marketplaceId": {
            "type": "string",
            "description": "Marketplace identifier for the pricing request.",
        },
        "itemType": {
            "type": "string",
            "description": "Identifier kind: 'Asin' or 'Sku'.",
        },
        "asins": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Up to 20 ASINs. Required when itemType is 'Asin'.",
        },
        "skus": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Up to 20 seller SKUs. Required when itemType is 'Sku'.",
        },
    }
    if with_condition:
        properties["itemCondition"] = {
            "type": "string",
            "enum": ["New", "Used", "Collectible", "Refurbished", "Club"],
            "description": "Optional item condition filter.",
        }
    return {
        "type": "object",
        "properties": properties,
        "required": ["marketplaceId", "itemType"],
        "additionalProperties": False,
    }


DEFINITIONS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name="productPricing.getPricing",
        title="Product Pricing",
        description=(
            "Retrieve pricing information for up to 20 ASINs or seller SKUs in a marketplace."
        ),
        input_schema=_pricing_input_schema(with_condition=True),
        execute=get_pricing,
    ),
    ToolDefinition(
        name="productPricing.getCompetitivePricing",
        title="Product Pricing",
        description=(
            "Retrieve competitive pricing for up to 20 ASINs or seller SKUs in a marketplace."
        ),
        input_schema=_pricing_input_schema(with_condition=False),
        execute=get_competitive_pricing,
    ),
)
