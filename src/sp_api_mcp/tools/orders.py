"""Orders API v0 tools."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from pydantic import Field

from sp_api_mcp.envelope.decoder import EnvelopeSchema
from sp_api_mcp.envelope.models import OrderMoney, PascalModel
from sp_api_mcp.errors import ArgumentError, ToolFailure
from sp_api_mcp.execution.http_client import UpstreamRequest
from sp_api_mcp.tools._dispatch import OperationInvoker, Projection, ToolDefinition
from sp_api_mcp.tools._helpers import (
    optional_string,
    sanitize_page_size,
    trim_string,
    trim_string_list,
    with_next_token,
)
from sp_api_mcp.tools.base import ResultModel
from sp_api_mcp.utils.time import utc_now_iso

TITLE = "Order Processing"
ORDERS_PATH = "/orders/v0/orders"

NEXT_TOKEN_EXCLUSIVE_MESSAGE = "when nextToken is provided, omit additional filters"


# ---------------------------------------------------------------------------
# Payload models
# ---------------------------------------------------------------------------


class Order(PascalModel):
    amazon_order_id: str = ""
    purchase_date: str | None = None
    last_update_date: str | None = None
    order_status: str | None = None
    order_total: OrderMoney | None = None


class OrderItem(PascalModel):
    asin: str | None = Field(default=None, alias="ASIN")
    seller_sku: str | None = Field(default=None, alias="SellerSKU")
    order_item_id: str | None = None
    title: str | None = None
    quantity_ordered: int | None = None
    item_price: OrderMoney | None = None


class OrderItemBuyerInfo(PascalModel):
    order_item_id: str | None = None
    gift_message_text: str | None = None
    gift_wrap_level: str | None = None


class Address(PascalModel):
    name: str | None = None
    address_line1: str | None = None
    city: str | None = None
    state_or_region: str | None = None
    postal_code: str | None = None
    country_code: str | None = None


class OrderBuyerInfo(PascalModel):
    amazon_order_id: str = ""
    buyer_email: str | None = None
    buyer_name: str | None = None
    purchase_order_number: str | None = None


class OrdersList(PascalModel):
    orders: list[Order] = Field(default_factory=list)
    next_token: str | None = None
    created_before: str | None = None
    last_updated_before: str | None = None


class OrderItemsList(PascalModel):
    amazon_order_id: str = ""
    order_items: list[OrderItem] = Field(default_factory=list)
    next_token: str | None = None


class OrderItemsBuyerInfoList(PascalModel):
    amazon_order_id: str = ""
    order_items: list[OrderItemBuyerInfo] = Field(default_factory=list)
    next_token: str | None = None


class OrderAddress(PascalModel):
    amazon_order_id: str = ""
    shipping_address: Address | None = None


ORDERS_LIST_SCHEMA = EnvelopeSchema.of(OrdersList)
ORDER_SCHEMA = EnvelopeSchema.of(Order)
ORDER_ITEMS_SCHEMA = EnvelopeSchema.of(OrderItemsList)
ORDER_ITEMS_BUYER_INFO_SCHEMA = EnvelopeSchema.of(OrderItemsBuyerInfoList)
ORDER_ADDRESS_SCHEMA = EnvelopeSchema.of(OrderAddress)
ORDER_BUYER_INFO_SCHEMA = EnvelopeSchema.of(OrderBuyerInfo)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class ListOrdersResult(ResultModel):
    orders: list[Order] = Field(default_factory=list)
    next_token: str | None = None
    created_before: str | None = None
    last_updated_before: str | None = None
    retrieved_at: str


class GetOrderResult(ResultModel):
    amazon_order_id: str
    order_status: str
    purchase_date: str
    last_update_date: str
    item_count: int
    retrieved_at: str
    order: Order
    order_items: list[OrderItem] = Field(default_factory=list)


class GetOrderAddressResult(ResultModel):
    amazon_order_id: str
    shipping_address: Address | None = None
    retrieved_at: str


class GetOrderBuyerInfoResult(ResultModel):
    amazon_order_id: str
    buyer_info: OrderBuyerInfo
    retrieved_at: str


class GetOrderItemsResult(ResultModel):
    amazon_order_id: str
    items: list[OrderItem] = Field(default_factory=list)
    next_token: str | None = None
    retrieved_at: str


class GetOrderItemsBuyerInfoResult(ResultModel):
    amazon_order_id: str
    items: list[OrderItemBuyerInfo] = Field(default_factory=list)
    next_token: str | None = None
    retrieved_at: str


# ---------------------------------------------------------------------------
# Argument preparation
# ---------------------------------------------------------------------------

_LIST_ORDERS_STRING_FILTERS = {
    "createdAfter": "CreatedAfter",
    "createdBefore": "CreatedBefore",
    "lastUpdatedAfter": "LastUpdatedAfter",
    "lastUpdatedBefore": "LastUpdatedBefore",
    "buyerEmail": "BuyerEmail",
    "sellerOrderId": "SellerOrderId",
}

_LIST_ORDERS_LIST_FILTERS = {
    "orderStatuses": "OrderStatuses",
    "fulfillmentChannels": "FulfillmentChannels",
    "paymentMethods": "PaymentMethods",
    "easyShipShipmentStatuses": "EasyShipShipmentStatuses",
    "amazonOrderIds": "AmazonOrderIds",
}


def has_list_orders_filters(args: dict[str, Any]) -> bool:
    if trim_string_list(args.get("marketplaceIds")):
        return True
    if any(optional_string(args, key) for key in _LIST_ORDERS_STRING_FILTERS):
        return True
    if any(trim_string_list(args.get(key)) for key in _LIST_ORDERS_LIST_FILTERS):
        return True
    return args.get("maxResultsPerPage") is not None


def prepare_list_orders(args: dict[str, Any]) -> UpstreamRequest:
    next_token = optional_string(args, "nextToken")
    if next_token:
        if has_list_orders_filters(args):
            raise ArgumentError(NEXT_TOKEN_EXCLUSIVE_MESSAGE)
        return UpstreamRequest("GET", ORDERS_PATH, params={"NextToken": next_token})

    marketplaces = trim_string_list(args.get("marketplaceIds"))
    if not marketplaces:
        raise ArgumentError("marketplaceIds is required unless nextToken is provided")

    params: dict[str, object] = {"MarketplaceIds": marketplaces}
    for arg_name, param_name in _LIST_ORDERS_STRING_FILTERS.items():
        params[param_name] = optional_string(args, arg_name)
    for arg_name, param_name in _LIST_ORDERS_LIST_FILTERS.items():
        params[param_name] = trim_string_list(args.get(arg_name)) or None
    params["MaxResultsPerPage"] = sanitize_page_size(args.get("maxResultsPerPage"))
    return UpstreamRequest("GET", ORDERS_PATH, params=params)


def require_order_id(args: dict[str, Any]) -> str:
    order_id = trim_string(args.get("amazonOrderId"))
    if not order_id:
        raise ArgumentError("amazonOrderId is required")
    return order_id


def order_path(order_id: str, suffix: str = "") -> str:
    return f"{ORDERS_PATH}/{quote(order_id, safe='')}{suffix}"


def order_items_request(order_id: str, next_token: str | None) -> UpstreamRequest:
    return UpstreamRequest(
        "GET", order_path(order_id, "/orderItems"), params={"NextToken": next_token}
    )


# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------


def summarize_order(result: GetOrderResult) -> str:
    status = result.order_status or "unknown"
    summary = (
        f"Fetched Amazon order {result.amazon_order_id} with {result.item_count} items "
        f"(status: {status})"
    )
    total = result.order.order_total.display() if result.order.order_total else ""
    if total:
        summary += f", total {total}"
    if result.purchase_date.strip():
        summary += f", purchased {result.purchase_date.strip()}"
    return summary


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


async def list_orders(invoker: OperationInvoker, args: dict[str, Any]) -> Projection:
    request = prepare_list_orders(args)
    envelope = await invoker.fetch("orders.listOrders", "listOrders", ORDERS_LIST_SCHEMA, request)
    payload = envelope.payload
    result = ListOrdersResult(
        orders=payload.orders,
        next_token=envelope.next_token,
        created_before=(payload.created_before or "").strip() or None,
        last_updated_before=(payload.last_updated_before or "").strip() or None,
        retrieved_at=utc_now_iso(),
    )
    summary = with_next_token(f"Retrieved {len(result.orders)} orders", result.next_token)
    return Projection(result, summary)


async def get_order(invoker: OperationInvoker, args: dict[str, Any]) -> Projection:
    order_id = require_order_id(args)
    envelope = await invoker.fetch(
        "orders.getOrder",
        "getOrder",
        ORDER_SCHEMA,
        UpstreamRequest("GET", order_path(order_id)),
    )
    order = envelope.payload

    try:
        walk = await invoker.fetch_all(
            "getOrderItems",
            "getOrderItems",
            ORDER_ITEMS_SCHEMA,
            lambda token: order_items_request(order_id, token),
            lambda page: page.order_items,
        )
    except ToolFailure as exc:
        raise type(exc)(f"failed to retrieve order items: {exc.message}", exc.code) from exc

    result = GetOrderResult(
        amazon_order_id=order.amazon_order_id,
        order_status=(order.order_status or "").strip(),
        purchase_date=(order.purchase_date or "").strip(),
        last_update_date=(order.last_update_date or "").strip(),
        item_count=len(walk.accumulated),
        retrieved_at=utc_now_iso(),
        order=order,
        order_items=walk.accumulated,
    )
    return Projection(result, summarize_order(result))


async def get_order_address(invoker: OperationInvoker, args: dict[str, Any]) -> Projection:
    order_id = require_order_id(args)
    envelope = await invoker.fetch(
        "orders.getOrderAddress",
        "getOrderAddress",
        ORDER_ADDRESS_SCHEMA,
        UpstreamRequest("GET", order_path(order_id, "/address")),
    )
    payload = envelope.payload
    result = GetOrderAddressResult(
        amazon_order_id=payload.amazon_order_id,
        shipping_address=payload.shipping_address,
        retrieved_at=utc_now_iso(),
    )
    name = "unknown"
    if payload.shipping_address is not None and payload.shipping_address.name:
        name = payload.shipping_address.name
    summary = f"Retrieved shipping address for order {result.amazon_order_id} ({name})"
    return Projection(result, summary)


async def get_order_buyer_info(invoker: OperationInvoker, args: dict[str, Any]) -> Projection:
    order_id = require_order_id(args)
    envelope = await invoker.fetch(
        "orders.getOrderBuyerInfo",
        "getOrderBuyerInfo",
        ORDER_BUYER_INFO_SCHEMA,
        UpstreamRequest("GET", order_path(order_id, "/buyerInfo")),
    )
    payload = envelope.payload
    result = GetOrderBuyerInfoResult(
        amazon_order_id=payload.amazon_order_id,
        buyer_info=payload,
        retrieved_at=utc_now_iso(),
    )
    buyer_name = (payload.buyer_name or "").strip() or "unknown"
    summary = f"Retrieved buyer info for order {result.amazon_order_id} ({buyer_name})"
    return Projection(result, summary)


async def get_order_items(invoker: OperationInvoker, args: dict[str, Any]) -> Projection:
    order_id = require_order_id(args)
    envelope = await invoker.fetch(
        "orders.getOrderItems",
        "getOrderItems",
        ORDER_ITEMS_SCHEMA,
        order_items_request(order_id, optional_string(args, "nextToken")),
    )
    payload = envelope.payload
    result = GetOrderItemsResult(
        amazon_order_id=payload.amazon_order_id,
        items=payload.order_items,
        next_token=envelope.next_token,
        retrieved_at=utc_now_iso(),
    )
    summary = with_next_token(
        f"Retrieved {len(result.items)} items for order {result.amazon_order_id}",
        result.next_token,
    )
    return Projection(result, summary)


async def get_order_items_buyer_info(
    invoker: OperationInvoker, args: dict[str, Any]
) -> Projection:
    order_id = require_order_id(args)
    envelope = await invoker.fetch(
        "orders.getOrderItemsBuyerInfo",
        "getOrderItemsBuyerInfo",
        ORDER_ITEMS_BUYER_INFO_SCHEMA,
        UpstreamRequest(
            "GET",
            order_path(order_id, "/orderItems/buyerInfo"),
            params={"NextToken": optional_string(args, "nextToken")},
        ),
    )
    payload = envelope.payload
    result = GetOrderItemsBuyerInfoResult(
        amazon_order_id=payload.amazon_order_id,
        items=payload.order_items,
        next_token=envelope.next_token,
        retrieved_at=utc_now_iso(),
    )
    summary = with_next_token(
        f"Retrieved buyer info for {len(result.items)} items on order {result.amazon_order_id}",
        result.next_token,
    )
    return Projection(result, summary)


# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------

_ORDER_ID_PROPERTY = {
    "type": "string",
    "description": "Amazon order identifier (e.g. 123-1234567-1234567).",
}


def _string_array(description: str) -> dict[str, object]:
    return {"type": "array", "items": {"type": "string"}, "description": description}


LIST_ORDERS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "marketplaceIds": _string_array(
            "One or more marketplace identifiers. Required unless using nextToken."
        ),
        "createdAfter": {
            "type": "string",
            "description": "ISO 8601 timestamp filter for order creation time.",
        },
        "createdBefore": {
            "type": "string",
            "description": "ISO 8601 timestamp upper bound for creation time.",
        },
        "lastUpdatedAfter": {
            "type": "string",
            "description": "ISO 8601 timestamp filter for last update time.",
        },
        "lastUpdatedBefore": {
            "type": "string",
            "description": "ISO 8601 timestamp upper bound for last update time.",
        },
        "orderStatuses": _string_array("Optional list of order status values to include."),
        "fulfillmentChannels": _string_array(
            "Optional fulfillment channel filters (FBA or SellerFulfilled)."
        ),
        "paymentMethods": _string_array("Optional payment method filters (COD, CVS, Other)."),
        "buyerEmail": {"type": "string", "description": "Filter orders by buyer email."},
        "sellerOrderId": {
            "type": "string",
            "description": "Filter by seller-defined order identifier.",
        },
        "maxResultsPerPage": {
            "type": "number",
            "description": "Optional page size between 1 and 100.",
        },
        "easyShipShipmentStatuses": _string_array("Optional Amazon Easy Ship status filters."),
        "amazonOrderIds": _string_array(
            "Optional list of specific Amazon order IDs to retrieve."
        ),
        "nextToken": {
            "type": "string",
            "description": "Pagination token returned from a previous listOrders call.",
        },
    },
    "additionalProperties": False,
}

ORDER_ID_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {"amazonOrderId": _ORDER_ID_PROPERTY},
    "required": ["amazonOrderId"],
    "additionalProperties": False,
}


def _order_items_schema(operation: str) -> dict[str, object]:
    return {
        "type": "object",
        "properties": {
            "amazonOrderId": _ORDER_ID_PROPERTY,
            "nextToken": {
                "type": "string",
                "description": f"Pagination token returned from a previous {operation} call.",
            },
        },
        "required": ["amazonOrderId"],
        "additionalProperties": False,
    }


DEFINITIONS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name="orders.listOrders",
        title=TITLE,
        description=(
            "List orders created or updated within a time window, optionally filtered by "
            "status and fulfillment details. When supplying a next token, omit other filters."
        ),
        input_schema=LIST_ORDERS_SCHEMA,
        execute=list_orders,
    ),
    ToolDefinition(
        name="orders.getOrder",
        title=TITLE,
        description=(
            "Fetch order details and order items for a specific Amazon order ID. "
            "Every page of order items is collected."
        ),
        input_schema=ORDER_ID_SCHEMA,
        execute=get_order,
    ),
    ToolDefinition(
        name="orders.getOrderAddress",
        title=TITLE,
        description="Retrieve the shipping address for a specific Amazon order.",
        input_schema=ORDER_ID_SCHEMA,
        execute=get_order_address,
    ),
    ToolDefinition(
        name="orders.getOrderBuyerInfo",
        title=TITLE,
        description="Retrieve buyer contact details for a specific Amazon order.",
        input_schema=ORDER_ID_SCHEMA,
        execute=get_order_buyer_info,
    ),
    ToolDefinition(
        name="orders.getOrderItems",
        title=TITLE,
        description=(
            "List the line items for a specific Amazon order, supporting pagination via "
            "next tokens."
        ),
        input_schema=_order_items_schema("getOrderItems"),
        execute=get_order_items,
    ),
    ToolDefinition(
        name="orders.getOrderItemsBuyerInfo",
        title=TITLE,
        description=(
            "Retrieve buyer information for each order item, including gift notes and "
            "customization data."
        ),
        input_schema=_order_items_schema("getOrderItemsBuyerInfo"),
        execute=get_order_items_buyer_info,
    ),
)
