"""Sales API v1 order metrics tool."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from sp_api_mcp.envelope.decoder import EnvelopeSchema
from sp_api_mcp.envelope.models import CamelModel, Money
from sp_api_mcp.errors import ArgumentError
from sp_api_mcp.execution.http_client import UpstreamRequest
from sp_api_mcp.tools._dispatch import OperationInvoker, Projection, ToolDefinition
from sp_api_mcp.tools._helpers import optional_string, trim_string_list
from sp_api_mcp.tools.base import ResultModel
from sp_api_mcp.utils.time import utc_now_iso

ORDER_METRICS_PATH = "/sales/v1/orderMetrics"

GRANULARITIES = ("Hour", "Day", "Week", "Month", "Year", "Total")
_TIME_ZONE_OPTIONAL = frozenset({"HOUR", "TOTAL"})


class OrderMetricsInterval(CamelModel):
    interval: str = ""
    unit_count: int = 0
    order_item_count: int = 0
    order_count: int = 0
    average_unit_price: Money = Field(default_factory=Money)
    total_sales: Money = Field(default_factory=Money)


ORDER_METRICS_SCHEMA = EnvelopeSchema.of(list[OrderMetricsInterval])


class OrderMetricsResult(ResultModel):
    marketplace_ids: list[str]
    interval: str
    granularity: str
    granularity_time_zone: str | None = None
    buyer_type: str | None = None
    fulfillment_network: str | None = None
    first_day_of_week: str | None = None
    asin: str | None = None
    sku: str | None = None
    metrics: list[OrderMetricsInterval] = Field(default_factory=list)
    retrieved_at: str


def prepare_order_metrics(args: dict[str, Any]) -> dict[str, Any]:
    """Validate arguments and return the trimmed parameter set."""
    marketplaces = trim_string_list(args.get("marketplaceIds"))
    if not marketplaces:
        raise ArgumentError("marketplaceIds is required")
    interval = optional_string(args, "interval")
    if interval is None:
        raise ArgumentError("interval is required")
    granularity = optional_string(args, "granularity")
    if granularity is None:
        raise ArgumentError("granularity is required")

    asin = optional_string(args, "asin")
    sku = optional_string(args, "sku")
    if asin and sku:
        raise ArgumentError("provide either asin or sku, not both")

    time_zone = optional_string(args, "granularityTimeZone")
    if granularity.upper() not in _TIME_ZONE_OPTIONAL and time_zone is None:
        raise ArgumentError("granularityTimeZone is required when granularity is Day or greater")

    return {
        "marketplace_ids": marketplaces,
        "interval": interval,
        "granularity": granularity,
        "granularity_time_zone": time_zone,
        "buyer_type": optional_string(args, "buyerType"),
        "fulfillment_network": optional_string(args, "fulfillmentNetwork"),
        "first_day_of_week": optional_string(args, "firstDayOfWeek"),
        "asin": asin,
        "sku": sku,
    }


def build_request(params: dict[str, Any]) -> UpstreamRequest:
    return UpstreamRequest(
        "GET",
        ORDER_METRICS_PATH,
        params={
            "marketplaceIds": params["marketplace_ids"],
            "interval": params["interval"],
            "granularity": params["granularity"],
            "granularityTimeZone": params["granularity_time_zone"],
            "buyerType": params["buyer_type"],
            "fulfillmentNetwork": params["fulfillment_network"],
            "firstDayOfWeek": params["first_day_of_week"],
            "asin": params["asin"],
            "sku": params["sku"],
        },
    )


def summarize(result: OrderMetricsResult) -> str:
    granularity = result.granularity.strip().lower() or "requested"
    marketplaces = ", ".join(result.marketplace_ids) or "requested marketplaces"
    summary = f"Retrieved {len(result.metrics)} {granularity} interval(s) for {marketplaces}"
    if result.interval.strip():
        summary += f" within {result.interval.strip()}"
    if result.buyer_type:
        summary += f" (buyer type: {result.buyer_type})"
    return summary


async def get_order_metrics(invoker: OperationInvoker, args: dict[str, Any]) -> Projection:
    params = prepare_order_metrics(args)
    envelope = await invoker.fetch(
        "sales.getOrderMetrics",
        "getOrderMetrics",
        ORDER_METRICS_SCHEMA,
        build_request(params),
    )
    result = OrderMetricsResult(
        **params,
        metrics=envelope.payload,
        retrieved_at=utc_now_iso(),
    )
    return Projection(result, summarize(result))


ORDER_METRICS_INPUT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "marketplaceIds": {
            "type": "array",
            "items": {"type": "string"},
            "description": "One or more marketplace identifiers (for example ATVPDKIKX0DER).",
        },
        "interval": {
            "type": "string",
            "description": (
                "Inclusive/exclusive ISO 8601 interval formatted as start--end "
                "(e.g. 2024-01-01T00:00:00Z--2024-01-08T00:00:00Z)."
            ),
        },
        "granularity": {
            "type": "string",
            "enum": list(GRANULARITIES),
            "description": "Time bucket granularity for the metrics.",
        },
        "granularityTimeZone": {
            "type": "string",
            "description": (
                "IANA time zone identifier required when granularity is Day or higher "
                "(e.g. UTC, US/Pacific)."
            ),
        },
        "buyerType": {
            "type": "string",
            "enum": ["B2B", "B2C"],
            "description": "Optional buyer segment filter.",
        },
        "fulfillmentNetwork": {
            "type": "string",
            "enum": ["AFN", "MFN"],
            "description": "Optional fulfillment network filter.",
        },
        "firstDayOfWeek": {
            "type": "string",
            "enum": ["Monday", "Sunday"],
            "description": "Override the first weekday when granularity is Week.",
        },
        "asin": {
            "type": "string",
            "description": "Optional ASIN filter. Cannot be combined with sku.",
        },
        "sku": {
            "type": "string",
            "description": "Optional seller SKU filter. Cannot be combined with asin.",
        },
    },
    "required": ["marketplaceIds", "interval", "granularity"],
    "additionalProperties": False,
}

DEFINITIONS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name="sales.getOrderMetrics",
        title="Sales Performance",
        description=(
            "Aggregate order metrics over a requested interval with configurable granularity "
            "and filters. Provide an ISO-8601 interval separated by '--' and align the time "
            "zone when aggregating beyond hourly granularity."
        ),
        input_schema=ORDER_METRICS_INPUT_SCHEMA,
        execute=get_order_metrics,
    ),
)
