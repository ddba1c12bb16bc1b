"""FBA Inventory API v1 tool."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from sp_api_mcp.envelope.decoder import EnvelopeSchema
from sp_api_mcp.envelope.models import CamelModel
from sp_api_mcp.errors import ArgumentError
from sp_api_mcp.execution.http_client import UpstreamRequest
from sp_api_mcp.tools._dispatch import OperationInvoker, Projection, ToolDefinition
from sp_api_mcp.tools._helpers import is_rfc3339, optional_string, trim_string_list, with_next_token
from sp_api_mcp.tools.base import ResultModel
from sp_api_mcp.utils.time import utc_now_iso

SUMMARIES_PATH = "/fba/inventory/v1/summaries"
MARKETPLACE_GRANULARITY = "Marketplace"


class Granularity(CamelModel):
    granularity_type: str | None = None
    granularity_id: str | None = None


class InventorySummary(CamelModel):
    asin: str | None = None
    fn_sku: str | None = None
    seller_sku: str | None = None
    condition: str | None = None
    product_name: str | None = None
    last_updated_time: str | None = None
    total_quantity: int | None = None


class InventorySummariesPayload(CamelModel):
    granularity: Granularity = Field(default_factory=Granularity)
    inventory_summaries: list[InventorySummary] = Field(default_factory=list)


INVENTORY_SUMMARIES_SCHEMA = EnvelopeSchema.of(InventorySummariesPayload)


class InventorySummariesResult(ResultModel):
    granularity_type: str
    granularity_id: str | None = None
    inventory_summaries: list[InventorySummary] = Field(default_factory=list)
    next_token: str | None = None
    retrieved_at: str


def prepare_inventory_summaries(args: dict[str, Any]) -> UpstreamRequest:
    granularity_type = optional_string(args, "granularityType")
    if granularity_type is None:
        raise ArgumentError("granularityType is required")
    granularity_id = optional_string(args, "granularityId")

    start = optional_string(args, "startDateTime")
    if start is not None and not is_rfc3339(start):
        raise ArgumentError("startDateTime must be in ISO 8601 format")

    marketplaces = trim_string_list(args.get("marketplaceIds"))
    if not marketplaces and granularity_type == MARKETPLACE_GRANULARITY and granularity_id:
        marketplaces = [granularity_id]

    details = args.get("details")
    return UpstreamRequest(
        "GET",
        SUMMARIES_PATH,
        params={
            "granularityType": granularity_type,
            "granularityId": granularity_id,
            "marketplaceIds": marketplaces,
            "startDateTime": start,
            "sellerSkus": trim_string_list(args.get("sellerSkus")),
            "nextToken": optional_string(args, "nextToken"),
            "details": details if isinstance(details, bool) else None,
        },
    )


async def get_inventory_summaries(invoker: OperationInvoker, args: dict[str, Any]) -> Projection:
    request = prepare_inventory_summaries(args)
    envelope = await invoker.fetch(
        "fbaInventory.getInventorySummaries",
        "getInventorySummaries",
        INVENTORY_SUMMARIES_SCHEMA,
        request,
    )
    payload = envelope.payload
    result = InventorySummariesResult(
        granularity_type=payload.granularity.granularity_type or "",
        granularity_id=payload.granularity.granularity_id or None,
        inventory_summaries=payload.inventory_summaries,
        next_token=envelope.next_token,
        retrieved_at=utc_now_iso(),
    )
    summary = with_next_token(
        f"Retrieved {len(result.inventory_summaries)} inventory summaries", result.next_token
    )
    if result.granularity_type:
        summary += f" (granularity: {result.granularity_type})"
    return Projection(result, summary)


INVENTORY_SUMMARIES_INPUT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "granularityType": {
            "type": "string",
            "description": "Granularity of the inventory aggregation, e.g. Marketplace.",
        },
        "granularityId": {
            "type": "string",
            "description": "Granularity identifier; the marketplace ID for Marketplace granularity.",
        },
        "marketplaceIds": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Marketplace identifiers. Defaults to granularityId.",
        },
        "startDateTime": {
            "type": "string",
            "description": "ISO 8601 timestamp; only summaries changed after it are returned.",
        },
        "sellerSkus": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Optional list of seller SKUs to restrict the summaries to.",
        },
        "nextToken": {
            "type": "string",
            "description": "Pagination token returned from a previous call.",
        },
        "details": {
            "type": "boolean",
            "description": "Include inventory details such as reserved and researching quantities.",
        },
    },
    "required": ["granularityType"],
    "additionalProperties": False,
}

DEFINITIONS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name="fbaInventory.getInventorySummaries",
        title="Inventory Management",
        description=(
            "Return FBA inventory summaries for a marketplace, optionally filtered by seller "
            "SKU or by a change date."
        ),
        input_schema=INVENTORY_SUMMARIES_INPUT_SCHEMA,
        execute=get_inventory_summaries,
    ),
)
