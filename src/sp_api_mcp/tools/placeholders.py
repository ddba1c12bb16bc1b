"""Placeholder tools for SP-API domains that are not implemented yet.

Each entry is pure data. The shared handler explains what the tool will do and
echoes any arguments it received so callers can check their payloads.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass

from sp_api_mcp.errors import ArgumentError
from sp_api_mcp.mcp_runtime import ToolResult, ToolSpec
from sp_api_mcp.tools.base import error_result, text_result, validate_or_raise
from sp_api_mcp.utils.serialization import json_default

PLACEHOLDER_ANNOTATIONS = {
    "readOnlyHint": True,
    "destructiveHint": False,
    "idempotentHint": True,
    "openWorldHint": True,
}


@dataclass(frozen=True)
class PlaceholderSpec:
    name: str
    title: str
    description: str
    guidance: str
    input_schema: dict[str, object]


def _schema(properties: dict[str, object], required: tuple[str, ...] = ()) -> dict[str, object]:
    schema: dict[str, object] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = list(required)
    return schema


PLACEHOLDER_SPECS: tuple[PlaceholderSpec, ...] = (
    PlaceholderSpec(
        name="auth.beginAuthorization",
        title="Authentication",
        description="Initiate Login with Amazon workflow for the Selling Partner API.",
        guidance=(
            "Provide Login with Amazon authorization URLs and exchange refresh tokens using "
            "the Tokens API when implementing this tool."
        ),
        input_schema=_schema(
            {
                "marketplaceId": {
                    "type": "string",
                    "description": "Optional marketplace to scope the authorization.",
                }
            }
        ),
    ),
    PlaceholderSpec(
        name="catalog.lookupItem",
        title="Catalog",
        description="Retrieve catalog metadata for a specific identifier or keyword.",
        guidance=(
            "Call the Catalog Items API (2022-04-01) to return attributes, dimensions, and "
            "relationships for the requested identifier."
        ),
        input_schema=_schema(
            {
                "identifier": {
                    "type": "string",
                    "title": "Identifier",
                    "description": "ASIN, seller SKU, or keyword to search for.",
                },
                "identifierType": {
                    "type": "string",
                    "title": "Identifier Type",
                    "enum": ["ASIN", "SKU", "Keyword"],
                    "description": "Controls how the identifier value is interpreted.",
                },
            },
            required=("identifier",),
        ),
    ),
    PlaceholderSpec(
        name="feeds.submitFeed",
        title="Feed Submission",
        description="Upload and submit a processing feed to Amazon.",
        guidance=(
            "Use the Feeds API createFeed operation with the appropriate content type and "
            "optional encryption metadata."
        ),
        input_schema=_schema(
            {
                "feedType": {
                    "type": "string",
                    "description": "Feed type identifier, e.g. POST_PRODUCT_DATA.",
                }
            },
            required=("feedType",),
        ),
    ),
    PlaceholderSpec(
        name="finance.listFinancialEvents",
        title="Financial Data",
        description="List financial events related to orders, refunds, and shipments.",
        guidance=(
            "Invoke the Finances API to page through financial events and reconcile "
            "transactions."
        ),
        input_schema=_schema(
            {
                "amazonOrderId": {
                    "type": "string",
                    "description": "Optional Amazon order identifier to filter results.",
                }
            }
        ),
    ),
    PlaceholderSpec(
        name="notifications.subscribe",
        title="Notification Management",
        description="Register a subscription for an SP-API notification type.",
        guidance=(
            "Implement this tool using the Notifications API to create or update "
            "subscriptions tied to your destination resources."
        ),
        input_schema=_schema(
            {
                "notificationType": {
                    "type": "string",
                    "description": "Notification type to subscribe to, e.g. ANY_OFFER_CHANGED.",
                }
            },
            required=("notificationType",),
        ),
    ),
    PlaceholderSpec(
        name="listings.updateListing",
        title="Listings",
        description="Create or update a listing for a given SKU.",
        guidance=(
            "Tie into the Listings Items API to patch attributes, images, and compliance "
            "details for existing offers."
        ),
        input_schema=_schema(
            {
                "sku": {
                    "type": "string",
                    "description": "Seller SKU whose listing should be updated.",
                },
                "marketplaceId": {
                    "type": "string",
                    "description": "Marketplace identifier for the listing.",
                },
            },
            required=("sku", "marketplaceId"),
        ),
    ),
    PlaceholderSpec(
        name="fba.createInboundShipmentPlan",
        title="FBA Operations",
        description="Plan inbound shipments to Amazon fulfillment centers.",
        guidance=(
            "Coordinate with the FBA Inbound Eligibility and Inbound Shipment APIs to "
            "generate labels and routing information."
        ),
        input_schema=_schema(
            {
                "shipFromAddressId": {
                    "type": "string",
                    "description": "Identifier for the ship-from address resource.",
                }
            },
            required=("shipFromAddressId",),
        ),
    ),
)


def placeholder_message(spec: PlaceholderSpec, arguments: dict[str, object]) -> str:
    message = spec.guidance or spec.description
    text = f"{spec.name} is a placeholder for future {spec.title} capabilities. {message}"
    if arguments:
        pretty = json.dumps(arguments, indent=2, default=json_default)
        text += f"\n\nReceived arguments:\n{pretty}"
    return text


def placeholder_handler(spec: PlaceholderSpec) -> Callable[[dict[str, object]], ToolResult]:
    def handler(arguments: dict[str, object]) -> ToolResult:
        try:
            validate_or_raise(spec.input_schema, arguments)
        except ArgumentError as exc:
            return error_result(exc)
        return text_result(placeholder_message(spec, arguments))

    return handler


def placeholder_tools() -> list[ToolSpec]:
    return [
        ToolSpec(
            name=spec.name,
            description=spec.description,
            input_schema=spec.input_schema,
            handler=placeholder_handler(spec),
            title=spec.title,
            annotations=dict(PLACEHOLDER_ANNOTATIONS),
        )
        for spec in PLACEHOLDER_SPECS
    ]
