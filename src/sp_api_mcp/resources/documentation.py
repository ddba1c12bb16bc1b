"""Markdown documentation resources for each SP-API domain."""

from __future__ import annotations

from dataclasses import dataclass

from sp_api_mcp.mcp_runtime import ResourceSpec

URI_SCHEME = "amazon-sp-api"
MIME_TYPE = "text/markdown"

STATUS_NOTE = (
    "This resource is a placeholder. Replace it with live links to Amazon documentation or "
    "generated knowledge base content as the MCP server matures."
)


@dataclass(frozen=True)
class DocumentationEntry:
    category: str
    title: str
    summary: str
    implementation_notes: tuple[str, ...]

    @property
    def uri(self) -> str:
        return f"{URI_SCHEME}://{self.category}"

    def render(self) -> str:
        lines = [f"# {self.title}", "", self.summary, "", "## Implementation Notes"]
        lines.extend(f"- {note}" for note in self.implementation_notes)
        lines.extend(["", "## Status", STATUS_NOTE])
        return "\n".join(lines) + "\n"


DOCUMENTATION_ENTRIES: tuple[DocumentationEntry, ...] = (
    DocumentationEntry(
        category="overview",
        title="Selling Partner API Overview",
        summary=(
            "Orientation material for the Selling Partner API and how this MCP server "
            "organizes functionality."
        ),
        implementation_notes=(
            "Link to the official SP-API developer documentation landing page.",
            "Describe how SP-API authorization, throttling, and marketplace routing impact "
            "every tool.",
            "Clarify environment variables and deployment recommendations for the MCP server.",
        ),
    ),
    DocumentationEntry(
        category="authentication",
        title="Authentication",
        summary=(
            "Guidance for Login with Amazon (LWA) and role-based authorization required by "
            "SP-API."
        ),
        implementation_notes=(
            "Outline the LWA authorization code flow and exchange for refresh tokens.",
            "Document role-based permissions, IAM policy requirements, and AWS STS integration.",
            "Highlight token rotation schedules and secure storage strategies.",
        ),
    ),
    DocumentationEntry(
        category="catalog",
        title="Catalog",
        summary=(
            "Documentation for querying Amazon's product catalog and normalizing item "
            "attributes."
        ),
        implementation_notes=(
            "List supported catalog endpoints and how to select versions (e.g. 2022-04-01).",
            "Explain model coverage for ASINs, seller SKUs, and keyword search.",
            "Call out pagination, locale, and attribute expansion patterns.",
        ),
    ),
    DocumentationEntry(
        category="orders",
        title="Orders",
        summary="Process order retrieval, acknowledgements, and fulfillment workflows.",
        implementation_notes=(
            "Cover the Orders API v0/v2 capabilities and when to use each version.",
            "Detail order item pagination, buyer info access, and fulfillment channel nuances.",
            "Describe how to integrate shipment confirmations and refunds with order updates.",
        ),
    ),
    DocumentationEntry(
        category="inventory",
        title="Inventory",
        summary="Centralize inventory availability, inbound shipments, and restock metrics.",
        implementation_notes=(
            "Document FBA Inventory APIs and MFN inventory sources supported by the server.",
            "Explain how marketplaces and warehouses affect quantity calculations.",
            "Call out long-term storage fees and restock limit insights.",
        ),
    ),
    DocumentationEntry(
        category="reports",
        title="Reports",
        summary="Generate, monitor, and download asynchronous reports.",
        implementation_notes=(
            "List the most common report types and prerequisites for requesting them.",
            "Explain document encryption, compression, and signed URL handling.",
            "Track polling cadence, retry logic, and rate limit strategies for report "
            "generation.",
        ),
    ),
    DocumentationEntry(
        category="feeds",
        title="Feeds",
        summary="Submit, monitor, and validate feeds for catalog and fulfillment updates.",
        implementation_notes=(
            "Enumerate supported feed types and corresponding content schemas.",
            "Describe staging files to S3 or other storage before invoking the Feeds API.",
            "Detail feed document encryption and result inspection after processing.",
        ),
    ),
    DocumentationEntry(
        category="finance",
        title="Finance",
        summary="Work with financial event groups, settlements, and chargebacks.",
        implementation_notes=(
            "Map Finances API resources to accounting events and ledger entries.",
            "Explain pagination through financial event groups and reconciliation best "
            "practices.",
            "Highlight tax, fee, and refund event coverage per marketplace.",
        ),
    ),
    DocumentationEntry(
        category="notifications",
        title="Notifications",
        summary="Manage notification subscriptions and destinations.",
        implementation_notes=(
            "Document destination creation, encryption keys, and SQS/SNS webhook patterns.",
            "Clarify notification type availability and throttling behaviour.",
            "Provide testing approaches for validating notifications end-to-end.",
        ),
    ),
    DocumentationEntry(
        category="productPricing",
        title="Product Pricing",
        summary="Access competitive pricing, fee previews, and offer details.",
        implementation_notes=(
            "List pricing endpoints and required scopes for each marketplace.",
            "Explain batch request limits and caching strategies for price intelligence.",
            "Discuss how to merge pricing with catalog attributes for decisioning.",
        ),
    ),
    DocumentationEntry(
        category="listings",
        title="Listings",
        summary="Create and manage offer details, compliance data, and images.",
        implementation_notes=(
            "Summarise Listings Items API patch semantics and conflict handling.",
            "Highlight hazard, compliance, and image validation requirements.",
            "Outline error handling and retries when updating offers at scale.",
        ),
    ),
    DocumentationEntry(
        category="fba",
        title="Fulfillment by Amazon",
        summary=(
            "Operate inbound shipments, inventory placement, and customer fulfillment via FBA."
        ),
        implementation_notes=(
            "Describe creating inbound shipment plans, labels, and routing workflows.",
            "Explain Small and Light / Amazon Warehousing & Distribution considerations.",
            "Cover reconciliation of received inventory and discrepancy reports.",
        ),
    ),
)


def documentation_resources() -> tuple[ResourceSpec, ...]:
    return tuple(
        ResourceSpec(
            uri=entry.uri,
            name=entry.title,
            description=entry.summary,
            text=entry.render(),
            mime_type=MIME_TYPE,
        )
        for entry in DOCUMENTATION_ENTRIES
    )
