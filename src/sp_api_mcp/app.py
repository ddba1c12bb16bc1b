"""Application context assembly."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from sp_api_mcp.config import Settings, load_settings
from sp_api_mcp.execution.http_client import UpstreamGateway
from sp_api_mcp.spapi.client import SellingPartnerClient, create_selling_partner_client
from sp_api_mcp.tools._dispatch import OperationInvoker


@dataclass
class AppContext:
    """Application-wide dependency container.

    Holds the settings, the Selling Partner client and the request pipeline
    shared by every tool. Built once at startup and cached for the lifetime
    of the process.
    """

    settings: Settings
    selling_partner: SellingPartnerClient
    gateway: UpstreamGateway
    invoker: OperationInvoker


def build_app_context(settings: Settings) -> AppContext:
    selling_partner = create_selling_partner_client(settings.spapi)
    gateway = UpstreamGateway(
        selling_partner,
        timeout_seconds=settings.spapi.timeout_seconds,
        verbose=settings.logging.verbose_upstream,
    )
    return AppContext(
        settings=settings,
        selling_partner=selling_partner,
        gateway=gateway,
        invoker=OperationInvoker(gateway),
    )


@lru_cache(maxsize=1)
def get_app_context() -> AppContext:
    """Get or create the application context."""
    return build_app_context(load_settings())
