"""Selling Partner API client capability."""

from sp_api_mcp.spapi.client import (
    AuthError,
    ClientStatus,
    LWASellingPartnerClient,
    SellingPartnerClient,
    UnavailableSellingPartnerClient,
    create_selling_partner_client,
)

__all__ = [
    "AuthError",
    "ClientStatus",
    "LWASellingPartnerClient",
    "SellingPartnerClient",
    "UnavailableSellingPartnerClient",
    "create_selling_partner_client",
]
