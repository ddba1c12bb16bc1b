from __future__ import annotations

from sp_api_mcp.app import build_app_context
from sp_api_mcp.config import SPAPISettings, Settings
from sp_api_mcp.spapi.client import LWASellingPartnerClient, UnavailableSellingPartnerClient


def test_context_without_credentials_is_unready() -> None:
    ctx = build_app_context(Settings())

    assert isinstance(ctx.selling_partner, UnavailableSellingPartnerClient)
    assert ctx.gateway.client is ctx.selling_partner
    assert ctx.selling_partner.status().ready is False


def test_context_with_credentials_uses_lwa_client() -> None:
    settings = Settings(spapi=SPAPISettings(client_id="cid", client_secret="s", refresh_token="r"))

    ctx = build_app_context(settings)

    assert isinstance(ctx.selling_partner, LWASellingPartnerClient)
    assert ctx.settings is settings
