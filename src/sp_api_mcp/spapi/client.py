"""Selling Partner API client capability: authorization, endpoint and readiness."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Protocol, runtime_checkable

import httpx

from sp_api_mcp.config import SPAPISettings

logger = logging.getLogger(__name__)

ACCESS_TOKEN_HEADER = "x-amz-access-token"
_DEFAULT_TOKEN_LIFETIME_SECONDS = 3600
NOT_CONFIGURED_REASON = "selling partner credentials are not configured"


class AuthError(Exception):
    """Raised when a request cannot be authorized."""

    def __init__(self, message: str, code: str = "auth_error") -> None:
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class ClientStatus:
    ready: bool
    detail: str = ""


@runtime_checkable
class SellingPartnerClient(Protocol):
    async def authorize(self, request: httpx.Request) -> None: ...

    def endpoint(self) -> str: ...

    def status(self) -> ClientStatus: ...


@dataclass
class AccessToken:
    value: str
    expires_at: datetime

    def is_expiring_soon(self, buffer_seconds: int) -> bool:
        return self.expires_at <= datetime.now(timezone.utc) + timedelta(seconds=buffer_seconds)


class LWASellingPartnerClient:
    """Authorizes requests with a Login with Amazon access token.

    The refresh token is exchanged for a short-lived access token, which is
    cached until ``refresh_buffer_seconds`` before it expires. Concurrent
    callers share a single in-flight exchange.
    """

    def __init__(
        self,
        endpoint: str,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        token_url: str = "https://api.amazon.com/auth/o2/token",
        refresh_buffer_seconds: int = 60,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint = endpoint.rstrip("/")
        self._client_id = client_id
        self._client_secret = client_secret
        self._refresh_token = refresh_token
        self._token_url = token_url
        self._refresh_buffer_seconds = refresh_buffer_seconds
        self._timeout_seconds = timeout_seconds
        self._transport = transport
        self._token: AccessToken | None = None
        self._lock = asyncio.Lock()

    def endpoint(self) -> str:
        return self._endpoint

    def status(self) -> ClientStatus:
        return ClientStatus(ready=True)

    async def authorize(self, request: httpx.Request) -> None:
        token = await self._access_token()
        request.headers[ACCESS_TOKEN_HEADER] = token

    async def _access_token(self) -> str:
        async with self._lock:
            cached = self._token
            if cached is not None and not cached.is_expiring_soon(self._refresh_buffer_seconds):
                return cached.value
            self._token = await self._exchange_refresh_token()
            return self._token.value

    async def _exchange_refresh_token(self) -> AccessToken:
        form = {
            "grant_type": "refresh_token",
            "refresh_token": self._refresh_token,
            "client_id": self._client_id,
            "client_secret": self._client_secret,
        }
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(self._token_url, data=form)
        except httpx.HTTPError as exc:
            raise AuthError(f"token exchange failed: {exc}", "token_unreachable") from exc

        if response.status_code != 200:
            body = response.text[:512]
            logger.warning(
                "LWA token exchange failed: status=%s body=%s", response.status_code, body
            )
            raise AuthError(
                f"token exchange failed with status {response.status_code}",
                "token_rejected",
            )

        try:
            document = response.json()
        except ValueError as exc:
            raise AuthError("token exchange returned non-JSON response", "token_invalid") from exc

        access_token = document.get("access_token") if isinstance(document, dict) else None
        if not isinstance(access_token, str) or not access_token:
            raise AuthError("token exchange response has no access_token", "token_invalid")

        expires_in = document.get("expires_in", _DEFAULT_TOKEN_LIFETIME_SECONDS)
        if not isinstance(expires_in, int) or isinstance(expires_in, bool) or expires_in <= 0:
            expires_in = _DEFAULT_TOKEN_LIFETIME_SECONDS

        logger.info("Obtained LWA access token valid for %d seconds", expires_in)
        return AccessToken(
            value=access_token,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        )


class UnavailableSellingPartnerClient:
    """Stand-in used when credentials are absent; never ready."""

    def __init__(self, endpoint: str, reason: str = NOT_CONFIGURED_REASON) -> None:
        self._endpoint = endpoint.rstrip("/")
        self._reason = reason

    def endpoint(self) -> str:
        return self._endpoint

    def status(self) -> ClientStatus:
        return ClientStatus(ready=False, detail=self._reason)

    async def authorize(self, request: httpx.Request) -> None:
        raise AuthError(f"selling partner client unavailable: {self._reason}", "unavailable")


def create_selling_partner_client(
    settings: SPAPISettings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> SellingPartnerClient:
    if not settings.has_credentials:
        logger.warning("SP-API credentials missing; live tools will report not ready")
        return UnavailableSellingPartnerClient(settings.endpoint)

    client_id, client_secret, refresh_token = settings.credential_values()
    return LWASellingPartnerClient(
        endpoint=settings.endpoint,
        client_id=client_id,
        client_secret=client_secret,
        refresh_token=refresh_token,
        token_url=settings.token_url,
        refresh_buffer_seconds=settings.token_refresh_buffer_seconds,
        timeout_seconds=settings.timeout_seconds,
        transport=transport,
    )
