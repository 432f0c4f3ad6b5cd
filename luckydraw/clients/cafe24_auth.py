"""
Cafe24 OAuth utilities.

Only the refresh-token grant is implemented; issuing the first token pair
(the mall admin consent flow) happens outside this service.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, Optional

import httpx
from fastapi import status

from luckydraw.core.config import Cafe24Settings


class OAuthTokenExchangeError(Exception):
    """Raised when the token endpoint fails or returns an unusable payload."""

    def __init__(self, message: str, payload: Any = None) -> None:
        super().__init__(message)
        self.payload = payload


class OAuthRefreshRejectedError(OAuthTokenExchangeError):
    """Raised when Cafe24 reports the refresh token as invalid or expired."""


@dataclass(frozen=True)
class TokenGrant:
    """Token pair returned by the Cafe24 token endpoint."""

    access_token: str
    refresh_token: str
    expires_at: Optional[str] = None
    refresh_token_expires_at: Optional[str] = None


class Cafe24OAuthClient:
    """Exchange refresh tokens against a mall's token endpoint."""

    TOKEN_PATH = "/api/v2/oauth/token"

    def __init__(
        self,
        settings: Cafe24Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    @property
    def token_url(self) -> str:
        return f"{self._settings.base_url}{self.TOKEN_PATH}"

    def _basic_credentials(self) -> str:
        raw = f"{self._settings.client_id}:{self._settings.client_secret}"
        return base64.b64encode(raw.encode("utf-8")).decode("utf-8")

    async def refresh_token(self, refresh_token: str) -> TokenGrant:
        """Mint a new access/refresh pair from the current refresh token."""
        headers = {
            "Authorization": f"Basic {self._basic_credentials()}",
            "Content-Type": "application/x-www-form-urlencoded",
        }
        payload = {"grant_type": "refresh_token", "refresh_token": refresh_token}

        async with httpx.AsyncClient(
            timeout=self._settings.http_timeout_seconds, transport=self._transport
        ) as client:
            response = await client.post(self.token_url, data=payload, headers=headers)

        try:
            token_payload = response.json()
        except ValueError:
            token_payload = None

        if response.status_code != status.HTTP_200_OK:
            error_code = (
                token_payload.get("error") if isinstance(token_payload, dict) else None
            )
            if error_code == "invalid_grant":
                raise OAuthRefreshRejectedError(
                    "Refresh token rejected by Cafe24; re-authorization required.",
                    payload=token_payload,
                )
            raise OAuthTokenExchangeError(
                f"Token endpoint returned HTTP {response.status_code}.",
                payload=token_payload if token_payload is not None else response.text,
            )

        if not isinstance(token_payload, dict):
            raise OAuthTokenExchangeError("Token endpoint returned a non-JSON body.")

        access_token = token_payload.get("access_token")
        new_refresh_token = token_payload.get("refresh_token")
        if not access_token or not new_refresh_token:
            raise OAuthTokenExchangeError(
                "Incomplete refresh payload returned from Cafe24."
            )

        return TokenGrant(
            access_token=access_token,
            refresh_token=new_refresh_token,
            expires_at=token_payload.get("expires_at"),
            refresh_token_expires_at=token_payload.get("refresh_token_expires_at"),
        )


__all__ = [
    "Cafe24OAuthClient",
    "OAuthRefreshRejectedError",
    "OAuthTokenExchangeError",
    "TokenGrant",
]
