"""
Authenticated access to the Cafe24 Admin API.

Every call carries the current bearer token. A 401 triggers one token refresh
and one re-issue of the same request; nothing else is retried.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, TYPE_CHECKING

import httpx
from fastapi import status

from luckydraw.core.config import Cafe24Settings

if TYPE_CHECKING:  # pragma: no cover - type hints only
    from luckydraw.services.token_manager import Cafe24TokenManager

logger = logging.getLogger(__name__)


class Cafe24ApiError(Exception):
    """Raised when a Cafe24 resource call returns a non-2xx response."""

    def __init__(self, status_code: int, payload: Any) -> None:
        super().__init__(f"Cafe24 API request failed with HTTP {status_code}.")
        self.status_code = status_code
        self.payload = payload


class Cafe24UnauthorizedError(Cafe24ApiError):
    """Raised when a request is still rejected after the token refresh."""


class AuthenticatedRequestExecutor:
    """Issue Admin API requests with transparent single-retry token recovery."""

    MAX_AUTH_RETRIES = 1

    def __init__(
        self,
        token_manager: "Cafe24TokenManager",
        settings: Cafe24Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._tokens = token_manager
        self._settings = settings
        self._transport = transport

    def build_url(self, path: str) -> str:
        return f"{self._settings.base_url}/{path.lstrip('/')}"

    def _headers(self, access_token: str) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }
        if self._settings.api_version:
            headers["X-Cafe24-Api-Version"] = self._settings.api_version
        return headers

    async def _send(
        self,
        method: str,
        url: str,
        access_token: str,
        body: Any,
        params: Optional[Dict[str, Any]],
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=self._settings.http_timeout_seconds, transport=self._transport
        ) as client:
            return await client.request(
                method,
                url,
                params=params,
                json=body,
                headers=self._headers(access_token),
            )

    async def execute(
        self,
        method: str,
        url: str,
        *,
        body: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Perform the request and return the decoded JSON payload.

        Raises ``TokenNotConfiguredError`` when no access token is loaded,
        ``Cafe24UnauthorizedError`` when the refreshed token is rejected too,
        and ``Cafe24ApiError`` for any other non-2xx response.
        """
        auth_retries = 0
        access_token = self._tokens.require_access_token()
        while True:
            response = await self._send(method, url, access_token, body, params)

            if response.status_code != status.HTTP_401_UNAUTHORIZED:
                break
            if auth_retries >= self.MAX_AUTH_RETRIES:
                raise Cafe24UnauthorizedError(
                    response.status_code, _decode_payload(response)
                )

            auth_retries += 1
            logger.info("Access token rejected by Cafe24; refreshing and retrying once.")
            access_token = await self._tokens.refresh(stale_access_token=access_token)

        if not response.is_success:
            payload = _decode_payload(response)
            logger.error(
                "Cafe24 %s %s failed with HTTP %s: %s",
                method,
                url,
                response.status_code,
                payload,
            )
            raise Cafe24ApiError(response.status_code, payload)

        return _decode_payload(response)


def _decode_payload(response: httpx.Response) -> Any:
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError:
        return response.text


__all__ = [
    "AuthenticatedRequestExecutor",
    "Cafe24ApiError",
    "Cafe24UnauthorizedError",
]
