"""
In-process owner of the Cafe24 access/refresh token pair.

The credential record in the document store is the durable source of truth;
this manager caches it, refreshes it through the OAuth client and writes every
newly issued pair back.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Optional

from luckydraw.clients.cafe24_auth import (
    Cafe24OAuthClient,
    OAuthRefreshRejectedError,
    TokenGrant,
)
from luckydraw.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


class TokenNotConfiguredError(Exception):
    """Raised when no token is loaded, as opposed to a token being rejected."""


class TokenState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"
    REFRESHING = "refreshing"
    FAILED = "failed"


class Cafe24TokenManager:
    """Hold, reload and refresh the mall's token pair."""

    def __init__(
        self,
        credential_store: CredentialStore,
        oauth_client: Cafe24OAuthClient,
    ) -> None:
        self._credentials = credential_store
        self._oauth = oauth_client
        self._access_token: Optional[str] = None
        self._refresh_token: Optional[str] = None
        self._state = TokenState.UNINITIALIZED
        self._refresh_lock = asyncio.Lock()
        self._rotated_refresh_token: Optional[str] = None
        self.refresh_count = 0

    @property
    def state(self) -> TokenState:
        return self._state

    @property
    def access_token(self) -> Optional[str]:
        return self._access_token

    @property
    def refresh_token(self) -> Optional[str]:
        return self._refresh_token

    def require_access_token(self) -> str:
        if not self._access_token:
            raise TokenNotConfiguredError(
                "No Cafe24 access token is loaded; seed the credential record first."
            )
        return self._access_token

    async def load_from_store(self) -> bool:
        """
        Replace the in-memory pair with the stored record.

        Waits for an in-flight refresh, so the record is never read between a
        rotation and its write. Returns ``False`` and keeps the current pair
        when nothing newer is stored.
        """
        async with self._refresh_lock:
            stored = await self._credentials.find_one()
            if stored is None:
                logger.info(
                    "No stored credentials under %s; keeping the in-memory tokens.",
                    self._credentials.record_key,
                )
                return False

            if (
                self._rotated_refresh_token is not None
                and stored.refresh_token == self._rotated_refresh_token
            ):
                # Last refresh was not persisted; the stored pair is already dead.
                logger.warning(
                    "Stored Cafe24 tokens predate the last refresh; "
                    "keeping the in-memory tokens."
                )
                return False

            if (
                self._state is TokenState.FAILED
                and stored.refresh_token == self._refresh_token
            ):
                # Same rejected chain; stay failed until someone re-authorizes.
                self._access_token = stored.access_token
                return True

            self._access_token = stored.access_token
            self._refresh_token = stored.refresh_token
            self._state = TokenState.LOADED
            logger.debug("Loaded credentials updated at %s.", stored.updated_at)
            return True

    async def refresh(self, *, stale_access_token: Optional[str] = None) -> str:
        """
        Run the refresh-token grant and persist the new pair.

        Refreshes are serialized. A caller passing the access token it was
        rejected with gets the current token back, without a second grant,
        when a concurrent refresh already replaced it.
        """
        async with self._refresh_lock:
            if (
                stale_access_token is not None
                and self._access_token
                and self._access_token != stale_access_token
                and self._state is TokenState.LOADED
            ):
                return self._access_token

            if self._state is TokenState.FAILED:
                raise OAuthRefreshRejectedError(
                    "Cafe24 refresh token was rejected earlier; re-authorization required."
                )
            if not self._refresh_token:
                raise TokenNotConfiguredError("No Cafe24 refresh token is loaded.")

            previous_state = self._state
            self._state = TokenState.REFRESHING
            try:
                grant = await self._oauth.refresh_token(self._refresh_token)
            except OAuthRefreshRejectedError:
                self._state = TokenState.FAILED
                logger.critical(
                    "Cafe24 refresh token expired or revoked; the mall must be "
                    "re-authorized before customer lookups can resume."
                )
                raise
            except Exception:
                self._state = previous_state
                logger.exception("Cafe24 access token refresh failed.")
                raise

            await self._apply_grant(grant)
            return grant.access_token

    async def _apply_grant(self, grant: TokenGrant) -> None:
        # Cafe24 rotates the refresh token, so the new pair is kept in memory
        # even when persisting it fails.
        self._rotated_refresh_token = self._refresh_token
        self._access_token = grant.access_token
        self._refresh_token = grant.refresh_token
        self._state = TokenState.LOADED
        self.refresh_count += 1
        await self._credentials.upsert(grant.access_token, grant.refresh_token)
        logger.info(
            "Cafe24 tokens refreshed and stored (access token expires at %s).",
            grant.expires_at or "unknown",
        )


__all__ = ["Cafe24TokenManager", "TokenNotConfiguredError", "TokenState"]
