"""
Persistence for the singleton Cafe24 credential record.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from luckydraw.models import StoredCredentials
from luckydraw.services.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)

CREDENTIAL_PARTITION = "credentials"


class CredentialStore:
    """Load and upsert the one token record shared by every process."""

    def __init__(
        self,
        store: Any,
        cipher: TokenCipherService,
        record_key: str = "cafe24Tokens",
    ) -> None:
        self._store = store
        self._cipher = cipher
        self._record_key = record_key

    @property
    def record_key(self) -> str:
        return self._record_key

    def _get_record(self) -> Optional[Dict[str, Any]]:
        return self._store.get_item(
            partition_key=CREDENTIAL_PARTITION, sort_key=self._record_key
        )

    def _find_one_sync(self) -> Optional[StoredCredentials]:
        record = self._get_record()
        if not record:
            return None

        encrypted_access = record.get("access_token_encrypted")
        encrypted_refresh = record.get("refresh_token_encrypted")

        # Records written by the earlier service kept plaintext camelCase tokens.
        legacy_access = record.pop("accessToken", None)
        legacy_refresh = record.pop("refreshToken", None)
        if legacy_access and legacy_refresh and not (
            encrypted_access and encrypted_refresh
        ):
            encrypted_access = self._cipher.encrypt(legacy_access)
            encrypted_refresh = self._cipher.encrypt(legacy_refresh)
            record["access_token_encrypted"] = encrypted_access
            record["refresh_token_encrypted"] = encrypted_refresh
            record["updated_at"] = datetime.now(timezone.utc).isoformat()
            self._store.put_item(record)
            logger.info("Migrated plaintext credential record %s.", self._record_key)

        if not encrypted_access or not encrypted_refresh:
            logger.warning(
                "Credential record %s is missing token fields; ignoring it.",
                self._record_key,
            )
            return None

        return StoredCredentials(
            name=self._record_key,
            access_token=self._cipher.decrypt(encrypted_access),
            refresh_token=self._cipher.decrypt(encrypted_refresh),
            created_at=record.get("created_at"),
            updated_at=record.get("updated_at") or datetime.now(timezone.utc),
        )

    def _upsert_sync(self, access_token: str, refresh_token: str) -> StoredCredentials:
        now = datetime.now(timezone.utc)
        previous = self._get_record() or {}
        created_at = previous.get("created_at") or now.isoformat()
        self._store.put_item(
            {
                "pk": CREDENTIAL_PARTITION,
                "sk": self._record_key,
                "name": self._record_key,
                "access_token_encrypted": self._cipher.encrypt(access_token),
                "refresh_token_encrypted": self._cipher.encrypt(refresh_token),
                "created_at": created_at,
                "updated_at": now.isoformat(),
            }
        )
        return StoredCredentials(
            name=self._record_key,
            access_token=access_token,
            refresh_token=refresh_token,
            created_at=created_at,
            updated_at=now,
        )

    async def find_one(self) -> Optional[StoredCredentials]:
        """Return the stored credentials, or ``None`` when nothing usable is stored."""
        return await asyncio.to_thread(self._find_one_sync)

    async def upsert(self, access_token: str, refresh_token: str) -> StoredCredentials:
        """Overwrite the credential record and stamp ``updated_at``."""
        return await asyncio.to_thread(self._upsert_sync, access_token, refresh_token)


__all__ = ["CREDENTIAL_PARTITION", "CredentialStore"]
