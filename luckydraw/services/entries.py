"""
Business logic for lucky-draw entries.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, List, Optional
from zoneinfo import ZoneInfo

from luckydraw.schemas import EntryRecord
from luckydraw.services.customer_lookup import CustomerLookupService
from luckydraw.services.token_manager import Cafe24TokenManager

logger = logging.getLogger(__name__)

ENTRY_PARTITION = "entry"


class DuplicateEntryError(Exception):
    """Raised when the member has already entered the draw."""


class CustomerNotFoundError(Exception):
    """Raised when Cafe24 has no customer profile for the member."""


def _entry_key(member_id: str) -> str:
    return f"member#{member_id}"


class EntryService:
    """Record one entry per member, enriched with the Cafe24 profile."""

    def __init__(
        self,
        store: Any,
        token_manager: Cafe24TokenManager,
        customer_lookup: CustomerLookupService,
        *,
        timezone: str = "Asia/Seoul",
        require_profile: bool = True,
    ) -> None:
        self._store = store
        self._tokens = token_manager
        self._customers = customer_lookup
        self._tz = ZoneInfo(timezone)
        self._require_profile = require_profile

    async def submit(self, member_id: str, cellphone: Optional[str] = None) -> EntryRecord:
        """Create the member's entry or raise ``DuplicateEntryError``."""
        existing = await asyncio.to_thread(
            self._store.get_item,
            partition_key=ENTRY_PARTITION,
            sort_key=_entry_key(member_id),
        )
        if existing:
            raise DuplicateEntryError(member_id)

        # Another instance may have refreshed the shared tokens since we last looked.
        await self._tokens.load_from_store()

        profile = await self._customers.fetch_customer_by_member_id(member_id)
        if profile is None and self._require_profile:
            raise CustomerNotFoundError(member_id)

        entry = EntryRecord(
            member_id=member_id,
            cellphone=cellphone or (profile.cellphone if profile else None),
            created_at=datetime.now(self._tz),
            customer=profile,
        )
        item = {
            "pk": ENTRY_PARTITION,
            "sk": _entry_key(member_id),
            **entry.model_dump(mode="json"),
        }
        inserted = await asyncio.to_thread(self._store.put_item_if_absent, item)
        if not inserted:
            raise DuplicateEntryError(member_id)

        logger.info("Recorded lucky-draw entry for member %s.", member_id)
        return entry

    async def count(self) -> int:
        return await asyncio.to_thread(
            self._store.count_items, partition_key=ENTRY_PARTITION
        )

    async def list_entries(self) -> List[EntryRecord]:
        items = await asyncio.to_thread(
            self._store.query_items, partition_key=ENTRY_PARTITION
        )
        return [EntryRecord.model_validate(item) for item in items]


__all__ = [
    "CustomerNotFoundError",
    "DuplicateEntryError",
    "ENTRY_PARTITION",
    "EntryService",
]
