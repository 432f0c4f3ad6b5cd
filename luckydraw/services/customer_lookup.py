"""
Customer profile lookups against the Cafe24 Admin API.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from luckydraw.clients.cafe24_api import AuthenticatedRequestExecutor
from luckydraw.schemas import CustomerProfile

logger = logging.getLogger(__name__)


class CustomerLookupService:
    """Fetch a single customer profile by mall member ID."""

    def __init__(
        self,
        executor: AuthenticatedRequestExecutor,
        resource: str = "customersprivacy",
    ) -> None:
        self._executor = executor
        self._resource = resource

    async def fetch_customer_by_member_id(
        self, member_id: str
    ) -> Optional[CustomerProfile]:
        """
        Return the member's profile, or ``None`` when Cafe24 has no match.

        Callers must check for ``None``; an empty result set is not an error.
        """
        if not isinstance(member_id, str) or not member_id.strip():
            raise ValueError("member_id must be a non-empty string.")

        url = self._executor.build_url(f"/api/v2/admin/{self._resource}")
        payload = await self._executor.execute(
            "GET", url, params={"member_id": member_id}
        )
        record = self._first_record(payload)
        if record is None:
            logger.info("No Cafe24 customer found for member_id %s.", member_id)
            return None
        return CustomerProfile.model_validate(record)

    def _first_record(self, payload: Any) -> Optional[dict]:
        if not isinstance(payload, dict):
            return None
        collection = payload.get(self._resource)
        if isinstance(collection, list):
            collection = collection[0] if collection else None
        if not isinstance(collection, dict) or not collection:
            return None
        return collection


__all__ = ["CustomerLookupService"]
