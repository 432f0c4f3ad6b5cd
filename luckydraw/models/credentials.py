"""
Domain models for Cafe24 credential persistence.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class StoredCredentials(BaseModel):
    """Decrypted view of the singleton credential record."""

    name: str = Field(..., description="Logical key of the credential record.")
    access_token: str
    refresh_token: str
    created_at: Optional[datetime] = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


__all__ = ["StoredCredentials"]
