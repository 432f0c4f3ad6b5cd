"""
Pydantic models for lucky-draw entry submission and storage.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .customer import CustomerProfile


class EntrySubmission(BaseModel):
    """Body of ``POST /api/entry`` as sent by the mall front-end."""

    model_config = ConfigDict(populate_by_name=True)

    member_id: Optional[str] = Field(
        None,
        alias="memberId",
        description="Cafe24 member ID of the participant.",
    )
    cellphone: Optional[str] = Field(
        None, description="Phone number typed into the event form, if any."
    )


class EntryRecord(BaseModel):
    """One participant's entry; at most one exists per member ID."""

    member_id: str = Field(..., min_length=1)
    cellphone: Optional[str] = None
    created_at: datetime
    customer: Optional[CustomerProfile] = Field(
        None, description="Profile copied from Cafe24 when the entry was made."
    )


class EntryResponse(BaseModel):
    message: str
    entry: EntryRecord


class EntryCount(BaseModel):
    count: int


__all__ = ["EntryCount", "EntryRecord", "EntryResponse", "EntrySubmission"]
