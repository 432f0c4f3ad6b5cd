"""Public schema exports."""

from .customer import CustomerProfile
from .entry import EntryCount, EntryRecord, EntryResponse, EntrySubmission

__all__ = [
    "CustomerProfile",
    "EntryCount",
    "EntryRecord",
    "EntryResponse",
    "EntrySubmission",
]
