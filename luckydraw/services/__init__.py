"""Service layer exports."""

from .credential_store import CredentialStore
from .customer_lookup import CustomerLookupService
from .entries import CustomerNotFoundError, DuplicateEntryError, EntryService
from .entry_export import EntryExportService
from .token_cipher import CredentialDecryptError, TokenCipherService
from .token_manager import Cafe24TokenManager, TokenNotConfiguredError, TokenState

__all__ = [
    "Cafe24TokenManager",
    "CredentialDecryptError",
    "CredentialStore",
    "CustomerLookupService",
    "CustomerNotFoundError",
    "DuplicateEntryError",
    "EntryExportService",
    "EntryService",
    "TokenCipherService",
    "TokenNotConfiguredError",
    "TokenState",
]
