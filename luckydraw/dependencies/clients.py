"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache
from typing import Union

from fastapi import Depends

from luckydraw.clients import (
    AuthenticatedRequestExecutor,
    Cafe24OAuthClient,
    DynamoDBClient,
    SQLiteStore,
)
from luckydraw.core.config import get_settings
from luckydraw.services import (
    Cafe24TokenManager,
    CredentialStore,
    CustomerLookupService,
    EntryExportService,
    EntryService,
    TokenCipherService,
)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_record_store() -> Union[SQLiteStore, DynamoDBClient]:
    """Provide the configured document store backend."""
    settings = _settings()
    if settings.store.backend == "dynamodb":
        return DynamoDBClient(settings.store)
    return SQLiteStore(settings.store.sqlite_db_path)


@lru_cache()
def get_token_cipher_service() -> TokenCipherService:
    """Provide symmetric encryption helper for token storage."""
    settings = _settings()
    secret = settings.security.token_encryption_secret or settings.cafe24.client_secret
    return TokenCipherService(secret=secret)


@lru_cache()
def get_credential_store() -> CredentialStore:
    settings = _settings()
    return CredentialStore(
        store=get_record_store(),
        cipher=get_token_cipher_service(),
        record_key=settings.store.credential_record_key,
    )


@lru_cache()
def get_cafe24_oauth_client() -> Cafe24OAuthClient:
    return Cafe24OAuthClient(_settings().cafe24)


@lru_cache()
def get_token_manager() -> Cafe24TokenManager:
    """One token manager per process; it owns the in-memory token pair."""
    return Cafe24TokenManager(
        credential_store=get_credential_store(),
        oauth_client=get_cafe24_oauth_client(),
    )


@lru_cache()
def get_request_executor() -> AuthenticatedRequestExecutor:
    return AuthenticatedRequestExecutor(get_token_manager(), _settings().cafe24)


def get_customer_lookup_service() -> CustomerLookupService:
    return CustomerLookupService(
        get_request_executor(),
        resource=_settings().cafe24.customer_resource,
    )


def get_entry_service() -> EntryService:
    settings = _settings()
    return EntryService(
        store=get_record_store(),
        token_manager=get_token_manager(),
        customer_lookup=get_customer_lookup_service(),
        timezone=settings.event.timezone,
        require_profile=settings.event.require_customer_profile,
    )


def get_entry_export_service(
    entry_service: EntryService = Depends(get_entry_service),
) -> EntryExportService:
    return EntryExportService(
        entry_service, sheet_title=_settings().event.export_sheet_title
    )


__all__ = [
    "get_cafe24_oauth_client",
    "get_credential_store",
    "get_customer_lookup_service",
    "get_entry_export_service",
    "get_entry_service",
    "get_record_store",
    "get_request_executor",
    "get_token_cipher_service",
    "get_token_manager",
]
