"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_cafe24_oauth_client,
    get_credential_store,
    get_customer_lookup_service,
    get_entry_export_service,
    get_entry_service,
    get_record_store,
    get_request_executor,
    get_token_cipher_service,
    get_token_manager,
)
from .config import SettingsDependency, get_app_settings

__all__ = [
    "SettingsDependency",
    "get_app_settings",
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
