"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app, the token lifecycle and
the maintenance scripts share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

import os

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class Cafe24Settings(BaseSettings):
    """Configuration required for interacting with the Cafe24 Admin API."""

    model_config = SettingsConfigDict(extra="ignore")

    mall_id: str = Field(..., min_length=1, validation_alias="CAFE24_MALL_ID")
    client_id: str = Field(..., min_length=1, validation_alias="CAFE24_CLIENT_ID")
    client_secret: str = Field(
        ..., min_length=1, validation_alias="CAFE24_CLIENT_SECRET"
    )
    api_version: Optional[str] = Field(
        None,
        validation_alias="CAFE24_API_VERSION",
        description="Value for the X-Cafe24-Api-Version header, when pinned.",
    )
    customer_resource: Literal["customersprivacy", "customers"] = Field(
        "customersprivacy",
        validation_alias="CAFE24_CUSTOMER_RESOURCE",
        description="Admin resource queried for customer profiles.",
    )
    http_timeout_seconds: float = Field(10.0, validation_alias="CAFE24_HTTP_TIMEOUT")

    @property
    def base_url(self) -> str:
        return f"https://{self.mall_id}.cafe24api.com"


class StoreSettings(BaseSettings):
    """Settings for the document store holding credentials and entries."""

    model_config = SettingsConfigDict(extra="ignore")

    backend: Literal["sqlite", "dynamodb"] = Field(
        "sqlite", validation_alias="STORE_BACKEND"
    )
    sqlite_db_path: str = Field("data/luckydraw.db", validation_alias="SQLITE_DB_PATH")
    region_name: str = Field("ap-northeast-2", validation_alias="AWS_REGION")
    dynamodb_table_name: Optional[str] = Field(
        None,
        validation_alias="DYNAMODB_TABLE_NAME",
        description="Required when the dynamodb backend is selected.",
    )
    credential_record_key: str = Field(
        "cafe24Tokens", validation_alias="CREDENTIAL_RECORD_KEY"
    )

    @model_validator(mode="after")
    def _require_table_for_dynamodb(self) -> "StoreSettings":
        if self.backend == "dynamodb" and not self.dynamodb_table_name:
            raise ValueError("DYNAMODB_TABLE_NAME is required for the dynamodb backend.")
        return self


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    model_config = SettingsConfigDict(extra="ignore")

    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        description=(
            "Secret used to derive the symmetric key for encrypting stored tokens."
        ),
    )


class EventSettings(BaseSettings):
    """Lucky-draw event behaviour and export formatting."""

    model_config = SettingsConfigDict(extra="ignore")

    timezone: str = Field("Asia/Seoul", validation_alias="EVENT_TIMEZONE")
    export_filename: str = Field("luckyEvent.xlsx", validation_alias="EXPORT_FILENAME")
    export_sheet_title: str = Field("Entries", validation_alias="EXPORT_SHEET_TITLE")
    require_customer_profile: bool = Field(
        True,
        validation_alias="REQUIRE_CUSTOMER_PROFILE",
        description="Reject entries whose member has no Cafe24 customer profile.",
    )


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    cors_allow_origins: str = Field("*", validation_alias="CORS_ALLOW_ORIGINS")
    cafe24: Cafe24Settings = Field(default_factory=Cafe24Settings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    event: EventSettings = Field(default_factory=EventSettings)

    @property
    def cors_origins(self) -> list[str]:
        """Support providing origins as a comma-separated string."""
        return [
            origin.strip()
            for origin in self.cors_allow_origins.split(",")
            if origin.strip()
        ]


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "Cafe24Settings",
    "EventSettings",
    "SecuritySettings",
    "StoreSettings",
    "get_settings",
]
