"""Pytest configuration shared across the suite."""

try:
    from . import _bootstrap  # noqa: F401
except ImportError:  # pragma: no cover - tests/ is not a package
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from luckydraw.clients import Cafe24OAuthClient, SQLiteStore
from luckydraw.core.config import Cafe24Settings
from luckydraw.services import Cafe24TokenManager, CredentialStore, TokenCipherService

from _fakes import FakeCafe24


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


@pytest.fixture
def cafe24_settings() -> Cafe24Settings:
    return Cafe24Settings(
        CAFE24_MALL_ID="testmall",
        CAFE24_CLIENT_ID="client",
        CAFE24_CLIENT_SECRET="secret",
    )


@pytest.fixture
def fake_cafe24() -> FakeCafe24:
    return FakeCafe24()


@pytest.fixture
def record_store(tmp_path) -> SQLiteStore:
    return SQLiteStore(str(tmp_path / "luckydraw.db"))


@pytest.fixture
def credential_store(record_store) -> CredentialStore:
    return CredentialStore(
        store=record_store, cipher=TokenCipherService(secret="secret-key")
    )


@pytest.fixture
def token_manager(credential_store, cafe24_settings, fake_cafe24) -> Cafe24TokenManager:
    oauth_client = Cafe24OAuthClient(cafe24_settings, transport=fake_cafe24.transport)
    return Cafe24TokenManager(credential_store=credential_store, oauth_client=oauth_client)
