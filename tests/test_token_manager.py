from __future__ import annotations

import base64

import pytest

from luckydraw.clients import (
    Cafe24OAuthClient,
    OAuthRefreshRejectedError,
    OAuthTokenExchangeError,
)
from luckydraw.models import StoredCredentials
from luckydraw.services import (
    Cafe24TokenManager,
    CredentialStore,
    TokenCipherService,
    TokenNotConfiguredError,
    TokenState,
)

from _fakes import FakeCredentialStore


@pytest.mark.asyncio
async def test_load_from_empty_store_is_a_noop(token_manager) -> None:
    loaded = await token_manager.load_from_store()

    assert loaded is False
    assert token_manager.state is TokenState.UNINITIALIZED
    assert token_manager.access_token is None
    assert token_manager.refresh_token is None


@pytest.mark.asyncio
async def test_load_from_empty_store_keeps_existing_pair(cafe24_settings, fake_cafe24) -> None:
    store = FakeCredentialStore(
        StoredCredentials(name="cafe24Tokens", access_token="A1", refresh_token="R1")
    )
    manager = Cafe24TokenManager(
        credential_store=store,
        oauth_client=Cafe24OAuthClient(cafe24_settings, transport=fake_cafe24.transport),
    )
    assert await manager.load_from_store() is True

    store.record = None
    assert await manager.load_from_store() is False

    assert manager.access_token == "A1"
    assert manager.refresh_token == "R1"
    assert manager.state is TokenState.LOADED


@pytest.mark.asyncio
async def test_refresh_persists_and_replaces_pair(
    token_manager, credential_store, fake_cafe24
) -> None:
    await credential_store.upsert("A1", "R1")
    await token_manager.load_from_store()

    new_access = await token_manager.refresh()

    assert new_access == "A2"
    assert token_manager.access_token == "A2"
    assert token_manager.refresh_token == "R2"
    assert token_manager.state is TokenState.LOADED
    assert token_manager.refresh_count == 1

    request = fake_cafe24.refresh_requests[0]
    assert request["form"] == {"grant_type": "refresh_token", "refresh_token": "R1"}
    expected_basic = base64.b64encode(b"client:secret").decode("utf-8")
    assert request["authorization"] == f"Basic {expected_basic}"

    stored = await credential_store.find_one()
    assert (stored.access_token, stored.refresh_token) == ("A2", "R2")


@pytest.mark.asyncio
async def test_refreshed_pair_is_visible_to_a_fresh_process(
    token_manager, credential_store, record_store, cafe24_settings
) -> None:
    await credential_store.upsert("A1", "R1")
    await token_manager.load_from_store()
    await token_manager.refresh()

    restarted = Cafe24TokenManager(
        credential_store=CredentialStore(
            store=record_store, cipher=TokenCipherService(secret="secret-key")
        ),
        oauth_client=Cafe24OAuthClient(cafe24_settings),
    )
    assert await restarted.load_from_store() is True
    assert restarted.access_token == "A2"
    assert restarted.refresh_token == "R2"


@pytest.mark.asyncio
async def test_invalid_grant_is_fatal_and_leaves_pair_unchanged(
    token_manager, credential_store, fake_cafe24
) -> None:
    await credential_store.upsert("A1", "R1")
    await token_manager.load_from_store()
    fake_cafe24.rejected_refresh_tokens.add("R1")

    with pytest.raises(OAuthRefreshRejectedError):
        await token_manager.refresh()

    assert token_manager.access_token == "A1"
    assert token_manager.refresh_token == "R1"
    assert token_manager.state is TokenState.FAILED

    # No further upstream attempts until the chain is replaced.
    with pytest.raises(OAuthRefreshRejectedError):
        await token_manager.refresh()
    assert len(fake_cafe24.refresh_requests) == 1

    stored = await credential_store.find_one()
    assert (stored.access_token, stored.refresh_token) == ("A1", "R1")


@pytest.mark.asyncio
async def test_failed_state_recovers_after_reseeding(
    token_manager, credential_store, fake_cafe24
) -> None:
    await credential_store.upsert("A1", "R1")
    await token_manager.load_from_store()
    fake_cafe24.rejected_refresh_tokens.add("R1")
    with pytest.raises(OAuthRefreshRejectedError):
        await token_manager.refresh()

    await token_manager.load_from_store()
    assert token_manager.state is TokenState.FAILED

    await credential_store.upsert("A9", "R9")
    fake_cafe24.current_refresh_token = "R9"
    await token_manager.load_from_store()
    assert token_manager.state is TokenState.LOADED

    assert await token_manager.refresh() == "A2"


@pytest.mark.asyncio
async def test_other_refresh_failures_are_not_fatal(
    token_manager, credential_store, fake_cafe24
) -> None:
    await credential_store.upsert("A1", "R1")
    await token_manager.load_from_store()
    fake_cafe24.token_error = (503, {"error": "server_error"})

    with pytest.raises(OAuthTokenExchangeError) as exc_info:
        await token_manager.refresh()

    assert not isinstance(exc_info.value, OAuthRefreshRejectedError)
    assert token_manager.state is TokenState.LOADED
    assert token_manager.access_token == "A1"

    fake_cafe24.token_error = None
    assert await token_manager.refresh() == "A2"


@pytest.mark.asyncio
async def test_refresh_without_tokens_is_not_configured(token_manager, fake_cafe24) -> None:
    with pytest.raises(TokenNotConfiguredError):
        await token_manager.refresh()
    with pytest.raises(TokenNotConfiguredError):
        token_manager.require_access_token()
    assert fake_cafe24.refresh_requests == []


@pytest.mark.asyncio
async def test_stale_token_reuses_concurrent_refresh(
    token_manager, credential_store, fake_cafe24
) -> None:
    await credential_store.upsert("A1", "R1")
    await token_manager.load_from_store()

    first = await token_manager.refresh(stale_access_token="A1")
    second = await token_manager.refresh(stale_access_token="A1")

    assert first == second == "A2"
    assert len(fake_cafe24.refresh_requests) == 1


class FailingUpsertCredentialStore(FakeCredentialStore):
    async def upsert(self, access_token: str, refresh_token: str):
        raise RuntimeError("store unavailable")


@pytest.mark.asyncio
async def test_reload_keeps_refreshed_pair_when_persisting_failed(
    cafe24_settings, fake_cafe24
) -> None:
    store = FailingUpsertCredentialStore(
        StoredCredentials(name="cafe24Tokens", access_token="A1", refresh_token="R1")
    )
    manager = Cafe24TokenManager(
        credential_store=store,
        oauth_client=Cafe24OAuthClient(cafe24_settings, transport=fake_cafe24.transport),
    )
    await manager.load_from_store()

    with pytest.raises(RuntimeError):
        await manager.refresh()

    assert await manager.load_from_store() is False
    assert (manager.access_token, manager.refresh_token) == ("A2", "R2")
    assert manager.state is TokenState.LOADED
