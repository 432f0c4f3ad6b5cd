from __future__ import annotations

import asyncio

import pytest

from luckydraw.clients import AuthenticatedRequestExecutor, Cafe24OAuthClient
from luckydraw.services import (
    Cafe24TokenManager,
    CustomerLookupService,
    CustomerNotFoundError,
    DuplicateEntryError,
    EntryService,
    TokenState,
)

from _fakes import SlowUpsertCredentialStore


@pytest.fixture
def entry_service(record_store, token_manager, cafe24_settings, fake_cafe24) -> EntryService:
    executor = AuthenticatedRequestExecutor(
        token_manager, cafe24_settings, transport=fake_cafe24.transport
    )
    return EntryService(
        store=record_store,
        token_manager=token_manager,
        customer_lookup=CustomerLookupService(executor),
    )


@pytest.mark.asyncio
async def test_submit_enriches_entry_and_reloads_tokens(
    entry_service, credential_store, token_manager, fake_cafe24
) -> None:
    # Seeded after the manager was built, as another instance would.
    await credential_store.upsert("A1", "R1")
    fake_cafe24.customers["member-1"] = {
        "member_id": "member-1",
        "name": "Kim",
        "cellphone": "010-0000-0000",
        "address1": "Seoul",
        "address2": "Gangnam",
    }

    entry = await entry_service.submit("member-1")

    assert token_manager.access_token == "A1"
    assert entry.member_id == "member-1"
    assert entry.cellphone == "010-0000-0000"
    assert entry.customer.full_address == "Seoul Gangnam"
    assert entry.created_at.utcoffset().total_seconds() == 9 * 3600
    assert await entry_service.count() == 1


@pytest.mark.asyncio
async def test_submitted_cellphone_takes_precedence(
    entry_service, credential_store, fake_cafe24
) -> None:
    await credential_store.upsert("A1", "R1")
    fake_cafe24.customers["member-1"] = {"member_id": "member-1", "cellphone": "010-1"}

    entry = await entry_service.submit("member-1", cellphone="010-2")

    assert entry.cellphone == "010-2"


@pytest.mark.asyncio
async def test_duplicate_is_rejected_before_calling_cafe24(
    entry_service, credential_store, fake_cafe24
) -> None:
    await credential_store.upsert("A1", "R1")
    fake_cafe24.customers["member-1"] = {"member_id": "member-1"}
    await entry_service.submit("member-1")

    with pytest.raises(DuplicateEntryError):
        await entry_service.submit("member-1")

    assert len(fake_cafe24.resource_requests) == 1
    assert await entry_service.count() == 1


@pytest.mark.asyncio
async def test_concurrent_submissions_store_one_entry(
    entry_service, credential_store, fake_cafe24
) -> None:
    await credential_store.upsert("A1", "R1")
    fake_cafe24.customers["member-1"] = {"member_id": "member-1"}

    results = await asyncio.gather(
        entry_service.submit("member-1"),
        entry_service.submit("member-1"),
        return_exceptions=True,
    )

    errors = [result for result in results if isinstance(result, Exception)]
    assert len(errors) == 1
    assert all(isinstance(error, DuplicateEntryError) for error in errors)
    assert await entry_service.count() == 1


@pytest.mark.asyncio
async def test_unknown_member_is_not_recorded(entry_service, credential_store) -> None:
    await credential_store.upsert("A1", "R1")

    with pytest.raises(CustomerNotFoundError):
        await entry_service.submit("ghost")

    assert await entry_service.count() == 0


@pytest.mark.asyncio
async def test_unknown_member_allowed_when_profile_optional(
    record_store, token_manager, credential_store, cafe24_settings, fake_cafe24
) -> None:
    await credential_store.upsert("A1", "R1")
    executor = AuthenticatedRequestExecutor(
        token_manager, cafe24_settings, transport=fake_cafe24.transport
    )
    service = EntryService(
        store=record_store,
        token_manager=token_manager,
        customer_lookup=CustomerLookupService(executor),
        require_profile=False,
    )

    entry = await service.submit("walk-in", cellphone="010-3")

    assert entry.customer is None
    assert [stored.member_id for stored in await service.list_entries()] == ["walk-in"]


@pytest.mark.asyncio
async def test_submission_reloading_tokens_during_refresh_uses_rotated_pair(
    record_store, credential_store, cafe24_settings, fake_cafe24
) -> None:
    await credential_store.upsert("A1", "R1")
    slow_store = SlowUpsertCredentialStore(credential_store)
    manager = Cafe24TokenManager(
        credential_store=slow_store,
        oauth_client=Cafe24OAuthClient(cafe24_settings, transport=fake_cafe24.transport),
    )
    executor = AuthenticatedRequestExecutor(
        manager, cafe24_settings, transport=fake_cafe24.transport
    )
    service = EntryService(
        store=record_store,
        token_manager=manager,
        customer_lookup=CustomerLookupService(executor),
    )
    fake_cafe24.valid_access_tokens = set()
    fake_cafe24.customers["member-1"] = {"member_id": "member-1"}
    fake_cafe24.customers["member-2"] = {"member_id": "member-2"}

    async def submit_while_refreshing():
        await slow_store.upsert_started.wait()
        return await service.submit("member-2")

    first, second = await asyncio.gather(
        service.submit("member-1"), submit_while_refreshing()
    )

    assert (first.member_id, second.member_id) == ("member-1", "member-2")
    assert len(fake_cafe24.refresh_requests) == 1
    assert manager.state is TokenState.LOADED
    assert (manager.access_token, manager.refresh_token) == ("A2", "R2")
    assert await service.count() == 2
