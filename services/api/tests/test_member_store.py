from datetime import timedelta

import pytest

from app.errors import AlreadyExistsError, InvalidError, NotFoundError
from app.services.members import CounterDelta, MemberStore, MemberUpdate, as_utc
from app.services.period import Period

from conftest import FEB_2024, count_members

FEB = Period(2024, 2)
MAR = Period(2024, 3)


@pytest.mark.asyncio
async def test_create_then_find_by_identity_round_trip(store: MemberStore):
    created = await store.create("U1", FEB, now=FEB_2024)
    assert created.id is not None

    found = await store.find_by_identity("U1", FEB)
    assert found.id == created.id
    assert found.slack_uid == "U1"
    assert found.period_key == "2024-02"
    assert found.received_likes == 0
    assert found.received_dislikes == 0
    assert as_utc(found.created_at) == as_utc(found.updated_at) == FEB_2024


@pytest.mark.asyncio
async def test_find_by_identity_requires_exact_period(store: MemberStore):
    await store.create("U1", FEB, now=FEB_2024)
    with pytest.raises(NotFoundError):
        await store.find_by_identity("U1", MAR)
    with pytest.raises(NotFoundError):
        await store.find_by_identity("U", FEB)


@pytest.mark.asyncio
async def test_find_by_id(store: MemberStore):
    created = await store.create("U1", FEB, now=FEB_2024)
    assert (await store.find_by_id(created.id)).slack_uid == "U1"
    with pytest.raises(NotFoundError):
        await store.find_by_id(created.id + 100)


@pytest.mark.asyncio
async def test_create_duplicate_identity_period_raises_already_exists(store: MemberStore, session_factory):
    await store.create("U1", FEB, now=FEB_2024)
    with pytest.raises(AlreadyExistsError):
        await store.create("U1", FEB, now=FEB_2024)

    # Same identity in another period is a separate row.
    await store.create("U1", MAR, now=FEB_2024)
    assert await count_members(session_factory, "U1") == 2


@pytest.mark.asyncio
async def test_create_rejects_empty_identity(store: MemberStore):
    with pytest.raises(InvalidError):
        await store.create("", FEB, now=FEB_2024)


@pytest.mark.asyncio
async def test_update_is_sparse(store: MemberStore):
    """Fields left as None keep their stored value."""
    created = await store.create("U1", FEB, now=FEB_2024)
    await store.update(created.id, MemberUpdate(received_likes=4, received_dislikes=2), now=FEB_2024)

    later = FEB_2024 + timedelta(hours=1)
    updated = await store.update(created.id, MemberUpdate(received_likes=7), now=later)
    assert updated.received_likes == 7
    assert updated.received_dislikes == 2

    found = await store.find_by_id(created.id)
    assert found.received_likes == 7
    assert found.received_dislikes == 2
    assert as_utc(found.updated_at) == later
    assert as_utc(found.created_at) == FEB_2024


@pytest.mark.asyncio
async def test_update_never_moves_updated_at_before_created_at(store: MemberStore):
    created = await store.create("U1", FEB, now=FEB_2024)
    await store.update(created.id, MemberUpdate(received_likes=1), now=FEB_2024 - timedelta(days=1))
    found = await store.find_by_id(created.id)
    assert as_utc(found.updated_at) >= as_utc(found.created_at)


@pytest.mark.asyncio
async def test_update_missing_member_raises_not_found(store: MemberStore):
    with pytest.raises(NotFoundError):
        await store.update(999, MemberUpdate(received_likes=1), now=FEB_2024)


@pytest.mark.asyncio
async def test_update_rejects_negative_values(store: MemberStore):
    created = await store.create("U1", FEB, now=FEB_2024)
    with pytest.raises(InvalidError):
        await store.update(created.id, MemberUpdate(received_dislikes=-1), now=FEB_2024)


@pytest.mark.asyncio
async def test_apply_delta_clamps_at_zero(store: MemberStore):
    """Decrements past zero leave the counter at zero."""
    created = await store.create("U1", FEB, now=FEB_2024)

    after = await store.apply_delta(created.id, CounterDelta(likes=1), now=FEB_2024)
    assert (after.received_likes, after.received_dislikes) == (1, 0)

    after = await store.apply_delta(created.id, CounterDelta(likes=-1, dislikes=-1), now=FEB_2024)
    assert (after.received_likes, after.received_dislikes) == (0, 0)

    after = await store.apply_delta(created.id, CounterDelta(likes=-1), now=FEB_2024)
    assert after.received_likes == 0


@pytest.mark.asyncio
async def test_apply_delta_missing_member_raises_not_found(store: MemberStore):
    with pytest.raises(NotFoundError):
        await store.apply_delta(42, CounterDelta(likes=1), now=FEB_2024)


@pytest.mark.asyncio
async def test_delete_is_idempotent(store: MemberStore):
    """Deleting a missing member is a no-op."""
    created = await store.create("U1", FEB, now=FEB_2024)
    await store.delete(created.id)
    with pytest.raises(NotFoundError):
        await store.find_by_id(created.id)
    # Deleting again is not an error.
    await store.delete(created.id)
