import asyncio
import uuid

import pytest
from sqlalchemy import select

from readyforms.core.locking import (
    OptimisticLockError,
    handle_optimistic_lock_error,
    optimistic_delete,
    optimistic_update,
)
from readyforms.db.models import Topic


async def _make_topic(session_factory, name: str = "Science") -> Topic:
    async with session_factory() as session:
        topic = Topic(name=name, description="")
        session.add(topic)
        await session.commit()
        return topic


async def _persisted(session_factory, topic_id):
    async with session_factory() as session:
        return (await session.execute(select(Topic).where(Topic.id == topic_id))).scalar_one_or_none()


@pytest.mark.asyncio
async def test_new_rows_start_at_version_one(session_factory):
    topic = await _make_topic(session_factory)
    assert topic.version == 1


@pytest.mark.asyncio
async def test_sequential_updates_bump_version_by_exactly_one(session_factory):
    topic = await _make_topic(session_factory)

    async with session_factory() as session:
        updated = await optimistic_update(session, Topic, topic.id, 1, {"description": "first"})
        await session.commit()
        assert updated.version == 2

        updated = await optimistic_update(session, Topic, topic.id, 2, {"description": "second"})
        await session.commit()
        assert updated.version == 3

    row = await _persisted(session_factory, topic.id)
    assert row.version == 3
    assert row.description == "second"


@pytest.mark.asyncio
async def test_empty_patch_still_bumps_version(session_factory):
    topic = await _make_topic(session_factory)

    async with session_factory() as session:
        updated = await optimistic_update(session, Topic, topic.id, 1, {})
        await session.commit()

    assert updated.version == 2
    assert (await _persisted(session_factory, topic.id)).version == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("stale", [0, 2, 99])
async def test_any_other_version_is_rejected_and_row_is_untouched(session_factory, stale):
    topic = await _make_topic(session_factory)

    async with session_factory() as session:
        with pytest.raises(OptimisticLockError) as excinfo:
            await optimistic_update(session, Topic, topic.id, stale, {"name": "Hijacked"})
        await session.rollback()

    assert excinfo.value.expected_version == stale
    assert excinfo.value.current_version == 1
    row = await _persisted(session_factory, topic.id)
    assert row.name == "Science"
    assert row.version == 1


@pytest.mark.asyncio
async def test_repeating_the_same_update_fails_the_second_time(session_factory):
    topic = await _make_topic(session_factory)

    async with session_factory() as session:
        await optimistic_update(session, Topic, topic.id, 1, {"description": "once"})
        await session.commit()

    async with session_factory() as session:
        with pytest.raises(OptimisticLockError):
            await optimistic_update(session, Topic, topic.id, 1, {"description": "once"})


@pytest.mark.asyncio
async def test_missing_row_is_reported_as_a_lock_conflict(session_factory):
    missing = uuid.uuid4()

    async with session_factory() as session:
        with pytest.raises(OptimisticLockError) as excinfo:
            await optimistic_update(session, Topic, missing, 1, {"description": "x"})

    assert excinfo.value.current_version is None
    assert excinfo.value.resource == "topics"


@pytest.mark.asyncio
async def test_protected_and_unknown_attributes_cannot_be_patched(session_factory):
    topic = await _make_topic(session_factory)

    async with session_factory() as session:
        with pytest.raises(ValueError, match="version"):
            await optimistic_update(session, Topic, topic.id, 1, {"version": 10})
        with pytest.raises(ValueError, match="no_such_column"):
            await optimistic_update(session, Topic, topic.id, 1, {"no_such_column": 1})


@pytest.mark.asyncio
async def test_concurrent_writers_with_the_same_version_only_one_wins(session_factory):
    topic = await _make_topic(session_factory)

    async def writer(label: str):
        async with session_factory() as session:
            try:
                record = await optimistic_update(session, Topic, topic.id, 1, {"description": label})
                await session.commit()
                return record.description
            except OptimisticLockError:
                await session.rollback()
                raise

    results = await asyncio.gather(*(writer(f"writer-{i}") for i in range(4)), return_exceptions=True)

    winners = [r for r in results if isinstance(r, str)]
    conflicts = [r for r in results if isinstance(r, OptimisticLockError)]
    assert len(winners) == 1
    assert len(conflicts) == 3

    row = await _persisted(session_factory, topic.id)
    assert row.version == 2
    assert row.description == winners[0]


@pytest.mark.asyncio
async def test_concurrent_deletes_with_the_same_version_only_one_wins(session_factory):
    topic = await _make_topic(session_factory)

    async def deleter():
        async with session_factory() as session:
            try:
                deleted = await optimistic_delete(session, Topic, topic.id, 1)
                await session.commit()
                return deleted
            except OptimisticLockError:
                await session.rollback()
                raise

    results = await asyncio.gather(*(deleter() for _ in range(4)), return_exceptions=True)

    assert results.count(1) == 1
    conflicts = [r for r in results if isinstance(r, OptimisticLockError)]
    assert len(conflicts) == 3
    assert await _persisted(session_factory, topic.id) is None


@pytest.mark.asyncio
async def test_delete_with_stale_version_keeps_row_and_current_version_removes_it(session_factory):
    topic = await _make_topic(session_factory)
    async with session_factory() as session:
        await optimistic_update(session, Topic, topic.id, 1, {"description": "v2"})
        await optimistic_update(session, Topic, topic.id, 2, {"description": "v3"})
        await session.commit()

    async with session_factory() as session:
        with pytest.raises(OptimisticLockError):
            await optimistic_delete(session, Topic, topic.id, 2)
        await session.rollback()

    assert (await _persisted(session_factory, topic.id)).version == 3

    async with session_factory() as session:
        assert await optimistic_delete(session, Topic, topic.id, 3) == 1
        await session.commit()

    assert await _persisted(session_factory, topic.id) is None


def test_handler_responds_with_409_envelope_for_lock_errors():
    calls = []
    error = OptimisticLockError(resource="templates", record_id="abc", expected_version=1, current_version=2)

    handled = handle_optimistic_lock_error(error, lambda status, body: calls.append((status, body)))

    assert handled is True
    assert calls == [
        (
            409,
            {
                "message": "Record has been modified by another user. Please refresh and try again.",
                "error": "OPTIMISTIC_LOCK_ERROR",
                "details": {"resource": "templates", "id": "abc", "expected_version": 1, "current_version": 2},
            },
        )
    ]


def test_handler_ignores_other_errors():
    calls = []

    handled = handle_optimistic_lock_error(RuntimeError("boom"), lambda status, body: calls.append(status))

    assert handled is False
    assert calls == []
