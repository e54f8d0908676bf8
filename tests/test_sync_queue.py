"""Tests for the offline sync queue."""

from collections.abc import Callable
from typing import Any

import pytest
from sqlalchemy import text

from lovingpaws.models.sync_queue import SyncOperation
from lovingpaws.services.store import ConstraintViolation, LocalStore


async def test_enqueue_returns_pending_item(store: LocalStore) -> None:
    item = await store.enqueue("pets", "p1", SyncOperation.INSERT, {"id": "p1", "name": "Rex"})

    assert item.id.startswith("pets_p1_")
    assert item.table_name == "pets"
    assert item.record_id == "p1"
    assert item.operation == "INSERT"
    assert item.data == {"id": "p1", "name": "Rex"}
    assert item.synced is False


async def test_enqueue_accepts_operation_string(store: LocalStore) -> None:
    item = await store.enqueue("users", "u1", "UPDATE")
    assert item.operation == "UPDATE"
    assert item.data is None


async def test_enqueue_rejects_unknown_table(store: LocalStore) -> None:
    with pytest.raises(ValueError, match="Unknown table"):
        await store.enqueue("owners", "o1", "INSERT")


async def test_enqueue_rejects_unknown_operation(store: LocalStore) -> None:
    with pytest.raises(ValueError):
        await store.enqueue("pets", "p1", "UPSERT")


async def test_unsynced_in_enqueue_order(store: LocalStore) -> None:
    """Items come back in the order they were queued, even within one clock tick."""
    a = await store.enqueue("pets", "p1", "INSERT")
    b = await store.enqueue("health_entries", "e1", "INSERT")
    c = await store.enqueue("pets", "p1", "UPDATE")

    unsynced = await store.get_unsynced()

    assert [i.id for i in unsynced] == [a.id, b.id, c.id]
    assert len({i.id for i in unsynced}) == 3


async def test_equal_stamps_keep_insertion_order(store: LocalStore, database_url: str) -> None:
    """Two stores sharing one file can stamp items identically."""
    other = LocalStore(database_url)
    await other.initialize()
    try:
        stamp = 10**17
        store._last_stamp_us = other._last_stamp_us = stamp

        first = await store.enqueue("pets", "zz", "INSERT")
        second = await other.enqueue("pets", "aa", "INSERT")
        assert first.created_at == second.created_at

        unsynced = await store.get_unsynced()
        assert [i.id for i in unsynced] == [first.id, second.id]
    finally:
        await other.close()


async def test_insert_then_delete_replay(store: LocalStore) -> None:
    insert = await store.enqueue("pets", "P1", "INSERT", {"id": "P1"})
    delete = await store.enqueue("pets", "P1", "DELETE", {"id": "P1"})

    unsynced = await store.get_unsynced()
    assert [(i.id, i.operation) for i in unsynced] == [
        (insert.id, "INSERT"),
        (delete.id, "DELETE"),
    ]

    for item in unsynced:
        assert await store.mark_synced(item.id) is True

    assert await store.get_unsynced() == []


async def test_marked_item_never_returns(store: LocalStore) -> None:
    first = await store.enqueue("pets", "p1", "INSERT")
    second = await store.enqueue("pets", "p2", "INSERT")

    await store.mark_synced(first.id)
    assert [i.id for i in await store.get_unsynced()] == [second.id]

    await store.enqueue("pets", "p3", "INSERT")
    assert first.id not in {i.id for i in await store.get_unsynced()}


async def test_mark_synced_twice_is_noop(store: LocalStore) -> None:
    item = await store.enqueue("pets", "p1", "INSERT")

    assert await store.mark_synced(item.id) is True
    assert await store.mark_synced(item.id) is False
    assert await store.mark_synced("unknown") is False


async def test_get_sync_items_includes_synced(store: LocalStore) -> None:
    first = await store.enqueue("pets", "p1", "INSERT")
    second = await store.enqueue("pets", "p2", "INSERT")
    await store.mark_synced(first.id)

    items = await store.get_sync_items(limit=10)

    assert [i.id for i in items] == [second.id, first.id]
    assert [i.synced for i in items] == [False, True]


async def test_mark_table_record_synced(store: LocalStore, buddy: dict[str, Any]) -> None:
    pet = await store.add_pet(buddy)
    assert pet.synced_to_cloud is False

    assert await store.mark_table_record_synced("pets", pet.id) is True

    refreshed = await store.get_pet_by_id(pet.id)
    assert refreshed is not None
    assert refreshed.synced_to_cloud is True


async def test_mark_table_record_synced_unknown_table(store: LocalStore) -> None:
    with pytest.raises(ValueError):
        await store.mark_table_record_synced("sync_queue", "x")


async def test_local_edit_clears_synced_flag(store: LocalStore, buddy: dict[str, Any]) -> None:
    pet = await store.add_pet(buddy)
    await store.mark_table_record_synced("pets", pet.id)

    updated = await store.update_pet(pet.id, {"color": "Brown"})

    assert updated is not None
    assert updated.synced_to_cloud is False


class TestTransactionalEnqueue:
    """Mutations made with sync=True carry their queue item atomically."""

    async def test_add_pet_with_sync_enqueues_snapshot(
        self, store: LocalStore, buddy: dict[str, Any]
    ) -> None:
        await store.add_pet(buddy, sync=True)

        [item] = await store.get_unsynced()
        assert item.table_name == "pets"
        assert item.record_id == "pet-buddy"
        assert item.operation == "INSERT"
        assert item.data is not None
        assert item.data["name"] == "Buddy"
        assert item.data["health_score"] == 100

    async def test_add_pet_without_sync_enqueues_nothing(
        self, store: LocalStore, buddy: dict[str, Any]
    ) -> None:
        await store.add_pet(buddy)
        assert await store.get_unsynced() == []

    async def test_update_and_delete_enqueue_in_order(
        self,
        store: LocalStore,
        buddy: dict[str, Any],
        make_entry: Callable[..., dict[str, Any]],
    ) -> None:
        await store.add_pet(buddy, sync=True)
        await store.add_health_entry(make_entry(id="e1"), sync=True)
        await store.update_pet("pet-buddy", {"name": "Bud"}, sync=True)
        await store.delete_health_entry("e1", sync=True)
        await store.delete_pet("pet-buddy", sync=True)

        unsynced = await store.get_unsynced()

        assert [(i.table_name, i.operation) for i in unsynced] == [
            ("pets", "INSERT"),
            ("health_entries", "INSERT"),
            ("pets", "UPDATE"),
            ("health_entries", "DELETE"),
            ("pets", "DELETE"),
        ]
        assert unsynced[2].data is not None
        assert unsynced[2].data["name"] == "Bud"
        assert unsynced[4].data == {"id": "pet-buddy"}

    async def test_failed_mutation_enqueues_nothing(
        self, store: LocalStore, buddy: dict[str, Any]
    ) -> None:
        await store.add_pet(buddy, sync=True)

        with pytest.raises(ConstraintViolation):
            await store.add_pet(buddy, sync=True)

        assert len(await store.get_unsynced()) == 1

    async def test_failed_enqueue_rolls_back_mutation(
        self, store: LocalStore, buddy: dict[str, Any], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A queue write that fails takes the record write down with it."""
        await store.enqueue("pets", "pet-buddy", "INSERT")
        taken = (await store.get_unsynced())[0].id
        stamp = int(taken.rsplit("_", 1)[1])
        monkeypatch.setattr(store, "_next_stamp", lambda: stamp)

        with pytest.raises(ConstraintViolation):
            await store.add_pet(buddy, sync=True)

        assert await store.get_pet_by_id("pet-buddy") is None

    async def test_noop_update_enqueues_nothing(self, store: LocalStore) -> None:
        assert await store.update_pet("missing", {"name": "X"}, sync=True) is None
        assert await store.get_unsynced() == []


async def test_queue_data_stored_as_json(store: LocalStore) -> None:
    await store.enqueue("pets", "p1", "INSERT", {"id": "p1", "tags": ["a", "b"]})

    async with store.engine.connect() as conn:
        result = await conn.execute(text('SELECT data, "tableName", "recordId" FROM sync_queue'))
        data, table_name, record_id = result.one()

    assert data == '{"id": "p1", "tags": ["a", "b"]}'
    assert (table_name, record_id) == ("pets", "p1")
