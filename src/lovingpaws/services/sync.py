"""Replication between the local store and the remote store."""

from dataclasses import dataclass, field
from typing import Any

import structlog

from lovingpaws.models.sync_queue import SyncOperation, SyncQueueItem
from lovingpaws.services.remote import RemoteStore
from lovingpaws.services.store import LocalStore
from lovingpaws.utils import parse_timestamp

logger = structlog.get_logger()

# Pulled in this order so entries find their pets
PULL_TABLES = ("pets", "health_entries", "users")

# Entries are insert-only when pulled; pets and users follow last-write-wins
LWW_TABLES = frozenset({"pets", "users"})


@dataclass
class SyncReport:
    """Outcome of one sync pass."""

    pushed: int = 0
    failed: int = 0
    skipped: int = 0
    pulled: int = 0
    errors: list[str] = field(default_factory=list)


class SyncService:
    """Drains the sync queue to the remote store and pulls remote changes back."""

    def __init__(self, store: LocalStore, remote: RemoteStore) -> None:
        self.store = store
        self.remote = remote

    async def push(self, report: SyncReport | None = None) -> SyncReport:
        """Replay pending queue items in order.

        A failed item stays pending, and later items for the same record are
        held back until the next pass so that record's history replays in order.
        """
        report = report or SyncReport()
        items = await self.store.get_unsynced()
        logger.info("sync_push_started", pending=len(items))

        last_index = {(item.table_name, item.record_id): i for i, item in enumerate(items)}
        blocked: set[tuple[str, str]] = set()

        for i, item in enumerate(items):
            key = (item.table_name, item.record_id)
            if key in blocked:
                report.skipped += 1
                continue

            try:
                await self._replay(item)
            except Exception as e:
                blocked.add(key)
                report.failed += 1
                report.errors.append(f"{item.id}: {e}")
                logger.error(
                    "sync_item_failed",
                    item_id=item.id,
                    table=item.table_name,
                    record_id=item.record_id,
                    operation=item.operation,
                    error=str(e),
                )
                continue

            await self.store.mark_synced(item.id)
            # The record is clean only once its newest pending mutation is out
            if last_index[key] == i:
                await self.store.mark_table_record_synced(item.table_name, item.record_id)
            report.pushed += 1

        logger.info(
            "sync_push_completed",
            pushed=report.pushed,
            failed=report.failed,
            skipped=report.skipped,
        )
        return report

    async def _replay(self, item: SyncQueueItem) -> None:
        operation = SyncOperation(item.operation)
        data: dict[str, Any] = item.data or {}

        if operation is SyncOperation.INSERT:
            await self.remote.insert(item.table_name, item.record_id, data)
        elif operation is SyncOperation.UPDATE:
            await self.remote.update(item.table_name, item.record_id, data)
        else:
            await self.remote.delete(item.table_name, item.record_id)

    async def pull(self, report: SyncReport | None = None) -> SyncReport:
        """Merge remote records into the local store.

        Records with local mutations still queued are left alone, as are
        entries of pets whose deletion has not reached the remote yet.
        """
        report = report or SyncReport()
        pending = await self.store.get_unsynced()
        dirty = {(item.table_name, item.record_id) for item in pending}
        deleted_pets = {
            item.record_id
            for item in pending
            if item.table_name == "pets" and item.operation == SyncOperation.DELETE
        }

        for table in PULL_TABLES:
            try:
                records = await self.remote.fetch_all(table)
            except Exception as e:
                report.errors.append(f"{table}: {e}")
                logger.error("sync_pull_table_failed", table=table, error=str(e))
                continue

            for record in records:
                try:
                    if _held_locally(table, record, dirty, deleted_pets):
                        logger.debug(
                            "sync_pull_record_held", table=table, record_id=record.get("id")
                        )
                        continue
                    if await self._merge(table, record):
                        report.pulled += 1
                except Exception as e:
                    report.errors.append(f"{table}/{record.get('id')}: {e}")
                    logger.error(
                        "sync_pull_record_failed",
                        table=table,
                        record_id=record.get("id"),
                        error=str(e),
                    )

        logger.info("sync_pull_completed", pulled=report.pulled)
        return report

    async def _merge(self, table: str, record: dict[str, Any]) -> bool:
        """Apply one remote record. Returns True if the local store changed."""
        record_id = record.get("id")
        if not record_id:
            return False

        local = await self._get_local(table, record_id)
        if local is None:
            await self.store.apply_remote_record(table, record)
            return True

        if table not in LWW_TABLES:
            return False

        remote_updated = record.get("updated_at")
        if remote_updated and parse_timestamp(remote_updated) > local.updated_at:
            await self.store.apply_remote_record(table, record)
            return True
        return False

    async def _get_local(self, table: str, record_id: str) -> Any:
        if table == "pets":
            return await self.store.get_pet_by_id(record_id)
        if table == "health_entries":
            return await self.store.get_health_entry_by_id(record_id)
        user = await self.store.get_user()
        return user if user is not None and user.id == record_id else None

    async def sync(self) -> SyncReport:
        """Push local changes, then pull remote ones."""
        report = SyncReport()
        await self.push(report)
        await self.pull(report)
        return report


def _held_locally(
    table: str,
    record: dict[str, Any],
    dirty: set[tuple[str, str]],
    deleted_pets: set[str],
) -> bool:
    """True when a pending local mutation outranks the remote copy."""
    if (table, record.get("id")) in dirty:
        return True
    return table == "health_entries" and record.get("pet_id") in deleted_pets
