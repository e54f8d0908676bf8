"""Data access for the sync_queue table and per-record sync flags."""

from datetime import datetime
from typing import Any

from sqlalchemy import literal_column, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lovingpaws.models.schema import SYNCED_TABLES
from lovingpaws.models.sync_queue import SyncOperation, SyncQueueItem

# Breaks ties between equal stamps written by separate stores on one file
_INSERTION_ORDER = literal_column("rowid")


async def add_item(
    db: AsyncSession,
    item_id: str,
    table_name: str,
    record_id: str,
    operation: SyncOperation,
    data: dict[str, Any] | None,
    created_at: datetime,
) -> SyncQueueItem:
    """Append one pending item to the queue."""
    item = SyncQueueItem(
        id=item_id,
        table_name=table_name,
        record_id=record_id,
        operation=operation.value,
        data=data,
        created_at=created_at,
        synced=False,
    )
    db.add(item)
    await db.flush()
    return item


async def get_unsynced(db: AsyncSession) -> list[SyncQueueItem]:
    """Get pending items, oldest first."""
    result = await db.execute(
        select(SyncQueueItem)
        .where(SyncQueueItem.synced.is_(False))
        .order_by(SyncQueueItem.created_at, _INSERTION_ORDER)
    )
    return list(result.scalars().all())


async def get_items(db: AsyncSession, limit: int = 100) -> list[SyncQueueItem]:
    """Get the most recent items regardless of state."""
    result = await db.execute(
        select(SyncQueueItem)
        .order_by(SyncQueueItem.created_at.desc(), _INSERTION_ORDER.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def mark_synced(db: AsyncSession, item_id: str) -> bool:
    """Flip a pending item to synced. Already-synced items are left alone."""
    result = await db.execute(
        update(SyncQueueItem)
        .where(SyncQueueItem.id == item_id, SyncQueueItem.synced.is_(False))
        .values(synced=True)
        .execution_options(synchronize_session=False)
    )
    return bool(result.rowcount)  # type: ignore[attr-defined]


async def mark_record_synced(db: AsyncSession, table_name: str, record_id: str) -> bool:
    """Set syncedToCloud on the source record of a queued mutation.

    Raises:
        ValueError: If the table has no sync flag.
    """
    model = SYNCED_TABLES.get(table_name)
    if model is None:
        raise ValueError(f"Unknown table: {table_name}")
    result = await db.execute(
        update(model)
        .where(model.id == record_id)
        .values(synced_to_cloud=True)
        .execution_options(synchronize_session=False)
    )
    return bool(result.rowcount)  # type: ignore[attr-defined]
