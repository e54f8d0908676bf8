"""Local store: sole owner of the embedded database.

All reads and writes of pets, health entries, the user profile and the sync
queue go through a ``LocalStore``. Every mutating method takes ``sync=True`` to
append the matching sync-queue item in the same transaction as the mutation.
"""

import asyncio
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from typing import Any

import structlog
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, AsyncSession, async_sessionmaker

from lovingpaws.core.database import create_engine
from lovingpaws.core.errors import (
    ConstraintViolation,
    NotInitialized,
    StorageUnavailable,
    StoreError,
)
from lovingpaws.crud import health_entry as entry_crud
from lovingpaws.crud import pet as pet_crud
from lovingpaws.crud import sync_queue as queue_crud
from lovingpaws.crud import user as user_crud
from lovingpaws.models.health_entry import HealthEntry
from lovingpaws.models.pet import Base, Pet
from lovingpaws.models.schema import CREATE_INDEXES, SYNCED_TABLES
from lovingpaws.models.sync_queue import SyncOperation, SyncQueueItem
from lovingpaws.models.user import User
from lovingpaws.schemas.health_entry import HealthEntryBase, HealthEntryData, parse_health_entry
from lovingpaws.schemas.pet import PetCreate, PetUpdate
from lovingpaws.schemas.user import UserCreate, UserUpdate
from lovingpaws.services.migrations import run_migrations
from lovingpaws.utils import parse_timestamp

logger = structlog.get_logger()

__all__ = [
    "ConstraintViolation",
    "LocalStore",
    "NotInitialized",
    "StorageUnavailable",
    "StoreError",
]

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_TIMESTAMP_FIELDS = ("created_at", "updated_at")


class LocalStore:
    """Typed CRUD over the local SQLite database plus the offline sync queue."""

    def __init__(
        self,
        database_url: str | None = None,
        *,
        engine: AsyncEngine | None = None,
    ) -> None:
        """Create a store for a database URL or an existing engine.

        Nothing is opened until ``initialize()`` is awaited.
        """
        self._engine = engine or create_engine(database_url)
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._initialized = False
        self._init_task: asyncio.Task[None] | None = None
        self._last_stamp_us = 0

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    # Lifecycle

    async def initialize(self) -> None:
        """Open the database, create tables and indexes, and run migrations.

        Safe to call repeatedly. Overlapping calls wait on the same attempt, and
        cancelling one caller does not cancel the attempt. A failed or
        cancelled attempt is forgotten so the next call tries again.

        Raises:
            StorageUnavailable: If the database cannot be opened.
        """
        if self._initialized:
            return

        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._perform_init())
            self._init_task.add_done_callback(self._forget_failed_init)

        await asyncio.shield(self._init_task)

    def _forget_failed_init(self, task: asyncio.Task[None]) -> None:
        if self._init_task is not task:
            return
        if task.cancelled() or task.exception() is not None:
            self._init_task = None

    async def _perform_init(self) -> None:
        logger.info("Starting database initialization", url=str(self._engine.url))
        try:
            async with self._engine.begin() as conn:
                await self._create_tables(conn)
        except (OSError, SQLAlchemyError) as e:
            logger.error("Failed to open database", error=str(e))
            raise StorageUnavailable(f"Cannot open database: {e}") from e

        await self._create_indexes()
        await run_migrations(self._engine)

        self._initialized = True
        logger.info("Database initialized")

    async def _create_tables(self, conn: AsyncConnection) -> None:
        await conn.run_sync(Base.metadata.create_all)

    async def _create_indexes(self) -> None:
        for ddl in CREATE_INDEXES:
            try:
                async with self._engine.begin() as conn:
                    await conn.execute(text(ddl))
            except Exception:
                logger.exception("Failed to create index", ddl=ddl)

    async def reset_database(self) -> None:
        """Drop and recreate every table. Destroys all local data."""
        self._require_initialized("reset_database")
        logger.warning("Resetting local database")
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await self._create_tables(conn)
        await self._create_indexes()

    async def check_connection(self) -> bool:
        """Check if the database is reachable."""
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception:
            return False

    async def close(self) -> None:
        """Release the database handle. The store must be initialized again before use."""
        await self._engine.dispose()
        self._initialized = False
        self._init_task = None

    def _require_initialized(self, operation: str) -> None:
        if not self._initialized:
            raise NotInitialized(operation)

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Run one unit of work, committing on success.

        Constraint failures surface as ConstraintViolation; other database
        errors are logged and re-raised unchanged.
        """
        self._require_initialized(operation)
        async with self._session_factory() as session:
            try:
                async with session.begin():
                    yield session
            except IntegrityError as e:
                logger.warning("Constraint violation", operation=operation, error=str(e.orig))
                raise ConstraintViolation(str(e.orig)) from e
            except SQLAlchemyError:
                logger.exception("Store operation failed", operation=operation)
                raise

    # Pets

    async def add_pet(self, pet: PetCreate | Mapping[str, Any], *, sync: bool = False) -> Pet:
        """Insert a pet. Returns the stored row."""
        data = pet if isinstance(pet, PetCreate) else PetCreate.model_validate(pet)
        async with self._transaction("add_pet") as session:
            record = await pet_crud.create_pet(session, data)
            if sync:
                await self._enqueue(
                    session, "pets", record.id, SyncOperation.INSERT, record.to_snapshot()
                )
        logger.info("Pet added", pet_id=record.id, name=record.name)
        return record

    async def update_pet(
        self,
        pet_id: str,
        changes: PetUpdate | Mapping[str, Any],
        *,
        sync: bool = False,
    ) -> Pet | None:
        """Write only the supplied fields of a pet.

        A field supplied as None is stored as NULL. Updating an unknown id
        changes nothing and returns None.
        """
        update = changes if isinstance(changes, PetUpdate) else PetUpdate.model_validate(changes)
        fields = update.model_dump(exclude_unset=True)
        async with self._transaction("update_pet") as session:
            record = await pet_crud.update_pet(session, pet_id, fields)
            if record is not None and sync:
                await self._enqueue(
                    session, "pets", pet_id, SyncOperation.UPDATE, record.to_snapshot()
                )

        if record is None:
            logger.warning("Pet not found for update", pet_id=pet_id)
        return record

    async def get_pets(self) -> list[Pet]:
        """All pets, newest first."""
        async with self._transaction("get_pets") as session:
            return await pet_crud.get_pets(session)

    async def get_pet_by_id(self, pet_id: str) -> Pet | None:
        async with self._transaction("get_pet_by_id") as session:
            return await pet_crud.get_pet_by_id(session, pet_id)

    async def delete_pet(self, pet_id: str, *, sync: bool = False) -> bool:
        """Delete a pet and, through the foreign key, all of its entries."""
        async with self._transaction("delete_pet") as session:
            deleted = await pet_crud.delete_pet(session, pet_id)
            if deleted and sync:
                await self._enqueue(session, "pets", pet_id, SyncOperation.DELETE, {"id": pet_id})
        logger.info("Pet deleted", pet_id=pet_id, deleted=deleted)
        return deleted

    # Health entries

    async def add_health_entry(
        self, entry: HealthEntryData | Mapping[str, Any], *, sync: bool = False
    ) -> HealthEntry:
        """Insert a health entry for an existing pet.

        Raises:
            ConstraintViolation: If the pet does not exist or the id is taken.
        """
        data = _as_entry(entry)
        async with self._transaction("add_health_entry") as session:
            record = await entry_crud.create_health_entry(session, data)
            if sync:
                await self._enqueue(
                    session,
                    "health_entries",
                    record.id,
                    SyncOperation.INSERT,
                    record.to_snapshot(),
                )
        logger.info(
            "Health entry added", entry_id=record.id, pet_id=record.pet_id, type=record.type
        )
        return record

    async def update_health_entry(
        self, entry: HealthEntryData | Mapping[str, Any], *, sync: bool = False
    ) -> HealthEntry | None:
        """Replace every field of an entry. The entry type cannot change."""
        data = _as_entry(entry)
        async with self._transaction("update_health_entry") as session:
            record = await entry_crud.replace_health_entry(session, data)
            if record is not None and sync:
                await self._enqueue(
                    session,
                    "health_entries",
                    record.id,
                    SyncOperation.UPDATE,
                    record.to_snapshot(),
                )

        if record is None:
            logger.warning("Health entry not found for update", entry_id=data.id)
        return record

    async def get_health_entries(self, pet_id: str | None = None) -> list[HealthEntry]:
        """Entries for one pet (or all pets), by date then creation time, newest first."""
        async with self._transaction("get_health_entries") as session:
            return await entry_crud.get_health_entries(session, pet_id)

    async def get_health_entry_by_id(self, entry_id: str) -> HealthEntry | None:
        async with self._transaction("get_health_entry_by_id") as session:
            return await entry_crud.get_health_entry_by_id(session, entry_id)

    async def delete_health_entry(self, entry_id: str, *, sync: bool = False) -> bool:
        async with self._transaction("delete_health_entry") as session:
            deleted = await entry_crud.delete_health_entry(session, entry_id)
            if deleted and sync:
                await self._enqueue(
                    session, "health_entries", entry_id, SyncOperation.DELETE, {"id": entry_id}
                )
        return deleted

    # User profile

    async def add_user(self, user: UserCreate | Mapping[str, Any], *, sync: bool = False) -> User:
        data = user if isinstance(user, UserCreate) else UserCreate.model_validate(user)
        async with self._transaction("add_user") as session:
            record = await user_crud.create_user(session, data)
            if sync:
                await self._enqueue(
                    session, "users", record.id, SyncOperation.INSERT, record.to_snapshot()
                )
        logger.info("User added", user_id=record.id)
        return record

    async def update_user(
        self,
        user_id: str,
        changes: UserUpdate | Mapping[str, Any],
        *,
        sync: bool = False,
    ) -> User | None:
        """Partial profile update; an unknown id changes nothing and returns None."""
        update = changes if isinstance(changes, UserUpdate) else UserUpdate.model_validate(changes)
        fields = update.model_dump(exclude_unset=True)
        async with self._transaction("update_user") as session:
            record = await user_crud.update_user(session, user_id, fields)
            if record is not None and sync:
                await self._enqueue(
                    session, "users", user_id, SyncOperation.UPDATE, record.to_snapshot()
                )

        if record is None:
            logger.warning("User not found for update", user_id=user_id)
        return record

    async def get_user(self) -> User | None:
        async with self._transaction("get_user") as session:
            return await user_crud.get_user(session)

    # Sync queue

    def _next_stamp(self) -> int:
        """Microsecond stamp, strictly increasing for this store."""
        now_us = (datetime.now(UTC) - _EPOCH) // timedelta(microseconds=1)
        self._last_stamp_us = max(now_us, self._last_stamp_us + 1)
        return self._last_stamp_us

    async def _enqueue(
        self,
        session: AsyncSession,
        table_name: str,
        record_id: str,
        operation: SyncOperation,
        data: dict[str, Any] | None,
    ) -> SyncQueueItem:
        stamp = self._next_stamp()
        item = await queue_crud.add_item(
            session,
            item_id=f"{table_name}_{record_id}_{stamp}",
            table_name=table_name,
            record_id=record_id,
            operation=operation,
            data=data,
            created_at=_EPOCH + timedelta(microseconds=stamp),
        )
        logger.debug(
            "Queued for sync",
            item_id=item.id,
            table=table_name,
            record_id=record_id,
            operation=operation.value,
        )
        return item

    async def enqueue(
        self,
        table_name: str,
        record_id: str,
        operation: SyncOperation | str,
        data: dict[str, Any] | None = None,
    ) -> SyncQueueItem:
        """Append a pending mutation to the sync queue.

        Raises:
            ValueError: If the table or operation is unknown.
        """
        if table_name not in SYNCED_TABLES:
            raise ValueError(f"Unknown table: {table_name}")
        op = SyncOperation(operation)
        async with self._transaction("enqueue") as session:
            return await self._enqueue(session, table_name, record_id, op, data)

    async def get_unsynced(self) -> list[SyncQueueItem]:
        """Pending items in the order they were queued."""
        async with self._transaction("get_unsynced") as session:
            return await queue_crud.get_unsynced(session)

    async def get_sync_items(self, limit: int = 100) -> list[SyncQueueItem]:
        """Most recent queue items, synced or not."""
        async with self._transaction("get_sync_items") as session:
            return await queue_crud.get_items(session, limit)

    async def mark_synced(self, item_id: str) -> bool:
        """Mark a queue item synced. Returns False if it was unknown or already synced."""
        async with self._transaction("mark_synced") as session:
            return await queue_crud.mark_synced(session, item_id)

    async def mark_table_record_synced(self, table_name: str, record_id: str) -> bool:
        """Set the source record's own syncedToCloud flag."""
        async with self._transaction("mark_table_record_synced") as session:
            return await queue_crud.mark_record_synced(session, table_name, record_id)

    async def apply_remote_record(self, table_name: str, data: Mapping[str, Any]) -> None:
        """Store a record pulled from the remote as-is, flagged as synced.

        Existing rows are overwritten field by field. Nothing is queued.
        """
        model = SYNCED_TABLES.get(table_name)
        if model is None:
            raise ValueError(f"Unknown table: {table_name}")
        if not data.get("id"):
            raise ValueError(f"Remote {table_name} record has no id")

        columns = {attr.key for attr in model.__mapper__.column_attrs}
        values = {key: value for key, value in data.items() if key in columns}
        for key in _TIMESTAMP_FIELDS:
            if isinstance(values.get(key), str):
                values[key] = parse_timestamp(values[key])
        values["synced_to_cloud"] = True

        async with self._transaction("apply_remote_record") as session:
            record = await session.get(model, values["id"])
            if record is None:
                session.add(model(**values))
            else:
                for key, value in values.items():
                    setattr(record, key, value)


def _as_entry(entry: HealthEntryData | Mapping[str, Any]) -> HealthEntryData:
    if isinstance(entry, HealthEntryBase):
        return entry  # type: ignore[return-value]
    return parse_health_entry(dict(entry))
