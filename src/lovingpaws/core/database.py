"""Database engine construction and request-scoped store access."""

from typing import TYPE_CHECKING, Any

import structlog
from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from lovingpaws.core.config import settings
from lovingpaws.core.errors import StorageUnavailable

if TYPE_CHECKING:
    from lovingpaws.services.store import LocalStore

logger = structlog.get_logger()


def _get_engine_kwargs(database_url: str) -> dict[str, Any]:
    """Get engine kwargs based on database type."""
    kwargs: dict[str, Any] = {"echo": settings.debug}

    # SQLite doesn't support connection pooling options
    if not database_url.startswith("sqlite"):
        kwargs.update(
            {
                "pool_size": 5,
                "max_overflow": 10,
                "pool_pre_ping": True,
            }
        )

    return kwargs


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    """Turn on foreign key enforcement, which SQLite leaves off per connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(database_url: str | None = None) -> AsyncEngine:
    """Create an async engine for the given URL (defaults to settings)."""
    url = database_url or settings.database_url
    engine = create_async_engine(url, **_get_engine_kwargs(url))
    if url.startswith("sqlite"):
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


async def get_store(request: Request) -> "LocalStore":
    """Get the store owned by the running application.

    A store that could not be opened at startup is retried on each request.
    """
    store: LocalStore = request.app.state.store
    if not store.is_initialized:
        try:
            await store.initialize()
        except StorageUnavailable:
            logger.warning("Local store still unavailable")
    return store
