"""Sync queue model: pending local mutations awaiting remote replication."""

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from lovingpaws.models.pet import Base
from lovingpaws.models.types import UTCDateTime
from lovingpaws.utils import utc_now


class SyncOperation(str, Enum):
    """Kind of mutation recorded in the queue."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class SyncQueueItem(Base):
    """One queued mutation of one record."""

    __tablename__ = "sync_queue"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    table_name: Mapped[str] = mapped_column("tableName", String, nullable=False)
    record_id: Mapped[str] = mapped_column("recordId", String, nullable=False)
    operation: Mapped[str] = mapped_column(String, nullable=False)
    data: Mapped[dict[str, Any] | None] = mapped_column(JSON(none_as_null=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column("createdAt", UTCDateTime, default=utc_now)
    synced: Mapped[bool] = mapped_column(Boolean, default=False)
