"""Database models."""

from lovingpaws.models.health_entry import EntryType, HealthEntry, Severity
from lovingpaws.models.pet import Base, Pet
from lovingpaws.models.sync_queue import SyncOperation, SyncQueueItem
from lovingpaws.models.user import User

__all__ = [
    "Base",
    "EntryType",
    "HealthEntry",
    "Pet",
    "Severity",
    "SyncOperation",
    "SyncQueueItem",
    "User",
]
