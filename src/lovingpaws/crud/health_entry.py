"""Data access for the health_entries table."""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from lovingpaws.core.errors import ConstraintViolation
from lovingpaws.models.health_entry import HealthEntry
from lovingpaws.schemas.health_entry import HealthEntryData, entry_to_row
from lovingpaws.utils import utc_now


async def create_health_entry(db: AsyncSession, entry: HealthEntryData) -> HealthEntry:
    """Insert a health entry for an existing pet."""
    record = HealthEntry(**entry_to_row(entry), created_at=utc_now(), synced_to_cloud=False)
    db.add(record)
    await db.flush()
    return record


async def get_health_entry_by_id(db: AsyncSession, entry_id: str) -> HealthEntry | None:
    """Get a health entry by id."""
    result = await db.execute(select(HealthEntry).where(HealthEntry.id == entry_id))
    return result.scalar_one_or_none()


async def get_health_entries(db: AsyncSession, pet_id: str | None = None) -> list[HealthEntry]:
    """Get entries for one pet, or for all pets when pet_id is None.

    Ordered by entry date, then creation time, newest first. Sorted after
    loading because legacy rows hold unpadded YYYY/M/D text.
    """
    stmt = select(HealthEntry)
    if pet_id is not None:
        stmt = stmt.where(HealthEntry.pet_id == pet_id)
    result = await db.execute(stmt)
    return sorted(
        result.scalars().all(),
        key=lambda entry: (entry.date, entry.created_at),
        reverse=True,
    )


async def replace_health_entry(db: AsyncSession, entry: HealthEntryData) -> HealthEntry | None:
    """Overwrite every field of an existing entry.

    Returns:
        The updated entry, or None when no entry has this id.

    Raises:
        ConstraintViolation: If the entry type would change.
    """
    record = await get_health_entry_by_id(db, entry.id)
    if record is None:
        return None
    if record.type != entry.type:
        raise ConstraintViolation(
            f"Health entry {entry.id} is a {record.type} entry and cannot become {entry.type}"
        )

    for key, value in entry_to_row(entry).items():
        setattr(record, key, value)
    record.synced_to_cloud = False
    await db.flush()
    return record


async def delete_health_entry(db: AsyncSession, entry_id: str) -> bool:
    """Delete one health entry."""
    result = await db.execute(
        delete(HealthEntry)
        .where(HealthEntry.id == entry_id)
        .execution_options(synchronize_session=False)
    )
    return bool(result.rowcount)  # type: ignore[attr-defined]
