"""Data access for the pets table."""

from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lovingpaws.models.pet import Pet
from lovingpaws.schemas.pet import PetCreate
from lovingpaws.utils import utc_now


async def create_pet(db: AsyncSession, data: PetCreate) -> Pet:
    """Insert a new pet stamped with the current time."""
    now = utc_now()
    pet = Pet(**data.model_dump(), created_at=now, updated_at=now, synced_to_cloud=False)
    db.add(pet)
    await db.flush()
    return pet


async def get_pet_by_id(db: AsyncSession, pet_id: str) -> Pet | None:
    """Get a pet by id."""
    result = await db.execute(select(Pet).where(Pet.id == pet_id))
    return result.scalar_one_or_none()


async def get_pets(db: AsyncSession) -> list[Pet]:
    """Get all pets, newest first."""
    result = await db.execute(select(Pet).order_by(Pet.created_at.desc()))
    return list(result.scalars().all())


async def update_pet(db: AsyncSession, pet_id: str, changes: dict[str, Any]) -> Pet | None:
    """Write only the given fields, refresh updatedAt and mark the pet dirty.

    Returns:
        The updated pet, or None when no pet has this id.
    """
    result = await db.execute(
        update(Pet)
        .where(Pet.id == pet_id)
        .values(**changes, updated_at=utc_now(), synced_to_cloud=False)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:  # type: ignore[attr-defined]
        return None
    return await db.get(Pet, pet_id, populate_existing=True)


async def delete_pet(db: AsyncSession, pet_id: str) -> bool:
    """Delete a pet; its health entries go with it through the foreign key."""
    result = await db.execute(
        delete(Pet).where(Pet.id == pet_id).execution_options(synchronize_session=False)
    )
    return bool(result.rowcount)  # type: ignore[attr-defined]
