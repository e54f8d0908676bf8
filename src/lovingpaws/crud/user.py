"""Data access for the users table."""

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lovingpaws.models.user import User
from lovingpaws.schemas.user import UserCreate
from lovingpaws.utils import utc_now


async def create_user(db: AsyncSession, data: UserCreate) -> User:
    """Insert the user profile."""
    now = utc_now()
    user = User(**data.model_dump(), created_at=now, updated_at=now, synced_to_cloud=False)
    db.add(user)
    await db.flush()
    return user


async def get_user(db: AsyncSession) -> User | None:
    """Get the install's user profile, if one exists."""
    result = await db.execute(select(User).order_by(User.created_at).limit(1))
    return result.scalar_one_or_none()


async def update_user(db: AsyncSession, user_id: str, changes: dict[str, Any]) -> User | None:
    """Partially update the profile, refreshing updatedAt and the sync flag."""
    result = await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(**changes, updated_at=utc_now(), synced_to_cloud=False)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:  # type: ignore[attr-defined]
        return None
    return await db.get(User, user_id, populate_existing=True)
