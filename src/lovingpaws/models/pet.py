"""Pet model and the declarative base shared by all tables."""

from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, Integer, String, Text, inspect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from lovingpaws.models.types import UTCDateTime
from lovingpaws.utils import utc_now

if TYPE_CHECKING:
    from lovingpaws.models.health_entry import HealthEntry


class Base(DeclarativeBase):
    """Base class for all models."""

    def to_snapshot(self) -> dict[str, Any]:
        """JSON-safe dict of the row keyed by attribute name."""
        snapshot: dict[str, Any] = {}
        for attr in inspect(self).mapper.column_attrs:
            value = getattr(self, attr.key)
            if isinstance(value, date | datetime):
                value = value.isoformat()
            snapshot[attr.key] = value
        return snapshot


class Pet(Base):
    """An animal owned by the user."""

    __tablename__ = "pets"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    type: Mapped[str] = mapped_column(String, nullable=False)
    breed: Mapped[str | None] = mapped_column(String, nullable=True)
    age: Mapped[str | None] = mapped_column(String, nullable=True)
    age_unit: Mapped[str | None] = mapped_column("ageUnit", String, nullable=True)
    weight: Mapped[str | None] = mapped_column(String, nullable=True)
    weight_unit: Mapped[str | None] = mapped_column("weightUnit", String, nullable=True)
    gender: Mapped[str | None] = mapped_column(String, nullable=True)
    color: Mapped[str | None] = mapped_column(String, nullable=True)
    microchip_id: Mapped[str | None] = mapped_column("microchipId", String, nullable=True)
    date_of_birth: Mapped[str | None] = mapped_column("dateOfBirth", String, nullable=True)
    owner_notes: Mapped[str | None] = mapped_column("ownerNotes", Text, nullable=True)
    image: Mapped[str | None] = mapped_column(String, nullable=True)

    # Derived state
    health_score: Mapped[int] = mapped_column("healthScore", Integer, default=100)
    last_checkup: Mapped[str] = mapped_column("lastCheckup", String, default="Never")

    # Timestamps
    created_at: Mapped[datetime] = mapped_column("createdAt", UTCDateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column("updatedAt", UTCDateTime, default=utc_now)
    synced_to_cloud: Mapped[bool] = mapped_column("syncedToCloud", Boolean, default=False)

    # Relationships
    health_entries: Mapped[list["HealthEntry"]] = relationship(
        "HealthEntry",
        back_populates="pet",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
