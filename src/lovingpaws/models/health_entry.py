"""Health entry model: one logged health event for a pet."""

import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lovingpaws.models.pet import Base
from lovingpaws.models.types import EntryDate, UTCDateTime
from lovingpaws.utils import utc_now

if TYPE_CHECKING:
    from lovingpaws.models.pet import Pet


class EntryType(str, Enum):
    """Kinds of health events."""

    SYMPTOM = "symptom"
    MEDICATION = "medication"
    APPOINTMENT = "appointment"
    BEHAVIOR = "behavior"
    VITALS = "vitals"
    FEEDING = "feeding"
    HYDRATION = "hydration"
    EXAMINATION = "examination"


class Severity(str, Enum):
    """Severity of a symptom or event."""

    MILD = "Mild"
    MODERATE = "Moderate"
    SEVERE = "Severe"
    EMERGENCY = "Emergency"


class HealthEntry(Base):
    """A symptom, medication, appointment or other event logged for a pet.

    Variant-specific fields live on the same row and stay NULL for other types.
    """

    __tablename__ = "health_entries"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    pet_id: Mapped[str] = mapped_column(
        "petId", String, ForeignKey("pets.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(String, nullable=False)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    date: Mapped[datetime.date] = mapped_column(EntryDate, nullable=False)
    time: Mapped[str | None] = mapped_column(String, nullable=True)
    period: Mapped[str | None] = mapped_column(String, nullable=True)
    severity: Mapped[str | None] = mapped_column(String, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Medication
    medication_name: Mapped[str | None] = mapped_column("medicationName", String, nullable=True)
    dosage: Mapped[str | None] = mapped_column(String, nullable=True)
    frequency: Mapped[str | None] = mapped_column(String, nullable=True)
    route: Mapped[str | None] = mapped_column(String, nullable=True)
    prescribed_by: Mapped[str | None] = mapped_column("prescribedBy", String, nullable=True)

    # Symptom
    symptom: Mapped[str | None] = mapped_column(String, nullable=True)
    duration: Mapped[str | None] = mapped_column(String, nullable=True)

    # Appointment
    appointment_type: Mapped[str | None] = mapped_column("appointmentType", String, nullable=True)
    clinic_name: Mapped[str | None] = mapped_column("clinicName", String, nullable=True)
    veterinarian: Mapped[str | None] = mapped_column(String, nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    reminder: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    created_at: Mapped[datetime.datetime] = mapped_column("createdAt", UTCDateTime, default=utc_now)
    synced_to_cloud: Mapped[bool] = mapped_column("syncedToCloud", Boolean, default=False)

    pet: Mapped["Pet"] = relationship("Pet", back_populates="health_entries")
