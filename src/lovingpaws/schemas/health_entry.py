"""Health entry input schemas.

An entry is a common envelope plus a payload that depends on ``type``. The
variants form a discriminated union so that, for example, a medication entry
cannot be built without a medication name.
"""

import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from lovingpaws.models.health_entry import Severity
from lovingpaws.utils import generate_id, parse_entry_date

# Variant columns that stay NULL unless the entry type uses them
VARIANT_FIELDS = (
    "medication_name",
    "dosage",
    "frequency",
    "route",
    "prescribed_by",
    "symptom",
    "duration",
    "appointment_type",
    "clinic_name",
    "veterinarian",
    "reason",
    "reminder",
)


class HealthEntryBase(BaseModel):
    """Fields shared by every entry type."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(default_factory=generate_id, min_length=1)
    pet_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    date: datetime.date
    time: str | None = None
    period: Literal["AM", "PM"] | None = None
    severity: Severity | None = None
    notes: str = ""

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_entry_date(value)
        return value


class SymptomEntry(HealthEntryBase):
    type: Literal["symptom"]
    symptom: str | None = None
    duration: str | None = None


class MedicationEntry(HealthEntryBase):
    type: Literal["medication"]
    medication_name: str = Field(..., min_length=1)
    dosage: str = Field(..., min_length=1)
    frequency: str | None = None
    route: str | None = None
    prescribed_by: str | None = None


class AppointmentEntry(HealthEntryBase):
    type: Literal["appointment"]
    appointment_type: str = Field(..., min_length=1)
    clinic_name: str = Field(..., min_length=1)
    veterinarian: str | None = None
    reason: str | None = None
    reminder: bool = False


class GeneralEntry(HealthEntryBase):
    """Entry types without a dedicated payload."""

    type: Literal["behavior", "vitals", "feeding", "hydration", "examination"]


HealthEntryData = Annotated[
    SymptomEntry | MedicationEntry | AppointmentEntry | GeneralEntry,
    Field(discriminator="type"),
]

_entry_adapter: TypeAdapter[HealthEntryData] = TypeAdapter(HealthEntryData)


def parse_health_entry(data: dict[str, Any]) -> HealthEntryData:
    """Validate a raw mapping into the entry variant named by its ``type``."""
    return _entry_adapter.validate_python(data)


def entry_to_row(entry: HealthEntryData) -> dict[str, Any]:
    """Flatten an entry into column values, nulling unused variant fields."""
    row: dict[str, Any] = dict.fromkeys(VARIANT_FIELDS)
    row.update(entry.model_dump(mode="python"))
    if entry.severity is not None:
        row["severity"] = entry.severity.value
    return row
