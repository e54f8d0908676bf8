"""Validated input schemas for store operations."""

from lovingpaws.schemas.health_entry import (
    AppointmentEntry,
    GeneralEntry,
    HealthEntryData,
    MedicationEntry,
    SymptomEntry,
    entry_to_row,
    parse_health_entry,
)
from lovingpaws.schemas.pet import PetCreate, PetUpdate
from lovingpaws.schemas.user import UserCreate, UserUpdate

__all__ = [
    "AppointmentEntry",
    "GeneralEntry",
    "HealthEntryData",
    "MedicationEntry",
    "PetCreate",
    "PetUpdate",
    "SymptomEntry",
    "UserCreate",
    "UserUpdate",
    "entry_to_row",
    "parse_health_entry",
]
