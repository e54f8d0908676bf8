"""Tests for input schemas."""

from datetime import date

import pytest
from pydantic import ValidationError

from lovingpaws.models.health_entry import Severity
from lovingpaws.schemas import (
    AppointmentEntry,
    GeneralEntry,
    MedicationEntry,
    PetCreate,
    PetUpdate,
    SymptomEntry,
    UserCreate,
    entry_to_row,
    parse_health_entry,
)


class TestHealthEntryUnion:
    """The entry type selects which payload is required."""

    def test_symptom(self) -> None:
        entry = parse_health_entry(
            {
                "pet_id": "p1",
                "type": "symptom",
                "title": "Cough",
                "date": "2025/01/02",
                "severity": "Moderate",
                "symptom": "Coughing",
            }
        )
        assert isinstance(entry, SymptomEntry)
        assert entry.date == date(2025, 1, 2)
        assert entry.severity is Severity.MODERATE

    def test_medication_requires_name_and_dosage(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            parse_health_entry(
                {"pet_id": "p1", "type": "medication", "title": "Pill", "date": "2025-01-02"}
            )
        missing = {err["loc"][-1] for err in exc_info.value.errors()}
        assert {"medication_name", "dosage"} <= missing

    def test_medication(self) -> None:
        entry = parse_health_entry(
            {
                "pet_id": "p1",
                "type": "medication",
                "title": "Pill",
                "date": date(2025, 1, 2),
                "medication_name": "Carprofen",
                "dosage": "25mg",
            }
        )
        assert isinstance(entry, MedicationEntry)

    def test_appointment_requires_clinic(self) -> None:
        with pytest.raises(ValidationError):
            parse_health_entry(
                {
                    "pet_id": "p1",
                    "type": "appointment",
                    "title": "Vet",
                    "date": "2025-01-02",
                    "appointment_type": "Checkup",
                }
            )

    def test_appointment_defaults(self) -> None:
        entry = parse_health_entry(
            {
                "pet_id": "p1",
                "type": "appointment",
                "title": "Vet",
                "date": "2025-01-02",
                "appointment_type": "Checkup",
                "clinic_name": "Happy Paws",
            }
        )
        assert isinstance(entry, AppointmentEntry)
        assert entry.reminder is False

    @pytest.mark.parametrize(
        "entry_type", ["behavior", "vitals", "feeding", "hydration", "examination"]
    )
    def test_general_types(self, entry_type: str) -> None:
        entry = parse_health_entry(
            {"pet_id": "p1", "type": entry_type, "title": "Note", "date": "2025-01-02"}
        )
        assert isinstance(entry, GeneralEntry)

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            parse_health_entry(
                {"pet_id": "p1", "type": "grooming", "title": "Bath", "date": "2025-01-02"}
            )

    def test_foreign_variant_field_rejected(self) -> None:
        """A symptom entry cannot carry medication fields."""
        with pytest.raises(ValidationError):
            parse_health_entry(
                {
                    "pet_id": "p1",
                    "type": "symptom",
                    "title": "Cough",
                    "date": "2025-01-02",
                    "dosage": "25mg",
                }
            )

    def test_invalid_severity_rejected(self) -> None:
        with pytest.raises(ValidationError):
            parse_health_entry(
                {
                    "pet_id": "p1",
                    "type": "symptom",
                    "title": "Cough",
                    "date": "2025-01-02",
                    "severity": "Critical",
                }
            )

    def test_invalid_date_rejected(self) -> None:
        with pytest.raises(ValidationError):
            parse_health_entry(
                {"pet_id": "p1", "type": "symptom", "title": "Cough", "date": "yesterday"}
            )

    def test_entry_to_row_nulls_other_variants(self) -> None:
        entry = parse_health_entry(
            {
                "id": "e1",
                "pet_id": "p1",
                "type": "symptom",
                "title": "Cough",
                "date": "2025-01-02",
                "severity": "Mild",
            }
        )

        row = entry_to_row(entry)

        assert row["severity"] == "Mild"
        assert row["medication_name"] is None
        assert row["reminder"] is None
        assert row["type"] == "symptom"
        assert row["date"] == date(2025, 1, 2)


class TestPetSchemas:
    def test_defaults(self) -> None:
        pet = PetCreate(name="Buddy", type="Dog")
        assert pet.id
        assert pet.health_score == 100
        assert pet.last_checkup == "Never"
        assert pet.breed == ""
        assert pet.microchip_id is None

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PetCreate.model_validate({"name": "Buddy", "type": "Dog", "owner": "me"})

    def test_update_tracks_set_fields(self) -> None:
        update = PetUpdate.model_validate({"name": "X", "breed": None})
        assert update.model_dump(exclude_unset=True) == {"name": "X", "breed": None}


class TestUserSchema:
    def test_initials_filled_from_name(self) -> None:
        user = UserCreate(user_name="Jane Doe", user_email="jane@example.com")
        assert user.avatar_initials == "JD"

    def test_explicit_initials_kept(self) -> None:
        user = UserCreate(
            user_name="Jane Doe", user_email="jane@example.com", avatar_initials="JJ"
        )
        assert user.avatar_initials == "JJ"
