"""Pet care workflows used by the app screens.

Each workflow changes the local store and queues the change for the remote in
the same transaction, and keeps the owning pet's health score current whenever
one of its entries changes.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

import structlog

from lovingpaws.models.health_entry import EntryType, HealthEntry
from lovingpaws.models.pet import Pet
from lovingpaws.schemas.health_entry import HealthEntryData
from lovingpaws.schemas.pet import PetCreate, PetUpdate
from lovingpaws.services.health_score import HealthSummary, compute_health_score, summarize_entries
from lovingpaws.services.store import LocalStore
from lovingpaws.utils import format_display_date, parse_entry_date

logger = structlog.get_logger()

# Entry types that count as a vet visit for lastCheckup
CHECKUP_TYPES = frozenset({EntryType.APPOINTMENT.value, EntryType.EXAMINATION.value})


@dataclass
class RecentEntry:
    """A health entry prepared for the home screen feed."""

    id: str
    pet_id: str
    pet_name: str
    type: str
    title: str
    when: str


def describe_when(entry: HealthEntry, today: date | None = None) -> str:
    """Human wording for when an entry happened (or is scheduled)."""
    today = today or date.today()
    if entry.type == EntryType.APPOINTMENT.value:
        label = entry.date.strftime("%b %d, %Y")
        return f"{label} at {entry.time}" if entry.time else label

    days = (today - entry.date).days
    if days <= 0:
        return "Today"
    if days < 7:
        return f"{days} day{'s' if days > 1 else ''} ago"
    weeks = days // 7
    return f"{weeks} week{'s' if weeks > 1 else ''} ago"


def _is_later_checkup(entry_date: date, current: str | None) -> bool:
    if entry_date > date.today():
        return False
    try:
        return entry_date > parse_entry_date(current or "")
    except ValueError:
        # "Never" or free text
        return True


class PetCareService:
    """Pet and health entry workflows on top of a LocalStore."""

    def __init__(self, store: LocalStore) -> None:
        self.store = store

    async def register_pet(self, pet: PetCreate | Mapping[str, Any]) -> Pet:
        """Add a pet with a fresh health score and queue it for upload."""
        return await self.store.add_pet(pet, sync=True)

    async def edit_pet(self, pet_id: str, changes: PetUpdate | Mapping[str, Any]) -> Pet | None:
        return await self.store.update_pet(pet_id, changes, sync=True)

    async def remove_pet(self, pet_id: str) -> bool:
        return await self.store.delete_pet(pet_id, sync=True)

    async def log_entry(self, entry: HealthEntryData | Mapping[str, Any]) -> HealthEntry:
        """Record a health event and rescore its pet."""
        record = await self.store.add_health_entry(entry, sync=True)
        await self.refresh_health_score(record.pet_id, checkup=record)
        return record

    async def revise_entry(self, entry: HealthEntryData | Mapping[str, Any]) -> HealthEntry | None:
        record = await self.store.update_health_entry(entry, sync=True)
        if record is not None:
            await self.refresh_health_score(record.pet_id, checkup=record)
        return record

    async def remove_entry(self, entry_id: str) -> bool:
        record = await self.store.get_health_entry_by_id(entry_id)
        if record is None:
            return False
        deleted = await self.store.delete_health_entry(entry_id, sync=True)
        if deleted:
            await self.refresh_health_score(record.pet_id)
        return deleted

    async def refresh_health_score(
        self, pet_id: str, checkup: HealthEntry | None = None
    ) -> int | None:
        """Recompute a pet's score from its entries and store it if it changed.

        When ``checkup`` is a past appointment or examination newer than the
        pet's last checkup, lastCheckup moves to its date.

        Returns:
            The new score, or None if the pet does not exist.
        """
        pet = await self.store.get_pet_by_id(pet_id)
        if pet is None:
            return None

        entries = await self.store.get_health_entries(pet_id)
        score = compute_health_score(entries)

        changes: dict[str, Any] = {}
        if score != pet.health_score:
            changes["health_score"] = score
        if (
            checkup is not None
            and checkup.type in CHECKUP_TYPES
            and _is_later_checkup(checkup.date, pet.last_checkup)
        ):
            changes["last_checkup"] = format_display_date(checkup.date)

        if changes:
            await self.store.update_pet(pet_id, changes, sync=True)
            logger.info("Health score refreshed", pet_id=pet_id, old=pet.health_score, new=score)
        return score

    async def pet_analytics(self, pet_id: str) -> HealthSummary | None:
        """Entry counts and scores for one pet."""
        if await self.store.get_pet_by_id(pet_id) is None:
            return None
        entries = await self.store.get_health_entries(pet_id)
        return summarize_entries(entries)

    async def recent_entries(self, limit: int = 10, today: date | None = None) -> list[RecentEntry]:
        """Newest entries across all pets, labelled with their pet's name."""
        entries = (await self.store.get_health_entries())[:limit]
        names = {pet.id: pet.name for pet in await self.store.get_pets()}
        return [
            RecentEntry(
                id=entry.id,
                pet_id=entry.pet_id,
                pet_name=names.get(entry.pet_id, "Unknown Pet"),
                type=entry.type.capitalize(),
                title=entry.title,
                when=describe_when(entry, today),
            )
            for entry in entries
        ]

    async def upcoming_appointments(self, days: int = 30) -> list[HealthEntry]:
        """Appointments scheduled from today through the next ``days`` days, soonest first."""
        today = date.today()
        horizon = today + timedelta(days=days)
        entries = await self.store.get_health_entries()
        upcoming = [
            entry
            for entry in entries
            if entry.type == EntryType.APPOINTMENT.value and today <= entry.date <= horizon
        ]
        return sorted(upcoming, key=lambda entry: entry.date)
