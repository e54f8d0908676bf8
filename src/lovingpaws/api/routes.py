"""API routes for pets, health entries, the user profile and sync."""

from datetime import date, datetime
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ConfigDict, ValidationError

from lovingpaws.core.database import get_store
from lovingpaws.schemas.health_entry import HealthEntryData, parse_health_entry
from lovingpaws.schemas.pet import PetCreate, PetUpdate
from lovingpaws.schemas.user import UserCreate, UserUpdate
from lovingpaws.services.pet_care import PetCareService
from lovingpaws.services.remote import HttpRemoteStore
from lovingpaws.services.store import LocalStore
from lovingpaws.services.sync import SyncService

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1", tags=["pets"])

Store = Annotated[LocalStore, Depends(get_store)]


def get_pet_care(store: Store) -> PetCareService:
    return PetCareService(store)


def get_remote(request: Request) -> HttpRemoteStore:
    """Get the remote store configured for the running application."""
    remote: HttpRemoteStore = request.app.state.remote
    return remote


PetCare = Annotated[PetCareService, Depends(get_pet_care)]
Remote = Annotated[HttpRemoteStore, Depends(get_remote)]
EntryBody = Annotated[dict[str, Any], Body()]


def _parse_entry(payload: dict[str, Any]) -> HealthEntryData:
    """Validate an entry body against the variant named by its type."""
    try:
        return parse_health_entry(payload)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False, include_context=False)) from e


class PetResponse(BaseModel):
    """Response model for pet data."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    type: str
    breed: str | None
    age: str | None
    age_unit: str | None
    weight: str | None
    weight_unit: str | None
    gender: str | None
    color: str | None
    microchip_id: str | None
    date_of_birth: str | None
    owner_notes: str | None
    image: str | None
    health_score: int
    last_checkup: str
    created_at: datetime
    updated_at: datetime
    synced_to_cloud: bool


class HealthEntryResponse(BaseModel):
    """Response model for a health entry, variant fields included."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    pet_id: str
    type: str
    title: str
    description: str | None
    date: date
    time: str | None
    period: str | None
    severity: str | None
    notes: str | None
    medication_name: str | None = None
    dosage: str | None = None
    frequency: str | None = None
    route: str | None = None
    prescribed_by: str | None = None
    symptom: str | None = None
    duration: str | None = None
    appointment_type: str | None = None
    clinic_name: str | None = None
    veterinarian: str | None = None
    reason: str | None = None
    reminder: bool | None = None
    created_at: datetime
    synced_to_cloud: bool


class UserResponse(BaseModel):
    """Response model for the user profile."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_name: str
    user_email: str
    profile_image: str | None
    avatar_initials: str
    member_since: str
    created_at: datetime
    updated_at: datetime
    synced_to_cloud: bool


class AnalyticsResponse(BaseModel):
    """Per-pet entry counts and scores."""

    model_config = ConfigDict(from_attributes=True)

    health_score: int
    analytics_score: int
    medications: int
    appointments: int
    symptoms: int
    total_entries: int
    recent_entries: int


class RecentEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    pet_id: str
    pet_name: str
    type: str
    title: str
    when: str


class SyncItemResponse(BaseModel):
    """Response model for one sync queue item."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    table_name: str
    record_id: str
    operation: str
    data: dict[str, Any] | None
    created_at: datetime
    synced: bool


class SyncReportResponse(BaseModel):
    """Outcome of a manual sync."""

    model_config = ConfigDict(from_attributes=True)

    pushed: int
    failed: int
    skipped: int
    pulled: int
    errors: list[str]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    database: str
    initialized: bool


@router.get("/health", response_model=HealthResponse)
async def health_check(store: Store) -> HealthResponse:
    """Health check endpoint."""
    from lovingpaws import __version__

    db_status = "connected" if await store.check_connection() else "disconnected"
    return HealthResponse(
        status="healthy",
        version=__version__,
        database=db_status,
        initialized=store.is_initialized,
    )


# Pets


@router.post("/pets", response_model=PetResponse, status_code=status.HTTP_201_CREATED)
async def create_pet(pet_data: PetCreate, pet_care: PetCare) -> PetResponse:
    """Register a new pet."""
    pet = await pet_care.register_pet(pet_data)
    return PetResponse.model_validate(pet)


@router.get("/pets", response_model=list[PetResponse])
async def list_pets(store: Store) -> list[PetResponse]:
    """List all pets, newest first."""
    pets = await store.get_pets()
    return [PetResponse.model_validate(p) for p in pets]


@router.get("/pets/{pet_id}", response_model=PetResponse)
async def get_pet(pet_id: str, store: Store) -> PetResponse:
    pet = await store.get_pet_by_id(pet_id)
    if not pet:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Pet not found: {pet_id}",
        )
    return PetResponse.model_validate(pet)


@router.patch("/pets/{pet_id}", response_model=PetResponse)
async def update_pet(pet_id: str, changes: PetUpdate, pet_care: PetCare) -> PetResponse:
    """Update only the fields present in the request body."""
    pet = await pet_care.edit_pet(pet_id, changes)
    if not pet:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Pet not found: {pet_id}",
        )
    return PetResponse.model_validate(pet)


@router.delete("/pets/{pet_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pet(pet_id: str, pet_care: PetCare) -> None:
    """Delete a pet and all of its health entries."""
    if not await pet_care.remove_pet(pet_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Pet not found: {pet_id}",
        )


@router.get("/pets/{pet_id}/analytics", response_model=AnalyticsResponse)
async def pet_analytics(pet_id: str, pet_care: PetCare) -> AnalyticsResponse:
    summary = await pet_care.pet_analytics(pet_id)
    if summary is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Pet not found: {pet_id}",
        )
    return AnalyticsResponse.model_validate(summary)


# Health entries


@router.post("/entries", response_model=HealthEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_entry(payload: EntryBody, pet_care: PetCare) -> HealthEntryResponse:
    """Log a health entry and rescore its pet."""
    record = await pet_care.log_entry(_parse_entry(payload))
    return HealthEntryResponse.model_validate(record)


@router.get("/entries", response_model=list[HealthEntryResponse])
async def list_entries(
    store: Store,
    pet_id: Annotated[str | None, Query()] = None,
) -> list[HealthEntryResponse]:
    """List entries, optionally for one pet, newest first."""
    entries = await store.get_health_entries(pet_id)
    return [HealthEntryResponse.model_validate(e) for e in entries]


@router.get("/entries/recent", response_model=list[RecentEntryResponse])
async def recent_entries(
    pet_care: PetCare,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> list[RecentEntryResponse]:
    entries = await pet_care.recent_entries(limit)
    return [RecentEntryResponse.model_validate(e) for e in entries]


@router.get("/entries/{entry_id}", response_model=HealthEntryResponse)
async def get_entry(entry_id: str, store: Store) -> HealthEntryResponse:
    record = await store.get_health_entry_by_id(entry_id)
    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Health entry not found: {entry_id}",
        )
    return HealthEntryResponse.model_validate(record)


@router.put("/entries/{entry_id}", response_model=HealthEntryResponse)
async def replace_entry(
    entry_id: str, payload: EntryBody, pet_care: PetCare
) -> HealthEntryResponse:
    """Replace an entry. The path id wins over any id in the body."""
    record = await pet_care.revise_entry(_parse_entry({**payload, "id": entry_id}))
    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Health entry not found: {entry_id}",
        )
    return HealthEntryResponse.model_validate(record)


@router.delete("/entries/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(entry_id: str, pet_care: PetCare) -> None:
    if not await pet_care.remove_entry(entry_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Health entry not found: {entry_id}",
        )


# User profile


@router.get("/user", response_model=UserResponse)
async def get_user(store: Store) -> UserResponse:
    user = await store.get_user()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No user profile",
        )
    return UserResponse.model_validate(user)


@router.post("/user", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(user_data: UserCreate, store: Store) -> UserResponse:
    """Create the profile. Only one profile may exist."""
    if await store.get_user():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User profile already exists",
        )
    user = await store.add_user(user_data, sync=True)
    return UserResponse.model_validate(user)


@router.patch("/user", response_model=UserResponse)
async def update_user(changes: UserUpdate, store: Store) -> UserResponse:
    user = await store.get_user()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No user profile",
        )
    updated = await store.update_user(user.id, changes, sync=True)
    return UserResponse.model_validate(updated)


# Sync


@router.get("/sync/queue", response_model=list[SyncItemResponse])
async def list_sync_queue(
    store: Store,
    pending: Annotated[bool, Query()] = False,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
) -> list[SyncItemResponse]:
    """List recent queue items, or only pending ones in replay order."""
    items = await store.get_unsynced() if pending else await store.get_sync_items(limit)
    return [SyncItemResponse.model_validate(i) for i in items]


@router.post("/sync", response_model=SyncReportResponse)
async def trigger_sync(store: Store, remote: Remote) -> SyncReportResponse:
    """Push pending changes to the remote store and pull remote changes."""
    if not remote.configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Remote sync is not configured",
        )
    report = await SyncService(store, remote).sync()
    logger.info("Manual sync finished", pushed=report.pushed, pulled=report.pulled)
    return SyncReportResponse.model_validate(report)
