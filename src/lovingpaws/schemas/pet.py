"""Pet input schemas."""

from pydantic import BaseModel, ConfigDict, Field

from lovingpaws.utils import generate_id


class PetCreate(BaseModel):
    """Fields for registering a pet.

    Optional text fields default to an empty string and optional references to
    None, matching what the mobile client has always written.
    """

    model_config = ConfigDict(extra="forbid")

    id: str = Field(default_factory=generate_id, min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    type: str = Field(..., min_length=1, max_length=50)
    breed: str = ""
    age: str = ""
    age_unit: str = ""
    weight: str = ""
    weight_unit: str = ""
    gender: str = ""
    color: str = ""
    microchip_id: str | None = None
    date_of_birth: str | None = None
    owner_notes: str = ""
    image: str | None = None
    health_score: int = Field(100, ge=0, le=100)
    last_checkup: str = "Never"


class PetUpdate(BaseModel):
    """Partial pet update. Only fields that are explicitly set get written."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    type: str | None = None
    breed: str | None = None
    age: str | None = None
    age_unit: str | None = None
    weight: str | None = None
    weight_unit: str | None = None
    gender: str | None = None
    color: str | None = None
    microchip_id: str | None = None
    date_of_birth: str | None = None
    owner_notes: str | None = None
    image: str | None = None
    health_score: int | None = Field(None, ge=0, le=100)
    last_checkup: str | None = None
