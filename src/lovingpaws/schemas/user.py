"""User profile input schemas."""

from datetime import date
from typing import Annotated, Self

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator

from lovingpaws.utils import avatar_initials, format_display_date, generate_id, is_valid_email


def _check_email(value: str) -> str:
    if not is_valid_email(value):
        raise ValueError("invalid email address")
    return value


EmailText = Annotated[str, AfterValidator(_check_email)]


class UserCreate(BaseModel):
    """Fields for creating the local user profile."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(default_factory=generate_id, min_length=1)
    user_name: str = Field(..., min_length=1, max_length=100)
    user_email: EmailText
    profile_image: str | None = None
    avatar_initials: str = ""
    member_since: str = Field(default_factory=lambda: format_display_date(date.today()))

    @model_validator(mode="after")
    def fill_initials(self) -> Self:
        if not self.avatar_initials:
            self.avatar_initials = avatar_initials(self.user_name)
        return self


class UserUpdate(BaseModel):
    """Partial profile update."""

    model_config = ConfigDict(extra="forbid")

    user_name: str | None = None
    user_email: EmailText | None = None
    profile_image: str | None = None
    avatar_initials: str | None = None
    member_since: str | None = None
