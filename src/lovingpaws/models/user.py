"""User profile model (one per install)."""

from datetime import datetime

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from lovingpaws.models.pet import Base
from lovingpaws.models.types import UTCDateTime
from lovingpaws.utils import utc_now


class User(Base):
    """The app user's profile."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    user_name: Mapped[str] = mapped_column("userName", String, nullable=False)
    user_email: Mapped[str] = mapped_column("userEmail", String, nullable=False, unique=True)
    profile_image: Mapped[str | None] = mapped_column("profileImage", String, nullable=True)
    avatar_initials: Mapped[str] = mapped_column("avatarInitials", String, nullable=False)
    member_since: Mapped[str] = mapped_column("memberSince", String, nullable=False)

    created_at: Mapped[datetime] = mapped_column("createdAt", UTCDateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column("updatedAt", UTCDateTime, default=utc_now)
    synced_to_cloud: Mapped[bool] = mapped_column("syncedToCloud", Boolean, default=False)
