"""Small helpers shared by the store, schemas and services."""

import re
import secrets
import time
from datetime import UTC, date, datetime

DISPLAY_DATE_FORMAT = "%Y/%m/%d"

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_DATE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})")


def generate_id() -> str:
    """Generate an opaque record id: millisecond timestamp plus random suffix."""
    return f"{int(time.time() * 1000)}_{secrets.token_hex(5)}"


def avatar_initials(name: str) -> str:
    """Build up to two uppercase initials from a display name."""
    return "".join(word[0].upper() for word in name.split() if word)[:2]


def is_valid_email(email: str) -> bool:
    """Loose email shape check."""
    return bool(_EMAIL_RE.match(email))


def parse_entry_date(value: date | datetime | str) -> date:
    """Parse an entry date into a calendar date.

    Accepts ``date``/``datetime`` objects, canonical ``YYYY-MM-DD`` strings,
    the legacy display form ``YYYY/MM/DD`` and full ISO timestamps.

    Raises:
        ValueError: If the string is not a recognizable date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    match = _DATE_RE.match(value.strip().replace("/", "-"))
    if not match:
        raise ValueError(f"Invalid date: {value!r}")
    year, month, day = (int(part) for part in match.groups())
    return date(year, month, day)


def format_display_date(value: date | datetime | str) -> str:
    """Render a date in the ``YYYY/MM/DD`` form shown to users."""
    return parse_entry_date(value).strftime(DISPLAY_DATE_FORMAT)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def parse_timestamp(value: datetime | str) -> datetime:
    """Parse a stored or remote timestamp into an aware UTC datetime.

    Naive values (such as SQLite ``CURRENT_TIMESTAMP`` output) are taken to be UTC.
    """
    parsed = value if isinstance(value, datetime) else datetime.fromisoformat(value.strip())
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)
