"""Column types for values SQLite stores as text."""

from datetime import date, datetime
from typing import Any

from sqlalchemy import String
from sqlalchemy.engine import Dialect
from sqlalchemy.types import TypeDecorator

from lovingpaws.utils import parse_entry_date, parse_timestamp


class UTCDateTime(TypeDecorator[datetime]):
    """Aware UTC timestamp stored as an ISO-8601 string.

    Reads tolerate rows written by older clients (``CURRENT_TIMESTAMP`` style
    ``YYYY-MM-DD HH:MM:SS`` and JavaScript ``...Z`` strings); naive values are
    taken to be UTC.
    """

    impl = String
    cache_ok = True

    def process_bind_param(self, value: datetime | str | None, dialect: Dialect) -> str | None:
        if value is None:
            return None
        return parse_timestamp(value).isoformat(timespec="microseconds")

    def process_result_value(self, value: Any, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        return parse_timestamp(str(value))


class EntryDate(TypeDecorator[date]):
    """Calendar date stored as sortable ``YYYY-MM-DD`` text.

    Legacy ``YYYY/MM/DD`` values are still readable.
    """

    impl = String
    cache_ok = True

    def process_bind_param(self, value: date | str | None, dialect: Dialect) -> str | None:
        if value is None:
            return None
        return parse_entry_date(value).isoformat()

    def process_result_value(self, value: Any, dialect: Dialect) -> date | None:
        if value is None:
            return None
        return parse_entry_date(str(value))
