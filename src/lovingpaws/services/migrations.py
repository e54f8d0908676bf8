"""Additive schema migrations for databases created by older releases.

Each step adds one nullable column when the live table lacks it. There is no
version table: the table's own column list is the source of truth, so running
the steps again on a migrated database changes nothing.
"""

from dataclasses import dataclass

import structlog
from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine

logger = structlog.get_logger()


@dataclass(frozen=True)
class AddColumn:
    """Add ``column`` to ``table`` if it is missing."""

    table: str
    column: str
    sql_type: str = "TEXT"

    @property
    def ddl(self) -> str:
        return f'ALTER TABLE {self.table} ADD COLUMN "{self.column}" {self.sql_type}'


MIGRATIONS: list[AddColumn] = [
    AddColumn("pets", "weightUnit"),
    AddColumn("pets", "gender"),
    AddColumn("pets", "ageUnit"),
    # Entry variant payloads and AM/PM were added after the first release
    AddColumn("health_entries", "period"),
    AddColumn("health_entries", "medicationName"),
    AddColumn("health_entries", "dosage"),
    AddColumn("health_entries", "frequency"),
    AddColumn("health_entries", "route"),
    AddColumn("health_entries", "prescribedBy"),
    AddColumn("health_entries", "symptom"),
    AddColumn("health_entries", "duration"),
    AddColumn("health_entries", "appointmentType"),
    AddColumn("health_entries", "clinicName"),
    AddColumn("health_entries", "veterinarian"),
    AddColumn("health_entries", "reason"),
    AddColumn("health_entries", "reminder", "BOOLEAN"),
]


def _column_names(conn: Connection, table: str) -> set[str]:
    return {column["name"] for column in inspect(conn).get_columns(table)}


async def get_column_names(engine: AsyncEngine, table: str) -> set[str]:
    """Read the live column names of a table."""
    async with engine.connect() as conn:
        return await conn.run_sync(_column_names, table)


async def apply_migration(engine: AsyncEngine, step: AddColumn) -> bool:
    """Apply one step in its own transaction.

    Returns:
        True if the column was added, False if it already existed.
    """
    async with engine.begin() as conn:
        existing = await conn.run_sync(_column_names, step.table)
        if step.column in existing:
            return False
        logger.info("Adding column", table=step.table, column=step.column)
        await conn.execute(text(step.ddl))
    return True


async def run_migrations(
    engine: AsyncEngine, steps: list[AddColumn] | None = None
) -> list[AddColumn]:
    """Run every step, logging and skipping the ones that fail.

    Returns:
        The steps that added a column on this run.
    """
    applied: list[AddColumn] = []
    for step in steps if steps is not None else MIGRATIONS:
        try:
            if await apply_migration(engine, step):
                applied.append(step)
        except Exception:
            logger.exception("Migration step failed", table=step.table, column=step.column)

    logger.info("Migrations complete", applied=len(applied))
    return applied
