"""Idempotent bulk load of energy readings.

Every row is inserted with ``ON CONFLICT (reading_time) DO NOTHING``, so the
load can run on every startup: readings already in the table are skipped and
only new timestamps are added.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import pandas as pd
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import LoadError
from app.models.energy_reading import EnergyReading
from app.services.parser import parse_energy_readings

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1000


@dataclass(frozen=True)
class LoadSummary:
    parsed: int
    inserted: int

    @property
    def skipped(self) -> int:
        """Rows whose reading_time was already present."""
        return self.parsed - self.inserted


def build_insert_statement(rows: list[dict]):
    stmt = pg_insert(EnergyReading).values(rows)
    return stmt.on_conflict_do_nothing(index_elements=["reading_time"])


async def insert_readings(db: AsyncSession, df: pd.DataFrame) -> int:
    """Insert parsed readings in chunks; returns the number of new rows."""
    if df.empty:
        return 0
    rows = [
        {"reading_time": row.reading_time.to_pydatetime(), "quantity_kwh": row.quantity_kwh}
        for row in df.itertuples(index=False)
    ]
    inserted = 0
    for i in range(0, len(rows), CHUNK_SIZE):
        result = await db.execute(build_insert_statement(rows[i : i + CHUNK_SIZE]))
        inserted += max(result.rowcount or 0, 0)
    return inserted


async def load_energy_readings(
    db: AsyncSession,
    file_path: str | None = None,
    sheet_name: str | None = None,
) -> LoadSummary:
    """Load the readings spreadsheet into energy_readings.

    Raises:
        ParseError: The source file is malformed.
        LoadError: The source file is missing or the database rejected the load.
    """
    path = Path(file_path or settings.energy_readings_file_path)
    sheet = sheet_name or settings.energy_readings_sheet_name

    try:
        data = path.read_bytes()
    except OSError as exc:
        raise LoadError(f"Cannot read reading source '{path}': {exc}") from exc

    logger.info("Loading energy readings from %s", path)
    df = parse_energy_readings(data, path.name, sheet_name=sheet)

    try:
        inserted = await insert_readings(db, df)
        await db.commit()
    except (SQLAlchemyError, OSError) as exc:
        await db.rollback()
        raise LoadError(f"Failed to store energy readings: {exc}") from exc

    summary = LoadSummary(parsed=len(df), inserted=inserted)
    logger.info(
        "Energy readings loaded: %d parsed, %d inserted, %d already present",
        summary.parsed,
        summary.inserted,
        summary.skipped,
    )
    return summary
