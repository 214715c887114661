"""Aggregation of energy readings into hourly, day-of-month and monthly buckets.

Readings in the requested range are selected from energy_readings and bucketed
with pandas:

    hourly        one bucket per distinct UTC hour,      label '2025-01-01T13:00:00Z'
    day_of_month  one bucket per calendar day (1-31),    label '1'
                  summed across every month and year in range
    monthly       one bucket per calendar month,         label '2025-01'

Buckets are returned in ascending natural order with the summed kWh as value.
"""

import logging
from datetime import datetime, timezone

import pandas as pd
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import InvalidRangeError
from app.models.energy_reading import EnergyReading
from app.models.query_history import AggregationMode
from app.services.cache import QueryCache, fingerprint
from app.services.history import record_query

logger = logging.getLogger(__name__)

_VALUE_DECIMALS = 4


def validate_range(date_from: datetime | None, date_to: datetime | None) -> None:
    """Raise InvalidRangeError if both bounds are set and date_from is after date_to."""
    if date_from is not None and date_to is not None and date_from > date_to:
        raise InvalidRangeError(date_from, date_to)


def readings_statement(date_from: datetime | None, date_to: datetime | None):
    stmt = select(EnergyReading.reading_time, EnergyReading.quantity_kwh)
    if date_from is not None:
        stmt = stmt.where(EnergyReading.reading_time >= date_from)
    if date_to is not None:
        stmt = stmt.where(EnergyReading.reading_time <= date_to)
    return stmt.order_by(EnergyReading.reading_time)


async def fetch_readings(
    db: AsyncSession,
    date_from: datetime | None,
    date_to: datetime | None,
) -> pd.DataFrame:
    """Readings in the inclusive range [date_from, date_to] as a DataFrame."""
    result = await db.execute(readings_statement(date_from, date_to))
    rows = result.all()
    return pd.DataFrame(
        [{"reading_time": r.reading_time, "quantity_kwh": r.quantity_kwh} for r in rows],
        columns=["reading_time", "quantity_kwh"],
    )


def _bucket_keys(ts: pd.Series, mode: AggregationMode) -> pd.Series:
    if mode is AggregationMode.hourly:
        return ts.dt.floor("h").dt.strftime("%Y-%m-%dT%H:00:00Z")
    if mode is AggregationMode.day_of_month:
        return ts.dt.day
    return ts.dt.strftime("%Y-%m")


def aggregate_frame(df: pd.DataFrame, mode: AggregationMode) -> list[dict]:
    """Sum quantity_kwh per bucket for *mode*.

    Hourly and monthly labels are zero-padded, so sorting them as strings is
    chronological; day-of-month keys are sorted as integers.
    """
    if df.empty:
        return []

    ts = pd.to_datetime(df["reading_time"], utc=True)
    values = pd.to_numeric(df["quantity_kwh"].astype(float))
    keys = _bucket_keys(ts, mode)

    totals = values.groupby(keys.to_numpy(), sort=True).sum()
    return [
        {"label": str(label), "value": round(float(total), _VALUE_DECIMALS)}
        for label, total in totals.items()
    ]


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def run_aggregation(
    db: AsyncSession,
    read_db: AsyncSession,
    cache: QueryCache,
    mode: AggregationMode,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
) -> list[dict]:
    """Validate, record, and answer an aggregation request (cache-aside).

    The request is recorded in query_history on both cache hits and misses,
    but never when the range is invalid.

    Raises:
        InvalidRangeError: date_from is later than date_to.
    """
    date_from, date_to = _as_utc(date_from), _as_utc(date_to)
    validate_range(date_from, date_to)

    await record_query(db, mode, date_from, date_to)

    key = fingerprint(mode, date_from, date_to)
    cached = await cache.get(key)
    if cached is not None:
        logger.debug("Cache hit for %s", key)
        return cached

    df = await fetch_readings(read_db, date_from, date_to)
    buckets = aggregate_frame(df, mode)
    await cache.put(key, buckets, settings.aggregate_cache_ttl_seconds)
    logger.info(
        "Aggregated %d readings into %d %s bucket(s)", len(df), len(buckets), mode.value
    )
    return buckets
