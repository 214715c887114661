from __future__ import annotations

import re
import uuid
from datetime import date, datetime, time, timezone
from typing import Any

from pydantic import BaseModel, Field, field_validator

from app.models.query_history import AggregationMode

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class AggregateRequest(BaseModel):
    mode: AggregationMode
    date_from: datetime | None = Field(
        default=None,
        description="Start of range (inclusive). A bare date means 00:00 UTC of that day.",
        examples=["2025-01-01T00:00:00Z"],
    )
    date_to: datetime | None = Field(
        default=None,
        description="End of range (inclusive). A bare date covers that whole day (UTC).",
        examples=["2025-03-31T23:00:00Z", "2025-03-31"],
    )

    @field_validator("date_to", mode="before")
    @classmethod
    def _date_to_end_of_day(cls, value: Any) -> Any:
        if isinstance(value, str) and _DATE_ONLY.match(value):
            value = date.fromisoformat(value)
        if isinstance(value, date) and not isinstance(value, datetime):
            return datetime.combine(value, time.max, tzinfo=timezone.utc)
        return value

    @field_validator("date_from", "date_to")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class AggregateBucket(BaseModel):
    label: str
    value: float


class AggregateResponse(BaseModel):
    mode: AggregationMode
    date_from: datetime | None
    date_to: datetime | None
    buckets: list[AggregateBucket]


class QueryHistoryEntry(BaseModel):
    id: uuid.UUID
    mode: str
    date_from: datetime | None
    date_to: datetime | None
    created_at: datetime
