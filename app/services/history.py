"""Append-only log of aggregation requests."""

import logging
import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.query_history import AggregationMode, QueryHistory

logger = logging.getLogger(__name__)

MAX_HISTORY = 10


async def record_query(
    db: AsyncSession,
    mode: AggregationMode,
    date_from: datetime | None,
    date_to: datetime | None,
) -> QueryHistory:
    entry = QueryHistory(
        id=uuid.uuid4(),
        aggregation_type=mode.value,
        date_from=date_from,
        date_to=date_to,
    )
    db.add(entry)
    await db.commit()
    logger.debug("Recorded %s query %s", mode.value, entry.id)
    return entry


def recent_queries_statement(limit: int):
    limit = max(1, min(limit, MAX_HISTORY))
    return select(QueryHistory).order_by(QueryHistory.created_at.desc()).limit(limit)


async def recent_queries(db: AsyncSession, limit: int = MAX_HISTORY) -> list[QueryHistory]:
    """Most recent entries, newest first; never more than MAX_HISTORY."""
    result = await db.execute(recent_queries_statement(limit))
    return list(result.scalars().all())
