"""Energy aggregation endpoints.

POST /energy/aggregate  bucket readings by hour, day of month, or month.
GET  /energy/history    the most recent aggregation requests.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.db.session import get_db, get_read_db
from app.dependencies import get_query_cache, get_request_id
from app.exceptions import InvalidRangeError
from app.schemas.energy import (
    AggregateRequest,
    AggregateResponse,
    QueryHistoryEntry,
)
from app.services.aggregation import run_aggregation
from app.services.cache import QueryCache
from app.services.history import recent_queries

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/energy")


@router.post(
    "/aggregate",
    response_model=AggregateResponse,
    summary="Aggregate energy readings",
    description=(
        "Sums kWh per hour, per calendar day of month (across all months), or per "
        "month, optionally restricted to an inclusive date range. Results are cached; "
        "every accepted request is recorded in the query history."
    ),
    responses={400: {"description": "date_from is after date_to"}},
)
async def aggregate(
    payload: AggregateRequest,
    db: AsyncSession = Depends(get_db),
    read_db: AsyncSession = Depends(get_read_db),
    cache: QueryCache = Depends(get_query_cache),
    request_id: uuid.UUID = Depends(get_request_id),
):
    logger.info(
        "[%s] Aggregate request mode=%s date_from=%s date_to=%s",
        request_id,
        payload.mode.value,
        payload.date_from,
        payload.date_to,
    )
    try:
        buckets = await run_aggregation(
            db, read_db, cache, payload.mode, payload.date_from, payload.date_to
        )
    except InvalidRangeError as exc:
        logger.info("[%s] Rejected aggregate request: %s", request_id, exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    return {
        "mode": payload.mode,
        "date_from": payload.date_from,
        "date_to": payload.date_to,
        "buckets": buckets,
    }


@router.get(
    "/history",
    response_model=list[QueryHistoryEntry],
    summary="Recent aggregation requests",
    description="Returns up to the 10 most recent aggregation requests, newest first.",
)
async def get_history(
    db: AsyncSession = Depends(get_db),
    request_id: uuid.UUID = Depends(get_request_id),
):
    entries = await recent_queries(db, settings.history_limit)
    logger.info("[%s] History request returned %d entries", request_id, len(entries))
    return [
        {
            "id": e.id,
            "mode": e.aggregation_type,
            "date_from": e.date_from,
            "date_to": e.date_to,
            "created_at": e.created_at,
        }
        for e in entries
    ]
