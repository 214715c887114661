import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.db.session import get_db, get_read_db
from app.dependencies import get_query_cache, require_api_key
from app.models.energy_reading import EnergyReading
from app.services.cache import QueryCache

logger = logging.getLogger(__name__)

router = APIRouter()


async def _check_db(db: AsyncSession, name: str) -> str:
    try:
        await db.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("%s health check failed: %s", name, exc)
        return "error"
    return "ok"


def overall_status(db_status: str, db_read_status: str, cache_status: str) -> str:
    """healthy, degraded (read replica down) or unhealthy (primary DB or cache down)."""
    if "error" in (db_status, cache_status):
        return "unhealthy"
    if db_read_status == "error":
        return "degraded"
    return "healthy"


@router.get(
    "/status",
    summary="Service status",
    description=(
        "Returns service version, database and cache connectivity, and the number "
        "of loaded readings. Responds 503 when the primary database or the cache is "
        "unreachable. Requires a valid X-API-Key header."
    ),
    responses={503: {"description": "Primary database or cache unreachable"}},
)
async def get_status(
    response: Response,
    db: AsyncSession = Depends(get_db),
    read_db: AsyncSession = Depends(get_read_db),
    cache: QueryCache = Depends(get_query_cache),
    _: str = Depends(require_api_key),
):
    # ── DB liveness ────────────────────────────────────────────────────────────
    db_status = await _check_db(db, "DB")
    readings_loaded = None
    if db_status == "ok":
        try:
            count_result = await db.execute(select(func.count()).select_from(EnergyReading))
            readings_loaded = count_result.scalar_one()
        except Exception as exc:
            logger.warning("Readings count failed: %s", exc)
            db_status = "error"
    db_read_status = await _check_db(read_db, "Read replica")

    # ── Redis liveness ─────────────────────────────────────────────────────────
    cache_status = await cache.check_connection()

    overall = overall_status(db_status, db_read_status, cache_status)
    if overall == "unhealthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return {
        "status": overall,
        "service": settings.app_name,
        "version": settings.app_version,
        "db": db_status,
        "db_read": db_read_status,
        "cache": cache_status,
        "readings_loaded": readings_loaded,
        "config": {
            "energy_readings_file_path": settings.energy_readings_file_path,
            "load_readings_on_startup": settings.load_readings_on_startup,
            "aggregate_cache_ttl_seconds": settings.aggregate_cache_ttl_seconds,
            "history_limit": settings.history_limit,
        },
    }
