"""Celery task definitions.

load_readings re-runs the idempotent bulk load outside the API process, e.g.
after dropping a new readings file in place:

    celery -A app.workers.celery_app call energy.load_readings
"""

import asyncio
import logging

from app.db.session import AsyncSessionLocal
from app.services.loader import load_energy_readings
from app.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="energy.load_readings", max_retries=0)
def load_readings(self, file_path: str | None = None) -> dict:
    """Celery entry point; runs the async loader in a new event loop."""
    return asyncio.run(_run_load(file_path))


async def _run_load(file_path: str | None) -> dict:
    async with AsyncSessionLocal() as db:
        try:
            summary = await load_energy_readings(db, file_path)
        except Exception as exc:
            logger.exception("load_readings failed: %s", exc)
            raise
    return {
        "parsed": summary.parsed,
        "inserted": summary.inserted,
        "skipped": summary.skipped,
    }
