import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.db.session import AsyncSessionLocal, dispose_engines
from app.exceptions import LoadError, ParseError
from app.services.cache import query_cache
from app.services.loader import load_energy_readings

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def _load_readings_on_startup() -> None:
    """Run the idempotent bulk load; failures are logged and retried on next start."""
    async with AsyncSessionLocal() as db:
        try:
            await load_energy_readings(db)
        except (ParseError, LoadError) as exc:
            logger.error("Energy readings load failed: %s", exc)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s v%s", settings.app_name, settings.app_version)
    if settings.load_readings_on_startup:
        await _load_readings_on_startup()
    yield
    logger.info("Shutting down: closing cache client and disposing DB engines")
    await query_cache.close()
    await dispose_engines()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=(
        "Energy readings aggregation API. Loads hourly kWh readings from a spreadsheet "
        "and serves cached hourly, day-of-month and monthly aggregations."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Root liveness check (no auth required) ─────────────────────────────────────
@app.get("/health", tags=["System"], summary="Liveness check")
async def health():
    """Returns 200 OK if the service is running."""
    return {"status": "ok"}


# ── Versioned API routes ────────────────────────────────────────────────────────
from app.api.v1.router import api_v1_router  # noqa: E402

app.include_router(api_v1_router, prefix="/api/wire/v1")
