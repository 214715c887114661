"""Redis-backed cache for aggregation results, with lazy initialisation.

The Redis client is created on first use, so the API starts cleanly when Redis
is not reachable yet. Every Redis failure degrades to a cache miss: the caller
always gets an answer, at worst from a live query.
"""

import json
import logging
from datetime import datetime, timezone

from redis.exceptions import RedisError

from app.config import settings
from app.exceptions import CacheUnavailable
from app.models.query_history import AggregationMode

logger = logging.getLogger(__name__)

KEY_PREFIX = "energy:aggregate"


def _key_part(value: datetime | None) -> str:
    if value is None:
        return "none"
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def fingerprint(
    mode: AggregationMode,
    date_from: datetime | None,
    date_to: datetime | None,
) -> str:
    """Deterministic cache key for an aggregation request.

    Equal instants expressed in different UTC offsets map to the same key.
    """
    return f"{KEY_PREFIX}:{mode.value}:{_key_part(date_from)}:{_key_part(date_to)}"


class QueryCache:
    """Thin wrapper around redis.asyncio storing bucket lists as JSON."""

    def __init__(self, client=None, url: str | None = None) -> None:
        self._client = client
        self._url = url or settings.redis_url

    # ── Internal helpers ───────────────────────────────────────────────────────

    def _get_client(self):
        """Return the Redis client, initialising it on first call."""
        if self._client is None:
            from redis import asyncio as aioredis  # noqa: PLC0415

            self._client = aioredis.from_url(self._url, decode_responses=True)
            logger.info("Redis cache client initialised")
        return self._client

    async def _execute(self, op: str, *args, **kwargs):
        client = self._get_client()
        try:
            return await getattr(client, op)(*args, **kwargs)
        except (RedisError, OSError) as exc:
            raise CacheUnavailable(f"Redis {op} failed: {exc}") from exc

    # ── Public API ─────────────────────────────────────────────────────────────

    async def get(self, key: str) -> list[dict] | None:
        """Return the cached buckets for *key*, or None on a miss or cache failure."""
        try:
            raw = await self._execute("get", key)
        except CacheUnavailable as exc:
            logger.warning("Cache read skipped: %s", exc)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding undecodable cache entry %s", key)
            return None

    async def put(self, key: str, buckets: list[dict], ttl: int | None = None) -> None:
        """Store *buckets* under *key* for *ttl* seconds. Failures are logged, not raised."""
        ttl = ttl or settings.aggregate_cache_ttl_seconds
        try:
            await self._execute("set", key, json.dumps(buckets), ex=ttl)
        except CacheUnavailable as exc:
            logger.warning("Cache write skipped: %s", exc)

    async def check_connection(self) -> str:
        """Return 'ok' or 'error' for the /status endpoint."""
        try:
            await self._execute("ping")
            return "ok"
        except CacheUnavailable as exc:
            logger.warning("Redis health check failed: %s", exc)
            return "error"

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


# Module-level singleton used throughout the application
query_cache = QueryCache()
