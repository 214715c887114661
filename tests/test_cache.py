"""Tests for the Redis query cache."""

import json
from datetime import datetime, timedelta, timezone

from app.models.query_history import AggregationMode
from app.services.cache import QueryCache, fingerprint

from tests.fakes import BrokenRedis, FakeRedis

UTC = timezone.utc


class TestFingerprint:
    def test_open_range(self):
        assert (
            fingerprint(AggregationMode.hourly, None, None)
            == "energy:aggregate:hourly:none:none"
        )

    def test_same_instant_in_other_offset_gives_same_key(self):
        utc = datetime(2025, 1, 1, 0, tzinfo=UTC)
        cet = utc.astimezone(timezone(timedelta(hours=1)))
        assert fingerprint(AggregationMode.monthly, utc, None) == fingerprint(
            AggregationMode.monthly, cet, None
        )

    def test_mode_and_bounds_distinguish_keys(self):
        ts = datetime(2025, 1, 1, tzinfo=UTC)
        keys = {
            fingerprint(AggregationMode.hourly, ts, None),
            fingerprint(AggregationMode.hourly, None, ts),
            fingerprint(AggregationMode.monthly, ts, None),
        }
        assert len(keys) == 3


class TestQueryCache:
    async def test_put_then_get(self):
        redis = FakeRedis()
        cache = QueryCache(client=redis)
        buckets = [{"label": "1", "value": 3.0}]

        await cache.put("k", buckets, ttl=60)

        assert await cache.get("k") == buckets
        assert json.loads(redis.store["k"]) == buckets
        assert redis.ttls["k"] == 60

    async def test_missing_key_is_a_miss(self):
        assert await QueryCache(client=FakeRedis()).get("absent") is None

    async def test_undecodable_entry_is_a_miss(self):
        redis = FakeRedis()
        redis.store["k"] = "{not json"
        assert await QueryCache(client=redis).get("k") is None

    async def test_outage_degrades_silently(self):
        cache = QueryCache(client=BrokenRedis())

        await cache.put("k", [{"label": "1", "value": 1.0}], ttl=60)

        assert await cache.get("k") is None
        assert await cache.check_connection() == "error"

    async def test_check_connection_ok(self):
        assert await QueryCache(client=FakeRedis()).check_connection() == "ok"

    async def test_close_drops_client(self):
        cache = QueryCache(client=FakeRedis())
        await cache.close()
        assert cache._client is None
