# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for fieldguide.search.index_cache.

Tests: hit/miss/refresh, TTL expiry, invalidate, payload validation,
IndexCacheStats counters, index URL selection.
"""

from __future__ import annotations

import time

import httpx
import pytest

from fieldguide import CachedIndex, SearchIndexEntry
from fieldguide.config import GuideConfig
from fieldguide.errors import FetchError, IndexParseError
from fieldguide.search.index_cache import IndexCache, IndexCacheStats, parse_index_payload
from tests._guide_helpers import index_url

ROWS = [
    {"entry": "Crops", "content": "Farming crops.", "url": "mechanics/crops.html"},
    {"entry": "Sheep", "content": "Wool.", "url": "mechanics/animal_husbandry.html#sheep"},
]

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _cache(make_fetcher, routes, *, seen=None, ttl=None, config=None) -> IndexCache:
    return IndexCache(make_fetcher(routes, seen=seen), config, ttl=ttl)


# =========================================================================
# Payload parsing
# =========================================================================


class TestParseIndexPayload:
    def test_rows(self):
        entries = parse_index_payload(ROWS, "en_us")
        assert entries[0] == SearchIndexEntry(entry="Crops", content="Farming crops.", url="mechanics/crops.html")

    def test_non_object_rows_skipped_and_missing_fields_empty(self):
        entries = parse_index_payload([{"url": "x.html"}, "junk", 3, None], "en_us")
        assert entries == (SearchIndexEntry(entry="", content="", url="x.html"),)

    @pytest.mark.parametrize("payload", [None, {"entries": []}, "text", 7])
    def test_non_list_rejected(self, payload):
        with pytest.raises(IndexParseError) as exc_info:
            parse_index_payload(payload, "ko_kr")
        assert exc_info.value.lang == "ko_kr"


class TestCachedIndex:
    def test_fresh(self):
        assert not CachedIndex(data=(), fetched_at=time.monotonic()).is_expired(600)

    def test_expired(self):
        assert CachedIndex(data=(), fetched_at=time.monotonic() - 601).is_expired(600)


# =========================================================================
# get_or_refresh
# =========================================================================


class TestGetOrRefresh:
    @pytest.mark.asyncio
    async def test_miss_then_hit(self, make_fetcher):
        seen: list[httpx.Request] = []
        cache = _cache(make_fetcher, {index_url("en_us"): ROWS}, seen=seen)

        first = await cache.get_or_refresh("en_us")
        second = await cache.get_or_refresh("en_us")

        assert first is second
        assert len(first) == 2
        assert len(seen) == 1
        assert cache.stats.misses == 1
        assert cache.stats.hits == 1
        assert cache.stats.refreshes == 1
        assert cache.stats.hit_rate == 0.5

    @pytest.mark.asyncio
    async def test_index_requested_without_cache(self, make_fetcher):
        seen: list[httpx.Request] = []
        cache = _cache(make_fetcher, {index_url("en_us"): ROWS}, seen=seen)
        await cache.get_or_refresh("en_us")
        assert str(seen[0].url) == index_url("en_us")
        assert seen[0].headers["cache-control"] == "no-cache"

    @pytest.mark.asyncio
    async def test_ttl_expiry_refetches(self, make_fetcher):
        seen: list[httpx.Request] = []
        cache = _cache(make_fetcher, {index_url("en_us"): ROWS}, seen=seen, ttl=0)
        await cache.get_or_refresh("en_us")
        await cache.get_or_refresh("en_us")
        assert len(seen) == 2
        assert cache.stats.ttl_expirations == 1
        assert cache.stats.hits == 0

    def test_default_ttl_from_config(self, make_fetcher):
        assert _cache(make_fetcher, {}).ttl == 600
        assert _cache(make_fetcher, {}, config=GuideConfig(index_ttl=5)).ttl == 5

    @pytest.mark.asyncio
    async def test_locales_cached_separately(self, make_fetcher):
        routes = {index_url("en_us"): ROWS, index_url("ja_jp"): ROWS[:1]}
        cache = _cache(make_fetcher, routes)
        assert len(await cache.get_or_refresh("en_us")) == 2
        assert len(await cache.get_or_refresh("ja_jp")) == 1
        assert cache.size == 2

    @pytest.mark.asyncio
    async def test_unsupported_locale_uses_default_index(self, make_fetcher):
        seen: list[httpx.Request] = []
        cache = _cache(make_fetcher, {index_url("en_us"): ROWS}, seen=seen)
        await cache.get_or_refresh("xx_xx")
        assert str(seen[0].url) == index_url("en_us")
        assert cache.peek("en_us") is not None

    @pytest.mark.asyncio
    async def test_configured_index_url(self, make_fetcher):
        seen: list[httpx.Request] = []
        config = GuideConfig(search_index_url="https://mirror.test/{lang}/index.json")
        cache = _cache(make_fetcher, {"https://mirror.test/uk_ua/index.json": ROWS}, seen=seen, config=config)
        assert len(await cache.get_or_refresh("uk_ua")) == 2


class TestFailures:
    @pytest.mark.asyncio
    async def test_non_list_payload(self, make_fetcher):
        cache = _cache(make_fetcher, {index_url("en_us"): {"broken": True}})
        with pytest.raises(IndexParseError):
            await cache.get_or_refresh("en_us")
        assert cache.stats.failures == 1
        assert cache.peek("en_us") is None

    @pytest.mark.asyncio
    async def test_body_not_json(self, make_fetcher):
        cache = _cache(make_fetcher, {index_url("en_us"): "<html>maintenance</html>"})
        with pytest.raises(IndexParseError) as exc_info:
            await cache.get_or_refresh("en_us")
        assert "not JSON" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_http_failure_propagates(self, make_fetcher):
        cache = _cache(make_fetcher, {index_url("en_us"): 500})
        with pytest.raises(FetchError):
            await cache.get_or_refresh("en_us")
        assert cache.stats.failures == 1
        assert cache.size == 0


# =========================================================================
# Invalidation
# =========================================================================


class TestInvalidate:
    @pytest.mark.asyncio
    async def test_single_locale(self, make_fetcher):
        seen: list[httpx.Request] = []
        routes = {index_url("en_us"): ROWS, index_url("ja_jp"): ROWS}
        cache = _cache(make_fetcher, routes, seen=seen)
        await cache.get_or_refresh("en_us")
        await cache.get_or_refresh("ja_jp")

        cache.invalidate("en_us")
        assert cache.peek("en_us") is None
        assert cache.peek("ja_jp") is not None

        await cache.get_or_refresh("en_us")
        assert len(seen) == 3

    @pytest.mark.asyncio
    async def test_all(self, make_fetcher):
        cache = _cache(make_fetcher, {index_url("en_us"): ROWS})
        await cache.get_or_refresh("en_us")
        cache.invalidate()
        assert cache.size == 0


class TestStats:
    def test_empty_hit_rate(self):
        assert IndexCacheStats().hit_rate == 0.0
