# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Per-locale search index cache with TTL expiry.

Lifecycle: ``IndexCache(...)`` → ``get_or_refresh(lang)`` → ``invalidate()``.

Each locale's CachedIndex is an immutable value swapped in whole under an
asyncio.Lock; the fetch itself runs outside the lock, so two concurrent
misses may both refetch but readers never see a half-written entry.
Refresh is lazy and synchronous with the request that observed the miss.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass

from fieldguide import CachedIndex, SearchIndexEntry
from fieldguide.config import GuideConfig
from fieldguide.errors import IndexParseError
from fieldguide.fetcher import HtmlFetcher
from fieldguide.i18n import safe_lang

logger = logging.getLogger("fieldguide.search.cache")


@dataclass
class IndexCacheStats:
    """Counters for cache behaviour — used for logging and the CLI."""

    hits: int = 0
    misses: int = 0
    ttl_expirations: int = 0
    refreshes: int = 0
    failures: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0


def parse_index_payload(payload: object, lang: str) -> tuple[SearchIndexEntry, ...]:
    """Validate a decoded search_index.json body; non-object rows are skipped."""
    if not isinstance(payload, list):
        raise IndexParseError(lang, f"expected a JSON array, got {type(payload).__name__}")
    return tuple(SearchIndexEntry.from_json(row) for row in payload if isinstance(row, dict))


class IndexCache:
    """Lazily refreshed, per-locale cache of search index documents."""

    def __init__(
        self,
        fetcher: HtmlFetcher,
        config: GuideConfig | None = None,
        *,
        ttl: float | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._config = config or GuideConfig()
        self._ttl = ttl if ttl is not None else self._config.index_ttl
        self._entries: dict[str, CachedIndex] = {}
        self._lock = asyncio.Lock()
        self._stats = IndexCacheStats()

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def stats(self) -> IndexCacheStats:
        return self._stats

    def peek(self, lang: str) -> CachedIndex | None:
        """Current entry for *lang* without refreshing (may be expired)."""
        return self._entries.get(safe_lang(lang))

    async def get_or_refresh(self, lang: str) -> tuple[SearchIndexEntry, ...]:
        """Entries for *lang*; refetches when absent or older than the TTL.

        Raises:
            FetchError: the index document could not be retrieved.
            IndexParseError: the document is not a JSON array.
        """
        lang = safe_lang(lang)
        async with self._lock:
            entry = self._entries.get(lang)
            if entry is not None and not entry.is_expired(self._ttl):
                self._stats.hits += 1
                return entry.data

        self._stats.misses += 1
        if entry is not None:
            self._stats.ttl_expirations += 1
            logger.debug("Index TTL expired: %s", lang)

        fresh = await self._fetch(lang)
        async with self._lock:
            self._entries[lang] = fresh
        self._stats.refreshes += 1
        logger.debug("Index refreshed: lang=%s entries=%d", lang, len(fresh.data))
        return fresh.data

    async def _fetch(self, lang: str) -> CachedIndex:
        url = self._config.index_url_for(lang)
        try:
            payload = await self._fetcher.fetch_json(url, headers={"Cache-Control": "no-cache"})
            data = parse_index_payload(payload, lang)
        except ValueError as e:
            # body was not JSON at all
            self._stats.failures += 1
            raise IndexParseError(lang, "body is not JSON") from e
        except Exception:
            self._stats.failures += 1
            raise
        return CachedIndex(data=data, fetched_at=time.monotonic())

    def invalidate(self, lang: str | None = None) -> None:
        """Drop one locale's entry, or every entry when *lang* is None."""
        if lang is None:
            self._entries.clear()
        else:
            self._entries.pop(safe_lang(lang), None)
        logger.debug("Index cache invalidated: %s", lang or "all")

    @property
    def size(self) -> int:
        return len(self._entries)
