# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Query tokenization, standalone-term scoring, and cross-locale ranking.

Scoring per query token:
  +4  token is a standalone word of the title
  +2  token is a standalone word of the content
  +1  title starts with the token (same word boundary)

Every supported locale's index is scored, the combined list is sorted by
score (stable), then narrowed to the requested locale and deduplicated by
resolved URL.
"""

from __future__ import annotations

import asyncio
import logging
import math
import re
from dataclasses import dataclass, field
from functools import lru_cache

from fieldguide import ScoredResult, SearchIndexEntry, SearchResult
from fieldguide.errors import FieldGuideError
from fieldguide.extraction import DEFAULT_TITLE
from fieldguide.i18n import DEFAULT_LANG, LANGS, safe_lang
from fieldguide.search.index_cache import IndexCache
from fieldguide.urls import build_url_from_path, is_blacklisted_fragment

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 250
MAX_LIMIT = 500
PAGE_SIZE = 25

TITLE_WEIGHT = 4
CONTENT_WEIGHT = 2
PREFIX_WEIGHT = 1

_SEPARATOR_RE = re.compile(r"[_#./-]+")
# Anything that is not a letter, digit or whitespace (underscore counts as \w)
_NON_TOKEN_RE = re.compile(r"[^\w\s]|_")

# Letter/digit in any script. Standalone = not touching one on either side.
_ALNUM = r"[^\W_]"


def tokenize(query: str | None) -> list[str]:
    """Lowercased letter/digit runs of *query*; separators ``_ # . / -`` split words."""
    text = _SEPARATOR_RE.sub(" ", (query or "").lower())
    text = _NON_TOKEN_RE.sub("", text)
    return text.split()


@lru_cache(maxsize=512)
def _term_patterns(term: str) -> tuple[re.Pattern[str], re.Pattern[str]]:
    esc = re.escape(term)
    anywhere = re.compile(rf"(?<!{_ALNUM}){esc}(?!{_ALNUM})", re.IGNORECASE)
    at_start = re.compile(rf"{esc}(?!{_ALNUM})", re.IGNORECASE)
    return anywhere, at_start


def has_standalone_term(text: str | None, term: str | None) -> bool:
    """True if *term* occurs in *text* bounded by non-alphanumerics or the ends."""
    if not text or not term:
        return False
    return _term_patterns(term)[0].search(text) is not None


def starts_with_term(text: str | None, term: str | None) -> bool:
    if not text or not term:
        return False
    return _term_patterns(term)[1].match(text) is not None


def score_entry(entry: SearchIndexEntry, terms: list[str]) -> int:
    score = 0
    for term in terms:
        if has_standalone_term(entry.entry, term):
            score += TITLE_WEIGHT
        if has_standalone_term(entry.content, term):
            score += CONTENT_WEIGHT
        if starts_with_term(entry.entry, term):
            score += PREFIX_WEIGHT
    return score


def clamp_limit(limit: int) -> int:
    return min(max(limit, 1), MAX_LIMIT)


def rank(scored: list[ScoredResult], lang: str, limit: int = DEFAULT_LIMIT) -> list[SearchResult]:
    """Sort by score (stable), keep *lang* rows, dedupe by URL, cap at *limit*."""
    effective = safe_lang(lang)
    cap = clamp_limit(limit)
    seen: set[str] = set()
    top: list[SearchResult] = []
    for row in sorted(scored, key=lambda r: r.score, reverse=True):
        if row.lang != effective or row.url in seen:
            continue
        seen.add(row.url)
        top.append(SearchResult(title=row.title, url=row.url))
        if len(top) >= cap:
            break
    return top


class SearchEngine:
    """Ranks search index entries from every locale against a query."""

    def __init__(self, cache: IndexCache, *, langs: tuple[str, ...] = LANGS) -> None:
        self._cache = cache
        self._langs = langs

    @property
    def cache(self) -> IndexCache:
        return self._cache

    async def _score_lang(self, lang: str, terms: list[str]) -> list[ScoredResult]:
        try:
            entries = await self._cache.get_or_refresh(lang)
        except FieldGuideError as e:
            logger.warning("Skipping %s index: %s", lang, e)
            return []
        rows: list[ScoredResult] = []
        for entry in entries:
            score = score_entry(entry, terms)
            if score > 0:
                rows.append(
                    ScoredResult(
                        score=score,
                        title=entry.entry or DEFAULT_TITLE,
                        url=build_url_from_path(entry.url, lang),
                        lang=lang,
                    )
                )
        return rows

    async def search(
        self,
        query: str,
        lang: str = DEFAULT_LANG,
        limit: int = DEFAULT_LIMIT,
    ) -> list[SearchResult]:
        """Ranked, deduplicated results for *query* in *lang*.

        A query without letters or digits returns ``[]``. A locale whose
        index cannot be fetched or parsed contributes nothing.
        """
        terms = tokenize(query)
        if not terms:
            return []
        per_lang = await asyncio.gather(*(self._score_lang(code, terms) for code in self._langs))
        combined = [row for rows in per_lang for row in rows]
        results = rank(combined, lang, limit)
        logger.debug(
            "Search %r: terms=%s candidates=%d results=%d lang=%s",
            query,
            terms,
            len(combined),
            len(results),
            safe_lang(lang),
        )
        return results

    async def search_fast(
        self,
        query: str,
        lang: str = DEFAULT_LANG,
        limit: int = DEFAULT_LIMIT,
    ) -> list[SearchResult]:
        """Like search(), but any failure yields ``[]`` instead of raising."""
        try:
            return await self.search(query, lang, limit)
        except Exception:
            logger.warning("Search failed for %r", query, exc_info=True)
            return []


# ---------------------------------------------------------------------------
# Pagination view
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ResultPage:
    items: list[SearchResult] = field(default_factory=list)
    page: int = 1  # 1-based
    total_pages: int = 1
    total: int = 0  # results across all pages


def paginate(results: list[SearchResult], page: int = 1, page_size: int = PAGE_SIZE) -> ResultPage:
    """Slice *results* into 1-based pages; results pointing at page chrome are dropped."""
    visible = [r for r in results if "#" not in r.url or not is_blacklisted_fragment(r.url)]
    size = max(1, page_size)
    total_pages = max(1, math.ceil(len(visible) / size))
    current = min(max(1, page), total_pages)
    start = (current - 1) * size
    return ResultPage(
        items=visible[start : start + size],
        page=current,
        total_pages=total_pages,
        total=len(visible),
    )
