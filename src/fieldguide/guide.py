# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""FieldGuide: the request-level facade over fetch, extraction and search.

Usage::

    async with FieldGuide() as guide:
        page = await guide.get_page("mechanics/crops#wild_crops", "en_us")
        hits = await guide.search("sheep", "en_us")

One FieldGuide owns one HTTP client and one index cache; share it across
requests instead of constructing one per call.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from types import TracebackType

from . import GuidePage, SearchResult
from .assembler import EMPTY_DESCRIPTION, assemble_description
from .config import GuideConfig
from .errors import FetchError
from .extraction import DEFAULT_TITLE, truncate_with_ellipsis
from .extraction.page import extract_first_image, extract_title
from .extraction.section import extract_section
from .extraction.summary import extract_summary
from .fetcher import HtmlFetcher
from .i18n import SITE_ROOT, safe_lang
from .pipeline_timer import PipelineTimer
from .search import DEFAULT_LIMIT, IndexCache, SearchEngine
from .toc import build_toc, toc_lines
from .urls import build_url_from_path, canonical_lang_html, is_absolute, parse_path_and_fragment

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TopLink:
    label: str  # shown when the page title cannot be fetched
    path: str  # site-relative or an absolute external URL; "" is the landing page


TOP_LINKS: tuple[TopLink, ...] = (
    TopLink("Online Field Guide", ""),
    TopLink("AE2 Guide", "https://guide.appliedenergistics.org/1.20.1/"),
    TopLink("Ore Glossary", "tfg_ores"),
    TopLink("TFC Geology", "the_world/geology"),
    TopLink("Animals", "mechanics/animal_husbandry"),
    TopLink("Crops", "mechanics/crops"),
    TopLink("Firmalife", "firmalife"),
    TopLink("Roads & Roofs", "roadsandroofs"),
    TopLink("FirmaCiv", "firmaciv"),
    TopLink("TFG Tips", "tfg_tips"),
)


def top_links(lang: str | None = None) -> list[SearchResult]:
    """TOP_LINKS with their static labels, resolved to canonical URLs in *lang*.

    External links are kept as written.
    """
    safe = safe_lang(lang)
    resolved: list[SearchResult] = []
    for link in TOP_LINKS:
        if is_absolute(link.path):
            url = link.path
        elif link.path:
            url = build_url_from_path(link.path, safe)
        else:
            url = canonical_lang_html(f"{SITE_ROOT}{safe}/", safe)
        resolved.append(SearchResult(title=link.label, url=url))
    return resolved


class FieldGuide:
    """Page extracts, title lookups and index search for the Field Guide site."""

    def __init__(
        self,
        config: GuideConfig | None = None,
        *,
        fetcher: HtmlFetcher | None = None,
    ) -> None:
        self._config = config or GuideConfig()
        self._owns_fetcher = fetcher is None
        self._fetcher = fetcher or HtmlFetcher(timeout=self._config.fetch_timeout)
        self._cache = IndexCache(self._fetcher, self._config)
        self._engine = SearchEngine(self._cache)

    @property
    def config(self) -> GuideConfig:
        return self._config

    @property
    def index_cache(self) -> IndexCache:
        return self._cache

    async def __aenter__(self) -> FieldGuide:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_fetcher:
            await self._fetcher.aclose()

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    async def get_page(self, identifier: str, lang: str | None = None) -> GuidePage:
        """Fetch and assemble one page, or one section when a fragment is given.

        A fragment whose section cannot be found falls back to the
        whole-page summary and TOC.

        Raises:
            FetchError: the page could not be retrieved.
        """
        limit = self._config.embed_limit
        timer = PipelineTimer()
        timer.stage("resolve")
        base_url, fragment = parse_path_and_fragment(identifier, lang)

        timer.stage("fetch")
        try:
            doc = await self._fetcher.fetch_html(base_url)
        except FetchError as e:
            logger.warning("Page fetch failed: %s", timer.failure_report(e))
            timer.finalize()
            raise

        timer.stage("extract")
        title = extract_title(doc)
        image = extract_first_image(doc)

        if fragment:
            section = extract_section(doc, fragment, base_url, limit=limit)
            if section is not None:
                timer.finalize()
                return GuidePage(
                    title=f"{section.title} — {title}",
                    url=f"{base_url}#{fragment}",
                    description=truncate_with_ellipsis(section.description or EMPTY_DESCRIPTION, limit),
                    image=section.image or image,
                    section_title=section.title,
                    fragment=fragment,
                    timings=timer.elapsed_per_stage(),
                )
            logger.debug("Section #%s missing on %s, using page summary", fragment, base_url)

        summary = extract_summary(doc, title, base_url, limit=limit)

        timer.stage("toc")
        lines = toc_lines(build_toc(doc, base_url, title))

        timer.stage("assemble")
        assembled = assemble_description(summary, lines, limit)
        timer.finalize()

        return GuidePage(
            title=title,
            url=base_url,
            description=assembled.text or EMPTY_DESCRIPTION,
            image=image,
            toc_lines=assembled.toc_lines,
            fragment=fragment,
            timings=timer.elapsed_per_stage(),
        )

    async def get_page_title(self, identifier: str, lang: str | None = None) -> SearchResult:
        """Localized page title and canonical URL; the default title when unreachable."""
        base_url, _ = parse_path_and_fragment(identifier, lang)
        try:
            doc = await self._fetcher.fetch_html(base_url)
        except FetchError as e:
            logger.info("Title lookup degraded for %s: %s", base_url, e)
            return SearchResult(title=DEFAULT_TITLE, url=base_url)
        return SearchResult(title=extract_title(doc) or DEFAULT_TITLE, url=base_url)

    async def _link_title(self, link: SearchResult) -> SearchResult:
        try:
            doc = await self._fetcher.fetch_html(link.url)
        except FetchError as e:
            logger.debug("Top link title unavailable for %s: %s", link.url, e)
            return link
        title = extract_title(doc)
        if not title or title == DEFAULT_TITLE:
            return link
        return SearchResult(title=title, url=link.url)

    async def top_links(self, lang: str | None = None) -> list[SearchResult]:
        """Quick-access links labelled with each page's own (localized) title.

        Pages are fetched concurrently; a link whose page cannot be fetched
        keeps its static label.
        """
        return list(await asyncio.gather(*(self._link_title(link) for link in top_links(lang))))

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(
        self,
        query: str,
        lang: str | None = None,
        limit: int = DEFAULT_LIMIT,
    ) -> list[SearchResult]:
        return await self._engine.search(query, safe_lang(lang), limit)

    async def search_fast(
        self,
        query: str,
        lang: str | None = None,
        limit: int = DEFAULT_LIMIT,
    ) -> list[SearchResult]:
        return await self._engine.search_fast(query, safe_lang(lang), limit)
