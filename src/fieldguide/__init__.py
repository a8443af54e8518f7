# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Field Guide: chat-sized extracts and search over a documentation site.

Turns Field Guide HTML pages into bounded text artifacts:
- page: canonical URL, title, summary or section extract, table of contents
- search: ranked pages from the per-locale search_index.json documents
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class SearchIndexEntry:
    """One row of a locale's search_index.json."""

    entry: str  # page or section title
    content: str  # plain text body
    url: str  # site-relative path, may carry a #fragment

    @classmethod
    def from_json(cls, raw: dict) -> SearchIndexEntry:
        return cls(
            entry=str(raw.get("entry") or ""),
            content=str(raw.get("content") or ""),
            url=str(raw.get("url") or ""),
        )


@dataclass(frozen=True, slots=True)
class CachedIndex:
    """A fetched index snapshot. Replaced wholesale, never mutated."""

    data: tuple[SearchIndexEntry, ...]
    fetched_at: float  # time.monotonic()

    def is_expired(self, ttl: float) -> bool:
        return (time.monotonic() - self.fetched_at) >= ttl


@dataclass(frozen=True, slots=True)
class SearchResult:
    title: str
    url: str  # absolute canonical URL, fragment included when present


@dataclass(frozen=True, slots=True)
class ScoredResult:
    score: int
    title: str
    url: str
    lang: str  # locale whose index produced this row


@dataclass(frozen=True, slots=True)
class SectionData:
    title: str
    description: str
    image: str | None = None


@dataclass(frozen=True, slots=True)
class TocItem:
    title: str
    url: str  # base_url#anchor

    @property
    def anchor(self) -> str:
        return self.url.rsplit("#", 1)[-1]

    def __str__(self) -> str:
        return f"- [{self.title}]({self.url})"


@dataclass
class GuidePage:
    """Assembled page output, pre-truncated to the embed budget."""

    title: str
    url: str
    description: str
    image: str | None = None
    toc_lines: list[str] = field(default_factory=list)  # lines that fit the budget
    section_title: str | None = None  # set when a fragment section was rendered
    fragment: str | None = None
    timings: dict[str, float] = field(default_factory=dict)  # stage -> ms

    @property
    def is_section(self) -> bool:
        return self.section_title is not None
