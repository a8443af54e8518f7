# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Table of contents from h2/h3 anchors."""

from __future__ import annotations

import lxml.html

from . import TocItem
from .extraction import element_text, normalize_id
from .urls import is_blacklisted_fragment

MAX_TOC_ITEMS = 60


def build_toc(doc: lxml.html.HtmlElement, base_url: str, page_title: str) -> list[TocItem]:
    """Anchored h2/h3 headings as (title, base_url#id), in document order.

    Skips blacklisted ids and the heading that repeats the page title;
    deduplicates on normalised title + anchor id; keeps at most 60 items.
    """
    items: list[TocItem] = []
    seen: set[str] = set()

    for heading in doc.xpath("//h2[@id]|//h3[@id]"):
        anchor = (heading.get("id") or "").strip()
        text = element_text(heading)
        if not anchor or not text:
            continue
        if is_blacklisted_fragment(anchor) or text == page_title:
            continue
        key = f"{normalize_id(text)}#{anchor}"
        if key in seen:
            continue
        seen.add(key)
        items.append(TocItem(title=text, url=f"{base_url}#{anchor}"))
        if len(items) >= MAX_TOC_ITEMS:
            break
    return items


def toc_lines(items: list[TocItem]) -> list[str]:
    return [str(item) for item in items]
