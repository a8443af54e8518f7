# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Whole-page summary: the title's own section, else leading content blocks."""

from __future__ import annotations

import lxml.html

from fieldguide.config import EMBED_DESC_LIMIT
from fieldguide.extraction import BLOCK_SEPARATOR, element_text, is_noise_line, truncate_with_ellipsis
from fieldguide.extraction.blocks import node_to_text
from fieldguide.extraction.page import body_of, content_root
from fieldguide.extraction.section import extract_section
from fieldguide.urls import is_blacklisted_fragment


def _title_heading(doc: lxml.html.HtmlElement, page_title: str) -> lxml.html.HtmlElement | None:
    for heading in doc.xpath("//h1|//h2|//h3"):
        if element_text(heading) == page_title:
            return heading
    return None


def extract_summary(
    doc: lxml.html.HtmlElement,
    page_title: str,
    current_url: str | None = None,
    *,
    limit: int = EMBED_DESC_LIMIT,
) -> str:
    """Intro text for a page, at most *limit* chars.

    Prefers the section under the heading that matches *page_title*; falls
    back to p/ul/ol blocks of the content column in document order, stopping
    before the first block that would overflow the budget.
    """
    heading = _title_heading(doc, page_title)
    if heading is not None:
        anchor_id = heading.get("id") or ""
        if anchor_id and not is_blacklisted_fragment(anchor_id):
            section = extract_section(doc, anchor_id, current_url, limit=limit)
            if section is not None and section.description:
                return section.description

    root = content_root(doc)
    scope = root if root is not None else body_of(doc)
    blocks: list[str] = []
    current_len = 0
    sep_len = len(BLOCK_SEPARATOR)

    for el in scope.iter("p", "ul", "ol"):
        text = node_to_text(el, current_url)
        if not text or is_noise_line(text):
            continue
        add_len = (sep_len if blocks else 0) + len(text)
        if current_len + add_len > limit:
            break
        blocks.append(text)
        current_len += add_len

    return truncate_with_ellipsis(BLOCK_SEPARATOR.join(blocks), limit)
