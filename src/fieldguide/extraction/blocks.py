# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Block eligibility and block → text conversion.

Only <p>, <ul> and <ol> carry prose. Breadcrumb/navigation regions and
anything inside a crafting widget, 3D viewer or item header is skipped no
matter where it sits in the page.
"""

from __future__ import annotations

import lxml.html

from fieldguide.extraction import (
    BLOCK_TAGS,
    EXCLUDED_CONTAINER_CLASSES,
    class_tokens,
    heading_level,
    is_noise_line,
)
from fieldguide.extraction.inline import inline_markdown, list_text

_ITEM_COUNT_CLASS = "crafting-recipe-item-count"


def _tag(el) -> str:
    return el.tag.lower() if isinstance(el.tag, str) else ""


def is_breadcrumb(el: lxml.html.HtmlElement) -> bool:
    if _tag(el) == "nav":
        return True
    if "breadcrumb" in (el.get("aria-label") or "").lower():
        return True
    return "breadcrumb" in (el.get("class") or "").lower()


def is_in_excluded_container(el: lxml.html.HtmlElement) -> bool:
    """True if *el* or any ancestor carries an excluded container class."""
    if class_tokens(el) & EXCLUDED_CONTAINER_CLASSES:
        return True
    return any(class_tokens(a) & EXCLUDED_CONTAINER_CLASSES for a in el.iterancestors())


def should_include_node(el: lxml.html.HtmlElement) -> bool:
    """Eligible for text extraction: p/ul/ol outside breadcrumbs and UI widgets."""
    if _tag(el) not in BLOCK_TAGS:
        return False
    if is_breadcrumb(el):
        return False
    return not is_in_excluded_container(el)


def node_to_text(el: lxml.html.HtmlElement, current_url: str | None = None) -> str:
    """Plain text of a block, or "" when the block is chrome or metadata."""
    tag = _tag(el)
    if not tag or is_breadcrumb(el):
        return ""
    if _ITEM_COUNT_CLASS in (el.get("class") or "").lower():
        return ""
    if is_in_excluded_container(el):
        return ""
    if heading_level(tag) is not None:
        return ""
    if tag == "ul":
        return list_text(el, ordered=False, current_url=current_url)
    if tag == "ol":
        return list_text(el, ordered=True, current_url=current_url)
    text = inline_markdown(el, current_url).strip()
    if is_noise_line(text):
        return ""
    return text
