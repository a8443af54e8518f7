# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Page-level lookups: title, first image, content root."""

from __future__ import annotations

from urllib.parse import urljoin

import lxml.html

from fieldguide.extraction import CONTENT_ROOT_CLASS, DEFAULT_TITLE, class_tokens, element_text
from fieldguide.i18n import SITE_ROOT


def body_of(doc: lxml.html.HtmlElement) -> lxml.html.HtmlElement:
    body = doc.find(".//body")
    return body if body is not None else doc


def content_root(doc: lxml.html.HtmlElement) -> lxml.html.HtmlElement | None:
    """First element of the primary content column, if the page has one."""
    for el in doc.iter():
        if isinstance(el.tag, str) and CONTENT_ROOT_CLASS in class_tokens(el):
            return el
    return None


def closest_content_root(el: lxml.html.HtmlElement) -> lxml.html.HtmlElement | None:
    """*el* itself or its nearest ancestor in the content column class."""
    if CONTENT_ROOT_CLASS in class_tokens(el):
        return el
    for ancestor in el.iterancestors():
        if CONTENT_ROOT_CLASS in class_tokens(ancestor):
            return ancestor
    return None


def extract_title(doc: lxml.html.HtmlElement) -> str:
    """First non-empty h1, else h2, else <title>, else the default title."""
    for tag in ("h1", "h2"):
        for heading in doc.iter(tag):
            text = element_text(heading)
            if text:
                return text
    title_el = doc.find(".//title")
    if title_el is not None:
        text = element_text(title_el)
        if text:
            return text
    return DEFAULT_TITLE


def extract_first_image(
    doc: lxml.html.HtmlElement,
    scope: lxml.html.HtmlElement | None = None,
) -> str | None:
    """Absolute src of the first <img> under *scope* (default: body)."""
    root = scope if scope is not None else body_of(doc)
    img = next(root.iter("img"), None)
    if img is None:
        return None
    src = (img.get("src") or "").strip()
    if not src:
        return None
    if src.startswith("http"):
        return src
    return urljoin(SITE_ROOT, src)
