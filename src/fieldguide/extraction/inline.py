# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Inline markup → markdown-like text.

Walks an element's text, children and tails in document order. Every child
is classified into an InlineKind and rendered by exactly one rule; OTHER
recurses without adding markup, so text inside unknown tags is never lost.
Links are made absolute and re-tagged with the locale of the page they
were found on.
"""

from __future__ import annotations

from urllib.parse import urljoin

import lxml.html

from fieldguide.extraction import InlineKind, classify_tag, collapse_ws, element_text
from fieldguide.i18n import SITE_ROOT, lang_from_url
from fieldguide.urls import canonical_lang_html, ensure_lang, is_absolute

# Zero-width space keeps inner backticks from closing a code span early.
_ZWSP = "\u200b"


def resolve_link(href: str, current_url: str | None) -> str:
    """Absolute, locale-corrected target for *href* found on *current_url*.

    In-page anchors keep their fragment; every other link is canonicalised
    (fragment dropped, ``.html`` enforced). Returns "" for an empty href.
    """
    if not href:
        return ""
    base = current_url or SITE_ROOT
    lang = lang_from_url(base)
    if href.startswith("#"):
        return ensure_lang(urljoin(base, href), lang)
    if is_absolute(href):
        return canonical_lang_html(href, lang)
    return canonical_lang_html(urljoin(base, href), lang)


def _wrap(inner: str, marker: str) -> str:
    return f"{marker}{inner}{marker}" if inner.strip() else inner


def list_text(list_el: lxml.html.HtmlElement, ordered: bool, current_url: str | None = None) -> str:
    """Direct <li> children as "- item" / "N. item" lines; empty items skipped."""
    lines: list[str] = []
    for li in list_el.iterchildren("li"):
        clean = inline_markdown(li, current_url).strip()
        if clean:
            marker = f"{len(lines) + 1}." if ordered else "-"
            lines.append(f"{marker} {clean}")
    return "\n".join(lines)


def _render_child(child: lxml.html.HtmlElement, current_url: str | None) -> str:
    kind = classify_tag(child.tag)

    if kind is InlineKind.TEXT:
        # comment or processing instruction: content is not page text
        return ""
    if kind is InlineKind.LINE_BREAK:
        return "\n"
    if kind is InlineKind.STRONG:
        return _wrap(inline_markdown(child, current_url), "**")
    if kind is InlineKind.EMPHASIS:
        return _wrap(inline_markdown(child, current_url), "*")
    if kind is InlineKind.CODE:
        inner = inline_markdown(child, current_url).replace("`", _ZWSP + "`")
        return _wrap(inner, "`")
    if kind is InlineKind.LINK:
        href = (child.get("href") or "").strip()
        text = inline_markdown(child, current_url) or href
        target = resolve_link(href, current_url)
        return f"[{text}]({target})" if target else text
    if kind is InlineKind.LIST:
        nested = list_text(child, child.tag == "ol", current_url)
        return f"\n{nested}\n" if nested else ""
    if kind is InlineKind.HEADING:
        text = element_text(child)
        return f"**{text}**" if text else ""
    return inline_markdown(child, current_url)


def inline_markdown(el: lxml.html.HtmlElement, current_url: str | None = None) -> str:
    """Render the contents of *el* (not its tail) as inline markdown."""
    out = [collapse_ws(el.text or "")]
    for child in el:
        out.append(_render_child(child, current_url))
        if child.tail:
            out.append(collapse_ws(child.tail))
    return "".join(out)
