# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Markup extraction: Field Guide HTML to chat-sized markdown-like text.

Shared constants, element categories, and text helpers used by the
inline / blocks / page / section modules.
"""

from __future__ import annotations

import re
import unicodedata
from enum import StrEnum

from fieldguide.config import EMBED_DESC_LIMIT

DEFAULT_TITLE = "Field Guide"
BLOCK_SEPARATOR = "\n\n"
ELLIPSIS = "..."

# Lines starting with these labels are recipe metadata, not prose.
STAT_PREFIX_RE = re.compile(r"^(Recipe:|Multiblock:)", re.IGNORECASE)
_DIGITS_ONLY_RE = re.compile(r"^[0-9]+$")

# Crafting widgets, 3D viewers and item headers: never part of extracted text.
EXCLUDED_CONTAINER_CLASSES = frozenset(
    {
        "crafting-recipe",
        "minecraft-text",
        "item-header",
        "glb-viewer",
        "glb-viewer-container",
    }
)

# Class of the primary content column on every guide page
CONTENT_ROOT_CLASS = "col-md-9"

HEADING_TAGS = {"h1": 1, "h2": 2, "h3": 3, "h4": 4, "h5": 5, "h6": 6}

BLOCK_TAGS = frozenset({"p", "ul", "ol"})

_COMBINING_RE = re.compile(r"[\u0300-\u036f]")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_WS_RE = re.compile(r"\s+")


class InlineKind(StrEnum):
    """Closed set of inline element categories, each with one rendering rule."""

    TEXT = "text"
    STRONG = "strong"
    EMPHASIS = "emphasis"
    CODE = "code"
    LINK = "link"
    LINE_BREAK = "line_break"
    LIST = "list"
    HEADING = "heading"
    OTHER = "other"  # recurse into children, no markup


_INLINE_KINDS: dict[str, InlineKind] = {
    "br": InlineKind.LINE_BREAK,
    "strong": InlineKind.STRONG,
    "b": InlineKind.STRONG,
    "em": InlineKind.EMPHASIS,
    "i": InlineKind.EMPHASIS,
    "code": InlineKind.CODE,
    "kbd": InlineKind.CODE,
    "a": InlineKind.LINK,
    "ul": InlineKind.LIST,
    "ol": InlineKind.LIST,
    **{tag: InlineKind.HEADING for tag in HEADING_TAGS},
}


def classify_tag(tag: object) -> InlineKind:
    """Map an lxml ``el.tag`` to its category. Comments/PIs (non-str tags) are TEXT."""
    if not isinstance(tag, str):
        return InlineKind.TEXT
    return _INLINE_KINDS.get(tag.lower(), InlineKind.OTHER)


def heading_level(tag: object) -> int | None:
    """1-6 for h1-h6, None for everything else."""
    if not isinstance(tag, str):
        return None
    return HEADING_TAGS.get(tag.lower())


def collapse_ws(text: str) -> str:
    return _WS_RE.sub(" ", text)


def element_text(el) -> str:
    """Whitespace-normalised text content of *el*, trimmed."""
    return collapse_ws(el.text_content() or "").strip()


def class_tokens(el) -> set[str]:
    return set((el.get("class") or "").lower().split())


def normalize_id(text: str | None) -> str:
    """Comparison key: NFKD, strip diacritics, lowercase, non-alnum runs to '_'.

    Non-Latin scripts normalise to an empty string.
    """
    decomposed = unicodedata.normalize("NFKD", text or "")
    stripped = _COMBINING_RE.sub("", decomposed).lower()
    return _NON_ALNUM_RE.sub("_", stripped).strip("_")


def is_noise_line(text: str) -> bool:
    """Recipe/multiblock labels and bare numbers are metadata, not prose."""
    return bool(STAT_PREFIX_RE.search(text) or _DIGITS_ONLY_RE.match(text))


def truncate_with_ellipsis(text: str, limit: int = EMBED_DESC_LIMIT) -> str:
    """Cut *text* to at most *limit* chars, ending in '...' when cut."""
    if len(text) <= limit:
        return text
    return text[: max(0, limit - len(ELLIPSIS))] + ELLIPSIS
