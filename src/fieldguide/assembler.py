# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Merge a page summary and its TOC lines into one budget-bounded text."""

from __future__ import annotations

from dataclasses import dataclass

from .config import EMBED_DESC_LIMIT
from .extraction import truncate_with_ellipsis

EMPTY_DESCRIPTION = "Open the page for details."


@dataclass(frozen=True, slots=True)
class AssembledText:
    text: str
    toc_lines: list[str]  # the TOC lines that made it into *text*


def pick_toc_lines(summary: str, lines: list[str], limit: int = EMBED_DESC_LIMIT) -> list[str]:
    """Leading TOC lines that fit beside *summary* (plus its blank-line separator)."""
    remaining = max(0, limit - (len(summary) + 2 if summary else 0))
    picked: list[str] = []
    used = 0
    for line in lines:
        add = (1 if picked else 0) + len(line) + 1
        if used + add > remaining:
            break
        picked.append(line)
        used += add
    return picked


def assemble_description(summary: str, lines: list[str], limit: int = EMBED_DESC_LIMIT) -> AssembledText:
    """Summary first, a blank line, then as many TOC lines as fit.

    The result never exceeds *limit*; if it still would, it is cut and ends
    with an ellipsis.
    """
    base = (summary or "").strip()
    picked = pick_toc_lines(base, lines, limit)

    parts: list[str] = [base] if base else []
    if picked:
        if parts:
            parts.append("")
        parts.extend(picked)
    combined = "\n".join(parts).strip()
    return AssembledText(text=truncate_with_ellipsis(combined, limit), toc_lines=picked)
