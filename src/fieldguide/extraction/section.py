# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Section extraction: an anchor heading plus its following siblings.

The sibling walk is an explicit state machine, independent of lxml:

    BEFORE_BOUNDARY ──first sibling──▶ COLLECTING ──boundary / budget──▶ STOPPED

classify_step() decides what one sibling means (STOP / SUBHEADING / BLOCK)
from plain values, and SectionWalker accumulates text blocks until STOPPED.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum

import lxml.html

from fieldguide import SectionData
from fieldguide.config import EMBED_DESC_LIMIT
from fieldguide.extraction import (
    BLOCK_SEPARATOR,
    element_text,
    heading_level,
    normalize_id,
    truncate_with_ellipsis,
)
from fieldguide.extraction.blocks import is_breadcrumb, node_to_text, should_include_node
from fieldguide.extraction.page import closest_content_root, extract_first_image, extract_title
from fieldguide.urls import is_blacklisted_fragment

logger = logging.getLogger(__name__)

# A leading block this close in length to a title is treated as a title echo.
NEAR_DUPLICATE_SLACK = 15


class WalkState(StrEnum):
    BEFORE_BOUNDARY = "before_boundary"
    COLLECTING = "collecting"
    STOPPED = "stopped"


class StepAction(StrEnum):
    STOP = "stop"
    SUBHEADING = "subheading"
    BLOCK = "block"


def classify_step(
    anchor_level: int | None,
    node_level: int | None,
    *,
    in_scope: bool,
    breadcrumb: bool,
) -> StepAction:
    """Decide what a sibling means for the section rooted at *anchor_level*.

    Heading levels are 1-6 or None (not a heading). A non-heading anchor has
    no level, so no heading ends its section.
    """
    if node_level is not None and anchor_level is not None and node_level <= anchor_level:
        return StepAction.STOP
    if not in_scope or breadcrumb:
        return StepAction.STOP
    if node_level is not None:
        return StepAction.SUBHEADING
    return StepAction.BLOCK


@dataclass
class SectionWalker:
    """Accumulates section text blocks until a boundary or the budget is hit."""

    limit: int = EMBED_DESC_LIMIT
    state: WalkState = WalkState.BEFORE_BOUNDARY
    parts: list[str] = field(default_factory=list)

    @property
    def stopped(self) -> bool:
        return self.state is WalkState.STOPPED

    def advance(self, action: StepAction, text: str = "") -> WalkState:
        if self.state is WalkState.STOPPED:
            return self.state
        self.state = WalkState.COLLECTING

        if action is StepAction.STOP:
            self.state = WalkState.STOPPED
        elif action is StepAction.SUBHEADING:
            if text:
                self.parts.append(f"**{text}**")
        elif text:
            self.parts.append(text)
            if len(BLOCK_SEPARATOR.join(self.parts)) > self.limit:
                self.state = WalkState.STOPPED
        return self.state


def _is_descendant(el: lxml.html.HtmlElement, root: lxml.html.HtmlElement) -> bool:
    return any(a is root for a in el.iterancestors())


def dedupe_blocks(parts: list[str], section_title: str, page_title: str) -> list[str]:
    """Drop title echoes and repeated blocks, keeping first-occurrence order.

    A block is dropped when its normalised form equals the section or page
    title; the *leading* kept block is also dropped when it starts with a
    title and is at most NEAR_DUPLICATE_SLACK chars longer than it.
    """
    title_norm = normalize_id(section_title)
    page_norm = normalize_id(page_title)
    cleaned: list[str] = []
    seen: set[str] = set()

    for block in parts:
        text = block.strip()
        if not text:
            continue
        # Text without Latin letters or digits normalises to "" and so
        # matches an equally non-Latin title.
        norm = normalize_id(text)
        if norm in (title_norm, page_norm):
            continue
        if not cleaned and (
            (norm.startswith(title_norm) and len(text) <= len(section_title) + NEAR_DUPLICATE_SLACK)
            or (norm.startswith(page_norm) and len(text) <= len(page_title) + NEAR_DUPLICATE_SLACK)
        ):
            continue
        if norm in seen:
            continue
        seen.add(norm)
        cleaned.append(text)
    return cleaned


def _find_anchor(doc: lxml.html.HtmlElement, fragment_id: str) -> lxml.html.HtmlElement | None:
    matches = doc.xpath("//*[@id=$fid]", fid=fragment_id)
    return matches[0] if matches else None


def extract_section(
    doc: lxml.html.HtmlElement,
    fragment_id: str | None,
    current_url: str | None = None,
    *,
    limit: int = EMBED_DESC_LIMIT,
) -> SectionData | None:
    """Text and image of the section anchored at ``#fragment_id``.

    Returns None for an empty, blacklisted or missing anchor so the caller
    can fall back to the whole-page summary.
    """
    if not fragment_id or is_blacklisted_fragment(fragment_id):
        return None
    anchor = _find_anchor(doc, fragment_id)
    if anchor is None:
        logger.debug("Section anchor not found: #%s", fragment_id)
        return None

    anchor_level = heading_level(anchor.tag)
    scope_root = closest_content_root(anchor)
    walker = SectionWalker(limit=limit)

    for sibling in anchor.itersiblings():
        if not isinstance(sibling.tag, str):
            continue
        action = classify_step(
            anchor_level,
            heading_level(sibling.tag),
            in_scope=scope_root is None or _is_descendant(sibling, scope_root),
            breadcrumb=is_breadcrumb(sibling),
        )
        if action is StepAction.SUBHEADING:
            walker.advance(action, element_text(sibling))
        elif action is StepAction.BLOCK and should_include_node(sibling):
            walker.advance(action, node_to_text(sibling, current_url))
        elif action is StepAction.STOP:
            walker.advance(action)
        if walker.stopped:
            break

    title = element_text(anchor) or fragment_id
    cleaned = dedupe_blocks(walker.parts, title, extract_title(doc))
    parent = anchor.getparent()
    image = extract_first_image(doc, parent) if parent is not None else None

    logger.debug("Section #%s: %d raw blocks, %d kept", fragment_id, len(walker.parts), len(cleaned))
    return SectionData(
        title=title,
        description=truncate_with_ellipsis(BLOCK_SEPARATOR.join(cleaned), limit),
        image=image,
    )
