# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for fieldguide.extraction.section — the sibling walk and dedupe."""

from __future__ import annotations

import pytest

from fieldguide.extraction.section import (
    SectionWalker,
    StepAction,
    WalkState,
    classify_step,
    dedupe_blocks,
    extract_section,
)
from fieldguide.i18n import SITE_ROOT
from tests._guide_helpers import CROPS_URL, page, parse

# ---------------------------------------------------------------------------
# classify_step: pure decision table
# ---------------------------------------------------------------------------


class TestClassifyStep:
    @pytest.mark.parametrize(
        "anchor,node,expected",
        [
            (2, 2, StepAction.STOP),
            (2, 1, StepAction.STOP),
            (3, 2, StepAction.STOP),
            (2, 3, StepAction.SUBHEADING),
            (2, 6, StepAction.SUBHEADING),
            (2, None, StepAction.BLOCK),
            (None, 1, StepAction.SUBHEADING),
            (None, None, StepAction.BLOCK),
        ],
    )
    def test_levels(self, anchor, node, expected):
        assert classify_step(anchor, node, in_scope=True, breadcrumb=False) is expected

    def test_out_of_scope_stops(self):
        assert classify_step(2, None, in_scope=False, breadcrumb=False) is StepAction.STOP

    def test_breadcrumb_stops(self):
        assert classify_step(2, None, in_scope=True, breadcrumb=True) is StepAction.STOP


# ---------------------------------------------------------------------------
# SectionWalker: state transitions
# ---------------------------------------------------------------------------


class TestSectionWalker:
    def test_initial_state(self):
        walker = SectionWalker()
        assert walker.state is WalkState.BEFORE_BOUNDARY
        assert not walker.stopped

    def test_collects_until_stop(self):
        walker = SectionWalker()
        assert walker.advance(StepAction.BLOCK, "first") is WalkState.COLLECTING
        walker.advance(StepAction.SUBHEADING, "Sub")
        assert walker.advance(StepAction.STOP) is WalkState.STOPPED
        walker.advance(StepAction.BLOCK, "ignored")
        assert walker.parts == ["first", "**Sub**"]

    def test_empty_text_not_collected(self):
        walker = SectionWalker()
        walker.advance(StepAction.BLOCK, "")
        walker.advance(StepAction.SUBHEADING, "")
        assert walker.parts == []
        assert walker.state is WalkState.COLLECTING

    def test_budget_stops_walk(self):
        walker = SectionWalker(limit=10)
        walker.advance(StepAction.BLOCK, "12345")
        assert not walker.stopped
        walker.advance(StepAction.BLOCK, "678")  # "12345\n\n678" is 10 chars
        assert not walker.stopped
        walker.advance(StepAction.BLOCK, "9")
        assert walker.stopped


# ---------------------------------------------------------------------------
# dedupe_blocks
# ---------------------------------------------------------------------------


class TestDedupeBlocks:
    def test_drops_title_echo_and_repeats(self):
        parts = ["Wild Crops", "Wild crops grow naturally across the world.", "Barley", "barley!", "Oat"]
        assert dedupe_blocks(parts, "Wild Crops", "Crops") == [
            "Wild crops grow naturally across the world.",
            "Barley",
            "Oat",
        ]

    def test_drops_page_title_block(self):
        assert dedupe_blocks(["Crops", "Body"], "Wild Crops", "Crops") == ["Body"]

    def test_leading_near_duplicate_dropped(self):
        assert dedupe_blocks(["Wild Crops overview", "Body"], "Wild Crops", "Crops") == ["Body"]

    def test_near_duplicate_only_when_leading(self):
        parts = ["Body", "Wild Crops overview"]
        assert dedupe_blocks(parts, "Wild Crops", "Crops") == parts

    def test_blank_blocks_skipped(self):
        assert dedupe_blocks(["  ", "Body"], "T", "P") == ["Body"]

    def test_non_latin_blocks_match_non_latin_titles(self):
        # Both sides normalise to "", so every block counts as a title echo.
        assert dedupe_blocks(["作物について", "野生"], "野生の作物", "作物") == []

    def test_non_latin_blocks_under_latin_titles(self):
        parts = ["作物について", "野生", "Body"]
        assert dedupe_blocks(parts, "Wild Crops", "Crops") == ["作物について", "Body"]

    def test_non_latin_section_extracts_empty(self):
        html = page('<div class="col-md-9"><h1>Культуры</h1><h2 id="a">Дикие</h2><p>Растут повсюду.</p></div>')
        section = extract_section(parse(html, f"{SITE_ROOT}ru_ru/p.html"), "a")
        assert section is not None
        assert section.title == "Дикие"
        assert section.description == ""


# ---------------------------------------------------------------------------
# extract_section on a parsed page
# ---------------------------------------------------------------------------


class TestExtractSection:
    def test_stops_at_next_same_level_heading(self, crops_doc):
        section = extract_section(crops_doc, "wild_crops", CROPS_URL)
        assert section is not None
        assert section.title == "Wild Crops"
        assert section.description == (
            "Wild crops grow naturally across the world.\n\n"
            "- Barley\n- Oat\n\n"
            "**Finding**\n\n"
            "Look in **temperate** grassland."
        )
        assert "Till the soil" not in section.description

    def test_subsection_stops_at_shallower_heading(self, crops_doc):
        section = extract_section(crops_doc, "finding", CROPS_URL)
        assert section.description == "Look in **temperate** grassland."

    def test_links_resolved_and_widgets_skipped(self, crops_doc):
        section = extract_section(crops_doc, "planting", CROPS_URL)
        assert section.description == f"Till the soil with a [hoe]({SITE_ROOT}en_us/the_world/hoe.html)."
        assert "Recipe" not in section.description

    def test_image_from_anchor_parent(self, crops_doc):
        section = extract_section(crops_doc, "wild_crops", CROPS_URL)
        assert section.image == f"{SITE_ROOT}_images/crops.png"

    @pytest.mark.parametrize("fragment_id", ["missing", "", None, "nav-primary-menu"])
    def test_not_found(self, crops_doc, fragment_id):
        assert extract_section(crops_doc, fragment_id, CROPS_URL) is None

    def test_budget_truncates_with_ellipsis(self, crops_doc):
        section = extract_section(crops_doc, "wild_crops", CROPS_URL, limit=20)
        assert section.description == "Wild crops grow n..."
        assert len(section.description) == 20

    def test_breadcrumb_ends_section(self):
        doc = parse(page('<div class="col-md-9"><h2 id="a">A</h2><p>kept</p><nav>crumbs</nav><p>dropped</p></div>'))
        assert extract_section(doc, "a").description == "kept"

    def test_non_heading_anchor_runs_to_end(self):
        doc = parse(
            page('<h1>Guide</h1><div class="col-md-9"><span id="tip">Tip</span><p>one</p><h2>Two</h2><p>three</p></div>')
        )
        assert extract_section(doc, "tip").description == "one\n\n**Two**\n\nthree"

    def test_empty_section_has_empty_description(self):
        doc = parse(page('<div class="col-md-9"><h2 id="a">A</h2><h2 id="b">B</h2></div>'))
        section = extract_section(doc, "a")
        assert section is not None
        assert section.description == ""
