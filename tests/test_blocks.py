# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for fieldguide.extraction.blocks — block eligibility and text."""

from __future__ import annotations

from fieldguide.extraction.blocks import (
    is_breadcrumb,
    is_in_excluded_container,
    node_to_text,
    should_include_node,
)
from tests._guide_helpers import fragment


def _inner(html: str, tag: str):
    return next(fragment(html).iter(tag))


class TestBreadcrumb:
    def test_nav_element(self):
        assert is_breadcrumb(fragment("<nav><a>Home</a></nav>"))

    def test_aria_label(self):
        assert is_breadcrumb(fragment('<div aria-label="Breadcrumb">x</div>'))

    def test_class(self):
        assert is_breadcrumb(fragment('<ol class="breadcrumb"><li>x</li></ol>'))

    def test_plain_paragraph(self):
        assert not is_breadcrumb(fragment("<p>text</p>"))


class TestExcludedContainer:
    def test_ancestor_class(self):
        p = _inner('<div class="crafting-recipe"><div><p>x</p></div></div>', "p")
        assert is_in_excluded_container(p)

    def test_own_class(self):
        assert is_in_excluded_container(fragment('<p class="minecraft-text">x</p>'))

    def test_class_token_not_substring(self):
        assert not is_in_excluded_container(fragment('<p class="crafting-recipes-intro">x</p>'))


class TestShouldIncludeNode:
    def test_paragraph_and_lists(self):
        assert should_include_node(fragment("<p>x</p>"))
        assert should_include_node(fragment("<ul><li>x</li></ul>"))
        assert should_include_node(fragment("<ol><li>x</li></ol>"))

    def test_other_tags_rejected(self):
        assert not should_include_node(fragment("<div>x</div>"))
        assert not should_include_node(fragment("<h2>x</h2>"))

    def test_widget_paragraph_rejected(self):
        assert not should_include_node(_inner('<div class="glb-viewer"><p>x</p></div>', "p"))


class TestNodeToText:
    def test_paragraph(self):
        assert node_to_text(fragment("<p>  Sheep <em>eat</em> grass. </p>")) == "Sheep *eat* grass."

    def test_lists(self):
        assert node_to_text(fragment("<ul><li>a</li><li>b</li></ul>")) == "- a\n- b"
        assert node_to_text(fragment("<ol><li>a</li><li>b</li></ol>")) == "1. a\n2. b"

    def test_recipe_label_is_noise(self):
        assert node_to_text(fragment("<p>Recipe: 3 seeds</p>")) == ""
        assert node_to_text(fragment("<p>multiblock: kiln</p>")) == ""

    def test_bare_number_is_noise(self):
        assert node_to_text(fragment("<p>42</p>")) == ""

    def test_item_count_class(self):
        assert node_to_text(fragment('<p class="crafting-recipe-item-count">4</p>')) == ""

    def test_heading_and_breadcrumb_empty(self):
        assert node_to_text(fragment("<h3>Title</h3>")) == ""
        assert node_to_text(fragment('<p class="breadcrumb">a / b</p>')) == ""
