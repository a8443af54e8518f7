# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Shared test configuration and fixtures.

No test touches the network: HTTP goes through ``httpx.MockTransport``
(see ``tests/_guide_helpers.py``).
"""

try:
    import fieldguide  # noqa: F401
except ImportError:
    raise ImportError("fieldguide is not installed. Run: pip install -e '.[dev]'") from None

import httpx
import pytest

from fieldguide.fetcher import HtmlFetcher
from fieldguide.guide import FieldGuide
from tests._guide_helpers import CROPS_HTML, mock_client, parse


@pytest.fixture
def crops_doc():
    return parse(CROPS_HTML)


@pytest.fixture
def make_fetcher():
    """Factory: routes -> HtmlFetcher over a mock transport."""

    def _make(routes: dict[str, object], seen: list[httpx.Request] | None = None) -> HtmlFetcher:
        return HtmlFetcher(client=mock_client(routes, seen=seen))

    return _make


@pytest.fixture
def make_guide(make_fetcher):
    """Factory: routes (+ optional config) -> FieldGuide with no real HTTP."""

    def _make(routes: dict[str, object], config=None) -> FieldGuide:
        return FieldGuide(config, fetcher=make_fetcher(routes))

    return _make
