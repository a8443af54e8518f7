# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Search over the per-locale search_index.json documents."""

from fieldguide.search.engine import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    PAGE_SIZE,
    ResultPage,
    SearchEngine,
    has_standalone_term,
    paginate,
    score_entry,
    tokenize,
)
from fieldguide.search.index_cache import IndexCache, IndexCacheStats, parse_index_payload

__all__ = [
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    "PAGE_SIZE",
    "IndexCache",
    "IndexCacheStats",
    "ResultPage",
    "SearchEngine",
    "has_standalone_term",
    "paginate",
    "parse_index_payload",
    "score_entry",
    "tokenize",
]
