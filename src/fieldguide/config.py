# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Runtime configuration.

Site layout, timeouts, and budgets are fixed constants. The environment may
only override the search index location and logging output:

    FIELDGUIDE_SEARCH_INDEX_URL   index URL, optionally with a {lang} placeholder
    SEARCH_INDEX_URL              legacy name for the same override
    FIELDGUIDE_LOG_LEVEL          DEBUG / INFO / WARNING (default INFO)
    FIELDGUIDE_LOG_JSON           1/true/yes for JSON log lines
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from .i18n import SITE_ROOT

INDEX_TTL_SECONDS = 10 * 60
FETCH_TIMEOUT_SECONDS = 15.0
EMBED_DESC_LIMIT = 4096

_TRUE_VALUES = ("1", "true", "yes")


@dataclass(frozen=True, slots=True, kw_only=True)
class GuideConfig:
    search_index_url: str | None = None
    index_ttl: float = INDEX_TTL_SECONDS
    fetch_timeout: float = FETCH_TIMEOUT_SECONDS
    embed_limit: int = EMBED_DESC_LIMIT
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GuideConfig:
        """Build a config from environment variables; blank values are ignored."""
        env = os.environ if environ is None else environ

        index_url = env.get("FIELDGUIDE_SEARCH_INDEX_URL", "").strip()
        if not index_url:
            index_url = env.get("SEARCH_INDEX_URL", "").strip()

        level = env.get("FIELDGUIDE_LOG_LEVEL", "").strip().upper() or "INFO"
        log_json = env.get("FIELDGUIDE_LOG_JSON", "").strip().lower() in _TRUE_VALUES

        return cls(
            search_index_url=index_url or None,
            log_level=level,
            log_json=log_json,
        )

    def index_url_for(self, lang: str) -> str:
        """Index document URL for a locale (override first, then the site layout)."""
        if self.search_index_url:
            # An override without {lang} serves the same document to every locale.
            return self.search_index_url.replace("{lang}", lang)
        return f"{SITE_ROOT}{lang}/search_index.json"
