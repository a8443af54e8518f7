# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Field Guide exception hierarchy.

All errors inherit from FieldGuideError so callers can catch the base class
for any failure or a subclass for targeted fallback. An unsupported locale
and a query without tokens are not errors: both degrade silently.
"""

from __future__ import annotations


class FieldGuideError(Exception):
    """Base exception for all Field Guide errors."""


class FetchError(FieldGuideError):
    """Network failure, timeout, or non-2xx response while retrieving a URL."""

    def __init__(self, url: str, *, status: int | None = None, reason: str = "") -> None:
        detail = f"HTTP {status}" if status is not None else (reason or "network error")
        super().__init__(f"could not retrieve page: {url} ({detail})")
        self.url = url
        self.status = status
        self.reason = reason


class IndexParseError(FieldGuideError):
    """A locale's search index payload is not a JSON array."""

    def __init__(self, lang: str, reason: str = "") -> None:
        super().__init__(f"invalid search_index.json for {lang}: {reason or 'not a list'}")
        self.lang = lang
        self.reason = reason
