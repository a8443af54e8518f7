# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""HTTP retrieval of guide pages and search index documents.

One GET per call, bounded by a fixed timeout. No retries and no caching:
callers decide what a failure degrades to.
"""

from __future__ import annotations

import logging
from types import TracebackType

import httpx
import lxml.html
from lxml import etree

from .config import FETCH_TIMEOUT_SECONDS
from .errors import FetchError

# Package version for the User-Agent header
try:
    from importlib.metadata import version as _pkg_version

    _FIELDGUIDE_VERSION = _pkg_version("fieldguide")
except Exception:
    _FIELDGUIDE_VERSION = "unknown"

logger = logging.getLogger(__name__)

USER_AGENT = f"FieldGuideBot/{_FIELDGUIDE_VERSION}"


class HtmlFetcher:
    """Thin wrapper over ``httpx.AsyncClient`` that maps failures to FetchError.

    Usable as an async context manager. When *client* is injected the caller
    owns it and ``aclose()`` leaves it open.
    """

    def __init__(
        self,
        *,
        timeout: float = FETCH_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )

    async def __aenter__(self) -> HtmlFetcher:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get(self, url: str, headers: dict[str, str] | None = None) -> httpx.Response:
        try:
            response = await self._client.get(url, headers=headers)
        except httpx.TimeoutException as e:
            raise FetchError(url, reason="timeout") from e
        except httpx.HTTPError as e:
            raise FetchError(url, reason=type(e).__name__) from e
        if not response.is_success:
            raise FetchError(url, status=response.status_code)
        return response

    async def fetch_html(self, url: str) -> lxml.html.HtmlElement:
        """GET *url* and parse the body into an lxml document rooted at <html>."""
        response = await self._get(url)
        try:
            doc = lxml.html.document_fromstring(response.content, base_url=str(response.url))
        except (etree.LxmlError, ValueError) as e:
            raise FetchError(url, reason="unparseable HTML") from e
        logger.debug("Fetched %s (%d bytes)", url, len(response.content))
        return doc

    async def fetch_json(self, url: str, headers: dict[str, str] | None = None) -> object:
        """GET *url* and decode JSON. A body that is not JSON raises ValueError."""
        response = await self._get(url, headers=headers)
        return response.json()
