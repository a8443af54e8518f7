# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Locale-aware URL resolution for Field Guide pages.

Every identifier a user can type (bare path, path#fragment, absolute URL)
resolves to one canonical document URL:

    <scheme>://<host>/<...>/Field-Guide-Modern/<lang>/<path>.html

plus an optional fragment returned separately. Resolution is idempotent:
feeding a resolved URL back in yields the same URL.
"""

from __future__ import annotations

import re
from urllib.parse import SplitResult, urlsplit

from .i18n import SITE_ROOT, is_supported, lang_from_url, safe_lang, site_root_index

_ABSOLUTE_RE = re.compile(r"^https?://", re.IGNORECASE)

# Fragments containing these substrings are page chrome, never content.
FRAGMENT_BLACKLIST_SUBSTRINGS: tuple[str, ...] = (
    "glb-viewer",
    "nav-primary",
    "navbar-content",
    "lang-dropdown-button",
    "bd-theme",
    "bd-theme-text",
)


def is_absolute(identifier: str) -> bool:
    return bool(_ABSOLUTE_RE.match(identifier))


def is_blacklisted_fragment(id_or_url: str | None) -> bool:
    """True if the fragment id (or the part after the last '#') is page chrome."""
    if not id_or_url:
        return False
    candidate = id_or_url.rsplit("#", 1)[-1].lower()
    return any(sub in candidate for sub in FRAGMENT_BLACKLIST_SUBSTRINGS)


def _split(url: str) -> SplitResult | None:
    try:
        parsed = urlsplit(url)
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc:
        return None
    return parsed


def ensure_lang(url: str, lang: str | None) -> str:
    """Insert or replace the locale segment after the site root, in place.

    URLs without a site-root component (other hosts, relative input) are
    returned unchanged. Query and fragment are preserved.
    """
    parsed = _split(url)
    if parsed is None:
        return url
    safe = safe_lang(lang)
    parts = parsed.path.split("/")
    i = site_root_index(parts)
    if i == -1:
        return url

    if i + 1 < len(parts) and is_supported(parts[i + 1]):
        parts[i + 1] = safe
    else:
        parts.insert(i + 1, safe)
    return parsed._replace(path="/".join(parts)).geturl()


def canonical_lang_html(url: str, lang: str | None) -> str:
    """Locale-tagged, fragment-free, ``.html``-terminated form of *url*."""
    ensured = ensure_lang(url, lang)
    parsed = _split(ensured)
    if parsed is None:
        return ensured

    path = parsed.path
    last = path.rsplit("/", 1)[-1]
    if last == "index":
        path = path + ".html"
    elif not last or "." not in last:
        path = path + ("" if path.endswith("/") else "/") + "index.html"
    return parsed._replace(path=path, fragment="").geturl()


def parse_path_and_fragment(identifier: str, lang: str | None) -> tuple[str, str | None]:
    """Resolve *identifier* into ``(canonical_base_url, fragment_or_None)``.

    Absolute URLs keep a valid locale segment they already carry; anything
    else takes the requested locale (or the default when that is unsupported).
    """
    identifier = identifier.strip()
    if is_absolute(identifier):
        parsed = _split(identifier)
        fragment = parsed.fragment if parsed is not None else ""
        use_lang = lang_from_url(identifier, default=safe_lang(lang))
        base = identifier.split("#", 1)[0]
        return canonical_lang_html(base, use_lang), fragment or None

    path, _, fragment = identifier.partition("#")
    normalized = path.strip("/")
    if not normalized.endswith(".html"):
        normalized = f"{normalized}.html"
    safe = safe_lang(lang)
    base_url = canonical_lang_html(f"{SITE_ROOT}{safe}/{normalized}", safe)
    return base_url, fragment or None


def build_url_from_path(identifier: str, lang: str | None) -> str:
    """Canonical URL for *identifier*, with its fragment re-attached."""
    base_url, fragment = parse_path_and_fragment(identifier, lang)
    return f"{base_url}#{fragment}" if fragment else base_url
