# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Locales: the supported set, display labels, and URL-based detection.

2-Layer architecture:
  Layer 1 (Validation): LANGS tuple and safe_lang() — anything outside the
      fixed set is silently replaced by DEFAULT_LANG, never rejected.
  Layer 2 (Rendering): LocaleConfig dataclass — human labels for pickers.

Supported locales: en_us (default), ja_jp, ko_kr, pt_br, ru_ru, uk_ua,
zh_cn, zh_hk, zh_tw
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlparse

SITE_ROOT = "https://terrafirmagreg-team.github.io/Field-Guide-Modern/"

# Path components that mark the site root; the locale segment follows one.
# "Field-Guide" is the pre-Modern layout still referenced by older links.
SITE_ROOT_SEGMENTS: tuple[str, ...] = ("Field-Guide-Modern", "Field-Guide")

# ---------------------------------------------------------------------------
# Layer 1: validation
# ---------------------------------------------------------------------------

DEFAULT_LANG = "en_us"

LANGS: tuple[str, ...] = (
    "en_us",
    "ja_jp",
    "ko_kr",
    "pt_br",
    "ru_ru",
    "uk_ua",
    "zh_cn",
    "zh_hk",
    "zh_tw",
)

_LANG_SET = frozenset(LANGS)


def is_supported(lang: str | None) -> bool:
    return lang in _LANG_SET


def safe_lang(lang: str | None) -> str:
    """Return *lang* when supported, otherwise DEFAULT_LANG."""
    return lang if lang in _LANG_SET else DEFAULT_LANG


# ---------------------------------------------------------------------------
# Layer 2: LocaleConfig (rendering)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LocaleConfig:
    """Display metadata for one supported locale."""

    code: str
    label: str  # native name plus code, e.g. "English (en_us)"


_LOCALES: dict[str, LocaleConfig] = {
    "en_us": LocaleConfig(code="en_us", label="English (en_us)"),
    "ja_jp": LocaleConfig(code="ja_jp", label="日本語 (ja_jp)"),
    "ko_kr": LocaleConfig(code="ko_kr", label="한국어 (ko_kr)"),
    "pt_br": LocaleConfig(code="pt_br", label="Português (pt_br)"),
    "ru_ru": LocaleConfig(code="ru_ru", label="Русский (ru_ru)"),
    "uk_ua": LocaleConfig(code="uk_ua", label="Українська (uk_ua)"),
    "zh_cn": LocaleConfig(code="zh_cn", label="简体中文 (zh_cn)"),
    "zh_hk": LocaleConfig(code="zh_hk", label="香港繁體 (zh_hk)"),
    "zh_tw": LocaleConfig(code="zh_tw", label="繁體中文 (zh_tw)"),
}


def get_locale(code: str | None = None) -> LocaleConfig:
    """Return LocaleConfig for *code*; unknown or ``None`` falls back to DEFAULT_LANG."""
    return _LOCALES[safe_lang(code)]


def language_choices() -> list[tuple[str, str]]:
    """(label, code) pairs in LANGS order, for command option pickers."""
    return [(_LOCALES[code].label, code) for code in LANGS]


# ---------------------------------------------------------------------------
# URL-based locale detection
# ---------------------------------------------------------------------------


def site_root_index(parts: list[str]) -> int:
    """Index of the first site-root component in split path *parts*, or -1."""
    for i, part in enumerate(parts):
        if part in SITE_ROOT_SEGMENTS:
            return i
    return -1


def lang_from_url(url: str, default: str = DEFAULT_LANG) -> str:
    """Locale segment right after the site root in *url*'s path, else *default*."""
    try:
        path = urlparse(url).path
    except ValueError:
        return default
    parts = path.split("/")
    i = site_root_index(parts)
    if i != -1 and i + 1 < len(parts) and parts[i + 1] in _LANG_SET:
        return parts[i + 1]
    return default
