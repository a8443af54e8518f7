# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Field Guide CLI: page, search, title, langs, top commands.

Usage:
    fieldguide page IDENTIFIER [--lang L] [--json]
    fieldguide search QUERY [--lang L] [--limit N] [--page P] [--json]
    fieldguide title IDENTIFIER [--lang L]
    fieldguide langs
    fieldguide top [--lang L]
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import sys

import structlog

from .config import GuideConfig
from .errors import FetchError
from .guide import FieldGuide
from .i18n import DEFAULT_LANG, LANGS, language_choices, safe_lang
from .logging_config import configure as configure_logging
from .search import DEFAULT_LIMIT, PAGE_SIZE, paginate


def _require_cli_deps() -> None:
    """Check that CLI optional dependencies are installed."""
    try:
        from tabulate import tabulate  # noqa: F401
    except ImportError as e:
        print(
            f"Missing CLI dependency: {e.name}\nInstall with: pip install fieldguide[cli]",
            file=sys.stderr,
        )
        sys.exit(1)


def _print_json(payload: object) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def cmd_page(args: argparse.Namespace, config: GuideConfig) -> None:
    """Print a page summary + TOC, or a single section."""

    async def run():
        async with FieldGuide(config) as guide:
            return await guide.get_page(args.identifier, args.lang)

    try:
        page = asyncio.run(run())
    except FetchError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        _print_json(dataclasses.asdict(page))
        return
    print(f"# {page.title}")
    print(page.url)
    if page.image:
        print(f"image: {page.image}")
    print()
    print(page.description)


def cmd_search(args: argparse.Namespace, config: GuideConfig) -> None:
    """Rank index entries for a query and print one result page."""

    async def run():
        async with FieldGuide(config) as guide:
            return await guide.search(args.query, args.lang, args.limit)

    results = asyncio.run(run())
    view = paginate(results, args.page, PAGE_SIZE)

    if args.json:
        _print_json(
            {
                "query": args.query,
                "lang": safe_lang(args.lang),
                "page": view.page,
                "total_pages": view.total_pages,
                "total": view.total,
                "results": [dataclasses.asdict(r) for r in view.items],
            }
        )
        return
    if not view.items:
        print(f'No results for "{args.query}".')
        return
    _require_cli_deps()
    from tabulate import tabulate

    offset = (view.page - 1) * PAGE_SIZE
    rows = [[i, r.title, r.url] for i, r in enumerate(view.items, start=offset + 1)]
    print(tabulate(rows, headers=["#", "Title", "URL"], tablefmt="simple"))
    print(f"\nPage {view.page}/{view.total_pages} ({view.total} results)")


def cmd_title(args: argparse.Namespace, config: GuideConfig) -> None:
    """Print the localized title and canonical URL of a page."""

    async def run():
        async with FieldGuide(config) as guide:
            return await guide.get_page_title(args.identifier, args.lang)

    result = asyncio.run(run())
    print(result.title)
    print(result.url)


def cmd_langs(args: argparse.Namespace, config: GuideConfig) -> None:
    """List supported locales."""
    _require_cli_deps()
    from tabulate import tabulate

    rows = [[code, label, "*" if code == DEFAULT_LANG else ""] for label, code in language_choices()]
    print(tabulate(rows, headers=["Code", "Label", "Default"], tablefmt="simple"))


def cmd_top(args: argparse.Namespace, config: GuideConfig) -> None:
    """Print the curated quick-access pages for a locale, labelled with page titles."""

    async def run():
        async with FieldGuide(config) as guide:
            return await guide.top_links(args.lang)

    for link in asyncio.run(run()):
        print(f"- [{link.title}]({link.url})")


def _lang_argument(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--lang",
        type=str,
        default=DEFAULT_LANG,
        metavar="LANG",
        help=f"Locale ({', '.join(LANGS)}); unknown values fall back to {DEFAULT_LANG}",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Field Guide CLI", prog="fieldguide")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: FIELDGUIDE_LOG_LEVEL or INFO)",
    )
    parser.add_argument("--log-json", action="store_true", help="Emit JSON log lines on stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_page = subparsers.add_parser(
        "page",
        help="Show a page summary, or one section when IDENTIFIER has a #fragment",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
examples:
  %(prog)s mechanics/crops                 Summary + table of contents
  %(prog)s mechanics/crops#wild_crops      Single section
  %(prog)s mechanics/crops --lang ja_jp    Localized page""",
    )
    p_page.add_argument("identifier", help="Site-relative path or absolute guide URL")
    _lang_argument(p_page)
    p_page.add_argument("--json", action="store_true", help="Output JSON to stdout")

    p_search = subparsers.add_parser("search", help="Search the guide index")
    p_search.add_argument("query")
    _lang_argument(p_search)
    p_search.add_argument("--limit", type=int, default=DEFAULT_LIMIT, help=f"Max results (default: {DEFAULT_LIMIT})")
    p_search.add_argument("--page", type=int, default=1, help=f"Result page, {PAGE_SIZE} per page (default: 1)")
    p_search.add_argument("--json", action="store_true", help="Output JSON to stdout")

    p_title = subparsers.add_parser("title", help="Show a page's localized title and URL")
    p_title.add_argument("identifier")
    _lang_argument(p_title)

    subparsers.add_parser("langs", help="List supported locales")

    p_top = subparsers.add_parser("top", help="List quick-access pages")
    _lang_argument(p_top)

    return parser


COMMANDS = {
    "page": cmd_page,
    "search": cmd_search,
    "title": cmd_title,
    "langs": cmd_langs,
    "top": cmd_top,
}


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = GuideConfig.from_env()
    if args.log_level:
        config = dataclasses.replace(config, log_level=args.log_level)
    if args.log_json:
        config = dataclasses.replace(config, log_json=True)
    configure_logging(json_output=config.log_json, level=config.log_level)

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        command=args.command,
        lang=safe_lang(getattr(args, "lang", None)),
    )

    try:
        COMMANDS[args.command](args, config)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    main()
