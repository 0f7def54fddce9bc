"""
Command-line entry point: resolve every context navigator on a saved page.

    python -m arclight_navigator page.html --base-url https://archives.example.edu
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from arclight_navigator.core import NavigationSettings, RequestsFetcher, render_page
from arclight_navigator.logging_config import setup_logging

logger = logging.getLogger("arclight_navigator")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="arclight-navigator",
        description="Resolve collection context navigation on an HTML page.",
    )
    parser.add_argument("page", type=Path, help="HTML page containing context mount points")
    parser.add_argument("--base-url", help="Base URL joined with mount point paths")
    parser.add_argument("--timeout", type=float, help="Per-request timeout in seconds (default: none)")
    parser.add_argument("--max-concurrent", type=int, help="Bound on simultaneous requests (0 = unbounded)")
    parser.add_argument("-o", "--output", type=Path, help="Write the resolved page here instead of stdout")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, resolve the page and write it out."""
    args = build_parser().parse_args(argv)
    setup_logging()

    settings = NavigationSettings.load()
    overrides = {}
    if args.base_url is not None:
        overrides["base_url"] = args.base_url
    if args.timeout is not None:
        overrides["request_timeout"] = args.timeout
    if args.max_concurrent is not None:
        overrides["max_concurrent_requests"] = max(0, args.max_concurrent)
    if overrides:
        settings = replace(settings, **overrides)

    markup = args.page.read_text(encoding="utf-8")
    fetcher = RequestsFetcher(base_url=settings.base_url, timeout=settings.request_timeout)
    try:
        result = asyncio.run(render_page(markup, fetcher, settings=settings))
    finally:
        fetcher.close()

    if args.output:
        args.output.write_text(result.html, encoding="utf-8")
    else:
        sys.stdout.write(result.html)

    for engine, exc in result.failures:
        logger.error("Failed: %s (%s)", engine.label, exc)
    for engine in result.stalled:
        logger.error("Stalled: %s (%s)", engine.label, engine.fetch_error)
    return 0 if result.ok else 1


if __name__ == '__main__':
    sys.exit(main())
