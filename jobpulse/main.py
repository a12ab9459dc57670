"""Command line entry point: enrich a saved job search page."""
import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from config.settings import settings
from jobpulse.document.soup import SoupDocument
from jobpulse.enricher import ListingEnricher
from jobpulse.exceptions import JobPulseError
from jobpulse.logging_config import setup_logging
from jobpulse.store import LIMIT_KEY, SESSION_TOKEN_KEY, ConfigStore

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Annotate job listings with applicant count, views and listing age",
    )
    parser.add_argument("page", type=Path, help="Saved job search results HTML file")
    parser.add_argument(
        "-o", "--output", type=Path,
        help="Where to write the enriched page (default: overwrite PAGE)",
    )
    parser.add_argument(
        "--page-url", default=f"{settings.base_url}/jobs/search/",
        help="URL the page was saved from, used to resolve relative links",
    )
    parser.add_argument("--limit", type=int, help="Store a new applicant limit before running")
    parser.add_argument("--token", help="Store a new session token before running")
    parser.add_argument(
        "--store", type=Path, default=settings.store_path,
        help="Settings file holding the limit and session token",
    )
    parser.add_argument(
        "--wait", type=float,
        default=settings.sweep_interval_seconds * settings.max_sweeps,
        help="Seconds to keep watching for changes after the initial scan",
    )
    parser.add_argument("--log-level", default=settings.log_level)
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    """Enrich the page and write it out. Returns the number of listings annotated."""
    store = ConfigStore(args.store, default_limit=settings.default_limit)
    if args.limit is not None:
        store.set(LIMIT_KEY, args.limit)
    if args.token:
        store.set(SESSION_TOKEN_KEY, args.token)

    document = SoupDocument.from_file(args.page, page_url=args.page_url)
    logger.info("Loaded %s with %d listings", args.page, len(document.query_entries()))

    async with ListingEnricher(document, store) as enricher:
        if args.wait > 0:
            await asyncio.sleep(args.wait)
        await enricher.wait_idle()

    output = args.output or args.page
    output.write_text(document.to_html(), encoding="utf-8")
    annotated = len(document.indicators())
    logger.info("Wrote %d annotated listings to %s", annotated, output)
    return annotated


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(settings, level=args.log_level)

    if not args.page.exists():
        logger.error("Page not found: %s", args.page)
        return 1

    try:
        asyncio.run(run(args))
    except JobPulseError as e:
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted.")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
