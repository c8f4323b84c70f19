"""Command-line entry point for the trends scraper."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Sequence

from .config import DEFAULT_ITEM_COUNT, DEFAULT_TRENDS_URL, ScrapeConfig
from .errors import ScraperError
from .report import write_report
from .scraper import prepare_directories, run_scraper

logger = logging.getLogger("trends_scraper.cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Scrape trending stories and their charts into a spreadsheet.",
    )
    parser.add_argument(
        "--url",
        default=DEFAULT_TRENDS_URL,
        help="Trends page to scrape",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=DEFAULT_ITEM_COUNT,
        help="Number of stories to scrape",
    )
    parser.add_argument(
        "--output",
        default=".",
        type=Path,
        help="Directory holding the Results, Screenshots and Cache folders",
    )
    parser.add_argument(
        "--settle",
        type=float,
        default=10.0,
        help="Seconds to wait after loading or scrolling for AJAX content",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=120.0,
        help="Seconds to wait for the page to finish loading",
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )

    config = ScrapeConfig(
        output_root=Path(args.output).resolve(),
        url=args.url,
        item_count=args.count,
        settle_delay=args.settle,
        load_timeout=args.timeout,
        headless=not args.headed,
    )
    prepare_directories(config)

    logger.info("Starting scrape...")
    try:
        result = asyncio.run(run_scraper(config))
    except ScraperError:
        logger.exception("Scrape aborted")
        sys.exit(1)

    write_report(result.records, config.report_path)
    logger.debug(
        "Scraped %d stories in %.2fs using %d screenshots",
        len(result.records),
        result.total_seconds,
        result.screenshots_taken,
    )
    logger.info("All done!")


if __name__ == "__main__":
    main()
