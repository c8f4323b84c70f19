"""High-level orchestration for scraping stories off the trends page."""

from __future__ import annotations

import enum
import functools
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import requests

from .browser import BrowserSession, open_browser
from .config import ScrapeConfig
from .errors import OrderingError
from .extractor import bounding_box, extract_fields
from .images import crop_image, download_image
from .loader import load_page
from .models import Record, Screenshot
from .utils import clear_directory
from .visibility import ensure_visible

logger = logging.getLogger("trends_scraper")


class ScrapeState(enum.Enum):
    NOT_LOADED = "not_loaded"
    LOADING = "loading"
    SETTLING = "settling"
    EXTRACTING = "extracting"
    RESOLVING_GEOMETRY = "resolving_geometry"
    RECONCILING_VISIBILITY = "reconciling_visibility"
    DONE = "done"


@dataclass
class ScrapeResult:
    """Records from one run along with timing details."""

    records: Tuple[Record, ...]
    total_seconds: float
    screenshots_taken: int


class ScrapeContext:
    """State owned by a single scraping run.

    Records are append-only and must arrive in ascending index order; they
    are only handed out once the run reaches ``ScrapeState.DONE``.
    """

    def __init__(self, config: ScrapeConfig) -> None:
        self.config = config
        self.state = ScrapeState.NOT_LOADED
        self._records: List[Record] = []

    def transition(self, state: ScrapeState) -> None:
        logger.debug("State %s -> %s", self.state.value, state.value)
        self.state = state

    def append(self, record: Record) -> None:
        expected = len(self._records)
        if record.index != expected:
            raise OrderingError(
                f"Story {record.index} appended out of order (expected {expected})"
            )
        self._records.append(record)

    def __len__(self) -> int:
        return len(self._records)

    def results(self) -> Tuple[Record, ...]:
        if self.state is not ScrapeState.DONE:
            raise OrderingError(f"Scrape not finished (state={self.state.value})")
        return tuple(self._records)


def prepare_directories(config: ScrapeConfig) -> None:
    """Empty the results and screenshot folders; the cache is kept."""
    clear_directory(config.screenshots_dir)
    clear_directory(config.results_dir)
    config.cache_dir.mkdir(parents=True, exist_ok=True)


def fetch_story_image(
    image_url: Optional[str],
    index: int,
    config: ScrapeConfig,
    session: Optional[requests.Session] = None,
) -> Optional[Path]:
    """Download a story image, returning its path only if the file exists."""
    if image_url is None:
        return None
    destination = config.results_dir / f"{index}_image.png"
    if download_image(image_url, destination, config.download_timeout, session):
        return destination
    return None


async def scrape_story(
    browser: BrowserSession,
    context: ScrapeContext,
    index: int,
    screenshot: Screenshot,
    viewport_height: int,
    session: Optional[requests.Session] = None,
) -> Tuple[Record, Screenshot]:
    """Extract, locate, reconcile and crop a single story."""
    config = context.config
    selectors = config.selectors

    context.transition(ScrapeState.EXTRACTING)
    fields = await extract_fields(browser, index, selectors)
    local_image_path = fetch_story_image(fields.image_url, index, config, session)

    context.transition(ScrapeState.RESOLVING_GEOMETRY)
    locate = functools.partial(bounding_box, browser, index, selectors)
    rect = await locate()

    context.transition(ScrapeState.RECONCILING_VISIBILITY)
    rect, screenshot = await ensure_visible(
        browser, rect, viewport_height, screenshot, locate, config
    )

    chart_path = crop_image(
        screenshot.path, rect, config.results_dir / f"{index}_chart.png"
    )
    record = Record(
        index=index,
        title=fields.title,
        external_url=fields.external_url,
        google_url=fields.google_url,
        image_url=fields.image_url,
        local_image_path=local_image_path,
        chart_image_path=chart_path,
    )
    return record, screenshot


async def scrape_stories(
    browser: BrowserSession,
    config: ScrapeConfig,
    session: Optional[requests.Session] = None,
) -> ScrapeResult:
    """Load the page and scrape ``config.item_count`` stories in order."""
    start = time.perf_counter()
    context = ScrapeContext(config)

    context.transition(ScrapeState.LOADING)
    await load_page(
        browser,
        config.url,
        config,
        on_loaded=lambda: context.transition(ScrapeState.SETTLING),
    )

    screenshot = await browser.screenshot()
    viewport_height = await browser.viewport_height()

    for index in range(config.item_count):
        record, screenshot = await scrape_story(
            browser, context, index, screenshot, viewport_height, session
        )
        context.append(record)
        logger.info("Scraped story %d/%d: %s", index + 1, config.item_count, record.title)

    context.transition(ScrapeState.DONE)
    return ScrapeResult(
        records=context.results(),
        total_seconds=time.perf_counter() - start,
        screenshots_taken=screenshot.sequence,
    )


async def run_scraper(config: ScrapeConfig) -> ScrapeResult:
    """Open a browser session and scrape the configured page."""
    with requests.Session() as session:
        async with open_browser(config) as browser:
            return await scrape_stories(browser, config, session)
