"""Configuration objects and constants for the scraper."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_TRENDS_URL = "https://trends.google.com/trends/"
DEFAULT_ITEM_COUNT = 50
DEFAULT_FOLD_MARGIN = 20
DEFAULT_DOWNLOAD_TIMEOUT = 5.0
REPORT_FILENAME = "GoogleTrendsOutput.xlsx"

RESULTS_DIRNAME = "Results"
SCREENSHOTS_DIRNAME = "Screenshots"
CACHE_DIRNAME = "Cache"


@dataclass(frozen=True)
class Selectors:
    """Class names used to locate story fields on the trends page.

    Bump ``version`` whenever the page layout changes and the class names
    below are updated to match.
    """

    version: str = "2018.1"
    story_wrapper: str = "trending-story-wrapper"
    google_link: str = "trending-story ng-isolate-scope"
    title: str = "ng-binding"
    external_link: str = "image-wrapper ng-scope"
    image: str = "image fe-atoms-generic-hide-in-mobile ng-scope"
    chart: str = "sparkline-chart ng-scope"


@dataclass
class ScrapeConfig:
    """Top-level settings that control page loading, scrolling and output."""

    output_root: Path
    url: str = DEFAULT_TRENDS_URL
    item_count: int = DEFAULT_ITEM_COUNT
    settle_delay: float = 10.0
    scroll_step: int = 2000
    fold_margin: int = DEFAULT_FOLD_MARGIN
    scroll_pause: float = 1.0
    busy_poll_interval: float = 0.01
    load_timeout: float = 120.0
    download_timeout: float = DEFAULT_DOWNLOAD_TIMEOUT
    viewport_width: int = 2000
    viewport_height: int = 2000
    headless: bool = True
    selectors: Selectors = field(default_factory=Selectors)

    @property
    def results_dir(self) -> Path:
        return self.output_root / RESULTS_DIRNAME

    @property
    def screenshots_dir(self) -> Path:
        return self.output_root / SCREENSHOTS_DIRNAME

    @property
    def cache_dir(self) -> Path:
        return self.output_root / CACHE_DIRNAME

    @property
    def report_path(self) -> Path:
        return self.results_dir / REPORT_FILENAME
