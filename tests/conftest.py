"""Shared fixtures for scraper tests."""

from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

from tests.fakes import FakeBrowser, FakeStory
from trends_scraper.config import ScrapeConfig


@pytest.fixture
def config(tmp_path: Path) -> ScrapeConfig:
    """Config with every delay disabled.

    Returns:
        A ScrapeConfig rooted at a temporary directory.
    """
    cfg = ScrapeConfig(
        output_root=tmp_path,
        item_count=3,
        settle_delay=0.0,
        scroll_pause=0.0,
        busy_poll_interval=0.0,
        load_timeout=1.0,
        viewport_width=400,
        viewport_height=300,
    )
    cfg.results_dir.mkdir(parents=True)
    cfg.screenshots_dir.mkdir(parents=True)
    return cfg


@pytest.fixture
def make_browser(config: ScrapeConfig):
    """Factory for fake browsers writing screenshots into the config folder."""

    def _make(stories: List[FakeStory], **kwargs) -> FakeBrowser:
        return FakeBrowser(
            stories=stories, screenshots_dir=config.screenshots_dir, **kwargs
        )

    return _make
