"""Scroll stories into view and refresh stale geometry and screenshots."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Tuple

from .browser import BrowserSession
from .config import DEFAULT_FOLD_MARGIN, ScrapeConfig
from .errors import PageLoadTimeout
from .models import Rectangle, Screenshot

logger = logging.getLogger("trends_scraper")


def is_below_fold(
    rect: Rectangle, viewport_height: int, margin: int = DEFAULT_FOLD_MARGIN
) -> bool:
    """Return True when the rectangle's lower edge plus ``margin`` is off-screen."""
    return rect.bottom + margin > viewport_height


async def wait_until_idle(
    browser: BrowserSession, poll_interval: float, timeout: float
) -> None:
    """Poll the page's busy flag until it clears or ``timeout`` expires."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while await browser.is_loading():
        if loop.time() >= deadline:
            raise PageLoadTimeout("page to stop loading after scroll", timeout)
        await asyncio.sleep(poll_interval)


async def ensure_visible(
    browser: BrowserSession,
    rect: Rectangle,
    viewport_height: int,
    screenshot: Screenshot,
    locate: Callable[[], Awaitable[Rectangle]],
    config: ScrapeConfig,
) -> Tuple[Rectangle, Screenshot]:
    """Scroll down once if ``rect`` is below the fold.

    Returns the rectangle and screenshot to crop from. When a scroll happens
    both are replaced: the element is re-located with ``locate`` and a fresh
    screenshot is captured. Scroll position only ever moves forward.
    """
    if not is_below_fold(rect, viewport_height, config.fold_margin):
        return rect, screenshot

    await browser.scroll_by(config.scroll_step)
    await asyncio.sleep(config.scroll_pause)
    await wait_until_idle(browser, config.busy_poll_interval, config.load_timeout)
    await asyncio.sleep(config.settle_delay)
    logger.info("Page scrolled down successfully.")

    fresh_rect = await locate()
    fresh_screenshot = await browser.screenshot()
    return fresh_rect, fresh_screenshot
