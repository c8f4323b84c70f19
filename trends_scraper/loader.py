"""Navigate to the target page and wait until its content has settled."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from .browser import BrowserSession
from .config import ScrapeConfig
from .errors import PageLoadTimeout

logger = logging.getLogger("trends_scraper")


async def wait_for_load(browser: BrowserSession, url: str, timeout: float) -> None:
    """Navigate to ``url`` and block until the one-shot load notification fires.

    Navigation and the load wait share a single ``timeout`` budget.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    finished: asyncio.Future[None] = loop.create_future()

    def _on_loaded() -> None:
        if not finished.done():
            finished.set_result(None)

    detach = browser.once_loaded(_on_loaded)
    try:
        await browser.navigate(url, timeout)
        remaining = max(deadline - loop.time(), 0.0)
        try:
            await asyncio.wait_for(finished, remaining)
        except asyncio.TimeoutError as exc:
            raise PageLoadTimeout(f"{url} to finish loading", timeout) from exc
    finally:
        # wait_for cancels the future on timeout, so cancelled means not fired.
        if finished.cancelled() or not finished.done():
            detach()


async def load_page(
    browser: BrowserSession,
    url: str,
    config: ScrapeConfig,
    on_loaded: Optional[Callable[[], None]] = None,
) -> None:
    """Load ``url`` then wait the settle delay for asynchronous content."""
    await wait_for_load(browser, url, config.load_timeout)
    if on_loaded is not None:
        on_loaded()
    # AJAX-populated content is not covered by the load event.
    await asyncio.sleep(config.settle_delay)
    logger.info("Page loaded successfully")
