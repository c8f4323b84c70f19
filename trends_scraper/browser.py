"""Playwright-backed browser session used by the scraping pipeline."""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Optional

from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from .config import ScrapeConfig
from .errors import PageLoadTimeout
from .models import Screenshot
from .utils import normalize_js_value

logger = logging.getLogger("trends_scraper")

_IS_LOADING_SCRIPT = "document.readyState !== 'complete'"
_VIEWPORT_HEIGHT_SCRIPT = "window.innerHeight"
_SCROLL_SCRIPT = "(dy) => window.scrollTo(0, window.scrollY + dy)"


class BrowserSession:
    """Single page owned by one scraping run.

    Every call is awaited before the next one is issued; the page is never
    shared between concurrent flows.
    """

    def __init__(self, page: Page, screenshots_dir: Path) -> None:
        self._page = page
        self._screenshots_dir = screenshots_dir
        self._captures = 0

    def once_loaded(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Invoke ``callback`` the next time the page fires ``load``, then detach.

        Returns a function that removes the listener if it has not fired yet.
        """

        def _handler(_page: Page) -> None:
            callback()

        self._page.once("load", _handler)
        return lambda: self._page.remove_listener("load", _handler)

    async def navigate(self, url: str, timeout: float) -> None:
        """Start navigating to ``url``, waiting at most ``timeout`` seconds."""
        logger.info("Loading %s", url)
        try:
            await self._page.goto(url, wait_until="commit", timeout=timeout * 1000)
        except PlaywrightTimeoutError as exc:
            raise PageLoadTimeout(f"navigation to {url}", timeout) from exc

    async def evaluate(self, script: str, arg: Any = None) -> Optional[str]:
        value = await self._page.evaluate(script, arg)
        return normalize_js_value(value)

    async def is_loading(self) -> bool:
        return bool(await self._page.evaluate(_IS_LOADING_SCRIPT))

    async def viewport_height(self) -> int:
        return int(await self._page.evaluate(_VIEWPORT_HEIGHT_SCRIPT))

    async def scroll_by(self, dy: int) -> None:
        await self._page.evaluate(_SCROLL_SCRIPT, dy)

    async def screenshot(self) -> Screenshot:
        """Capture the viewport to a GUID-named PNG in the screenshots folder."""
        path = self._screenshots_dir / f"{uuid.uuid4()}.png"
        await self._page.screenshot(path=str(path))
        self._captures += 1
        logger.debug("Saved screenshot #%d to %s", self._captures, path)
        return Screenshot(path=path, sequence=self._captures)


@asynccontextmanager
async def open_browser(config: ScrapeConfig) -> AsyncIterator[BrowserSession]:
    """Launch Chromium with a persistent cache directory and yield a session."""
    config.cache_dir.mkdir(parents=True, exist_ok=True)
    config.screenshots_dir.mkdir(parents=True, exist_ok=True)
    async with async_playwright() as playwright:
        context = await playwright.chromium.launch_persistent_context(
            str(config.cache_dir),
            headless=config.headless,
            viewport={
                "width": config.viewport_width,
                "height": config.viewport_height,
            },
        )
        try:
            page = context.pages[0] if context.pages else await context.new_page()
            page.set_default_navigation_timeout(config.load_timeout * 1000)
            yield BrowserSession(page, config.screenshots_dir)
        finally:
            await context.close()
