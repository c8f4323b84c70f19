"""Exceptions raised by the scraping pipeline."""

from __future__ import annotations


class ScraperError(Exception):
    """Base class for all scraper failures."""


class PageLoadTimeout(ScraperError, TimeoutError):
    """The page did not finish loading within the configured timeout."""

    def __init__(self, what: str, timeout: float) -> None:
        super().__init__(f"Timed out after {timeout:.1f}s waiting for {what}")
        self.what = what
        self.timeout = timeout


class MissingElementError(ScraperError):
    """A required DOM element could not be found for a story."""

    def __init__(self, index: int, element: str) -> None:
        super().__init__(f"Story {index}: element '{element}' not found")
        self.index = index
        self.element = element


class GeometryError(ScraperError):
    """A bounding box string could not be parsed."""


class CropError(ScraperError):
    """A crop rectangle falls outside the screenshot."""


class OrderingError(ScraperError):
    """Records were appended out of index order or read before the run ended."""
