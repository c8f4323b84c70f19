"""Read story fields and chart geometry from the rendered DOM."""

from __future__ import annotations

import logging
from typing import List, Optional

from .browser import BrowserSession
from .config import Selectors
from .errors import GeometryError, MissingElementError
from .models import Rectangle, StoryFields

logger = logging.getLogger("trends_scraper")

STORY_COUNT_SCRIPT = "(wrapper) => document.getElementsByClassName(wrapper).length"

# Resolves to undefined when the story or the field element is missing.
STORY_FIELD_SCRIPT = """
([wrapper, index, target, attribute]) => {
    const story = document.getElementsByClassName(wrapper)[index];
    const element = story ? story.getElementsByClassName(target)[0] : undefined;
    if (!element) {
        return undefined;
    }
    return attribute ? element.getAttribute(attribute) : element.innerHTML;
}
"""

BOUNDING_BOX_SCRIPT = """
([wrapper, index, target]) => {
    const story = document.getElementsByClassName(wrapper)[index];
    const element = story ? story.getElementsByClassName(target)[0] : undefined;
    if (!element) {
        return undefined;
    }
    const a = element.getBoundingClientRect();
    return a.left + '|' + a.top + '|' + a.width + '|' + a.height;
}
"""

RECT_DELIMITER = "|"


async def _read_field(
    browser: BrowserSession,
    selectors: Selectors,
    index: int,
    target: str,
    attribute: Optional[str],
) -> Optional[str]:
    return await browser.evaluate(
        STORY_FIELD_SCRIPT,
        [selectors.story_wrapper, index, target, attribute],
    )


async def story_count(browser: BrowserSession, selectors: Selectors) -> int:
    """Number of story containers currently in the DOM."""
    count = await browser.evaluate(STORY_COUNT_SCRIPT, selectors.story_wrapper)
    return int(count or 0)


async def extract_fields(
    browser: BrowserSession, index: int, selectors: Selectors
) -> StoryFields:
    """Read link, title, external link and image source of the Nth story."""
    if index >= await story_count(browser, selectors):
        raise MissingElementError(index, selectors.story_wrapper)

    google_url = await _read_field(
        browser, selectors, index, selectors.google_link, "ng-href"
    )
    title = await _read_field(browser, selectors, index, selectors.title, None)
    external_url = await _read_field(
        browser, selectors, index, selectors.external_link, "ng-href"
    )
    image_url = await _read_field(browser, selectors, index, selectors.image, "src")
    logger.debug("Story %d: title=%r image=%r", index, title, image_url)
    return StoryFields(
        title=title,
        external_url=external_url,
        google_url=google_url,
        image_url=image_url,
    )


def _truncate(part: str) -> int:
    # Cut at the decimal point rather than rounding; crops depend on it.
    if "e" in part or "E" in part:
        return int(float(part))
    return int(part.split(".", 1)[0] or "0")


def parse_rectangle(raw: str) -> Rectangle:
    """Parse ``left|top|width|height`` floats into a truncated rectangle."""
    parts: List[str] = [part for part in raw.split(RECT_DELIMITER) if part]
    if len(parts) != 4:
        raise GeometryError(f"Expected 4 bounding box fields, got {raw!r}")
    try:
        left, top, width, height = (_truncate(part.strip()) for part in parts)
    except ValueError as exc:
        raise GeometryError(f"Malformed bounding box {raw!r}") from exc
    return Rectangle(left=left, top=top, width=width, height=height)


async def bounding_box(
    browser: BrowserSession, index: int, selectors: Selectors
) -> Rectangle:
    """Resolve the Nth story's chart rectangle in viewport coordinates."""
    raw = await browser.evaluate(
        BOUNDING_BOX_SCRIPT, [selectors.story_wrapper, index, selectors.chart]
    )
    if raw is None:
        raise MissingElementError(index, selectors.chart)
    return parse_rectangle(raw)
