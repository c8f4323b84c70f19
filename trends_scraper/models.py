"""Data models used throughout the scraping pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple


@dataclass(frozen=True)
class Rectangle:
    """Element bounding box in viewport pixels."""

    left: int
    top: int
    width: int
    height: int

    @property
    def bottom(self) -> int:
        return self.top + self.height

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def box(self) -> Tuple[int, int, int, int]:
        """Pillow-style ``(left, upper, right, lower)`` crop box."""
        return (self.left, self.top, self.right, self.bottom)


@dataclass(frozen=True)
class Screenshot:
    """A capture of the page tied to the scroll state it was taken in."""

    path: Path
    sequence: int


@dataclass(frozen=True)
class StoryFields:
    """Raw DOM fields read for one story."""

    title: Optional[str]
    external_url: Optional[str]
    google_url: Optional[str]
    image_url: Optional[str]


@dataclass(frozen=True)
class Record:
    """A single scraped story."""

    index: int
    title: Optional[str]
    external_url: Optional[str]
    google_url: Optional[str]
    image_url: Optional[str]
    local_image_path: Optional[Path]
    chart_image_path: Path
