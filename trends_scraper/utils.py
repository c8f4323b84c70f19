"""Utility helpers for script values, URLs and output directories."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger("trends_scraper")

UNDEFINED = "undefined"


def normalize_js_value(value: Any) -> Optional[str]:
    """Map a script result to text, treating ``null``/``undefined`` as absent."""
    if value is None:
        return None
    text = str(value)
    if text == UNDEFINED:
        return None
    return text


def ensure_scheme(url: str) -> str:
    """Prefix ``http:`` onto protocol-relative URLs such as ``//host/a.png``."""
    if url.startswith("http"):
        return url
    return "http:" + url


def clear_directory(path: Path) -> int:
    """Delete every file directly inside ``path``, creating it if missing."""
    path.mkdir(parents=True, exist_ok=True)
    removed = 0
    for entry in path.iterdir():
        if entry.is_file():
            entry.unlink()
            removed += 1
    if removed:
        logger.debug("Removed %d stale files from %s", removed, path)
    return removed
