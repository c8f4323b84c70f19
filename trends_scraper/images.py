"""Image downloading and chart cropping utilities."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import requests
from filetype import guess
from PIL import Image

from .config import DEFAULT_DOWNLOAD_TIMEOUT
from .errors import CropError
from .models import Rectangle
from .utils import ensure_scheme

logger = logging.getLogger("trends_scraper")

CHUNK_SIZE = 1024
NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store",
    "Pragma": "no-cache",
}


def is_image_file(path: Path) -> bool:
    """Check the file signature with filetype."""
    kind = guess(str(path))
    return bool(kind and kind.mime.startswith("image/"))


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


def download_image(
    url: str,
    destination: Path,
    timeout: float = DEFAULT_DOWNLOAD_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> bool:
    """Download ``url`` to ``destination``; return False on any failure.

    A failed download never leaves a partial file behind.
    """
    url = ensure_scheme(url)
    http = session or requests
    try:
        with http.get(
            url, headers=NO_CACHE_HEADERS, timeout=timeout, stream=True
        ) as resp:
            resp.raise_for_status()
            with destination.open("wb") as handle:
                for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                    handle.write(chunk)
    except requests.RequestException as exc:
        logger.warning("Failed to fetch image %s: %s", url, exc)
        _discard(destination)
        return False
    except OSError as exc:
        logger.warning("Failed to write image %s: %s", destination, exc)
        _discard(destination)
        return False

    if not is_image_file(destination):
        logger.warning("Skipping %s: response is not an image", url)
        _discard(destination)
        return False
    return True


def crop_image(screenshot_path: Path, rect: Rectangle, destination: Path) -> Path:
    """Cut ``rect`` out of a screenshot and save it as a PNG."""
    with Image.open(screenshot_path) as source:
        width, height = source.size
        if (
            rect.width <= 0
            or rect.height <= 0
            or rect.left < 0
            or rect.top < 0
            or rect.right > width
            or rect.bottom > height
        ):
            raise CropError(
                f"Rectangle {rect} is outside the {width}x{height} screenshot "
                f"{screenshot_path}"
            )
        chart = source.crop(rect.box)
        chart.save(destination, format="PNG")
    return destination
