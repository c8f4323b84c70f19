"""Spreadsheet output for scraped stories."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from .models import Record
from .utils import UNDEFINED

logger = logging.getLogger("trends_scraper")

SHEET_TITLE = "Content"
HEADERS = ("Title", "ImgPath", "ImgPathChart", "GoogleUrl", "ExternalUrl", "ImgUrl")
MISSING_PATH = "none"
COLUMN_PADDING = 2


def _text(value: Optional[str]) -> str:
    return UNDEFINED if value is None else value


def record_row(record: Record) -> List[str]:
    """Cells for one record, in header order."""
    local_image = (
        record.local_image_path.as_posix()
        if record.local_image_path is not None
        else MISSING_PATH
    )
    return [
        _text(record.title),
        local_image,
        record.chart_image_path.as_posix(),
        _text(record.google_url),
        _text(record.external_url),
        _text(record.image_url),
    ]


def autofit_columns(sheet: Worksheet) -> None:
    """Size every column to its longest cell."""
    for column in sheet.columns:
        longest = max(len(str(cell.value or "")) for cell in column)
        letter = get_column_letter(column[0].column)
        sheet.column_dimensions[letter].width = longest + COLUMN_PADDING


def write_report(records: Sequence[Record], destination: Path) -> Path:
    """Write a header row plus one row per record to an xlsx workbook."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_TITLE
    sheet.append(HEADERS)
    for record in records:
        sheet.append(record_row(record))
    autofit_columns(sheet)

    destination.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(destination)
    logger.info("Saved %d stories to %s", len(records), destination)
    return destination
