from __future__ import annotations

import logging
from typing import Any

from gspread.exceptions import WorksheetNotFound

from app.frtu.constants import DIRECTORY_HEADER_LABELS, LOG_SHEET_COLUMNS
from app.frtu.errors import NotFoundError

logger = logging.getLogger(__name__)

PLACEHOLDER = "-"

# Sheet column -> request body field
_COLUMN_FIELDS = {
    "Officer": "officerName",
    "Remote Unit Name": "frtuSerial",
    "Action": "action",
    "System Details": "details",
    "Event Details": "eventDetails",
    "PHOS Data": "phosData",
    "PHBO Data": "phboData",
    "Status": "status",
}


def build_log_row(body: dict[str, Any], timestamp: str) -> dict[str, str]:
    """Map a mirrored entry onto the sheet's columns; unset fields become a dash."""
    row = {"Timestamp": timestamp}
    for column, field in _COLUMN_FIELDS.items():
        value = body.get(field)
        row[column] = str(value) if value not in (None, "") else PLACEHOLDER
    return row


def select_log_worksheet(spreadsheet, title: str):
    """Preferred table by title, falling back to the first table."""
    try:
        return spreadsheet.worksheet(title)
    except WorksheetNotFound:
        logger.info("Sheet %r not found; falling back to first sheet", title)
    try:
        ws = spreadsheet.get_worksheet(0)
    except WorksheetNotFound:
        ws = None
    if ws is None:
        raise NotFoundError("Spreadsheet has no sheets")
    return ws


def append_log_row(worksheet, row: dict[str, str]) -> None:
    """
    Append one row, placing values under the sheet's own header labels.

    An empty sheet gets the standard header row first. Headers the row does
    not know about are left blank.
    """
    headers = [h.strip() for h in worksheet.row_values(1)]
    if not any(headers):
        worksheet.append_row(list(LOG_SHEET_COLUMNS))
        headers = list(LOG_SHEET_COLUMNS)
    worksheet.append_row([row.get(h, "") for h in headers])


def read_directory(spreadsheet, gid: int, cell_range: str) -> list[str]:
    try:
        worksheet = spreadsheet.get_worksheet_by_id(gid)
    except WorksheetNotFound:
        raise NotFoundError(f'Sheet "รายชื่อพนักงาน" (GID: {gid}) not found') from None
    return extract_names(worksheet.get(cell_range))


def extract_names(values: list[list[Any]]) -> list[str]:
    """First cell of each scanned row, minus header labels and blanks."""
    names = []
    for row in values:
        if not row:
            continue
        name = str(row[0]).strip()
        if not name or name in DIRECTORY_HEADER_LABELS:
            continue
        names.append(name)
    return names
