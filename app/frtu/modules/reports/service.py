from __future__ import annotations

import csv
import io
from datetime import date, tzinfo

from app.frtu.audit import LogEntry
from app.frtu.constants import EXPORT_COLUMNS
from app.frtu.utils import format_thai_timestamp


def export_logs_csv(entries: list[LogEntry], tz: tzinfo | None = None) -> bytes | None:
    """
    Serialize the audit log for download.

    Returns None for an empty log. Rows keep the log's order (newest first);
    every field is quoted and the output starts with a UTF-8 BOM so
    spreadsheet tools pick the right encoding.
    """
    if not entries:
        return None

    out = io.StringIO()
    out.write(",".join(EXPORT_COLUMNS) + "\n")
    w = csv.writer(out, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for e in entries:
        snap = e.snapshot
        w.writerow(
            [
                format_thai_timestamp(e.occurred_at(), tz),
                e.officer_name,
                e.frtu_serial,
                e.action.label,
                e.details,
                snap.phos_data if snap else "",
                snap.phbo_data if snap else "",
            ]
        )
    return out.getvalue().encode("utf-8-sig")


def export_filename(today: date | None = None) -> str:
    if today is None:
        today = date.today()
    return f"frtu_logs_{today.isoformat()}.csv"
