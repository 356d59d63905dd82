"""
Write the audit log CSV to a file, for operators without browser access.

Usage:
  python scripts/export_logs.py [--out PATH] [--tz Asia/Bangkok]
"""
from __future__ import annotations

import argparse
import sys
from datetime import date
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.frtu.audit import AuditLogger
from app.frtu.modules.reports.service import export_filename, export_logs_csv
from app.frtu.store import RecordStore
from app.frtu.utils import display_zone
from scripts._db_utils import script_database_url, script_session


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--database-url", default=None)
    parser.add_argument("--out", default=None, help="output path (default: frtu_logs_<today>.csv)")
    parser.add_argument("--tz", default="Asia/Bangkok")
    args = parser.parse_args(argv)

    with script_session(script_database_url(args.database_url)) as s:
        entries = AuditLogger(RecordStore(s)).entries()

    data = export_logs_csv(entries, display_zone(args.tz))
    if data is None:
        print("Audit log is empty; nothing exported.", flush=True)
        return 1

    out = Path(args.out or export_filename(date.today()))
    out.write_bytes(data)
    print(f"Wrote {len(entries)} entries to {out}", flush=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
