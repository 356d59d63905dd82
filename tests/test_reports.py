"""Tests for the audit log CSV export."""
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from app.frtu import create_app
from app.frtu.audit import ActionType, ExtendedSnapshot, LogEntry
from app.frtu.modules.reports.service import export_filename, export_logs_csv
from app.frtu.utils import display_zone, format_thai_timestamp

BANGKOK = ZoneInfo("Asia/Bangkok")


def _entry(**overrides) -> LogEntry:
    fields = {
        "id": "1716174245000",
        "frtu_id": "1",
        "frtu_serial": "FRTU-PEA-001",
        "action": ActionType.UPDATE,
        "details": "แก้ไขข้อมูล FRTU-PEA-001",
        "officer_name": "นายสมชาย ใจดี",
        "timestamp": "2024-05-20T03:04:05.000Z",
        "snapshot": ExtendedSnapshot(phos_data="PH-1", phbo_data="PB-1"),
    }
    fields.update(overrides)
    return LogEntry(**fields)


def test_empty_log_exports_nothing():
    assert export_logs_csv([]) is None


def test_output_starts_with_bom_and_plain_header():
    data = export_logs_csv([_entry()], BANGKOK)
    assert data.startswith(b"\xef\xbb\xbf")
    text = data.decode("utf-8-sig")
    assert text.splitlines()[0] == "Date,Officer,Serial,Action,Details,PHOS Data,PHBO Data"


def test_row_fields_are_quoted_and_labelled():
    text = export_logs_csv([_entry()], BANGKOK).decode("utf-8-sig")
    row = text.splitlines()[1]
    assert row == (
        '"20/5/2567 10:04:05","นายสมชาย ใจดี","FRTU-PEA-001","แก้ไขข้อมูล",'
        '"แก้ไขข้อมูล FRTU-PEA-001","PH-1","PB-1"'
    )


def test_embedded_quotes_are_doubled():
    text = export_logs_csv([_entry(details='ติดตั้ง "ใหม่"')], BANGKOK).decode("utf-8-sig")
    assert '"ติดตั้ง ""ใหม่"""' in text


def test_entry_without_snapshot_has_blank_annotations():
    text = export_logs_csv([_entry(action=ActionType.DELETE, snapshot=None)], BANGKOK).decode("utf-8-sig")
    assert text.splitlines()[1].endswith('"ลบอุปกรณ์","แก้ไขข้อมูล FRTU-PEA-001","",""')


def test_rows_keep_log_order_and_export_is_repeatable():
    entries = [_entry(id="2", frtu_serial="B"), _entry(id="1", frtu_serial="A")]
    first = export_logs_csv(entries, BANGKOK)
    assert first == export_logs_csv(entries, BANGKOK)
    lines = first.decode("utf-8-sig").splitlines()
    assert len(lines) == 3
    assert '"B"' in lines[1]
    assert '"A"' in lines[2]


def test_filename_uses_iso_date():
    assert export_filename(date(2024, 5, 20)) == "frtu_logs_2024-05-20.csv"


def test_thai_timestamp_uses_buddhist_year():
    dt = datetime(2023, 12, 31, 18, 0, 0, tzinfo=timezone.utc)
    assert format_thai_timestamp(dt, BANGKOK) == "1/1/2567 01:00:00"


def test_unknown_zone_rejected():
    with pytest.raises(ValueError):
        display_zone("Mars/Olympus")
    assert display_zone("") is None


# ---------- HTTP ----------
@pytest.fixture()
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    for k in ("MIRROR_URL", "DIRECTORY_URL"):
        monkeypatch.delenv(k, raising=False)
    return create_app().test_client()


def test_http_export_empty_is_204(client):
    r = client.get("/logs/export")
    assert r.status_code == 204
    assert r.data == b""


def test_http_export_downloads_csv(client):
    client.post("/devices/3/status", json={"status": "Online", "actor": "จนท. ทดสอบ"})
    r = client.get("/logs/export")
    assert r.status_code == 200
    assert r.content_type.startswith("text/csv")
    assert 'filename="frtu_logs_' in r.headers["Content-Disposition"]
    assert r.data.startswith(b"\xef\xbb\xbf")
    text = r.data.decode("utf-8-sig")
    assert "เปลี่ยนสถานะ" in text
    assert "FRTU-PEA-003" in text
