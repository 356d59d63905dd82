"""Tests for the key/value record store."""
import json

import pytest

from app.frtu import create_app
from app.frtu.constants import STORAGE_KEY_DEVICES, STORAGE_KEY_LOGS
from app.frtu.db import session_scope
from app.frtu.errors import DeserializationError
from app.frtu.models import RecordBlob
from app.frtu.store import RecordStore


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    for k in ("MIRROR_URL", "DIRECTORY_URL"):
        monkeypatch.delenv(k, raising=False)
    return create_app()


def test_first_device_read_seeds_and_persists(app):
    with session_scope(app) as s:
        devices = RecordStore(s).get("devices")
        assert [d["id"] for d in devices] == ["1", "2", "3"]

    with session_scope(app) as s:
        row = s.get(RecordBlob, STORAGE_KEY_DEVICES)
        assert row is not None
        assert [d["serialNumber"] for d in json.loads(row.value)] == ["FRTU-PEA-001", "FRTU-PEA-002", "FRTU-PEA-003"]


def test_seeded_store_is_not_reseeded(app):
    with session_scope(app) as s:
        RecordStore(s).put("devices", [])

    with session_scope(app) as s:
        assert RecordStore(s).get("devices") == []


def test_empty_log_is_not_seeded(app):
    with session_scope(app) as s:
        assert RecordStore(s).get("logs") == []
        assert s.get(RecordBlob, STORAGE_KEY_LOGS) is None


def test_put_rewrites_whole_blob(app):
    with session_scope(app) as s:
        store = RecordStore(s)
        store.put("logs", [{"id": "a"}, {"id": "b"}])
        store.put("logs", [{"id": "c"}])

    with session_scope(app) as s:
        assert RecordStore(s).get("logs") == [{"id": "c"}]


def test_thai_text_is_stored_readably(app):
    with session_scope(app) as s:
        RecordStore(s).get("devices")
        row = s.get(RecordBlob, STORAGE_KEY_DEVICES)
        assert "สถานีไฟฟ้าเชียงใหม่ 1" in row.value


def test_unknown_kind_rejected(app):
    with session_scope(app) as s:
        with pytest.raises(ValueError):
            RecordStore(s).get("employees")


def test_malformed_blob_raises(app):
    with session_scope(app) as s:
        s.add(RecordBlob(key=STORAGE_KEY_DEVICES, value="{not json"))

    with session_scope(app) as s:
        with pytest.raises(DeserializationError) as exc:
            RecordStore(s).get("devices")
        assert exc.value.key == STORAGE_KEY_DEVICES

    # The corrupted value is left in place, not replaced by the seed.
    with session_scope(app) as s:
        assert s.get(RecordBlob, STORAGE_KEY_DEVICES).value == "{not json"


def test_non_list_blob_raises(app):
    with session_scope(app) as s:
        s.add(RecordBlob(key=STORAGE_KEY_LOGS, value='{"id": "1"}'))

    with session_scope(app) as s:
        with pytest.raises(DeserializationError):
            RecordStore(s).get("logs")


def test_corrupted_devices_surface_as_500(app):
    with session_scope(app) as s:
        s.add(RecordBlob(key=STORAGE_KEY_DEVICES, value="[[["))

    r = app.test_client().get("/devices")
    assert r.status_code == 500
    assert "unreadable" in r.json["error"]
