from __future__ import annotations

from datetime import datetime

from flask import Blueprint, Response, current_app, jsonify, request

from app.frtu.audit import AuditLogger
from app.frtu.config import sheet_url
from app.frtu.db import db_session
from app.frtu.errors import ValidationError
from app.frtu.modules.devices.models import Device
from app.frtu.modules.devices.service import (
    DeviceRepository,
    dashboard_stats,
    filter_devices,
    normalize_device_payload,
    parse_date,
    validate_device_payload,
)
from app.frtu.modules.directory.service import DirectoryLookup
from app.frtu.modules.reports.service import export_filename, export_logs_csv
from app.frtu.store import RecordStore
from app.frtu.utils import display_zone

bp = Blueprint("devices", __name__)


def _repository() -> DeviceRepository:
    store = RecordStore(db_session())
    return DeviceRepository(store, AuditLogger(store, current_app.extensions.get("frtu.mirror")))


def _directory() -> DirectoryLookup:
    return DirectoryLookup(RecordStore(db_session()), current_app.extensions.get("frtu.directory_client"))


def _payload() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data


def _actor(data: dict) -> str:
    actor = str(data.get("actor") or "").strip()
    if not actor:
        raise ValidationError("Officer name (actor) is required.")
    return actor


def _device_from_payload(data: dict, device_id: str = "") -> Device:
    """Body ids are ignored: creates get a fresh id, updates use the URL's."""
    fields = normalize_device_payload({k: v for k, v in data.items() if k not in ("actor", "id")})
    errors = validate_device_payload(fields, _directory().resolve())
    if errors:
        raise ValidationError(errors)
    if device_id:
        fields["id"] = device_id
    return Device.from_dict(fields)


def _tz():
    return display_zone(current_app.config.get("DISPLAY_TIMEZONE"))


# ---------- Devices ----------
@bp.get("/devices")
def device_list():
    repo = _repository()
    devices = filter_devices(repo.list(), request.args.get("q"), request.args.get("status"))
    db_session().commit()  # persists the seed on first read
    return jsonify([d.to_dict() for d in devices])


@bp.get("/devices/<device_id>")
def device_detail(device_id: str):
    device = _repository().get(device_id)
    db_session().commit()
    return jsonify(device.to_dict())


@bp.post("/devices")
def device_create():
    data = _payload()
    actor = _actor(data)
    device = _device_from_payload(data)
    saved = _repository().save(device, True, actor)
    db_session().commit()
    return jsonify(saved.to_dict()), 201


@bp.put("/devices/<device_id>")
def device_update(device_id: str):
    data = _payload()
    actor = _actor(data)
    device = _device_from_payload(data, device_id)
    saved = _repository().save(device, False, actor)
    db_session().commit()
    return jsonify(saved.to_dict())


@bp.delete("/devices/<device_id>")
def device_delete(device_id: str):
    data = _payload()
    actor = _actor(data)
    repo = _repository()
    serial = str(data.get("serialNumber") or "").strip() or repo.get(device_id).serial_number
    repo.delete(device_id, serial, actor)
    db_session().commit()
    return jsonify({"ok": True})


@bp.post("/devices/<device_id>/status")
def device_change_status(device_id: str):
    data = _payload()
    actor = _actor(data)
    status = str(data.get("status") or "").strip()
    device = _repository().change_status(device_id, status, actor)
    db_session().commit()
    return jsonify(device.to_dict())


# ---------- Logs ----------
@bp.get("/logs")
def log_list():
    return jsonify([e.to_dict() for e in _repository().logs()])


@bp.get("/logs/export")
def log_export():
    data = export_logs_csv(_repository().logs(), _tz())
    if data is None:
        return Response(status=204)
    filename = export_filename(datetime.now(_tz()).date())
    return Response(
        data,
        content_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ---------- Dashboard / lookups ----------
@bp.get("/dashboard")
def dashboard():
    try:
        start = parse_date(request.args.get("start"))
        end = parse_date(request.args.get("end"))
    except ValueError:
        raise ValidationError("start/end must be YYYY-MM-DD dates.") from None
    repo = _repository()
    stats = dashboard_stats(repo.list(), repo.logs(), start, end, _tz())
    db_session().commit()
    return jsonify(stats)


@bp.get("/directory")
def directory():
    names = _directory().resolve()
    db_session().commit()
    return jsonify(names)


@bp.get("/sheet-links")
def sheet_links():
    sheet_id = current_app.config["GOOGLE_SHEET_ID"]
    return jsonify(
        {
            "logSheet": sheet_url(sheet_id),
            "directorySheet": sheet_url(sheet_id, current_app.config["DIRECTORY_SHEET_GID"]),
        }
    )
