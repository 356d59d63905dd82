from __future__ import annotations

import logging
import re
import uuid
from datetime import date, datetime, time, tzinfo
from typing import Any

from app.frtu.audit import ActionType, AuditLogger, ExtendedSnapshot, LogEntry
from app.frtu.errors import DeserializationError, NotFoundError, ValidationError
from app.frtu.modules.devices.models import DEVICE_FIELDS, VALID_STATUSES, Device, FRTUStatus
from app.frtu.store import RecordStore

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    ("serialNumber", "Serial number is required."),
    ("substation", "Substation is required."),
    ("feeder", "Feeder is required."),
    ("location", "Location is required."),
)


_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_date(s: str | None) -> date | None:
    """Parse YYYY-MM-DD date string."""
    if not s:
        return None
    s = str(s).strip()
    if not s:
        return None
    if not _ISO_DATE.match(s):
        raise ValueError(f"Not a YYYY-MM-DD date: {s!r}")
    return date.fromisoformat(s)


def normalize_device_payload(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Strip text fields and drop nulls. A blank status is dropped so the
    device default applies. Non-text values are kept for validation to reject.
    """
    out: dict[str, Any] = {}
    for key, value in payload.items():
        if value is None:
            continue
        out[key] = value.strip() if isinstance(value, str) else value
    if out.get("status") == "":
        del out["status"]
    return out


def validate_device_payload(payload: dict[str, Any], technicians: list[str] | None = None) -> list[str]:
    """Validate a normalized device payload. Returns list of errors."""
    errors = []
    for key in DEVICE_FIELDS:
        if key in payload and not isinstance(payload[key], str):
            errors.append(f"{key} must be text.")
    if errors:
        return errors

    for key, message in REQUIRED_FIELDS:
        if not str(payload.get(key) or "").strip():
            errors.append(message)
    status = payload.get("status")
    if status is not None and status not in VALID_STATUSES:
        errors.append(f"Invalid status. Must be one of: {', '.join(VALID_STATUSES)}")
    try:
        parse_date(payload.get("lastMaintenance"))
    except (TypeError, ValueError, AttributeError):
        errors.append("Last maintenance must be a YYYY-MM-DD date.")
    if technicians is not None:
        technician = str(payload.get("technician") or "").strip()
        if technician not in technicians:
            errors.append("Technician must be selected from the directory.")
    return errors


def new_device_id() -> str:
    return uuid.uuid4().hex


class DeviceRepository:
    """
    CRUD over the stored device collection.

    Every mutation reads the whole collection under a row lock, writes the
    whole collection, then records exactly one audit entry. Nothing here
    commits; the caller's transaction covers both writes and holds the lock
    until it ends.
    """

    def __init__(self, store: RecordStore, audit: AuditLogger):
        self.store = store
        self.audit = audit

    def list(self) -> list[Device]:
        return _decode(self.store.get("devices"))

    def get(self, device_id: str) -> Device:
        for d in self.list():
            if d.id == device_id:
                return d
        raise NotFoundError(f"Device {device_id!r} not found")

    def logs(self) -> list[LogEntry]:
        return self.audit.entries()

    def save(self, device: Device, is_new: bool, actor_name: str) -> Device:
        errors = validate_device_payload(device.to_dict())
        if not (actor_name or "").strip():
            errors.append("Officer name is required.")
        if errors:
            raise ValidationError(errors)

        devices = self._locked()
        if is_new:
            if not device.id:
                device = device.with_id(new_device_id())
            if any(d.id == device.id for d in devices):
                raise ValidationError(f"Device id {device.id!r} already exists.")
            updated = [*devices, device]
            action = ActionType.CREATE
            details = f"เพิ่มอุปกรณ์ใหม่ {device.serial_number}"
        else:
            if not any(d.id == device.id for d in devices):
                raise NotFoundError(f"Device {device.id!r} not found")
            updated = [device if d.id == device.id else d for d in devices]
            action = ActionType.UPDATE
            details = f"แก้ไขข้อมูล {device.serial_number}"

        self._persist(updated)
        self.audit.record(
            LogEntry.new(
                frtu_id=device.id,
                frtu_serial=device.serial_number,
                action=action,
                details=details,
                officer_name=actor_name,
                snapshot=ExtendedSnapshot(
                    substation=device.substation,
                    feeder=device.feeder,
                    location=device.location,
                    event_details=device.event_details,
                    status=device.status.value,
                    phos_data=device.phos_data,
                    phbo_data=device.phbo_data,
                ),
            )
        )
        logger.info("Device %s %s by %s", device.serial_number, action.value.lower(), actor_name)
        return device

    def delete(self, device_id: str, serial: str, actor_name: str) -> None:
        _require_actor(actor_name)
        devices = self._locked()
        remaining = [d for d in devices if d.id != device_id]
        if len(remaining) == len(devices):
            raise NotFoundError(f"Device {device_id!r} not found")

        self._persist(remaining)
        self.audit.record(
            LogEntry.new(
                frtu_id=device_id,
                frtu_serial=serial,
                action=ActionType.DELETE,
                details=f"ลบอุปกรณ์ {serial}",
                officer_name=actor_name,
            )
        )
        logger.info("Device %s deleted by %s", serial, actor_name)

    def change_status(self, device_id: str, new_status: FRTUStatus | str, actor_name: str) -> Device:
        _require_actor(actor_name)
        try:
            status = FRTUStatus(new_status)
        except ValueError:
            raise ValidationError(f"Invalid status. Must be one of: {', '.join(VALID_STATUSES)}") from None

        devices = self._locked()
        target = next((d for d in devices if d.id == device_id), None)
        if target is None:
            raise NotFoundError(f"Device {device_id!r} not found")

        old_status = target.status
        changed = target.with_status(status)
        self._persist([changed if d.id == device_id else d for d in devices])
        self.audit.record(
            LogEntry.new(
                frtu_id=device_id,
                frtu_serial=target.serial_number,
                action=ActionType.STATUS_CHANGE,
                details=f"เปลี่ยนสถานะจาก {old_status.value} เป็น {status.value}",
                officer_name=actor_name,
            )
        )
        return changed

    def _locked(self) -> list[Device]:
        return _decode(self.store.get("devices", for_update=True))

    def _persist(self, devices: list[Device]) -> None:
        self.store.put("devices", [d.to_dict() for d in devices])


def _decode(raw_devices: list[dict[str, Any]]) -> list[Device]:
    out = []
    for raw in raw_devices:
        try:
            out.append(Device.from_dict(raw))
        except (ValueError, TypeError, AttributeError) as e:
            raise DeserializationError("devices", f"bad device {raw!r:.120}: {e}") from e
    return out


def _require_actor(actor_name: str | None) -> None:
    if not (actor_name or "").strip():
        raise ValidationError("Officer name is required.")


def filter_devices(devices: list[Device], q: str | None = None, status: str | None = None) -> list[Device]:
    """Case-insensitive search on serial or substation, plus an optional status filter."""
    needle = (q or "").strip().lower()
    status = (status or "").strip()
    out = []
    for d in devices:
        if needle and needle not in d.serial_number.lower() and needle not in d.substation.lower():
            continue
        if status and status != "ALL" and d.status.value != status:
            continue
        out.append(d)
    return out


def dashboard_stats(
    devices: list[Device],
    logs: list[LogEntry],
    start: date | None = None,
    end: date | None = None,
    tz: tzinfo | None = None,
) -> dict[str, int]:
    """
    Status counts for the dashboard.

    With no range, everything counts. Otherwise devices are kept by
    last-maintenance date and log entries by timestamp; an open start means
    2000-01-01, an open end means today, and the end day is inclusive. Day
    bounds are taken in `tz` (server local time when omitted).
    """
    if start is not None or end is not None:
        lo = start or date(2000, 1, 1)
        hi = end or datetime.now(tz).date()
        devices = [d for d in devices if _maintenance_in_range(d, lo, hi)]
        lo_dt = _day_bound(lo, time.min, tz)
        hi_dt = _day_bound(hi, time.max, tz)
        logs = [e for e in logs if lo_dt <= e.occurred_at() <= hi_dt]

    stats = {
        "total": len(devices),
        "online": 0,
        "offline": 0,
        "initializing": 0,
        "connecting": 0,
        "logs": len(logs),
    }
    for d in devices:
        stats[d.status.value.lower()] += 1
    return stats


def _day_bound(day: date, at: time, tz: tzinfo | None) -> datetime:
    if tz is None:
        return datetime.combine(day, at).astimezone()
    return datetime.combine(day, at, tzinfo=tz)


def _maintenance_in_range(d: Device, lo: date, hi: date) -> bool:
    try:
        when = parse_date(d.last_maintenance)
    except ValueError:
        return False
    return when is not None and lo <= when <= hi
