from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import event
from sqlalchemy.orm import Session

from app.frtu.errors import DeserializationError
from app.frtu.store import RecordStore

if TYPE_CHECKING:
    from app.frtu.mirror import SheetMirror

logger = logging.getLogger(__name__)

_PENDING_MIRROR = "frtu.pending_mirror"


class ActionType(str, Enum):
    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"
    STATUS_CHANGE = "StatusChange"
    TEST = "Test"

    @property
    def label(self) -> str:
        return ACTION_LABELS[self]


ACTION_LABELS = {
    ActionType.CREATE: "เพิ่มอุปกรณ์",
    ActionType.UPDATE: "แก้ไขข้อมูล",
    ActionType.DELETE: "ลบอุปกรณ์",
    ActionType.STATUS_CHANGE: "เปลี่ยนสถานะ",
    ActionType.TEST: "ทดสอบสัญญาณ",
}

_SNAPSHOT_KEYS = ("substation", "feeder", "location", "eventDetails", "status", "phosData", "phboData")


@dataclass(frozen=True)
class ExtendedSnapshot:
    """Device fields captured at save time so history survives later edits."""

    substation: str = ""
    feeder: str = ""
    location: str = ""
    event_details: str = ""
    status: str = ""
    phos_data: str = ""
    phbo_data: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "substation": self.substation,
            "feeder": self.feeder,
            "location": self.location,
            "eventDetails": self.event_details,
            "status": self.status,
            "phosData": self.phos_data,
            "phboData": self.phbo_data,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExtendedSnapshot":
        return cls(
            substation=data.get("substation") or "",
            feeder=data.get("feeder") or "",
            location=data.get("location") or "",
            event_details=data.get("eventDetails") or "",
            status=data.get("status") or "",
            phos_data=data.get("phosData") or "",
            phbo_data=data.get("phboData") or "",
        )


@dataclass(frozen=True)
class LogEntry:
    id: str
    frtu_id: str
    frtu_serial: str
    action: ActionType
    details: str
    officer_name: str
    timestamp: str
    snapshot: ExtendedSnapshot | None = None

    @classmethod
    def new(
        cls,
        *,
        frtu_id: str,
        frtu_serial: str,
        action: ActionType,
        details: str,
        officer_name: str,
        snapshot: ExtendedSnapshot | None = None,
    ) -> "LogEntry":
        now = datetime.now(timezone.utc)
        return cls(
            id=str(time.time_ns() // 1_000_000),
            frtu_id=frtu_id,
            frtu_serial=frtu_serial,
            action=action,
            details=details,
            officer_name=officer_name,
            timestamp=now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            snapshot=snapshot,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "frtuId": self.frtu_id,
            "frtuSerial": self.frtu_serial,
            "action": self.action.value,
            "details": self.details,
            "officerName": self.officer_name,
            "timestamp": self.timestamp,
        }
        if self.snapshot is not None:
            out.update(self.snapshot.to_dict())
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LogEntry":
        snapshot = ExtendedSnapshot.from_dict(data) if any(k in data for k in _SNAPSHOT_KEYS) else None
        return cls(
            id=str(data["id"]),
            frtu_id=str(data.get("frtuId") or ""),
            frtu_serial=str(data.get("frtuSerial") or ""),
            action=ActionType(data["action"]),
            details=data.get("details") or "",
            officer_name=data.get("officerName") or "",
            timestamp=data["timestamp"],
            snapshot=snapshot,
        )

    def occurred_at(self) -> datetime:
        """Timestamp as an aware datetime (a trailing Z is accepted)."""
        s = self.timestamp.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        dt = datetime.fromisoformat(s)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt

    def mirror_payload(self) -> dict[str, str]:
        snap = self.snapshot or ExtendedSnapshot()
        return {
            "officerName": self.officer_name,
            "frtuSerial": self.frtu_serial,
            "action": self.action.label,
            "details": self.details,
            "eventDetails": snap.event_details,
            "phosData": snap.phos_data,
            "phboData": snap.phbo_data,
            "status": snap.status,
        }


class AuditLogger:
    """
    Append-only audit log, newest entry first.

    The remote mirror is handed the entry only once the store's session
    commits; a rollback drops it.
    """

    def __init__(self, store: RecordStore, mirror: "SheetMirror | None" = None):
        self.store = store
        self.mirror = mirror

    def record(self, entry: LogEntry) -> LogEntry:
        current = self.store.get("logs", for_update=True)
        self.store.put("logs", [entry.to_dict(), *current])
        if self.mirror is not None:
            self.store.session.info.setdefault(_PENDING_MIRROR, []).append((self.mirror, entry))
        return entry

    def entries(self) -> list[LogEntry]:
        out = []
        for raw in self.store.get("logs"):
            try:
                out.append(LogEntry.from_dict(raw))
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                raise DeserializationError("logs", f"bad entry {raw!r:.120}: {e}") from e
        return out


@event.listens_for(Session, "after_commit")
def _forward_pending(session: Session) -> None:
    for mirror, entry in session.info.pop(_PENDING_MIRROR, []):
        mirror.forward(entry)


@event.listens_for(Session, "after_rollback")
def _drop_pending(session: Session) -> None:
    dropped = session.info.pop(_PENDING_MIRROR, None)
    if dropped:
        logger.info("Rolled back; %d audit entries not mirrored", len(dropped))
