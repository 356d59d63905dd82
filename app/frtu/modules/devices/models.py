from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class FRTUStatus(str, Enum):
    ONLINE = "Online"
    INITIALIZING = "Initializing"
    CONNECTING = "Connecting"
    OFFLINE = "Offline"


VALID_STATUSES = tuple(s.value for s in FRTUStatus)

# Persisted (camelCase) key -> attribute name
_FIELD_MAP = {
    "id": "id",
    "serialNumber": "serial_number",
    "substation": "substation",
    "feeder": "feeder",
    "location": "location",
    "ipAddress": "ip_address",
    "status": "status",
    "commandCode": "command_code",
    "eventDetails": "event_details",
    "phosData": "phos_data",
    "phboData": "phbo_data",
    "lastMaintenance": "last_maintenance",
    "technician": "technician",
}

DEVICE_FIELDS = tuple(_FIELD_MAP)


@dataclass(frozen=True)
class Device:
    """One field FRTU. Stored with camelCase keys so existing exports stay readable."""

    id: str
    serial_number: str
    substation: str
    feeder: str
    location: str
    ip_address: str = ""
    status: FRTUStatus = FRTUStatus.ONLINE
    command_code: str = ""
    event_details: str = ""
    phos_data: str = ""  # ผอส.กสฟ. annotation
    phbo_data: str = ""  # ผบอ.กบษ. annotation
    last_maintenance: str = ""
    technician: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Device":
        """Build from a persisted or request dict. Raises ValueError on an unknown status."""
        kwargs: dict[str, Any] = {}
        for key, attr in _FIELD_MAP.items():
            value = data.get(key)
            if value is None:
                continue
            kwargs[attr] = value if isinstance(value, str) else str(value)
        kwargs.setdefault("id", "")
        for required in ("serial_number", "substation", "feeder", "location"):
            kwargs.setdefault(required, "")
        if "status" in kwargs:
            kwargs["status"] = FRTUStatus(kwargs["status"])
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        out = {key: getattr(self, attr) for key, attr in _FIELD_MAP.items()}
        out["status"] = self.status.value
        return out

    def with_status(self, status: FRTUStatus) -> "Device":
        return replace(self, status=status)

    def with_id(self, device_id: str) -> "Device":
        return replace(self, id=device_id)
