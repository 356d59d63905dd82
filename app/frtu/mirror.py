from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from app.frtu.background import BackgroundDispatcher
from app.frtu.errors import TransientNetworkError

if TYPE_CHECKING:
    from app.frtu.audit import LogEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SheetMirrorClient:
    """POSTs one audit entry to the remote append endpoint."""

    url: str
    timeout_seconds: int = 10

    def post_entry(self, payload: dict[str, Any]) -> dict[str, Any]:
        body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        req = urllib.request.Request(self.url, data=body, method="POST")
        req.add_header("Content-Type", "application/json")
        req.add_header("Accept", "application/json")
        try:
            with urllib.request.urlopen(req, timeout=self.timeout_seconds) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as e:
            try:
                detail = e.read().decode("utf-8", errors="ignore")
            except OSError:
                detail = ""
            raise TransientNetworkError(f"HTTP {e.code} from sheet mirror: {detail[:300]}") from e
        except (urllib.error.URLError, OSError) as e:
            raise TransientNetworkError(f"Sheet mirror unreachable: {e}") from e

        try:
            reply = json.loads(raw.decode("utf-8"))
        except ValueError as e:
            raise TransientNetworkError("Invalid JSON from sheet mirror") from e
        if not isinstance(reply, dict) or reply.get("error") or not reply.get("success"):
            raise TransientNetworkError(f"Sheet mirror rejected entry: {reply!r}"[:300])
        return reply


class SheetMirror:
    """Best-effort remote copy of audit entries. The local log stays authoritative."""

    def __init__(self, client: SheetMirrorClient | None, dispatcher: BackgroundDispatcher):
        self.client = client
        self.dispatcher = dispatcher

    def forward(self, entry: "LogEntry") -> None:
        if self.client is None:
            logger.debug("Sheet mirror disabled; entry %s kept local only", entry.id)
            return
        self.dispatcher.submit(f"sheet-mirror:{entry.id}", self.client.post_entry, entry.mirror_payload())
