from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass

from app.frtu.constants import INITIAL_DIRECTORY
from app.frtu.errors import DeserializationError, TransientNetworkError
from app.frtu.store import RecordStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectoryClient:
    """Fetches the technician name list from the remote directory endpoint."""

    url: str
    timeout_seconds: int = 10

    def fetch_names(self) -> list[str]:
        req = urllib.request.Request(self.url, method="GET")
        req.add_header("Accept", "application/json")
        try:
            with urllib.request.urlopen(req, timeout=self.timeout_seconds) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as e:
            raise TransientNetworkError(f"HTTP {e.code} from directory endpoint") from e
        except (urllib.error.URLError, OSError) as e:
            raise TransientNetworkError(f"Directory endpoint unreachable: {e}") from e

        try:
            data = json.loads(raw.decode("utf-8"))
        except ValueError as e:
            raise TransientNetworkError("Invalid JSON from directory endpoint") from e
        if not isinstance(data, list) or not all(isinstance(n, str) for n in data):
            raise TransientNetworkError("Directory endpoint did not return a list of names")
        return data


class DirectoryLookup:
    def __init__(self, store: RecordStore, client: DirectoryClient | None = None):
        self.store = store
        self.client = client

    def resolve(self) -> list[str]:
        """
        Remote list when available, else the last cached list, else the seed.

        Never raises. A successful non-empty fetch replaces the cache.
        """
        if self.client is not None:
            try:
                names = self.client.fetch_names()
            except TransientNetworkError as e:
                logger.warning("Directory fetch failed, using cached list: %s", e)
            else:
                if names:
                    self.store.put_directory(names)
                    return names
                logger.warning("Directory endpoint returned no names, using cached list")

        try:
            cached = self.store.get_directory()
        except DeserializationError as e:
            logger.error("Directory cache unreadable, resetting to seed list: %s", e)
            cached = None
        if cached:
            return cached

        seed = list(INITIAL_DIRECTORY)
        self.store.put_directory(seed)
        return seed
