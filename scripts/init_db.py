import sys
from pathlib import Path

# Ensure repo root is on sys.path when running as a script (Windows-friendly).
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.frtu.store import RecordStore
from scripts._db_utils import script_database_url, script_session


def seed_only(*, database_url: str | None = None) -> None:
    """
    Write the sample device set if the store is empty. Idempotent: an
    existing device blob is left untouched.
    """
    with script_session(script_database_url(database_url)) as s:
        devices = RecordStore(s).get("devices")
        print(f"Device store holds {len(devices)} devices.", flush=True)


if __name__ == "__main__":
    seed_only()
