#!/usr/bin/env python3
"""
Release phase: bring the record store schema to head, then make sure the
device blob exists.

Usage:
  python scripts/release.py [--skip-seed]

Reads DATABASE_URL (required) and ENV from the environment.
"""
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def release_database_url() -> str:
    db_url = (os.environ.get("DATABASE_URL") or "").strip()
    if not db_url:
        raise RuntimeError("DATABASE_URL is not set; refusing to migrate an implicit sqlite file.")
    env = (os.environ.get("ENV") or "").strip().lower()
    if env in ("prod", "production") and db_url.startswith("sqlite"):
        raise RuntimeError("ENV is production but DATABASE_URL points at sqlite.")
    return db_url


def upgrade_schema(db_url: str) -> None:
    from alembic import command
    from alembic.config import Config

    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", db_url)
    command.upgrade(cfg, "head")


def run_release(*, seed: bool = True) -> None:
    db_url = release_database_url()
    print("[release] upgrading record_blobs schema", flush=True)
    upgrade_schema(db_url)
    if seed:
        from scripts.init_db import seed_only

        seed_only(database_url=db_url)
    print("[release] ok", flush=True)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Migrate and seed the FRTU record store.")
    parser.add_argument("--skip-seed", action="store_true", help="only run migrations")
    args = parser.parse_args(argv)
    run_release(seed=not args.skip_seed)
    return 0


if __name__ == "__main__":
    sys.exit(main())
