from __future__ import annotations

import os
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker


def script_database_url(explicit: str | None = None) -> str:
    return (explicit or os.environ.get("DATABASE_URL") or "sqlite:///frtu.db").strip()


@contextmanager
def script_session(db_url: str):
    """Standalone session for scripts; commits on success, disposes the engine."""
    engine = create_engine(db_url, future=True, pool_pre_ping=True)
    s: Session = sessionmaker(bind=engine, class_=Session, autoflush=False, expire_on_commit=False)()
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()
        engine.dispose()
