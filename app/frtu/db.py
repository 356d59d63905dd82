from __future__ import annotations

from contextlib import contextmanager
from collections.abc import Generator

from flask import Flask, current_app, g
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from app.frtu.models import Base


def init_db(app: Flask) -> None:
    db_url = app.config["DATABASE_URL"]
    engine_kwargs: dict[str, object] = {"future": True, "pool_pre_ping": True}
    if db_url.startswith("sqlite"):
        # Request threads and the mirror pool share one file.
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        engine_kwargs.update({"pool_recycle": 1800, "pool_size": 5, "max_overflow": 10})
    engine = create_engine(db_url, **engine_kwargs)
    if engine.dialect.name == "sqlite":
        _serialize_sqlite_writers(engine)

    # The store is a single table; migrations own it in production.
    if app.config.get("ENV") not in ("prod", "production"):
        Base.metadata.create_all(bind=engine)

    app.extensions["sqlalchemy_engine"] = engine
    app.extensions["sqlalchemy_sessionmaker"] = sessionmaker(
        bind=engine,
        class_=Session,
        autoflush=False,
        expire_on_commit=False,
    )


def _serialize_sqlite_writers(engine: Engine) -> None:
    """
    SQLite ignores FOR UPDATE, so each transaction opens with BEGIN IMMEDIATE
    and takes the write lock before its first read. A second transaction waits
    (up to the driver's busy timeout) until the first commits.
    """

    @event.listens_for(engine, "connect")
    def _no_driver_begin(dbapi_connection, _record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def db_session() -> Session:
    """
    Request-scoped session. Use inside request handlers.
    """
    s = getattr(g, "db_session", None)
    if s is None:
        s = current_app.extensions["sqlalchemy_sessionmaker"]()
        g.db_session = s
    return s


def teardown_db_session(_exc: BaseException | None) -> None:
    s: Session | None = g.pop("db_session", None)
    if s is not None:
        s.close()


@contextmanager
def session_scope(app: Flask) -> Generator[Session, None, None]:
    """
    Non-request helper for scripts and tests: commits on success, rolls back on error.
    """
    s: Session = app.extensions["sqlalchemy_sessionmaker"]()
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()
