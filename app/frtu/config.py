import os
from dataclasses import dataclass

DEFAULT_SHEET_ID = "1rI_yoyNOLKhzmxt2jCWT-bKkcn14TPylfATAifKlIYI"


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str
    database_url: str
    log_level: str

    google_service_account_email: str
    google_private_key: str
    google_sheet_id: str
    log_sheet_title: str
    directory_sheet_gid: int
    directory_range: str

    mirror_url: str
    directory_url: str
    http_timeout_seconds: int
    mirror_workers: int
    display_timezone: str


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getenv_int(name: str, default: int) -> int:
    raw = _getenv(name)
    if not raw:
        return default
    return int(raw)


def load_settings() -> Settings:
    return Settings(
        secret_key=_getenv("SECRET_KEY", "change-me"),
        env=_getenv("ENV", "development"),
        database_url=_getenv("DATABASE_URL", "sqlite:///frtu.db"),
        log_level=_getenv("LOG_LEVEL", "INFO").upper(),
        google_service_account_email=_getenv("GOOGLE_SERVICE_ACCOUNT_EMAIL", ""),
        # Keys pasted into env dashboards arrive with literal "\n" sequences.
        google_private_key=_getenv("GOOGLE_PRIVATE_KEY", "").replace("\\n", "\n"),
        google_sheet_id=_getenv("GOOGLE_SHEET_ID", DEFAULT_SHEET_ID),
        log_sheet_title=_getenv("LOG_SHEET_TITLE", "database"),
        directory_sheet_gid=_getenv_int("DIRECTORY_SHEET_GID", 277093410),
        directory_range=_getenv("DIRECTORY_RANGE", "A1:A500"),
        mirror_url=_getenv("MIRROR_URL", ""),
        directory_url=_getenv("DIRECTORY_URL", ""),
        http_timeout_seconds=_getenv_int("HTTP_TIMEOUT_SECONDS", 10),
        mirror_workers=_getenv_int("MIRROR_WORKERS", 2),
        display_timezone=_getenv("DISPLAY_TIMEZONE", "Asia/Bangkok"),
    )


def load_config() -> dict:
    s = load_settings()
    return {
        "SECRET_KEY": s.secret_key,
        "ENV": s.env,
        "DATABASE_URL": s.database_url,
        "LOG_LEVEL": s.log_level,
        "GOOGLE_SERVICE_ACCOUNT_EMAIL": s.google_service_account_email,
        "GOOGLE_PRIVATE_KEY": s.google_private_key,
        "GOOGLE_SHEET_ID": s.google_sheet_id,
        "LOG_SHEET_TITLE": s.log_sheet_title,
        "DIRECTORY_SHEET_GID": s.directory_sheet_gid,
        "DIRECTORY_RANGE": s.directory_range,
        "MIRROR_URL": s.mirror_url,
        "DIRECTORY_URL": s.directory_url,
        "HTTP_TIMEOUT_SECONDS": s.http_timeout_seconds,
        "MIRROR_WORKERS": s.mirror_workers,
        "DISPLAY_TIMEZONE": s.display_timezone,
    }


def sheet_url(sheet_id: str, gid: int = 0) -> str:
    return f"https://docs.google.com/spreadsheets/d/{sheet_id}/edit?gid={gid}#gid={gid}"
