"""Common helpers for the editorial store."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import Engine, make_url
from sqlmodel import create_engine

SQLITE_BUSY_TIMEOUT_MS = 5_000

_DRIVER_SCHEMES = {
    "postgres": "postgresql+psycopg",
    "postgresql": "postgresql+psycopg",
    "mysql": "mysql+pymysql",
    "sqlite": "sqlite",
}


def utc_now() -> datetime:
    """Current UTC timestamp."""

    return datetime.now(tz=UTC)


def resolve_database_url(url: str, driver: str = "") -> str:
    """Map ``postgres://`` / ``mysql://`` URLs to their SQLAlchemy dialect+driver form.

    ``driver`` forces the dialect when the URL scheme alone is ambiguous.
    """

    clean = url.strip()
    if not clean:
        raise ValueError("Database URL is empty.")

    scheme, sep, rest = clean.partition("://")
    if not sep:
        raise ValueError(f"Invalid database URL: {clean!r}")

    clean_driver = driver.strip().lower()
    if clean_driver:
        if clean_driver not in _DRIVER_SCHEMES:
            raise ValueError(f"Unsupported database driver: {driver!r}")
        if "+" not in scheme:
            return f"{_DRIVER_SCHEMES[clean_driver]}://{rest}"
        return clean

    base_scheme = scheme.lower()
    if base_scheme in _DRIVER_SCHEMES:
        return f"{_DRIVER_SCHEMES[base_scheme]}://{rest}"
    return clean


def is_sqlite_url(url: str) -> bool:
    return make_url(url).get_backend_name() == "sqlite"


def build_engine(url: str, *, driver: str = "") -> Engine:
    """Build SQLAlchemy engine with a consistent per-backend policy."""

    resolved = resolve_database_url(url, driver)
    if not is_sqlite_url(resolved):
        return create_engine(resolved, pool_pre_ping=True)

    engine = create_engine(
        resolved,
        connect_args={
            "check_same_thread": False,
            "timeout": SQLITE_BUSY_TIMEOUT_MS / 1000.0,
        },
    )
    event.listen(engine, "connect", _apply_sqlite_pragmas)
    return engine


def _apply_sqlite_pragmas(dbapi_connection: Any, _: object) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute(f"PRAGMA busy_timeout = {SQLITE_BUSY_TIMEOUT_MS}")
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()
