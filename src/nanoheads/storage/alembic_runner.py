"""Utilities to run Alembic migrations programmatically."""

from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config

from nanoheads.storage.common import resolve_database_url


def upgrade_head(database_url: str, *, driver: str = "") -> None:
    """Apply Alembic migrations up to head for the given database."""

    root_dir = Path(__file__).resolve().parents[3]
    alembic_ini = root_dir / "alembic.ini"
    alembic_dir = root_dir / "alembic"

    config = Config(str(alembic_ini))
    config.set_main_option("script_location", str(alembic_dir))
    # ConfigParser interpolation treats '%' as special.
    config.set_main_option(
        "sqlalchemy.url",
        resolve_database_url(database_url, driver).replace("%", "%%"),
    )
    command.upgrade(config, "head")
