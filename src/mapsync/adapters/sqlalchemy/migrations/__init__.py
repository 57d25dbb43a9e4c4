"""Alembic migrations for the audit database."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

from mapsync.config import get_database_config

PROJECT_ROOT: Final[Path] = Path(__file__).resolve().parents[5]
PYPROJECT_PATH: Final[Path] = PROJECT_ROOT / "pyproject.toml"
MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def _alembic_options() -> dict[str, str]:
    """Return ``[tool.alembic]`` from pyproject.toml, or nothing for installed copies."""

    try:
        with PYPROJECT_PATH.open("rb") as pyproject_file:
            document = tomllib.load(pyproject_file)
    except FileNotFoundError:
        return {}
    section = document.get("tool", {}).get("alembic", {})
    return {str(key): str(value) for key, value in section.items()}


def _resolve(value: str) -> Path:
    path = Path(value)
    return path if path.is_absolute() else (PROJECT_ROOT / path).resolve()


def build_config() -> Config:
    """Return an Alembic config pointing at the bundled migration scripts."""

    options = _alembic_options()
    config = Config(toml_file=str(PYPROJECT_PATH)) if options else Config()

    script_location = options.pop("script_location", None)
    config.set_main_option(
        "script_location",
        str(_resolve(script_location) if script_location else MIGRATIONS_PATH),
    )
    prepend_sys_path = options.pop("prepend_sys_path", None)
    if prepend_sys_path is not None:
        config.set_main_option("prepend_sys_path", str(_resolve(prepend_sys_path)))
    for key, value in options.items():
        config.set_main_option(key, value)
    return config


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Upgrade the audit schema to the latest revision.

    With ``engine`` the upgrade runs on one of its connections, which keeps
    in-memory SQLite databases intact.
    """

    config = build_config()
    if engine is not None:
        with engine.begin() as connection:
            config.attributes["connection"] = connection
            command.upgrade(config, "head")
        return
    config.set_main_option("sqlalchemy.url", database_uri or get_database_config().uri)
    command.upgrade(config, "head")
