"""Filesystem helpers for catalog storage and published artifacts."""
from __future__ import annotations

from pathlib import Path

from platformdirs import user_data_dir


APP_NAME = "Streamguide"
APP_AUTHOR = "Streamguide"


def default_data_directory() -> Path:
    """Return the platform-appropriate directory holding the catalog cache."""

    return Path(user_data_dir(APP_NAME, APP_AUTHOR))


def default_database_url() -> str:
    """Return the SQLite URL used when no storage location is configured."""

    return f"sqlite:///{default_data_directory() / 'catalog.db'}"


def default_publish_path() -> str:
    """Return the default location of the published catalog projection."""

    return str(default_data_directory() / "shows.json")


def ensure_parent_directory(path: str | Path) -> Path:
    """Expand a file path and create its parent directory if missing."""

    resolved = Path(path).expanduser()
    resolved.parent.mkdir(parents=True, exist_ok=True)
    return resolved.resolve()
