"""Database helpers for the catalog cache."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import event
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from . import models  # noqa: F401  registers every table on SQLModel.metadata
from .models import ServiceRecord
from .reference import DEFAULT_SERVICES, ServiceDefinition
from .settings import CatalogSettings

logger = logging.getLogger(__name__)


def _ensure_sqlite_path(database_url: str) -> None:
    """Create parent directories when using a SQLite URL."""

    if database_url.startswith("sqlite:///"):
        path_part = database_url.removeprefix("sqlite:///").split("?")[0]
        if path_part and path_part != ":memory:":
            db_path = Path(path_part)
            db_path.parent.mkdir(parents=True, exist_ok=True)


def _configure_sqlite(engine: Engine, *, file_backed: bool) -> None:
    @event.listens_for(engine, "connect")
    def _set_pragmas(dbapi_connection, _connection_record) -> None:  # pragma: no cover - driver hook
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if file_backed:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()


def create_engine_from_settings(settings: CatalogSettings) -> Engine:
    """Create a SQLModel engine using catalog settings."""

    _ensure_sqlite_path(settings.database_url)
    is_sqlite = settings.database_url.startswith("sqlite")
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    engine = create_engine(settings.database_url, echo=settings.database_echo, connect_args=connect_args)
    if is_sqlite:
        _configure_sqlite(engine, file_backed=":memory:" not in settings.database_url)
    return engine


def init_database(engine: Engine, services: tuple[ServiceDefinition, ...] = DEFAULT_SERVICES) -> None:
    """Create tables idempotently and seed the service reference rows."""

    SQLModel.metadata.create_all(engine)
    rows = [
        {
            "id": service.id,
            "display_name": service.display_name,
            "is_free": service.is_free,
            "color_hex": service.color_hex,
            "base_url": service.base_url,
        }
        for service in services
    ]
    statement = sqlite_insert(ServiceRecord).values(rows).on_conflict_do_nothing(
        index_elements=["id"]
    )
    with session_scope(engine) as session:
        session.exec(statement)
    logger.info("Schema initialised; %d services available", len(rows))


@contextmanager
def session_scope(engine: Engine) -> Iterator[Session]:
    """Yield a SQLModel session that commits on success and always closes."""

    session = Session(engine)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
