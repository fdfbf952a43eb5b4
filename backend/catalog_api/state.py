"""Shared state container for the catalog read API."""
from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.engine import Engine

from .db import create_engine_from_settings, init_database
from .settings import CatalogSettings
from .stores.catalog_store import CatalogQueries


@dataclass(slots=True)
class AppState:
    """Encapsulates the engine and read stores shared across routers."""

    settings: CatalogSettings
    engine: Engine
    catalog: CatalogQueries

    def __init__(self, settings: CatalogSettings) -> None:
        self.settings = settings
        self.engine = create_engine_from_settings(settings)
        init_database(self.engine)
        self.catalog = CatalogQueries(self.engine)

    def close(self) -> None:
        self.engine.dispose()
