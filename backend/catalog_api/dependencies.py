"""FastAPI dependencies for the catalog read API."""
from fastapi import Depends, Request

from .state import AppState
from .stores.catalog_store import CatalogQueries


def get_app_state(request: Request) -> AppState:
    """Resolve the shared application state from the FastAPI request."""
    return request.app.state.app_state


def get_catalog(app_state: AppState = Depends(get_app_state)) -> CatalogQueries:
    """Return the read-side catalog queries."""
    return app_state.catalog
