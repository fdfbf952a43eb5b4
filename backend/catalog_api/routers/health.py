"""Health endpoints."""
from fastapi import APIRouter, Depends

from ..dependencies import get_catalog
from ..schemas import HealthStatus
from ..stores.catalog_store import CatalogQueries

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthStatus)
def get_health(catalog: CatalogQueries = Depends(get_catalog)) -> HealthStatus:
    """Return service heartbeat information."""

    return HealthStatus(shows=catalog.featured_count())
