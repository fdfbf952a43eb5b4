"""Published catalog endpoints."""
from fastapi import APIRouter, Depends

from ..dependencies import get_catalog
from ..schemas import PublishedTitle, ServiceModel
from ..stores.catalog_store import CatalogQueries

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/shows", response_model=list[PublishedTitle])
def list_shows(catalog: CatalogQueries = Depends(get_catalog)) -> list[PublishedTitle]:
    """Return featured titles with their visible streaming services."""

    return catalog.published_titles()


@router.get("/services", response_model=list[ServiceModel])
def list_services(catalog: CatalogQueries = Depends(get_catalog)) -> list[ServiceModel]:
    """Return the streaming services the catalog tracks."""

    return catalog.services()
