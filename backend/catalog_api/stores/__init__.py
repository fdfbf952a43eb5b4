"""Database-backed stores for the catalog cache."""
from .availability_store import AvailabilityStore
from .catalog_store import CatalogQueries
from .featured_store import FeaturedStore, derive_enrich_status
from .quota_store import QuotaStore
from .title_store import TitleStore

__all__ = [
    "AvailabilityStore",
    "CatalogQueries",
    "FeaturedStore",
    "QuotaStore",
    "TitleStore",
    "derive_enrich_status",
]
