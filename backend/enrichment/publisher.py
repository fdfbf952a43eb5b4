"""Write the published catalog projection to disk."""
from __future__ import annotations

import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path

from ..catalog_api.schemas import PublishedCatalog
from ..catalog_api.stores.catalog_store import CatalogQueries
from ..catalog_api.utils.paths import ensure_parent_directory
from ..catalog_api.utils.timestamps import utcnow

logger = logging.getLogger(__name__)


class Publisher:
    def __init__(self, catalog: CatalogQueries) -> None:
        self._catalog = catalog

    def build(self, *, now: datetime | None = None) -> PublishedCatalog:
        titles = self._catalog.published_titles()
        return PublishedCatalog(generated_at=now or utcnow(), count=len(titles), titles=titles)

    def publish(self, path: str | Path, *, now: datetime | None = None) -> PublishedCatalog:
        """Serialise the projection as JSON and swap it into place atomically."""

        catalog = self.build(now=now)
        target = ensure_parent_directory(path)
        fd, temp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(catalog.model_dump_json(indent=2))
            os.replace(temp_name, target)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise
        logger.info("Published %d titles to %s", catalog.count, target)
        return catalog
