"""Fill and refresh descriptive metadata for featured titles from TMDB."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Awaitable, Callable, Sequence

from ..catalog_api.schemas import FeaturedTitleModel, TitleMetadataUpdate
from ..catalog_api.stores.title_store import TitleStore
from ..catalog_api.utils.timestamps import utcnow
from .errors import ProviderError
from .providers.tmdb import TmdbClient, TmdbDetails
from .reports import PassReport

logger = logging.getLogger(__name__)


def build_metadata_update(details: TmdbDetails, *, kind: str, imdb_id: str | None = None) -> TitleMetadataUpdate:
    """Map a TMDB details body onto the catalog's descriptive columns."""

    genres = [genre.name for genre in details.genres if genre.name]
    return TitleMetadataUpdate(
        imdb_id=details.imdb_id or imdb_id,
        title=details.display_title(),
        original_title=details.original(),
        release_year=details.release_year(),
        runtime_minutes=details.runtime_minutes(),
        season_count=details.number_of_seasons if kind == "series" else None,
        overview=details.overview or None,
        rating=details.rating(),
        genres=json.dumps(genres) if genres else None,
        image_url=details.image_url(),
        youtube_url=details.trailer_url(),
        metadata_fetched_at=utcnow(),
    )


class MetadataEnricher:
    """Two passes: fill never-fetched titles, then refresh the stalest ones."""

    def __init__(
        self,
        title_store: TitleStore,
        tmdb: TmdbClient,
        *,
        stale_days: int = 30,
        stale_batch: int = 50,
        request_delay: float = 0.025,
        rate_limit_cooldown: float = 5.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._titles = title_store
        self._tmdb = tmdb
        self._stale_days = stale_days
        self._stale_batch = stale_batch
        self._request_delay = request_delay
        self._cooldown = rate_limit_cooldown
        self._sleep = sleep

    async def run(self) -> list[PassReport]:
        return [await self.fill(), await self.refresh()]

    async def fill(self) -> PassReport:
        titles = self._titles.featured_missing_metadata()
        logger.info("Metadata fill: %d featured titles without metadata", len(titles))
        return await self._process("metadata:fill", titles)

    async def refresh(self) -> PassReport:
        titles = self._titles.featured_stale_metadata(self._stale_days, self._stale_batch)
        logger.info("Metadata refresh: %d titles older than %d days", len(titles), self._stale_days)
        return await self._process("metadata:refresh", titles)

    async def _process(self, name: str, titles: Sequence[FeaturedTitleModel]) -> PassReport:
        report = PassReport(name=name, selected=len(titles))
        for title in titles:
            try:
                found = await self.enrich_title(title)
            except ProviderError as exc:
                if exc.rate_limited:
                    report.rate_limited += 1
                    logger.warning("TMDB rate limit hit at tmdb:%s; cooling down %.1fs", title.tmdb_id, self._cooldown)
                    await self._sleep(self._cooldown)
                else:
                    report.errors += 1
                    logger.error("Metadata fetch failed for %r (tmdb:%s): %s", title.title, title.tmdb_id, exc)
            else:
                if found:
                    report.enriched += 1
                else:
                    report.missed += 1
            delay = self._request_delay * (2 if title.kind == "series" else 1)
            await self._sleep(delay)
        logger.info(report.summary())
        return report

    async def enrich_title(self, title: FeaturedTitleModel) -> bool:
        """Fetch and merge metadata for one title; ``False`` when TMDB has no record."""

        imdb_id: str | None = None
        if title.kind == "series":
            results = await asyncio.gather(
                self._tmdb.details(title.kind, title.tmdb_id, title_id=title.id),
                self._tmdb.external_ids(title.tmdb_id, title_id=title.id),
                return_exceptions=True,
            )
            for result in results:
                if isinstance(result, BaseException):
                    raise result
            details, external = results
            imdb_id = external.imdb_id if external else None
        else:
            details = await self._tmdb.details(title.kind, title.tmdb_id, title_id=title.id)

        if details is None:
            logger.info("TMDB has no %s tmdb:%s (%r)", title.kind, title.tmdb_id, title.title)
            return False

        update = build_metadata_update(details, kind=title.kind, imdb_id=imdb_id)
        self._titles.update_metadata(title.tmdb_id, update)
        logger.debug("Metadata stored for %r (tmdb:%s)", title.title, title.tmdb_id)
        return True
