"""Record which tracked services carry each featured title, via TMDB watch providers."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable

from ..catalog_api.schemas import AvailabilityFact, FeaturedTitleModel
from ..catalog_api.stores.availability_store import AvailabilityStore
from ..catalog_api.stores.title_store import TitleStore
from .errors import ProviderError
from .providers.tmdb import TmdbClient, TmdbWatchProviders
from .reports import PassReport
from .service_map import TMDB_OFFER_ACCESS, tmdb_service

logger = logging.getLogger(__name__)

PRESENCE_SOURCE = "tmdb_providers"


def presence_facts(
    title_id: int, providers: TmdbWatchProviders, region: str, tracked: Iterable[str]
) -> list[AvailabilityFact]:
    """Translate one region block into URL-less availability facts."""

    block = providers.results.get(region.upper())
    if block is None:
        return []
    tracked_ids = set(tracked)
    facts: dict[tuple[str, str], AvailabilityFact] = {}
    for offer_key, entries in block.offers().items():
        access_type = TMDB_OFFER_ACCESS[offer_key]
        for entry in entries:
            service_id = tmdb_service(entry.provider_id)
            if service_id is None or service_id not in tracked_ids:
                continue
            facts.setdefault(
                (service_id, access_type),
                AvailabilityFact(
                    title_id=title_id,
                    service_id=service_id,
                    access_type=access_type,
                    stream_url=None,
                    source=PRESENCE_SOURCE,
                ),
            )
    return list(facts.values())


class PresenceEnricher:
    """Adds presence rows for featured titles TMDB has not been asked about yet."""

    def __init__(
        self,
        title_store: TitleStore,
        availability_store: AvailabilityStore,
        tmdb: TmdbClient,
        *,
        region: str,
        tracked_services: Iterable[str],
        limit: int = 500,
        request_delay: float = 0.025,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._titles = title_store
        self._availability = availability_store
        self._tmdb = tmdb
        self._region = region.upper()
        self._tracked = list(tracked_services)
        self._limit = limit
        self._request_delay = request_delay
        self._sleep = sleep

    async def run(self) -> PassReport:
        titles = self._titles.featured_missing_presence(PRESENCE_SOURCE, self._limit)
        report = PassReport(name="presence", selected=len(titles))
        logger.info("Provider presence: %d titles to check in %s", len(titles), self._region)
        for title in titles:
            try:
                written = await self.enrich_title(title)
            except ProviderError as exc:
                report.errors += 1
                logger.error("Watch providers failed for %r (tmdb:%s): %s", title.title, title.tmdb_id, exc)
            else:
                if written:
                    report.enriched += 1
                    report.rows_written += written
                else:
                    report.missed += 1
            await self._sleep(self._request_delay)
        logger.info(report.summary())
        return report

    async def enrich_title(self, title: FeaturedTitleModel) -> int:
        providers = await self._tmdb.watch_providers(title.kind, title.tmdb_id, title_id=title.id)
        if providers is None:
            logger.debug("TMDB does not track providers for tmdb:%s", title.tmdb_id)
            return 0
        facts = presence_facts(title.id, providers, self._region, self._tracked)
        for fact in facts:
            self._availability.upsert(fact)
        logger.debug("%r: %d presence rows", title.title, len(facts))
        return len(facts)
