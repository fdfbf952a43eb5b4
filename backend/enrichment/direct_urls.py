"""Budgeted direct-URL enrichment driven by a provider adapter."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable

from ..catalog_api.schemas import AvailabilityFact, EnrichStatus, FeaturedTitleModel
from ..catalog_api.stores.availability_store import AvailabilityStore
from ..catalog_api.stores.featured_store import FeaturedStore, derive_enrich_status
from .errors import BudgetExhausted, ProviderError
from .providers.base import DirectUrlProvider, ProviderLookup
from .quota import BudgetGuard
from .reports import PassReport

logger = logging.getLogger(__name__)


class DirectUrlEnricher:
    """Fetches deep links for featured titles until the provider's budget runs out."""

    def __init__(
        self,
        provider: DirectUrlProvider,
        *,
        featured_store: FeaturedStore,
        availability_store: AvailabilityStore,
        guard: BudgetGuard,
        tracked_services: Iterable[str],
        delay: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._provider = provider
        self._featured = featured_store
        self._availability = availability_store
        self._guard = guard
        self._tracked = set(tracked_services)
        self._delay = provider.delay if delay is None else delay
        self._sleep = sleep

    async def run(self) -> PassReport:
        name = self._provider.name
        report = PassReport(name=name)
        if not self._provider.enabled:
            logger.warning("%s API key not configured; skipping direct-URL enrichment", name)
            report.stopped_reason = "disabled"
            return report

        try:
            self._guard.check()
        except BudgetExhausted as exc:
            logger.info("%s: %s; skipping", name, exc.reason)
            report.stopped_reason = exc.reason
            return report

        remaining = self._guard.remaining()
        titles = self._featured.titles_for_url_enrichment(name, remaining)
        report.selected = len(titles)
        logger.info("%s: processing %d titles (%d calls remaining)", name, len(titles), remaining)

        for title in titles:
            try:
                self._guard.check()
                await self._enrich(title, report)
            except BudgetExhausted as exc:
                logger.info("%s: %s; stopping", name, exc.reason)
                report.stopped_reason = exc.reason
                break
            await self._sleep(self._delay)

        logger.info(report.summary())
        return report

    async def _enrich(self, title: FeaturedTitleModel, report: PassReport) -> None:
        name = self._provider.name
        if self._featured.get_status(title.id) == "complete":
            logger.debug("%s: %r already complete", name, title.title)
            report.skipped += 1
            return

        known_id = self._featured.provider_title_id(title.id, name)
        try:
            lookup = await self._provider.lookup(title, known_id)
        except ProviderError as exc:
            report.errors += 1
            logger.error("%s: lookup for %r failed, status left as is: %s", name, title.title, exc)
            return

        if lookup is None:
            self._featured.record_provider_link(title.id, name, outcome="missing")
            self._featured.set_status(title.id, "failed")
            report.missed += 1
            logger.info("%s: %r not found, marked failed", name, title.title)
            return

        written = self._store_lookup(title, lookup)
        status = self._recompute_status(title.id)
        report.enriched += 1
        report.rows_written += written
        logger.info("%s: %r -> %d URLs, status %s", name, title.title, written, status)

    def _store_lookup(self, title: FeaturedTitleModel, lookup: ProviderLookup) -> int:
        written = 0
        for offer in lookup.offers:
            if offer.service_id not in self._tracked:
                continue
            self._availability.upsert(
                AvailabilityFact(
                    title_id=title.id,
                    service_id=offer.service_id,
                    access_type=offer.access_type,
                    stream_url=offer.stream_url,
                    price=offer.price,
                    source=self._provider.name,
                )
            )
            written += 1
        self._featured.record_provider_link(
            title.id, self._provider.name, outcome="found", provider_title_id=lookup.provider_title_id
        )
        return written

    def _recompute_status(self, title_id: int) -> EnrichStatus:
        status = derive_enrich_status(self._availability.stream_urls_for_title(title_id))
        self._featured.set_status(title_id, status)
        return status
