"""Wire stores, provider clients and passes into the pipeline commands."""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncIterator, Awaitable, Callable, Mapping

import httpx
from sqlalchemy.engine import Engine

from ..catalog_api.settings import CatalogSettings
from ..catalog_api.stores import AvailabilityStore, CatalogQueries, FeaturedStore, QuotaStore, TitleStore
from .bulk_import import BulkImporter
from .direct_urls import DirectUrlEnricher
from .errors import EnrichmentError
from .http import ProviderClient, create_client
from .link_verifier import LinkVerifier
from .metadata import MetadataEnricher
from .presence import PresenceEnricher
from .providers.motn import MOTN_API_BASE, MotnProvider, motn_headers
from .providers.tmdb import TMDB_API_BASE, TmdbClient
from .providers.watchmode import WATCHMODE_API_BASE, WatchmodeProvider
from .publisher import Publisher
from .quota import BudgetGuard, motn_budgets, watchmode_budgets
from .reports import BulkImportReport, PassReport, PipelineReport, SeedReport, VerifyReport
from .seeder import Seeder

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


class PipelineRunner:
    """Runs each pipeline pass against one engine and one settings object.

    Passes are independent: a provider or network failure in one pass is
    logged and the next pass still runs. Store errors propagate.
    """

    def __init__(
        self,
        settings: CatalogSettings,
        engine: Engine,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.settings = settings
        self._transport = transport
        self._sleep = sleep
        self.titles = TitleStore(engine)
        self.featured = FeaturedStore(engine)
        self.availability = AvailabilityStore(engine)
        self.quota = QuotaStore(engine)
        self.catalog = CatalogQueries(engine)

    @asynccontextmanager
    async def _http(
        self,
        base_url: str = "",
        *,
        headers: Mapping[str, str] | None = None,
        follow_redirects: bool = False,
    ) -> AsyncIterator[httpx.AsyncClient]:
        async with create_client(
            base_url, headers=headers, follow_redirects=follow_redirects, transport=self._transport
        ) as client:
            yield client

    def _tmdb(self, client: httpx.AsyncClient) -> TmdbClient:
        return TmdbClient(
            ProviderClient("tmdb", client, self.quota, default_params={"api_key": self.settings.tmdb_api_key or ""})
        )

    async def bulk(self, export_date: date | None = None) -> BulkImportReport:
        async with self._http() as client:
            importer = BulkImporter(self.titles, client, batch_size=self.settings.batches.bulk_import)
            return await importer.run(export_date)

    async def seed(self) -> SeedReport:
        seed_files = self.settings.seed
        if not self.settings.tmdb_api_key:
            logger.warning("TMDB API key not configured; only rows with an explicit tmdbId will be seeded")
            seeder = Seeder(self.titles, self.featured, None, sleep=self._sleep)
            return await seeder.run(seed_files.movies_csv, seed_files.series_csv)
        async with self._http(TMDB_API_BASE) as client:
            seeder = Seeder(self.titles, self.featured, self._tmdb(client), sleep=self._sleep)
            return await seeder.run(seed_files.movies_csv, seed_files.series_csv)

    async def metadata(self) -> list[PassReport]:
        if not self.settings.tmdb_api_key:
            logger.warning("TMDB API key not configured; skipping metadata enrichment")
            return [PassReport(name="metadata", stopped_reason="disabled")]
        async with self._http(TMDB_API_BASE) as client:
            enricher = MetadataEnricher(
                self.titles,
                self._tmdb(client),
                stale_days=self.settings.metadata_stale_days,
                stale_batch=self.settings.batches.metadata_refresh,
                sleep=self._sleep,
            )
            return await enricher.run()

    async def presence(self) -> PassReport:
        if not self.settings.tmdb_api_key:
            logger.warning("TMDB API key not configured; skipping provider presence")
            return PassReport(name="presence", stopped_reason="disabled")
        async with self._http(TMDB_API_BASE) as client:
            enricher = PresenceEnricher(
                self.titles,
                self.availability,
                self._tmdb(client),
                region=self.settings.region_code,
                tracked_services=self.settings.tracked_services,
                limit=self.settings.batches.presence,
                sleep=self._sleep,
            )
            return await enricher.run()

    async def watchmode(self) -> PassReport:
        guard = BudgetGuard(self.quota, watchmode_budgets(self.settings.budgets))
        api_key = self.settings.watchmode_api_key
        async with self._http(WATCHMODE_API_BASE) as client:
            provider_client = (
                ProviderClient("watchmode", client, self.quota, guard=guard, default_params={"apiKey": api_key})
                if api_key
                else None
            )
            provider = WatchmodeProvider(provider_client, self.settings.region_code)
            return await self._direct_urls(provider, guard)

    async def motn(self) -> PassReport:
        guard = BudgetGuard(self.quota, motn_budgets(self.settings.budgets))
        api_key = self.settings.motn_api_key
        headers = motn_headers(api_key) if api_key else None
        async with self._http(MOTN_API_BASE, headers=headers) as client:
            provider_client = ProviderClient("motn", client, self.quota, guard=guard) if api_key else None
            provider = MotnProvider(provider_client, self.settings.region_code)
            return await self._direct_urls(provider, guard)

    async def _direct_urls(self, provider, guard: BudgetGuard) -> PassReport:
        enricher = DirectUrlEnricher(
            provider,
            featured_store=self.featured,
            availability_store=self.availability,
            guard=guard,
            tracked_services=self.settings.tracked_services,
            sleep=self._sleep,
        )
        return await enricher.run()

    async def verify(self) -> VerifyReport:
        async with self._http(follow_redirects=True) as client:
            verifier = LinkVerifier(
                self.availability, client, batch_size=self.settings.batches.link_verify, sleep=self._sleep
            )
            return await verifier.run()

    def publish(self) -> int:
        catalog = Publisher(self.catalog).publish(self.settings.publish_path)
        return catalog.count

    async def pipeline(self) -> PipelineReport:
        """metadata, presence, watchmode, motn, verify, publish."""

        report = PipelineReport()

        metadata_reports = await self._guarded("metadata", self.metadata(), report)
        if metadata_reports:
            report.passes.extend(metadata_reports)
        for name, step in (("presence", self.presence), ("watchmode", self.watchmode), ("motn", self.motn)):
            result = await self._guarded(name, step(), report)
            if result is not None:
                report.passes.append(result)
        report.verify = await self._guarded("verify", self.verify(), report)
        report.published = self.publish()

        if report.failed_passes:
            logger.warning("Pipeline finished with failed passes: %s", ", ".join(report.failed_passes))
        else:
            logger.info("Pipeline finished; %s titles published", report.published)
        return report

    async def pipeline_full(self) -> PipelineReport:
        seed_report = await self._guarded("seed", self.seed(), None)
        report = await self.pipeline()
        report.seed = seed_report
        if seed_report is None:
            report.failed_passes.insert(0, "seed")
        return report

    async def _guarded(self, name: str, step: Awaitable, report: PipelineReport | None):
        try:
            return await step
        except (EnrichmentError, httpx.HTTPError):
            logger.exception("Pass %s failed; continuing with the next pass", name)
            if report is not None:
                report.failed_passes.append(name)
            return None
