"""Probe stored stream URLs and record whether they still resolve."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

import httpx

from ..catalog_api.schemas import AvailabilityModel
from ..catalog_api.stores.availability_store import AvailabilityStore
from .reports import VerifyReport

logger = logging.getLogger(__name__)

UNREACHABLE_STATUS = 0


def is_live(status: int) -> bool:
    return 200 <= status < 400


class LinkVerifier:
    """Issues HEAD requests for stale or unverified availability rows."""

    def __init__(
        self,
        availability_store: AvailabilityStore,
        client: httpx.AsyncClient,
        *,
        batch_size: int = 200,
        timeout: float = 10.0,
        delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._availability = availability_store
        self._client = client
        self._batch_size = batch_size
        self._timeout = timeout
        self._delay = delay
        self._sleep = sleep

    async def run(self) -> VerifyReport:
        rows = self._availability.urls_to_verify(self._batch_size)
        report = VerifyReport()
        logger.info("Link verification: %d URLs to probe", len(rows))
        for index, row in enumerate(rows):
            if index:
                await self._sleep(self._delay)
            status, timed_out = await self.probe(row)
            self._availability.record_verification(row.id, status)
            if timed_out:
                report.timed_out += 1
            elif is_live(status):
                report.live += 1
            else:
                report.dead += 1
                logger.info("Dead link for title %s on %s: HTTP %s", row.title_id, row.service_id, status)
        logger.info(
            "Link verification done: %d live, %d dead, %d timed out",
            report.live,
            report.dead,
            report.timed_out,
        )
        return report

    async def probe(self, row: AvailabilityModel) -> tuple[int, bool]:
        """Return the observed status (``0`` when none was received) and whether it timed out."""

        try:
            response = await self._client.head(row.stream_url, follow_redirects=True, timeout=self._timeout)
        except httpx.TimeoutException:
            logger.warning("Timed out probing %s", row.stream_url)
            return UNREACHABLE_STATUS, True
        except httpx.HTTPError as exc:
            logger.warning("Could not reach %s: %r", row.stream_url, exc)
            return UNREACHABLE_STATUS, False
        return response.status_code, False
