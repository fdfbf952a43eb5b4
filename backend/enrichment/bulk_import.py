"""Import minimal title rows from TMDB's daily id exports."""
from __future__ import annotations

import json
import logging
import zlib
from datetime import date, timedelta
from typing import AsyncIterator

import httpx

from ..catalog_api.schemas import TitleMinimal
from ..catalog_api.stores.title_store import TitleStore
from ..catalog_api.utils.timestamps import utcnow
from .errors import ProviderError
from .reports import BulkImportReport, KindImportReport

logger = logging.getLogger(__name__)

TMDB_EXPORT_BASE = "http://files.tmdb.org/p/exports"
EXPORT_PREFIXES = {"movie": "movie_ids", "series": "tv_series_ids"}
TITLE_KEYS = {"movie": "original_title", "series": "original_name"}


def export_filename(kind: str, export_date: date) -> str:
    return f"{EXPORT_PREFIXES[kind]}_{export_date:%m_%d_%Y}.json.gz"


def parse_export_line(line: str, kind: str) -> TitleMinimal | None:
    """Parse one JSON line of an export file; ``None`` for anything unusable."""

    line = line.strip()
    if not line:
        return None
    try:
        payload = json.loads(line)
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict):
        return None
    tmdb_id = payload.get("id")
    if not isinstance(tmdb_id, int) or isinstance(tmdb_id, bool):
        return None
    title = payload.get(TITLE_KEYS[kind]) or f"Unknown {tmdb_id}"
    return TitleMinimal(tmdb_id=tmdb_id, title=str(title), original_title=str(title), kind=kind)


async def iter_gzip_lines(chunks: AsyncIterator[bytes]) -> AsyncIterator[str]:
    """Decompress a gzip byte stream incrementally and yield complete lines."""

    decompressor = zlib.decompressobj(16 + zlib.MAX_WBITS)
    pending = b""
    async for chunk in chunks:
        pending += decompressor.decompress(chunk)
        *lines, pending = pending.split(b"\n")
        for raw in lines:
            yield raw.decode("utf-8", errors="replace")
    pending += decompressor.flush()
    for raw in pending.split(b"\n"):
        if raw:
            yield raw.decode("utf-8", errors="replace")


class BulkImporter:
    """Streams both export files into the titles table in batches."""

    def __init__(self, title_store: TitleStore, client: httpx.AsyncClient, *, batch_size: int = 1000) -> None:
        self._title_store = title_store
        self._client = client
        self._batch_size = max(1, batch_size)

    async def run(self, export_date: date | None = None) -> BulkImportReport:
        report = BulkImportReport()
        for kind in ("movie", "series"):
            kind_report = KindImportReport(kind=kind)
            report.kinds.append(kind_report)
            try:
                await self._import_kind(kind, export_date, kind_report)
            except ProviderError as exc:
                kind_report.error = str(exc)
                logger.error("Bulk import of %s export failed: %s", kind, exc)
                continue
            logger.info(
                "Imported %s export %s: %d rows, %d skipped",
                kind,
                kind_report.export_file,
                kind_report.processed,
                kind_report.skipped,
            )
        return report

    async def _import_kind(self, kind: str, export_date: date | None, report: KindImportReport) -> None:
        if export_date is not None:
            candidates = [export_date]
        else:
            today = utcnow().date()
            candidates = [today, today - timedelta(days=1)]

        for index, candidate in enumerate(candidates):
            filename = export_filename(kind, candidate)
            report.export_file = filename
            try:
                async with self._client.stream("GET", f"{TMDB_EXPORT_BASE}/{filename}") as response:
                    if response.status_code == 404 and index + 1 < len(candidates):
                        logger.info("Export %s not published yet; trying the previous day", filename)
                        continue
                    if not response.is_success:
                        raise ProviderError(
                            "tmdb_export",
                            f"{filename} returned HTTP {response.status_code}",
                            status_code=response.status_code,
                        )
                    await self._consume(kind, iter_gzip_lines(response.aiter_bytes()), report)
                    return
            except (httpx.HTTPError, zlib.error) as exc:
                raise ProviderError("tmdb_export", f"{filename} download failed: {exc!r}") from exc

    async def _consume(self, kind: str, lines: AsyncIterator[str], report: KindImportReport) -> None:
        batch: list[TitleMinimal] = []
        async for line in lines:
            if not line.strip():
                continue
            row = parse_export_line(line, kind)
            if row is None:
                report.skipped += 1
                logger.debug("Skipping malformed %s export line: %.80s", kind, line)
                continue
            batch.append(row)
            if len(batch) >= self._batch_size:
                report.processed += self._title_store.upsert_minimal(batch)
                batch = []
        if batch:
            report.processed += self._title_store.upsert_minimal(batch)
