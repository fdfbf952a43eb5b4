"""Import curated seed lists and resolve each row to a TMDB identity."""
from __future__ import annotations

import asyncio
import csv
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Iterable

from ..catalog_api.stores.featured_store import FeaturedStore
from ..catalog_api.stores.title_store import TitleStore
from .errors import ProviderError
from .providers.tmdb import TmdbClient, TmdbSearchHit
from .reports import SeedReport

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 3
MIN_TITLE_SIMILARITY = 0.25

_WORD_RE = re.compile(r"[a-z0-9]+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


@dataclass(frozen=True, slots=True)
class SeedRow:
    title: str
    imdb_id: str | None = None
    year: int | None = None
    tmdb_id: int | None = None
    priority: int = DEFAULT_PRIORITY


def title_words(value: str) -> set[str]:
    return {word for word in _WORD_RE.findall(value.lower()) if len(word) >= 3}


def titles_similar(first: str, second: str) -> bool:
    """Jaccard overlap of significant words, lenient when either side has none."""

    left, right = title_words(first), title_words(second)
    if not left or not right:
        return True
    return len(left & right) / len(left | right) >= MIN_TITLE_SIMILARITY


def normalise_title(value: str) -> str:
    return _NON_ALNUM_RE.sub("", value.lower())


def _optional_int(raw: str | None, column: str, line: int) -> int | None:
    value = (raw or "").strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"line {line}: {column} {value!r} is not a number") from exc


def read_seed_rows(path: str | Path, report: SeedReport | None = None) -> list[SeedRow]:
    """Parse a seed CSV; malformed rows are skipped with a warning."""

    seed_path = Path(path).expanduser()
    if not seed_path.exists():
        logger.warning("Seed file %s not found; nothing to import", seed_path)
        return []

    rows: list[SeedRow] = []
    with seed_path.open(newline="", encoding="utf-8-sig") as handle:
        for line, record in enumerate(csv.DictReader(handle), start=2):
            title = (record.get("title") or "").strip()
            if not title:
                logger.warning("%s line %d: missing title, skipped", seed_path.name, line)
                if report is not None:
                    report.skipped += 1
                continue
            try:
                year = _optional_int(record.get("year"), "year", line)
                tmdb_id = _optional_int(record.get("tmdbId"), "tmdbId", line)
                priority = _optional_int(record.get("priority"), "priority", line)
            except ValueError as exc:
                logger.warning("%s %s, skipped", seed_path.name, exc)
                if report is not None:
                    report.skipped += 1
                continue
            rows.append(
                SeedRow(
                    title=title,
                    imdb_id=(record.get("imdbId") or "").strip() or None,
                    year=year,
                    tmdb_id=tmdb_id,
                    priority=DEFAULT_PRIORITY if priority is None else priority,
                )
            )
    return rows


def pick_search_hit(query: str, hits: Iterable[TmdbSearchHit]) -> TmdbSearchHit | None:
    """Prefer an exact normalised-title match, else the first hit."""

    hits = list(hits)
    if not hits:
        return None
    wanted = normalise_title(query)
    return next((hit for hit in hits if normalise_title(hit.display_title()) == wanted), hits[0])


class Seeder:
    """Resolves curated rows and marks them featured."""

    def __init__(
        self,
        title_store: TitleStore,
        featured_store: FeaturedStore,
        tmdb: TmdbClient | None,
        *,
        delay: float = 0.3,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._titles = title_store
        self._featured = featured_store
        self._tmdb = tmdb
        self._delay = delay
        self._sleep = sleep
        self._api_calls = 0

    async def run(self, movies_csv: str | Path, series_csv: str | Path) -> SeedReport:
        report = SeedReport()
        self._api_calls = 0
        for kind, path in (("movie", movies_csv), ("series", series_csv)):
            rows = read_seed_rows(path, report)
            logger.info("Seeding %d %s rows from %s", len(rows), kind, path)
            for row in rows:
                await self.seed_row(row, kind, report)
        report.api_calls = self._api_calls
        logger.info(
            "Seed complete: %d seeded, %d skipped, %d unresolved, %d API calls",
            report.seeded,
            report.skipped,
            len(report.unresolved),
            report.api_calls,
        )
        return report

    async def seed_row(self, row: SeedRow, kind: str, report: SeedReport) -> int | None:
        tmdb_id = await self.resolve_tmdb_id(row, kind)
        if tmdb_id is None:
            logger.warning("Could not resolve %s %r (%s)", kind, row.title, row.year or "no year")
            report.unresolved.append(row.title)
            return None
        title_id = self._titles.upsert_featured(
            tmdb_id=tmdb_id,
            title=row.title,
            kind=kind,
            imdb_id=row.imdb_id,
            release_year=row.year,
        )
        self._featured.ensure(title_id, priority=row.priority)
        report.seeded += 1
        logger.debug("Seeded %r as tmdb:%s (priority %d)", row.title, tmdb_id, row.priority)
        return title_id

    async def resolve_tmdb_id(self, row: SeedRow, kind: str) -> int | None:
        """Resolve a row through explicit id, IMDb cross-reference, then search."""

        if row.tmdb_id is not None:
            return row.tmdb_id
        if self._tmdb is None:
            return None

        if row.imdb_id:
            found = await self._attempt(self._tmdb.find_by_imdb(row.imdb_id))
            if found is not None:
                results = found.movie_results if kind == "movie" else found.tv_results
                if results:
                    candidate = results[0]
                    if titles_similar(row.title, candidate.display_title()):
                        return candidate.id
                    logger.warning(
                        "IMDb %s resolved to %r, which does not match %r; searching by title",
                        row.imdb_id,
                        candidate.display_title(),
                        row.title,
                    )

        if row.year is not None:
            hits = await self._attempt(self._tmdb.search(kind, row.title, year=row.year))
            chosen = pick_search_hit(row.title, hits or [])
            if chosen is not None:
                return chosen.id

        hits = await self._attempt(self._tmdb.search(kind, row.title))
        chosen = pick_search_hit(row.title, hits or [])
        return chosen.id if chosen is not None else None

    async def _attempt(self, call: Awaitable):
        await self._sleep(self._delay)
        self._api_calls += 1
        try:
            return await call
        except ProviderError as exc:
            logger.warning("TMDB resolution call failed: %s", exc)
            return None
