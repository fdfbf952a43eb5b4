"""Database-backed store for title identity and descriptive metadata."""
from __future__ import annotations

import logging
from datetime import datetime
from threading import Lock
from typing import Any, Iterable

from sqlalchemy import exists, func, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..models import AvailabilityRecord, FeaturedTitleRecord, TitleRecord
from ..schemas import FeaturedTitleModel, TitleMetadataUpdate, TitleMinimal, TitleModel
from ..utils.timestamps import days_ago, utcnow

logger = logging.getLogger(__name__)

_COALESCED_FIELDS = (
    "imdb_id",
    "title",
    "original_title",
    "release_year",
    "runtime_minutes",
    "season_count",
    "overview",
    "rating",
    "genres",
    "image_url",
    "youtube_url",
)


class TitleStore:
    """Insert-once, merge-on-update access to the ``titles`` table."""

    def __init__(self, engine) -> None:
        self._engine = engine
        self._lock = Lock()

    def upsert_minimal(self, rows: Iterable[TitleMinimal]) -> int:
        """Insert identity rows that do not exist yet, in one transaction.

        Existing rows (matched by TMDB id) are left untouched. Returns the
        number of rows submitted.
        """

        now = utcnow()
        payload = [
            {
                "tmdb_id": row.tmdb_id,
                "title": row.title,
                "original_title": row.original_title,
                "kind": row.kind,
                "is_featured": False,
                "created_at": now,
                "updated_at": now,
            }
            for row in rows
        ]
        if not payload:
            return 0
        statement = sqlite_insert(TitleRecord).on_conflict_do_nothing()
        with self._lock, self._engine.begin() as connection:
            connection.execute(statement, payload)
        return len(payload)

    def upsert_featured(
        self,
        *,
        tmdb_id: int,
        title: str,
        kind: str,
        imdb_id: str | None = None,
        release_year: int | None = None,
    ) -> int:
        """Insert a curated title if missing, mark it featured and return its row id.

        An existing row keeps its stored values; ``imdb_id`` and
        ``release_year`` are only filled where the row has none.
        """

        now = utcnow()
        values: dict[str, Any] = {
            "tmdb_id": tmdb_id,
            "imdb_id": imdb_id,
            "title": title,
            "kind": kind,
            "release_year": release_year,
            "is_featured": True,
            "created_at": now,
            "updated_at": now,
        }
        with self._lock, Session(self._engine) as session:
            session.exec(sqlite_insert(TitleRecord).values(values).on_conflict_do_nothing())
            record = session.exec(select(TitleRecord).where(TitleRecord.tmdb_id == tmdb_id)).one_or_none()
            if record is None:
                # The cross-reference id already belongs to another row.
                logger.warning(
                    "IMDb id %s already used by another title; inserting tmdb:%s without it",
                    imdb_id,
                    tmdb_id,
                )
                values["imdb_id"] = None
                session.exec(sqlite_insert(TitleRecord).values(values).on_conflict_do_nothing())
                record = session.exec(select(TitleRecord).where(TitleRecord.tmdb_id == tmdb_id)).one()
            if record.release_year is None and release_year is not None:
                record.release_year = release_year
            if record.imdb_id is None and imdb_id:
                owner = session.exec(select(TitleRecord.id).where(TitleRecord.imdb_id == imdb_id)).first()
                if owner is None:
                    record.imdb_id = imdb_id
            record.is_featured = True
            record.updated_at = now
            session.add(record)
            session.commit()
            session.refresh(record)
            return int(record.id)

    def get_by_tmdb_id(self, tmdb_id: int) -> TitleModel | None:
        with Session(self._engine) as session:
            record = session.exec(select(TitleRecord).where(TitleRecord.tmdb_id == tmdb_id)).one_or_none()
            return TitleModel.model_validate(record) if record else None

    def count(self) -> int:
        with Session(self._engine) as session:
            return int(session.exec(select(func.count()).select_from(TitleRecord)).one())

    def update_metadata(self, tmdb_id: int, update_payload: TitleMetadataUpdate) -> bool:
        """Merge provider metadata into a title.

        Every descriptive column keeps its stored value when the incoming one
        is ``None``; ``metadata_fetched_at`` always takes the new timestamp.
        Returns whether a row was updated.
        """

        try:
            return self._apply_metadata(tmdb_id, update_payload)
        except IntegrityError:
            if update_payload.imdb_id is None:
                raise
            logger.warning(
                "IMDb id %s for tmdb:%s collides with another title; keeping the stored value",
                update_payload.imdb_id,
                tmdb_id,
            )
            return self._apply_metadata(tmdb_id, update_payload.model_copy(update={"imdb_id": None}))

    def _apply_metadata(self, tmdb_id: int, update_payload: TitleMetadataUpdate) -> bool:
        values: dict[str, Any] = {
            field: func.coalesce(getattr(update_payload, field), getattr(TitleRecord, field))
            for field in _COALESCED_FIELDS
        }
        values["metadata_fetched_at"] = update_payload.metadata_fetched_at
        values["updated_at"] = utcnow()
        statement = update(TitleRecord).where(TitleRecord.tmdb_id == tmdb_id).values(**values)
        with self._lock, self._engine.begin() as connection:
            result = connection.execute(statement)
        return result.rowcount > 0

    def featured_missing_metadata(self) -> list[FeaturedTitleModel]:
        """Every featured title never fetched from the metadata provider, by priority."""

        statement = (
            _featured_select()
            .where(TitleRecord.metadata_fetched_at.is_(None))
            .order_by(FeaturedTitleRecord.priority.asc(), TitleRecord.id.asc())
        )
        return self._fetch_featured(statement)

    def featured_stale_metadata(
        self, stale_days: int, limit: int, *, now: datetime | None = None
    ) -> list[FeaturedTitleModel]:
        """Featured titles fetched before the staleness cutoff, oldest first."""

        cutoff = days_ago(stale_days, now=now)
        statement = (
            _featured_select()
            .where(TitleRecord.metadata_fetched_at.is_not(None))
            .where(TitleRecord.metadata_fetched_at < cutoff)
            .order_by(TitleRecord.metadata_fetched_at.asc(), TitleRecord.id.asc())
            .limit(limit)
        )
        return self._fetch_featured(statement)

    def featured_missing_presence(self, source: str, limit: int) -> list[FeaturedTitleModel]:
        """Featured titles with metadata but no availability row from ``source``."""

        has_source = exists().where(
            (AvailabilityRecord.title_id == TitleRecord.id) & (AvailabilityRecord.source == source)
        )
        statement = (
            _featured_select()
            .where(TitleRecord.metadata_fetched_at.is_not(None))
            .where(~has_source)
            .order_by(FeaturedTitleRecord.priority.asc(), TitleRecord.id.asc())
            .limit(limit)
        )
        return self._fetch_featured(statement)

    def _fetch_featured(self, statement) -> list[FeaturedTitleModel]:
        with Session(self._engine) as session:
            rows = session.exec(statement).all()
            return [to_featured_model(title, featured) for title, featured in rows]


def _featured_select():
    return select(TitleRecord, FeaturedTitleRecord).join(
        FeaturedTitleRecord, FeaturedTitleRecord.title_id == TitleRecord.id
    )


def to_featured_model(title: TitleRecord, featured: FeaturedTitleRecord) -> FeaturedTitleModel:
    """Combine a title row and its curation row into one model."""

    payload = TitleModel.model_validate(title).model_dump()
    payload.update(
        priority=featured.priority,
        url_enrich_status=featured.url_enrich_status,
        last_enrich_at=featured.last_enrich_at,
    )
    return FeaturedTitleModel.model_validate(payload)
