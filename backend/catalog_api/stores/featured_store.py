"""Curation rows and direct-URL enrichment bookkeeping for featured titles."""
from __future__ import annotations

from datetime import datetime
from threading import Lock
from typing import Iterable

from sqlalchemy import and_, case, func, not_, or_
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlmodel import Session, select

from ..models import FeaturedTitleRecord, ProviderTitleLinkRecord, TitleRecord
from ..schemas import EnrichStatus, FeaturedTitleModel
from ..utils.timestamps import days_ago, utcnow
from .title_store import to_featured_model

PROVIDER_MISS_RETRY_DAYS = 30


def derive_enrich_status(stream_urls: Iterable[str | None]) -> EnrichStatus:
    """Derive a title's direct-URL status from its availability rows' URLs.

    ``complete`` when no row lacks a URL, ``partial`` when some rows have
    one, ``pending`` when none do.
    """

    urls = list(stream_urls)
    with_url = sum(1 for url in urls if url is not None)
    if with_url == len(urls):
        return "complete"
    if with_url:
        return "partial"
    return "pending"


class FeaturedStore:
    """Thread-safe interface over ``featured_titles`` and provider links."""

    def __init__(self, engine) -> None:
        self._engine = engine
        self._lock = Lock()

    def ensure(self, title_id: int, *, priority: int = 3, curator_notes: str | None = None) -> None:
        """Create the curation row with status ``pending`` or refresh its priority."""

        statement = sqlite_insert(FeaturedTitleRecord).values(
            title_id=title_id,
            priority=priority,
            curator_notes=curator_notes,
            url_enrich_status="pending",
            curated_at=utcnow(),
        )
        statement = statement.on_conflict_do_update(
            index_elements=["title_id"],
            set_={
                "priority": statement.excluded.priority,
                "curator_notes": statement.excluded.curator_notes,
            },
        )
        with self._lock, self._engine.begin() as connection:
            connection.execute(statement)

    def get(self, title_id: int) -> FeaturedTitleModel | None:
        statement = (
            select(TitleRecord, FeaturedTitleRecord)
            .join(FeaturedTitleRecord, FeaturedTitleRecord.title_id == TitleRecord.id)
            .where(TitleRecord.id == title_id)
        )
        with Session(self._engine) as session:
            row = session.exec(statement).one_or_none()
            return to_featured_model(*row) if row else None

    def get_status(self, title_id: int) -> EnrichStatus | None:
        with Session(self._engine) as session:
            record = session.get(FeaturedTitleRecord, title_id)
            return record.url_enrich_status if record else None  # type: ignore[return-value]

    def set_status(self, title_id: int, status: EnrichStatus, *, now: datetime | None = None) -> None:
        with self._lock, Session(self._engine) as session:
            record = session.get(FeaturedTitleRecord, title_id)
            if record is None:
                raise RuntimeError(f"Title {title_id} is not featured")
            record.url_enrich_status = status
            record.last_enrich_at = now or utcnow()
            session.add(record)
            session.commit()

    def record_provider_link(
        self,
        title_id: int,
        provider: str,
        *,
        outcome: str,
        provider_title_id: str | None = None,
        now: datetime | None = None,
    ) -> None:
        """Remember a provider's lookup outcome; a known provider id is never erased."""

        statement = sqlite_insert(ProviderTitleLinkRecord).values(
            title_id=title_id,
            provider=provider,
            provider_title_id=provider_title_id,
            outcome=outcome,
            checked_at=now or utcnow(),
        )
        statement = statement.on_conflict_do_update(
            index_elements=["title_id", "provider"],
            set_={
                "provider_title_id": func.coalesce(
                    statement.excluded.provider_title_id, ProviderTitleLinkRecord.provider_title_id
                ),
                "outcome": statement.excluded.outcome,
                "checked_at": statement.excluded.checked_at,
            },
        )
        with self._lock, self._engine.begin() as connection:
            connection.execute(statement)

    def provider_title_id(self, title_id: int, provider: str) -> str | None:
        statement = select(ProviderTitleLinkRecord.provider_title_id).where(
            ProviderTitleLinkRecord.title_id == title_id,
            ProviderTitleLinkRecord.provider == provider,
        )
        with Session(self._engine) as session:
            return session.exec(statement).one_or_none()

    def titles_for_url_enrichment(
        self,
        provider: str,
        limit: int,
        *,
        now: datetime | None = None,
        miss_retry_days: int = PROVIDER_MISS_RETRY_DAYS,
    ) -> list[FeaturedTitleModel]:
        """Featured titles still lacking direct URLs, by priority.

        ``pending`` and ``partial`` titles come first. ``failed`` titles follow
        so that a miss by one provider never blocks the other. Titles this
        provider itself missed within ``miss_retry_days`` are left out.
        """

        if limit <= 0:
            return []
        cutoff = days_ago(miss_retry_days, now=now)
        recently_missed = and_(
            ProviderTitleLinkRecord.outcome == "missing",
            ProviderTitleLinkRecord.checked_at >= cutoff,
        )
        failed_last = case((FeaturedTitleRecord.url_enrich_status == "failed", 1), else_=0)
        statement = (
            select(TitleRecord, FeaturedTitleRecord)
            .join(FeaturedTitleRecord, FeaturedTitleRecord.title_id == TitleRecord.id)
            .outerjoin(
                ProviderTitleLinkRecord,
                and_(
                    ProviderTitleLinkRecord.title_id == TitleRecord.id,
                    ProviderTitleLinkRecord.provider == provider,
                ),
            )
            .where(FeaturedTitleRecord.url_enrich_status.in_(("pending", "partial", "failed")))
            .where(or_(ProviderTitleLinkRecord.id.is_(None), not_(recently_missed)))
            .order_by(failed_last, FeaturedTitleRecord.priority.asc(), TitleRecord.id.asc())
            .limit(limit)
        )
        with Session(self._engine) as session:
            return [to_featured_model(title, featured) for title, featured in session.exec(statement).all()]
