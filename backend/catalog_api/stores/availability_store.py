"""Availability facts merged across providers."""
from __future__ import annotations

from datetime import datetime
from threading import Lock

from sqlalchemy import func, or_, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlmodel import Session, select

from ..models import AvailabilityRecord, ServiceRecord
from ..schemas import AvailabilityFact, AvailabilityModel
from ..utils.timestamps import days_ago, utcnow

FREE_RECHECK_DAYS = 7
SUBSCRIPTION_RECHECK_DAYS = 30


class AvailabilityStore:
    """Atomic merge upserts and link-verification bookkeeping."""

    def __init__(self, engine) -> None:
        self._engine = engine
        self._lock = Lock()

    def upsert(self, fact: AvailabilityFact, *, now: datetime | None = None) -> None:
        """Insert or merge a fact keyed on (title, service, access type).

        A later non-null URL or price replaces the stored one; a null never
        erases it. ``source`` and ``fetched_at`` record the latest writer.
        """

        statement = sqlite_insert(AvailabilityRecord).values(
            title_id=fact.title_id,
            service_id=fact.service_id,
            access_type=fact.access_type,
            stream_url=fact.stream_url,
            price=fact.price,
            source=fact.source,
            fetched_at=now or utcnow(),
        )
        excluded = statement.excluded
        statement = statement.on_conflict_do_update(
            index_elements=["title_id", "service_id", "access_type"],
            set_={
                "stream_url": func.coalesce(excluded.stream_url, AvailabilityRecord.stream_url),
                "price": func.coalesce(excluded.price, AvailabilityRecord.price),
                "source": excluded.source,
                "fetched_at": excluded.fetched_at,
            },
        )
        with self._lock, self._engine.begin() as connection:
            connection.execute(statement)

    def for_title(self, title_id: int) -> list[AvailabilityModel]:
        statement = (
            select(AvailabilityRecord)
            .where(AvailabilityRecord.title_id == title_id)
            .order_by(AvailabilityRecord.service_id, AvailabilityRecord.access_type)
        )
        with Session(self._engine) as session:
            return [AvailabilityModel.model_validate(row) for row in session.exec(statement).all()]

    def stream_urls_for_title(self, title_id: int) -> list[str | None]:
        statement = select(AvailabilityRecord.stream_url).where(AvailabilityRecord.title_id == title_id)
        with Session(self._engine) as session:
            return list(session.exec(statement).all())

    def urls_to_verify(self, limit: int, *, now: datetime | None = None) -> list[AvailabilityModel]:
        """Rows with a URL that were never probed or whose last probe is stale.

        Free-tier services are re-probed after a week, subscription services
        after a month. Never-probed rows come first.
        """

        if limit <= 0:
            return []
        free_cutoff = days_ago(FREE_RECHECK_DAYS, now=now)
        paid_cutoff = days_ago(SUBSCRIPTION_RECHECK_DAYS, now=now)
        verified_at = AvailabilityRecord.stream_url_verified_at
        statement = (
            select(AvailabilityRecord)
            .join(ServiceRecord, ServiceRecord.id == AvailabilityRecord.service_id)
            .where(AvailabilityRecord.stream_url.is_not(None))
            .where(
                or_(
                    verified_at.is_(None),
                    (ServiceRecord.is_free == True) & (verified_at < free_cutoff),  # noqa: E712
                    (ServiceRecord.is_free == False) & (verified_at < paid_cutoff),  # noqa: E712
                )
            )
            .order_by(verified_at.is_not(None), verified_at.asc(), AvailabilityRecord.id.asc())
            .limit(limit)
        )
        with Session(self._engine) as session:
            return [AvailabilityModel.model_validate(row) for row in session.exec(statement).all()]

    def record_verification(self, availability_id: int, status: int, *, now: datetime | None = None) -> None:
        """Persist a probe result; only the verification columns are touched."""

        statement = (
            update(AvailabilityRecord)
            .where(AvailabilityRecord.id == availability_id)
            .values(stream_url_status=status, stream_url_verified_at=now or utcnow())
        )
        with self._lock, self._engine.begin() as connection:
            connection.execute(statement)
