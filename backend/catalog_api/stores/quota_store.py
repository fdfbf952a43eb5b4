"""Append-only audit log of external API calls, counted per time window."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import func
from sqlmodel import Session, select

from ..models import QuotaLogRecord
from ..utils.timestamps import utcnow


class QuotaStore:
    """Records provider calls and counts the successful ones."""

    def __init__(self, engine) -> None:
        self._engine = engine

    def log_call(
        self,
        provider: str,
        endpoint: str | None,
        title_id: int | None = None,
        *,
        success: bool = True,
        called_at: datetime | None = None,
    ) -> None:
        """Append one audit entry; called once per HTTP attempt."""

        record = QuotaLogRecord(
            provider=provider,
            endpoint=endpoint,
            title_id=title_id,
            success=success,
            called_at=called_at or utcnow(),
        )
        with Session(self._engine) as session:
            session.add(record)
            session.commit()

    def count_calls(self, provider: str, since: datetime) -> int:
        """Count successful calls for ``provider`` made at or after ``since``."""

        statement = (
            select(func.count())
            .select_from(QuotaLogRecord)
            .where(QuotaLogRecord.provider == provider)
            .where(QuotaLogRecord.success == True)  # noqa: E712
            .where(QuotaLogRecord.called_at >= since)
        )
        with Session(self._engine) as session:
            return int(session.exec(statement).one())
