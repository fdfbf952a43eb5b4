"""Wall-clock helpers shared by the stores and enrichment passes."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    """Return naive UTC wall-clock time truncated to whole seconds."""

    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_month(moment: datetime) -> datetime:
    return start_of_day(moment).replace(day=1)


def days_ago(days: int, *, now: datetime | None = None) -> datetime:
    """Return the cutoff ``days`` before ``now`` (defaults to the current time)."""

    return (now or utcnow()) - timedelta(days=days)
