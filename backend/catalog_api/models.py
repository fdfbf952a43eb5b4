"""Database models for the catalog cache."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.types import TypeDecorator
from sqlmodel import Field, SQLModel

from .utils.timestamps import utcnow


class UtcDateTime(TypeDecorator):
    """Naive UTC storage; aware values are converted to UTC before binding."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


def timestamp_column(*, nullable: bool = False, index: bool = False) -> Column:
    return Column(UtcDateTime(), nullable=nullable, index=index)


class TitleRecord(SQLModel, table=True):
    """A movie or series, keyed by its TMDB identifier."""

    __tablename__ = "titles"
    __table_args__ = (CheckConstraint("kind IN ('movie','series')", name="ck_titles_kind"),)

    id: int | None = Field(default=None, primary_key=True)
    tmdb_id: int = Field(unique=True, index=True, nullable=False)
    imdb_id: str | None = Field(default=None, unique=True, index=True)
    title: str
    original_title: str | None = Field(default=None)
    kind: str = Field(index=True)
    release_year: int | None = Field(default=None, index=True)
    runtime_minutes: int | None = Field(default=None)
    season_count: int | None = Field(default=None)
    overview: str | None = Field(default=None)
    rating: float | None = Field(default=None)
    genres: str | None = Field(default=None, description="JSON-encoded list of genre names.")
    image_url: str | None = Field(default=None)
    youtube_url: str | None = Field(default=None)
    is_featured: bool = Field(default=False, index=True)
    metadata_fetched_at: datetime | None = Field(default=None, sa_column=timestamp_column(nullable=True, index=True))
    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())


class ServiceRecord(SQLModel, table=True):
    """Streaming platform reference row."""

    __tablename__ = "services"

    id: str = Field(primary_key=True)
    display_name: str
    is_free: bool = Field(default=False)
    color_hex: str | None = Field(default=None)
    base_url: str


class AvailabilityRecord(SQLModel, table=True):
    """A (title, service, access type) fact merged across providers."""

    __tablename__ = "availability"
    __table_args__ = (
        UniqueConstraint("title_id", "service_id", "access_type", name="uq_availability_fact"),
        CheckConstraint(
            "access_type IN ('subscription','free','rent','buy')", name="ck_availability_access"
        ),
        CheckConstraint(
            "source IN ('tmdb_providers','watchmode','motn','manual')", name="ck_availability_source"
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    title_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("titles.id", ondelete="CASCADE"), nullable=False, index=True
        )
    )
    service_id: str = Field(
        sa_column=Column(String, ForeignKey("services.id"), nullable=False, index=True)
    )
    access_type: str
    stream_url: str | None = Field(default=None)
    price: float | None = Field(default=None)
    source: str
    stream_url_status: int | None = Field(default=None)
    stream_url_verified_at: datetime | None = Field(default=None, sa_column=timestamp_column(nullable=True, index=True))
    fetched_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())


class FeaturedTitleRecord(SQLModel, table=True):
    """Curated subset of titles that receive full enrichment."""

    __tablename__ = "featured_titles"
    __table_args__ = (
        CheckConstraint(
            "url_enrich_status IN ('pending','partial','complete','failed')",
            name="ck_featured_status",
        ),
        Index("ix_featured_priority_status", "priority", "url_enrich_status"),
    )

    title_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("titles.id", ondelete="CASCADE"), primary_key=True
        )
    )
    priority: int = Field(default=3)
    curator_notes: str | None = Field(default=None)
    url_enrich_status: str = Field(default="pending")
    last_enrich_at: datetime | None = Field(default=None, sa_column=timestamp_column(nullable=True))
    curated_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())


class ProviderTitleLinkRecord(SQLModel, table=True):
    """Per-provider lookup outcome and the provider's own title identifier."""

    __tablename__ = "provider_title_links"
    __table_args__ = (
        UniqueConstraint("title_id", "provider", name="uq_provider_title_link"),
        CheckConstraint("outcome IN ('found','missing')", name="ck_provider_link_outcome"),
    )

    id: int | None = Field(default=None, primary_key=True)
    title_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("titles.id", ondelete="CASCADE"), nullable=False, index=True
        )
    )
    provider: str = Field(index=True)
    provider_title_id: str | None = Field(default=None)
    outcome: str
    checked_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())


class QuotaLogRecord(SQLModel, table=True):
    """Append-only audit entry for one external API attempt."""

    __tablename__ = "quota_log"
    __table_args__ = (Index("ix_quota_provider_called", "provider", "called_at"),)

    id: int | None = Field(default=None, primary_key=True)
    provider: str
    endpoint: str | None = Field(default=None)
    title_id: int | None = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("titles.id"), nullable=True),
    )
    success: bool = Field(default=True)
    called_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
