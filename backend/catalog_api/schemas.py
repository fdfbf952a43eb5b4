"""Pydantic models exchanged between the stores, the pipeline and the API."""
from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

TitleKind = Literal["movie", "series"]
AccessType = Literal["subscription", "free", "rent", "buy"]
AvailabilitySource = Literal["tmdb_providers", "watchmode", "motn", "manual"]
EnrichStatus = Literal["pending", "partial", "complete", "failed"]


class TitleMinimal(BaseModel):
    """Identity-only title row as produced by the bulk export."""

    tmdb_id: int
    title: str
    original_title: str | None = None
    kind: TitleKind


class TitleModel(BaseModel):
    """Title row as read back from the catalog."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    tmdb_id: int
    imdb_id: str | None = None
    title: str
    original_title: str | None = None
    kind: TitleKind
    release_year: int | None = None
    runtime_minutes: int | None = None
    season_count: int | None = None
    overview: str | None = None
    rating: float | None = None
    genres: str | None = None
    image_url: str | None = None
    youtube_url: str | None = None
    is_featured: bool = False
    metadata_fetched_at: datetime | None = None


class FeaturedTitleModel(TitleModel):
    """Featured title joined with its curation row."""

    priority: int = 3
    url_enrich_status: EnrichStatus = "pending"
    last_enrich_at: datetime | None = None


class TitleMetadataUpdate(BaseModel):
    """Descriptive fields supplied by the metadata provider.

    ``None`` means "not provided"; the store never overwrites a stored value
    with ``None``.
    """

    imdb_id: str | None = None
    title: str | None = None
    original_title: str | None = None
    release_year: int | None = None
    runtime_minutes: int | None = None
    season_count: int | None = None
    overview: str | None = None
    rating: float | None = None
    genres: str | None = None
    image_url: str | None = None
    youtube_url: str | None = None
    metadata_fetched_at: datetime


class AvailabilityFact(BaseModel):
    """One provider's claim that a title is watchable on a service."""

    title_id: int
    service_id: str
    access_type: AccessType
    stream_url: str | None = None
    price: float | None = None
    source: AvailabilitySource


class AvailabilityModel(BaseModel):
    """Availability row as stored."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title_id: int
    service_id: str
    access_type: AccessType
    stream_url: str | None = None
    price: float | None = None
    source: AvailabilitySource
    stream_url_status: int | None = None
    stream_url_verified_at: datetime | None = None
    fetched_at: datetime


class ServiceModel(BaseModel):
    """Streaming platform reference data."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    display_name: str
    is_free: bool
    color_hex: str | None = None
    base_url: str


class ServiceBadge(BaseModel):
    """Availability row denormalised with its service for the published view."""

    service_id: str
    display_name: str
    access_type: AccessType
    stream_url: str | None = None
    stream_url_status: int | None = None
    price: float | None = None
    color_hex: str | None = None
    base_url: str
    is_free: bool


class PublishedTitle(BaseModel):
    """Featured title as consumed by the UI and the read API."""

    id: int
    tmdb_id: int
    title: str
    kind: TitleKind
    release_year: int | None = None
    runtime_minutes: int | None = None
    season_count: int | None = None
    overview: str | None = None
    rating: float | None = Field(default=None, description="Provider-native 0-10 rating.")
    genres: list[str] = Field(default_factory=list)
    image_url: str | None = None
    youtube_url: str | None = None
    services: list[ServiceBadge] = Field(default_factory=list)


class PublishedCatalog(BaseModel):
    """Envelope written by the publish step."""

    generated_at: datetime
    count: int
    titles: list[PublishedTitle]


class HealthStatus(BaseModel):
    """Service health payload."""

    status: Literal["ok"] = Field(default="ok")
    version: str = Field(default="0.1.0", description="Semantic version of the API service.")
    shows: int = Field(default=0, description="Number of featured titles currently published.")
