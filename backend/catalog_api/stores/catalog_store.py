"""Read-side queries behind the published catalog and the read API."""
from __future__ import annotations

import json
from dataclasses import dataclass

from sqlalchemy import func, or_
from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from ..models import AvailabilityRecord, FeaturedTitleRecord, ServiceRecord, TitleRecord
from ..schemas import PublishedTitle, ServiceBadge, ServiceModel

DEAD_LINK_STATUS = 404


@dataclass(slots=True)
class CatalogQueries:
    """Read-only accessor producing the published projection."""

    engine: Engine

    def published_titles(self) -> list[PublishedTitle]:
        """Every featured title, best rated first, with its visible services."""

        titles_statement = (
            select(TitleRecord)
            .join(FeaturedTitleRecord, FeaturedTitleRecord.title_id == TitleRecord.id)
            .order_by(TitleRecord.rating.desc().nullslast(), TitleRecord.id.asc())
        )
        services_statement = (
            select(AvailabilityRecord, ServiceRecord)
            .join(ServiceRecord, ServiceRecord.id == AvailabilityRecord.service_id)
            .join(FeaturedTitleRecord, FeaturedTitleRecord.title_id == AvailabilityRecord.title_id)
            .where(
                or_(
                    AvailabilityRecord.stream_url_status.is_(None),
                    AvailabilityRecord.stream_url_status != DEAD_LINK_STATUS,
                )
            )
            .order_by(AvailabilityRecord.title_id, ServiceRecord.display_name, AvailabilityRecord.access_type)
        )

        with Session(self.engine) as session:
            titles = session.exec(titles_statement).all()
            availability_rows = session.exec(services_statement).all()

            badges: dict[int, dict[tuple[str, str], ServiceBadge]] = {}
            for availability, service in availability_rows:
                per_title = badges.setdefault(availability.title_id, {})
                key = (availability.service_id, availability.access_type)
                if key in per_title:
                    continue
                per_title[key] = ServiceBadge(
                    service_id=service.id,
                    display_name=service.display_name,
                    access_type=availability.access_type,
                    stream_url=availability.stream_url,
                    stream_url_status=availability.stream_url_status,
                    price=availability.price,
                    color_hex=service.color_hex,
                    base_url=service.base_url,
                    is_free=service.is_free,
                )

            return [
                PublishedTitle(
                    id=title.id,
                    tmdb_id=title.tmdb_id,
                    title=title.title,
                    kind=title.kind,
                    release_year=title.release_year,
                    runtime_minutes=title.runtime_minutes,
                    season_count=title.season_count,
                    overview=title.overview,
                    rating=title.rating,
                    genres=_decode_genres(title.genres),
                    image_url=title.image_url,
                    youtube_url=title.youtube_url,
                    services=list(badges.get(title.id, {}).values()),
                )
                for title in titles
            ]

    def services(self) -> list[ServiceModel]:
        """Service reference rows, paid services first, then by name."""

        statement = select(ServiceRecord).order_by(ServiceRecord.is_free, ServiceRecord.display_name)
        with Session(self.engine) as session:
            return [ServiceModel.model_validate(record) for record in session.exec(statement).all()]

    def featured_count(self) -> int:
        with Session(self.engine) as session:
            return int(session.exec(select(func.count()).select_from(FeaturedTitleRecord)).one())


def _decode_genres(raw: str | None) -> list[str]:
    if not raw:
        return []
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError:
        return [part.strip() for part in raw.split(",") if part.strip()]
    if not isinstance(decoded, list):
        return []
    return [str(item) for item in decoded]
