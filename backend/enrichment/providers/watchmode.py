"""Watchmode deep-link adapter."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ...catalog_api.schemas import FeaturedTitleModel
from ..service_map import watchmode_access, watchmode_service
from .base import DirectUrlProvider, ProviderLookup, StreamingOffer

WATCHMODE_API_BASE = "https://api.watchmode.com/v1"


class WatchmodeSource(BaseModel):
    model_config = ConfigDict(extra="ignore")

    source_id: int | None = None
    name: str
    type: str
    region: str | None = None
    web_url: str | None = None
    price: float | None = None


class WatchmodeTitle(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    title: str | None = None
    sources: list[WatchmodeSource] = Field(default_factory=list)


class WatchmodeSearchHit(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str | None = None
    year: int | None = None
    tmdb_id: int | None = None


class WatchmodeSearchResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title_results: list[WatchmodeSearchHit] = Field(default_factory=list)


class WatchmodeProvider(DirectUrlProvider):
    """Looks titles up by stored Watchmode id, IMDb id or TMDB id, then by name."""

    name = "watchmode"
    delay = 1.1

    async def lookup_by_id(self, title: FeaturedTitleModel, known_id: str | None) -> ProviderLookup | None:
        return await self._details(self.lookup_key(title, known_id), title)

    async def lookup_by_search(self, title: FeaturedTitleModel, known_id: str | None) -> ProviderLookup | None:
        response = await self.client.get_model(
            "/search/",
            WatchmodeSearchResponse,
            endpoint="search",
            title_id=title.id,
            params={
                "search_field": "name",
                "search_value": title.title,
                "types": "movie" if title.kind == "movie" else "tv",
            },
        )
        if response is None:
            return None
        hits = response.title_results
        if not hits:
            return None
        chosen = next((hit for hit in hits if hit.tmdb_id == title.tmdb_id), None)
        if chosen is None and title.release_year is not None:
            chosen = next((hit for hit in hits if hit.year == title.release_year), None)
        return await self._details(str((chosen or hits[0]).id), title)

    @staticmethod
    def lookup_key(title: FeaturedTitleModel, known_id: str | None) -> str:
        if known_id:
            return known_id
        if title.imdb_id:
            return title.imdb_id
        prefix = "movie" if title.kind == "movie" else "tv"
        return f"{prefix}-{title.tmdb_id}"

    async def _details(self, key: str, title: FeaturedTitleModel) -> ProviderLookup | None:
        record = await self.client.get_model(
            f"/title/{key}/details/",
            WatchmodeTitle,
            endpoint=f"title/{title.tmdb_id}",
            title_id=title.id,
            params={"append_to_response": "sources"},
        )
        if record is None:
            return None
        return ProviderLookup(provider_title_id=str(record.id), offers=self._offers(record))

    def _offers(self, record: WatchmodeTitle) -> list[StreamingOffer]:
        offers: list[StreamingOffer] = []
        for source in record.sources:
            if (source.region or "").upper() != self.region:
                continue
            service_id = watchmode_service(source.name)
            access_type = watchmode_access(source.type)
            if service_id is None or access_type is None:
                continue
            offers.append(StreamingOffer(service_id, access_type, source.web_url, source.price))
        return offers
