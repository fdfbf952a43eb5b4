"""Movie of the Night (Streaming Availability API) deep-link adapter."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ...catalog_api.schemas import FeaturedTitleModel
from ..service_map import motn_access, motn_service
from .base import DirectUrlProvider, ProviderLookup, StreamingOffer

MOTN_API_HOST = "streaming-availability.p.rapidapi.com"
MOTN_API_BASE = f"https://{MOTN_API_HOST}"


def motn_headers(api_key: str) -> dict[str, str]:
    return {"X-RapidAPI-Key": api_key, "X-RapidAPI-Host": MOTN_API_HOST}


class MotnService(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str | None = None


class MotnPrice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    amount: float | None = None
    currency: str | None = None


class MotnStreamingOption(BaseModel):
    model_config = ConfigDict(extra="ignore")

    service: MotnService
    type: str
    link: str | None = None
    price: MotnPrice | None = None


class MotnShow(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str
    title: str | None = None
    imdb_id: str | None = Field(default=None, alias="imdbId")
    tmdb_id: str | None = Field(default=None, alias="tmdbId")
    streaming_options: dict[str, list[MotnStreamingOption]] = Field(
        default_factory=dict, alias="streamingOptions"
    )


class MotnProvider(DirectUrlProvider):
    """Looks titles up by IMDb or TMDB id, then by title search."""

    name = "motn"
    delay = 1.0

    async def lookup_by_id(self, title: FeaturedTitleModel, known_id: str | None) -> ProviderLookup | None:
        show = await self.client.get_model(
            f"/shows/{self.lookup_key(title)}",
            MotnShow,
            endpoint=f"getShow/{title.tmdb_id}",
            title_id=title.id,
            params={"country": self.region.lower()},
        )
        if show is None:
            return None
        return self._to_lookup(show)

    async def lookup_by_search(self, title: FeaturedTitleModel, known_id: str | None) -> ProviderLookup | None:
        shows: list[MotnShow] | None = await self.client.get_model(
            "/shows/search/title",
            list[MotnShow],
            endpoint=f"searchShows/{title.tmdb_id}",
            title_id=title.id,
            params={
                "title": title.title,
                "country": self.region.lower(),
                "show_type": "movie" if title.kind == "movie" else "series",
            },
        )
        if not shows:
            return None
        expected_tmdb = self._tmdb_key(title)
        chosen = next((show for show in shows if show.tmdb_id == expected_tmdb), shows[0])
        return self._to_lookup(chosen)

    @classmethod
    def lookup_key(cls, title: FeaturedTitleModel) -> str:
        return title.imdb_id or cls._tmdb_key(title)

    @staticmethod
    def _tmdb_key(title: FeaturedTitleModel) -> str:
        prefix = "movie" if title.kind == "movie" else "tv"
        return f"{prefix}/{title.tmdb_id}"

    def _to_lookup(self, show: MotnShow) -> ProviderLookup:
        options = next(
            (items for region, items in show.streaming_options.items() if region.upper() == self.region),
            [],
        )
        offers: list[StreamingOffer] = []
        for option in options:
            service_id = motn_service(option.service.id)
            access_type = motn_access(option.type)
            if service_id is None or access_type is None:
                continue
            price = option.price.amount if option.price else None
            offers.append(StreamingOffer(service_id, access_type, option.link, price))
        return ProviderLookup(provider_title_id=show.id, offers=offers)
