"""TMDB metadata, lookup and watch-provider client."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ..http import ProviderClient

TMDB_API_BASE = "https://api.themoviedb.org/3"
TMDB_IMAGE_BASE = "https://image.tmdb.org/t/p/w500"
YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v="


def tmdb_path_kind(kind: str) -> str:
    """TMDB uses ``tv`` where the catalog says ``series``."""

    return "movie" if kind == "movie" else "tv"


class _TmdbModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class TmdbGenre(_TmdbModel):
    id: int | None = None
    name: str


class TmdbVideo(_TmdbModel):
    key: str | None = None
    site: str | None = None
    type: str | None = None


class TmdbVideoList(_TmdbModel):
    results: list[TmdbVideo] = Field(default_factory=list)


class TmdbDetails(_TmdbModel):
    """Movie or TV details with the ``videos`` sub-resource appended."""

    id: int
    imdb_id: str | None = None
    title: str | None = None
    name: str | None = None
    original_title: str | None = None
    original_name: str | None = None
    overview: str | None = None
    vote_average: float | None = None
    runtime: int | None = None
    episode_run_time: list[int] = Field(default_factory=list)
    number_of_seasons: int | None = None
    genres: list[TmdbGenre] = Field(default_factory=list)
    release_date: str | None = None
    first_air_date: str | None = None
    poster_path: str | None = None
    videos: TmdbVideoList | None = None

    def display_title(self) -> str | None:
        return self.title or self.name

    def original(self) -> str | None:
        return self.original_title or self.original_name

    def release_year(self) -> int | None:
        raw = self.release_date or self.first_air_date
        if raw and len(raw) >= 4 and raw[:4].isdigit():
            return int(raw[:4])
        return None

    def runtime_minutes(self) -> int | None:
        if self.runtime:
            return self.runtime
        if self.episode_run_time:
            return self.episode_run_time[0] or None
        return None

    def rating(self) -> float | None:
        return self.vote_average or None

    def image_url(self) -> str | None:
        return f"{TMDB_IMAGE_BASE}{self.poster_path}" if self.poster_path else None

    def trailer_url(self) -> str | None:
        """First YouTube trailer, else the first YouTube video."""

        if self.videos is None:
            return None
        youtube = [video for video in self.videos.results if (video.site or "").lower() == "youtube" and video.key]
        trailers = [video for video in youtube if video.type == "Trailer"]
        chosen = (trailers or youtube or [None])[0]
        return f"{YOUTUBE_WATCH_URL}{chosen.key}" if chosen else None


class TmdbExternalIds(_TmdbModel):
    imdb_id: str | None = None


class TmdbProviderEntry(_TmdbModel):
    provider_id: int
    provider_name: str | None = None


class TmdbRegionProviders(_TmdbModel):
    flatrate: list[TmdbProviderEntry] = Field(default_factory=list)
    free: list[TmdbProviderEntry] = Field(default_factory=list)
    ads: list[TmdbProviderEntry] = Field(default_factory=list)
    rent: list[TmdbProviderEntry] = Field(default_factory=list)
    buy: list[TmdbProviderEntry] = Field(default_factory=list)

    def offers(self) -> dict[str, list[TmdbProviderEntry]]:
        return {
            "flatrate": self.flatrate,
            "free": self.free,
            "ads": self.ads,
            "rent": self.rent,
            "buy": self.buy,
        }


class TmdbWatchProviders(_TmdbModel):
    results: dict[str, TmdbRegionProviders] = Field(default_factory=dict)


class TmdbSearchHit(_TmdbModel):
    id: int
    title: str | None = None
    name: str | None = None
    release_date: str | None = None
    first_air_date: str | None = None

    def display_title(self) -> str:
        return self.title or self.name or ""


class TmdbFindResponse(_TmdbModel):
    movie_results: list[TmdbSearchHit] = Field(default_factory=list)
    tv_results: list[TmdbSearchHit] = Field(default_factory=list)


class TmdbSearchResponse(_TmdbModel):
    results: list[TmdbSearchHit] = Field(default_factory=list)


class TmdbClient:
    """Typed wrapper over the TMDB v3 endpoints the pipeline uses."""

    def __init__(self, client: ProviderClient) -> None:
        self._client = client

    async def details(self, kind: str, tmdb_id: int, *, title_id: int | None = None) -> TmdbDetails | None:
        path_kind = tmdb_path_kind(kind)
        return await self._client.get_model(
            f"/{path_kind}/{tmdb_id}",
            TmdbDetails,
            endpoint=f"{path_kind}/{tmdb_id}",
            title_id=title_id,
            params={"append_to_response": "videos"},
        )

    async def external_ids(self, tmdb_id: int, *, title_id: int | None = None) -> TmdbExternalIds | None:
        return await self._client.get_model(
            f"/tv/{tmdb_id}/external_ids",
            TmdbExternalIds,
            endpoint=f"tv/{tmdb_id}/external_ids",
            title_id=title_id,
        )

    async def watch_providers(
        self, kind: str, tmdb_id: int, *, title_id: int | None = None
    ) -> TmdbWatchProviders | None:
        path_kind = tmdb_path_kind(kind)
        return await self._client.get_model(
            f"/{path_kind}/{tmdb_id}/watch/providers",
            TmdbWatchProviders,
            endpoint=f"providers/{tmdb_id}",
            title_id=title_id,
        )

    async def find_by_imdb(self, imdb_id: str) -> TmdbFindResponse | None:
        return await self._client.get_model(
            f"/find/{imdb_id}",
            TmdbFindResponse,
            endpoint=f"find/{imdb_id}",
            params={"external_source": "imdb_id"},
        )

    async def search(self, kind: str, query: str, *, year: int | None = None) -> list[TmdbSearchHit]:
        path_kind = tmdb_path_kind(kind)
        params: dict[str, str | int] = {"query": query}
        if year is not None:
            params["year" if path_kind == "movie" else "first_air_date_year"] = year
        response = await self._client.get_model(
            f"/search/{path_kind}",
            TmdbSearchResponse,
            endpoint=f"search/{path_kind}",
            params=params,
        )
        return response.results if response is not None else []
