"""Tests for the metadata, presence, direct-URL and verification passes."""
from __future__ import annotations

import asyncio
import json
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable

import httpx
import pytest
from sqlalchemy.engine import Engine

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from backend.catalog_api.db import create_engine_from_settings, init_database  # noqa: E402
from backend.catalog_api.schemas import AvailabilityFact, TitleMetadataUpdate  # noqa: E402
from backend.catalog_api.settings import CatalogSettings, ProviderBudgets  # noqa: E402
from backend.catalog_api.stores import (  # noqa: E402
    AvailabilityStore,
    FeaturedStore,
    QuotaStore,
    TitleStore,
)
from backend.catalog_api.utils.timestamps import start_of_month, utcnow  # noqa: E402
from backend.enrichment.errors import BudgetExhausted  # noqa: E402
from backend.enrichment.quota import BudgetGuard, QuotaBudget  # noqa: E402
from backend.enrichment.scheduler import PipelineRunner  # noqa: E402

LONG_AGO = datetime(2000, 1, 1)

Handler = Callable[[httpx.Request], httpx.Response]


class SleepRecorder:
    """Async stand-in for ``asyncio.sleep`` that only records delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class Router:
    """Dispatch mocked requests by host to per-provider handlers."""

    def __init__(self, **handlers: Handler) -> None:
        self.handlers = handlers
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        if host == "api.themoviedb.org":
            return self.handlers["tmdb"](request)
        if host == "api.watchmode.com":
            return self.handlers["watchmode"](request)
        if host == "streaming-availability.p.rapidapi.com":
            return self.handlers["motn"](request)
        return self.handlers["web"](request)

    def paths(self, host: str) -> list[str]:
        return [request.url.path for request in self.requests if request.url.host == host]


@pytest.fixture()
def settings(tmp_path: Path) -> CatalogSettings:
    return CatalogSettings(
        database_url=f"sqlite:///{tmp_path / 'catalog.db'}",
        tmdb_api_key="tmdb-key",
        watchmode_api_key="watchmode-key",
        motn_api_key="motn-key",
        publish_path=str(tmp_path / "out" / "shows.json"),
    )


@pytest.fixture()
def engine(settings: CatalogSettings) -> Engine:
    engine = create_engine_from_settings(settings)
    init_database(engine)
    yield engine
    engine.dispose()


def _runner(settings: CatalogSettings, engine: Engine, router: Router, sleep: SleepRecorder | None = None):
    return PipelineRunner(
        settings, engine, transport=httpx.MockTransport(router), sleep=sleep or SleepRecorder()
    )


def _feature(
    engine: Engine,
    tmdb_id: int,
    title: str,
    *,
    kind: str = "movie",
    imdb_id: str | None = None,
    priority: int = 3,
) -> int:
    title_id = TitleStore(engine).upsert_featured(tmdb_id=tmdb_id, title=title, kind=kind, imdb_id=imdb_id)
    FeaturedStore(engine).ensure(title_id, priority=priority)
    return title_id


def _with_metadata(engine: Engine, tmdb_id: int) -> None:
    TitleStore(engine).update_metadata(tmdb_id, TitleMetadataUpdate(metadata_fetched_at=datetime(2024, 1, 1)))


def _not_found(request: httpx.Request) -> httpx.Response:
    return httpx.Response(404, json={"success": False})


# --- metadata ---------------------------------------------------------------


def test_metadata_fill_maps_movie_and_series_fields(settings: CatalogSettings, engine: Engine) -> None:
    _feature(engine, 603, "The Matrix")
    _feature(engine, 1396, "Breaking Bad", kind="series")
    _feature(engine, 999, "Missing")

    def tmdb(request: httpx.Request) -> httpx.Response:
        assert request.url.params["api_key"] == "tmdb-key"
        if request.url.path == "/3/movie/603":
            assert request.url.params["append_to_response"] == "videos"
            return httpx.Response(
                200,
                json={
                    "id": 603,
                    "imdb_id": "tt0133093",
                    "title": "The Matrix",
                    "original_title": "The Matrix",
                    "overview": "A hacker learns the truth.",
                    "vote_average": 8.2,
                    "runtime": 136,
                    "genres": [{"id": 28, "name": "Action"}, {"id": 878, "name": "Science Fiction"}],
                    "release_date": "1999-03-30",
                    "poster_path": "/matrix.jpg",
                    "videos": {
                        "results": [
                            {"key": "teaser1", "site": "YouTube", "type": "Teaser"},
                            {"key": "trailer1", "site": "YouTube", "type": "Trailer"},
                        ]
                    },
                },
            )
        if request.url.path == "/3/tv/1396":
            return httpx.Response(
                200,
                json={
                    "id": 1396,
                    "name": "Breaking Bad",
                    "original_name": "Breaking Bad",
                    "vote_average": 0,
                    "episode_run_time": [47],
                    "number_of_seasons": 5,
                    "first_air_date": "2008-01-20",
                    "genres": [],
                },
            )
        if request.url.path == "/3/tv/1396/external_ids":
            return httpx.Response(200, json={"imdb_id": "tt0903747"})
        return _not_found(request)

    router = Router(tmdb=tmdb)
    sleep = SleepRecorder()
    reports = asyncio.run(_runner(settings, engine, router, sleep).metadata())

    fill = reports[0]
    assert (fill.selected, fill.enriched, fill.missed, fill.errors) == (3, 2, 1, 0)

    titles = TitleStore(engine)
    matrix = titles.get_by_tmdb_id(603)
    assert matrix.imdb_id == "tt0133093"
    assert matrix.release_year == 1999
    assert matrix.runtime_minutes == 136
    assert matrix.rating == pytest.approx(8.2)
    assert json.loads(matrix.genres) == ["Action", "Science Fiction"]
    assert matrix.image_url == "https://image.tmdb.org/t/p/w500/matrix.jpg"
    assert matrix.youtube_url == "https://www.youtube.com/watch?v=trailer1"
    assert matrix.metadata_fetched_at is not None

    show = titles.get_by_tmdb_id(1396)
    assert show.imdb_id == "tt0903747"
    assert show.season_count == 5
    assert show.runtime_minutes == 47
    assert show.rating is None
    assert show.genres is None

    assert titles.get_by_tmdb_id(999).metadata_fetched_at is None
    assert QuotaStore(engine).count_calls("tmdb", LONG_AGO) == 4
    assert 0.05 in sleep.calls


def test_metadata_rate_limit_cools_down_and_is_not_counted(settings: CatalogSettings, engine: Engine) -> None:
    _feature(engine, 1, "Busy")

    router = Router(tmdb=lambda request: httpx.Response(429, json={"status_code": 25}))
    sleep = SleepRecorder()
    reports = asyncio.run(_runner(settings, engine, router, sleep).metadata())

    assert reports[0].rate_limited == 1
    assert 5.0 in sleep.calls
    assert QuotaStore(engine).count_calls("tmdb", LONG_AGO) == 0
    assert TitleStore(engine).get_by_tmdb_id(1).metadata_fetched_at is None


def test_series_metadata_waits_for_both_calls_before_cooling_down(
    settings: CatalogSettings, engine: Engine
) -> None:
    _feature(engine, 1399, "Busy Series", kind="series")

    router = Router(tmdb=lambda request: httpx.Response(429, json={"status_code": 25}))
    sleep = SleepRecorder()
    reports = asyncio.run(_runner(settings, engine, router, sleep).metadata())

    assert sorted(router.paths("api.themoviedb.org")) == ["/3/tv/1399", "/3/tv/1399/external_ids"]
    assert reports[0].rate_limited == 1
    assert reports[0].errors == 0
    assert sleep.calls.count(5.0) == 1


def test_series_metadata_is_not_stored_when_external_ids_fail(settings: CatalogSettings, engine: Engine) -> None:
    _feature(engine, 1400, "Half Answered", kind="series")

    def tmdb(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/3/tv/1400":
            return httpx.Response(200, json={"id": 1400, "name": "Half Answered"})
        return httpx.Response(500, json={"status_code": 11})

    reports = asyncio.run(_runner(settings, engine, Router(tmdb=tmdb)).metadata())

    assert reports[0].errors == 1
    assert TitleStore(engine).get_by_tmdb_id(1400).metadata_fetched_at is None


def test_metadata_pass_is_disabled_without_key(tmp_path: Path) -> None:
    settings = CatalogSettings(database_url=f"sqlite:///{tmp_path / 'catalog.db'}")
    engine = create_engine_from_settings(settings)
    init_database(engine)
    router = Router()

    reports = asyncio.run(_runner(settings, engine, router).metadata())
    engine.dispose()

    assert reports[0].stopped_reason == "disabled"
    assert router.requests == []


# --- presence ---------------------------------------------------------------


def test_presence_maps_region_offers_to_tracked_services(settings: CatalogSettings, engine: Engine) -> None:
    title_id = _feature(engine, 550, "Fight Club")
    _with_metadata(engine, 550)

    def tmdb(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/3/movie/550/watch/providers"
        return httpx.Response(
            200,
            json={
                "id": 550,
                "results": {
                    "US": {
                        "flatrate": [{"provider_id": 8}, {"provider_id": 9999}],
                        "ads": [{"provider_id": 73}],
                        "rent": [{"provider_id": 9}],
                    },
                    "GB": {"flatrate": [{"provider_id": 15}]},
                },
            },
        )

    report = asyncio.run(_runner(settings, engine, Router(tmdb=tmdb)).presence())

    rows = {(row.service_id, row.access_type): row for row in AvailabilityStore(engine).for_title(title_id)}
    assert set(rows) == {("netflix", "subscription"), ("tubi", "free"), ("prime", "rent")}
    assert all(row.stream_url is None and row.source == "tmdb_providers" for row in rows.values())
    assert report.rows_written == 3


def test_presence_treats_404_as_not_tracked(settings: CatalogSettings, engine: Engine) -> None:
    title_id = _feature(engine, 77, "Obscure")
    _with_metadata(engine, 77)

    report = asyncio.run(_runner(settings, engine, Router(tmdb=_not_found)).presence())

    assert report.missed == 1
    assert report.errors == 0
    assert AvailabilityStore(engine).for_title(title_id) == []


# --- direct URLs ------------------------------------------------------------


def _watchmode_details(watchmode_id: int, sources: list[dict]) -> httpx.Response:
    return httpx.Response(200, json={"id": watchmode_id, "title": "Example", "sources": sources})


def test_watchmode_stores_urls_and_derives_status(settings: CatalogSettings, engine: Engine) -> None:
    found = _feature(engine, 1, "Found Film", imdb_id="tt0000011", priority=1)
    missing = _feature(engine, 2, "Missing Film", priority=2)
    AvailabilityStore(engine).upsert(
        AvailabilityFact(title_id=found, service_id="hulu", access_type="subscription", source="tmdb_providers")
    )

    def watchmode(request: httpx.Request) -> httpx.Response:
        assert request.url.params["apiKey"] == "watchmode-key"
        if request.url.path == "/v1/title/tt0000011/details/":
            return _watchmode_details(
                100,
                [
                    {"name": "Netflix", "type": "sub", "region": "US", "web_url": "https://netflix.com/t/1"},
                    {"name": "Prime Video", "type": "rent", "region": "US", "web_url": "https://amazon.com/t/1", "price": 3.99},
                    {"name": "Netflix", "type": "sub", "region": "CA", "web_url": "https://netflix.com/ca/1"},
                    {"name": "Vudu", "type": "buy", "region": "US", "web_url": "https://vudu.com/1"},
                    {"name": "Hulu", "type": "tve", "region": "US", "web_url": "https://hulu.com/1"},
                ],
            )
        if request.url.path == "/v1/search/":
            return httpx.Response(200, json={"title_results": []})
        return _not_found(request)

    router = Router(watchmode=watchmode)
    report = asyncio.run(_runner(settings, engine, router).watchmode())

    featured = FeaturedStore(engine)
    rows = {(row.service_id, row.access_type): row for row in AvailabilityStore(engine).for_title(found)}
    assert rows[("netflix", "subscription")].stream_url == "https://netflix.com/t/1"
    assert rows[("prime", "rent")].price == pytest.approx(3.99)
    assert rows[("hulu", "subscription")].stream_url is None
    assert featured.get_status(found) == "partial"
    assert featured.provider_title_id(found, "watchmode") == "100"

    assert featured.get_status(missing) == "failed"
    assert router.paths("api.watchmode.com") == [
        "/v1/title/tt0000011/details/",
        "/v1/title/movie-2/details/",
        "/v1/search/",
    ]
    assert (report.enriched, report.missed, report.errors) == (1, 1, 0)


def test_watchmode_reuses_stored_identifier(settings: CatalogSettings, engine: Engine) -> None:
    title_id = _feature(engine, 5, "Known", imdb_id="tt0000055")
    FeaturedStore(engine).record_provider_link(
        title_id, "watchmode", outcome="found", provider_title_id="4242", now=datetime(2020, 1, 1)
    )

    router = Router(
        watchmode=lambda request: _watchmode_details(
            4242, [{"name": "Tubi", "type": "free", "region": "US", "web_url": "https://tubitv.com/5"}]
        )
    )
    asyncio.run(_runner(settings, engine, router).watchmode())

    assert router.paths("api.watchmode.com") == ["/v1/title/4242/details/"]
    assert FeaturedStore(engine).get_status(title_id) == "complete"


def test_watchmode_stops_when_daily_budget_is_reached(tmp_path: Path) -> None:
    settings = CatalogSettings(
        database_url=f"sqlite:///{tmp_path / 'catalog.db'}",
        watchmode_api_key="watchmode-key",
        budgets=ProviderBudgets(watchmode_daily=3, watchmode_monthly=1000),
    )
    engine = create_engine_from_settings(settings)
    init_database(engine)
    first = _feature(engine, 1, "First", priority=1)
    second = _feature(engine, 2, "Second", priority=2)

    def watchmode(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/v1/search/":
            return httpx.Response(200, json={"title_results": [{"id": 55, "name": "First", "tmdb_id": 1}]})
        if request.url.path == "/v1/title/55/details/":
            return _watchmode_details(
                55, [{"name": "Netflix", "type": "sub", "region": "US", "web_url": "https://netflix.com/55"}]
            )
        return _not_found(request)

    router = Router(watchmode=watchmode)
    report = asyncio.run(_runner(settings, engine, router).watchmode())

    quota = QuotaStore(engine)
    featured = FeaturedStore(engine)
    assert quota.count_calls("watchmode", LONG_AGO) == 3
    assert report.stopped_reason == "Daily budget exhausted (3/3)"
    assert featured.get_status(first) == "complete"
    assert featured.get_status(second) == "pending"

    again = asyncio.run(_runner(settings, engine, router).watchmode())
    engine.dispose()
    assert again.selected == 0
    assert quota.count_calls("watchmode", LONG_AGO) == 3


def test_watchmode_stops_when_monthly_budget_is_reached(tmp_path: Path) -> None:
    settings = CatalogSettings(
        database_url=f"sqlite:///{tmp_path / 'catalog.db'}",
        watchmode_api_key="watchmode-key",
        budgets=ProviderBudgets(watchmode_daily=33, watchmode_monthly=5),
    )
    engine = create_engine_from_settings(settings)
    init_database(engine)
    title_id = _feature(engine, 1, "Waiting")
    quota = QuotaStore(engine)
    month_start = start_of_month(utcnow())
    for _ in range(5):
        quota.log_call("watchmode", "title/0", called_at=month_start)

    router = Router(watchmode=_not_found)
    report = asyncio.run(_runner(settings, engine, router).watchmode())

    assert report.stopped_reason == "Monthly budget exhausted (5/5)"
    assert report.selected == 0
    assert router.requests == []
    assert quota.count_calls("watchmode", LONG_AGO) == 5
    assert FeaturedStore(engine).get_status(title_id) == "pending"
    engine.dispose()


def test_title_completed_by_watchmode_costs_motn_nothing(settings: CatalogSettings, engine: Engine) -> None:
    title_id = _feature(engine, 40, "Done Early", imdb_id="tt0000040")

    router = Router(
        watchmode=lambda request: _watchmode_details(
            400, [{"name": "Netflix", "type": "sub", "region": "US", "web_url": "https://netflix.com/40"}]
        ),
        motn=lambda request: httpx.Response(500),
    )
    runner = _runner(settings, engine, router)
    asyncio.run(runner.watchmode())
    assert FeaturedStore(engine).get_status(title_id) == "complete"

    report = asyncio.run(runner.motn())

    assert report.selected == 0
    assert report.enriched == 0
    assert router.paths("streaming-availability.p.rapidapi.com") == []
    assert QuotaStore(engine).count_calls("motn", LONG_AGO) == 0


def test_watchmode_server_errors_leave_status_untouched(settings: CatalogSettings, engine: Engine) -> None:
    title_id = _feature(engine, 8, "Flaky")

    router = Router(watchmode=lambda request: httpx.Response(500, json={"error": "boom"}))
    report = asyncio.run(_runner(settings, engine, router).watchmode())

    assert report.errors == 1
    assert FeaturedStore(engine).get_status(title_id) == "pending"
    assert QuotaStore(engine).count_calls("watchmode", LONG_AGO) == 0
    assert len(router.paths("api.watchmode.com")) == 2


def test_motn_uses_header_auth_and_maps_addons(settings: CatalogSettings, engine: Engine) -> None:
    title_id = _feature(engine, 3, "Series Three", kind="series", imdb_id="tt0000033")
    FeaturedStore(engine).set_status(title_id, "failed")

    def motn(request: httpx.Request) -> httpx.Response:
        assert request.headers["X-RapidAPI-Key"] == "motn-key"
        assert request.url.path == "/shows/tt0000033"
        assert request.url.params["country"] == "us"
        return httpx.Response(
            200,
            json={
                "id": "7781",
                "imdbId": "tt0000033",
                "tmdbId": "tv/3",
                "streamingOptions": {
                    "us": [
                        {"service": {"id": "hbo"}, "type": "addon", "link": "https://max.com/s/3"},
                        {
                            "service": {"id": "apple"},
                            "type": "buy",
                            "link": "https://tv.apple.com/s/3",
                            "price": {"amount": "19.99", "currency": "USD"},
                        },
                        {"service": {"id": "mubi"}, "type": "subscription", "link": "https://mubi.com/3"},
                    ]
                },
            },
        )

    report = asyncio.run(_runner(settings, engine, Router(motn=motn)).motn())

    rows = {(row.service_id, row.access_type): row for row in AvailabilityStore(engine).for_title(title_id)}
    assert set(rows) == {("max", "subscription"), ("appletv", "buy")}
    assert rows[("appletv", "buy")].price == pytest.approx(19.99)
    assert all(row.source == "motn" for row in rows.values())
    assert FeaturedStore(engine).get_status(title_id) == "complete"
    assert report.enriched == 1


def test_direct_url_pass_is_skipped_without_key(tmp_path: Path) -> None:
    settings = CatalogSettings(database_url=f"sqlite:///{tmp_path / 'catalog.db'}")
    engine = create_engine_from_settings(settings)
    init_database(engine)
    _feature(engine, 1, "Anything")
    router = Router()

    report = asyncio.run(_runner(settings, engine, router).motn())
    engine.dispose()

    assert report.stopped_reason == "disabled"
    assert router.requests == []


def test_budget_guard_remaining_and_check(engine: Engine) -> None:
    quota = QuotaStore(engine)
    now = datetime(2024, 3, 31, 23, 0, 0)
    for offset in range(2):
        quota.log_call("watchmode", "title/x", called_at=now - timedelta(hours=offset))
    quota.log_call("watchmode", "title/y", called_at=now - timedelta(days=3))
    guard = BudgetGuard(
        quota,
        [QuotaBudget("watchmode", 2, "day"), QuotaBudget("watchmode", 10, "month")],
        clock=lambda: now,
    )

    assert guard.remaining() == 0
    with pytest.raises(BudgetExhausted) as excinfo:
        guard.check()
    assert excinfo.value.reason == "Daily budget exhausted (2/2)"

    next_day = BudgetGuard(quota, [QuotaBudget("watchmode", 2, "day")], clock=lambda: now + timedelta(hours=2))
    assert next_day.remaining() == 2
    next_day.check()


# --- link verification and publishing ----------------------------------------


def test_link_verifier_records_live_dead_and_timeouts(settings: CatalogSettings, engine: Engine) -> None:
    title_id = _feature(engine, 12, "Link Check")
    availability = AvailabilityStore(engine)
    for service_id in ("netflix", "hulu", "tubi"):
        availability.upsert(
            AvailabilityFact(
                title_id=title_id,
                service_id=service_id,
                access_type="subscription",
                stream_url=f"https://{service_id}.example/12",
                source="watchmode",
            )
        )

    def web(request: httpx.Request) -> httpx.Response:
        assert request.method == "HEAD"
        if request.url.host == "netflix.example":
            return httpx.Response(200)
        if request.url.host == "hulu.example":
            return httpx.Response(404)
        raise httpx.ReadTimeout("timed out", request=request)

    report = asyncio.run(_runner(settings, engine, Router(web=web)).verify())

    rows = {row.service_id: row for row in availability.for_title(title_id)}
    assert (report.live, report.dead, report.timed_out) == (1, 1, 1)
    assert rows["netflix"].stream_url_status == 200
    assert rows["hulu"].stream_url_status == 404
    assert rows["tubi"].stream_url_status == 0
    assert rows["tubi"].stream_url_verified_at is not None
    assert availability.urls_to_verify(10) == []


def test_pipeline_publishes_projection_without_dead_links(settings: CatalogSettings, engine: Engine) -> None:
    title_id = _feature(engine, 21, "Published")
    _with_metadata(engine, 21)
    availability = AvailabilityStore(engine)
    for service_id, url in (("netflix", "https://netflix.example/21"), ("hulu", "https://hulu.example/21")):
        availability.upsert(
            AvailabilityFact(
                title_id=title_id, service_id=service_id, access_type="subscription", stream_url=url, source="motn"
            )
        )

    def tmdb(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/watch/providers"):
            return httpx.Response(200, json={"results": {}})
        return httpx.Response(200, json={"id": 21, "title": "Published"})

    router = Router(
        tmdb=tmdb,
        watchmode=_not_found,
        motn=_not_found,
        web=lambda request: httpx.Response(404 if request.url.host == "hulu.example" else 200),
    )
    report = asyncio.run(_runner(settings, engine, router).pipeline())

    payload = json.loads(Path(settings.publish_path).read_text(encoding="utf-8"))
    assert report.failed_passes == []
    assert report.published == 1
    assert payload["count"] == 1
    assert [service["service_id"] for service in payload["titles"][0]["services"]] == ["netflix"]


def test_malformed_provider_body_only_affects_its_title(settings: CatalogSettings, engine: Engine) -> None:
    odd = _feature(engine, 31, "Odd Title", priority=1)
    good = _feature(engine, 32, "Good Title", priority=2)

    def tmdb(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/3/movie/31":
            return httpx.Response(200, json={"title": "Odd Title"})
        if request.url.path == "/3/movie/32":
            return httpx.Response(200, json={"id": 32, "title": "Good Title", "vote_average": 7.0})
        return httpx.Response(200, json={"results": {}})

    def watchmode(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/v1/title/movie-31/details/":
            return httpx.Response(200, json={"title": "Odd Title", "sources": "not a list"})
        if request.url.path == "/v1/title/movie-32/details/":
            return _watchmode_details(
                320, [{"name": "Netflix", "type": "sub", "region": "US", "web_url": "https://netflix.example/32"}]
            )
        return httpx.Response(200, json={"title_results": []})

    router = Router(tmdb=tmdb, watchmode=watchmode, motn=_not_found, web=lambda request: httpx.Response(200))
    report = asyncio.run(_runner(settings, engine, router).pipeline())

    passes = {item.name: item for item in report.passes}
    assert report.failed_passes == []
    assert (passes["metadata:fill"].enriched, passes["metadata:fill"].errors) == (1, 1)
    assert passes["watchmode"].enriched == 1
    assert passes["watchmode"].missed == 1
    assert "/v1/title/movie-32/details/" in router.paths("api.watchmode.com")

    featured = FeaturedStore(engine)
    assert featured.get_status(good) == "complete"
    assert featured.get_status(odd) == "failed"
    assert TitleStore(engine).get_by_tmdb_id(31).metadata_fetched_at is None
    assert report.verify is not None and report.verify.live == 1
    assert report.published == 2
