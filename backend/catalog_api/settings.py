"""Runtime configuration for the catalog pipeline and read API."""
from __future__ import annotations

import os

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .reference import DEFAULT_SERVICES
from .utils.paths import default_database_url, default_publish_path


CONFIG_FILE_ENV = "STREAMGUIDE_CONFIG_FILE"


class ProviderBudgets(BaseModel):
    """Per-provider ceilings on successful calls."""

    watchmode_daily: int = Field(default=33, ge=0, description="Watchmode calls allowed per UTC day.")
    watchmode_monthly: int = Field(default=1000, ge=0, description="Watchmode calls allowed per UTC month.")
    motn_daily: int = Field(default=95, ge=0, description="Movie of the Night calls allowed per UTC day.")


class BatchSizes(BaseModel):
    """Per-run batch sizes for the bounded passes."""

    bulk_import: int = Field(default=1000, ge=1, description="Rows committed per bulk import transaction.")
    metadata_refresh: int = Field(default=50, ge=0, description="Stale titles refreshed per run.")
    presence: int = Field(default=500, ge=0, description="Titles checked for provider presence per run.")
    link_verify: int = Field(default=200, ge=0, description="Stream URLs probed per run.")


class SeedFiles(BaseModel):
    """Locations of the curated seed lists."""

    movies_csv: str = Field(default="./data/movies.csv", description="Curated movie list.")
    series_csv: str = Field(default="./data/tvshows.csv", description="Curated series list.")


class CatalogSettings(BaseSettings):
    """Environment- and file-aware settings for every pipeline command."""

    database_url: str = Field(
        default_factory=default_database_url,
        description="Connection URL for the catalog SQLite database.",
    )
    database_echo: bool = Field(default=False, description="Enable SQL echo for debugging queries.")
    tmdb_api_key: str | None = Field(default=None, description="TMDB API key; disables metadata passes when unset.")
    watchmode_api_key: str | None = Field(default=None, description="Watchmode API key; disables that pass when unset.")
    motn_api_key: str | None = Field(default=None, description="RapidAPI key for Movie of the Night.")
    region: str = Field(default="US", min_length=2, max_length=2, description="Target region code.")
    tracked_services: list[str] = Field(
        default_factory=lambda: [service.id for service in DEFAULT_SERVICES],
        description="Internal service identifiers that availability rows may reference.",
    )
    budgets: ProviderBudgets = Field(default_factory=ProviderBudgets)
    batches: BatchSizes = Field(default_factory=BatchSizes)
    metadata_stale_days: int = Field(default=30, ge=1, description="Age after which metadata is refreshed.")
    seed: SeedFiles = Field(default_factory=SeedFiles)
    publish_path: str = Field(
        default_factory=default_publish_path,
        description="Where the published catalog projection is written.",
    )

    model_config = SettingsConfigDict(
        env_prefix="STREAMGUIDE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        json_file="config.json",
        json_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        json_file = os.environ.get(CONFIG_FILE_ENV) or settings_cls.model_config.get("json_file")
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            JsonConfigSettingsSource(settings_cls, json_file=json_file),
        )

    @property
    def region_code(self) -> str:
        return self.region.upper()
