"""Static reference data seeded into the catalog at schema initialisation."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ServiceDefinition:
    """A streaming platform the catalog tracks.

    ``color_hex`` is cosmetic data for the UI only. ``is_free`` is the
    per-service policy deciding the link-verification freshness window.
    """

    id: str
    display_name: str
    is_free: bool
    color_hex: str | None
    base_url: str


DEFAULT_SERVICES: tuple[ServiceDefinition, ...] = (
    ServiceDefinition("netflix", "Netflix", False, "#E50914", "https://www.netflix.com"),
    ServiceDefinition("prime", "Prime Video", False, "#00A8E1", "https://www.amazon.com/primevideo"),
    ServiceDefinition("hulu", "Hulu", False, "#1CE783", "https://www.hulu.com"),
    ServiceDefinition("disney", "Disney+", False, "#113CCF", "https://www.disneyplus.com"),
    ServiceDefinition("max", "Max", False, "#002BE7", "https://www.max.com"),
    ServiceDefinition("appletv", "Apple TV+", False, "#000000", "https://tv.apple.com"),
    ServiceDefinition("paramount", "Paramount+", False, "#0064FF", "https://www.paramountplus.com"),
    ServiceDefinition("peacock", "Peacock", False, "#F47522", "https://www.peacocktv.com"),
    ServiceDefinition("amc", "AMC+", False, "#00AEEF", "https://www.amcplus.com"),
    ServiceDefinition("britbox", "BritBox", False, "#0F62AC", "https://www.britbox.com"),
    ServiceDefinition("criterion", "Criterion Channel", False, "#000000", "https://www.criterionchannel.com"),
    ServiceDefinition("tubi", "Tubi", True, "#FA5141", "https://tubitv.com"),
    ServiceDefinition("pluto", "Pluto TV", True, "#FFC619", "https://pluto.tv"),
    ServiceDefinition("roku", "Roku Channel", True, "#6C1D8E", "https://therokuchannel.roku.com"),
    ServiceDefinition("freevee", "Amazon Freevee", True, "#00A8E1", "https://www.amazon.com/adlp/freevee"),
    ServiceDefinition("youtube", "YouTube", True, "#FF0000", "https://www.youtube.com"),
)

ACCESS_TYPES = ("subscription", "free", "rent", "buy")
TITLE_KINDS = ("movie", "series")
AVAILABILITY_SOURCES = ("tmdb_providers", "watchmode", "motn", "manual")
ENRICH_STATUSES = ("pending", "partial", "complete", "failed")
