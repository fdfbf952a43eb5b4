"""Mappings from provider-specific service and offer vocabularies to catalog ids."""
from __future__ import annotations

TMDB_PROVIDER_MAP: dict[int, str] = {
    8: "netflix",
    9: "prime",
    15: "hulu",
    337: "disney",
    1899: "max",
    350: "appletv",
    531: "paramount",
    386: "peacock",
    526: "amc",
    151: "britbox",
    258: "criterion",
    73: "tubi",
    300: "pluto",
    207: "roku",
    613: "freevee",
}

# Keys of a region block in TMDB's watch/providers response.
TMDB_OFFER_ACCESS: dict[str, str] = {
    "flatrate": "subscription",
    "free": "free",
    "ads": "free",
    "rent": "rent",
    "buy": "buy",
}

WATCHMODE_SERVICE_MAP: dict[str, str] = {
    "netflix": "netflix",
    "amazon prime": "prime",
    "prime video": "prime",
    "hulu": "hulu",
    "disney plus": "disney",
    "disney+": "disney",
    "hbo max": "max",
    "max": "max",
    "apple tv plus": "appletv",
    "apple tv+": "appletv",
    "paramount plus": "paramount",
    "paramount+": "paramount",
    "peacock": "peacock",
    "amc plus": "amc",
    "amc+": "amc",
    "britbox": "britbox",
    "criterion channel": "criterion",
    "tubi": "tubi",
    "pluto tv": "pluto",
    "the roku channel": "roku",
    "amazon freevee": "freevee",
    "freevee": "freevee",
}

WATCHMODE_ACCESS: dict[str, str] = {
    "sub": "subscription",
    "free": "free",
    "rent": "rent",
    "buy": "buy",
}

MOTN_SERVICE_MAP: dict[str, str] = {
    "netflix": "netflix",
    "prime": "prime",
    "hulu": "hulu",
    "disney": "disney",
    "hbo": "max",
    "max": "max",
    "apple": "appletv",
    "paramount": "paramount",
    "peacock": "peacock",
    "amc": "amc",
    "britbox": "britbox",
    "criterion": "criterion",
    "tubi": "tubi",
    "pluto": "pluto",
    "roku": "roku",
    "freevee": "freevee",
}

MOTN_ACCESS: dict[str, str] = {
    "subscription": "subscription",
    "addon": "subscription",
    "free": "free",
    "rent": "rent",
    "buy": "buy",
}


def tmdb_service(provider_id: int) -> str | None:
    return TMDB_PROVIDER_MAP.get(provider_id)


def watchmode_service(name: str) -> str | None:
    return WATCHMODE_SERVICE_MAP.get(name.strip().lower())


def motn_service(service_id: str) -> str | None:
    return MOTN_SERVICE_MAP.get(service_id.strip().lower())


def watchmode_access(offer_type: str) -> str | None:
    return WATCHMODE_ACCESS.get(offer_type.strip().lower())


def motn_access(offer_type: str) -> str | None:
    return MOTN_ACCESS.get(offer_type.strip().lower())
