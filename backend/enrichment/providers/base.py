"""Common shape of the direct-URL provider adapters."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from ...catalog_api.schemas import FeaturedTitleModel
from ..errors import ProviderError
from ..http import ProviderClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StreamingOffer:
    """A provider offer already mapped to catalog vocabulary."""

    service_id: str
    access_type: str
    stream_url: str | None
    price: float | None = None


@dataclass(slots=True)
class ProviderLookup:
    """What a provider knows about one title."""

    provider_title_id: str | None
    offers: list[StreamingOffer] = field(default_factory=list)


class DirectUrlProvider(ABC):
    """A provider able to return deep links for a title.

    Subclasses implement a primary lookup keyed on identifiers and a
    secondary title search. :meth:`lookup` tries them in order.
    """

    name: str
    delay: float

    def __init__(self, client: ProviderClient | None, region: str) -> None:
        self._client = client
        self.region = region.upper()

    @property
    def enabled(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> ProviderClient:
        if self._client is None:
            raise RuntimeError(f"{self.name} has no API key configured")
        return self._client

    async def lookup(self, title: FeaturedTitleModel, known_id: str | None = None) -> ProviderLookup | None:
        """Return the provider's record for ``title`` or ``None`` when it has none.

        A :class:`ProviderError` is raised only when every lookup strategy
        failed; a single definitive "not found" makes the outcome a miss.
        """

        errors: list[ProviderError] = []
        for strategy in (self.lookup_by_id, self.lookup_by_search):
            try:
                result = await strategy(title, known_id)
            except ProviderError as exc:
                logger.warning("%s lookup for tmdb:%s failed: %s", self.name, title.tmdb_id, exc)
                errors.append(exc)
                continue
            if result is not None:
                return result
        if len(errors) == 2:
            raise errors[-1]
        return None

    @abstractmethod
    async def lookup_by_id(self, title: FeaturedTitleModel, known_id: str | None) -> ProviderLookup | None:
        """Look the title up by stored or cross-reference identifier."""

    @abstractmethod
    async def lookup_by_search(self, title: FeaturedTitleModel, known_id: str | None) -> ProviderLookup | None:
        """Look the title up by name."""
