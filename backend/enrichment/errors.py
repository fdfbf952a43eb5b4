"""Exception hierarchy shared by the enrichment passes."""
from __future__ import annotations


class EnrichmentError(RuntimeError):
    """Base class for pipeline failures."""


class ProviderError(EnrichmentError):
    """A provider call returned a non-success status or failed in transport."""

    def __init__(self, provider: str, message: str, *, status_code: int | None = None) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.status_code = status_code

    @property
    def rate_limited(self) -> bool:
        return self.status_code == 429


class BudgetExhausted(EnrichmentError):
    """A provider's call budget for the current window is used up."""

    def __init__(self, provider: str, reason: str) -> None:
        super().__init__(f"{provider}: {reason}")
        self.provider = provider
        self.reason = reason
