"""HTTP client helpers shared by the provider adapters."""
from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx
from pydantic import TypeAdapter, ValidationError

from ..catalog_api.stores.quota_store import QuotaStore
from .errors import ProviderError
from .quota import BudgetGuard

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


def create_client(
    base_url: str = "",
    *,
    timeout: float = DEFAULT_TIMEOUT,
    headers: Mapping[str, str] | None = None,
    follow_redirects: bool = False,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Instantiate an async HTTPX client with a configurable base URL."""

    return httpx.AsyncClient(
        base_url=base_url,
        timeout=timeout,
        headers=dict(headers or {}),
        follow_redirects=follow_redirects,
        transport=transport,
    )


def counts_against_budget(response: httpx.Response) -> bool:
    """A received 2xx, or a 404 answering "no such title", is a successful call."""

    return response.is_success or response.status_code == 404


class ProviderClient:
    """Audited access to one provider's HTTP API.

    Every attempt is appended to the quota log. When a guard is attached it
    is consulted before each request, so a budget can never be overrun.
    """

    def __init__(
        self,
        provider: str,
        client: httpx.AsyncClient,
        quota_store: QuotaStore,
        *,
        guard: BudgetGuard | None = None,
        default_params: Mapping[str, str] | None = None,
    ) -> None:
        self.provider = provider
        self._client = client
        self._quota_store = quota_store
        self._guard = guard
        self._default_params = dict(default_params or {})

    async def get_json(
        self,
        path: str,
        *,
        endpoint: str,
        title_id: int | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> Any | None:
        """GET ``path`` and return the decoded body, or ``None`` on 404.

        Raises :class:`ProviderError` for any other non-success status or a
        transport failure, and :class:`BudgetExhausted` when the guard refuses.
        """

        if self._guard is not None:
            self._guard.check()
        query = {**self._default_params, **(params or {})}
        try:
            response = await self._client.get(path, params=query)
        except httpx.HTTPError as exc:
            self._quota_store.log_call(self.provider, endpoint, title_id, success=False)
            raise ProviderError(self.provider, f"{endpoint} failed: {exc!r}") from exc

        self._quota_store.log_call(
            self.provider, endpoint, title_id, success=counts_against_budget(response)
        )
        if response.status_code == 404:
            logger.debug("%s %s returned 404", self.provider, endpoint)
            return None
        if not response.is_success:
            raise ProviderError(
                self.provider,
                f"{endpoint} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(
                self.provider, f"{endpoint} returned an undecodable body", status_code=response.status_code
            ) from exc

    def decode(self, model: Any, payload: Any, *, endpoint: str) -> Any:
        """Validate ``payload`` against ``model``; a schema mismatch is a :class:`ProviderError`."""

        try:
            return TypeAdapter(model).validate_python(payload)
        except ValidationError as exc:
            raise ProviderError(
                self.provider, f"{endpoint} returned an unexpected body ({exc.error_count()} validation errors)"
            ) from exc

    async def get_model(
        self,
        path: str,
        model: Any,
        *,
        endpoint: str,
        title_id: int | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> Any | None:
        """Like :meth:`get_json`, decoding the body into ``model``."""

        payload = await self.get_json(path, endpoint=endpoint, title_id=title_id, params=params)
        if payload is None:
            return None
        return self.decode(model, payload, endpoint=endpoint)
