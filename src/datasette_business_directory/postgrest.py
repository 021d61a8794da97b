"""
PostgREST record store.

Speaks the PostgREST dialect used by Supabase's ``/rest/v1`` endpoint, so a
directory that lives in a hosted Postgres can be moderated with the same
workflows as the bundled SQLite store.
"""

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from .errors import StoreReadFailed, StoreWriteFailed
from .store import AnyOf, Contains, Eq, Filter, In, OrderBy, RecordStore

logger = logging.getLogger(__name__)


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _quote(value: str) -> str:
    """Double-quote a value so commas and parentheses survive inside ``or=(...)``."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _ilike_pattern(text: str) -> str:
    # "*" is PostgREST's wildcard alias and cannot be escaped, so it is dropped.
    cleaned = text.replace("*", "").replace("%", "\\%").replace("_", "\\_")
    return f"*{cleaned}*"


def _operator(f: Filter, nested: bool) -> str:
    """Render ``f`` as a PostgREST operator expression (without the column)."""
    wrap = _quote if nested else (lambda v: v)
    if isinstance(f, Eq):
        if f.value is None:
            return "is.null"
        return f"eq.{wrap(_format_value(f.value))}"
    if isinstance(f, Contains):
        return f"ilike.{wrap(_ilike_pattern(f.text))}"
    if isinstance(f, In):
        return "in.(" + ",".join(_quote(_format_value(v)) for v in f.values) + ")"
    raise TypeError(f"Unsupported filter: {f!r}")


def filter_params(filters: Sequence[Filter]) -> list[tuple[str, str]]:
    """Translate filters into PostgREST query parameters."""
    params: list[tuple[str, str]] = []
    for f in filters:
        if isinstance(f, AnyOf):
            inner = ",".join(f"{g.column}.{_operator(g, nested=True)}" for g in f.filters)
            params.append(("or", f"({inner})"))
        else:
            params.append((f.column, _operator(f, nested=False)))
    return params


def order_param(order: Sequence[OrderBy]) -> str:
    return ",".join(f"{o.column}.{'desc' if o.descending else 'asc'}" for o in order)


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(data, dict) and data.get("message"):
        return data["message"]
    return f"HTTP {response.status_code}"


class PostgrestRecordStore(RecordStore):
    """Record store talking to a PostgREST endpoint over HTTP."""

    def __init__(
        self,
        rest_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.rest_url = rest_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    def _headers(self, **extra: str) -> dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            **extra,
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def query(self, table, filters=(), order=()):
        params = [("select", "*"), *filter_params(filters)]
        if order:
            params.append(("order", order_param(order)))

        async with self._client() as client:
            try:
                response = await client.get(
                    f"{self.rest_url}/{table}",
                    headers=self._headers(),
                    params=params,
                )
            except httpx.RequestError as e:
                logger.error(f"Query on {table} failed: {e}")
                raise StoreReadFailed(str(e)) from e

        if response.status_code >= 400:
            message = _error_message(response)
            logger.error(f"Query on {table} failed: {message}")
            raise StoreReadFailed(message)

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Query on {table} returned a non-JSON body")
            raise StoreReadFailed(f"Invalid response from record store: {e}") from e

    async def insert(self, table, row):
        async with self._client() as client:
            try:
                response = await client.post(
                    f"{self.rest_url}/{table}",
                    headers=self._headers(Prefer="return=representation"),
                    json=row,
                )
            except httpx.RequestError as e:
                raise StoreWriteFailed(str(e)) from e

        if response.status_code >= 400:
            raise StoreWriteFailed(_error_message(response))

        try:
            data = response.json()
        except ValueError as e:
            raise StoreWriteFailed(f"Invalid response from record store: {e}") from e
        if isinstance(data, list):
            data = data[0] if data else None
        if not isinstance(data, dict) or "id" not in data:
            raise StoreWriteFailed("Insert returned no row")
        return data

    async def delete(self, table, filters):
        if not filters:
            raise ValueError("Refusing to delete without filters")

        async with self._client() as client:
            try:
                response = await client.delete(
                    f"{self.rest_url}/{table}",
                    headers=self._headers(Prefer="return=representation"),
                    params=filter_params(filters),
                )
            except httpx.RequestError as e:
                raise StoreWriteFailed(str(e)) from e

        if response.status_code >= 400:
            raise StoreWriteFailed(_error_message(response))
        if response.status_code == 204 or not response.content:
            return 0
        try:
            data = response.json()
        except ValueError as e:
            raise StoreWriteFailed(f"Invalid response from record store: {e}") from e
        return len(data) if isinstance(data, list) else 0
