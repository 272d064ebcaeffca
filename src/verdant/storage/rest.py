"""PostgREST-style client for the hosted database.

Filters are sent as ``?column=op.value`` query parameters and every write
asks for ``Prefer: return=representation`` so the affected rows come back.
The hosted REST interface has no multi-row transactions.
"""

from __future__ import annotations

import logging

import httpx

from verdant.errors import ConfigurationError, StoreError
from verdant.storage.base import Condition, Store

logger = logging.getLogger(__name__)


def encode_condition(condition: Condition) -> str:
    if condition.op == "in":
        return "in.(" + ",".join(str(v) for v in condition.value) + ")"
    value = condition.value
    if isinstance(value, bool):
        value = str(value).lower()
    elif value is None:
        return f"{'is' if condition.op == 'eq' else 'not.is'}.null"
    return f"{condition.op}.{value}"


class RestStore(Store):
    """Wrapper around the hosted store's REST and auth endpoints."""

    def __init__(
        self,
        base_url: str,
        service_key: str,
        *,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        if not base_url or not service_key:
            raise ConfigurationError("Supabase configuration missing")
        self._service_key = service_key
        self._client = client or httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={
                "apikey": service_key,
                "Authorization": f"Bearer {service_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=timeout,
        )

    def select(
        self,
        table: str,
        *conditions: Condition,
        order: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        params = self._params(conditions)
        params["select"] = "*"
        if order:
            params["order"] = f"{order}.{'desc' if descending else 'asc'}"
        if limit:
            params["limit"] = str(limit)
        return self._request("GET", table, params=params)

    def insert(self, table: str, rows: dict | list[dict]) -> list[dict]:
        return self._request("POST", table, json=rows, returning=True)

    def update(self, table: str, *conditions: Condition, values: dict) -> list[dict]:
        self._require_conditions(conditions, "update")
        return self._request(
            "PATCH", table, params=self._params(conditions), json=values, returning=True
        )

    def delete(self, table: str, *conditions: Condition) -> list[dict]:
        self._require_conditions(conditions, "delete")
        return self._request(
            "DELETE", table, params=self._params(conditions), returning=True
        )

    def resolve_user(self, token: str) -> str | None:
        """Look up the user behind a bearer token; any failure means anonymous."""
        try:
            resp = self._client.get(
                "/auth/v1/user",
                headers={"Authorization": f"Bearer {token}", "apikey": self._service_key},
            )
        except httpx.HTTPError as exc:
            logger.info("Could not resolve user from token: %s", exc)
            return None
        if resp.is_error:
            return None
        try:
            user = resp.json()
        except ValueError:
            logger.info("Auth endpoint returned a non-JSON body")
            return None
        return user.get("id") if isinstance(user, dict) else None

    def close(self) -> None:
        self._client.close()

    @staticmethod
    def _params(conditions: tuple[Condition, ...]) -> dict[str, str]:
        return {c.column: encode_condition(c) for c in conditions}

    def _request(
        self,
        method: str,
        table: str,
        *,
        params: dict | None = None,
        json: object = None,
        returning: bool = False,
    ) -> list[dict]:
        headers = {"Prefer": "return=representation"} if returning else None
        try:
            resp = self._client.request(
                method, f"/rest/v1/{table}", params=params, json=json, headers=headers
            )
        except httpx.HTTPError as exc:
            raise StoreError(f"{method} {table} failed: {exc}") from exc

        if resp.is_error:
            raise StoreError(f"{method} {table} failed ({resp.status_code}): {resp.text}")
        if not resp.content:
            return []
        try:
            data = resp.json()
        except ValueError as exc:
            raise StoreError(f"{method} {table} returned a malformed body: {exc}") from exc
        return data if isinstance(data, list) else [data]
