"""JSON-over-HTTP helper for the backends that have no SDK here."""

from __future__ import annotations

import httpx

from verdant.errors import ProviderError, ProviderTimeout


def post_json(
    client: httpx.Client,
    provider: str,
    url: str,
    payload: dict,
    *,
    params: dict | None = None,
    timeout: float,
) -> dict:
    """POST ``payload`` and return the decoded body, mapping every failure.

    Non-2xx answers become ``ProviderError`` carrying the raw body; a body
    that is not a JSON object is treated the same way.
    """
    try:
        resp = client.post(url, json=payload, params=params)
    except httpx.TimeoutException as exc:
        raise ProviderTimeout(provider, timeout) from exc
    except httpx.HTTPError as exc:
        raise ProviderError(provider, None, str(exc)) from exc

    if resp.is_error:
        raise ProviderError(provider, resp.status_code, resp.text)
    try:
        data = resp.json()
    except ValueError as exc:
        raise ProviderError(provider, resp.status_code, f"Malformed JSON: {resp.text[:200]}") from exc
    if not isinstance(data, dict):
        raise ProviderError(provider, resp.status_code, "Expected a JSON object")
    return data
