"""HTTP utilities shared by the provider adapters and discovery backends."""

from __future__ import annotations

from typing import Any

import httpx

_DEFAULT_HEADERS = {
    "User-Agent": "PersonFinder/1.0",
    "Accept": "application/json",
    "Accept-Language": "en-US,en;q=0.9,pt-BR;q=0.8",
}


async def fetch_response(
    url: str,
    *,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
    timeout: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.Response:
    """GET *url* and return the response without raising on HTTP status."""
    merged = {**_DEFAULT_HEADERS, **(headers or {})}
    async with httpx.AsyncClient(
        timeout=timeout, follow_redirects=True, transport=transport
    ) as client:
        return await client.get(url, headers=merged, params=params)


async def fetch_json(
    url: str,
    *,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
    timeout: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Any:
    resp = await fetch_response(
        url, headers=headers, params=params, timeout=timeout, transport=transport
    )
    resp.raise_for_status()
    return resp.json()
