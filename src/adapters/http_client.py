"""httpx wrapper.

Why a wrapper:
- Standardizes timeouts and headers for the identification request.
- Eases testing: tests pass an `httpx.MockTransport` instead of the network.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    follow_redirects: bool = True,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with safe defaults.

    Why a builder:
    - Centralizes timeouts/headers so every caller behaves the same.
    - The `transport` hook is how tests avoid real network access.
    - POST callers pass `follow_redirects=False`: a 301/302 would be replayed
      as a body-less GET.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=follow_redirects,
        headers=headers,
        transport=transport,
    )
