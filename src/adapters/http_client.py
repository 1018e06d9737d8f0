"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts y headers para el SDK IA y los checks del doctor.
- Facilita testeo: se puede sustituir por un cliente con `MockTransport`.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings


def build_async_client(
    settings: AppSettings | None = None,
    *,
    timeout_seconds: float | None = None,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con defaults seguros."""

    settings = settings or AppSettings()
    headers: dict[str, str] = {"User-Agent": settings.user_agent}
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout_seconds or settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )
