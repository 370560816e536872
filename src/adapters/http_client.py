"""Construcción de la sesión httpx.

Por qué un builder:
- Centraliza host base, User-Agent, cookies, timeouts y política TLS para que
  cada executor arranque con la misma sesión.
- Facilita testeo: se puede inyectar un `transport` (p.ej. `httpx.MockTransport`).

La política TLS se fija una sola vez, al construir la sesión, con un
`ssl.SSLContext` propio. Nada de estado global del proceso.
"""

from __future__ import annotations

import ssl

import certifi
import httpx

from core.config import ClientSettings

MINIMUM_TLS_VERSION = ssl.TLSVersion.TLSv1_2


def build_ssl_context(*, ignore_certificate_validation: bool = False) -> ssl.SSLContext:
    """Contexto TLS de la sesión: siempre TLS >= 1.2.

    En modo permisivo se desactivan hostname check y verificación de
    certificados, solo para el contexto devuelto.
    """

    context = ssl.create_default_context(cafile=certifi.where())
    context.minimum_version = MINIMUM_TLS_VERSION
    if ignore_certificate_validation:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def build_async_client(
    base_url: str | httpx.URL,
    settings: ClientSettings | None = None,
    *,
    ignore_certificate_validation: bool | None = None,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` ligado a un único host base.

    `ignore_certificate_validation` tiene prioridad sobre el valor de `settings`.
    """

    settings = settings or ClientSettings.model_construct()
    if ignore_certificate_validation is None:
        ignore_certificate_validation = settings.ignore_certificate_validation

    headers: dict[str, str] = {"User-Agent": settings.user_agent}
    if extra_headers:
        headers.update(extra_headers)

    return httpx.AsyncClient(
        base_url=base_url,
        headers=headers,
        cookies=httpx.Cookies(),
        timeout=httpx.Timeout(settings.timeout_seconds),
        follow_redirects=settings.follow_redirects,
        verify=build_ssl_context(ignore_certificate_validation=ignore_certificate_validation),
        transport=transport,
    )
