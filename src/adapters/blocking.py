"""Fachada bloqueante sobre `HttpService`.

No tiene lógica propia: cada verbo ejecuta la corrutina equivalente hasta el
final en un event loop privado y devuelve su resultado. Las excepciones se
propagan sin envolver, así `Unauthorized`, `RequestFailed`, `DecodeFailed`,
`FileNotFound` y los errores de transporte de httpx llegan intactos.

Todas las llamadas usan el mismo loop privado: las conexiones del
`httpx.AsyncClient` quedan ligadas al loop donde se abrieron.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Iterable
from pathlib import Path
from typing import Any, TypeVar

import httpx

from adapters.http_service import HttpService
from core.config import ClientSettings
from core.domain.models import RequestDescriptor, ResponseOutcome, SerializerOptions
from core.interfaces.http_service import FormData

T = TypeVar("T")


class BlockingHttpService:
    """Los cinco verbos de `HttpService`, síncronos."""

    def __init__(
        self,
        host: str | httpx.URL | None = None,
        serializer_options: SerializerOptions | None = None,
        ignore_certificate_validation: bool = False,
        *,
        settings: ClientSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        service: HttpService | None = None,
    ) -> None:
        if service is None:
            if host is None:
                service = HttpService.from_settings(settings, serializer_options, transport=transport)
            else:
                service = HttpService(
                    host,
                    serializer_options,
                    ignore_certificate_validation,
                    settings=settings,
                    transport=transport,
                )
        self._service = service
        self._loop = asyncio.new_event_loop()

    @property
    def service(self) -> HttpService:
        return self._service

    def wait(self, awaitable: Awaitable[T]) -> T:
        """Bloquea hasta que `awaitable` termine en el loop de la fachada."""

        if self._loop.is_closed():
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise RuntimeError("BlockingHttpService is closed")
        return self._loop.run_until_complete(awaitable)

    def get(self, url: str, *, response_type: type[T] | Any = Any) -> T:
        return self.wait(self._service.get(url, response_type=response_type))

    def post(self, url: str, data: Any = None, *, response_type: type[T] | Any = Any) -> T:
        return self.wait(self._service.post(url, data, response_type=response_type))

    def post_form(self, url: str, data: FormData, *, response_type: type[T] | Any = Any) -> T:
        return self.wait(self._service.post_form(url, data, response_type=response_type))

    def post_files(self, url: str, files: Iterable[str | Path], *, response_type: type[T] | Any = Any) -> T:
        return self.wait(self._service.post_files(url, files, response_type=response_type))

    def put(self, url: str, data: Any = None, *, response_type: type[T] | Any = Any) -> T:
        return self.wait(self._service.put(url, data, response_type=response_type))

    def send(self, descriptor: RequestDescriptor, *, response_type: type[T] | Any = Any) -> ResponseOutcome[T]:
        return self.wait(self._service.send(descriptor, response_type=response_type))

    def close(self) -> None:
        if self._loop.is_closed():
            return
        try:
            self._loop.run_until_complete(self._service.aclose())
        finally:
            self._loop.close()

    def __enter__(self) -> "BlockingHttpService":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
