"""Executor HTTP asíncrono (GET / POST / PUT / form / multipart).

Todas las operaciones pasan por el mismo ciclo:

1. construir el cuerpo desde un `RequestDescriptor`,
2. despachar sobre la sesión httpx (cookies + TLS + User-Agent),
3. clasificar la respuesta en un `ResponseOutcome`:

   - 2xx  -> decodificar al tipo pedido; error o `null` -> DECODE_FAILED
   - 401  -> UNAUTHORIZED (el cuerpo se ignora)
   - otro -> FAILED con el reason phrase

Los verbos devuelven el valor o lanzan la excepción tipada. `send()` devuelve
el outcome sin lanzar, salvo `FileNotFound` y los fallos de transporte de
httpx, que se propagan siempre.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError

from adapters.http_client import build_async_client
from adapters.request_body import build_request_kwargs
from adapters.serializer import JsonSerializer
from core.config import ClientSettings
from core.domain.models import (
    OutcomeKind,
    RequestDescriptor,
    ResponseOutcome,
    SerializerOptions,
)
from core.interfaces.http_service import FormData

logger = logging.getLogger(__name__)

T = TypeVar("T")

_LOG_BODY_LIMIT = 200


def _truncate(text: str, limit: int = _LOG_BODY_LIMIT) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def _request_url(response: httpx.Response) -> str:
    try:
        return str(response.request.url)
    except RuntimeError:
        return ""


class HttpService:
    """Cliente HTTP ligado a un único host base.

    La sesión (cookies, TLS, cabeceras, serializador) se fija en el
    constructor y no cambia durante la vida del cliente.
    """

    def __init__(
        self,
        host: str | httpx.URL,
        serializer_options: SerializerOptions | None = None,
        ignore_certificate_validation: bool = False,
        *,
        settings: ClientSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        # Sin `settings` se usan los defaults de los campos, sin leer entorno ni .env.
        self._settings = settings or ClientSettings.model_construct()
        self._serializer = JsonSerializer(serializer_options)
        self._ignore_certificate_validation = ignore_certificate_validation
        self._client = build_async_client(
            host,
            self._settings,
            ignore_certificate_validation=self._ignore_certificate_validation,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings | None = None,
        serializer_options: SerializerOptions | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "HttpService":
        settings = settings or ClientSettings()
        if not settings.base_url:
            raise ValueError("base_url is not configured (set INCO_BASE_URL)")
        return cls(
            settings.base_url,
            serializer_options,
            settings.ignore_certificate_validation,
            settings=settings,
            transport=transport,
        )

    @property
    def base_url(self) -> httpx.URL:
        return self._client.base_url

    @property
    def cookies(self) -> httpx.Cookies:
        return self._client.cookies

    @property
    def serializer(self) -> JsonSerializer:
        return self._serializer

    @property
    def ignore_certificate_validation(self) -> bool:
        return self._ignore_certificate_validation

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpService":
        await self._client.__aenter__()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self._client.__aexit__(*exc_info)

    # -- verbos -----------------------------------------------------------

    async def get(self, url: str, *, response_type: type[T] | Any = Any) -> T:
        return (await self.send(RequestDescriptor.get(url), response_type=response_type)).unwrap()

    async def post(self, url: str, data: Any = None, *, response_type: type[T] | Any = Any) -> T:
        descriptor = RequestDescriptor.with_json("POST", url, data)
        return (await self.send(descriptor, response_type=response_type)).unwrap()

    async def post_form(self, url: str, data: FormData, *, response_type: type[T] | Any = Any) -> T:
        descriptor = RequestDescriptor.with_form(url, data)
        return (await self.send(descriptor, response_type=response_type)).unwrap()

    async def post_files(
        self, url: str, files: Iterable[str | Path], *, response_type: type[T] | Any = Any
    ) -> T:
        descriptor = RequestDescriptor.with_files(url, files)
        return (await self.send(descriptor, response_type=response_type)).unwrap()

    async def put(self, url: str, data: Any = None, *, response_type: type[T] | Any = Any) -> T:
        descriptor = RequestDescriptor.with_json("PUT", url, data)
        return (await self.send(descriptor, response_type=response_type)).unwrap()

    # -- ciclo común --------------------------------------------------------

    async def send(
        self, descriptor: RequestDescriptor, *, response_type: type[T] | Any = Any
    ) -> ResponseOutcome[T]:
        """Despacha `descriptor` y clasifica la respuesta."""

        kwargs = await build_request_kwargs(descriptor, self._serializer)
        logger.debug("%s %s (%s)", descriptor.method, descriptor.url, descriptor.kind.value)
        response = await self._client.request(descriptor.method, descriptor.url, **kwargs)
        return self.resolve(response, response_type)

    def resolve(self, response: httpx.Response, response_type: type[T] | Any = Any) -> ResponseOutcome[T]:
        """Clasifica una respuesta ya leída por completo."""

        url = _request_url(response)
        body = response.text
        common = {
            "url": url,
            "status_code": response.status_code,
            "reason_phrase": response.reason_phrase,
            "body": body,
            "target": response_type,
        }

        if response.is_success:
            try:
                value = self._serializer.loads(body, response_type)
            except ValidationError:
                value = None
            if value is None:
                logger.warning("cannot decode %s response from %s: %s", response.status_code, url, _truncate(body))
                return ResponseOutcome(kind=OutcomeKind.DECODE_FAILED, **common)
            return ResponseOutcome(kind=OutcomeKind.SUCCESS, value=value, **common)

        if response.status_code == httpx.codes.UNAUTHORIZED:
            logger.warning("unauthorized: %s", url)
            return ResponseOutcome(kind=OutcomeKind.UNAUTHORIZED, **common)

        logger.warning("request failed: %s %s %s", response.status_code, response.reason_phrase, url)
        return ResponseOutcome(kind=OutcomeKind.FAILED, **common)
