"""Taxonomía de errores del cliente HTTP.

Por qué aquí:
- Los errores son parte del contrato de cada verbo (GET/POST/PUT/form/files),
  así que viven en el dominio junto a `ResponseOutcome`.
- Los fallos de transporte NO se envuelven: se propagan tal cual desde httpx.
  `TransportFault` es solo un alias para que el llamador pueda capturarlos sin
  importar httpx.
"""

from __future__ import annotations

import errno

import httpx

TransportFault = httpx.TransportError


class HttpServiceError(Exception):
    """Base de todos los errores clasificados por el executor."""


class Unauthorized(HttpServiceError):
    """La respuesta fue 401. El cuerpo se ignora."""

    def __init__(self, url: str | None = None) -> None:
        self.url = url
        super().__init__(f"unauthorized: {url}" if url else "unauthorized")


class RequestFailed(HttpServiceError):
    """Status no-2xx distinto de 401."""

    def __init__(self, reason_phrase: str, *, status_code: int | None = None, body: str = "") -> None:
        self.reason_phrase = reason_phrase
        self.status_code = status_code
        self.body = body
        super().__init__(reason_phrase)


class DecodeFailed(HttpServiceError):
    """Respuesta 2xx cuyo cuerpo no se puede decodificar al tipo pedido (o decodifica a null)."""

    def __init__(self, raw_body: str, *, target: object = None) -> None:
        self.raw_body = raw_body
        self.target = target
        super().__init__(f"Cannot parse {raw_body!r}")


class FileNotFound(HttpServiceError, FileNotFoundError):
    """Un fichero a subir no existe localmente. Se detecta antes de cualquier request."""

    def __init__(self, path: str) -> None:
        self.path = path
        FileNotFoundError.__init__(self, errno.ENOENT, "File not exist", path)

    def __str__(self) -> str:
        return f"File not exist: {self.path}"
