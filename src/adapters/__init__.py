"""Adaptadores de I/O: sesión httpx, serializador, executor y fachada bloqueante."""

from adapters.blocking import BlockingHttpService
from adapters.http_service import HttpService

__all__ = [
	"BlockingHttpService",
	"HttpService",
]
