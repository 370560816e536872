"""Contratos del cliente HTTP.

Por qué Protocol:
- Contrato estructural (duck typing) sin herencia rígida.
- El contrato asíncrono es la fuente de verdad; la versión bloqueante
  expone los mismos cinco verbos y espera a que terminen.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")

FormData = Mapping[str, str] | Iterable[tuple[str, str]]


@runtime_checkable
class AsyncRequestExecutor(Protocol):
    """Cinco verbos asíncronos con el mismo contrato de salida y de fallo."""

    async def get(self, url: str, *, response_type: type[T] | Any = Any) -> T: ...

    async def post(self, url: str, data: Any = None, *, response_type: type[T] | Any = Any) -> T: ...

    async def post_form(self, url: str, data: FormData, *, response_type: type[T] | Any = Any) -> T: ...

    async def post_files(
        self, url: str, files: Iterable[str | Path], *, response_type: type[T] | Any = Any
    ) -> T: ...

    async def put(self, url: str, data: Any = None, *, response_type: type[T] | Any = Any) -> T: ...


@runtime_checkable
class RequestExecutor(Protocol):
    """Mismos verbos, síncronos."""

    def get(self, url: str, *, response_type: type[T] | Any = Any) -> T: ...

    def post(self, url: str, data: Any = None, *, response_type: type[T] | Any = Any) -> T: ...

    def post_form(self, url: str, data: FormData, *, response_type: type[T] | Any = Any) -> T: ...

    def post_files(
        self, url: str, files: Iterable[str | Path], *, response_type: type[T] | Any = Any
    ) -> T: ...

    def put(self, url: str, data: Any = None, *, response_type: type[T] | Any = Any) -> T: ...
