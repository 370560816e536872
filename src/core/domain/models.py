"""Modelos del dominio (Pydantic v2 + dataclasses).

Por qué aquí:
- Describen *qué* viaja por el cliente (descriptor de request, resultado
  clasificado, opciones de serialización), no *cómo* se envía.
- Los adaptadores traducen estos modelos a requests httpx reales.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from core.domain.errors import DecodeFailed, RequestFailed, Unauthorized

T = TypeVar("T")


class SerializerOptions(BaseModel):
    """Configuración del serializador JSON de la sesión.

    Es inmutable: se captura al construir el cliente y se comparte entre
    todas las llamadas.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    by_alias: bool = Field(
        default=True,
        description="Usar los alias de los campos (naming) al serializar y decodificar.",
    )
    exclude_none: bool = Field(
        default=False,
        description="Omitir campos None al serializar cuerpos de request.",
    )
    strict: bool = Field(
        default=False,
        description="Decodificación estricta (sin coerción de tipos).",
    )
    indent: int | None = Field(
        default=None,
        ge=0,
        description="Indentación del JSON emitido (None = compacto).",
    )


class BodyKind(str, Enum):
    """Forma del cuerpo de un request. Exactamente una por descriptor."""

    NONE = "none"
    JSON = "json"
    FORM = "form"
    FILES = "files"


@dataclass(frozen=True, slots=True)
class RequestDescriptor:
    """Verbo + ruta relativa + un único cuerpo. Se crea por llamada y se descarta."""

    method: str
    url: str
    kind: BodyKind = BodyKind.NONE
    json_body: Any = None
    form: tuple[tuple[str, str], ...] = ()
    files: tuple[Path, ...] = ()

    @classmethod
    def get(cls, url: str) -> "RequestDescriptor":
        return cls(method="GET", url=url)

    @classmethod
    def with_json(cls, method: str, url: str, data: Any = None) -> "RequestDescriptor":
        if data is None:
            return cls(method=method, url=url)
        return cls(method=method, url=url, kind=BodyKind.JSON, json_body=data)

    @classmethod
    def with_form(
        cls, url: str, data: Mapping[str, str] | Iterable[tuple[str, str]]
    ) -> "RequestDescriptor":
        items = data.items() if isinstance(data, Mapping) else data
        pairs = tuple((str(key), str(value)) for key, value in items)
        return cls(method="POST", url=url, kind=BodyKind.FORM, form=pairs)

    @classmethod
    def with_files(cls, url: str, files: Iterable[str | Path]) -> "RequestDescriptor":
        return cls(
            method="POST",
            url=url,
            kind=BodyKind.FILES,
            files=tuple(Path(f) for f in files),
        )


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    UNAUTHORIZED = "unauthorized"
    FAILED = "failed"
    DECODE_FAILED = "decode_failed"


@dataclass(frozen=True, slots=True)
class ResponseOutcome(Generic[T]):
    """Resultado clasificado de una llamada.

    `value` solo tiene sentido cuando `kind` es SUCCESS. `unwrap()` devuelve el
    valor o lanza la excepción tipada que corresponde a la clasificación.
    """

    kind: OutcomeKind
    url: str
    status_code: int
    reason_phrase: str
    body: str
    value: T | None = None
    target: Any = field(default=None, compare=False)

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    def to_error(self) -> Exception | None:
        if self.kind is OutcomeKind.UNAUTHORIZED:
            return Unauthorized(self.url)
        if self.kind is OutcomeKind.FAILED:
            return RequestFailed(self.reason_phrase, status_code=self.status_code, body=self.body)
        if self.kind is OutcomeKind.DECODE_FAILED:
            return DecodeFailed(self.body, target=self.target)
        return None

    def unwrap(self) -> T:
        error = self.to_error()
        if error is not None:
            raise error
        return self.value  # type: ignore[return-value]
