"""Serializador JSON de la sesión.

- Serializa cuerpos con `pydantic_core.to_json` (modelos pydantic, dataclasses,
  dicts, listas, fechas...).
- Decodifica respuestas con `pydantic.TypeAdapter` al tipo pedido por el
  llamador.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter
from pydantic_core import to_json

from core.domain.models import SerializerOptions


@lru_cache(maxsize=256)
def _adapter_for(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def adapter_for(target: Any) -> TypeAdapter[Any]:
    try:
        return _adapter_for(target)
    except TypeError:
        # Tipos no hashables (p.ej. Annotated con metadata mutable).
        return TypeAdapter(target)


class JsonSerializer:
    """Par serializar/decodificar con una única `SerializerOptions`."""

    content_type = "application/json; charset=utf-8"

    def __init__(self, options: SerializerOptions | None = None) -> None:
        self.options = options or SerializerOptions()

    def dumps(self, value: Any) -> bytes:
        """Serializa `value` a JSON UTF-8."""

        return to_json(
            value,
            indent=self.options.indent,
            by_alias=self.options.by_alias,
            exclude_none=self.options.exclude_none,
        )

    def loads(self, text: str | bytes, target: Any = Any) -> Any:
        """Decodifica `text` a `target`.

        Lanza `pydantic.ValidationError` si el JSON es inválido o no encaja en
        `target`.
        """

        return adapter_for(target).validate_json(
            text,
            strict=self.options.strict,
            by_alias=self.options.by_alias,
            by_name=True,
        )
