"""Construcción del cuerpo de cada request a partir de un `RequestDescriptor`.

Devuelve kwargs listos para `httpx.AsyncClient.request`. La subida de ficheros
comprueba la existencia de TODOS los paths antes de leer ninguno, así un path
inexistente aborta la llamada sin tráfico de red.
"""

from __future__ import annotations

import asyncio
import mimetypes
from pathlib import Path
from typing import Any
from urllib.parse import urlencode

from adapters.serializer import JsonSerializer
from core.domain.errors import FileNotFound
from core.domain.models import BodyKind, RequestDescriptor

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
FILE_FIELD_NAME = "File"


def ensure_files_exist(paths: tuple[Path, ...]) -> None:
    for path in paths:
        if not path.is_file():
            raise FileNotFound(str(path))


async def _read_upload(path: Path, field_name: str) -> tuple[str, tuple[str, bytes, str]]:
    data = await asyncio.to_thread(path.read_bytes)
    content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return field_name, (path.name, data, content_type)


async def build_request_kwargs(
    descriptor: RequestDescriptor,
    serializer: JsonSerializer,
) -> dict[str, Any]:
    if descriptor.kind is BodyKind.NONE:
        return {}

    if descriptor.kind is BodyKind.JSON:
        return {
            "content": serializer.dumps(descriptor.json_body),
            "headers": {"Content-Type": serializer.content_type},
        }

    if descriptor.kind is BodyKind.FORM:
        # urlencode conserva el orden y las claves duplicadas.
        return {
            "content": urlencode(list(descriptor.form)).encode("ascii"),
            "headers": {"Content-Type": FORM_CONTENT_TYPE},
        }

    if descriptor.kind is BodyKind.FILES:
        ensure_files_exist(descriptor.files)
        uploads = [await _read_upload(path, FILE_FIELD_NAME) for path in descriptor.files]
        return {"files": uploads}

    raise ValueError(f"unsupported body kind: {descriptor.kind!r}")
