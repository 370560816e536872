"""CLI de inco-http (Typer).

Expone los cinco verbos del executor contra el host configurado. La salida es
JSON en stdout; los fallos se muestran como panel y terminan con un código de
salida distinto por clase de error.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import httpx
import typer
from rich.console import Console

from adapters.http_service import HttpService
from cli import doctor
from cli.ui_components import build_error_panel
from core.config import ClientSettings
from core.domain.errors import DecodeFailed, FileNotFound, RequestFailed, Unauthorized
from core.log_config import configure_logging

app = typer.Typer(no_args_is_help=True, help="HTTP client facade bound to one base host.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)

EXIT_CODES: dict[type[BaseException], int] = {
    RequestFailed: 1,
    Unauthorized: 2,
    DecodeFailed: 3,
    FileNotFound: 4,
    httpx.TransportError: 5,
    httpx.HTTPError: 5,
    httpx.InvalidURL: 5,
}


def build_service(settings: ClientSettings) -> HttpService:
    return HttpService.from_settings(settings)


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(None, "--base-url", "-u", help="Base host (overrides INCO_BASE_URL)."),
    insecure: bool = typer.Option(False, "--insecure", "-k", help="Disable certificate validation."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ERROR."),
) -> None:
    settings = ClientSettings()
    updates: dict[str, Any] = {}
    if base_url:
        updates["base_url"] = base_url
    if insecure:
        updates["ignore_certificate_validation"] = True
    if log_level:
        updates["log_level"] = log_level
    if updates:
        settings = settings.model_copy(update=updates)

    configure_logging(settings.log_level)
    ctx.obj = settings


def _execute(ctx: typer.Context, call: Callable[[HttpService], Awaitable[Any]]) -> None:
    settings: ClientSettings = ctx.obj
    if not settings.base_url:
        raise typer.BadParameter("base URL is required (--base-url or INCO_BASE_URL)")

    async def _run() -> Any:
        async with build_service(settings) as service:
            return await call(service)

    try:
        result = asyncio.run(_run())
    except tuple(EXIT_CODES) as exc:
        _err_console.print(build_error_panel(exc))
        code = next(c for error_type, c in EXIT_CODES.items() if isinstance(exc, error_type))
        raise typer.Exit(code=code) from exc

    _console.print_json(data=result)


def _parse_json_option(raw: Optional[str]) -> Any:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"invalid JSON body: {exc}") from exc


def _parse_fields(fields: list[str]) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    for item in fields:
        if "=" not in item:
            raise typer.BadParameter(f"expected key=value, got {item!r}")
        key, value = item.split("=", 1)
        pairs.append((key, value))
    return pairs


@app.command()
def get(ctx: typer.Context, path: str = typer.Argument(..., help="Path relative to the base host.")) -> None:
    """GET PATH and print the decoded JSON."""

    _execute(ctx, lambda service: service.get(path))


@app.command()
def post(
    ctx: typer.Context,
    path: str = typer.Argument(...),
    body: Optional[str] = typer.Option(None, "--json", "-d", help="JSON request body."),
) -> None:
    """POST a JSON body (or no body) to PATH."""

    data = _parse_json_option(body)
    _execute(ctx, lambda service: service.post(path, data))


@app.command()
def put(
    ctx: typer.Context,
    path: str = typer.Argument(...),
    body: Optional[str] = typer.Option(None, "--json", "-d", help="JSON request body."),
) -> None:
    """PUT a JSON body (or no body) to PATH."""

    data = _parse_json_option(body)
    _execute(ctx, lambda service: service.put(path, data))


@app.command(name="post-form")
def post_form(
    ctx: typer.Context,
    path: str = typer.Argument(...),
    field: list[str] = typer.Option([], "--field", "-f", help="key=value, repeatable; order is kept."),
) -> None:
    """POST url-encoded key/value pairs to PATH."""

    pairs = _parse_fields(field)
    _execute(ctx, lambda service: service.post_form(path, pairs))


@app.command(name="post-files")
def post_files(
    ctx: typer.Context,
    path: str = typer.Argument(...),
    files: list[Path] = typer.Argument(..., help="Local files to upload in one multipart request."),
) -> None:
    """Upload FILES to PATH as multipart/form-data."""

    _execute(ctx, lambda service: service.post_files(path, files))


def run() -> None:
    app()
