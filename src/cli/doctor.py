"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
import ssl

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client, build_ssl_context
from cli.ui_components import build_settings_table
from core.config import ClientSettings, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(settings: ClientSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings.base_url or "", settings) as client:
            response = await client.get("/")
        return True, f"HTTP {response.status_code} {response.reason_phrase}"
    except Exception as exc:
        return False, f"{type(exc).__name__}: {exc}"


def _check_tls(settings: ClientSettings) -> tuple[bool, str]:
    try:
        context = build_ssl_context(ignore_certificate_validation=settings.ignore_certificate_validation)
    except ssl.SSLError as exc:
        return False, str(exc)
    return True, f"minimum {context.minimum_version.name}"


def _settings_from(ctx: typer.Context) -> ClientSettings:
    return ctx.obj if isinstance(ctx.obj, ClientSettings) else ClientSettings()


@app.command()
def run(ctx: typer.Context) -> None:
    """Run baseline diagnostics against the configured base host."""

    settings = _settings_from(ctx)
    _console.print(build_settings_table(settings))

    table = Table(title="inco-http Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    ok_tls, detail_tls = _check_tls(settings)
    table.add_row("TLS context", "OK" if ok_tls else "FAIL", detail_tls)
    if settings.ignore_certificate_validation:
        table.add_row("Certificate validation", "WARN", "disabled for this session")

    if settings.base_url:
        ok_http, detail_http = asyncio.run(_check_http(settings))
        table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)
    else:
        table.add_row("HTTP connectivity", "SKIP", "No base URL -> set INCO_BASE_URL or --base-url")

    _console.print(table)

    if not ok_tls:
        raise typer.Exit(code=1)


@app.command()
def setup() -> None:
    """Interactive setup (stores config in the user config .env)."""

    current = ClientSettings()
    base_url = typer.prompt("Base URL", default=current.base_url or "", show_default=True).strip()
    user_agent = typer.prompt("User-Agent", default=current.user_agent, show_default=True).strip()
    insecure = typer.confirm(
        "Disable certificate validation?",
        default=current.ignore_certificate_validation,
    )

    if not base_url:
        raise typer.BadParameter("base_url is required")

    env_path = write_user_env_vars(
        {
            "INCO_BASE_URL": base_url,
            "INCO_USER_AGENT": user_agent or current.user_agent,
            "INCO_IGNORE_CERTIFICATE_VALIDATION": "true" if insecure else "false",
        }
    )
    _console.print(f"[green]Saved[/green] {env_path}")
