"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en `main` y `doctor`.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import ClientSettings
from core.domain.errors import DecodeFailed, FileNotFound, RequestFailed, Unauthorized


def print_banner(console: Console) -> None:
    title = Text("inco-http", style="bold cyan")
    subtitle = Text("GET • POST • PUT • form • multipart", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_settings_table(settings: ClientSettings) -> Table:
    """Tabla con la configuración efectiva de la sesión."""

    table = Table(title="Session")
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("base_url", settings.base_url or "-")
    table.add_row("user_agent", settings.user_agent)
    table.add_row("timeout_seconds", f"{settings.timeout_seconds:g}")
    table.add_row("follow_redirects", str(settings.follow_redirects))
    table.add_row(
        "certificate validation",
        "[red]disabled[/red]" if settings.ignore_certificate_validation else "[green]enabled[/green]",
    )
    return table


def build_error_panel(error: Exception) -> Panel:
    """Panel para un fallo clasificado (o de transporte)."""

    body = Text()
    if isinstance(error, Unauthorized):
        title = "Unauthorized"
        body.append("Server answered 401.")
        if error.url:
            body.append(f"\n{error.url}", style="dim")
    elif isinstance(error, RequestFailed):
        title = "Request failed"
        body.append(f"{error.status_code} {error.reason_phrase}")
        if error.body:
            body.append(f"\n\n{error.body[:500]}", style="dim")
    elif isinstance(error, DecodeFailed):
        title = "Decode failed"
        body.append("Response body could not be decoded:\n\n")
        body.append(error.raw_body[:500] or "<empty>", style="dim")
    elif isinstance(error, FileNotFound):
        title = "File not found"
        body.append(error.path)
    else:
        title = "Transport fault"
        body.append(f"{type(error).__name__}: {error}")

    return Panel(body, title=Text(title, style="bold red"), border_style="red")
