"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- El executor HTTP y la CLI leen la misma configuración.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "inco-http"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "inco-http"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "inco-http"
    return Path.home() / ".config" / "inco-http"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str]) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# inco-http user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class ClientSettings(BaseSettings):
    """Configuración del cliente HTTP.

    Los valores solo se leen al construir la sesión; cambiar el entorno
    después no afecta a un cliente ya creado.
    """

    model_config = SettingsConfigDict(
        env_prefix="INCO_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    base_url: str | None = Field(
        default=None,
        description="Host base contra el que se resuelven las rutas relativas.",
    )
    user_agent: str = Field(
        default="InCo/0.1",
        min_length=1,
        description="User-Agent por defecto de la sesión.",
    )
    timeout_seconds: float = Field(
        default=100.0,
        gt=0,
        description="Timeout por request (segundos), delegado al transporte.",
    )
    ignore_certificate_validation: bool = Field(
        default=False,
        description="Desactiva la validación de certificados TLS (solo para esta sesión).",
    )
    follow_redirects: bool = Field(
        default=True,
        description="Seguir redirecciones HTTP automáticamente.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Nivel de logging de la CLI (DEBUG, INFO, WARNING, ERROR).",
    )
