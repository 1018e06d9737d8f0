"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (IA/imágenes) lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_DIR_NAME = "animal-face-off"


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / APP_DIR_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR_NAME

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


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


def write_user_env_vars(values: dict[str, str | None], *, env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# Animal Face-Off user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Orden de carga: variables de entorno, `.env` del proyecto, `.env` del usuario.
    """

    model_config = SettingsConfigDict(
        env_prefix="FACEOFF_",
        extra="ignore",
        case_sensitive=False,
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    ai_api_key: str | None = Field(
        default=None,
        description="API key del proveedor IA (compatible OpenAI).",
    )
    ai_base_url: str = Field(
        default="https://api.openai.com/v1",
        min_length=8,
        description="Base URL compatible OpenAI.",
    )
    ai_model: str = Field(
        default="gpt-4o-mini",
        min_length=1,
        description="Modelo usado para combates y emparejamientos.",
    )
    ai_timeout_seconds: float = Field(
        default=45.0,
        gt=0,
        description="Timeout máximo por llamada al proveedor IA (segundos).",
    )
    ai_web_search: bool = Field(
        default=False,
        description="Pedir búsqueda web (grounding) al proveedor; requiere un modelo *-search-preview.",
    )
    ai_battle_temperature: float = Field(default=0.4, ge=0.0, le=2.0)
    ai_matchup_temperature: float = Field(default=1.0, ge=0.0, le=2.0)

    image_base_url: str = Field(
        default="https://picsum.photos/seed",
        description="Servicio de imágenes placeholder (sembrado por nombre).",
    )
    image_width: int = Field(default=1200, ge=1, le=5000)
    image_height: int = Field(default=800, ge=1, le=5000)

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout para peticiones HTTP auxiliares (doctor).",
    )
    user_agent: str = Field(
        default="animal-face-off/0.1 (+https://local)",
        min_length=1,
    )
    log_level: str = Field(
        default="WARNING",
        description="Nivel de logging (DEBUG, INFO, WARNING, ERROR).",
    )

    def is_local_provider(self) -> bool:
        url_l = (self.ai_base_url or "").strip().lower()
        return url_l.startswith(("http://localhost", "http://127.0.0.1", "http://0.0.0.0"))
