"""Adaptadores de medios: imágenes placeholder y efectos de sonido.

- `PicsumImageResolver`: URL determinista sembrada con el nombre (mismo nombre,
  misma imagen).
- `TerminalBellPlayer`: el "dado" de la versión de terminal es la campana del
  terminal; cualquier fallo se ignora.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

from rich.console import Console

from core.config import AppSettings

logger = logging.getLogger(__name__)


class PicsumImageResolver:
    """Resolve a contender name to a seeded placeholder image URL."""

    def __init__(
        self,
        *,
        base_url: str = "https://picsum.photos/seed",
        width: int = 1200,
        height: int = 800,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._width = width
        self._height = height

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "PicsumImageResolver":
        return cls(
            base_url=settings.image_base_url,
            width=settings.image_width,
            height=settings.image_height,
        )

    def resolve(self, name: str) -> str:
        seed = quote(name, safe="")
        return f"{self._base_url}/{seed}/{self._width}/{self._height}"

    def resolve_or_fallback(self, name: str, url: str | None) -> str:
        return url if url else self.resolve(name)


class TerminalBellPlayer:
    """Fire-and-forget cue played on the terminal bell."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    def play(self, cue: str) -> None:
        try:
            self._console.bell()
        except Exception:  # noqa: BLE001
            logger.debug("audio cue %r could not be played", cue, exc_info=True)
