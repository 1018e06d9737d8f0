"""Colaboradores de presentación (imágenes y audio).

Se inyectan en el servicio y en la sesión para que ambos sean testeables sin
navegador, altavoces ni red.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ImageUrlResolver(Protocol):
    """Deriva una URL de imagen determinista a partir del nombre de una especie."""

    def resolve(self, name: str) -> str:
        ...


@runtime_checkable
class AudioPlayer(Protocol):
    """Reproduce un efecto de sonido sin bloquear; los fallos se ignoran."""

    def play(self, cue: str) -> None:
        ...


DICE_CUE = "dice"
