"""Errores del dominio.

Taxonomía:
- `ValidationError`: entrada vacía o ausente. Se detecta antes de cualquier I/O.
- `GenerationError`: cualquier fallo del proveedor IA (red, timeout, JSON
  malformado o que no respeta el esquema).
"""

from __future__ import annotations


class FaceOffError(Exception):
    """Base de todos los errores de la aplicación."""


class ValidationError(FaceOffError):
    """Input rejected before reaching the model provider."""


class GenerationError(FaceOffError):
    """The model provider failed or produced a non-conforming payload.

    `reason` is a short machine-friendly code (`timeout`, `transport`,
    `invalid_json`, `schema`, `names`, `missing_api_key`).
    """

    def __init__(self, message: str, *, reason: str = "unknown") -> None:
        super().__init__(message)
        self.reason = reason

    def __str__(self) -> str:
        return f"{self.args[0]} (reason={self.reason})"
