"""Contrato de generación estructurada.

Por qué Protocol:
- El servicio de combates no conoce el SDK del proveedor; solo necesita
  "prompt + esquema JSON -> texto crudo + citas".
- Permite sustituir el proveedor por un fake en tests sin red.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from core.domain.models import GroundingLink


@dataclass(frozen=True)
class GenerationRequest:
    """One structured-generation call."""

    system_prompt: str
    user_prompt: str
    schema_name: str
    schema: dict[str, Any]
    temperature: float | None = None
    web_search: bool = False


@dataclass(frozen=True)
class GenerationResponse:
    """Raw provider output; `citations` is the grounding side channel."""

    text: str
    citations: list[GroundingLink] = field(default_factory=list)
    model: str | None = None


@runtime_checkable
class StructuredGenerator(Protocol):
    """Contrato mínimo para un proveedor IA con salida restringida por esquema.

    Reglas de diseño:
    - `generate` es asíncrono porque hace I/O (HTTP).
    - Exactamente una llamada saliente por invocación; sin reintentos.
    """

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        ...
