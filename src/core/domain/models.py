"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Validación estricta en el borde con el modelo generativo: la salida de la IA
  se trata como un productor no confiable.
- Los modelos son inmutables (`frozen`): cada petición reemplaza el resultado
  completo, nunca se fusiona.

Nota:
- Los nombres Python son snake_case; los alias camelCase son el formato de cable
  que se le exige al proveedor IA y el que se exporta a JSON.
"""

from __future__ import annotations

from typing import Any, Iterator, Literal
from urllib.parse import urlparse

from pydantic import BaseModel, Field, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.config import ConfigDict

from core.errors import ValidationError

Slot = Literal["animal1", "animal2"]

TRAITS: tuple[str, ...] = ("strength", "speed", "intelligence", "defense", "agility")

MAX_NAME_LENGTH = 200


def normalize_name(value: str) -> str:
    """Clave de comparación: sin mayúsculas y con los espacios internos colapsados."""

    return " ".join(value.split()).casefold()


def _score(alias: str) -> Any:
    return Field(..., alias=alias, strict=True, ge=0, le=100)


class BattleInput(BaseModel):
    """Los dos nombres enviados por el usuario (efímero, uno por envío)."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    animal1: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    animal2: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)

    @classmethod
    def create(cls, animal1: str | None, animal2: str | None) -> "BattleInput":
        """Build a trimmed input, raising the domain `ValidationError` on empty names."""

        first, second = (animal1 or "").strip(), (animal2 or "").strip()
        if not first or not second:
            raise ValidationError("Both contenders are required.")
        if normalize_name(first) == normalize_name(second):
            raise ValidationError("A contender cannot fight itself.")
        try:
            return cls(animal1=animal1, animal2=animal2)
        except PydanticValidationError as exc:
            raise ValidationError(str(exc)) from exc

    def name_for(self, slot: Slot) -> str:
        return self.animal1 if slot == "animal1" else self.animal2


class GroundingLink(BaseModel):
    """Cita opcional aportada por el proveedor (búsqueda web)."""

    model_config = ConfigDict(frozen=True)

    uri: str = Field(..., min_length=1, description="URL de la fuente.")
    title: str = Field(default="", description="Título de la fuente (puede venir vacío).")

    @property
    def hostname(self) -> str:
        return (urlparse(self.uri).hostname or self.uri).upper()


class BattleStats(BaseModel):
    """Five traits per contender, each a strict integer in [0, 100].

    Only the camelCase wire names are accepted.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    animal1_strength: int = _score("animal1Strength")
    animal1_speed: int = _score("animal1Speed")
    animal1_intelligence: int = _score("animal1Intelligence")
    animal1_defense: int = _score("animal1Defense")
    animal1_agility: int = _score("animal1Agility")
    animal2_strength: int = _score("animal2Strength")
    animal2_speed: int = _score("animal2Speed")
    animal2_intelligence: int = _score("animal2Intelligence")
    animal2_defense: int = _score("animal2Defense")
    animal2_agility: int = _score("animal2Agility")

    def trait_pairs(self) -> Iterator[tuple[str, int, int]]:
        for trait in TRAITS:
            yield trait, getattr(self, f"animal1_{trait}"), getattr(self, f"animal2_{trait}")

    def values(self) -> list[int]:
        return [value for _, a, b in self.trait_pairs() for value in (a, b)]


class BattlePayload(BaseModel):
    """Forma exacta que se le exige al modelo para un combate.

    Cualquier desviación (campo ausente, tipo incorrecto, número fuera de rango)
    falla la validación; no hay recuperación parcial.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", str_strip_whitespace=True)

    winner: str = Field(..., strict=True, min_length=1)
    loser: str = Field(..., strict=True, min_length=1)
    probability: int = Field(..., strict=True, ge=0, le=100)
    reasoning: str = Field(..., strict=True, min_length=1)
    stats: BattleStats


class MatchupPayload(BaseModel):
    """Forma exacta que se le exige al modelo para un emparejamiento aleatorio."""

    model_config = ConfigDict(frozen=True, extra="ignore", str_strip_whitespace=True)

    animal1: str = Field(..., strict=True, min_length=1, max_length=MAX_NAME_LENGTH)
    animal2: str = Field(..., strict=True, min_length=1, max_length=MAX_NAME_LENGTH)


class RandomMatchup(BaseModel):
    """A pair of distinct contenders suggested by the model."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    animal1: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    animal2: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)

    @field_validator("animal2")
    @classmethod
    def _distinct(cls, value: str, info: ValidationInfo) -> str:
        other = info.data.get("animal1")
        if other is not None and normalize_name(other) == normalize_name(value):
            raise ValueError("matchup contenders must be distinct")
        return value


class BattleResult(BaseModel):
    """Resultado completo de un combate, listo para presentar.

    Invariantes:
    - `winner` y `loser` son exactamente los dos nombres enviados, uno cada uno.
    - `probability` y todas las estadísticas son enteros en [0, 100].
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    winner: str = Field(..., min_length=1)
    loser: str = Field(..., min_length=1)
    probability: int = Field(..., strict=True, ge=0, le=100)
    reasoning: str
    winner_gif_url: str = Field(default="", alias="winnerGifUrl")
    loser_gif_url: str = Field(default="", alias="loserGifUrl")
    grounding_links: tuple[GroundingLink, ...] = Field(default=(), alias="groundingLinks")
    stats: BattleStats

    def winner_slot(self, battle_input: BattleInput) -> Slot | None:
        if self.winner == battle_input.animal1:
            return "animal1"
        if self.winner == battle_input.animal2:
            return "animal2"
        return None
