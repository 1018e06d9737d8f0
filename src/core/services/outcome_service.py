"""Outcome service: the boundary to the generative model.

Responsabilidad:
- Construir el prompt de cada operación y declarar el esquema JSON exacto.
- Hacer UNA llamada al `StructuredGenerator`, acotada por timeout.
- Tratar la respuesta como no confiable: localizar el objeto JSON, validarlo
  estrictamente y convertirlo en un modelo de dominio.

Cualquier fallo (red, timeout, JSON malformado, esquema no respetado, nombres
que no corresponden a la entrada) se traduce en `GenerationError`. No hay
reintentos ni recuperación parcial.
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
import re
import uuid
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from core.domain.models import (
    MAX_NAME_LENGTH,
    TRAITS,
    BattleInput,
    BattlePayload,
    BattleResult,
    MatchupPayload,
    RandomMatchup,
    normalize_name,
)
from core.errors import GenerationError
from core.interfaces.generator import GenerationRequest, GenerationResponse, StructuredGenerator
from core.interfaces.media import ImageUrlResolver

logger = logging.getLogger(__name__)

_PayloadT = TypeVar("_PayloadT", bound=BaseModel)

_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL | re.IGNORECASE)


def _score_schema() -> dict[str, Any]:
    return {"type": "integer", "minimum": 0, "maximum": 100}


_STAT_FIELDS = [f"animal{slot}{trait.capitalize()}" for slot in (1, 2) for trait in TRAITS]

BATTLE_RESULT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "winner": {"type": "string", "minLength": 1},
        "loser": {"type": "string", "minLength": 1},
        "probability": _score_schema(),
        "reasoning": {"type": "string", "minLength": 1},
        "stats": {
            "type": "object",
            "properties": {name: _score_schema() for name in _STAT_FIELDS},
            "required": list(_STAT_FIELDS),
            "additionalProperties": False,
        },
    },
    "required": ["winner", "loser", "probability", "reasoning", "stats"],
    "additionalProperties": False,
}

MATCHUP_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "animal1": {"type": "string", "minLength": 1, "maxLength": MAX_NAME_LENGTH},
        "animal2": {"type": "string", "minLength": 1, "maxLength": MAX_NAME_LENGTH},
    },
    "required": ["animal1", "animal2"],
    "additionalProperties": False,
}

_BATTLE_SYSTEM_PROMPT = (
    "ROLE: Zoologist and combat analyst for hypothetical interspecies encounters.\n"
    "METHOD: Ground every judgement in real biology and behaviour (size, weaponry, "
    "speed, armour, hunting strategy, temperament). When web search is available, use it.\n"
    "RULES:\n"
    "- 'winner' and 'loser' MUST echo the two contender names exactly as given.\n"
    "- 'probability' is the winner's chance of victory, an integer 0-100.\n"
    "- Every stat is an integer 0-100. animal1* stats describe contender 1, animal2* contender 2.\n"
    "- 'reasoning' is 2-4 vivid sentences explaining the decisive advantage.\n"
    "OUTPUT FORMAT: STRICT JSON only, matching the provided schema (no extra text)."
)

_MATCHUP_SYSTEM_PROMPT = (
    "ROLE: Curator of surprising but fun animal face-offs.\n"
    "RULES:\n"
    "- Pick two DISTINCT real-world species or creatures.\n"
    "- Favour creative pairings over the obvious classics (avoid lion vs tiger).\n"
    "- Use common English names, no descriptions.\n"
    "OUTPUT FORMAT: STRICT JSON only: {\"animal1\": \"...\", \"animal2\": \"...\"}"
)

MATCHUP_THEMES: tuple[str, ...] = (
    "deep ocean",
    "prehistoric survivors",
    "insects and arachnids",
    "birds of prey",
    "desert dwellers",
    "arctic and tundra",
    "rainforest canopy",
    "venomous specialists",
    "tiny but fierce",
    "giants of the savanna",
    "freshwater rivers",
    "island oddities",
    "cross-habitat mismatch",
)


def build_battle_prompt(battle_input: BattleInput) -> str:
    return (
        "Adjudicate a hypothetical one-on-one contest.\n"
        f"Contender 1 (animal1): {battle_input.animal1}\n"
        f"Contender 2 (animal2): {battle_input.animal2}\n"
        "Decide the most likely winner in a neutral arena and report per-trait stats."
    )


def build_matchup_prompt(*, theme: str, nonce: str) -> str:
    return (
        f"Suggest one fresh matchup. Inspiration theme: {theme}.\n"
        f"Request id (ignore, ensures a new suggestion): {nonce}"
    )


def extract_json_object(text: str) -> str:
    """Obtiene el primer objeto JSON presente en la respuesta del proveedor."""

    match = _JSON_FENCE_RE.search(text)
    if match:
        return match.group(1).strip()

    stripped = text.strip()
    if stripped.startswith("{") and stripped.endswith("}"):
        return stripped

    start = stripped.find("{")
    end = stripped.rfind("}")
    if 0 <= start < end:
        candidate = stripped[start : end + 1]
        try:
            json.loads(candidate)
            return candidate
        except json.JSONDecodeError:
            pass

    raise GenerationError("Could not locate a JSON object in the AI provider response.", reason="invalid_json")


def parse_payload(text: str, model: type[_PayloadT]) -> _PayloadT:
    """Parse and strictly validate a provider payload."""

    json_text = extract_json_object(text or "")
    try:
        data: Any = json.loads(json_text)
    except json.JSONDecodeError as exc:
        raise GenerationError("AI provider returned malformed JSON.", reason="invalid_json") from exc
    if not isinstance(data, dict):
        raise GenerationError("AI provider returned a non-object JSON payload.", reason="schema")
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        logger.warning("rejected %s payload: %s", model.__name__, exc.errors(include_url=False))
        raise GenerationError(f"AI provider payload does not match {model.__name__}.", reason="schema") from exc


def resolve_contender(name: str, battle_input: BattleInput) -> str:
    """Map a name echoed by the model back to the verbatim input string.

    Exact echoes win; otherwise a case/whitespace-insensitive match is accepted.
    Anything else is a non-conforming payload.
    """

    if name in (battle_input.animal1, battle_input.animal2):
        return name
    wanted = normalize_name(name)
    matches = [
        candidate
        for candidate in (battle_input.animal1, battle_input.animal2)
        if normalize_name(candidate) == wanted
    ]
    if len(matches) == 1:
        return matches[0]
    raise GenerationError(f"AI provider named an unknown contender: {name!r}.", reason="names")


class OutcomeService:
    """Single-shot structured requests for battle outcomes and matchups."""

    def __init__(
        self,
        *,
        generator: StructuredGenerator,
        image_resolver: ImageUrlResolver,
        timeout_seconds: float = 45.0,
        web_search: bool = False,
        battle_temperature: float | None = 0.4,
        matchup_temperature: float | None = 1.0,
        rng: random.Random | None = None,
    ) -> None:
        self._generator = generator
        self._image_resolver = image_resolver
        self._timeout_seconds = timeout_seconds
        self._web_search = web_search
        self._battle_temperature = battle_temperature
        self._matchup_temperature = matchup_temperature
        self._rng = rng or random.Random()

    async def _call(self, request: GenerationRequest) -> GenerationResponse:
        logger.debug("requesting %s (web_search=%s)", request.schema_name, request.web_search)
        try:
            return await asyncio.wait_for(self._generator.generate(request), timeout=self._timeout_seconds)
        except GenerationError:
            raise
        except asyncio.TimeoutError as exc:
            raise GenerationError(
                f"AI provider did not answer within {self._timeout_seconds:g}s.", reason="timeout"
            ) from exc
        except Exception as exc:  # noqa: BLE001
            raise GenerationError(f"AI provider call failed: {type(exc).__name__}.", reason="transport") from exc

    async def predict_battle_outcome(self, animal1: str, animal2: str) -> BattleResult:
        """Adjudicate `animal1` vs `animal2`.

        Raises `core.errors.ValidationError` on empty names (before any I/O)
        and `GenerationError` on any provider failure.
        """

        battle_input = BattleInput.create(animal1, animal2)
        response = await self._call(
            GenerationRequest(
                system_prompt=_BATTLE_SYSTEM_PROMPT,
                user_prompt=build_battle_prompt(battle_input),
                schema_name="battle_result",
                schema=BATTLE_RESULT_SCHEMA,
                temperature=self._battle_temperature,
                web_search=self._web_search,
            )
        )
        payload = parse_payload(response.text, BattlePayload)

        winner = resolve_contender(payload.winner, battle_input)
        loser = resolve_contender(payload.loser, battle_input)
        if winner == loser:
            raise GenerationError("AI provider declared the same contender winner and loser.", reason="names")

        return BattleResult(
            winner=winner,
            loser=loser,
            probability=payload.probability,
            reasoning=payload.reasoning,
            winner_gif_url=self._image_resolver.resolve(winner),
            loser_gif_url=self._image_resolver.resolve(loser),
            grounding_links=tuple(response.citations),
            stats=payload.stats,
        )

    async def get_random_matchup(self) -> RandomMatchup:
        """Ask the model for a fun pairing of two distinct creatures."""

        response = await self._call(
            GenerationRequest(
                system_prompt=_MATCHUP_SYSTEM_PROMPT,
                user_prompt=build_matchup_prompt(
                    theme=self._rng.choice(MATCHUP_THEMES),
                    nonce=uuid.UUID(int=self._rng.getrandbits(128)).hex[:12],
                ),
                schema_name="random_matchup",
                schema=MATCHUP_SCHEMA,
                temperature=self._matchup_temperature,
            )
        )
        payload = parse_payload(response.text, MatchupPayload)
        try:
            return RandomMatchup(animal1=payload.animal1, animal2=payload.animal2)
        except PydanticValidationError as exc:
            raise GenerationError("AI provider suggested the same creature twice.", reason="names") from exc
