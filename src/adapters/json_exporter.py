"""Exportación JSON de un combate.

Por qué JSON:
- Interoperabilidad con otras herramientas y pipelines.
- Usa los alias camelCase, el mismo formato de cable que se le exige a la IA.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from core.domain.models import BattleInput, BattleResult


def battle_to_dict(*, battle_input: BattleInput, result: BattleResult) -> dict[str, Any]:
    return {
        "input": battle_input.model_dump(mode="json"),
        "result": result.model_dump(mode="json", by_alias=True),
    }


def export_battle_json(*, battle_input: BattleInput, result: BattleResult, output_path: Path) -> Path:
    """Exporta entrada + resultado a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = battle_to_dict(battle_input=battle_input, result=result)
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
