"""Exportación HTML de la tarjeta de combate.

Por qué está en adapters:
- HTML es un detalle de infraestructura (Jinja2).
- El Core solo conoce `BattleInput` y `BattleResult`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from adapters.media import PicsumImageResolver
from core.domain.models import BattleInput, BattleResult

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )


def render_battle_html(
    *,
    battle_input: BattleInput,
    result: BattleResult,
    image_resolver: PicsumImageResolver | None = None,
) -> str:
    """Renderiza un HTML autocontenido para el combate."""

    resolver = image_resolver or PicsumImageResolver()
    winner_slot = result.winner_slot(battle_input)
    template = _get_env().get_template("battle.html")
    return template.render(
        battle_input=battle_input,
        result=result,
        winner_slot=winner_slot,
        winner_image=resolver.resolve_or_fallback(result.winner, result.winner_gif_url),
        slot_images={
            "animal1": resolver.resolve(battle_input.animal1),
            "animal2": resolver.resolve(battle_input.animal2),
        },
        traits=list(result.stats.trait_pairs()),
        generated_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
    )


def export_battle_html(
    *,
    battle_input: BattleInput,
    result: BattleResult,
    output_path: Path,
    image_resolver: PicsumImageResolver | None = None,
) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    html = render_battle_html(battle_input=battle_input, result=result, image_resolver=image_resolver)
    output_path.write_text(html, encoding="utf-8")
    return output_path
