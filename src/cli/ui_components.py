"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Cada builder recibe modelos del dominio y devuelve un renderable; no imprime.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import BattleInput, BattleResult, Slot

TRAIT_LABELS: dict[str, str] = {
    "strength": "Lethality",
    "speed": "Velocity",
    "intelligence": "Synaptic",
    "defense": "Armoring",
    "agility": "Fluidity",
}

_BAR_WIDTH = 20
_LEAD_STYLE = "bold magenta"
_TRAIL_STYLE = "grey37"


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("ANIMAL FACE OFF", style="bold magenta")
    subtitle = Text("Interspecies Nexus • Biological Grounding Engine", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="magenta", padding=(1, 4)))


def stat_bar(value: int, *, leading: bool, align_right: bool = False) -> Text:
    """Barra horizontal 0-100; la del lado más fuerte se resalta."""

    filled = round(max(0, min(100, value)) * _BAR_WIDTH / 100)
    bar = "█" * filled + "·" * (_BAR_WIDTH - filled)
    if align_right:
        bar = bar[::-1]
    return Text(bar, style=_LEAD_STYLE if leading else _TRAIL_STYLE)


def build_winner_panel(result: BattleResult) -> Panel:
    body = Text()
    body.append(result.winner.upper() + "\n", style="bold white")
    body.append(f"{result.probability}% ", style="bold magenta")
    body.append("SUCCESS\n\n", style="dim")
    body.append("Tactical advantage\n", style="bold")
    body.append(result.reasoning.strip(), style="italic")
    return Panel(body, title=Text("★ Dominant Specimen", style="bold magenta"), border_style="magenta")


def _slot_heading(name: str, *, slot_letter: str, dominant: bool) -> Text:
    heading = Text(f"[{slot_letter}] {name}", style="bold white" if dominant else "grey50")
    if dominant:
        heading.append("  DOMINANT", style="bold magenta")
    return heading


def build_stats_table(
    result: BattleResult,
    battle_input: BattleInput,
    *,
    dominant: list[Slot] | None = None,
) -> Table:
    """Tabla de métricas de combate: A a la izquierda, B a la derecha."""

    if dominant is None:
        winner_slot = result.winner_slot(battle_input)
        dominant = [winner_slot] if winner_slot else []
    table = Table(title="Combat Metrics", show_lines=False, expand=False)
    table.add_column(_slot_heading(battle_input.animal1, slot_letter="A", dominant="animal1" in dominant), justify="right")
    table.add_column("", justify="right", no_wrap=True)
    table.add_column("Trait", justify="center", style="dim")
    table.add_column("", justify="left", no_wrap=True)
    table.add_column(_slot_heading(battle_input.animal2, slot_letter="B", dominant="animal2" in dominant), justify="left")

    for trait, left, right in result.stats.trait_pairs():
        table.add_row(
            stat_bar(left, leading=left >= right, align_right=True),
            Text(str(left), style=_LEAD_STYLE if left >= right else _TRAIL_STYLE),
            TRAIT_LABELS.get(trait, trait).upper(),
            Text(str(right), style=_LEAD_STYLE if right >= left else _TRAIL_STYLE),
            stat_bar(right, leading=right >= left),
        )
    return table


def build_grounding_panel(result: BattleResult) -> Panel:
    if not result.grounding_links:
        body: Text | Table = Text("Biological library exhausted • fallback enabled", style="dim italic")
    else:
        body = Table(show_header=False, box=None, padding=(0, 1))
        body.add_column("Source", style="white")
        body.add_column("Host", style="dim")
        for link in result.grounding_links:
            body.add_row(
                Text(link.title or "Biological Intelligence Node", style=f"link {link.uri}"),
                link.hostname,
            )
    return Panel(body, title="Intellectual Grounding Nodes", border_style="grey37")


def build_result_view(
    result: BattleResult,
    battle_input: BattleInput,
    *,
    dominant: list[Slot] | None = None,
) -> Group:
    return Group(
        build_winner_panel(result),
        build_stats_table(result, battle_input, dominant=dominant),
        build_grounding_panel(result),
    )


def build_error_panel(message: str) -> Panel:
    return Panel(Text(f"⚠ {message}", style="bold red"), border_style="red")
