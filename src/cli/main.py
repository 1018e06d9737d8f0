"""CLI principal (Typer).

Comandos:
- `battle A B`: un combate, renderizado con Rich (o JSON con `--json`).
- `random`: pide a la IA un emparejamiento; `--fight` lo combate directamente.
- `play`: bucle interactivo sobre `BattleSession`.
- `doctor`: diagnóstico y configuración del proveedor IA.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console

from adapters.ai_client import OpenAIStructuredGenerator
from adapters.json_exporter import battle_to_dict, export_battle_json
from adapters.media import PicsumImageResolver, TerminalBellPlayer
from adapters.report_exporter import export_battle_html
from cli import doctor
from cli.ui_components import build_error_panel, build_result_view, print_banner
from core.config import AppSettings
from core.domain.models import BattleInput, BattleResult
from core.errors import GenerationError, ValidationError
from core.logging_config import configure_logging
from core.services.battle_session import (
    BATTLE_ERROR_MESSAGE,
    RANDOMIZE_ERROR_MESSAGE,
    BattleSession,
    SessionStatus,
)
from core.services.outcome_service import OutcomeService

app = typer.Typer(
    no_args_is_help=True,
    help="Animal Face-Off: AI-adjudicated hypothetical battles between any two species.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()
logger = logging.getLogger(__name__)


def build_outcome_service(settings: AppSettings) -> OutcomeService:
    """Ensambla el servicio con el proveedor configurado."""

    return OutcomeService(
        generator=OpenAIStructuredGenerator.from_settings(settings),
        image_resolver=PicsumImageResolver.from_settings(settings),
        timeout_seconds=settings.ai_timeout_seconds,
        web_search=settings.ai_web_search,
        battle_temperature=settings.ai_battle_temperature,
        matchup_temperature=settings.ai_matchup_temperature,
    )


def _service_or_exit(settings: AppSettings) -> OutcomeService:
    try:
        return build_outcome_service(settings)
    except GenerationError as exc:
        _console.print(build_error_panel(str(exc)))
        raise typer.Exit(code=1) from exc


def _render_result(battle_input: BattleInput, result: BattleResult) -> None:
    _console.print(build_result_view(result, battle_input))


@app.callback()
def main(
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR). Defaults to FACEOFF_LOG_LEVEL.",
    ),
) -> None:
    configure_logging(log_level or AppSettings().log_level)


@app.command()
def battle(
    animal1: str = typer.Argument(..., help="Alpha contender."),
    animal2: str = typer.Argument(..., help="Beta contender."),
    json_output: bool = typer.Option(False, "--json", help="Print the result as JSON instead of panels."),
    export_json: Path | None = typer.Option(None, "--export-json", help="Write input + result to a JSON file."),
    export_html: Path | None = typer.Option(None, "--export-html", help="Write a self-contained HTML battle card."),
) -> None:
    """Adjudicate a single battle between two species."""

    try:
        battle_input = BattleInput.create(animal1, animal2)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    settings = AppSettings()
    service = _service_or_exit(settings)

    try:
        if json_output:
            result = asyncio.run(service.predict_battle_outcome(battle_input.animal1, battle_input.animal2))
        else:
            with _console.status("SYNCING…", spinner="dots"):
                result = asyncio.run(service.predict_battle_outcome(battle_input.animal1, battle_input.animal2))
    except GenerationError as exc:
        logger.error("battle failed: %s", exc)
        _console.print(build_error_panel(BATTLE_ERROR_MESSAGE))
        raise typer.Exit(code=1) from exc

    if json_output:
        _console.print_json(data=battle_to_dict(battle_input=battle_input, result=result))
    else:
        _render_result(battle_input, result)

    if export_json:
        path = export_battle_json(battle_input=battle_input, result=result, output_path=export_json)
        _console.print(f"[green]JSON saved:[/green] {path}")
    if export_html:
        path = export_battle_html(
            battle_input=battle_input,
            result=result,
            output_path=export_html,
            image_resolver=PicsumImageResolver.from_settings(settings),
        )
        _console.print(f"[green]HTML saved:[/green] {path}")


@app.command("random")
def random_matchup(
    fight: bool = typer.Option(False, "--fight", help="Immediately battle the suggested matchup."),
) -> None:
    """Ask the AI for a creative matchup."""

    settings = AppSettings()
    service = _service_or_exit(settings)

    phase = "matchup"

    async def _run() -> tuple[BattleInput, BattleResult | None]:
        nonlocal phase
        matchup = await service.get_random_matchup()
        battle_input = BattleInput.create(matchup.animal1, matchup.animal2)
        if not fight:
            return battle_input, None
        phase = "battle"
        result = await service.predict_battle_outcome(battle_input.animal1, battle_input.animal2)
        return battle_input, result

    try:
        with _console.status("Rolling the dice…", spinner="dots"):
            battle_input, result = asyncio.run(_run())
    except (GenerationError, ValidationError) as exc:
        logger.error("random %s failed: %s", phase, exc)
        _console.print(build_error_panel(BATTLE_ERROR_MESSAGE if phase == "battle" else RANDOMIZE_ERROR_MESSAGE))
        raise typer.Exit(code=1) from exc

    _console.print(f"[bold magenta]{battle_input.animal1}[/bold magenta] [dim]vs[/dim] [bold]{battle_input.animal2}[/bold]")
    if result is not None:
        _render_result(battle_input, result)


def render_session(console: Console, session: BattleSession) -> None:
    state = session.state
    if state.status is SessionStatus.FAILED and state.error:
        console.print(build_error_panel(state.error))
    if state.result is not None and state.result_input is not None:
        console.print(build_result_view(state.result, state.result_input, dominant=session.dominant_slots()))


async def _play(session: BattleSession) -> None:
    while True:
        first = typer.prompt(
            "Alpha specimen ('r' randomize, 'q' quit)",
            default=session.state.animal1,
            show_default=bool(session.state.animal1),
        ).strip()
        if first.lower() == "q":
            return
        if first.lower() == "r":
            with _console.status("Rolling the dice…", spinner="dots"):
                await session.randomize()
            if session.state.status is SessionStatus.FAILED:
                render_session(_console, session)
            else:
                _console.print(f"[bold magenta]{session.state.animal1}[/bold magenta] [dim]vs[/dim] [bold]{session.state.animal2}[/bold]")
            continue

        second = typer.prompt(
            "Beta specimen",
            default=session.state.animal2,
            show_default=bool(session.state.animal2),
        ).strip()
        session.set_inputs(first, second)
        with _console.status("SYNCING…", spinner="dots"):
            submitted = await session.submit()
        if not submitted:
            _console.print("[yellow]Both contenders are required.[/yellow]")
            continue
        render_session(_console, session)


@app.command()
def play() -> None:
    """Interactive face-off loop."""

    settings = AppSettings()
    service = _service_or_exit(settings)
    resolver = PicsumImageResolver.from_settings(settings)
    session = BattleSession(service, image_resolver=resolver, audio=TerminalBellPlayer(_console))

    print_banner(_console)
    asyncio.run(_play(session))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
