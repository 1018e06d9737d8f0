"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from core.config import AppSettings, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()

PROVIDER_PRESETS: dict[str, dict[str, str]] = {
    "openai": {"FACEOFF_AI_BASE_URL": "https://api.openai.com/v1", "FACEOFF_AI_MODEL": "gpt-4o-mini"},
    # Grounding con búsqueda web (citas en la respuesta):
    "openai-search": {
        "FACEOFF_AI_BASE_URL": "https://api.openai.com/v1",
        "FACEOFF_AI_MODEL": "gpt-4o-mini-search-preview",
        "FACEOFF_AI_WEB_SEARCH": "true",
    },
    "gemini": {
        "FACEOFF_AI_BASE_URL": "https://generativelanguage.googleapis.com/v1beta/openai/",
        "FACEOFF_AI_MODEL": "gemini-2.5-flash",
    },
    "groq": {"FACEOFF_AI_BASE_URL": "https://api.groq.com/openai/v1", "FACEOFF_AI_MODEL": "llama-3.3-70b-versatile"},
    "openrouter": {"FACEOFF_AI_BASE_URL": "https://openrouter.ai/api/v1", "FACEOFF_AI_MODEL": "openai/gpt-4o-mini"},
    "ollama": {"FACEOFF_AI_BASE_URL": "http://localhost:11434/v1", "FACEOFF_AI_MODEL": "llama3.1"},
}


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:  # noqa: BLE001
        return False, str(exc) or type(exc).__name__


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="Animal Face-Off Doctor")
    table.add_column("Check", style="bright_magenta", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    if settings.ai_api_key:
        table.add_row("AI key", "OK", "Remote AI enabled")
    elif settings.is_local_provider():
        table.add_row("AI key", "OK", "Local provider, no key required")
    else:
        table.add_row("AI key", "MISSING", "Run `faceoff doctor setup-ai` or set FACEOFF_AI_API_KEY")
    table.add_row("AI base_url", "OK", settings.ai_base_url)
    table.add_row("AI model", "OK", settings.ai_model)
    table.add_row("Web search", "ON" if settings.ai_web_search else "OFF", "Grounding links require a search model")
    table.add_row("AI timeout", "OK", f"{settings.ai_timeout_seconds:g}s")

    # Cualquier respuesta HTTP (incluso 401/404) prueba conectividad.
    ok_ai, detail_ai = asyncio.run(_check_http(settings.ai_base_url, settings))
    table.add_row("AI connectivity", "OK" if ok_ai else "FAIL", detail_ai)

    ok_img, detail_img = asyncio.run(_check_http(settings.image_base_url, settings))
    table.add_row("Image service", "OK" if ok_img else "FAIL", detail_img)

    _console.print(table)


@app.command(name="setup-ai")
def setup_ai() -> None:
    """Interactive AI setup (stores config in the user config .env)."""

    provider = typer.prompt(
        f"AI provider ({', '.join(PROVIDER_PRESETS)})",
        default="openai",
        show_default=True,
    ).strip().lower()

    values = PROVIDER_PRESETS.get(provider, {}).copy()
    if not values:
        _console.print("[yellow]Unknown provider preset. You can still enter custom values.[/yellow]")

    base_url = typer.prompt("AI base URL", default=values.get("FACEOFF_AI_BASE_URL", ""), show_default=True).strip()
    model = typer.prompt("AI model", default=values.get("FACEOFF_AI_MODEL", ""), show_default=True).strip()
    api_key = typer.prompt("AI API key", default="", hide_input=True, show_default=False).strip()

    if not base_url or not model:
        raise typer.BadParameter("base_url and model are required")

    env_path = write_user_env_vars(
        {
            "FACEOFF_AI_BASE_URL": base_url,
            "FACEOFF_AI_MODEL": model,
            "FACEOFF_AI_API_KEY": api_key or None,
            "FACEOFF_AI_WEB_SEARCH": values.get("FACEOFF_AI_WEB_SEARCH"),
        }
    )

    _console.print(f"[green]Saved AI config to:[/green] {env_path}")
