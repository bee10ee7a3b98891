"""CLI commands for inspecting and validating pagedigest settings."""

from __future__ import annotations

import json

import typer
from rich.console import Console

settings_app = typer.Typer(help="Inspect and validate pagedigest configuration.")
console = Console()

_SECRET_FIELDS = {"api_key"}


@settings_app.command("show")
def show_settings() -> None:
    """Display the currently resolved settings (secrets masked)."""
    from pagedigest.settings import get_settings

    data = get_settings().model_dump(mode="json")
    for section in data.values():
        if isinstance(section, dict):
            for key in _SECRET_FIELDS & section.keys():
                if section[key]:
                    section[key] = "****"
    console.print_json(json.dumps(data, indent=2, default=str))


@settings_app.command("validate")
def validate_settings(
    check_llm: bool = typer.Option(False, "--check-llm", help="Also check that the vision model is reachable."),
) -> None:
    """Validate settings and report any issues."""
    from pagedigest.settings import get_settings

    try:
        settings = get_settings()
    except Exception as e:
        console.print(f"[red]✗[/red] Settings validation failed: {e}")
        raise typer.Exit(code=1)

    console.print("[green]✓[/green] Settings are valid.")
    console.print(f"  Environment: {settings.env}")
    console.print(f"  Vision provider: {settings.llm.provider} ({settings.llm.model})")
    console.print(f"  Headless browser: {settings.browser.headless}")
    if settings.diagnostics.save_screenshots:
        console.print(f"  Screenshots: {settings.diagnostics.screenshot_dir}")

    if check_llm:
        _check_llm(settings.llm.provider, settings.llm.model)


def _check_llm(provider_name: str, model: str) -> None:
    from pagedigest.llm.factory import create_llm_provider

    provider = create_llm_provider()
    try:
        reachable = provider.check_connectivity()
        vision = provider.supports_vision
    finally:
        provider.close()

    if not reachable:
        console.print(f"[red]✗[/red] Vision model {model} is not reachable via {provider_name}.")
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] Vision model {model} is reachable.")
    if not vision:
        console.print(f"[yellow]![/yellow] {model} does not accept images; screenshots will be dropped.")
