"""CLI command for scraping a single URL."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

console = Console(stderr=True)


def scrape_url(
    url: str = typer.Argument(..., help="The URL of the webpage to scrape."),
    interact: bool = typer.Option(True, "--interact/--no-interact", help="Resolve cookie banners and similar obstacles."),
    max_attempts: Optional[int] = typer.Option(
        None, "--max-attempts", "-n", min=0, max=10, help="Maximum interaction attempts (0-10)."
    ),
    network_idle: bool = typer.Option(
        True, "--network-idle/--no-network-idle", help="Wait for the network to go idle after loading."
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the Markdown to this file."),
    as_json: bool = typer.Option(False, "--json", help="Print the tool response as JSON."),
) -> None:
    """Scrape URL and print its main content as Markdown."""
    from pagedigest.settings import get_settings
    from pagedigest.tools import scrape_webpage

    settings = get_settings()
    attempts = settings.interaction.default_max_attempts if max_attempts is None else max_attempts

    console.print(Panel(f"[bold]Scraping:[/bold] {url}", title="pagedigest", border_style="blue"))

    with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"), console=console) as progress:
        task = progress.add_task("Loading page...", total=None)
        response = asyncio.run(
            scrape_webpage(
                url,
                auto_interact=interact,
                max_interaction_attempts=attempts,
                wait_for_network_idle=network_idle,
            )
        )
        progress.update(task, completed=True)

    if as_json:
        typer.echo(json.dumps(response.to_payload(), indent=2, ensure_ascii=False))
        if response.is_error:
            raise typer.Exit(code=1)
        return

    if response.is_error:
        console.print(f"[red]✗[/red] {response.meta.message}")
        raise typer.Exit(code=1)

    text = response.content[0].text
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
        console.print(f"[green]✓[/green] {response.meta.message}: wrote {len(text)} characters to {output}")
    else:
        console.print(f"[green]✓[/green] {response.meta.message}")
        typer.echo(text)
