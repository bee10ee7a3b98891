"""Unified CLI entry point for pagedigest.

Config precedence: settings.default.toml -> settings.<env>.toml -> settings.local.toml
-> env vars (PAGEDIGEST_* with double underscores) -> CLI flags.
"""

from __future__ import annotations

import typer

from pagedigest.cli.scrape_cmd import scrape_url
from pagedigest.cli.serve_cmd import serve
from pagedigest.cli.settings_cmd import settings_app

try:
    from importlib.metadata import version

    VERSION = version("pagedigest")
except Exception:
    VERSION = "unknown"

APP_HELP = (
    "pagedigest — scrape webpages into clean Markdown, clearing cookie banners and "
    "similar obstacles with AI vision. "
    "Config precedence: settings.default.toml -> settings.local.toml -> env vars (PAGEDIGEST_* with __) -> CLI flags."
)

app = typer.Typer(add_completion=True, help=APP_HELP)

app.command("scrape")(scrape_url)
app.command("serve")(serve)
app.add_typer(settings_app, name="settings")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Configure logging; show help when no subcommand is provided."""
    if version:
        typer.echo(f"pagedigest {VERSION}")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    from pagedigest.logging_setup import configure_logging
    from pagedigest.settings import get_settings

    settings = get_settings()
    configure_logging(settings.log_level, fmt=settings.log_format, debug=verbose or settings.debug)


if __name__ == "__main__":
    app()
