"""CLI command for running the HTTP API."""

from __future__ import annotations

from typing import Optional

import typer


def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default from settings)."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port (default from settings)."),
) -> None:
    """Serve the HTTP API (``/health``, ``/tool``, ``/scrape``) with uvicorn."""
    import uvicorn

    from pagedigest.settings import get_settings

    settings = get_settings()
    uvicorn.run(
        "pagedigest.api.app:create_app",
        factory=True,
        host=host or settings.api.host,
        port=port or settings.api.port,
        log_config=None,
    )
