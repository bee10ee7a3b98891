"""FastAPI app exposing the scrape-webpage tool over HTTP."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pagedigest.api.routes import router
from pagedigest.settings import get_settings

try:
    from importlib.metadata import version

    VERSION = version("pagedigest")
except Exception:
    VERSION = "0.0.0"


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    settings = get_settings()

    application = FastAPI(
        title="pagedigest",
        description="Scrape webpages into Markdown, clearing on-page obstacles with AI vision.",
        version=VERSION,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(router)
    return application
