"""API routes for pagedigest."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from pagedigest.models.results import MAX_INTERACTION_ATTEMPTS
from pagedigest.tools import TOOL_DESCRIPTION, TOOL_NAME, scrape_webpage

logger = logging.getLogger(__name__)

router = APIRouter()


class ScrapeRequest(BaseModel):
    """Parameters for a ``POST /scrape`` request."""

    url: str = Field(..., min_length=1, description="The URL of the webpage to scrape.")
    auto_interact: bool = Field(True, description="Resolve cookie banners, CAPTCHAs and similar obstacles.")
    max_interaction_attempts: int = Field(
        3,
        ge=0,
        le=MAX_INTERACTION_ATTEMPTS,
        description="Maximum number of interaction attempts.",
    )
    wait_for_network_idle: bool = Field(True, description="Wait for network activity to settle after loading.")


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/tool")
def describe_tool() -> dict[str, Any]:
    """Return the tool name, description and input schema."""
    return {
        "name": TOOL_NAME,
        "description": TOOL_DESCRIPTION,
        "input_schema": ScrapeRequest.model_json_schema(),
    }


@router.post("/scrape")
async def scrape(req: ScrapeRequest) -> dict[str, Any]:
    """Scrape a URL. Failures are reported in-band via ``is_error``."""
    logger.info("Scrape requested for %s", req.url)
    response = await scrape_webpage(
        req.url,
        auto_interact=req.auto_interact,
        max_interaction_attempts=req.max_interaction_attempts,
        wait_for_network_idle=req.wait_for_network_idle,
    )
    return response.to_payload()
