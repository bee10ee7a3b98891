"""The ``scrape-webpage`` tool surface.

Wraps ``scrape`` in the structured response returned to tool callers and
applies the caller-facing size cap.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pagedigest.models.results import ScrapeOptions
from pagedigest.scraper import scrape

logger = logging.getLogger(__name__)

TOOL_NAME = "scrape-webpage"
TOOL_DESCRIPTION = (
    "Scrape a webpage, resolve cookie banners, CAPTCHAs and similar obstacles "
    "with AI vision, and return the main content as Markdown."
)
DEFAULT_MAX_CONTENT_CHARS = 100_000


class TextContent(BaseModel):
    type: str = "text"
    text: str


class ToolMeta(BaseModel):
    message: str
    success: bool
    content_size: int | None = None


class ToolResponse(BaseModel):
    """Structured tool result; failures are reported with ``is_error``."""

    model_config = ConfigDict(populate_by_name=True)

    content: list[TextContent]
    meta: ToolMeta = Field(alias="_meta")
    is_error: bool = False

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def truncate_content(content: str, max_chars: int = DEFAULT_MAX_CONTENT_CHARS) -> tuple[str, bool]:
    """Cap *content* at *max_chars*; the flag reports whether it was cut."""
    if len(content) > max_chars:
        return content[:max_chars], True
    return content, False


def success_response(content: str, max_chars: int = DEFAULT_MAX_CONTENT_CHARS) -> ToolResponse:
    text, truncated = truncate_content(content, max_chars)
    if truncated:
        message = f"Content truncated due to size (total size: {len(content)} characters)"
    else:
        message = "Scraping successful"
    return ToolResponse(
        content=[TextContent(text=text)],
        meta=ToolMeta(message=message, success=True, content_size=len(content)),
        is_error=False,
    )


def error_response(message: str) -> ToolResponse:
    return ToolResponse(
        content=[TextContent(text="")],
        meta=ToolMeta(message=f"Error scraping webpage: {message}", success=False),
        is_error=True,
    )


async def scrape_webpage(
    url: str,
    auto_interact: bool = True,
    max_interaction_attempts: int = 3,
    wait_for_network_idle: bool = True,
    *,
    max_chars: int | None = None,
) -> ToolResponse:
    """Run the scrape-webpage tool.

    Never raises: invalid arguments and scrape failures both come back
    as an error response.
    """
    try:
        options = ScrapeOptions(
            url=url,
            auto_interact=auto_interact,
            max_interaction_attempts=max_interaction_attempts,
            wait_for_network_idle=wait_for_network_idle,
        )
    except ValidationError as e:
        message = "; ".join(f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors())
        logger.warning("%s: invalid arguments: %s", TOOL_NAME, message)
        return error_response(f"Invalid arguments: {message}")

    if max_chars is None:
        from pagedigest.settings import get_settings

        max_chars = get_settings().output.max_content_chars

    result = await scrape(options)
    if result.error is not None:
        return error_response(result.error.message)

    response = success_response(result.data or "", max_chars)
    logger.info("%s: %s", TOOL_NAME, response.meta.message)
    return response
