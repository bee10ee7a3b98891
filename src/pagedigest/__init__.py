"""pagedigest — AI-vision assisted webpage scraper that returns clean Markdown."""

from __future__ import annotations

try:
    from importlib.metadata import version

    __version__ = version("pagedigest")
except Exception:
    __version__ = "0.0.0"
