"""Configuration for pagedigest."""

from pagedigest.settings.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
