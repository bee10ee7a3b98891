"""Configuration loader for pagedigest using Pydantic settings.

Config precedence (highest wins):
  1. CLI flags (where applicable)
  2. Environment variables (PAGEDIGEST_* with __ for nesting)
  3. settings.local.toml
  4. settings.<env>.toml
  5. settings.default.toml
"""

from __future__ import annotations

import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

_THIS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = Path(os.getenv("PAGEDIGEST_PROJECT_ROOT", _THIS_DIR.parents[2]))
CONFIG_DIR = PROJECT_ROOT / "config"

ENV_VAR_NAME = "PAGEDIGEST_ENV"
DEFAULT_ENV = "local"


def _resolve_env() -> str:
    return (os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()


def _load_toml(path: Path) -> dict[str, Any]:
    if path.is_file():
        with open(path, "rb") as f:
            return tomllib.load(f)
    return {}


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class LLMSettings(BaseSettings):
    """Vision model provider configuration."""

    model_config = SettingsConfigDict(env_prefix="PAGEDIGEST_LLM__")

    provider: str = "openai"  # openai | ollama
    model: str = "gpt-4.1"
    api_key: str = ""
    api_base_url: str = "https://api.openai.com/v1"
    ollama_base_url: str = "http://localhost:11434"
    temperature: float = 0.0
    max_tokens: int = 500
    image_detail: str = "high"  # low | high | auto
    max_retries: int = 3
    timeout_s: float = 120.0


class BrowserSettings(BaseSettings):
    """Playwright browser settings."""

    model_config = SettingsConfigDict(env_prefix="PAGEDIGEST_BROWSER__")

    headless: bool = True
    sandbox: bool = False
    viewport_width: int = 1280
    viewport_height: int = 800
    user_agent: str = ""
    timeout_ms: int = 30_000
    apply_stealth_scripts: bool = True


class InteractionSettings(BaseSettings):
    """Interaction loop timing."""

    model_config = SettingsConfigDict(env_prefix="PAGEDIGEST_INTERACTION__")

    settle_ms: int = 2000
    selector_timeout_ms: int = 5000
    attempt_timeout_s: float = 60.0  # 0 disables the per-attempt deadline
    post_load_delay_ms: int = 2000
    default_max_attempts: int = Field(default=3, ge=0, le=10)


class DiagnosticsSettings(BaseSettings):
    """Diagnostic artefacts written while scraping."""

    model_config = SettingsConfigDict(env_prefix="PAGEDIGEST_DIAGNOSTICS__")

    save_screenshots: bool = True
    screenshot_dir: str = "data/screenshots"


class OutputSettings(BaseSettings):
    """Caller-facing output limits."""

    model_config = SettingsConfigDict(env_prefix="PAGEDIGEST_OUTPUT__")

    max_content_chars: int = 100_000


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="PAGEDIGEST_API__")

    host: str = "0.0.0.0"
    port: int = 3001
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    """Root pagedigest settings with nested sections."""

    model_config = SettingsConfigDict(
        env_prefix="PAGEDIGEST_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    env: str = Field(default_factory=_resolve_env)
    project_root: Path = Field(default=PROJECT_ROOT)
    debug: bool = False
    log_level: str = "INFO"
    log_format: str = "text"  # text | json

    llm: LLMSettings = Field(default_factory=LLMSettings)
    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    interaction: InteractionSettings = Field(default_factory=InteractionSettings)
    diagnostics: DiagnosticsSettings = Field(default_factory=DiagnosticsSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="before")
    @classmethod
    def _merge_toml_files(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Layer TOML config files before env var overrides."""
        defaults = _load_toml(CONFIG_DIR / "settings.default.toml")
        env_name = (values.get("env") or os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()
        env_overrides = _load_toml(CONFIG_DIR / f"settings.{env_name}.toml")
        local_overrides = _load_toml(CONFIG_DIR / "settings.local.toml")

        # Merge: defaults < env-specific < local < explicit values
        merged: dict[str, Any] = {}
        for layer in (defaults, env_overrides, local_overrides, values):
            for key, val in layer.items():
                if isinstance(val, dict) and isinstance(merged.get(key), dict):
                    merged[key] = {**merged[key], **val}
                else:
                    merged[key] = val
        return merged

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        """Normalize relative paths against project_root."""
        if not Path(self.diagnostics.screenshot_dir).is_absolute():
            self.diagnostics.screenshot_dir = str(self.project_root / self.diagnostics.screenshot_dir)
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton settings instance (cached)."""
    return Settings()
