"""Result and option models for a single scrape invocation.

``ScrapeOptions`` and ``ScrapeResult`` cross the public boundary and are
validated Pydantic models; the per-attempt records produced inside the
interaction loop are plain dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from pagedigest.models.action import Action

MAX_INTERACTION_ATTEMPTS = 10


class LoopState(str, Enum):
    """States of the interaction loop."""

    OBSERVING = "observing"
    DECIDING = "deciding"
    ACTING = "acting"
    SETTLING = "settling"
    DONE = "done"


# ---------------------------------------------------------------------------
# Interaction loop records
# ---------------------------------------------------------------------------


@dataclass
class InteractionOutcome:
    """What happened during one attempt of the loop."""

    attempted: bool
    succeeded: bool
    action_taken: Action


@dataclass
class LoopResult:
    """Terminal result of an interaction loop run."""

    any_interaction_performed: bool = False
    attempts_used: int = 0
    outcomes: list[InteractionOutcome] = field(default_factory=list)


@dataclass
class FrameMatch:
    """Per-frame result of a cross-frame text click."""

    frame: str
    found: bool = False
    count: int = 0
    error: str = ""


@dataclass
class ClickSummary:
    """Aggregate of a cross-frame text click. Informational only."""

    frames_matched: int = 0
    elements_clicked: int = 0
    frames: list[FrameMatch] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Public scrape contract
# ---------------------------------------------------------------------------


class ScrapeOptions(BaseModel):
    """Options recognised by ``scrape``."""

    url: str = Field(..., min_length=1, description="The URL of the webpage to scrape.")
    auto_interact: bool = Field(True, description="Resolve cookie banners, CAPTCHAs and similar obstacles.")
    max_interaction_attempts: int = Field(
        3,
        ge=0,
        le=MAX_INTERACTION_ATTEMPTS,
        description="Upper bound on interaction attempts; 0 skips interaction.",
    )
    wait_for_network_idle: bool = Field(True, description="Wait for the network to go idle after loading.")


class ScrapeError(BaseModel):
    message: str


class ScrapeResult(BaseModel):
    """Either ``data`` (the Markdown) or ``error``, never both."""

    data: str | None = None
    error: ScrapeError | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> "ScrapeResult":
        if (self.data is None) == (self.error is None):
            raise ValueError("ScrapeResult requires exactly one of 'data' or 'error'")
        return self

    @classmethod
    def success(cls, data: str) -> ScrapeResult:
        return cls(data=data)

    @classmethod
    def failure(cls, message: str) -> ScrapeResult:
        return cls(error=ScrapeError(message=message))

    @property
    def ok(self) -> bool:
        return self.error is None
