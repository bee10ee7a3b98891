"""Action model for the vision-guided interaction loop.

The vision classifier answers each screenshot with exactly one ``Action``.
Its raw JSON is untrusted, so ``Action.from_payload`` maps it onto a closed
set of variants and falls back to ``ActionType.NONE`` for anything it cannot
interpret.  Fields that do not belong to the chosen variant are discarded.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator


class ActionType(str, Enum):
    """Interactions the loop can perform."""

    CLICK = "click"
    TYPE = "type"
    SCROLL = "scroll"
    WAIT = "wait"
    NONE = "none"


# Fields each variant may carry; ``reason`` is allowed on every variant.
_VARIANT_FIELDS: dict[ActionType, frozenset[str]] = {
    ActionType.CLICK: frozenset({"target_text", "target_selector"}),
    ActionType.TYPE: frozenset({"target_selector", "input_text"}),
    ActionType.SCROLL: frozenset({"amount"}),
    ActionType.WAIT: frozenset({"duration_ms"}),
    ActionType.NONE: frozenset(),
}

# camelCase keys emitted by the classifier prompt -> model field names
_PAYLOAD_ALIASES: dict[str, str] = {
    "targetText": "target_text",
    "targetSelector": "target_selector",
    "inputText": "input_text",
    "scrollAmount": "amount",
    "waitTime": "duration_ms",
}


class Action(BaseModel):
    """A single recommended interaction, immutable once created."""

    model_config = ConfigDict(frozen=True)

    action: ActionType
    target_text: str | None = None
    target_selector: str | None = None
    input_text: str | None = None
    amount: int | None = None
    duration_ms: int | None = None
    reason: str = ""

    @model_validator(mode="before")
    @classmethod
    def _keep_variant_fields(cls, data: Any) -> Any:
        """Drop blank strings and fields foreign to the selected variant."""
        if not isinstance(data, dict):
            return data
        try:
            kind = ActionType(data.get("action"))
        except ValueError:
            return data
        allowed = _VARIANT_FIELDS[kind] | {"action", "reason"}
        cleaned: dict[str, Any] = {}
        for key, value in data.items():
            if key not in allowed:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            cleaned[key] = value
        if "reason" in cleaned and cleaned["reason"] is None:
            cleaned["reason"] = ""
        return cleaned

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def click(cls, target_text: str | None = None, target_selector: str | None = None, reason: str = "") -> Action:
        return cls(action=ActionType.CLICK, target_text=target_text, target_selector=target_selector, reason=reason)

    @classmethod
    def type_text(cls, target_selector: str, input_text: str, reason: str = "") -> Action:
        return cls(action=ActionType.TYPE, target_selector=target_selector, input_text=input_text, reason=reason)

    @classmethod
    def scroll(cls, amount: int, reason: str = "") -> Action:
        return cls(action=ActionType.SCROLL, amount=amount, reason=reason)

    @classmethod
    def wait(cls, duration_ms: int, reason: str = "") -> Action:
        return cls(action=ActionType.WAIT, duration_ms=duration_ms, reason=reason)

    @classmethod
    def none(cls, reason: str) -> Action:
        return cls(action=ActionType.NONE, reason=reason)

    @classmethod
    def from_payload(cls, payload: Any) -> Action:
        """Build an ``Action`` from the classifier's decoded JSON.

        Never raises: unknown action names, non-object payloads and values
        that fail validation all become ``ActionType.NONE`` with a reason.
        """
        if not isinstance(payload, dict):
            return cls.none(f"Classifier returned {type(payload).__name__}, expected an object")

        name = str(payload.get("action") or "").strip().lower()
        try:
            kind = ActionType(name)
        except ValueError:
            return cls.none(f"Unrecognized action {name!r}")

        fields: dict[str, Any] = {"action": kind}
        for key, value in payload.items():
            field_name = _PAYLOAD_ALIASES.get(key, key)
            if field_name in cls.model_fields and field_name != "action":
                fields[field_name] = value

        try:
            return cls(**fields)
        except ValidationError as e:
            return cls.none(f"Invalid {kind.value} action: {e.error_count()} field error(s)")

    # ------------------------------------------------------------------
    # Field presence
    # ------------------------------------------------------------------

    @property
    def is_executable(self) -> bool:
        """Return True when every field the variant requires is present."""
        if self.action == ActionType.CLICK:
            return bool(self.target_text or self.target_selector)
        if self.action == ActionType.TYPE:
            return bool(self.target_selector and self.input_text)
        if self.action == ActionType.SCROLL:
            return self.amount is not None
        if self.action == ActionType.WAIT:
            return self.duration_ms is not None
        return False

    def describe(self) -> str:
        """Short human-readable summary for logs."""
        if self.action == ActionType.CLICK:
            target = self.target_text or self.target_selector or "?"
            return f"click '{target}'"
        if self.action == ActionType.TYPE:
            return f"type into '{self.target_selector}'"
        if self.action == ActionType.SCROLL:
            return f"scroll {self.amount}px"
        if self.action == ActionType.WAIT:
            return f"wait {self.duration_ms}ms"
        return f"none ({self.reason})"
