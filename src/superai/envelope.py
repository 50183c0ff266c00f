# src/superai/envelope.py
"""
Uniform result wrapper.

Every public session operation returns exactly one Envelope. Faults are
named with a FaultCode so callers can branch without parsing messages.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class FaultCode(str, Enum):
    """Standardized fault codes for the automation session."""

    CREDENTIAL_MISSING = "credential_missing"
    AUTHENTICATION_FAILED = "authentication_failed"
    CONTROL_NOT_FOUND = "control_not_found"
    NO_SUCH_THREAD = "no_such_thread"
    INVALID_CHOICE = "invalid_choice"
    UNKNOWN_MODEL = "unknown_model"
    OPTION_NOT_FOUND = "option_not_found"
    TIMEOUT = "timeout"
    NO_NEW_CONTENT = "no_new_content"
    MODEL_UNIDENTIFIED = "model_unidentified"

    # Catch-all
    UNEXPECTED_FAULT = "unexpected_fault"


@dataclass(frozen=True)
class Envelope:
    """
    Result of one session operation.

    Attributes:
        success: True if the operation completed
        message: Human-readable outcome
        prompt: The input being processed (thread choice, model key, message)
        data: Structured payload (only the harvester fills this)
        code: Fault code when success is False
    """

    success: bool
    message: str
    prompt: Any = None
    data: dict[str, Any] | None = None
    code: FaultCode | None = None

    @classmethod
    def ok(cls, message: str, *, prompt: Any = None, data: dict[str, Any] | None = None) -> Envelope:
        return cls(True, message, prompt, data)

    @classmethod
    def fail(
        cls,
        code: FaultCode,
        message: str,
        *,
        prompt: Any = None,
        data: dict[str, Any] | None = None,
    ) -> Envelope:
        return cls(False, message, prompt, data, code)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-safe dict."""
        result = {
            "success": self.success,
            "message": self.message,
            "prompt": self.prompt,
            "data": self.data,
        }
        if self.code is not None:
            result["code"] = self.code.value
        return result
