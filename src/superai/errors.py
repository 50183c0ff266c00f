"""
Exceptions raised inside session components.

Components raise these internally and convert them to a failed Envelope at
their boundary; none of them is meant to reach the caller of the session.
"""

from __future__ import annotations

from .envelope import FaultCode


class AutomationError(Exception):
    """Base exception for all automation faults."""

    code: FaultCode = FaultCode.UNEXPECTED_FAULT

    def __init__(self, message: str, code: FaultCode | None = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class CredentialMissing(AutomationError):
    """Cookie file absent or unreadable."""

    code = FaultCode.CREDENTIAL_MISSING


class AuthenticationFailed(AutomationError):
    """Sign-in control still visible, or navigation failed."""

    code = FaultCode.AUTHENTICATION_FAILED


class ControlNotFound(AutomationError):
    """A required UI control could not be located."""

    code = FaultCode.CONTROL_NOT_FOUND


class NoSuchThread(AutomationError):
    """A numbered thread was requested but no threads are listed."""

    code = FaultCode.NO_SUCH_THREAD


class InvalidChoice(AutomationError):
    """Thread choice is out of range, non-numeric or of the wrong type."""

    code = FaultCode.INVALID_CHOICE


class UnknownModel(AutomationError):
    """Model key is not in the configured model table."""

    code = FaultCode.UNKNOWN_MODEL


class OptionNotFound(AutomationError):
    """No dropdown option matched the model's display label."""

    code = FaultCode.OPTION_NOT_FOUND


class OperationTimeout(AutomationError):
    """A bounded wait elapsed."""

    code = FaultCode.TIMEOUT


class NoNewContent(AutomationError):
    """Nothing was rendered after the last separator."""

    code = FaultCode.NO_NEW_CONTENT


class ModelUnidentified(AutomationError):
    """The active model label could not be read."""

    code = FaultCode.MODEL_UNIDENTIFIED


class StaleElement(AutomationError):
    """
    A located element was detached from the document before it was used.

    Only retry_once_on_stale handles this; anywhere else it is a missing control.
    """

    code = FaultCode.CONTROL_NOT_FOUND


class ConfigError(Exception):
    """Configuration file is malformed or has invalid values."""
