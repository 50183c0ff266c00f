"""
Custom exceptions for CLI error handling.
"""

class CLIError(Exception):
    """Base exception for all CLI errors."""
    exit_code: int = 1

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ExchangeFailed(CLIError):
    """The exchange ran but returned a failed Envelope."""
    exit_code = 1


class DaemonNotRunning(CLIError):
    """Daemon is not running or unreachable."""
    exit_code = 2


class InvalidConfiguration(CLIError):
    """Configuration is invalid or cannot be loaded."""
    exit_code = 5
