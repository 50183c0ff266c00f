"""Logging configuration for CLI and service entry points."""

from __future__ import annotations

import logging
import pathlib

from common.paths import ERROR_LOG_FILE

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
ERROR_LOG_FORMAT = "[%(asctime)s] [%(name)s] %(message)s"


def configure_logging(
    level: str = "INFO",
    error_log: pathlib.Path | None = ERROR_LOG_FILE,
) -> None:
    """
    Configure root logging once per process.

    Console output goes to stderr at `level`. Faults (ERROR and above) are
    also appended to `error_log`, one record per fault with its stack trace
    when the record carries exc_info.

    Args:
        level: Console log level name
        error_log: Append-only error file; None disables it
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for handler in list(root.handlers):
        if getattr(handler, "_superai", False):
            root.removeHandler(handler)
            handler.close()

    console = logging.StreamHandler()
    console.setLevel(level.upper())
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    console._superai = True  # type: ignore[attr-defined]
    root.addHandler(console)

    if error_log is not None:
        error_log.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(error_log, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.ERROR)
        file_handler.setFormatter(logging.Formatter(ERROR_LOG_FORMAT))
        file_handler._superai = True  # type: ignore[attr-defined]
        root.addHandler(file_handler)
