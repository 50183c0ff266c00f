# src/superai/__init__.py
"""
SuperAI web chat automation.

Public entry point:
    send_message_and_get_response(thread_choice, model_key, message) -> Envelope
"""

from __future__ import annotations

from .config import AutomationConfig, load_config  # noqa: F401
from .envelope import Envelope, FaultCode  # noqa: F401
from .session import run_exchange, send_message_and_get_response  # noqa: F401

__version__ = "1.0.0"

__all__ = [
    "AutomationConfig",
    "Envelope",
    "FaultCode",
    "load_config",
    "run_exchange",
    "send_message_and_get_response",
    "__version__",
]
