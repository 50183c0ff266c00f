# src/superai/session/__init__.py
"""
Session components.

Exports:
- ChatSession, ChatMode            (per-run state)
- Authenticator, ThreadSelector,
  ModelSwitcher, MessageTransmitter,
  ResponseHarvester                (pipeline stages)
- SessionOrchestrator, SessionStage
- run_exchange, run_clear_threads, send_message_and_get_response
"""

from __future__ import annotations

from .auth import Authenticator  # noqa: F401
from .harvester import ResponseHarvester  # noqa: F401
from .models import ModelSwitcher  # noqa: F401
from .orchestrator import (  # noqa: F401
    SessionOrchestrator,
    SessionStage,
    run_clear_threads,
    run_exchange,
    send_message_and_get_response,
)
from .state import ChatMode, ChatSession  # noqa: F401
from .threads import ThreadSelector  # noqa: F401
from .transmitter import MessageTransmitter  # noqa: F401

__all__ = [
    "Authenticator",
    "ChatMode",
    "ChatSession",
    "MessageTransmitter",
    "ModelSwitcher",
    "ResponseHarvester",
    "SessionOrchestrator",
    "SessionStage",
    "ThreadSelector",
    "run_clear_threads",
    "run_exchange",
    "send_message_and_get_response",
]
