"""Per-run session state shared by the session components."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..config import AutomationConfig
from ..errors import AuthenticationFailed
from ..transport.base import PageCapability


class ChatMode(str, Enum):
    """Whether the exchange happens in a fresh thread or a resumed one."""

    NEW = "NEW"
    RECENT = "RECENT"


@dataclass
class ChatSession:
    """
    Mutable state for one automation run.

    Created at session start and dropped at session end; nothing here is
    persisted. The Thread Selector sets mode and baseline, the Harvester
    reads them.
    """

    config: AutomationConfig
    mode: ChatMode = ChatMode.NEW
    baseline_reply_count: int = 0
    page: PageCapability | None = None

    def require_page(self) -> PageCapability:
        """The bound page; components call this before any UI work."""
        if self.page is None:
            raise AuthenticationFailed("No browsing context; initialize the session first.")
        return self.page

    def enter_new_thread(self) -> None:
        self.mode = ChatMode.NEW
        self.baseline_reply_count = 0

    def enter_recent_thread(self, reply_count: int) -> None:
        self.mode = ChatMode.RECENT
        self.baseline_reply_count = max(0, reply_count)
