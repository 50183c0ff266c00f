# src/superai/transport/base.py
"""
Browsable page interface.

This module defines the abstract capability the session components drive:
navigation, cookie injection, element query/wait, typing, clicking and
in-page script evaluation. The concrete engine (Playwright) lives in
playwright_page.py; tests provide an in-memory fake.

Implementations must translate engine faults into the automation taxonomy:
- a bounded wait that elapses raises OperationTimeout
- using an element that was detached from the document raises StaleElement
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ElementRef(ABC):
    """A located element. May become stale after any re-render."""

    @abstractmethod
    async def inner_text(self) -> str:
        """Visible text of the element."""
        raise NotImplementedError

    @abstractmethod
    async def click(self) -> None:
        raise NotImplementedError

    @abstractmethod
    async def hover(self) -> None:
        raise NotImplementedError

    @abstractmethod
    async def focus(self) -> None:
        raise NotImplementedError


class PageCapability(ABC):
    """
    One browsing context bound to one page.

    Operations are issued strictly one at a time by the session; the
    implementation does not need to be safe for concurrent use.
    """

    # ---------- Navigation / credentials ----------

    @abstractmethod
    async def goto(self, url: str, *, timeout_s: float) -> None:
        """Navigate and wait for network quiescence."""
        raise NotImplementedError

    @abstractmethod
    async def add_cookies(self, cookies: list[dict[str, Any]]) -> None:
        raise NotImplementedError

    # ---------- Query ----------

    @abstractmethod
    async def query(self, selector: str) -> ElementRef | None:
        """First element matching selector, or None."""
        raise NotImplementedError

    @abstractmethod
    async def query_all(self, selector: str) -> list[ElementRef]:
        """All elements matching selector, in document order."""
        raise NotImplementedError

    @abstractmethod
    async def wait_for(self, selector: str, *, timeout_s: float) -> ElementRef:
        """
        Wait until an element matching selector is visible.

        Raises:
            OperationTimeout: if nothing matched within timeout_s
        """
        raise NotImplementedError

    @abstractmethod
    async def find_by_text(self, selector: str, text: str) -> ElementRef | None:
        """First element matching selector whose visible text contains text."""
        raise NotImplementedError

    # ---------- Input ----------

    @abstractmethod
    async def type_text(self, selector: str, text: str, *, delay_ms: int = 0) -> None:
        """Type into the first element matching selector."""
        raise NotImplementedError

    @abstractmethod
    async def wait_until_enabled(self, selector: str, *, timeout_s: float) -> None:
        """
        Wait until the element exists and is not disabled.

        Raises:
            OperationTimeout: if it stays absent or disabled
        """
        raise NotImplementedError

    # ---------- Scripts ----------

    @abstractmethod
    async def evaluate(self, script: str, arg: Any = None) -> Any:
        """Run a page function `script` with one JSON-safe argument."""
        raise NotImplementedError

    # ---------- Lifecycle ----------

    @abstractmethod
    async def close(self) -> None:
        """Release the browsing context. Aborts pending waits."""
        raise NotImplementedError
