"""Common plumbing for session components."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from ..envelope import Envelope, FaultCode
from ..errors import AutomationError
from .state import ChatSession


class SessionComponent:
    """
    Base class for the stages of one exchange.

    Each component is bound to a ChatSession (and through it to the
    configuration and page). Faults are raised inside a component and
    converted to a failed Envelope at its public boundary by _failed().
    """

    def __init__(self, session: ChatSession):
        self.session = session
        self.config = session.config
        self.selectors = session.config.selectors
        self.timeouts = session.config.timeouts
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    async def _pause(self, seconds: float) -> None:
        """Cooperative pause to let the remote UI re-render."""
        if seconds > 0:
            await asyncio.sleep(seconds)

    def _failed(
        self,
        exc: Exception,
        context: str,
        *,
        prompt: Any = None,
        data: dict[str, Any] | None = None,
    ) -> Envelope:
        """
        Log a fault and wrap it in a failed Envelope.

        AutomationError keeps its code; anything else becomes UNEXPECTED_FAULT
        and is logged with its stack.
        """
        if isinstance(exc, AutomationError):
            self._logger.error("%s: %s", context, exc)
            code = exc.code
        else:
            self._logger.error("%s: %s", context, exc, exc_info=exc)
            code = FaultCode.UNEXPECTED_FAULT
        return Envelope.fail(code, f"{context}: {exc}", prompt=prompt, data=data)
