"""
Message Transmitter: send a message framed between separator messages.

The remote app exposes no message ids. Instead the session sends a fixed
separator message before (new threads only) and after the real message;
the reply to the closing separator marks the boundary the harvester cuts at.
"""

from __future__ import annotations

from ..envelope import Envelope
from ..errors import ControlNotFound, OperationTimeout
from .base import SessionComponent
from .models import ModelSwitcher
from .state import ChatMode, ChatSession


class MessageTransmitter(SessionComponent):
    """Types and sends the separator-framed message."""

    def __init__(self, session: ChatSession, switcher: ModelSwitcher | None = None):
        super().__init__(session)
        self._switcher = switcher or ModelSwitcher(session)

    async def send(self, message: str, model: str) -> Envelope:
        """
        Send `message` to `model`.

        Steps:
          1) NEW thread only: send the separator alone to seed a boundary
          2) select the model (its failure Envelope is returned unchanged)
          3) send the message
          4) send the separator again to close the boundary

        Returns:
            Envelope with prompt=message
        """
        try:
            if self.session.mode is ChatMode.NEW:
                await self._dispatch(self.config.separator.message)

            selected = await self._switcher.select_model(model)
            if not selected.success:
                self._logger.error("Model selection failed: %s", selected.message)
                return selected

            await self._pause(self.timeouts.settle_s)
            await self._dispatch(message)

            await self._pause(self.timeouts.settle_s)
            await self._dispatch(self.config.separator.message)

            return Envelope.ok(
                "Message and separators sent successfully with model selection", prompt=message
            )
        except Exception as e:
            return self._failed(e, "Error sending message", prompt=message)

    async def _dispatch(self, text: str) -> None:
        """Type `text`, wait for the send button to enable, click it, let the UI settle."""
        page = self.session.require_page()
        input_sel = self.selectors.input_field
        send_sel = self.selectors.send_button

        try:
            await page.wait_for(input_sel, timeout_s=self.timeouts.ui_s)
        except OperationTimeout as e:
            raise ControlNotFound(f"Message input '{input_sel}' not found") from e
        await page.type_text(input_sel, text)

        await page.wait_until_enabled(send_sel, timeout_s=self.timeouts.send_enabled_s)
        button = await page.query(send_sel)
        if button is None:
            raise ControlNotFound(f"Send button with selector '{send_sel}' not found.")
        await button.hover()
        await button.click()

        await self._pause(self.timeouts.settle_s)
