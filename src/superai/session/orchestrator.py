"""
Session Orchestrator: run one exchange end to end.

    UNINIT -> AUTHENTICATED -> THREAD_READY -> RESPONDED -> CLOSED

plus FAILED, entered from any stage whose Envelope reports a failure.
Each stage returns an Envelope; the first failed one short-circuits the rest.
Teardown runs exactly once on every exit path.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

from ..config import AutomationConfig, load_config
from ..envelope import Envelope, FaultCode
from ..errors import UnknownModel
from .auth import Authenticator, BrowserFactory
from .harvester import ResponseHarvester
from .models import ModelSwitcher
from .state import ChatSession
from .threads import ThreadSelector
from .transmitter import MessageTransmitter

logger = logging.getLogger(__name__)


class SessionStage(str, Enum):
    UNINIT = "UNINIT"
    AUTHENTICATED = "AUTHENTICATED"
    THREAD_READY = "THREAD_READY"
    RESPONDED = "RESPONDED"
    FAILED = "FAILED"
    CLOSED = "CLOSED"


class SessionOrchestrator:
    """
    Drives Authenticator -> ThreadSelector -> (model cycling) ->
    MessageTransmitter -> ResponseHarvester on one ChatSession.

    An orchestrator is single-use: run() (or clear_threads()) may be called
    once. `history` records every stage entered, in order.
    """

    def __init__(self, config: AutomationConfig, browser_factory: BrowserFactory | None = None):
        self.config = config
        self.session = ChatSession(config)
        self.history: list[SessionStage] = [SessionStage.UNINIT]

        self.authenticator = Authenticator(self.session, browser_factory)
        self.threads = ThreadSelector(self.session)
        self.models = ModelSwitcher(self.session)
        self.transmitter = MessageTransmitter(self.session, self.models)
        self.harvester = ResponseHarvester(self.session)

        self._closed = False
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def stage(self) -> SessionStage:
        return self.history[-1]

    def _enter(self, stage: SessionStage) -> None:
        self._logger.debug("Stage %s -> %s", self.stage.value, stage.value)
        self.history.append(stage)

    # ---------- Exchange ----------

    async def run(self, thread_choice: str | int, model_key: str, message: str) -> Envelope:
        """
        Authenticate, open the thread, send `message` to `model_key` and
        harvest the reply.

        Returns:
            The harvester's Envelope on success, otherwise the Envelope of the
            first stage that failed. Never raises.
        """
        if self.stage is not SessionStage.UNINIT:
            return self._reused(message)

        try:
            result = await self._exchange(thread_choice, model_key, message)
        except Exception as e:
            self._logger.error("Unexpected fault during exchange: %s", e, exc_info=e)
            result = self._fail(
                Envelope.fail(FaultCode.UNEXPECTED_FAULT, f"Unexpected error: {e}", prompt=message)
            )
        finally:
            await self._teardown()
        return result

    async def _exchange(self, thread_choice: str | int, model_key: str, message: str) -> Envelope:
        result = await self._authenticate()
        if not result.success:
            return result

        result = await self.threads.select_thread(thread_choice)
        if not result.success:
            return self._fail(result)
        self._enter(SessionStage.THREAD_READY)

        if self.config.cycle_models:
            result = await self._cycle_models(model_key)
            if not result.success:
                return self._fail(result)

        result = await self.transmitter.send(message, model_key)
        if not result.success:
            return self._fail(result)

        result = await self.harvester.harvest(message)
        if not result.success:
            return self._fail(result)
        self._enter(SessionStage.RESPONDED)
        return result

    async def _authenticate(self) -> Envelope:
        result = await self.authenticator.initialize(self.config.browser.cookies_path)
        if not result.success:
            return self._fail(result)
        self._enter(SessionStage.AUTHENTICATED)
        return result

    async def _cycle_models(self, model_key: str) -> Envelope:
        """
        Select every other configured model, then the requested one.

        Unknown keys fail before the dropdown is touched.
        """
        if not isinstance(model_key, str) or self.config.model_label(model_key) is None:
            available = ", ".join(sorted(self.config.models))
            e = UnknownModel(f"Invalid option key '{model_key}'. Available options: {available}")
            self._logger.error("Model cycling aborted: %s", e)
            return Envelope.fail(e.code, str(e), prompt=model_key)

        wanted = model_key.strip().lower()
        for other in self.config.models:
            if other.lower() == wanted:
                continue
            result = await self.models.select_model(other)
            if not result.success:
                return result
            await asyncio.sleep(self.config.timeouts.cycle_pause_s)

        return await self.models.select_model(wanted)

    # ---------- Housekeeping ----------

    async def clear_threads(self) -> Envelope:
        """Authenticate and delete every recent thread."""
        if self.stage is not SessionStage.UNINIT:
            return self._reused()

        try:
            result = await self._authenticate()
            if result.success:
                result = await self.threads.clear_recent_threads()
                if not result.success:
                    result = self._fail(result)
        except Exception as e:
            self._logger.error("Unexpected fault while clearing chats: %s", e, exc_info=e)
            result = self._fail(Envelope.fail(FaultCode.UNEXPECTED_FAULT, f"Unexpected error: {e}"))
        finally:
            await self._teardown()
        return result

    # ---------- Teardown ----------

    def _reused(self, prompt: str | None = None) -> Envelope:
        self._logger.error("Orchestrator reused at stage %s", self.stage.value)
        return Envelope.fail(
            FaultCode.UNEXPECTED_FAULT,
            "Session already used; create a new orchestrator",
            prompt=prompt,
        )

    def _fail(self, result: Envelope) -> Envelope:
        if self.stage is not SessionStage.FAILED:
            self._enter(SessionStage.FAILED)
        return result

    async def _teardown(self) -> None:
        """Close the browsing context once. Close faults are logged, never raised."""
        if self._closed:
            return
        self._closed = True

        page = self.session.page
        self.session.page = None
        if page is not None:
            if self.config.timeouts.teardown_delay_s > 0:
                await asyncio.sleep(self.config.timeouts.teardown_delay_s)
            try:
                await page.close()
            except Exception as e:
                self._logger.error("Error closing browser: %s", e, exc_info=e)
        self._enter(SessionStage.CLOSED)


async def run_exchange(
    thread_choice: str | int,
    model_key: str,
    message: str,
    *,
    config: AutomationConfig | None = None,
    browser_factory: BrowserFactory | None = None,
) -> Envelope:
    """Awaitable form of send_message_and_get_response()."""
    try:
        orchestrator = SessionOrchestrator(config or load_config(), browser_factory)
    except Exception as e:
        logger.error("Could not prepare session: %s", e, exc_info=e)
        return Envelope.fail(
            FaultCode.UNEXPECTED_FAULT, f"Could not prepare session: {e}", prompt=message
        )
    return await orchestrator.run(thread_choice, model_key, message)


async def run_clear_threads(
    *,
    config: AutomationConfig | None = None,
    browser_factory: BrowserFactory | None = None,
) -> Envelope:
    try:
        orchestrator = SessionOrchestrator(config or load_config(), browser_factory)
    except Exception as e:
        logger.error("Could not prepare session: %s", e, exc_info=e)
        return Envelope.fail(FaultCode.UNEXPECTED_FAULT, f"Could not prepare session: {e}")
    return await orchestrator.clear_threads()


def send_message_and_get_response(
    thread_choice: str | int,
    model_key: str,
    message: str,
    *,
    config: AutomationConfig | None = None,
    browser_factory: BrowserFactory | None = None,
) -> Envelope:
    """
    Run one complete exchange and block until it resolves.

    Args:
        thread_choice: "new" or a 1-based thread number
        model_key: Logical model key, e.g. "chatgpt"
        message: Text to send
        config: Configuration (loaded from the default location if omitted)
        browser_factory: Page factory (Playwright if omitted)

    Returns:
        Envelope; on success data holds {"model", "texts", "images"}
    """
    return asyncio.run(
        run_exchange(
            thread_choice, model_key, message, config=config, browser_factory=browser_factory
        )
    )
