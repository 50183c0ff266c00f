"""
Authenticator: open a browsing context, inject stored cookies, prove login.
"""

from __future__ import annotations

import json
import os
import pathlib
from typing import Any, Awaitable, Callable

from ..config import BrowserOptions
from ..envelope import Envelope
from ..errors import AuthenticationFailed, CredentialMissing, OperationTimeout
from ..transport import launch_page
from ..transport.base import PageCapability
from .base import SessionComponent
from .state import ChatSession

BrowserFactory = Callable[[BrowserOptions], Awaitable[PageCapability]]


def load_cookies(source: str | os.PathLike[str]) -> list[dict[str, Any]]:
    """
    Read a serialized cookie list.

    Raises:
        CredentialMissing: if the file is absent, unreadable or not a JSON list
    """
    path = pathlib.Path(source).expanduser()
    if not path.is_file():
        raise CredentialMissing(
            f"Cookies file not found at {path}. Please log in manually to save cookies."
        )
    try:
        cookies = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise CredentialMissing(f"Cookies file {path} could not be read: {e}") from e
    if not isinstance(cookies, list):
        raise CredentialMissing(f"Cookies file {path} must contain a JSON list of cookies.")
    return [c for c in cookies if isinstance(c, dict)]


class Authenticator(SessionComponent):
    """Binds a logged-in page to the session."""

    def __init__(self, session: ChatSession, browser_factory: BrowserFactory | None = None):
        super().__init__(session)
        self._browser_factory = browser_factory or launch_page

    async def initialize(self, credential_source: str | os.PathLike[str]) -> Envelope:
        """
        Open the browsing context and verify the stored login.

        The page is bound to the session as soon as it exists, so the
        orchestrator can close it even when a later step fails.

        Args:
            credential_source: Path of the JSON cookie file

        Returns:
            Envelope; CREDENTIAL_MISSING or AUTHENTICATION_FAILED on failure
        """
        try:
            page = await self._browser_factory(self.config.browser)
            self.session.page = page

            cookies = load_cookies(credential_source)
            try:
                await page.add_cookies(cookies)
                self._logger.debug("Injected %d cookies", len(cookies))
                await page.goto(self.config.url, timeout_s=self.timeouts.navigation_s)
            except OperationTimeout as e:
                raise AuthenticationFailed(f"Navigation to {self.config.url} timed out") from e
            except Exception as e:
                raise AuthenticationFailed(f"Navigation to {self.config.url} failed: {e}") from e

            if await page.query(self.selectors.login_button) is not None:
                raise AuthenticationFailed("Login failed. Invalid cookies or session expired.")

            self._logger.info("Logged in at %s", self.config.url)
            return Envelope.ok("Initialization successful")
        except Exception as e:
            return self._failed(e, "Initialization failed")
