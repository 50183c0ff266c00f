# PlaywrightPage: concrete PageCapability using Playwright's async API.
# Launches a softened Chromium, owns its context, and maps engine faults
# onto OperationTimeout / StaleElement.

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from playwright.async_api import Browser, BrowserContext, ElementHandle, Page, Playwright
from playwright.async_api import Error as PWError
from playwright.async_api import TimeoutError as PWTimeout
from playwright.async_api import async_playwright

from ..config import BrowserOptions
from ..errors import OperationTimeout, StaleElement
from .base import ElementRef, PageCapability

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Fingerprint softening
# ---------------------------------------------------------------------------

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-blink-features=AutomationControlled",
    "--disable-infobars",
]

REALISTIC_UA = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/129.0.0.0 Safari/537.36"
)

STEALTH_INIT_JS = """
// navigator.webdriver -> undefined
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });

// plugins & languages look normal
try {
  Object.defineProperty(navigator, 'languages', { get: () => ['en-US','en'] });
  Object.defineProperty(navigator, 'plugins',   { get: () => [1,2,3] });
} catch (e) {}

// Permissions.query spoof (common probe)
const _query = (navigator.permissions && navigator.permissions.query)
  ? navigator.permissions.query.bind(navigator.permissions)
  : null;
if (_query) {
  navigator.permissions.query = (params) => {
    if (params && params.name === 'notifications') {
      return Promise.resolve({ state: Notification.permission });
    }
    return _query(params);
  };
}
"""

FIND_BY_TEXT_JS = """
([selector, text]) => {
  const nodes = Array.from(document.querySelectorAll(selector));
  return nodes.find((node) => (node.innerText || node.textContent || "").includes(text)) || null;
}
"""

ENABLED_JS = """
(selector) => {
  const button = document.querySelector(selector);
  return !!button && !button.disabled;
}
"""

# Playwright reports detachment only through the message text
_DETACHED_MARKERS = ("not attached to the dom", "detached from document", "element is detached")

_SAME_SITE = {"strict": "Strict", "lax": "Lax", "none": "None", "no_restriction": "None"}
_COOKIE_KEYS = ("name", "value", "url", "domain", "path", "expires", "httpOnly", "secure", "sameSite")


def normalize_cookie(record: dict[str, Any]) -> dict[str, Any] | None:
    """
    Convert a stored cookie record into Playwright's add_cookies shape.

    Accepts the puppeteer/browser-extension spellings (expiry, expirationDate,
    lower-case sameSite). Returns None for records without name or value.
    """
    if not record.get("name") or record.get("value") is None:
        return None

    cookie = dict(record)
    for alias in ("expiry", "expirationDate"):
        if alias in cookie and "expires" not in cookie:
            cookie["expires"] = cookie[alias]
    if "expires" in cookie:
        try:
            cookie["expires"] = float(cookie["expires"])
        except (TypeError, ValueError):
            del cookie["expires"]

    same_site = cookie.get("sameSite")
    if same_site is not None:
        mapped = _SAME_SITE.get(str(same_site).lower())
        if mapped:
            cookie["sameSite"] = mapped
        else:
            del cookie["sameSite"]

    if not cookie.get("domain") and not cookie.get("url"):
        return None
    if cookie.get("domain") and not cookie.get("path"):
        cookie["path"] = "/"

    return {key: cookie[key] for key in _COOKIE_KEYS if key in cookie}


def _translate(exc: PWError, what: str) -> Exception | None:
    """Library fault for a timed-out or detached engine fault, else None."""
    if isinstance(exc, PWTimeout):
        return OperationTimeout(f"Timed out waiting for {what}")
    if any(marker in str(exc).lower() for marker in _DETACHED_MARKERS):
        return StaleElement(f"Element {what} was detached from the document")
    return None


@contextmanager
def _engine_faults(what: str) -> Iterator[None]:
    try:
        yield
    except PWError as e:
        translated = _translate(e, what)
        if translated is None:
            raise
        raise translated from e


class PlaywrightElement(ElementRef):
    """ElementHandle wrapper that reports detachment as StaleElement."""

    def __init__(self, handle: ElementHandle, description: str):
        self._handle = handle
        self._description = description

    async def inner_text(self) -> str:
        with _engine_faults(self._description):
            return await self._handle.inner_text()

    async def click(self) -> None:
        with _engine_faults(self._description):
            await self._handle.click()

    async def hover(self) -> None:
        with _engine_faults(self._description):
            await self._handle.hover()

    async def focus(self) -> None:
        with _engine_faults(self._description):
            await self._handle.focus()


class PlaywrightPage(PageCapability):
    """
    Browser/Playwright-based page.

    Owns the Playwright driver, browser and context it was launched with;
    close() releases all three.
    """

    def __init__(
        self,
        page: Page,
        *,
        context: BrowserContext | None = None,
        browser: Browser | None = None,
        playwright: Playwright | None = None,
    ):
        self._page = page
        self._context = context
        self._browser = browser
        self._playwright = playwright

    @classmethod
    async def launch(cls, options: BrowserOptions) -> PlaywrightPage:
        """Start Chromium and open one fresh page."""
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(headless=options.headless, args=LAUNCH_ARGS)
            context = await browser.new_context(user_agent=REALISTIC_UA, locale="en-US")
            await context.add_init_script(STEALTH_INIT_JS)
            page = await context.new_page()
        except Exception:
            await playwright.stop()
            raise
        logger.info("Browser launched (headless=%s)", options.headless)
        return cls(page, context=context, browser=browser, playwright=playwright)

    # ---------- Navigation / credentials ----------

    async def goto(self, url: str, *, timeout_s: float) -> None:
        with _engine_faults(f"navigation to {url}"):
            await self._page.goto(url, wait_until="networkidle", timeout=timeout_s * 1000)

    async def add_cookies(self, cookies: list[dict[str, Any]]) -> None:
        prepared = [c for c in (normalize_cookie(record) for record in cookies) if c]
        skipped = len(cookies) - len(prepared)
        if skipped:
            logger.warning("Skipped %d malformed cookie records", skipped)
        await self._page.context.add_cookies(prepared)

    # ---------- Query ----------

    async def query(self, selector: str) -> ElementRef | None:
        handle = await self._page.query_selector(selector)
        return PlaywrightElement(handle, selector) if handle else None

    async def query_all(self, selector: str) -> list[ElementRef]:
        handles = await self._page.query_selector_all(selector)
        return [PlaywrightElement(h, f"{selector}[{i}]") for i, h in enumerate(handles)]

    async def wait_for(self, selector: str, *, timeout_s: float) -> ElementRef:
        with _engine_faults(selector):
            handle = await self._page.wait_for_selector(
                selector, state="visible", timeout=timeout_s * 1000
            )
        if handle is None:
            raise OperationTimeout(f"Timed out waiting for {selector}")
        return PlaywrightElement(handle, selector)

    async def find_by_text(self, selector: str, text: str) -> ElementRef | None:
        js_handle = await self._page.evaluate_handle(FIND_BY_TEXT_JS, [selector, text])
        element = js_handle.as_element()
        if element is None:
            await js_handle.dispose()
            return None
        return PlaywrightElement(element, f"{selector} ~ '{text}'")

    # ---------- Input ----------

    async def type_text(self, selector: str, text: str, *, delay_ms: int = 0) -> None:
        with _engine_faults(selector):
            await self._page.locator(selector).first.press_sequentially(text, delay=delay_ms)

    async def wait_until_enabled(self, selector: str, *, timeout_s: float) -> None:
        try:
            await self._page.wait_for_function(ENABLED_JS, arg=selector, timeout=timeout_s * 1000)
        except PWTimeout as e:
            raise OperationTimeout(
                f"Send button with selector '{selector}' is not available or still disabled."
            ) from e

    # ---------- Scripts ----------

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        return await self._page.evaluate(script, arg)

    # ---------- Lifecycle ----------

    async def close(self) -> None:
        try:
            if self._context is not None:
                await self._context.close()
            if self._browser is not None:
                await self._browser.close()
        finally:
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None


async def launch_page(options: BrowserOptions) -> PageCapability:
    """Default browser factory used by the Authenticator."""
    return await PlaywrightPage.launch(options)
