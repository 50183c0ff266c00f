"""Shared fixtures: an in-memory page that behaves like the SuperAI chat UI."""

from __future__ import annotations

import json
from dataclasses import replace
from types import MappingProxyType
from typing import Any, Callable

import pytest

from superai.config import AutomationConfig, BrowserOptions, Timeouts
from superai.errors import OperationTimeout, StaleElement
from superai.session.harvester import SNAPSHOT_JS
from superai.session.state import ChatSession
from superai.session.threads import CLEAR_INPUT_JS
from superai.transport.base import ElementRef, PageCapability


class FakeElement(ElementRef):
    """Element that records interactions on its page and can go stale."""

    def __init__(
        self,
        page: FakePage,
        name: str,
        text: str | Callable[[], str] = "",
        *,
        stale_clicks: int = 0,
        stale_reads: int = 0,
        on_click: Callable[[], None] | None = None,
    ):
        self.page = page
        self.name = name
        self._text = text
        self.stale_clicks = stale_clicks
        self.stale_reads = stale_reads
        self.on_click = on_click
        self.clicks = 0

    @property
    def text(self) -> str:
        return self._text() if callable(self._text) else self._text

    async def inner_text(self) -> str:
        self.page.actions.append(("read", self.name))
        if self.stale_reads > 0:
            self.stale_reads -= 1
            raise StaleElement(f"{self.name} is not attached to the DOM")
        return self.text

    async def click(self) -> None:
        self.page.actions.append(("click", self.name))
        if self.stale_clicks > 0:
            self.stale_clicks -= 1
            raise StaleElement(f"{self.name} is not attached to the DOM")
        self.clicks += 1
        if self.on_click is not None:
            self.on_click()

    async def hover(self) -> None:
        self.page.actions.append(("hover", self.name))

    async def focus(self) -> None:
        self.page.actions.append(("focus", self.name))


class FakePage(PageCapability):
    """
    Selector-keyed element store plus a scripted reply region.

    `frames` is a list of reply-node snapshot lists; each snapshot call
    returns the next frame and the last one repeats. When `frames` is None
    the reply region is derived from what was sent: one reply per sent
    message, the newest one not yet rendered.
    """

    def __init__(self) -> None:
        self.elements: dict[str, list[FakeElement]] = {}
        self.actions: list[tuple[Any, ...]] = []
        self.typed: list[tuple[str, str]] = []
        self.sent: list[str] = []
        self.cookies: list[dict[str, Any]] = []
        self.visited: list[str] = []
        self.disabled: set[str] = set()
        self.frames: list[list[dict[str, Any]]] | None = None
        self.snapshot_calls = 0
        self.close_calls = 0
        self.close_error: Exception | None = None
        self.goto_error: Exception | None = None
        self.separator_marker = ""
        self.state: dict[str, Any] = {}
        self._draft = ""

    # ---------- Test helpers ----------

    def add(self, selector: str, name: str, text: Any = "", **kwargs: Any) -> FakeElement:
        element = FakeElement(self, name, text, **kwargs)
        self.elements.setdefault(selector, []).append(element)
        return element

    def clicked(self, name: str) -> int:
        return sum(1 for a in self.actions if a == ("click", name))

    # ---------- PageCapability ----------

    async def goto(self, url: str, *, timeout_s: float) -> None:
        self.actions.append(("goto", url))
        if self.goto_error is not None:
            raise self.goto_error
        self.visited.append(url)

    async def add_cookies(self, cookies: list[dict[str, Any]]) -> None:
        self.cookies.extend(cookies)

    async def query(self, selector: str) -> ElementRef | None:
        found = self.elements.get(selector, [])
        return found[0] if found else None

    async def query_all(self, selector: str) -> list[ElementRef]:
        return list(self.elements.get(selector, []))

    async def wait_for(self, selector: str, *, timeout_s: float) -> ElementRef:
        found = await self.query(selector)
        if found is None:
            raise OperationTimeout(f"Timed out waiting for '{selector}'")
        return found

    async def find_by_text(self, selector: str, text: str) -> ElementRef | None:
        for element in self.elements.get(selector, []):
            if text in element.text:
                return element
        return None

    async def type_text(self, selector: str, text: str, *, delay_ms: int = 0) -> None:
        if selector not in self.elements:
            raise OperationTimeout(f"Timed out waiting for '{selector}'")
        self.actions.append(("type", selector, text))
        self.typed.append((selector, text))
        self._draft = text

    async def wait_until_enabled(self, selector: str, *, timeout_s: float) -> None:
        if selector in self.disabled or selector not in self.elements:
            raise OperationTimeout(f"'{selector}' stayed disabled")

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        if script == SNAPSHOT_JS:
            return self._snapshot()
        if script == CLEAR_INPUT_JS:
            self.actions.append(("clear", arg))
            return arg in self.elements
        raise AssertionError(f"unexpected script: {script[:40]}")

    async def close(self) -> None:
        self.close_calls += 1
        if self.close_error is not None:
            raise self.close_error

    # ---------- Simulation ----------

    def submit(self) -> None:
        self.sent.append(self._draft)
        self._draft = ""

    def _snapshot(self) -> list[dict[str, Any]]:
        self.snapshot_calls += 1
        if self.frames is not None:
            index = min(self.snapshot_calls, len(self.frames)) - 1
            return self.frames[index] if index >= 0 else []
        return [self._reply_for(text) for text in self.sent[:-1]]

    def _reply_for(self, text: str) -> dict[str, Any]:
        if self.separator_marker and self.separator_marker in text:
            return node(self.separator_marker)
        return node(f"Reply to {text}")


def node(
    text: str = "",
    *,
    code: str | None = None,
    ordered: dict[str, Any] | None = None,
    unordered: list[str] | None = None,
    images: list[str] | None = None,
) -> dict[str, Any]:
    """One reply-node snapshot, shaped like SNAPSHOT_JS output."""
    return {
        "text": text,
        "code": code,
        "ordered": ordered,
        "unordered": unordered or [],
        "images": images or [],
    }


FAST_TIMEOUTS = Timeouts(
    navigation_s=1.0,
    ui_s=1.0,
    thread_open_s=1.0,
    send_enabled_s=1.0,
    settle_s=0.0,
    cycle_pause_s=0.0,
    reply_wait_s=0.2,
    reply_poll_s=0.01,
    teardown_delay_s=0.0,
    typing_delay_ms=0,
)


@pytest.fixture
def cookie_file(tmp_path):
    path = tmp_path / "cookies.json"
    path.write_text(
        json.dumps([{"name": "session", "value": "abc", "domain": ".superai.id", "path": "/"}])
    )
    return path


@pytest.fixture
def config(cookie_file) -> AutomationConfig:
    return AutomationConfig(
        timeouts=FAST_TIMEOUTS,
        browser=BrowserOptions(cookies_dir=str(cookie_file.parent), cookies_file=cookie_file.name),
    )


def build_chat_page(
    config: AutomationConfig,
    *,
    threads: int = 0,
    sidebar: bool = True,
    prior_replies: int = 0,
    active_model: str = "Gemini 1.5",
    logged_in: bool = True,
) -> FakePage:
    """A page laid out like a logged-in SuperAI chat."""
    sel = config.selectors
    page = FakePage()
    page.separator_marker = config.separator.marker
    state = page.state
    state["model"] = active_model

    if not logged_in:
        page.add(sel.login_button, "login")

    page.add(sel.new_chat_button, "history", "History")
    page.add(sel.new_chat_button, "new", "New")
    if sidebar:
        page.add(sel.recent_threads, "sidebar")
        for i in range(threads):
            page.add(f"{sel.recent_threads} {sel.thread_item}", f"thread-{i + 1}", f"Chat {i + 1}")
            page.add(sel.thread_menu_button, f"menu-{i + 1}")

    page.add(sel.model_trigger, "trigger", lambda: state["model"])
    page.add(sel.model_panel, "panel")
    option_sel = f"{sel.model_panel} {sel.model_option}"
    for key, label in config.models.items():

        def choose(label: str = label) -> None:
            state["model"] = label

        page.add(option_sel, f"option-{key}", label, on_click=choose)

    page.add(sel.input_field, "input")
    page.add(sel.send_button, "send", on_click=page.submit)
    page.add(sel.reply_container, "replies")
    for i in range(prior_replies):
        page.add(f"{sel.reply_container} {sel.reply_item}", f"reply-{i}", f"Old reply {i}")
    page.add(sel.search_input, "search")
    return page


@pytest.fixture
def page(config) -> FakePage:
    return build_chat_page(config)


@pytest.fixture
def session(config, page) -> ChatSession:
    return ChatSession(config, page=page)


def factory_for(page: FakePage):
    """Browser factory that hands out `page` and records the options it got."""
    calls: list[BrowserOptions] = []

    async def factory(options: BrowserOptions) -> FakePage:
        calls.append(options)
        return page

    factory.calls = calls  # type: ignore[attr-defined]
    return factory


def with_models(config: AutomationConfig, **models: str) -> AutomationConfig:
    return replace(config, models=MappingProxyType(models))
