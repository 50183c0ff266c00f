"""
Model Switcher: pick the active AI model from the header dropdown.

The dropdown is re-rendered by the remote app at unpredictable moments, so
an element located a moment ago may be detached by the time it is clicked.
Those clicks go through retry_once_on_stale: one fresh lookup, one retry.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, TypeVar

from ..envelope import Envelope
from ..errors import ControlNotFound, OperationTimeout, OptionNotFound, StaleElement, UnknownModel
from ..transport.base import ElementRef, PageCapability
from .base import SessionComponent

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_once_on_stale(
    locate: Callable[[], Awaitable[ElementRef | None]],
    act: Callable[[ElementRef], Awaitable[T]],
    *,
    first: ElementRef | None = None,
    what: str = "element",
) -> T:
    """
    Run `act` on an element, re-locating it once if it went stale.

    Args:
        locate: Fresh lookup of the element (None if it is gone)
        act: Interaction to perform
        first: Already-located element to try first (skips the first lookup)
        what: Description for error messages

    Raises:
        ControlNotFound: if the element cannot be located, or goes stale twice
    """
    element = first if first is not None else await locate()
    if element is None:
        raise ControlNotFound(f"{what} not found")
    try:
        return await act(element)
    except StaleElement:
        logger.debug("%s detached; re-locating once", what)

    element = await locate()
    if element is None:
        raise ControlNotFound(f"{what} was removed and could not be re-queried.")
    try:
        return await act(element)
    except StaleElement as e:
        raise ControlNotFound(f"{what} detached again after re-query") from e


async def _focus_click(element: ElementRef) -> None:
    await element.focus()
    await element.click()


async def _focus_hover_click(element: ElementRef) -> None:
    await element.focus()
    await element.hover()
    await element.click()


class ModelSwitcher(SessionComponent):
    """Selects a model by its logical key (e.g. 'chatgpt')."""

    async def select_model(self, key: str) -> Envelope:
        """
        Open the model dropdown and click the option for `key`.

        Unknown keys fail before any UI interaction. Selecting the model that
        is already active is a normal selection and succeeds.

        Returns:
            Envelope; UNKNOWN_MODEL, CONTROL_NOT_FOUND, TIMEOUT or
            OPTION_NOT_FOUND on failure
        """
        try:
            label = self.config.model_label(key) if isinstance(key, str) else None
            if not label:
                available = ", ".join(sorted(self.config.models))
                raise UnknownModel(f"Invalid option key '{key}'. Available options: {available}")

            page = self.session.require_page()
            trigger_sel = self.selectors.model_trigger
            option_sel = f"{self.selectors.model_panel} {self.selectors.model_option}"

            try:
                trigger = await page.wait_for(trigger_sel, timeout_s=self.timeouts.ui_s)
            except OperationTimeout as e:
                raise ControlNotFound("Dropdown button not found") from e
            await retry_once_on_stale(
                lambda: page.query(trigger_sel), _focus_click, first=trigger, what="Dropdown button"
            )

            await page.wait_for(self.selectors.model_panel, timeout_s=self.timeouts.ui_s)
            options = await page.query_all(option_sel)
            if not options:
                raise OptionNotFound("Dropdown options not found")

            for option in options:
                try:
                    text = (await option.inner_text()).strip()
                except StaleElement:
                    # Panel re-rendered while reading; look the option up by text instead
                    return await self._click_option(page, option_sel, label, key)
                if label in text:
                    return await self._click_option(page, option_sel, label, key, option, text)

            raise OptionNotFound(f"Option '{label}' not found in the dropdown.")
        except Exception as e:
            return self._failed(e, "Error selecting dropdown option", prompt=key)

    async def _click_option(
        self,
        page: PageCapability,
        option_sel: str,
        label: str,
        key: str,
        option: ElementRef | None = None,
        shown: str | None = None,
    ) -> Envelope:
        def locate() -> Awaitable[ElementRef | None]:
            return page.find_by_text(option_sel, label)

        if option is None:
            option = await locate()
            if option is None:
                raise OptionNotFound(f"Option '{label}' not found in the dropdown.")

        await retry_once_on_stale(locate, _focus_hover_click, first=option, what=f"Option '{label}'")
        selected = shown or label
        self._logger.info("Model option '%s' selected", selected)
        return Envelope.ok(f"Option '{selected}' selected", prompt=key)
