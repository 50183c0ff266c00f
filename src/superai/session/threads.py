"""
Thread Selector: open a prior conversation or start a new one.

Also carries the sidebar housekeeping operations (search, clear search,
delete every recent thread).
"""

from __future__ import annotations

from typing import Any

from ..envelope import Envelope
from ..errors import ControlNotFound, InvalidChoice, NoSuchThread, OperationTimeout
from ..transport.base import ElementRef, PageCapability
from .base import SessionComponent

NEW_CHOICE = "new"
NEW_BUTTON_LABEL = "New"

# Upper bound for clear_recent_threads, in case deletions stop taking effect
MAX_THREAD_DELETIONS = 500

CLEAR_INPUT_JS = """
(selector) => {
  const input = document.querySelector(selector);
  if (!input) return false;
  input.value = "";
  input.dispatchEvent(new Event("input", { bubbles: true }));
  return true;
}
"""


def normalize_choice(choice: Any) -> str:
    """
    Lower-cased string form of a thread choice.

    Raises:
        InvalidChoice: if choice is not a str or int
    """
    if isinstance(choice, bool) or not isinstance(choice, (str, int)):
        raise InvalidChoice(
            f"Invalid choice type: expected string or number, got {type(choice).__name__}"
        )
    return str(choice).strip().lower()


async def _activate(element: ElementRef) -> None:
    """Hover before clicking, the way a pointer would."""
    await element.hover()
    await element.click()


class ThreadSelector(SessionComponent):
    """Chooses which conversation the exchange happens in."""

    async def select_thread(self, choice: str | int = NEW_CHOICE) -> Envelope:
        """
        Open thread number `choice` (1-based) or start a new one.

        Sets the session mode to NEW or RECENT. For RECENT it also records
        how many replies were already rendered, so the harvester can tell
        old replies from new ones.

        Args:
            choice: "new" or a positive thread number

        Returns:
            Envelope; CONTROL_NOT_FOUND, NO_SUCH_THREAD, INVALID_CHOICE or
            TIMEOUT on failure
        """
        try:
            choice_str = normalize_choice(choice)
            page = self.session.require_page()

            container = await page.query(self.selectors.recent_threads)
            threads: list[ElementRef] = []
            if container is not None:
                threads = await page.query_all(
                    f"{self.selectors.recent_threads} {self.selectors.thread_item}"
                )

            if not threads:
                if choice_str != NEW_CHOICE:
                    reason = "No recent chats found" if container is None else "No recent chats available"
                    raise NoSuchThread(reason)
                await self._start_new_thread(page, required=True)
                return Envelope.ok(
                    "New chat created by clicking the 'New' button", prompt=choice_str
                )

            if choice_str == NEW_CHOICE:
                await self._start_new_thread(page, required=False)
                return Envelope.ok("New chat created", prompt=choice_str)

            index = self._parse_index(choice_str, len(threads))
            await _activate(threads[index])
            try:
                await page.wait_for(
                    self.selectors.reply_container, timeout_s=self.timeouts.thread_open_s
                )
            except OperationTimeout as e:
                raise OperationTimeout(
                    f"Chat number {index + 1} did not render within {self.timeouts.thread_open_s}s"
                ) from e

            replies = await page.query_all(
                f"{self.selectors.reply_container} {self.selectors.reply_item}"
            )
            self.session.enter_recent_thread(len(replies))
            self._logger.info("Opened chat %d (%d prior replies)", index + 1, len(replies))
            return Envelope.ok(f"Chat number {index + 1} opened", prompt=choice_str)
        except Exception as e:
            return self._failed(e, "Error handling recent chats", prompt=choice)

    def _parse_index(self, choice_str: str, available: int) -> int:
        if not choice_str.isdigit():
            raise InvalidChoice(f"Invalid choice '{choice_str}'. Use 'new' or a chat number.")
        index = int(choice_str) - 1
        if not 0 <= index < available:
            raise InvalidChoice(
                f"Invalid choice. No such chat exists (choose 1-{available})."
            )
        return index

    async def _start_new_thread(self, page: PageCapability, *, required: bool) -> None:
        button = await page.find_by_text(self.selectors.new_chat_button, NEW_BUTTON_LABEL)
        if button is not None:
            await _activate(button)
        elif required:
            raise ControlNotFound("New button not found")
        else:
            self._logger.warning("New button not found; continuing on the current composer")
        self.session.enter_new_thread()

    # ---------- Sidebar housekeeping ----------

    async def search_threads(self, term: str) -> Envelope:
        """Type a search term into the sidebar search box with a typing effect."""
        try:
            if not isinstance(term, str) or not term.strip():
                raise InvalidChoice("Invalid search term: must be a non-empty string.")
            page = self.session.require_page()

            try:
                box = await page.wait_for(self.selectors.search_input, timeout_s=self.timeouts.ui_s)
            except OperationTimeout as e:
                raise ControlNotFound("Search input field not found.") from e
            await box.focus()
            await page.type_text(
                self.selectors.search_input, term, delay_ms=self.timeouts.typing_delay_ms
            )
            await self._pause(self.timeouts.settle_s)
            return Envelope.ok(f"Search completed for '{term}'", prompt=term)
        except Exception as e:
            return self._failed(e, "Error during search", prompt=term)

    async def clear_search(self) -> Envelope:
        """Empty the sidebar search box."""
        try:
            page = self.session.require_page()
            try:
                await page.wait_for(self.selectors.search_input, timeout_s=self.timeouts.ui_s)
            except OperationTimeout as e:
                raise ControlNotFound("Search input field not found.") from e
            cleared = await page.evaluate(CLEAR_INPUT_JS, self.selectors.search_input)
            if not cleared:
                raise ControlNotFound("Search input element not found or could not be cleared.")
            return Envelope.ok("Search input cleared successfully")
        except Exception as e:
            return self._failed(e, "Error clearing search")

    async def clear_recent_threads(self) -> Envelope:
        """
        Delete every thread listed in the sidebar.

        Each round opens the first thread's menu, picks Delete and confirms
        in the modal, until no thread menu is left.
        """
        try:
            page = self.session.require_page()
            deleted = 0

            while deleted < MAX_THREAD_DELETIONS:
                await self._pause(self.timeouts.settle_s)

                menus = await page.query_all(self.selectors.thread_menu_button)
                if not menus:
                    break
                await menus[0].click()

                try:
                    option = await page.wait_for(
                        self.selectors.thread_delete_option, timeout_s=self.timeouts.ui_s
                    )
                except OperationTimeout as e:
                    raise ControlNotFound("Delete option not found in menu.") from e
                await option.click()

                await self._pause(self.timeouts.settle_s * 2)

                try:
                    await page.wait_for(self.selectors.confirm_dialog, timeout_s=self.timeouts.ui_s)
                except OperationTimeout as e:
                    raise ControlNotFound("Confirmation modal not found.") from e

                confirm = await page.query(self.selectors.confirm_delete_button)
                if confirm is None:
                    raise ControlNotFound("Delete button not found in confirmation modal.")
                await confirm.click()
                deleted += 1
                self._logger.debug("Deleted chat #%d", deleted)

                await self._pause(self.timeouts.settle_s)
            else:
                self._logger.warning("Stopped after %d deletions", MAX_THREAD_DELETIONS)

            self.session.enter_new_thread()
            return Envelope.ok(f"Successfully deleted {deleted} chats.")
        except Exception as e:
            return self._failed(e, "Error clearing recent chats")
