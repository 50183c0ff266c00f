"""Tests for thread selection and sidebar housekeeping."""

import pytest

from conftest import build_chat_page
from superai.envelope import FaultCode
from superai.session.state import ChatMode, ChatSession
from superai.session.threads import ThreadSelector


def _selector(config, **page_kwargs):
    page = build_chat_page(config, **page_kwargs)
    session = ChatSession(config, page=page)
    return ThreadSelector(session), session, page


@pytest.mark.asyncio
async def test_new_with_empty_sidebar_clicks_new_button(config):
    selector, session, page = _selector(config, threads=0)

    result = await selector.select_thread("new")

    assert result.success
    assert page.clicked("new") == 1
    assert page.clicked("history") == 0
    assert session.mode is ChatMode.NEW


@pytest.mark.asyncio
async def test_new_without_new_button_is_control_not_found(config):
    selector, session, page = _selector(config, threads=0)
    page.elements[config.selectors.new_chat_button] = []

    result = await selector.select_thread("new")

    assert result.code is FaultCode.CONTROL_NOT_FOUND


@pytest.mark.asyncio
async def test_new_with_threads_present_starts_new_thread(config):
    selector, session, page = _selector(config, threads=3)
    session.enter_recent_thread(4)

    result = await selector.select_thread("NEW")

    assert result.success
    assert session.mode is ChatMode.NEW
    assert session.baseline_reply_count == 0


@pytest.mark.asyncio
async def test_numeric_choice_opens_thread_and_records_baseline(config):
    """Test that opening thread 2 makes the session RECENT with the visible reply count."""
    selector, session, page = _selector(config, threads=3, prior_replies=4)

    result = await selector.select_thread(2)

    assert result.success
    assert page.clicked("thread-2") == 1
    assert ("hover", "thread-2") in page.actions
    assert session.mode is ChatMode.RECENT
    assert session.baseline_reply_count == 4


@pytest.mark.asyncio
async def test_numeric_string_choice_is_accepted(config):
    selector, session, page = _selector(config, threads=2)

    result = await selector.select_thread("1")

    assert result.success
    assert page.clicked("thread-1") == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("choice", [99, 0, "abc", "-1", 1.5, None, True])
async def test_invalid_choices(config, choice):
    selector, session, page = _selector(config, threads=3)

    result = await selector.select_thread(choice)

    assert result.code is FaultCode.INVALID_CHOICE
    assert not any(a[0] == "click" for a in page.actions)


@pytest.mark.asyncio
@pytest.mark.parametrize("sidebar", [True, False])
async def test_numeric_choice_without_threads_is_no_such_thread(config, sidebar):
    selector, session, page = _selector(config, threads=0, sidebar=sidebar)

    result = await selector.select_thread(1)

    assert result.code is FaultCode.NO_SUCH_THREAD


@pytest.mark.asyncio
async def test_thread_that_never_renders_times_out(config):
    selector, session, page = _selector(config, threads=2)
    page.elements[config.selectors.reply_container] = []

    result = await selector.select_thread(1)

    assert result.code is FaultCode.TIMEOUT


@pytest.mark.asyncio
async def test_clear_recent_threads_deletes_until_empty(config):
    """Test that each round opens a menu, deletes, and confirms in the modal."""
    selector, session, page = _selector(config, threads=3)
    sel = config.selectors
    page.add(sel.thread_delete_option, "delete")
    page.add(sel.confirm_dialog, "dialog")

    def confirm():
        page.elements[sel.thread_menu_button].pop(0)

    page.add(sel.confirm_delete_button, "confirm", on_click=confirm)

    result = await selector.clear_recent_threads()

    assert result.success
    assert result.message == "Successfully deleted 3 chats."
    assert result.data is None
    assert page.clicked("confirm") == 3


@pytest.mark.asyncio
async def test_clear_recent_threads_without_modal_fails(config):
    selector, session, page = _selector(config, threads=1)
    page.add(config.selectors.thread_delete_option, "delete")

    result = await selector.clear_recent_threads()

    assert result.code is FaultCode.CONTROL_NOT_FOUND
    assert "Confirmation modal" in result.message


@pytest.mark.asyncio
async def test_search_and_clear_search(config):
    selector, session, page = _selector(config, threads=1)

    searched = await selector.search_threads("invoices")
    cleared = await selector.clear_search()

    assert searched.success
    assert (config.selectors.search_input, "invoices") in page.typed
    assert cleared.success
    assert ("clear", config.selectors.search_input) in page.actions


@pytest.mark.asyncio
async def test_search_rejects_empty_term(config):
    selector, session, page = _selector(config)

    result = await selector.search_threads("  ")

    assert result.code is FaultCode.INVALID_CHOICE
