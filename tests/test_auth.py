"""Tests for the Authenticator."""

import pytest

from conftest import build_chat_page, factory_for
from superai.envelope import FaultCode
from superai.errors import CredentialMissing, OperationTimeout
from superai.session.auth import Authenticator, load_cookies
from superai.session.state import ChatSession


@pytest.mark.asyncio
async def test_initialize_injects_cookies_and_navigates(config, cookie_file):
    """Test that a valid cookie file yields a logged-in session."""
    page = build_chat_page(config)
    factory = factory_for(page)
    session = ChatSession(config)

    result = await Authenticator(session, factory).initialize(cookie_file)

    assert result.success
    assert result.message == "Initialization successful"
    assert session.page is page
    assert page.cookies[0]["name"] == "session"
    assert page.visited == [config.url]
    assert factory.calls == [config.browser]


@pytest.mark.asyncio
async def test_missing_cookie_file_is_credential_missing(config, tmp_path):
    page = build_chat_page(config)
    session = ChatSession(config)

    result = await Authenticator(session, factory_for(page)).initialize(tmp_path / "none.json")

    assert not result.success
    assert result.code is FaultCode.CREDENTIAL_MISSING
    assert page.visited == []
    # The page is still bound so it can be torn down
    assert session.page is page


@pytest.mark.asyncio
async def test_visible_login_button_fails_authentication(config, cookie_file):
    """Test that a sign-in control after navigation means the cookies are stale."""
    page = build_chat_page(config, logged_in=False)
    session = ChatSession(config)

    result = await Authenticator(session, factory_for(page)).initialize(cookie_file)

    assert not result.success
    assert result.code is FaultCode.AUTHENTICATION_FAILED
    assert "Invalid cookies or session expired" in result.message


@pytest.mark.asyncio
async def test_navigation_timeout_fails_authentication(config, cookie_file):
    page = build_chat_page(config)
    page.goto_error = OperationTimeout("networkidle not reached")
    session = ChatSession(config)

    result = await Authenticator(session, factory_for(page)).initialize(cookie_file)

    assert result.code is FaultCode.AUTHENTICATION_FAILED


def test_load_cookies_rejects_non_list(tmp_path):
    path = tmp_path / "cookies.json"
    path.write_text('{"name": "session"}')

    with pytest.raises(CredentialMissing):
        load_cookies(path)


def test_load_cookies_rejects_bad_json(tmp_path):
    path = tmp_path / "cookies.json"
    path.write_text("[{")

    with pytest.raises(CredentialMissing):
        load_cookies(path)
