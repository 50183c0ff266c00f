"""Tests for the HTTP daemon."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from conftest import build_chat_page, factory_for
from daemon import main
from superai import __version__


@pytest.fixture
def client(config):
    page = build_chat_page(config)
    with patch.object(main, "load_config", return_value=config), patch.object(
        main, "configure_logging"
    ), patch.dict(main.daemon_state, {"browser_factory": factory_for(page)}):
        with TestClient(main.app) as test_client:
            test_client.page = page
            yield test_client


def test_healthz(client):
    response = client.get("/healthz")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["version"] == __version__
    assert body["uptime_s"] >= 0


def test_send_runs_exchange(client):
    """Test that POST /send returns the harvested Envelope."""
    response = client.post("/send", json={"thread": "new", "model": "chatgpt", "message": "hello"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["model"] == "ChatGPT 4o"
    assert body["data"]["texts"] == ["Reply to hello"]
    assert client.page.close_calls == 1


def test_send_failure_is_reported_in_body(client):
    response = client.post("/send", json={"thread": "new", "model": "claude", "message": "hi"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "unknown_model"


def test_send_numeric_thread_is_passed_as_int(client):
    with patch.object(main, "run_exchange", new=AsyncMock()) as run:
        run.return_value = main.Envelope.ok("New responses retrieved", prompt="hi")
        client.post("/send", json={"thread": 3, "model": "gemini", "message": "hi"})

    assert run.await_args.args == (3, "gemini", "hi")


def test_send_requires_message(client):
    response = client.post("/send", json={"thread": "new", "model": "gemini", "message": ""})

    assert response.status_code == 422


def test_unexpected_error_is_wrapped(client):
    with patch.object(main, "run_exchange", new=AsyncMock(side_effect=RuntimeError("boom"))):
        response = client.post("/send", json={"model": "gemini", "message": "hi"})

    body = response.json()
    assert body["success"] is False
    assert body["code"] == "unexpected_fault"
