"""
Implementation of the 'send' command.

Runs one exchange either in-process (launching its own browser) or, with
--remote, by posting it to a running daemon. Either way the result is one
Envelope, printed as JSON or as readable text.
"""

import json
from typing import Any

import requests
import typer

from superai.config import AutomationConfig
from superai.logging_setup import configure_logging
from superai.session import send_message_and_get_response

from ..constants import API_REQUEST_TIMEOUT_BUFFER_S
from ..errors import DaemonNotRunning, ExchangeFailed


def parse_thread_choice(thread: str) -> str | int:
    """'new' stays a string; a number becomes an int."""
    thread = thread.strip()
    return int(thread) if thread.isdigit() else thread


def parse_remote(remote: str) -> tuple[str, int]:
    """Split HOST:PORT (port defaults to 8000)."""
    host, _, port = remote.rpartition(":")
    if not host:
        return port or "127.0.0.1", 8000
    if not port.isdigit():
        raise typer.BadParameter(f"Invalid port in '{remote}'", param_hint="--remote")
    return host, int(port)


def run(
    config: AutomationConfig,
    thread: str,
    model: str,
    message: str,
    as_json: bool,
    remote: str | None = None,
) -> int:
    """
    Executes the 'send' command.

    Args:
        config: Session configuration (local runs only use it fully)
        thread: "new" or a thread number
        model: Model key
        message: Message to send
        as_json: Output the Envelope as JSON
        remote: HOST:PORT of a running daemon, or None to run in-process

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    choice = parse_thread_choice(thread)

    if remote:
        try:
            result = _send_remote(config, remote, choice, model, message)
        except requests.exceptions.ConnectionError:
            typer.secho(f"✗ Cannot connect to daemon at {remote}", fg=typer.colors.RED, err=True)
            typer.echo("  Is it running? Try: superai serve", err=True)
            return DaemonNotRunning.exit_code
        except requests.exceptions.HTTPError as e:
            typer.secho(
                f"✗ Daemon error (HTTP {e.response.status_code})", fg=typer.colors.RED, err=True
            )
            typer.echo(f"  Response: {e.response.text[:200]}", err=True)
            return ExchangeFailed.exit_code
    else:
        configure_logging(config.log_level)
        result = send_message_and_get_response(choice, model, message, config=config).to_dict()

    _print_result(result, as_json)
    return 0 if result.get("success") else ExchangeFailed.exit_code


def _send_remote(
    config: AutomationConfig, remote: str, thread: str | int, model: str, message: str
) -> dict[str, Any]:
    host, port = parse_remote(remote)
    response = requests.post(
        f"http://{host}:{port}/send",
        json={"thread": thread, "model": model, "message": message},
        timeout=config.timeouts.reply_wait_s + API_REQUEST_TIMEOUT_BUFFER_S,
    )
    response.raise_for_status()
    return response.json()


def _print_result(result: dict[str, Any], as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps(result, indent=2, ensure_ascii=False))
        return

    data = result.get("data") or {}
    if not result.get("success"):
        typer.secho(f"✗ Error: {result.get('message', 'Unknown error')}", fg=typer.colors.RED)
        if data.get("model"):
            typer.echo(f"  model: {data['model']}")
        return

    typer.secho(f"✓ {data.get('model', 'Response')}", fg=typer.colors.GREEN)
    for text in data.get("texts", []):
        typer.echo("")
        typer.echo(text)
    images = data.get("images", [])
    if images:
        typer.echo("")
        typer.echo("  images:")
        for src in images:
            typer.echo(f"    {src}")
