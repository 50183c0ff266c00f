"""
Chat management commands.

This module provides CLI commands for managing chat history:
- clear: Delete every chat listed in the sidebar
"""

from __future__ import annotations

import asyncio
import json

import typer

from superai.logging_setup import configure_logging
from superai.session import run_clear_threads

from ..errors import ExchangeFailed
from ..session_config import load_session_config

app = typer.Typer(help="Manage chat history", no_args_is_help=True)


@app.command("clear")
def clear_chats(
    headed: bool = typer.Option(False, "--headed", help="Show the browser window."),
    cookies: str | None = typer.Option(None, "--cookies", help="Path of the cookie file."),
    config_path: str | None = typer.Option(None, "--config", help="Path of the TOML config."),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Delete all recent chats."""
    config = load_session_config(config_path, headed, cookies)
    configure_logging(config.log_level)

    result = asyncio.run(run_clear_threads(config=config))

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    elif result.success:
        typer.secho(f"✓ {result.message}", fg=typer.colors.GREEN)
    else:
        typer.secho(f"✗ Error: {result.message}", fg=typer.colors.RED)

    if not result.success:
        raise typer.Exit(ExchangeFailed.exit_code)
