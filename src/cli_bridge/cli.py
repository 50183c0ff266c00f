"""superai CLI application entry point.

Defines the main Typer app and registers commands:
- send:    Run one exchange (in-process, or on a daemon with --remote).
- chats:   Manage chat history (clear).
- serve:   Run the HTTP daemon.
- version: Display the application version.
"""

from __future__ import annotations

import typer

from . import __version__
from .commands import chats_cmd
from .commands.send_cmd import run as send_run
from .constants import DEFAULT_DAEMON_HOST, DEFAULT_DAEMON_PORT
from .session_config import load_session_config

# Create root CLI app
app = typer.Typer(
    add_completion=False,
    help=(
        "superai: drive a logged-in SuperAI chat via Playwright.\n\n"
        "Examples:\n"
        "  superai send new chatgpt 'hello'\n"
        "  superai send 2 gemini 'and in French?' --json\n"
        "  superai chats clear\n"
    ),
    no_args_is_help=True,
)

# Wire in chats command group (clear)
app.add_typer(chats_cmd.app, name="chats")


# ---------------------------------------------------------------------------
# Send Command
# ---------------------------------------------------------------------------


@app.command("send")
def send(
    thread: str = typer.Argument(..., help="'new' or the number of a recent chat (1 = newest)."),
    model: str = typer.Argument(..., help="Model key (e.g., 'chatgpt', 'gemini', 'llama')."),
    message: str = typer.Argument(..., help="Text to send."),
    as_json: bool = typer.Option(False, "--json", help="Emit the result envelope as JSON."),
    headed: bool = typer.Option(False, "--headed", help="Show the browser window."),
    cookies: str | None = typer.Option(None, "--cookies", help="Path of the cookie file."),
    config_path: str | None = typer.Option(None, "--config", help="Path of the TOML config."),
    remote: str | None = typer.Option(
        None,
        "--remote",
        help="HOST:PORT of a running 'superai serve' daemon to run the exchange on.",
    ),
):
    """
    Send a message and print the model's reply.

    Examples:
        superai send new chatgpt "What is the weather?"
        superai send 1 llama "Continue" --headed
        superai send new gemini "Hi" --remote 127.0.0.1:8000
    """
    config = load_session_config(config_path, headed, cookies)
    raise typer.Exit(send_run(config, thread, model, message, as_json, remote))


# ---------------------------------------------------------------------------
# Serve Command
# ---------------------------------------------------------------------------


@app.command("serve")
def serve(
    host: str = typer.Option(DEFAULT_DAEMON_HOST, "--host", help="Interface to bind."),
    port: int = typer.Option(DEFAULT_DAEMON_PORT, "--port", help="Port to listen on."),
):
    """Run the HTTP daemon in the foreground."""
    import uvicorn

    uvicorn.run("daemon.main:app", host=host, port=port, log_level="info")


# ---------------------------------------------------------------------------
# Version Command
# ---------------------------------------------------------------------------


@app.command("version")
def version():
    """Print superai version."""
    typer.echo(f"superai {__version__}")


# ---------------------------------------------------------------------------
# Main Entry Point
# ---------------------------------------------------------------------------


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
