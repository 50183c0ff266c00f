"""
Config loading shared by the commands that drive a browser locally.
"""

from __future__ import annotations

import dataclasses
import pathlib

import typer

from superai.config import AutomationConfig, load_config
from superai.errors import ConfigError

from .errors import InvalidConfiguration


def load_session_config(
    config_path: str | None = None,
    headed: bool = False,
    cookies: str | None = None,
) -> AutomationConfig:
    """
    Load the config file and apply command-line overrides.

    Raises:
        typer.Exit: with InvalidConfiguration.exit_code if the file is invalid
    """
    try:
        config = load_config(config_path)
    except ConfigError as e:
        typer.secho(f"✗ Failed to load config: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(InvalidConfiguration.exit_code)

    browser = config.browser
    if headed:
        browser = dataclasses.replace(browser, headless=False)
    if cookies:
        path = pathlib.Path(cookies).expanduser()
        browser = dataclasses.replace(browser, cookies_dir=str(path.parent), cookies_file=path.name)
    return dataclasses.replace(config, browser=browser)
