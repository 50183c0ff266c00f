"""
Configuration management for the SuperAI automation session.

The configuration is built once (defaults merged with an optional TOML file)
and then passed explicitly to every session component. All dataclasses are
frozen; nothing mutates the configuration after load.

TOML layout:

    [superai]
    url = "https://www.superai.id/login"
    cycle_models = true
    log_level = "INFO"

    [models]
    chatgpt = "ChatGPT 4o"

    [selectors]
    send_button = 'button[data-sentry-component="ButtonSending"]'

    [timeouts]
    ui_s = 5.0

    [separator]
    marker = "c2VwYXJhdG9y"

    [browser]
    headless = true
    cookies_dir = "."
    cookies_file = "cookies.json"
"""

from __future__ import annotations

import logging
import os
import pathlib
from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Any, Mapping

import tomli

from common.paths import CONFIG_FILE

from .errors import ConfigError

# Logger for this module (do not configure global logging here)
_logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_URL = "https://www.superai.id/login"

DEFAULT_MODELS = {
    "gemini": "Gemini 1.5",
    "llama": "Llama 3.1",
    "chatgpt": "ChatGPT 4o",
}

DEFAULT_SEPARATOR_MESSAGE = (
    "ignore this message because it is a separator, reply with 'c2VwYXJhdG9y' only."
)
DEFAULT_SEPARATOR_MARKER = "c2VwYXJhdG9y"

# Valid log levels
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

# ---------------------------------------------------------------------------
# Configuration Dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Selectors:
    """CSS selectors for every UI region the session touches."""

    # Login
    login_button: str = 'button[data-sentry-component="SignInWithGoogle"]'
    # Recent threads
    new_chat_button: str = (
        'button[data-sentry-element="Button"], button[data-sentry-component="NewChat"]'
    )
    recent_threads: str = "div.flex.flex-col.flex-grow.flex-shrink.basis-0.text-sm.text-zinc-500"
    thread_item: str = "div.group.flex.flex-row.justify-start.items-center"
    thread_menu_button: str = "button .lucide-ellipsis-vertical"
    thread_delete_option: str = 'div[role="menuitem"] .lucide-trash2'
    confirm_dialog: str = 'div[role="dialog"]'
    confirm_delete_button: str = "button.bg-destructive"
    search_input: str = 'input[placeholder="Search..."]'
    # Model dropdown
    model_trigger: str = "button.text-zinc-800"
    model_panel: str = "div.absolute.right-0"
    model_option: str = "button"
    # Chat
    input_field: str = 'textarea[data-sentry-component="InputTextArea"]'
    send_button: str = 'button[data-sentry-component="ButtonSending"]'
    reply_container: str = "div.flex.flex-col.w-full.space-y-6.px-3.py-4.pb-20.bg-background.mt-14"
    reply_item: str = "div.markdown-content"


@dataclass(frozen=True)
class Timeouts:
    """Bounded waits and pauses, in seconds unless noted."""

    navigation_s: float = 60.0
    ui_s: float = 5.0
    thread_open_s: float = 30.0
    send_enabled_s: float = 10.0
    settle_s: float = 1.0
    cycle_pause_s: float = 0.1
    reply_wait_s: float = 60.0
    reply_poll_s: float = 1.0
    teardown_delay_s: float = 0.5
    typing_delay_ms: int = 150


@dataclass(frozen=True)
class SeparatorConfig:
    """The boundary message and the substring that detects its reply."""

    message: str = DEFAULT_SEPARATOR_MESSAGE
    marker: str = DEFAULT_SEPARATOR_MARKER


@dataclass(frozen=True)
class BrowserOptions:
    """How the browsing context is launched and where credentials live."""

    headless: bool = True
    cookies_dir: str = "."
    cookies_file: str = "cookies.json"

    @property
    def cookies_path(self) -> pathlib.Path:
        return pathlib.Path(self.cookies_dir).expanduser() / self.cookies_file


@dataclass(frozen=True)
class AutomationConfig:
    """Complete session configuration."""

    url: str = DEFAULT_URL
    models: Mapping[str, str] = field(default_factory=lambda: MappingProxyType(dict(DEFAULT_MODELS)))
    selectors: Selectors = field(default_factory=Selectors)
    timeouts: Timeouts = field(default_factory=Timeouts)
    separator: SeparatorConfig = field(default_factory=SeparatorConfig)
    browser: BrowserOptions = field(default_factory=BrowserOptions)
    # Select every other model before the requested one
    cycle_models: bool = True
    log_level: str = "INFO"

    def model_label(self, key: str) -> str | None:
        """Case-insensitive lookup of a model's on-screen label."""
        return self.models.get(key.strip().lower())


# ---------------------------------------------------------------------------
# Validation Helpers
# ---------------------------------------------------------------------------


def _fail(msg: str, *args: Any) -> ConfigError:
    _logger.error(msg, *args)
    return ConfigError(msg % args)


def _as_float(value: Any, field_name: str) -> float:
    """Coerces a value to float with clear error message."""
    if isinstance(value, bool):
        raise _fail("Invalid type for %s: %r (expected number)", field_name, value)
    try:
        return float(value)
    except (ValueError, TypeError):
        raise _fail("Invalid type for %s: %r (expected number)", field_name, value)


def _validate_positive_float(value: float, field_name: str) -> float:
    """Validates that a float value is positive (> 0)."""
    if value <= 0:
        raise _fail("%s must be > 0, got %s", field_name, value)
    return value


def _as_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise _fail("Invalid type for %s: %r (expected true/false)", field_name, value)
    return value


def _as_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise _fail("Invalid value for %s: %r (expected non-empty string)", field_name, value)
    return value


def _normalize_log_level(level: Any) -> str:
    normalized = str(level).upper()
    if normalized not in VALID_LOG_LEVELS:
        raise _fail("Invalid log_level %r (expected one of %s)", level, sorted(VALID_LOG_LEVELS))
    return normalized


def _merge_strings(section: Any, base: Any, section_name: str) -> Any:
    """Overlay string fields of a frozen dataclass from a TOML table."""
    if not isinstance(section, dict):
        raise _fail("[%s] must be a table", section_name)
    known = {f.name for f in fields(base)}
    updates = {}
    for key, value in section.items():
        if key not in known:
            _logger.warning("Unknown key '%s.%s' ignored", section_name, key)
            continue
        updates[key] = _as_str(value, f"{section_name}.{key}")
    return replace(base, **updates)


def _merge_timeouts(section: Any) -> Timeouts:
    if not isinstance(section, dict):
        raise _fail("[timeouts] must be a table")
    base = Timeouts()
    known = {f.name for f in fields(base)}
    updates: dict[str, Any] = {}
    for key, value in section.items():
        if key not in known:
            _logger.warning("Unknown key 'timeouts.%s' ignored", key)
            continue
        number = _as_float(value, f"timeouts.{key}")
        if key in ("teardown_delay_s", "cycle_pause_s", "settle_s", "typing_delay_ms"):
            # Pauses may be disabled
            if number < 0:
                raise _fail("timeouts.%s must be >= 0, got %s", key, number)
        else:
            _validate_positive_float(number, f"timeouts.{key}")
        updates[key] = int(number) if key == "typing_delay_ms" else number
    return replace(base, **updates)


def _merge_browser(section: Any) -> BrowserOptions:
    if not isinstance(section, dict):
        raise _fail("[browser] must be a table")
    updates: dict[str, Any] = {}
    for key, value in section.items():
        if key == "headless":
            updates[key] = _as_bool(value, "browser.headless")
        elif key in ("cookies_dir", "cookies_file"):
            updates[key] = _as_str(value, f"browser.{key}")
        else:
            _logger.warning("Unknown key 'browser.%s' ignored", key)
    return replace(BrowserOptions(), **updates)


def _merge_models(section: Any) -> Mapping[str, str]:
    if not isinstance(section, dict):
        raise _fail("[models] must be a table")
    models = {
        str(key).strip().lower(): _as_str(label, f"models.{key}") for key, label in section.items()
    }
    if not models:
        raise _fail("[models] must define at least one model")
    return MappingProxyType(models)


# ---------------------------------------------------------------------------
# Configuration Loading
# ---------------------------------------------------------------------------


def resolve_config_path(path: str | os.PathLike[str] | None = None) -> pathlib.Path:
    """Argument wins, then the SUPERAI_CONFIG env var, then the XDG default."""
    if path:
        return pathlib.Path(path).expanduser().resolve()
    env_config_path = os.environ.get("SUPERAI_CONFIG")
    if env_config_path:
        return pathlib.Path(env_config_path).expanduser().resolve()
    return CONFIG_FILE


def config_from_dict(loaded: dict[str, Any]) -> AutomationConfig:
    """
    Merge a parsed TOML document into the defaults.

    Raises:
        ConfigError: on wrong types or out-of-range values
    """
    config = AutomationConfig()
    updates: dict[str, Any] = {}

    top = loaded.get("superai", {})
    if not isinstance(top, dict):
        raise _fail("[superai] must be a table")
    for key, value in top.items():
        if key == "url":
            updates["url"] = _as_str(value, "superai.url")
        elif key == "cycle_models":
            updates["cycle_models"] = _as_bool(value, "superai.cycle_models")
        elif key == "log_level":
            updates["log_level"] = _normalize_log_level(value)
        else:
            _logger.warning("Unknown key 'superai.%s' ignored", key)

    if "models" in loaded:
        updates["models"] = _merge_models(loaded["models"])
    if "selectors" in loaded:
        updates["selectors"] = _merge_strings(loaded["selectors"], Selectors(), "selectors")
    if "separator" in loaded:
        updates["separator"] = _merge_strings(loaded["separator"], SeparatorConfig(), "separator")
    if "timeouts" in loaded:
        updates["timeouts"] = _merge_timeouts(loaded["timeouts"])
    if "browser" in loaded:
        updates["browser"] = _merge_browser(loaded["browser"])

    return replace(config, **updates)


def load_config(path: str | os.PathLike[str] | None = None) -> AutomationConfig:
    """
    Loads the session configuration from a TOML file.

    If the config file does not exist, returns the default configuration.

    Returns:
        AutomationConfig: The loaded and validated configuration.

    Raises:
        ConfigError: if the TOML is malformed or has invalid values
    """
    config_file = resolve_config_path(path)

    if not config_file.exists():
        _logger.info("No config file found at %s. Using defaults.", config_file)
        return AutomationConfig()

    try:
        with open(config_file, "rb") as f:
            loaded = tomli.load(f)
        _logger.info("Loaded configuration from: %s", config_file)
    except tomli.TOMLDecodeError as e:
        raise _fail("Invalid TOML syntax in config file %s: %s", config_file, e) from e
    except OSError as e:
        raise _fail("Error reading config file %s: %s", config_file, e) from e

    return config_from_dict(loaded)
