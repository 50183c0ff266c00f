from __future__ import annotations

import os
from pathlib import Path

APP_ID = "superai-bridge"  # keep stable; use the distribution name

HOME = Path.home()
XDG_CONFIG_HOME = Path(os.getenv("XDG_CONFIG_HOME", HOME / ".config"))
XDG_STATE_HOME = Path(os.getenv("XDG_STATE_HOME", HOME / ".local" / "state"))

# Allow per-category overrides (stronger than XDG)
CONFIG_DIR = Path(os.getenv("SUPERAI_CONFIG_DIR", XDG_CONFIG_HOME / APP_ID))
STATE_DIR = Path(os.getenv("SUPERAI_STATE_DIR", XDG_STATE_HOME / APP_ID))
LOG_DIR = STATE_DIR / "logs"

CONFIG_FILE = CONFIG_DIR / "superai.toml"
ERROR_LOG_FILE = LOG_DIR / "error_log.txt"  # faults only, appended
