# write_notes/settings.py

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from PySide6.QtCore import QSettings

# ───────────────────────── paths ─────────────────────────

APP_NAME = "write-notes"

APP_DIR = Path.home() / f".{APP_NAME}"
LOG_DIR = APP_DIR / "logs"
LOG_PATH = LOG_DIR / f"{APP_NAME}.log"
RECOVERY_DIR = APP_DIR / "recovery"

NOTES_ROOT = Path.home() / "Documents" / "Notes"
CONFIG_PATH = APP_DIR / "workspaces.json"
SETTINGS_PATH = APP_DIR / "settings.ini"

# ───────────────────────── behaviour ─────────────────────────

SAVE_DEBOUNCE_MS = 800
TEMP_PATH_PREFIX = "temp-"
UNTITLED_TITLE = "New Page"

DEFAULT_WORKSPACE_ID = "Personal"
DEFAULT_WORKSPACE_NAME = "Personal"


@dataclass(frozen=True)
class SettingsKeys:
    LAST_NOTE: str = "nav/last_note"


def get_str(settings: QSettings, key: str, default: str) -> str:
    try:
        val = settings.value(key, default)
        return str(val) if val is not None else default
    except Exception:
        return default


def safe_set_setting(settings: QSettings, key: str, value) -> None:
    """Best-effort write into QSettings, never raises."""
    try:
        settings.setValue(key, value)
    except Exception:
        pass
