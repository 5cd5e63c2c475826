# write_notes/services/selection_memory.py

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QSettings

from write_notes.settings import SettingsKeys, get_str, safe_set_setting


class LastNoteMemory:
    """
    Per-workspace last selected note, kept in QSettings.
    Used to restore selection after the note list is reloaded.
    """

    def __init__(self, settings: QSettings):
        self._settings = settings

    @staticmethod
    def _key(workspace_id: str) -> str:
        return f"{SettingsKeys.LAST_NOTE}/{workspace_id}"

    def get(self, workspace_id: Optional[str]) -> Optional[str]:
        if not workspace_id:
            return None
        return get_str(self._settings, self._key(workspace_id), "") or None

    def remember(self, workspace_id: Optional[str], path: Optional[str]) -> None:
        if not workspace_id or not path:
            return
        safe_set_setting(self._settings, self._key(workspace_id), path)
