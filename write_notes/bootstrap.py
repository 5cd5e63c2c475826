# write_notes/bootstrap.py

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from PySide6.QtCore import QSettings

from write_notes.infrastructure.vault import NotesVault
from write_notes.services.local_backend import LocalNotesBackend
from write_notes.services.selection_memory import LastNoteMemory
from write_notes.services.store import NotesStore
from write_notes.settings import (
    CONFIG_PATH,
    NOTES_ROOT,
    RECOVERY_DIR,
    SAVE_DEBOUNCE_MS,
    SETTINGS_PATH,
)


@dataclass
class Services:
    vault: NotesVault
    backend: LocalNotesBackend
    settings: QSettings
    store: NotesStore


def build_services(
    *,
    notes_root: Path = NOTES_ROOT,
    config_path: Path = CONFIG_PATH,
    settings_path: Path = SETTINGS_PATH,
    recovery_dir: Path = RECOVERY_DIR,
    debounce_ms: int = SAVE_DEBOUNCE_MS,
) -> Services:
    """Wire the file vault, QSettings and the store. Call from inside the event loop."""
    vault = NotesVault(notes_root=notes_root, config_path=config_path)
    backend = LocalNotesBackend(vault)
    settings = QSettings(str(settings_path), QSettings.Format.IniFormat)
    store = NotesStore(
        backend,
        debounce_ms=debounce_ms,
        memory=LastNoteMemory(settings),
        recovery_dir=recovery_dir,
    )
    return Services(vault=vault, backend=backend, settings=settings, store=store)
