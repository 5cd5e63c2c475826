# write_notes/services/notes.py

from __future__ import annotations

import logging
from typing import Optional

from write_notes.core.models import NoteEntry, note_name
from write_notes.services.backend import NotesBackend
from write_notes.settings import APP_NAME

log = logging.getLogger(APP_NAME)


class NoteDirectory:
    """Ordered note metadata of the active workspace."""

    def __init__(self, backend: NotesBackend):
        self._backend = backend
        self.entries: list[NoteEntry] = []
        self.loading = True

    # ───────────────────────── backend calls ─────────────────────────

    async def load(self) -> bool:
        try:
            await self._backend.ensure_directory()
            entries = await self._backend.list_notes()
        except Exception:
            log.exception("Failed to load notes")
            return False
        finally:
            self.loading = False

        self.entries = list(entries)
        log.debug("Notes loaded: count=%d", len(self.entries))
        return True

    async def delete(self, path: str) -> bool:
        try:
            await self._backend.delete_note(path)
        except Exception:
            log.exception("Failed to delete note: %s", path)
            return False
        self.remove(path)
        return True

    async def request_reorder(self, path: str, new_index: int) -> str:
        # final order comes from the next load(); siblings may have been renamed too
        return await self._backend.reorder_note(path, new_index)

    # ───────────────────────── in-memory ─────────────────────────

    def find(self, path: Optional[str]) -> Optional[NoteEntry]:
        if path is None:
            return None
        for entry in self.entries:
            if entry.path == path:
                return entry
        return None

    def insert_first(self, entry: NoteEntry) -> None:
        self.entries.insert(0, entry)

    def remove(self, path: str) -> None:
        self.entries = [e for e in self.entries if e.path != path]

    def rename_path(self, old_path: str, new_path: str) -> bool:
        entry = self.find(old_path)
        if entry is None:
            return False
        entry.path = new_path
        entry.name = note_name(new_path)
        return True

    def set_title(self, path: Optional[str], title: str) -> bool:
        entry = self.find(path)
        if entry is None:
            return False
        entry.title = title
        return True

    def clear(self) -> None:
        self.entries = []
