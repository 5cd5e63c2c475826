# write_notes/services/store.py

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from pathlib import Path
from typing import Optional

from write_notes.core.models import (
    NoteContent,
    NoteEntry,
    StoreSnapshot,
    Workspace,
    copy_entries,
    is_temp_path,
)
from write_notes.infrastructure.filesystem import write_recovery_copy
from write_notes.services.backend import NotesBackend
from write_notes.services.buffer import ActiveBuffer
from write_notes.services.debounce import Debouncer
from write_notes.services.notes import NoteDirectory
from write_notes.services.selection_memory import LastNoteMemory
from write_notes.services.signals import StoreSignals
from write_notes.services.workspaces import WorkspaceDirectory
from write_notes.settings import APP_NAME, SAVE_DEBOUNCE_MS, TEMP_PATH_PREFIX, UNTITLED_TITLE

log = logging.getLogger(APP_NAME)


class NotesStore:
    """
    In-memory view of workspaces, notes and the open note, kept in sync with
    the backend.

    Responsibilities:
    - apply every UI action to memory immediately
    - debounce saves of the open note (one timer per store)
    - flush before anything that changes the selection
    - follow path changes returned by write/create/reorder

    All state is owned here; the UI reads `snapshot()` and listens to `signals`.
    Must be used from a single running event loop.
    """

    def __init__(
        self,
        backend: NotesBackend,
        *,
        debounce_ms: int = SAVE_DEBOUNCE_MS,
        memory: LastNoteMemory | None = None,
        signals: StoreSignals | None = None,
        recovery_dir: Path | None = None,
    ):
        self._backend = backend
        self._workspaces = WorkspaceDirectory(backend)
        self._notes = NoteDirectory(backend)
        self._memory = memory
        self.signals = signals or StoreSignals()
        self._recovery_dir = recovery_dir

        self._selected_path: Optional[str] = None
        self._buffer: Optional[ActiveBuffer] = None

        self._save_timer = Debouncer(debounce_ms)
        self._flush_lock = asyncio.Lock()
        self._background: set[asyncio.Task] = set()

    # ───────────────────────── read surface ─────────────────────────

    @property
    def selected_path(self) -> Optional[str]:
        return self._selected_path

    @property
    def content(self) -> Optional[NoteContent]:
        return self._buffer.snapshot() if self._buffer is not None else None

    @property
    def notes(self) -> tuple[NoteEntry, ...]:
        return copy_entries(self._notes.entries)

    @property
    def workspaces(self) -> tuple[Workspace, ...]:
        return tuple(self._workspaces.workspaces)

    @property
    def active_workspace_id(self) -> Optional[str]:
        return self._workspaces.active_workspace_id

    @property
    def active_workspace(self) -> Optional[Workspace]:
        return self._workspaces.active_workspace

    @property
    def is_creating(self) -> bool:
        """Selected note has no backend path yet; nothing may be written for it."""
        return is_temp_path(self._selected_path)

    @property
    def save_pending(self) -> bool:
        return self._save_timer.pending

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            workspaces=self.workspaces,
            active_workspace_id=self._workspaces.active_workspace_id,
            workspaces_loading=self._workspaces.loading,
            notes=self.notes,
            notes_loading=self._notes.loading,
            selected_path=self._selected_path,
            content=self.content,
        )

    # ───────────────────────── workspaces ─────────────────────────

    async def load_workspaces(self) -> bool:
        ok = await self._workspaces.load()
        self.signals.workspaces_changed.emit()
        return ok

    async def create_workspace(self, name: str) -> Workspace:
        try:
            workspace = await self._workspaces.create(name)
        except Exception:
            log.exception("Failed to create workspace: %r", name)
            raise
        log.info("Workspace created: %s", workspace.id)
        self.signals.workspaces_changed.emit()
        return workspace

    async def rename_workspace(self, workspace_id: str, new_name: str) -> Workspace:
        try:
            workspace = await self._workspaces.rename(workspace_id, new_name)
        except Exception:
            log.exception("Failed to rename workspace: %s", workspace_id)
            raise
        self.signals.workspaces_changed.emit()
        return workspace

    async def delete_workspace(self, workspace_id: str) -> None:
        """
        Remove a workspace. If it was active, the first remaining workspace
        becomes active locally; the caller is expected to follow up with
        open_workspace(active_workspace_id) so the backend and note list agree.
        """
        try:
            await self._workspaces.delete(workspace_id)
        except Exception:
            log.exception("Failed to delete workspace: %s", workspace_id)
            raise
        log.info("Workspace deleted: %s active=%s", workspace_id, self.active_workspace_id)
        self.signals.workspaces_changed.emit()

    async def switch_workspace(self, workspace_id: str) -> None:
        """Save the open note, activate the workspace, drop the selection. Notes are reloaded by the caller."""
        await self._flush_outgoing()
        unsaved = self._dirty_revision()
        try:
            await self._backend.set_active_workspace(workspace_id)
        except Exception:
            log.exception("Failed to switch workspace: %s", workspace_id)
            raise

        await self._flush_late_edits(unsaved)
        self._workspaces.set_active(workspace_id)
        self._notes.clear()
        self._notes.loading = True
        self._clear_selection()
        log.info("Workspace switched: %s", workspace_id)
        self.signals.workspaces_changed.emit()
        self.signals.notes_changed.emit()

    async def open_workspace(self, workspace_id: str) -> None:
        await self.switch_workspace(workspace_id)
        await self.load_notes()
        await self.restore_selection()

    # ───────────────────────── notes ─────────────────────────

    async def load_notes(self) -> bool:
        ok = await self._notes.load()
        self.signals.notes_changed.emit()
        return ok

    async def restore_selection(self) -> Optional[str]:
        """Reopen the remembered note of the active workspace, else the first one."""
        entries = self._notes.entries
        if not entries:
            return None

        remembered = self._memory.get(self.active_workspace_id) if self._memory else None
        target = remembered if self._notes.find(remembered) is not None else entries[0].path
        if await self.select_note(target):
            return target
        return None

    async def select_note(self, path: str) -> bool:
        await self._flush_outgoing()
        unsaved = self._dirty_revision()
        try:
            text = await self._backend.read_note(path)
        except Exception:
            log.exception("Failed to read note: %s", path)
            return False

        await self._flush_late_edits(unsaved)
        self._save_timer.cancel()
        self._buffer = ActiveBuffer.from_text(text)
        self._set_selection(path)
        self.signals.content_changed.emit()
        return True

    def deselect_note(self) -> None:
        """Close the open note. Does not save: call flush() first if the edits must survive."""
        self._clear_selection()

    async def create_note(self) -> Optional[str]:
        await self._flush_outgoing()

        temp_path = f"{TEMP_PATH_PREFIX}{uuid.uuid4().hex}"
        buffer = ActiveBuffer()
        self._save_timer.cancel()
        self._notes.insert_first(NoteEntry(
            name=temp_path,
            path=temp_path,
            modified=int(time.time()),
            title=UNTITLED_TITLE,
        ))
        self._buffer = buffer
        self._set_selection(temp_path, remember=False)
        self.signals.notes_changed.emit()
        self.signals.content_changed.emit()

        try:
            real_path = await self._backend.create_note()
        except Exception:
            log.exception("Failed to create note")
            self._notes.remove(temp_path)
            if self._selected_path == temp_path:
                self._clear_selection()
            self.signals.notes_changed.emit()
            return None

        self._notes.rename_path(temp_path, real_path)
        if self._selected_path == temp_path:
            self._set_selection(real_path)
        self.signals.notes_changed.emit()
        log.info("Note created: %s", real_path)

        # edits typed while the note had no real path
        if buffer.is_dirty:
            async with self._flush_lock:
                await self._write_buffer(buffer, real_path)
        return real_path

    async def delete_note(self, path: str) -> bool:
        if is_temp_path(path):
            log.warning("Delete ignored, note is still being created: %s", path)
            return False
        # no save may reach the file while it is being removed
        async with self._flush_lock:
            if self._selected_path == path:
                self._save_timer.cancel()
            if not await self._notes.delete(path):
                self._reschedule_if_dirty()
                return False
            if self._selected_path == path:
                self._clear_selection()

        log.info("Note deleted: %s", path)
        self.signals.notes_changed.emit()
        return True

    async def reorder_note(self, path: str, new_index: int) -> Optional[str]:
        was_selected = path == self._selected_path
        await self.flush()

        # saves wait until the selection follows the renumbered path
        async with self._flush_lock:
            if was_selected and self._selected_path is not None:
                # the save may have renamed it
                path = self._selected_path
            self._save_timer.cancel()
            try:
                new_path = await self._notes.request_reorder(path, new_index)
            except Exception:
                log.exception("Failed to reorder note: %s -> %d", path, new_index)
                self._reschedule_if_dirty()
                return None

            if new_path != path:
                self._notes.rename_path(path, new_path)
                if self._selected_path == path:
                    self._set_selection(new_path)

        self._reschedule_if_dirty()
        await self.load_notes()
        return new_path

    # ───────────────────────── editing ─────────────────────────

    def set_title(self, title: str) -> None:
        if self._buffer is None:
            return
        self._buffer.set_title(title)
        self._notes.set_title(self._selected_path, title or UNTITLED_TITLE)
        self.signals.content_changed.emit()
        self.signals.notes_changed.emit()
        self._schedule_save()

    def set_body(self, body: str) -> None:
        if self._buffer is None:
            return
        self._buffer.set_body(body)
        self.signals.content_changed.emit()
        self._schedule_save()

    async def flush(self) -> None:
        """
        Save the open note now if it has unsaved edits.

        Calls are serialized: a second caller waits for the write in flight and
        then saves whatever is still unsaved.
        """
        async with self._flush_lock:
            await self._write_buffer(self._buffer, self._selected_path)

    async def shutdown(self) -> None:
        """Stop the timer, wait for timer-started saves, save what is left."""
        self._save_timer.cancel()
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
        await self.flush()

    # ───────────────────────── internal ─────────────────────────

    def _schedule_save(self) -> None:
        if self.is_creating:
            # written once the backend confirms the note (create_note)
            return
        self._save_timer.schedule(self._on_save_timer)

    def _reschedule_if_dirty(self) -> None:
        if self._buffer is not None and self._buffer.is_dirty:
            self._schedule_save()

    async def _flush_outgoing(self) -> None:
        """
        Save the open note before it is replaced or closed.

        Edits can land while a save is awaited, so repeat until the buffer is
        clean. Stops after a failed save; the recovery copy holds the text.
        """
        while self._buffer is not None and self._buffer.is_dirty and not self.is_creating:
            revision = self._buffer.revision
            await self.flush()
            buffer = self._buffer
            if buffer is not None and buffer.is_dirty and buffer.revision == revision:
                break

    def _dirty_revision(self) -> Optional[int]:
        if self._buffer is None or not self._buffer.is_dirty:
            return None
        return self._buffer.revision

    async def _flush_late_edits(self, unsaved: Optional[int]) -> None:
        """Save edits typed while a selection change awaited the backend."""
        revision = self._dirty_revision()
        if revision is not None and revision != unsaved:
            await self._flush_outgoing()

    def _on_save_timer(self) -> None:
        task = asyncio.ensure_future(self.flush())
        self._background.add(task)
        task.add_done_callback(self._on_background_done)

    def _on_background_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error("Autosave crashed", exc_info=(type(exc), exc, exc.__traceback__))

    async def _write_buffer(self, buffer: Optional[ActiveBuffer], path: Optional[str]) -> None:
        """One write for `buffer` at `path`; caller holds the flush lock."""
        if buffer is None or path is None or not buffer.is_dirty or is_temp_path(path):
            return

        revision = buffer.revision
        text = buffer.encoded()
        log.debug("Saving note: %s rev=%d", path, revision)
        try:
            new_path = await self._backend.write_note(path, text)
        except Exception as e:
            log.exception("Failed to save note: %s", path)
            await self._save_recovery_copy(path, text)
            self.signals.save_failed.emit(path, str(e))
            return

        if buffer.mark_saved(revision) and buffer is self._buffer:
            self.signals.content_changed.emit()
        if new_path and new_path != path:
            self._follow_path(path, new_path)

    def _follow_path(self, old_path: str, new_path: str) -> None:
        log.debug("Note path changed: %s -> %s", old_path, new_path)
        self._notes.rename_path(old_path, new_path)
        if self._selected_path == old_path:
            self._set_selection(new_path)
        self.signals.notes_changed.emit()

    async def _save_recovery_copy(self, path: str, text: str) -> None:
        try:
            rec = await asyncio.to_thread(
                write_recovery_copy, path, text, recovery_dir=self._recovery_dir
            )
            log.warning("Recovery copy written: %s", rec)
        except Exception:
            log.exception("Failed to write recovery copy for %s", path)

    def _set_selection(self, path: Optional[str], *, remember: bool = True) -> None:
        changed = path != self._selected_path
        self._selected_path = path
        if remember and self._memory is not None and path and not is_temp_path(path):
            self._memory.remember(self.active_workspace_id, path)
        if changed:
            self.signals.selection_changed.emit(path)

    def _clear_selection(self) -> None:
        self._save_timer.cancel()
        self._buffer = None
        self._set_selection(None)
        self.signals.content_changed.emit()
