# write_notes/services/backend.py

from __future__ import annotations

from write_notes.core.models import NoteEntry, Workspace, WorkspaceConfig


class NotesBackend:
    """
    Persistence surface consumed by the store.

    Every method is a coroutine and may raise. Paths are opaque: write, create
    and reorder may return a different path for the same note.
    """

    async def list_workspaces(self) -> WorkspaceConfig:
        raise NotImplementedError

    async def set_active_workspace(self, workspace_id: str) -> None:
        raise NotImplementedError

    async def create_workspace(self, name: str) -> Workspace:
        raise NotImplementedError

    async def delete_workspace(self, workspace_id: str) -> None:
        raise NotImplementedError

    async def rename_workspace(self, workspace_id: str, new_name: str) -> Workspace:
        raise NotImplementedError

    async def ensure_directory(self) -> None:
        raise NotImplementedError

    async def list_notes(self) -> list[NoteEntry]:
        raise NotImplementedError

    async def read_note(self, path: str) -> str:
        raise NotImplementedError

    async def write_note(self, path: str, text: str) -> str:
        raise NotImplementedError

    async def create_note(self) -> str:
        raise NotImplementedError

    async def delete_note(self, path: str) -> None:
        raise NotImplementedError

    async def reorder_note(self, path: str, new_index: int) -> str:
        raise NotImplementedError
