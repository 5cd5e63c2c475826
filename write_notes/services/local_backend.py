# write_notes/services/local_backend.py

from __future__ import annotations

import asyncio

from write_notes.core.models import NoteEntry, Workspace, WorkspaceConfig
from write_notes.infrastructure.vault import NotesVault
from write_notes.services.backend import NotesBackend


class LocalNotesBackend(NotesBackend):
    """NotesVault behind the async surface; disk I/O runs off the event loop."""

    def __init__(self, vault: NotesVault):
        self.vault = vault

    async def list_workspaces(self) -> WorkspaceConfig:
        return await asyncio.to_thread(self.vault.list_workspaces)

    async def set_active_workspace(self, workspace_id: str) -> None:
        await asyncio.to_thread(self.vault.set_active_workspace, workspace_id)

    async def create_workspace(self, name: str) -> Workspace:
        return await asyncio.to_thread(self.vault.create_workspace, name)

    async def delete_workspace(self, workspace_id: str) -> None:
        await asyncio.to_thread(self.vault.delete_workspace, workspace_id)

    async def rename_workspace(self, workspace_id: str, new_name: str) -> Workspace:
        return await asyncio.to_thread(self.vault.rename_workspace, workspace_id, new_name)

    async def ensure_directory(self) -> None:
        await asyncio.to_thread(self.vault.ensure_directory)

    async def list_notes(self) -> list[NoteEntry]:
        return await asyncio.to_thread(self.vault.list_notes)

    async def read_note(self, path: str) -> str:
        return await asyncio.to_thread(self.vault.read_note, path)

    async def write_note(self, path: str, text: str) -> str:
        return await asyncio.to_thread(self.vault.write_note, path, text)

    async def create_note(self) -> str:
        return await asyncio.to_thread(self.vault.create_note)

    async def delete_note(self, path: str) -> None:
        await asyncio.to_thread(self.vault.delete_note, path)

    async def reorder_note(self, path: str, new_index: int) -> str:
        return await asyncio.to_thread(self.vault.reorder_note, path, new_index)
