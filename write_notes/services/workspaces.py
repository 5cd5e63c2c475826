# write_notes/services/workspaces.py

from __future__ import annotations

import logging
from typing import Optional

from write_notes.core.models import Workspace
from write_notes.services.backend import NotesBackend
from write_notes.settings import APP_NAME

log = logging.getLogger(APP_NAME)


class WorkspaceDirectory:
    """Workspace list + active workspace id, mirrored from the backend."""

    def __init__(self, backend: NotesBackend):
        self._backend = backend
        self.workspaces: list[Workspace] = []
        self.active_workspace_id: Optional[str] = None
        self.loading = True

    @property
    def active_workspace(self) -> Optional[Workspace]:
        return self.get(self.active_workspace_id)

    def get(self, workspace_id: Optional[str]) -> Optional[Workspace]:
        for w in self.workspaces:
            if w.id == workspace_id:
                return w
        return None

    # ───────────────────────── public API ─────────────────────────

    async def load(self) -> bool:
        try:
            config = await self._backend.list_workspaces()
        except Exception:
            log.exception("Failed to load workspaces")
            self.loading = False
            return False

        self.workspaces = list(config.workspaces)
        self.active_workspace_id = config.active_workspace_id or None
        self.loading = False
        log.debug("Workspaces loaded: count=%d active=%s", len(self.workspaces), self.active_workspace_id)
        return True

    async def create(self, name: str) -> Workspace:
        # no optimistic entry: the backend assigns the id
        workspace = await self._backend.create_workspace(name)
        self.workspaces.append(workspace)
        return workspace

    async def rename(self, workspace_id: str, new_name: str) -> Workspace:
        updated = await self._backend.rename_workspace(workspace_id, new_name)
        self.workspaces = [updated if w.id == workspace_id else w for w in self.workspaces]
        return updated

    async def delete(self, workspace_id: str) -> None:
        await self._backend.delete_workspace(workspace_id)
        self.workspaces = [w for w in self.workspaces if w.id != workspace_id]
        if self.active_workspace_id == workspace_id:
            self.active_workspace_id = self.workspaces[0].id if self.workspaces else None

    def set_active(self, workspace_id: Optional[str]) -> None:
        self.active_workspace_id = workspace_id
