# write_notes/core/models.py

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional

from write_notes.settings import TEMP_PATH_PREFIX


def note_name(path: str) -> str:
    """Last path segment; works for both separators."""
    return path.replace("\\", "/").rsplit("/", 1)[-1]


def is_temp_path(path: Optional[str]) -> bool:
    return bool(path) and path.startswith(TEMP_PATH_PREFIX)


@dataclass(frozen=True)
class Workspace:
    id: str
    name: str
    shortcut: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Workspace":
        return cls(id=str(data["id"]), name=str(data["name"]), shortcut=data.get("shortcut"))

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "shortcut": self.shortcut}


@dataclass(frozen=True)
class WorkspaceConfig:
    workspaces: list[Workspace]
    active_workspace_id: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WorkspaceConfig":
        return cls(
            workspaces=[Workspace.from_dict(w) for w in data.get("workspaces") or []],
            active_workspace_id=str(data.get("active_workspace_id") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "workspaces": [w.to_dict() for w in self.workspaces],
            "active_workspace_id": self.active_workspace_id,
        }


@dataclass
class NoteEntry:
    """Sidebar metadata. `path` is the backend identity and may change after any write."""
    name: str
    path: str
    modified: int
    title: str


@dataclass(frozen=True)
class NoteContent:
    title: str
    body: str
    is_dirty: bool = False


@dataclass(frozen=True)
class StoreSnapshot:
    """Read-only view handed to the UI."""
    workspaces: tuple[Workspace, ...] = ()
    active_workspace_id: Optional[str] = None
    workspaces_loading: bool = True
    notes: tuple[NoteEntry, ...] = ()
    notes_loading: bool = True
    selected_path: Optional[str] = None
    content: Optional[NoteContent] = None

    @property
    def is_creating(self) -> bool:
        return is_temp_path(self.selected_path)

    @property
    def active_workspace(self) -> Optional[Workspace]:
        for ws in self.workspaces:
            if ws.id == self.active_workspace_id:
                return ws
        return None


def copy_entries(entries: list[NoteEntry]) -> tuple[NoteEntry, ...]:
    return tuple(replace(e) for e in entries)
