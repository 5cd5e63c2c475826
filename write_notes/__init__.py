from .core.content import decode, encode
from .core.models import NoteContent, NoteEntry, StoreSnapshot, Workspace, WorkspaceConfig
from .services.backend import NotesBackend
from .services.store import NotesStore

__all__ = ["decode",
           "encode",
           "NoteContent",
           "NoteEntry",
           "StoreSnapshot",
           "Workspace",
           "WorkspaceConfig",
           "NotesBackend",
           "NotesStore",
           ]
