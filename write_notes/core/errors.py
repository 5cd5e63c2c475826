# write_notes/core/errors.py

from __future__ import annotations


class BackendError(Exception):
    """Raised when the persistence surface rejects or fails a request."""


class NoteNotFoundError(BackendError):
    pass


class WorkspaceNotFoundError(BackendError):
    pass


class WorkspaceExistsError(BackendError):
    pass


class InvalidWorkspaceError(BackendError):
    """Workspace name produces an empty id, or the request would leave no workspace."""
