# write_notes/services/signals.py

from __future__ import annotations

from PySide6.QtCore import QObject, Signal


class StoreSignals(QObject):
    workspaces_changed = Signal()
    notes_changed = Signal()
    selection_changed = Signal(object)   # selected path or None
    content_changed = Signal()
    save_failed = Signal(str, str)       # path, error
