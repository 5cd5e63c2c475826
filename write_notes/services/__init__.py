from .backend import NotesBackend
from .local_backend import LocalNotesBackend
from .selection_memory import LastNoteMemory
from .signals import StoreSignals
from .store import NotesStore

__all__ = ['NotesBackend',
           'LocalNotesBackend',
           'LastNoteMemory',
           'StoreSignals',
           'NotesStore'
           ]
