from .filesystem import atomic_write_text, write_recovery_copy
from .vault import NotesVault

__all__ = ["atomic_write_text", "write_recovery_copy", "NotesVault"]
