# write_notes/services/buffer.py

from __future__ import annotations

from write_notes.core.content import decode, encode
from write_notes.core.models import NoteContent


class ActiveBuffer:
    """
    Editable title/body of the open note.

    `revision` grows with every local edit, so a save can tell whether the
    text it wrote is still the current text.
    """

    def __init__(self, title: str = "", body: str = "") -> None:
        self.title = title
        self.body = body
        self.is_dirty = False
        self.revision = 0

    @classmethod
    def from_text(cls, text: str) -> "ActiveBuffer":
        parsed = decode(text)
        return cls(parsed.title, parsed.body)

    def set_title(self, title: str) -> None:
        self.title = title
        self._touch()

    def set_body(self, body: str) -> None:
        self.body = body
        self._touch()

    def encoded(self) -> str:
        return encode(self.title, self.body)

    def mark_saved(self, revision: int) -> bool:
        """Clear the dirty flag if nothing changed since `revision` was written."""
        if revision != self.revision:
            return False
        self.is_dirty = False
        return True

    def snapshot(self) -> NoteContent:
        return NoteContent(title=self.title, body=self.body, is_dirty=self.is_dirty)

    def _touch(self) -> None:
        self.revision += 1
        self.is_dirty = True
