# write_notes/infrastructure/filesystem.py

from __future__ import annotations

import os
import uuid
from datetime import datetime
from pathlib import Path

from write_notes.core.filenames import slugify
from write_notes.settings import RECOVERY_DIR


# ───────────────────────── public API ─────────────────────────

def atomic_write_text(
    path: Path,
    text: str,
    *,
    encoding: str = "utf-8",
) -> None:
    """
    Atomic-ish file write:
    - write to temp file in same directory
    - fsync
    - replace()

    Prevents partial writes on crash/power loss.
    """
    path = Path(path)
    parent = path.parent
    parent.mkdir(parents=True, exist_ok=True)

    tmp_path = parent / f".{path.name}.tmp-{uuid.uuid4().hex}"

    f = None
    try:
        f = open(tmp_path, "w", encoding=encoding, newline="")
        f.write(text)
        f.flush()
        os.fsync(f.fileno())
        f.close()
        f = None

        tmp_path.replace(path)

    finally:
        try:
            if f is not None:
                f.close()
        except Exception:
            pass

        try:
            if tmp_path.exists():
                tmp_path.unlink()
        except Exception:
            pass


def write_recovery_copy(note_path: str, text: str, *, recovery_dir: Path | None = None) -> Path:
    """
    Emergency copy of unsaved text when a normal save fails.

    Writes a timestamped file into ~/.write-notes/recovery/ (or recovery_dir).
    """
    target_dir = Path(recovery_dir) if recovery_dir is not None else RECOVERY_DIR

    stem = slugify(Path(note_path).stem) or "untitled"
    ts = datetime.now().strftime("%Y%m%d-%H%M%S")

    recovery_path = target_dir / f"{stem}.recovery.{ts}-{uuid.uuid4().hex[:6]}.md"
    atomic_write_text(recovery_path, text, encoding="utf-8")

    return recovery_path
