# write_notes/infrastructure/vault.py

from __future__ import annotations

import json
import logging
import threading
import uuid
from contextlib import contextmanager
from pathlib import Path

from write_notes.core.content import parse_title
from write_notes.core.errors import (
    BackendError,
    InvalidWorkspaceError,
    NoteNotFoundError,
    WorkspaceExistsError,
    WorkspaceNotFoundError,
)
from write_notes.core.filenames import (
    NOTE_SUFFIX,
    note_file_name,
    parse_file_number,
    slugify,
    split_note_name,
    title_slug,
)
from write_notes.core.models import NoteEntry, Workspace, WorkspaceConfig
from write_notes.infrastructure.filesystem import atomic_write_text
from write_notes.settings import (
    APP_NAME,
    CONFIG_PATH,
    DEFAULT_WORKSPACE_ID,
    DEFAULT_WORKSPACE_NAME,
    NOTES_ROOT,
)

log = logging.getLogger(APP_NAME)

TITLE_PROBE_BYTES = 200
MAX_SHORTCUT = 9


@contextmanager
def _backend_errors(action: str):
    try:
        yield
    except BackendError:
        raise
    except FileNotFoundError as e:
        raise NoteNotFoundError(f"{action}: {e}") from e
    except OSError as e:
        raise BackendError(f"{action}: {e}") from e


class NotesVault:
    """
    File-backed notes storage.

    Layout:
      <notes_root>/<workspace_id>/<number>-<slug>.md
      <config_path>  (workspace list + active workspace)

    The number encodes sidebar order (highest first), the slug mirrors the
    note title. Both can change on write/reorder, so every mutating call
    returns the resulting path.
    """

    def __init__(self, notes_root: Path = NOTES_ROOT, config_path: Path = CONFIG_PATH):
        self.notes_root = Path(notes_root)
        self.config_path = Path(config_path)
        self._lock = threading.Lock()
        self._workspaces: list[Workspace] | None = None
        self._active_id: str = ""

    # ───────────────────────── workspaces ─────────────────────────

    def list_workspaces(self) -> WorkspaceConfig:
        with self._lock:
            self._ensure_config()
            return WorkspaceConfig(list(self._workspaces), self._active_id)

    def set_active_workspace(self, workspace_id: str) -> None:
        with self._lock:
            self._ensure_config()
            self._find_workspace(workspace_id)
            self._active_id = workspace_id
            self._save_config()

    def create_workspace(self, name: str) -> Workspace:
        with self._lock:
            self._ensure_config()
            workspace_id = slugify(name)
            if not workspace_id:
                raise InvalidWorkspaceError("Invalid workspace name")
            if any(w.id == workspace_id for w in self._workspaces):
                raise WorkspaceExistsError("Workspace already exists")

            with _backend_errors("create workspace"):
                self.workspace_dir(workspace_id).mkdir(parents=True, exist_ok=True)

            taken = {w.shortcut for w in self._workspaces}
            shortcut = next(
                (str(n) for n in range(1, MAX_SHORTCUT + 1) if str(n) not in taken),
                None,
            )
            workspace = Workspace(id=workspace_id, name=name, shortcut=shortcut)
            self._workspaces.append(workspace)
            self._save_config()
            log.info("Workspace created: id=%s shortcut=%s", workspace_id, shortcut)
            return workspace

    def delete_workspace(self, workspace_id: str) -> None:
        with self._lock:
            self._ensure_config()
            if len(self._workspaces) <= 1:
                raise InvalidWorkspaceError("Cannot delete the last workspace")
            workspace = self._find_workspace(workspace_id)
            self._workspaces.remove(workspace)
            if self._active_id == workspace_id:
                self._active_id = self._workspaces[0].id
            self._save_config()
            log.info("Workspace deleted: id=%s active=%s", workspace_id, self._active_id)

    def rename_workspace(self, workspace_id: str, new_name: str) -> Workspace:
        with self._lock:
            self._ensure_config()
            workspace = self._find_workspace(workspace_id)
            updated = Workspace(id=workspace.id, name=new_name, shortcut=workspace.shortcut)
            self._workspaces[self._workspaces.index(workspace)] = updated
            self._save_config()
            return updated

    def workspace_dir(self, workspace_id: str) -> Path:
        return self.notes_root / workspace_id

    # ───────────────────────── notes ─────────────────────────

    def ensure_directory(self) -> str:
        with self._lock:
            notes_dir = self._active_dir()
            with _backend_errors("ensure notes dir"):
                notes_dir.mkdir(parents=True, exist_ok=True)
            return str(notes_dir)

    def list_notes(self) -> list[NoteEntry]:
        with self._lock:
            notes_dir = self._active_dir()
            if not notes_dir.exists():
                return []

            entries: list[NoteEntry] = []
            with _backend_errors("list notes"):
                for p in notes_dir.glob(f"*{NOTE_SUFFIX}"):
                    if p.name.startswith(".") or not p.is_file():
                        continue
                    try:
                        modified = int(p.stat().st_mtime)
                    except OSError:
                        continue
                    entries.append(NoteEntry(
                        name=p.name,
                        path=str(p),
                        modified=modified,
                        title=self._read_title(p),
                    ))

            def order(entry: NoteEntry):
                number = parse_file_number(entry.name)
                if number is not None:
                    return (0, -number, 0)
                return (1, 0, -entry.modified)

            entries.sort(key=order)
            return entries

    def read_note(self, path: str) -> str:
        with _backend_errors("read note"):
            return Path(path).read_text(encoding="utf-8")

    def write_note(self, path: str, text: str) -> str:
        """
        Save text, then rename the file after its title.
        Returns the resulting path (unchanged for unnumbered files or name clashes).
        """
        with self._lock:
            old_path = Path(path)
            with _backend_errors("write note"):
                atomic_write_text(old_path, text, encoding="utf-8")

                number, _ = split_note_name(old_path.name)
                if number is None:
                    return path

                new_name = note_file_name(number, title_slug(parse_title(text)))
                if new_name == old_path.name:
                    return path

                new_path = old_path.with_name(new_name)
                if new_path.exists():
                    log.debug("Rename skipped, target exists: %s", new_path)
                    return path

                old_path.replace(new_path)
                return str(new_path)

    def create_note(self) -> str:
        with self._lock:
            notes_dir = self._active_dir()
            with _backend_errors("create note"):
                notes_dir.mkdir(parents=True, exist_ok=True)
                path = notes_dir / note_file_name(self._next_number(notes_dir), "untitled")
                atomic_write_text(path, "\n", encoding="utf-8")
            return str(path)

    def delete_note(self, path: str) -> None:
        with self._lock:
            with _backend_errors("delete note"):
                Path(path).unlink()

    def reorder_note(self, path: str, new_index: int) -> str:
        """
        Move a note to `new_index` in sidebar order and renumber every numbered note.
        Returns the moved note's new path.
        """
        with self._lock:
            notes_dir = self._active_dir()
            source = Path(path)

            with _backend_errors("reorder note"):
                entries: list[tuple[Path, int, str]] = []
                for p in notes_dir.glob(f"*{NOTE_SUFFIX}"):
                    if p.name.startswith("."):
                        continue
                    number, slug = split_note_name(p.name)
                    if number is not None:
                        entries.append((p, number, slug))
                entries.sort(key=lambda e: e[1], reverse=True)

                source_idx = next((i for i, e in enumerate(entries) if e[0] == source), None)
                if source_idx is None:
                    raise NoteNotFoundError(f"Note not found: {path}")
                if source_idx == new_index or len(entries) <= 1:
                    return path

                item = entries.pop(source_idx)
                entries.insert(max(0, min(new_index, len(entries))), item)

                total = len(entries)
                moves = [
                    (old, notes_dir / note_file_name(total - i, slug))
                    for i, (old, _, slug) in enumerate(entries)
                ]
                moves = [(old, new) for old, new in moves if old != new]

                # two phases: swapped names must not overwrite each other
                token = uuid.uuid4().hex[:8]
                staged = []
                for old, new in moves:
                    tmp = old.with_name(f".reorder-{token}-{old.name}")
                    old.replace(tmp)
                    staged.append((tmp, new))
                for tmp, new in staged:
                    tmp.replace(new)

            result = path
            for old, new in moves:
                if old == source:
                    result = str(new)
            log.info("Note reordered: %s -> index=%d (%d renamed)", source.name, new_index, len(moves))
            return result

    # ───────────────────────── internal ─────────────────────────

    def _active_dir(self) -> Path:
        self._ensure_config()
        return self.workspace_dir(self._active_id)

    def _find_workspace(self, workspace_id: str) -> Workspace:
        for w in self._workspaces:
            if w.id == workspace_id:
                return w
        raise WorkspaceNotFoundError("Workspace not found")

    @staticmethod
    def _next_number(notes_dir: Path) -> int:
        numbers = [parse_file_number(p.stem) for p in notes_dir.iterdir()]
        return max((n for n in numbers if n is not None), default=0) + 1

    @staticmethod
    def _read_title(path: Path) -> str:
        try:
            with path.open("rb") as f:
                head = f.read(TITLE_PROBE_BYTES)
        except OSError:
            return parse_title("")
        return parse_title(head.decode("utf-8", errors="ignore"))

    def _ensure_config(self) -> None:
        if self._workspaces is not None:
            return

        if self.config_path.exists():
            try:
                data = json.loads(self.config_path.read_text(encoding="utf-8"))
                config = WorkspaceConfig.from_dict(data)
                if config.workspaces:
                    self._workspaces = list(config.workspaces)
                    self._active_id = config.active_workspace_id or config.workspaces[0].id
                    return
            except (OSError, ValueError, KeyError, TypeError):
                log.exception("Workspace config unreadable, recreating: %s", self.config_path)

        self._init_default_workspace()

    def _init_default_workspace(self) -> None:
        """First run: one default workspace; loose notes in the root move into it."""
        personal = self.workspace_dir(DEFAULT_WORKSPACE_ID)
        with _backend_errors("init workspaces"):
            personal.mkdir(parents=True, exist_ok=True)
            for p in self.notes_root.glob(f"*{NOTE_SUFFIX}"):
                if p.is_file():
                    p.replace(personal / p.name)

        self._workspaces = [
            Workspace(id=DEFAULT_WORKSPACE_ID, name=DEFAULT_WORKSPACE_NAME, shortcut="1"),
        ]
        self._active_id = DEFAULT_WORKSPACE_ID
        self._save_config()
        log.info("Default workspace initialized at %s", personal)

    def _save_config(self) -> None:
        config = WorkspaceConfig(list(self._workspaces), self._active_id)
        with _backend_errors("save workspace config"):
            atomic_write_text(
                self.config_path,
                json.dumps(config.to_dict(), indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
