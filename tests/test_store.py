import asyncio
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from PySide6.QtCore import QSettings

from fakes import FakeBackend, sample_files, sample_notes
from write_notes.core.errors import BackendError
from write_notes.core.models import Workspace
from write_notes.services.selection_memory import LastNoteMemory
from write_notes.services.store import NotesStore

HELLO = "/notes/001-hello.md"
WORLD = "/notes/002-world.md"


def make_backend() -> FakeBackend:
    return FakeBackend(sample_notes(), sample_files())


async def settle(rounds: int = 10) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


async def loaded_store(backend: FakeBackend, **kwargs) -> NotesStore:
    kwargs.setdefault("debounce_ms", 20)
    store = NotesStore(backend, **kwargs)
    await store.load_workspaces()
    await store.load_notes()
    return store


def test_load_notes_replaces_list():
    async def scenario():
        backend = make_backend()
        store = NotesStore(backend)
        assert store.snapshot().notes_loading

        await store.load_notes()

        snap = store.snapshot()
        assert not snap.notes_loading
        assert [n.path for n in snap.notes] == [HELLO, WORLD]
        assert backend.call_names() == ["ensure_directory", "list_notes"]

    asyncio.run(scenario())


def test_load_notes_failure_clears_loading_flag():
    async def scenario():
        backend = make_backend()
        backend.failures["list_notes"] = BackendError("disk gone")
        store = NotesStore(backend)

        assert not await store.load_notes()

        snap = store.snapshot()
        assert not snap.notes_loading
        assert snap.notes == ()

    asyncio.run(scenario())


def test_select_note_decodes_content():
    async def scenario():
        store = await loaded_store(make_backend())

        assert await store.select_note(HELLO)

        assert store.selected_path == HELLO
        assert store.content.title == "Hello"
        assert store.content.body == "Hello body"
        assert not store.content.is_dirty

    asyncio.run(scenario())


def test_select_note_read_failure_keeps_selection():
    async def scenario():
        backend = make_backend()
        store = await loaded_store(backend)
        await store.select_note(HELLO)

        backend.failures["read_note"] = BackendError("unreadable")
        assert not await store.select_note(WORLD)

        assert store.selected_path == HELLO
        assert store.content.title == "Hello"

    asyncio.run(scenario())


def test_select_note_saves_previous_note_before_reading():
    async def scenario():
        backend = make_backend()
        store = await loaded_store(backend, debounce_ms=10_000)
        await store.select_note(HELLO)
        store.set_body("changed")

        await store.select_note(WORLD)

        names = backend.call_names()
        write_idx = names.index("write_note")
        read_idx = max(i for i, c in enumerate(backend.calls) if c == ("read_note", WORLD))
        assert write_idx < read_idx
        assert backend.files[HELLO] == "# Hello\nchanged"
        assert store.content.title == "World"

    asyncio.run(scenario())


def test_edits_typed_while_next_note_loads_are_saved():
    async def scenario():
        backend = make_backend()
        store = await loaded_store(backend, debounce_ms=10_000)
        await store.select_note(HELLO)
        backend.gates["read_note"] = asyncio.Event()

        task = asyncio.create_task(store.select_note(WORLD))
        await settle()
        store.set_body("typed while switching")
        backend.gates["read_note"].set()
        assert await task

        assert backend.files[HELLO] == "# Hello\ntyped while switching"
        assert store.selected_path == WORLD
        assert store.content.body == "World body"
        assert not store.content.is_dirty
        await store.shutdown()

    asyncio.run(scenario())


def test_failed_save_is_not_retried_when_switching_notes(tmp_path):
    async def scenario():
        backend = make_backend()
        backend.failures["write_note"] = BackendError("disk full")
        store = await loaded_store(backend, debounce_ms=10_000, recovery_dir=tmp_path)
        await store.select_note(HELLO)
        store.set_body("lost?")

        assert await store.select_note(WORLD)

        assert len(backend.calls_named("write_note")) == 1
        assert len(list(tmp_path.glob("*.md"))) == 1
        assert store.selected_path == WORLD

    asyncio.run(scenario())


def test_deselect_note_clears_buffer_without_saving():
    async def scenario():
        backend = make_backend()
        store = await loaded_store(backend)
        await store.select_note(HELLO)
        store.set_body("unsaved")
        assert store.save_pending

        store.deselect_note()
        await asyncio.sleep(0.06)

        assert store.selected_path is None
        assert store.content is None
        assert not store.save_pending
        assert backend.calls_named("write_note") == []

    asyncio.run(scenario())


def test_delete_selected_note_clears_selection():
    async def scenario():
        store = await loaded_store(make_backend())
        await store.select_note(HELLO)

        assert await store.delete_note(HELLO)

        snap = store.snapshot()
        assert snap.selected_path is None
        assert snap.content is None
        assert [n.path for n in snap.notes] == [WORLD]

    asyncio.run(scenario())


def test_delete_other_note_keeps_selection():
    async def scenario():
        store = await loaded_store(make_backend())
        await store.select_note(HELLO)

        assert await store.delete_note(WORLD)

        assert store.selected_path == HELLO
        assert len(store.notes) == 1

    asyncio.run(scenario())


def test_delete_failure_leaves_list_unchanged():
    async def scenario():
        backend = make_backend()
        backend.failures["delete_note"] = BackendError("locked")
        store = await loaded_store(backend)
        await store.select_note(HELLO)

        assert not await store.delete_note(HELLO)

        assert store.selected_path == HELLO
        assert len(store.notes) == 2

    asyncio.run(scenario())


def test_autosave_does_not_write_a_note_being_deleted():
    async def scenario():
        backend = make_backend()
        backend.gates["delete_note"] = asyncio.Event()
        store = await loaded_store(backend)
        await store.select_note(HELLO)

        task = asyncio.create_task(store.delete_note(HELLO))
        await settle()
        store.set_body("typed during delete")
        await asyncio.sleep(0.06)
        backend.gates["delete_note"].set()
        assert await task
        await store.shutdown()

        assert backend.calls_named("write_note") == []
        assert HELLO not in backend.files
        assert store.selected_path is None

    asyncio.run(scenario())


def test_create_note_takes_backend_path():
    async def scenario():
        store = await loaded_store(make_backend())

        path = await store.create_note()

        assert path == "/notes/003-new.md"
        assert store.notes[0].path == path
        assert store.notes[0].name == "003-new.md"
        assert store.selected_path == path
        assert not store.is_creating
        assert store.content.title == ""
        assert store.content.body == ""

    asyncio.run(scenario())


def test_create_note_shows_temporary_entry_until_confirmed():
    async def scenario():
        backend = make_backend()
        backend.gates["create_note"] = asyncio.Event()
        store = await loaded_store(backend)

        task = asyncio.create_task(store.create_note())
        await settle()

        assert store.is_creating
        assert store.selected_path.startswith("temp-")
        assert store.notes[0].path == store.selected_path
        assert store.notes[0].title == "New Page"
        assert len(store.notes) == 3

        backend.gates["create_note"].set()
        path = await task

        assert not store.is_creating
        assert store.selected_path == path
        assert [n.path for n in store.notes] == [path, HELLO, WORLD]

    asyncio.run(scenario())


def test_create_note_failure_rolls_back():
    async def scenario():
        backend = make_backend()
        backend.failures["create_note"] = BackendError("read-only")
        store = await loaded_store(backend)
        await store.select_note(HELLO)

        assert await store.create_note() is None

        snap = store.snapshot()
        assert [n.path for n in snap.notes] == [HELLO, WORLD]
        assert snap.selected_path is None
        assert snap.content is None

    asyncio.run(scenario())


def test_edits_while_creating_are_written_once_after_confirmation():
    async def scenario():
        backend = make_backend()
        backend.gates["create_note"] = asyncio.Event()
        store = await loaded_store(backend)

        task = asyncio.create_task(store.create_note())
        await settle()

        store.set_title("Draft")
        store.set_body("a")
        store.set_body("ab")
        assert not store.save_pending
        await store.flush()
        assert backend.calls_named("write_note") == []
        assert store.content.is_dirty
        assert store.notes[0].title == "Draft"

        backend.gates["create_note"].set()
        path = await task

        writes = backend.calls_named("write_note")
        assert writes == [("write_note", path, "# Draft\nab")]
        assert not store.content.is_dirty

    asyncio.run(scenario())


def test_edits_are_kept_when_user_leaves_note_before_creation_finishes():
    async def scenario():
        backend = make_backend()
        backend.gates["create_note"] = asyncio.Event()
        store = await loaded_store(backend)

        task = asyncio.create_task(store.create_note())
        await settle()
        store.set_title("Quick thought")
        await store.select_note(HELLO)

        backend.gates["create_note"].set()
        path = await task

        assert store.selected_path == HELLO
        assert backend.files[path] == "# Quick thought\n"

    asyncio.run(scenario())


def test_rapid_edits_produce_one_write_with_final_body():
    async def scenario():
        backend = make_backend()
        store = await loaded_store(backend)
        await store.select_note(HELLO)

        store.set_body("a")
        store.set_body("ab")
        store.set_body("abc")
        assert backend.calls_named("write_note") == []

        await asyncio.sleep(0.1)

        assert backend.calls_named("write_note") == [("write_note", HELLO, "# Hello\nabc")]
        assert not store.content.is_dirty
        await store.shutdown()

    asyncio.run(scenario())


def test_flush_without_changes_does_nothing():
    async def scenario():
        backend = make_backend()
        store = await loaded_store(backend)

        await store.flush()
        await store.select_note(HELLO)
        await store.flush()

        assert backend.calls_named("write_note") == []

    asyncio.run(scenario())


def test_flush_follows_path_returned_by_backend():
    async def scenario():
        backend = make_backend()
        backend.write_renames[HELLO] = "/notes/001-hi.md"
        store = await loaded_store(backend, debounce_ms=10_000)
        await store.select_note(HELLO)

        store.set_title("Hi")
        await store.flush()

        assert store.selected_path == "/notes/001-hi.md"
        assert store.notes[0].path == "/notes/001-hi.md"
        assert store.notes[0].name == "001-hi.md"
        assert store.notes[0].title == "Hi"
        assert not store.content.is_dirty

        store.set_body("more")
        await store.flush()
        assert backend.calls_named("write_note")[-1] == ("write_note", "/notes/001-hi.md", "# Hi\nmore")
        await store.shutdown()

    asyncio.run(scenario())


def test_write_failure_keeps_note_dirty(tmp_path):
    async def scenario():
        backend = make_backend()
        backend.failures["write_note"] = BackendError("disk full")
        store = await loaded_store(backend, debounce_ms=10_000, recovery_dir=tmp_path)
        failures = []
        store.signals.save_failed.connect(lambda path, err: failures.append((path, err)))
        await store.select_note(HELLO)

        store.set_body("precious")
        await store.flush()

        assert store.content.is_dirty
        assert failures == [(HELLO, "disk full")]
        copies = list(tmp_path.glob("*.md"))
        assert len(copies) == 1
        assert copies[0].read_text(encoding="utf-8") == "# Hello\nprecious"

        del backend.failures["write_note"]
        await store.flush()
        assert not store.content.is_dirty
        assert backend.files[HELLO] == "# Hello\nprecious"
        await store.shutdown()

    asyncio.run(scenario())


def test_edits_during_write_in_flight_are_saved_by_next_flush():
    async def scenario():
        backend = make_backend()
        gate = asyncio.Event()
        backend.gates["write_note"] = gate
        store = await loaded_store(backend, debounce_ms=10_000)
        await store.select_note(HELLO)

        store.set_body("one")
        first = asyncio.create_task(store.flush())
        await settle()
        store.set_body("two")
        second = asyncio.create_task(store.flush())
        await settle()

        assert len(backend.calls_named("write_note")) == 1

        gate.set()
        await asyncio.gather(first, second)

        bodies = [c[2] for c in backend.calls_named("write_note")]
        assert bodies == ["# Hello\none", "# Hello\ntwo"]
        assert backend.max_writes_in_flight == 1
        assert not store.content.is_dirty
        await store.shutdown()

    asyncio.run(scenario())


def test_set_title_mirrors_into_note_list():
    async def scenario():
        store = await loaded_store(make_backend(), debounce_ms=10_000)
        await store.select_note(HELLO)

        store.set_title("Renamed")
        assert store.notes[0].title == "Renamed"
        assert store.content.is_dirty

        store.set_title("")
        assert store.notes[0].title == "New Page"
        store.deselect_note()

    asyncio.run(scenario())


def test_edit_without_open_note_is_ignored():
    async def scenario():
        backend = make_backend()
        store = await loaded_store(backend)

        store.set_title("x")
        store.set_body("y")

        assert store.content is None
        assert not store.save_pending

    asyncio.run(scenario())


def test_reorder_updates_selection_before_reload():
    async def scenario():
        backend = make_backend()
        backend.reorder_results[HELLO] = "/notes/002-hello.md"
        store = await loaded_store(backend)
        await store.select_note(HELLO)
        seen = []
        backend.on_call = lambda name: seen.append((name, store.selected_path))

        new_path = await store.reorder_note(HELLO, 1)

        assert new_path == "/notes/002-hello.md"
        assert ("list_notes", "/notes/002-hello.md") in seen
        assert store.selected_path == "/notes/002-hello.md"
        assert "/notes/002-hello.md" in [n.path for n in store.notes]

    asyncio.run(scenario())


def test_reorder_failure_leaves_state_unchanged():
    async def scenario():
        backend = make_backend()
        backend.failures["reorder_note"] = BackendError("nope")
        store = await loaded_store(backend)
        await store.select_note(HELLO)
        before = store.snapshot()

        assert await store.reorder_note(HELLO, 1) is None

        assert store.snapshot() == before
        assert backend.calls_named("list_notes") == [("list_notes",)]

    asyncio.run(scenario())


def test_autosave_during_reorder_writes_the_new_path():
    async def scenario():
        backend = make_backend()
        backend.reorder_results[HELLO] = "/notes/002-hello.md"
        backend.gates["reorder_note"] = asyncio.Event()
        store = await loaded_store(backend)
        await store.select_note(HELLO)

        task = asyncio.create_task(store.reorder_note(HELLO, 1))
        await settle()
        store.set_body("typed during reorder")
        await asyncio.sleep(0.06)
        assert backend.calls_named("write_note") == []

        backend.gates["reorder_note"].set()
        assert await task == "/notes/002-hello.md"
        await store.shutdown()

        writes = backend.calls_named("write_note")
        assert writes == [("write_note", "/notes/002-hello.md", "# Hello\ntyped during reorder")]
        assert HELLO not in backend.files
        assert not store.content.is_dirty

    asyncio.run(scenario())


def test_switch_workspace_saves_once_before_activation():
    async def scenario():
        backend = FakeBackend(
            sample_notes(),
            sample_files(),
            [Workspace("default", "Notes", "1"), Workspace("work", "Work", "2")],
        )
        store = await loaded_store(backend, debounce_ms=10_000)
        await store.select_note(HELLO)
        store.set_body("dirty")

        await store.switch_workspace("work")

        names = backend.call_names()
        assert names.count("write_note") == 1
        assert names.index("write_note") < names.index("set_active_workspace")
        snap = store.snapshot()
        assert snap.active_workspace_id == "work"
        assert snap.active_workspace.name == "Work"
        assert snap.selected_path is None
        assert snap.content is None
        assert not store.save_pending

    asyncio.run(scenario())


def test_edits_typed_while_workspace_activates_are_saved():
    async def scenario():
        backend = FakeBackend(
            sample_notes(),
            sample_files(),
            [Workspace("default", "Notes", "1"), Workspace("work", "Work", "2")],
        )
        store = await loaded_store(backend, debounce_ms=10_000)
        await store.select_note(HELLO)
        backend.gates["set_active_workspace"] = asyncio.Event()

        task = asyncio.create_task(store.switch_workspace("work"))
        await settle()
        store.set_body("typed while switching workspace")
        backend.gates["set_active_workspace"].set()
        await task

        assert backend.files[HELLO] == "# Hello\ntyped while switching workspace"
        names = backend.call_names()
        assert names.index("set_active_workspace") < names.index("write_note")
        assert store.active_workspace_id == "work"
        assert store.selected_path is None

    asyncio.run(scenario())


def test_open_workspace_restores_remembered_note(tmp_path):
    async def scenario():
        settings = QSettings(str(tmp_path / "settings.ini"), QSettings.Format.IniFormat)
        memory = LastNoteMemory(settings)
        backend = FakeBackend(
            sample_notes(),
            sample_files(),
            [Workspace("default", "Notes", "1"), Workspace("work", "Work", "2")],
        )
        memory.remember("work", WORLD)
        store = await loaded_store(backend, memory=memory)

        await store.open_workspace("work")

        assert store.selected_path == WORLD
        assert store.content.title == "World"

    asyncio.run(scenario())


def test_restore_selection_falls_back_to_first_note(tmp_path):
    async def scenario():
        settings = QSettings(str(tmp_path / "settings.ini"), QSettings.Format.IniFormat)
        memory = LastNoteMemory(settings)
        memory.remember("default", "/notes/999-gone.md")
        store = await loaded_store(make_backend(), memory=memory)

        assert await store.restore_selection() == HELLO
        assert memory.get("default") == HELLO

    asyncio.run(scenario())


def test_signals_report_selection_and_content():
    async def scenario():
        store = await loaded_store(make_backend(), debounce_ms=10_000)
        selections = []
        contents = []
        store.signals.selection_changed.connect(selections.append)
        store.signals.content_changed.connect(lambda: contents.append(store.content))

        await store.select_note(HELLO)
        store.set_body("x")
        store.deselect_note()

        assert selections == [HELLO, None]
        assert contents[0].body == "Hello body"
        assert contents[1].body == "x"
        assert contents[-1] is None

    asyncio.run(scenario())
