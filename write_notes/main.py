from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from write_notes.bootstrap import build_services
from write_notes.core.errors import BackendError
from write_notes.logging_setup import (
    SESSION_ID,
    install_global_exception_hooks,
    install_loop_exception_handler,
    setup_logging,
)
from write_notes.settings import CONFIG_PATH, LOG_PATH, NOTES_ROOT, SETTINGS_PATH


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Workspace-aware markdown notes")
    p.add_argument("--root", type=Path, default=NOTES_ROOT, help="Notes root folder (one sub-folder per workspace)")
    p.add_argument("--config", type=Path, default=CONFIG_PATH, help="Workspace config file")
    p.add_argument("--settings", type=Path, default=SETTINGS_PATH, help="Local settings file")
    p.add_argument("--log", type=Path, default=LOG_PATH, help="Log file")
    p.add_argument("--workspace", help="Switch to this workspace id first")
    p.add_argument("--new", metavar="TITLE", help="Create a note with this title")
    return p.parse_args(argv)


async def run(args: argparse.Namespace, log=None) -> int:
    if log is not None:
        install_loop_exception_handler(log)
    services = build_services(
        notes_root=args.root,
        config_path=args.config,
        settings_path=args.settings,
    )
    store = services.store

    await store.load_workspaces()
    if args.workspace and args.workspace != store.active_workspace_id:
        try:
            await store.switch_workspace(args.workspace)
        except BackendError as e:
            print(f"error: {e}")
            return 2
    await store.load_notes()

    if args.new is not None:
        if await store.create_note() is None:
            return 1
        store.set_title(args.new)
    await store.shutdown()
    services.settings.sync()

    for ws in store.workspaces:
        marker = "*" if ws.id == store.active_workspace_id else " "
        print(f"{marker} [{ws.shortcut or '-'}] {ws.name} ({ws.id})")
    for note in store.notes:
        print(f"    {note.name}  {note.title}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    log = setup_logging(args.log)
    install_global_exception_hooks(log)
    log.info("Started, SID=%s", SESSION_ID)
    return asyncio.run(run(args, log))


if __name__ == "__main__":
    raise SystemExit(main())
