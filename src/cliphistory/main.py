import argparse
import logging
import mimetypes
import sys
from pathlib import Path
from typing import List, Optional

from cliphistory.clipboard import ClipboardBackend, MemoryClipboard, get_clipboard_backend
from cliphistory.config import HistoryConfig
from cliphistory.database import create_history_backend
from cliphistory.errors import ClipboardUnavailableError
from cliphistory.models import ClipboardEntry, DataType
from cliphistory.services import ClipboardService, ClipboardStore, CopiedIndicator
from cliphistory.utils import FileManager
from cliphistory.views import HistoryView

EXPORT_SUFFIXES = {
    DataType.TEXT: ".txt",
    DataType.URL: ".txt",
    DataType.HTML: ".html",
    DataType.RTF: ".rtf",
}


def build_store(config: HistoryConfig, clipboard: Optional[ClipboardBackend] = None) -> ClipboardStore:
    if clipboard is None:
        clipboard = get_clipboard_backend(config.clipboard)
    return ClipboardStore(
        clipboard=clipboard,
        backend=create_history_backend(config),
        max_entries=config.max_entries,
    )


def _resolve(store: ClipboardStore, ref: str) -> Optional[ClipboardEntry]:
    """An entry by id, or by its position in ``list`` output."""
    if ref.isdecimal():
        history = store.history
        index = int(ref)
        return history[index] if index < len(history) else None
    return store.get(ref)


def cmd_watch(config: HistoryConfig, store: ClipboardStore, args) -> int:
    store.load_history()
    service = ClipboardService(
        store.clipboard,
        on_capture=store.record_new_clipboard_content,
        poll_interval=config.poll_interval,
    )
    print(f"Recording clipboard history ({len(store)} entries so far). Ctrl+C to stop.")
    service.run_forever()
    print("\nStopped watching.")
    return 0


def cmd_list(config: HistoryConfig, store: ClipboardStore, args) -> int:
    view = HistoryView(store)
    view.on_appear()
    rows = view.rows()
    if not rows:
        print("Clipboard history is empty.")
        return 0

    for index, row in enumerate(rows[:args.limit] if args.limit else rows):
        preview = row.preview.replace("\n", " ⏎ ")
        print(f"{index:>3}  {row.time_label}  {row.data_type.value:<5}  {preview}")
    return 0


def cmd_copy(config: HistoryConfig, store: ClipboardStore, args) -> int:
    view = HistoryView(store, CopiedIndicator(duration=config.copied_seconds))
    view.on_appear()
    entry = _resolve(store, args.ref)
    if entry is None:
        print(f"No history entry {args.ref!r}", file=sys.stderr)
        return 1
    if not view.on_select(entry):
        print("Could not write to the clipboard", file=sys.stderr)
        return 1
    print("Copied!")
    return 0


def cmd_clear(config: HistoryConfig, store: ClipboardStore, args) -> int:
    view = HistoryView(store)
    view.on_clear()
    print("Clipboard history cleared.")
    return 0


def cmd_export(config: HistoryConfig, store: ClipboardStore, args) -> int:
    store.load_history()
    entry = _resolve(store, args.ref)
    if entry is None:
        print(f"No history entry {args.ref!r}", file=sys.stderr)
        return 1

    if entry.data_type is DataType.IMAGE:
        suffix = mimetypes.guess_extension(entry.content.mime) or ".png"
    else:
        suffix = EXPORT_SUFFIXES[entry.data_type]

    try:
        path = FileManager(Path(args.dest)).save_file(entry.content.payload, f"{entry.id}{suffix}")
    except OSError as exc:
        print(f"Could not export entry: {exc}", file=sys.stderr)
        return 1
    print(path)
    return 0


COMMANDS = {
    "watch": cmd_watch,
    "list": cmd_list,
    "copy": cmd_copy,
    "clear": cmd_clear,
    "export": cmd_export,
}
CLIPBOARD_COMMANDS = {"watch", "copy"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cliphistory", description="Clipboard history manager")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output")
    parser.add_argument("--env-file", type=Path, default=None, help="read settings from this .env file")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("watch", help="record clipboard changes until interrupted")

    list_parser = sub.add_parser("list", help="show the history, newest first")
    list_parser.add_argument("--limit", type=int, default=None)

    copy_parser = sub.add_parser("copy", help="put an entry back on the clipboard")
    copy_parser.add_argument("ref", help="entry id or list index")

    sub.add_parser("clear", help="delete the whole history")

    export_parser = sub.add_parser("export", help="write an entry's payload to a file")
    export_parser.add_argument("ref", help="entry id or list index")
    export_parser.add_argument("dest", help="directory to write into")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="[%(levelname)s] %(message)s")

    try:
        config = HistoryConfig.from_env(env_path=args.env_file)
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    clipboard = None if args.command in CLIPBOARD_COMMANDS else MemoryClipboard()
    try:
        store = build_store(config, clipboard)
    except ClipboardUnavailableError as exc:
        print(f"Clipboard unavailable: {exc}", file=sys.stderr)
        return 2

    try:
        return COMMANDS[args.command](config, store, args)
    finally:
        store.backend.close()


if __name__ == "__main__":
    sys.exit(main())
