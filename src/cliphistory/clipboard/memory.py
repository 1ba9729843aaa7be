import threading
from typing import List, Optional

from cliphistory.clipboard.base import ClipboardBackend, ClipboardSnapshot, snapshot_from_content
from cliphistory.errors import ClipboardWriteError
from cliphistory.models import ClipboardContent


class MemoryClipboard(ClipboardBackend):
    """A process-local clipboard slot, used in tests and headless runs."""

    name = "memory"

    def __init__(self, snapshot: Optional[ClipboardSnapshot] = None, fail_writes: bool = False) -> None:
        self._lock = threading.Lock()
        self._snapshot = snapshot or ClipboardSnapshot()
        self._change_count = 0
        self.fail_writes = fail_writes
        self.writes: List[ClipboardContent] = []

    def set_snapshot(self, snapshot: Optional[ClipboardSnapshot] = None, **representations) -> None:
        """Simulate another application changing the clipboard."""
        with self._lock:
            self._snapshot = snapshot or ClipboardSnapshot(**representations)
            self._change_count += 1

    def change_token(self) -> int:
        with self._lock:
            return self._change_count

    def _read(self) -> ClipboardSnapshot:
        with self._lock:
            return self._snapshot

    def _write(self, content: ClipboardContent) -> None:
        if self.fail_writes:
            raise ClipboardWriteError("memory: clipboard is read-only")
        with self._lock:
            self._snapshot = snapshot_from_content(content)
            self._change_count += 1
            self.writes.append(content)
