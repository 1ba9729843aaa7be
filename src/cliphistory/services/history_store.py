import hashlib
import io
import logging
import threading
import time
from typing import Callable, Iterator, List, Optional, Tuple, Union

from PIL import Image, UnidentifiedImageError

from cliphistory.clipboard import ClipboardBackend, ClipboardSnapshot, classify
from cliphistory.database import HistoryBackend, MemoryHistoryBackend, Record
from cliphistory.errors import (
    ClipboardError,
    HistoryLoadError,
    HistoryStorageError,
    InvalidContentError,
)
from cliphistory.models import CONTENT_TYPES, ClipboardContent, ClipboardEntry, DataType
from cliphistory.schema import entry_to_record, record_to_entry

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 200
ECHO_SECONDS = 5.0


def _image_pixels(data: bytes) -> Optional[bytes]:
    try:
        with Image.open(io.BytesIO(data)) as image:
            rgba = image.convert("RGBA")
    except (UnidentifiedImageError, OSError):
        return None
    return f"{rgba.width}x{rgba.height}:".encode("ascii") + rgba.tobytes()


def content_fingerprint(content: ClipboardContent) -> str:
    """Digest of ``content`` as it would read back off the clipboard.

    Platforms re-encode images on the way back, so images are compared by
    their decoded pixels when Pillow can read them.
    """
    digest = hashlib.sha256(content.data_type.value.encode("ascii"))
    digest.update(b":")
    pixels = _image_pixels(content.payload) if content.data_type is DataType.IMAGE else None
    digest.update(content.payload if pixels is None else pixels)
    return digest.hexdigest()


class ClipboardStore:
    """Owns the clipboard history and is the only writer of the system clipboard.

    The history is newest first. Entries are only ever prepended (by
    ``record_new_clipboard_content``) or dropped all at once (by
    ``clear_history``), plus the oldest ones falling off past
    ``max_entries``. Every method is safe to call from the watcher thread
    and the UI side at once; mutation is serialized by one lock.

    A copy leaves a marker in the backend, so the clipboard change it
    causes is not recorded again, even by a watcher in another process.
    The marker matches one change only and lapses after ``echo_seconds``.
    """

    def __init__(
        self,
        clipboard: ClipboardBackend,
        backend: Optional[HistoryBackend] = None,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        echo_seconds: float = ECHO_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.clipboard = clipboard
        self.backend = backend or MemoryHistoryBackend()
        self.max_entries = max_entries
        self.echo_seconds = echo_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: List[ClipboardEntry] = []
        self._pending_echo: Optional[Record] = None
        self._listeners: List[Callable[[], None]] = []

    @property
    def history(self) -> Tuple[ClipboardEntry, ...]:
        with self._lock:
            return tuple(self._entries)

    def __iter__(self) -> Iterator[ClipboardEntry]:
        return iter(self.history)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, entry_id: str) -> Optional[ClipboardEntry]:
        with self._lock:
            for entry in self._entries:
                if entry.id == entry_id:
                    return entry
        return None

    def add_listener(self, callback: Callable[[], None]) -> None:
        """Call ``callback`` whenever the history sequence changes."""
        self._listeners.append(callback)

    def load_history(self) -> None:
        """Replace the in-memory history with what the backend holds.

        Never raises. An unreadable store gives an empty history and
        malformed records are skipped.
        """
        try:
            records = self.backend.load()
        except HistoryLoadError as exc:
            logger.warning(f"Could not load clipboard history, starting empty: {exc}")
            records = []

        entries: List[ClipboardEntry] = []
        for record in records:
            try:
                entries.append(record_to_entry(record))
            except InvalidContentError as exc:
                logger.warning(f"Skipping history record: {exc}")

        with self._lock:
            self._entries = entries[:self.max_entries]
            count = len(self._entries)
        logger.info(f"Loaded {count} clipboard entries from {self.backend.name} store")
        self._notify()

    def copy_to_clipboard(self, entry: ClipboardEntry) -> bool:
        """Put ``entry`` back on the system clipboard.

        The history itself is left untouched. Returns ``False`` if the
        platform rejected the write.
        """
        fingerprint = content_fingerprint(entry.content)
        if self._clipboard_fingerprint() == fingerprint:
            logger.debug(f"Clipboard already holds entry {entry.id}")
            return True

        with self._lock:
            self._set_echo({"fingerprint": fingerprint, "copied_at": self._clock()})
        try:
            self.clipboard.write(entry.content)
        except ClipboardError as exc:
            logger.error(f"Copy of entry {entry.id} failed: {exc}")
            with self._lock:
                self._drop_echo()
            return False
        logger.debug(f"Copied {entry.data_type.value} entry {entry.id}")
        return True

    def clear_history(self) -> None:
        with self._lock:
            self._entries = []
            self._pending_echo = None
            try:
                self.backend.clear()
            except HistoryStorageError as exc:
                logger.error(f"Persisted history was not cleared: {exc}")
        logger.info("Clipboard history cleared")
        self._notify()

    def record_new_clipboard_content(
        self, content: Union[ClipboardSnapshot, ClipboardContent]
    ) -> Optional[ClipboardEntry]:
        """Classify ``content`` and prepend it as a new entry.

        Accepts a raw snapshot or an already classified content value.
        Returns the new entry, or ``None`` if there was nothing to record or
        the change was a history copy coming back.
        """
        if isinstance(content, ClipboardSnapshot):
            content = classify(content)
            if content is None:
                return None
        elif not isinstance(content, tuple(CONTENT_TYPES.values())):
            raise TypeError(f"cannot record {type(content).__name__}")

        with self._lock:
            if self._take_echo(content):
                logger.debug("Ignoring clipboard change made by a history copy")
                return None

            entry = ClipboardEntry(content=content)
            self._entries.insert(0, entry)
            del self._entries[self.max_entries:]
            try:
                self.backend.prepend(entry_to_record(entry), self.max_entries)
            except HistoryStorageError as exc:
                logger.error(f"Entry {entry.id} kept in memory only: {exc}")

        logger.info(f"Recorded {entry.data_type.value} clipboard entry {entry.id}")
        self._notify()
        return entry

    def _clipboard_fingerprint(self) -> Optional[str]:
        try:
            current = classify(self.clipboard.read())
        except ClipboardError as exc:
            logger.debug(f"Could not read the clipboard before copying: {exc}")
            return None
        return content_fingerprint(current) if current is not None else None

    def _set_echo(self, marker: Record) -> None:
        self._pending_echo = marker
        try:
            self.backend.mark_copied(marker)
        except HistoryStorageError as exc:
            logger.warning(f"Copy marker kept in this process only: {exc}")

    def _drop_echo(self) -> None:
        self._pending_echo = None
        try:
            self.backend.clear_copied()
        except HistoryStorageError as exc:
            logger.warning(f"Could not clear the copy marker: {exc}")

    def _take_echo(self, content: ClipboardContent) -> bool:
        """Whether ``content`` is the change made by a recent copy; a match is used up."""
        marker = self._pending_echo
        try:
            marker = self.backend.last_copied() or marker
        except HistoryLoadError as exc:
            logger.warning(f"Could not read the copy marker: {exc}")
        if marker is None:
            return False

        try:
            age = self._clock() - float(marker.get("copied_at", 0))
        except (TypeError, ValueError):
            age = self.echo_seconds
        if age >= self.echo_seconds:
            self._drop_echo()
            return False
        if marker.get("fingerprint") != content_fingerprint(content):
            return False
        self._drop_echo()
        return True

    def _notify(self) -> None:
        for callback in list(self._listeners):
            try:
                callback()
            except Exception as exc:
                logger.error(f"History listener failed: {exc}")
