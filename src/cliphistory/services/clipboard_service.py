import hashlib
import logging
import threading
from typing import Callable, Optional

from cliphistory.clipboard import ClipboardBackend, ClipboardSnapshot
from cliphistory.errors import ClipboardError

logger = logging.getLogger(__name__)


def snapshot_fingerprint(snapshot: ClipboardSnapshot) -> Optional[str]:
    """Digest of every representation in ``snapshot``; ``None`` when it is empty."""
    if snapshot.is_empty:
        return None
    digest = hashlib.md5()
    for label, value in (
        ("text", snapshot.text),
        ("url", snapshot.url),
        ("html", snapshot.html),
        ("rtf", snapshot.rtf),
        ("image", snapshot.image),
    ):
        if value is None:
            continue
        data = value.encode("utf-8") if isinstance(value, str) else value
        digest.update(f"{label}:{len(data)}:".encode("ascii"))
        digest.update(data)
    return digest.hexdigest()


class ClipboardService:
    """Polls the system clipboard and reports every change it sees.

    The first poll only records a baseline, so whatever was on the
    clipboard at start-up is not reported unless ``capture_initial`` is set.
    """

    def __init__(
        self,
        clipboard: ClipboardBackend,
        on_capture: Optional[Callable[[ClipboardSnapshot], object]] = None,
        poll_interval: float = 0.25,
        capture_initial: bool = False,
        auto_start: bool = False,
    ) -> None:
        self.clipboard = clipboard
        self._on_capture = on_capture or self._default_handler
        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._poll_thread: Optional[threading.Thread] = None
        self._is_running = False
        self.poll_interval = poll_interval
        self._capture_initial = capture_initial
        self._first_run = True
        self._last_token: Optional[int] = None
        self._last_hash: Optional[str] = None

        if auto_start:
            self.start()

    @property
    def is_running(self) -> bool:
        return self._is_running

    def start(self) -> None:
        with self._lock:
            if self._is_running:
                logger.debug("ClipboardService already running")
                return

            self._stop_event.clear()
            self._is_running = True
            self._poll_thread = threading.Thread(
                target=self._poll_loop, name="clipboard-poll", daemon=True)
            self._poll_thread.start()
        logger.info(f"Watching the {self.clipboard.name} clipboard every {self.poll_interval}s")

    def stop(self) -> None:
        with self._lock:
            if not self._is_running:
                return

            self._is_running = False
            self._stop_event.set()

        if self._poll_thread is not None:
            self._poll_thread.join(timeout=1.0)
            self._poll_thread = None

    def run_forever(self) -> None:
        try:
            if not self._is_running:
                self.start()

            while not self._stop_event.wait(timeout=self.poll_interval):
                continue
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()

    def poll_once(self) -> bool:
        """Check the clipboard once; returns ``True`` if a change was reported."""
        token = self.clipboard.change_token()
        if token is not None and not self._first_run and token == self._last_token:
            return False

        try:
            snapshot = self.clipboard.read()
        except ClipboardError as exc:
            logger.debug(f"Clipboard read failed, retrying next poll: {exc}")
            return False

        self._last_token = token
        current_hash = snapshot_fingerprint(snapshot)

        if self._first_run:
            self._first_run = False
            self._last_hash = current_hash
            if not self._capture_initial:
                return False
        elif current_hash == self._last_hash:
            return False

        self._last_hash = current_hash
        if current_hash is None:
            return False

        try:
            self._on_capture(snapshot)
        except Exception as e:
            logger.error(f"Error in on_capture: {e}")
        return True

    def _poll_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.poll_once()
            except Exception as e:
                logger.error(f"Clipboard poll failed: {e}")
            self._stop_event.wait(self.poll_interval)

    @staticmethod
    def _default_handler(snapshot: ClipboardSnapshot) -> None:
        pass

    def __enter__(self) -> "ClipboardService":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
