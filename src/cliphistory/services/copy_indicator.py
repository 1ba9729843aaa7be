import logging
import threading
from typing import Callable, List, Optional

from cliphistory.services.scheduler import Cancellable, Scheduler, ThreadingScheduler

logger = logging.getLogger(__name__)

COPIED_SECONDS = 2.0


class CopiedIndicator:
    """The transient "Copied!" marker shown next to the last re-copied entry.

    At most one entry is marked at a time. Each mark replaces the previous
    one and schedules its own reset; a reset only fires if its entry is
    still the one marked under the same generation, so an old timer can
    never clear a newer mark.
    """

    def __init__(self, duration: float = COPIED_SECONDS, scheduler: Optional[Scheduler] = None) -> None:
        self.duration = duration
        self.scheduler = scheduler or ThreadingScheduler()
        self._lock = threading.RLock()
        self._current_id: Optional[str] = None
        self._generation = 0
        self._timer: Optional[Cancellable] = None
        self._listeners: List[Callable[[Optional[str]], None]] = []

    @property
    def current_id(self) -> Optional[str]:
        with self._lock:
            return self._current_id

    def is_copied(self, entry_id: str) -> bool:
        return self.current_id == entry_id

    def add_listener(self, callback: Callable[[Optional[str]], None]) -> None:
        self._listeners.append(callback)

    def mark(self, entry_id: str) -> None:
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._current_id = entry_id
            previous, self._timer = self._timer, None
            if previous is not None:
                previous.cancel()
            self._timer = self.scheduler.call_later(
                self.duration, lambda: self._expire(entry_id, generation))
        self._notify(entry_id)

    def clear(self) -> None:
        with self._lock:
            self._generation += 1
            self._current_id = None
            previous, self._timer = self._timer, None
        if previous is not None:
            previous.cancel()
        self._notify(None)

    def _expire(self, entry_id: str, generation: int) -> None:
        with self._lock:
            if self._current_id != entry_id or self._generation != generation:
                return
            self._current_id = None
            self._timer = None
        self._notify(None)

    def _notify(self, entry_id: Optional[str]) -> None:
        for callback in list(self._listeners):
            try:
                callback(entry_id)
            except Exception as exc:
                logger.error(f"Copied indicator listener failed: {exc}")
