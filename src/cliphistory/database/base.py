from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

Record = Dict[str, Any]


class HistoryBackend(ABC):
    """Persisted backing store for the clipboard history, newest record first.

    Besides the records, a backend keeps one "last copied" marker: the
    fingerprint of the content the history most recently wrote to the
    clipboard. Every process sharing the store sees it, so a watcher can
    tell a history copy made elsewhere from a real clipboard change.
    """

    name = "abstract"

    @abstractmethod
    def load(self) -> List[Record]:
        """Return every persisted record, newest first.

        A store that does not exist yet loads as an empty list.

        Raises:
            HistoryLoadError: the store exists but cannot be read.
        """

    @abstractmethod
    def prepend(self, record: Record, max_entries: int) -> None:
        """Persist ``record`` as the newest entry, keeping at most ``max_entries``.

        Raises:
            HistoryStorageError: the record could not be written.
        """

    @abstractmethod
    def clear(self) -> None:
        """Drop every record and the last copied marker."""

    @abstractmethod
    def mark_copied(self, marker: Record) -> None:
        """Replace the last copied marker.

        Raises:
            HistoryStorageError: the marker could not be written.
        """

    @abstractmethod
    def last_copied(self) -> Optional[Record]:
        """The last copied marker, or ``None``.

        Raises:
            HistoryLoadError: the marker exists but cannot be read.
        """

    @abstractmethod
    def clear_copied(self) -> None:
        pass

    def close(self) -> None:
        pass

    def __enter__(self) -> "HistoryBackend":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
