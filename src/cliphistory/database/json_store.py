import logging
from pathlib import Path
from typing import List, Optional

from cliphistory.database.base import HistoryBackend, Record
from cliphistory.errors import HistoryLoadError, HistoryStorageError
from cliphistory.schema import RECORD_VERSION
from cliphistory.utils.file_manager import FileManager

logger = logging.getLogger(__name__)


class JsonHistoryBackend(HistoryBackend):
    """History kept in one JSON document: ``{"version": 1, "entries": [...]}``.

    The last copied marker lives next to it in its own small file, so
    writing the marker never rewrites the history.
    """

    name = "json"

    def __init__(self, base_dir: Optional[Path] = None, file_name: str = "history.json",
                 copied_file_name: str = "last_copied.json") -> None:
        self.files = FileManager(base_dir)
        self.file_name = file_name
        self.copied_file_name = copied_file_name

    @property
    def path(self) -> Path:
        return self.files.path_for(self.file_name)

    def load(self) -> List[Record]:
        try:
            document = self.files.read_json(self.file_name)
        except (OSError, ValueError) as exc:
            raise HistoryLoadError(f"could not read {self.path}: {exc}") from exc

        if document is None:
            return []
        if not isinstance(document, dict) or not isinstance(document.get("entries"), list):
            raise HistoryLoadError(f"{self.path} is not a history document")
        if document.get("version") != RECORD_VERSION:
            logger.warning(f"{self.path} has version {document.get('version')!r}, reading anyway")
        return document["entries"]

    def prepend(self, record: Record, max_entries: int) -> None:
        try:
            records = self.load()
        except HistoryLoadError as exc:
            logger.warning(f"Discarding unreadable history file: {exc}")
            records = []

        records.insert(0, record)
        self._write(records[:max_entries])

    def clear(self) -> None:
        try:
            self.files.remove(self.file_name)
            self.files.remove(self.copied_file_name)
        except OSError as exc:
            raise HistoryStorageError(f"could not remove {self.path}: {exc}") from exc

    def mark_copied(self, marker: Record) -> None:
        try:
            self.files.write_json(self.copied_file_name, marker)
        except (OSError, TypeError, ValueError) as exc:
            raise HistoryStorageError(f"could not write {self.copied_file_name}: {exc}") from exc

    def last_copied(self) -> Optional[Record]:
        try:
            marker = self.files.read_json(self.copied_file_name)
        except (OSError, ValueError) as exc:
            raise HistoryLoadError(f"could not read {self.copied_file_name}: {exc}") from exc
        return marker if isinstance(marker, dict) else None

    def clear_copied(self) -> None:
        try:
            self.files.remove(self.copied_file_name)
        except OSError as exc:
            raise HistoryStorageError(f"could not remove {self.copied_file_name}: {exc}") from exc

    def _write(self, records: List[Record]) -> None:
        try:
            self.files.write_json(self.file_name, {"version": RECORD_VERSION, "entries": records})
        except (OSError, TypeError, ValueError) as exc:
            raise HistoryStorageError(f"could not write {self.path}: {exc}") from exc
