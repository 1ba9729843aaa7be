import copy
from typing import List, Optional

from cliphistory.database.base import HistoryBackend, Record


class MemoryHistoryBackend(HistoryBackend):

    name = "memory"

    def __init__(self, records: Optional[List[Record]] = None) -> None:
        self.records: List[Record] = list(records or [])
        self.copied: Optional[Record] = None

    def load(self) -> List[Record]:
        return copy.deepcopy(self.records)

    def prepend(self, record: Record, max_entries: int) -> None:
        self.records.insert(0, dict(record))
        del self.records[max_entries:]

    def clear(self) -> None:
        self.records.clear()
        self.copied = None

    def mark_copied(self, marker: Record) -> None:
        self.copied = dict(marker)

    def last_copied(self) -> Optional[Record]:
        return dict(self.copied) if self.copied else None

    def clear_copied(self) -> None:
        self.copied = None
