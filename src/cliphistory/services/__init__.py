"""Service layer: the history store, the clipboard watcher and the copied marker."""

from cliphistory.services.clipboard_service import ClipboardService
from cliphistory.services.copy_indicator import CopiedIndicator
from cliphistory.services.history_store import ClipboardStore
from cliphistory.services.scheduler import AsyncioScheduler, ThreadingScheduler

__all__ = [
    "AsyncioScheduler",
    "ClipboardService",
    "ClipboardStore",
    "CopiedIndicator",
    "ThreadingScheduler",
]
