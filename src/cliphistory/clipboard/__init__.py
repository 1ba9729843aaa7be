from cliphistory.clipboard.base import ClipboardBackend, ClipboardSnapshot, snapshot_from_content
from cliphistory.clipboard.classify import classify
from cliphistory.clipboard.factory import get_clipboard_backend, get_clipboard_class
from cliphistory.clipboard.memory import MemoryClipboard

__all__ = [
    'ClipboardBackend',
    'ClipboardSnapshot',
    'MemoryClipboard',
    'classify',
    'get_clipboard_backend',
    'get_clipboard_class',
    'snapshot_from_content',
]
