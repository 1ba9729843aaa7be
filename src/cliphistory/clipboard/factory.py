import logging
import platform
from typing import Type

from cliphistory.clipboard.base import ClipboardBackend
from cliphistory.errors import ClipboardUnavailableError

logger = logging.getLogger(__name__)


def get_clipboard_class() -> Type[ClipboardBackend]:
    system = platform.system()

    if system == "Windows":
        from cliphistory.clipboard.windows import WindowsClipboard
        return WindowsClipboard
    elif system == "Linux":
        from cliphistory.clipboard.linux import LinuxClipboard
        return LinuxClipboard
    elif system == "Darwin":
        from cliphistory.clipboard.macos import MacOSClipboard
        return MacOSClipboard
    else:
        raise ClipboardUnavailableError(f"Platform '{system}' is not supported")


def get_clipboard_backend(name: str = "system") -> ClipboardBackend:
    """Build the clipboard named ``name``: ``system`` for the OS clipboard or ``memory``."""
    if name == "memory":
        from cliphistory.clipboard.memory import MemoryClipboard
        return MemoryClipboard()
    if name != "system":
        raise ValueError(f"Unknown clipboard backend: {name!r}")

    clipboard_class = get_clipboard_class()
    backend = clipboard_class()
    logger.debug(f"Using {backend.name} clipboard")
    return backend
