class ClipHistoryError(Exception):
    """Base class for every error raised by cliphistory."""


class InvalidContentError(ClipHistoryError, ValueError):
    """A clipboard payload does not satisfy its variant's invariant."""


class ClipboardError(ClipHistoryError):
    pass


class ClipboardUnavailableError(ClipboardError):
    """No usable clipboard mechanism exists on this machine."""


class ClipboardWriteError(ClipboardError):
    """The operating system rejected a clipboard write."""


class HistoryLoadError(ClipHistoryError):
    """The persisted history exists but could not be read."""


class HistoryStorageError(ClipHistoryError):
    """Writing to or clearing the persisted history failed."""
