import datetime
import io
from typing import Callable, List

import pytest
from PIL import Image

from cliphistory.clipboard import MemoryClipboard
from cliphistory.database import MemoryHistoryBackend
from cliphistory.models import ClipboardEntry, TextContent, UrlContent
from cliphistory.schema import entry_to_record
from cliphistory.services import ClipboardStore


class _Handle:
    def __init__(self, when: float, callback: Callable[[], None]) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler driven by ``advance()`` instead of wall-clock time.

    With ``honor_cancel=False`` cancelled callbacks still fire, which is how
    a timer that raced its cancellation behaves.
    """

    def __init__(self, honor_cancel: bool = True) -> None:
        self.now = 0.0
        self.honor_cancel = honor_cancel
        self.pending: List[_Handle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> _Handle:
        handle = _Handle(self.now + delay, callback)
        self.pending.append(handle)
        return handle

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = sorted((h for h in self.pending if h.when <= self.now), key=lambda h: h.when)
        for handle in due:
            self.pending.remove(handle)
            if handle.cancelled and self.honor_cancel:
                continue
            handle.callback()


def png_bytes(size=(4, 3), color=(255, 0, 0)) -> bytes:
    output = io.BytesIO()
    Image.new("RGB", size, color).save(output, format="PNG")
    return output.getvalue()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def clipboard():
    return MemoryClipboard()


@pytest.fixture
def backend():
    return MemoryHistoryBackend()


@pytest.fixture
def store(clipboard, backend):
    return ClipboardStore(clipboard=clipboard, backend=backend, max_entries=50)


@pytest.fixture
def entry_a():
    return ClipboardEntry(
        content=TextContent("hello"),
        timestamp=datetime.datetime(2026, 10, 19, 10, 0),
    )


@pytest.fixture
def entry_b():
    return ClipboardEntry(
        content=UrlContent("http://x.com"),
        timestamp=datetime.datetime(2026, 10, 19, 9, 59),
    )


@pytest.fixture
def seeded_store(clipboard, entry_a, entry_b):
    """A store whose persisted history is [A, B], already loaded."""
    backend = MemoryHistoryBackend([entry_to_record(entry_a), entry_to_record(entry_b)])
    store = ClipboardStore(clipboard=clipboard, backend=backend)
    store.load_history()
    return store


@pytest.fixture
def make_png():
    return png_bytes


@pytest.fixture
def racy_scheduler():
    return ManualScheduler(honor_cancel=False)


ENV_VARS = (
    "CLIPHISTORY_BACKEND", "CLIPHISTORY_CLIPBOARD", "CLIPHISTORY_DATA_DIR",
    "CLIPHISTORY_MAX_ENTRIES", "CLIPHISTORY_POLL_INTERVAL", "CLIPHISTORY_COPIED_SECONDS",
    "REDIS_URI", "REDIS_HOST", "REDIS_PORT", "REDIS_DB", "REDIS_PASSWORD", "REDIS_KEY_PREFIX",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Unset every setting, and restore them afterwards even if a .env file set them."""
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
