"""Toolkit-neutral model of the history popover.

``HistoryView`` holds the state the popover needs (which entry is hovered,
which one shows "Copied!") and turns store entries into ``EntryRow``
values. A GUI binds its widgets to the rows and forwards clicks to the
``on_*`` handlers; the CLI uses the same rows for ``list``.
"""

import io
import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from PIL import Image, UnidentifiedImageError

from cliphistory.models import ClipboardEntry, DataType
from cliphistory.services import ClipboardStore, CopiedIndicator

logger = logging.getLogger(__name__)

ICONS = {
    DataType.TEXT: "doc.text",
    DataType.IMAGE: "photo",
    DataType.URL: "link",
    DataType.HTML: "chevron.left.forwardslash.chevron.right",
    DataType.RTF: "text.badge.checkmark",
}

PREVIEW_CHARS = 120
COPIED_LABEL = "Copied!"


@dataclass(frozen=True)
class EntryRow:
    id: str
    data_type: DataType
    icon: str
    preview: str
    time_label: str
    copied: bool
    hovered: bool

    @property
    def status(self) -> str:
        return COPIED_LABEL if self.copied else ""


def _clip(text: str, max_lines: int, max_chars: int = PREVIEW_CHARS) -> str:
    lines = [line.rstrip() for line in text.replace("\r\n", "\n").replace("\r", "\n").split("\n")]
    shown = "\n".join(lines[:max_lines])
    truncated = len(lines) > max_lines
    if len(shown) > max_chars:
        shown = shown[:max_chars - 1]
        truncated = True
    return shown + "…" if truncated else shown


def _format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def _image_preview(data: bytes) -> str:
    size = _format_size(len(data))
    try:
        with Image.open(io.BytesIO(data)) as image:
            width, height = image.size
    except (UnidentifiedImageError, OSError):
        return f"Image ({size})"
    return f"Image {width}×{height} ({size})"


def entry_preview(entry: ClipboardEntry) -> str:
    kind = entry.data_type
    if kind is DataType.TEXT:
        return _clip(entry.text, max_lines=2)
    if kind is DataType.IMAGE:
        return _image_preview(entry.image_data)
    if kind is DataType.URL:
        return _clip(entry.url, max_lines=2)
    if kind is DataType.HTML:
        markup = entry.content.markup.strip()
        return f"HTML Content {_clip(markup, max_lines=1)}".rstrip()
    return "Rich Text Content"


class HistoryView:

    def __init__(self, store: ClipboardStore, indicator: Optional[CopiedIndicator] = None) -> None:
        self.store = store
        self.indicator = indicator or CopiedIndicator()
        self.hovered_id: Optional[str] = None

    def on_appear(self) -> None:
        self.store.load_history()

    def on_hover(self, entry_id: str, hovered: bool) -> None:
        if hovered:
            self.hovered_id = entry_id
        elif self.hovered_id == entry_id:
            self.hovered_id = None

    def on_select(self, entry: Union[ClipboardEntry, str]) -> bool:
        """Re-copy an entry; "Copied!" is shown only if the write succeeded."""
        if isinstance(entry, str):
            found = self.store.get(entry)
            if found is None:
                logger.warning(f"No history entry {entry}")
                return False
            entry = found

        if not self.store.copy_to_clipboard(entry):
            return False
        self.indicator.mark(entry.id)
        return True

    def on_clear(self) -> None:
        self.store.clear_history()
        self.indicator.clear()
        self.hovered_id = None

    def rows(self) -> List[EntryRow]:
        copied_id = self.indicator.current_id
        return [
            EntryRow(
                id=entry.id,
                data_type=entry.data_type,
                icon=ICONS[entry.data_type],
                preview=entry_preview(entry),
                time_label=entry.timestamp.strftime("%H:%M"),
                copied=entry.id == copied_id,
                hovered=entry.id == self.hovered_id,
            )
            for entry in self.store
        ]
