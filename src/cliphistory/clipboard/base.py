from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from cliphistory.errors import ClipboardError, ClipboardWriteError
from cliphistory.models import ClipboardContent, DataType


@dataclass(frozen=True)
class ClipboardSnapshot:
    """Every representation the system clipboard offered at one moment."""
    text: Optional[str] = None
    url: Optional[str] = None
    html: Optional[bytes] = None
    rtf: Optional[bytes] = None
    image: Optional[bytes] = None
    image_mime: str = "image/png"

    @property
    def is_empty(self) -> bool:
        return not (self.text or self.url or self.html or self.rtf or self.image)


class ClipboardBackend(ABC):
    """Read and write access to one system clipboard."""

    name = "abstract"

    @abstractmethod
    def _read(self) -> ClipboardSnapshot:
        pass

    @abstractmethod
    def _write(self, content: ClipboardContent) -> None:
        pass

    def change_token(self) -> Optional[int]:
        """Counter that moves whenever the clipboard changes, if the platform has one."""
        return None

    def read(self) -> ClipboardSnapshot:
        try:
            return self._read()
        except ClipboardError:
            raise
        except Exception as exc:
            raise ClipboardError(f"{self.name}: clipboard read failed: {exc}") from exc

    def write(self, content: ClipboardContent) -> None:
        """Replace the clipboard with ``content``.

        Raises:
            ClipboardWriteError: the platform refused the write.
        """
        try:
            self._write(content)
        except ClipboardWriteError:
            raise
        except Exception as exc:
            raise ClipboardWriteError(
                f"{self.name}: could not write {content.data_type.value} content: {exc}") from exc


def snapshot_from_content(content: ClipboardContent) -> ClipboardSnapshot:
    """The snapshot a clipboard would hold right after ``content`` was written."""
    kind = content.data_type
    if kind is DataType.TEXT:
        return ClipboardSnapshot(text=content.text)
    if kind is DataType.URL:
        return ClipboardSnapshot(url=content.url, text=content.url)
    if kind is DataType.HTML:
        return ClipboardSnapshot(html=content.data)
    if kind is DataType.RTF:
        return ClipboardSnapshot(rtf=content.data)
    return ClipboardSnapshot(image=content.data, image_mime=content.mime)
