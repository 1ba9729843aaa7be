from typing import Optional

try:
    from AppKit import (
        NSPasteboard,
        NSPasteboardTypeHTML,
        NSPasteboardTypePNG,
        NSPasteboardTypeRTF,
        NSPasteboardTypeString,
        NSPasteboardTypeTIFF,
        NSPasteboardTypeURL,
    )
    from Foundation import NSData
    HAS_APPKIT = True
except ImportError:
    HAS_APPKIT = False

from cliphistory.clipboard.base import ClipboardBackend, ClipboardSnapshot
from cliphistory.errors import ClipboardUnavailableError, ClipboardWriteError
from cliphistory.models import ClipboardContent, DataType


class MacOSClipboard(ClipboardBackend):

    name = "macos"

    def __init__(self) -> None:
        if not HAS_APPKIT:
            raise ClipboardUnavailableError("pyobjc (AppKit) is not installed")
        self._pasteboard = NSPasteboard.generalPasteboard()

    def change_token(self) -> Optional[int]:
        return int(self._pasteboard.changeCount())

    def _read(self) -> ClipboardSnapshot:
        pasteboard = self._pasteboard
        types = list(pasteboard.types() or [])

        image, image_mime = None, "image/png"
        if NSPasteboardTypePNG in types:
            image = self._data(NSPasteboardTypePNG)
        elif NSPasteboardTypeTIFF in types:
            image, image_mime = self._data(NSPasteboardTypeTIFF), "image/tiff"

        url = None
        if NSPasteboardTypeURL in types:
            url = pasteboard.stringForType_(NSPasteboardTypeURL)

        html = self._data(NSPasteboardTypeHTML) if NSPasteboardTypeHTML in types else None
        rtf = self._data(NSPasteboardTypeRTF) if NSPasteboardTypeRTF in types else None

        text = None
        if NSPasteboardTypeString in types:
            text = pasteboard.stringForType_(NSPasteboardTypeString)

        return ClipboardSnapshot(
            text=str(text) if text is not None else None,
            url=str(url) if url is not None else None,
            html=html,
            rtf=rtf,
            image=image,
            image_mime=image_mime,
        )

    def _data(self, pb_type) -> Optional[bytes]:
        data = self._pasteboard.dataForType_(pb_type)
        return bytes(data) if data else None

    def _write(self, content: ClipboardContent) -> None:
        pasteboard = self._pasteboard
        pasteboard.clearContents()

        kind = content.data_type
        if kind is DataType.TEXT:
            ok = pasteboard.setString_forType_(content.text, NSPasteboardTypeString)
        elif kind is DataType.URL:
            ok = pasteboard.setString_forType_(content.url, NSPasteboardTypeURL)
            ok = pasteboard.setString_forType_(content.url, NSPasteboardTypeString) and ok
        elif kind is DataType.HTML:
            ok = pasteboard.setData_forType_(self._ns_data(content.data), NSPasteboardTypeHTML)
            pasteboard.setString_forType_(content.markup, NSPasteboardTypeString)
        elif kind is DataType.RTF:
            ok = pasteboard.setData_forType_(self._ns_data(content.data), NSPasteboardTypeRTF)
        else:
            mime = content.mime.lower()
            pb_type = NSPasteboardTypeTIFF if "tif" in mime else NSPasteboardTypePNG
            ok = pasteboard.setData_forType_(self._ns_data(content.data), pb_type)

        if not ok:
            raise ClipboardWriteError(f"NSPasteboard refused {kind.value} content")

    @staticmethod
    def _ns_data(payload: bytes):
        return NSData.dataWithBytes_length_(payload, len(payload))
