import io
import time
from typing import Optional

import win32clipboard as wc
import win32con
from PIL import Image, ImageGrab

from cliphistory.clipboard.base import ClipboardBackend, ClipboardSnapshot
from cliphistory.clipboard.cf_html import build_cf_html, parse_cf_html
from cliphistory.errors import ClipboardError, ClipboardWriteError
from cliphistory.models import ClipboardContent, DataType


class WindowsClipboard(ClipboardBackend):

    name = "windows"

    def __init__(self) -> None:
        self.cf_html = wc.RegisterClipboardFormat("HTML Format")
        self.cf_rtf = wc.RegisterClipboardFormat("Rich Text Format")

    def change_token(self) -> Optional[int]:
        return int(wc.GetClipboardSequenceNumber())

    def _open(self) -> None:
        for _ in range(3):
            try:
                wc.OpenClipboard()
                return
            except Exception:
                time.sleep(0.05)
        raise ClipboardError("clipboard is held by another process")

    def _read(self) -> ClipboardSnapshot:
        image = self._from_imagegrab()

        text = html = rtf = None
        self._open()
        try:
            if wc.IsClipboardFormatAvailable(self.cf_html):
                html = parse_cf_html(bytes(wc.GetClipboardData(self.cf_html)))
            if wc.IsClipboardFormatAvailable(self.cf_rtf):
                rtf = bytes(wc.GetClipboardData(self.cf_rtf)).rstrip(b"\x00")
            if wc.IsClipboardFormatAvailable(wc.CF_UNICODETEXT):
                text = wc.GetClipboardData(wc.CF_UNICODETEXT)
        finally:
            wc.CloseClipboard()

        return ClipboardSnapshot(text=text, html=html, rtf=rtf, image=image)

    def _from_imagegrab(self) -> Optional[bytes]:
        clipboard_data = ImageGrab.grabclipboard()
        # a list means copied files, which are not recorded
        if clipboard_data is None or not hasattr(clipboard_data, "save"):
            return None
        output = io.BytesIO()
        clipboard_data.save(output, format="PNG")
        return output.getvalue()

    def _write(self, content: ClipboardContent) -> None:
        dib = self._to_dib(content.data) if content.data_type is DataType.IMAGE else None

        self._open()
        try:
            wc.EmptyClipboard()
            kind = content.data_type
            if kind is DataType.TEXT:
                wc.SetClipboardData(wc.CF_UNICODETEXT, content.text)
            elif kind is DataType.URL:
                wc.SetClipboardData(wc.CF_UNICODETEXT, content.url)
            elif kind is DataType.HTML:
                wc.SetClipboardData(self.cf_html, build_cf_html(content.data))
                wc.SetClipboardData(wc.CF_UNICODETEXT, content.markup)
            elif kind is DataType.RTF:
                wc.SetClipboardData(self.cf_rtf, content.data)
            else:
                wc.SetClipboardData(win32con.CF_DIB, dib)
        finally:
            wc.CloseClipboard()

    @staticmethod
    def _to_dib(payload: bytes) -> bytes:
        image = Image.open(io.BytesIO(payload))
        if image.mode == "RGBA":
            background = Image.new("RGB", image.size, (255, 255, 255))
            background.paste(image, mask=image.split()[3])
            image = background
        elif image.mode != "RGB":
            image = image.convert("RGB")

        output = io.BytesIO()
        image.save(output, "BMP")
        bmp_data = output.getvalue()
        if len(bmp_data) <= 14:
            raise ClipboardWriteError("image could not be converted to a bitmap")
        # CF_DIB is the BMP file minus its 14-byte file header
        return bmp_data[14:]
