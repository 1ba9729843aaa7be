import os
import shutil
import subprocess
from typing import Callable, List, Optional

from cliphistory.clipboard.base import ClipboardBackend, ClipboardSnapshot
from cliphistory.errors import ClipboardUnavailableError, ClipboardWriteError
from cliphistory.models import ClipboardContent, DataType

Reader = Callable[[str], Optional[bytes]]


class LinuxClipboard(ClipboardBackend):
    """Clipboard access through ``wl-clipboard`` on Wayland or ``xclip`` on X11."""

    name = "linux"

    _IMAGE_TARGETS = {
        "image/png": "image/png",
        "image/jpeg": "image/jpeg",
        "image/jpg": "image/jpeg",
        "image/bmp": "image/bmp",
        "image/x-ms-bmp": "image/bmp",
        "image/webp": "image/webp",
        "image/tiff": "image/tiff",
    }
    _HTML_TARGETS = {"text/html"}
    _RTF_TARGETS = {"text/rtf", "application/rtf", "text/richtext"}
    _URL_TARGETS = {"text/uri-list", "text/x-moz-url"}
    _TEXT_TARGETS = {
        "text/plain;charset=utf-8",
        "text/plain;charset=utf8",
        "utf8_string",
        "text/plain",
        "string",
    }

    def __init__(self, timeout: float = 1.5) -> None:
        self.timeout = timeout
        if os.environ.get("WAYLAND_DISPLAY") and shutil.which("wl-paste") and shutil.which("wl-copy"):
            self.tool = "wl-clipboard"
        elif shutil.which("xclip"):
            self.tool = "xclip"
        else:
            raise ClipboardUnavailableError("neither wl-clipboard nor xclip is available")

    def _read(self) -> ClipboardSnapshot:
        if self.tool == "wl-clipboard":
            types = self._parse_type_list(self._run_command(["wl-paste", "--list-types"]))

            def reader(target: str) -> Optional[bytes]:
                command = ["wl-paste", "--type", target]
                if target.lower().startswith("text/"):
                    command.append("--no-newline")
                return self._run_command(command)

            fallback = ["wl-paste", "--no-newline"]
        else:
            types = self._parse_type_list(
                self._run_command(["xclip", "-selection", "clipboard", "-t", "TARGETS", "-o"]))

            def reader(target: str) -> Optional[bytes]:
                return self._run_command(["xclip", "-selection", "clipboard", "-t", target, "-o"])

            fallback = ["xclip", "-selection", "clipboard", "-o"]

        snapshot = self._extract_from_types(types, reader)
        if snapshot.is_empty and not types:
            text = self._decode(self._run_command(fallback))
            snapshot = ClipboardSnapshot(text=text)
        return snapshot

    def _extract_from_types(self, types: List[str], reader: Reader) -> ClipboardSnapshot:
        lowered = {target.lower(): target for target in types}

        image, image_mime = None, "image/png"
        for target_lower, target in lowered.items():
            if target_lower in self._IMAGE_TARGETS:
                image = reader(target)
                if image:
                    image_mime = self._IMAGE_TARGETS[target_lower]
                    break

        return ClipboardSnapshot(
            text=self._decode(self._first(lowered, self._TEXT_TARGETS, reader)),
            url=self._parse_url_list(self._first(lowered, self._URL_TARGETS, reader)),
            html=self._first(lowered, self._HTML_TARGETS, reader),
            rtf=self._first(lowered, self._RTF_TARGETS, reader),
            image=image or None,
            image_mime=image_mime,
        )

    @staticmethod
    def _first(lowered, wanted, reader: Reader) -> Optional[bytes]:
        for target_lower, target in lowered.items():
            if target_lower in wanted:
                data = reader(target)
                if data:
                    return data
        return None

    @staticmethod
    def _decode(data: Optional[bytes]) -> Optional[str]:
        if not data:
            return None
        if data.startswith((b"\xff\xfe", b"\xfe\xff")):
            return data.decode("utf-16", errors="ignore")
        return data.decode("utf-8", errors="ignore")

    def _parse_url_list(self, data: Optional[bytes]) -> Optional[str]:
        text = self._decode(data)
        if not text:
            return None
        lines = [line.strip() for line in text.replace("\r", "\n").split("\n")]
        urls = [line for line in lines if line and not line.startswith("#")]
        # a single URL only; several files copied from a file manager are not a url entry
        return urls[0] if len(urls) == 1 else None

    def _parse_type_list(self, data: Optional[bytes]) -> List[str]:
        if not data:
            return []
        text = data.decode("utf-8", errors="ignore")
        return [line.strip() for line in text.splitlines() if line.strip()]

    def _run_command(self, command: List[str]) -> Optional[bytes]:
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
                timeout=self.timeout,
            )
            return result.stdout
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, FileNotFoundError):
            return None

    def _write(self, content: ClipboardContent) -> None:
        kind = content.data_type
        if kind is DataType.TEXT or kind is DataType.URL:
            mime = "text/plain;charset=utf-8"
        elif kind is DataType.HTML:
            mime = "text/html"
        elif kind is DataType.RTF:
            mime = "text/rtf"
        else:
            mime = content.mime

        if self.tool == "wl-clipboard":
            command = ["wl-copy", "--type", mime]
        else:
            command = ["xclip", "-selection", "clipboard", "-t", mime, "-i"]

        try:
            # both tools fork a background owner for the selection; do not wait on its pipes
            subprocess.run(
                command,
                input=content.payload,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=True,
                timeout=2.0,
            )
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, FileNotFoundError) as exc:
            raise ClipboardWriteError(f"{command[0]} failed: {exc}") from exc
