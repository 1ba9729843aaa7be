import datetime
import enum
from dataclasses import dataclass, field
from typing import ClassVar, Optional, Union
from urllib.parse import ParseResult, urlparse

import ulid

from cliphistory.errors import InvalidContentError


class DataType(str, enum.Enum):
    TEXT = "text"
    IMAGE = "image"
    URL = "url"
    HTML = "html"
    RTF = "rtf"


URL_SCHEMES = frozenset({"http", "https", "ftp", "file", "mailto"})


def parse_url(value: str) -> Optional[ParseResult]:
    """Parse ``value`` as an absolute URL, or return ``None``.

    Only a single whitespace-free token with a known scheme qualifies.
    Network schemes also need a host; ``mailto`` and ``file`` need a path.
    """
    if not isinstance(value, str):
        return None
    candidate = value.strip()
    if not candidate or any(ch.isspace() for ch in candidate):
        return None

    parsed = urlparse(candidate)
    scheme = parsed.scheme.lower()
    if scheme not in URL_SCHEMES:
        return None
    if scheme in ("mailto", "file"):
        return parsed if parsed.path else None
    return parsed if parsed.netloc else None


def _as_bytes(value, kind: str) -> bytes:
    if isinstance(value, (bytearray, memoryview)):
        value = bytes(value)
    if not isinstance(value, bytes) or not value:
        raise InvalidContentError(f"{kind} content needs a non-empty byte payload")
    return value


@dataclass(frozen=True)
class TextContent:
    text: str

    data_type: ClassVar[DataType] = DataType.TEXT

    def __post_init__(self) -> None:
        if not isinstance(self.text, str) or not self.text:
            raise InvalidContentError("text content needs a non-empty string")

    @property
    def payload(self) -> bytes:
        return self.text.encode("utf-8")


@dataclass(frozen=True)
class ImageContent:
    data: bytes
    mime: str = "image/png"

    data_type: ClassVar[DataType] = DataType.IMAGE

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", _as_bytes(self.data, "image"))
        if not self.mime.startswith("image/"):
            raise InvalidContentError(f"not an image mime type: {self.mime!r}")

    @property
    def payload(self) -> bytes:
        return self.data


@dataclass(frozen=True)
class UrlContent:
    url: str

    data_type: ClassVar[DataType] = DataType.URL

    def __post_init__(self) -> None:
        if parse_url(self.url) is None:
            raise InvalidContentError(f"not an absolute URL: {self.url!r}")
        object.__setattr__(self, "url", self.url.strip())

    @property
    def parsed(self) -> ParseResult:
        return urlparse(self.url)

    @property
    def payload(self) -> bytes:
        return self.url.encode("utf-8")


@dataclass(frozen=True)
class HtmlContent:
    data: bytes

    data_type: ClassVar[DataType] = DataType.HTML

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", _as_bytes(self.data, "html"))

    @property
    def markup(self) -> str:
        return self.data.decode("utf-8", errors="replace")

    @property
    def payload(self) -> bytes:
        return self.data


@dataclass(frozen=True)
class RtfContent:
    data: bytes

    data_type: ClassVar[DataType] = DataType.RTF

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", _as_bytes(self.data, "rtf"))

    @property
    def payload(self) -> bytes:
        return self.data


ClipboardContent = Union[TextContent, ImageContent, UrlContent, HtmlContent, RtfContent]

CONTENT_TYPES = {
    DataType.TEXT: TextContent,
    DataType.IMAGE: ImageContent,
    DataType.URL: UrlContent,
    DataType.HTML: HtmlContent,
    DataType.RTF: RtfContent,
}


def new_entry_id() -> str:
    return f"e_{ulid.new()}"


@dataclass(frozen=True)
class ClipboardEntry:
    """One clipboard snapshot: a single typed payload plus its capture time.

    The payload lives in ``content``, which is exactly one of the content
    variants above, so an entry can never carry two payloads at once. The
    per-type accessors return ``None`` for every type but its own.
    """
    content: ClipboardContent
    id: str = field(default_factory=new_entry_id)
    timestamp: datetime.datetime = field(default_factory=datetime.datetime.now)

    def __post_init__(self) -> None:
        if not isinstance(self.content, tuple(CONTENT_TYPES.values())):
            raise InvalidContentError(
                f"unsupported clipboard content: {type(self.content).__name__}")

    @property
    def data_type(self) -> DataType:
        return self.content.data_type

    @property
    def text(self) -> Optional[str]:
        return self.content.text if isinstance(self.content, TextContent) else None

    @property
    def image_data(self) -> Optional[bytes]:
        return self.content.data if isinstance(self.content, ImageContent) else None

    @property
    def url(self) -> Optional[str]:
        return self.content.url if isinstance(self.content, UrlContent) else None

    @property
    def html_data(self) -> Optional[bytes]:
        return self.content.data if isinstance(self.content, HtmlContent) else None

    @property
    def rtf_data(self) -> Optional[bytes]:
        return self.content.data if isinstance(self.content, RtfContent) else None
