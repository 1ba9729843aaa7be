from cliphistory.models.entry import (
    CONTENT_TYPES,
    ClipboardContent,
    ClipboardEntry,
    DataType,
    HtmlContent,
    ImageContent,
    RtfContent,
    TextContent,
    UrlContent,
    parse_url,
)

__all__ = [
    'CONTENT_TYPES',
    'ClipboardContent',
    'ClipboardEntry',
    'DataType',
    'HtmlContent',
    'ImageContent',
    'RtfContent',
    'TextContent',
    'UrlContent',
    'parse_url',
]
