"""Clipboard history: capture, persist and re-copy recent clipboard entries."""

from cliphistory.models import (
    ClipboardEntry,
    DataType,
    HtmlContent,
    ImageContent,
    RtfContent,
    TextContent,
    UrlContent,
)
from cliphistory.services import ClipboardService, ClipboardStore, CopiedIndicator

__version__ = "0.1.0"

__all__ = [
    'ClipboardEntry',
    'ClipboardService',
    'ClipboardStore',
    'CopiedIndicator',
    'DataType',
    'HtmlContent',
    'ImageContent',
    'RtfContent',
    'TextContent',
    'UrlContent',
]
