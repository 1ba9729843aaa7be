"""Map a raw clipboard snapshot to exactly one content variant.

When the clipboard offers several representations the first match in this
order wins: image, url, html, rtf, text. Explicit URL representations and
plain text that is a lone absolute URL both count as a url.
"""

import logging
from typing import Optional

from cliphistory.clipboard.base import ClipboardSnapshot
from cliphistory.models import (
    ClipboardContent,
    HtmlContent,
    ImageContent,
    RtfContent,
    TextContent,
    UrlContent,
    parse_url,
)

logger = logging.getLogger(__name__)


def classify(snapshot: ClipboardSnapshot) -> Optional[ClipboardContent]:
    if snapshot.image:
        return ImageContent(data=snapshot.image, mime=snapshot.image_mime or "image/png")

    for candidate in (snapshot.url, snapshot.text):
        if candidate and parse_url(candidate) is not None:
            return UrlContent(url=candidate)

    if snapshot.html and snapshot.html.strip():
        return HtmlContent(data=snapshot.html)

    if snapshot.rtf and snapshot.rtf.strip():
        return RtfContent(data=snapshot.rtf)

    if snapshot.text and snapshot.text.strip():
        return TextContent(text=snapshot.text)

    if not snapshot.is_empty:
        logger.debug(f"Clipboard snapshot had nothing recordable: {snapshot!r}")
    return None
