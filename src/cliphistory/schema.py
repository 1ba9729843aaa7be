import base64
import binascii
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from cliphistory.errors import InvalidContentError
from cliphistory.models import CONTENT_TYPES, ClipboardEntry, DataType, ImageContent

RECORD_VERSION = 1
_TEXTUAL = (DataType.TEXT, DataType.URL)


class EntryRecord(BaseModel):
    """Persisted form of a ClipboardEntry; binary payloads are base64."""
    model_config = ConfigDict(extra="ignore")

    id: str
    type: DataType
    timestamp: datetime
    payload: str
    mime: Optional[str] = None

    @classmethod
    def from_entry(cls, entry: ClipboardEntry) -> "EntryRecord":
        content = entry.content
        if entry.data_type is DataType.TEXT:
            payload = content.text
        elif entry.data_type is DataType.URL:
            payload = content.url
        else:
            payload = base64.b64encode(content.payload).decode("ascii")

        return cls(
            id=entry.id,
            type=entry.data_type,
            timestamp=entry.timestamp,
            payload=payload,
            mime=content.mime if isinstance(content, ImageContent) else None,
        )

    def to_entry(self) -> ClipboardEntry:
        content_class = CONTENT_TYPES[self.type]
        if self.type in _TEXTUAL:
            content = content_class(self.payload)
        else:
            try:
                data = base64.b64decode(self.payload, validate=True)
            except binascii.Error as exc:
                raise InvalidContentError(f"record {self.id}: payload is not base64") from exc
            if self.type is DataType.IMAGE:
                content = ImageContent(data=data, mime=self.mime or "image/png")
            else:
                content = content_class(data)
        return ClipboardEntry(content=content, id=self.id, timestamp=self.timestamp)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


def entry_to_record(entry: ClipboardEntry) -> Dict[str, Any]:
    return EntryRecord.from_entry(entry).to_dict()


def record_to_entry(record: Any) -> ClipboardEntry:
    """Rebuild an entry from a persisted record.

    Raises:
        InvalidContentError: the record is malformed or its payload breaks
            the content invariants.
    """
    try:
        return EntryRecord.model_validate(record).to_entry()
    except ValidationError as exc:
        raise InvalidContentError(f"malformed history record: {exc.error_count()} error(s)") from exc
