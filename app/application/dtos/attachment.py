"""DTOs for attachment handling (no dependency on ORM or HTTP)."""

from dataclasses import dataclass
from datetime import datetime

from app.domain.enums import AttachmentCategory


@dataclass(frozen=True)
class RawFile:
    """One uploaded file as received from the caller, before storage."""

    filename: str
    content: bytes
    mime_type: str = "application/octet-stream"
    field_name: str | None = None
    encoding: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class AttachmentView:
    """Attachment read-model with a freshly signed download URL."""

    name: str
    storage_key: str
    size: int
    mime_type: str
    category: AttachmentCategory
    url: str | None
    expires_in_seconds: int
    checksum: str | None = None
    original_name: str | None = None
    field_name: str | None = None
    encoding: str | None = None
    uploaded_at: datetime | None = None
