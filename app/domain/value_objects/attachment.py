"""Attachment value object: a stored file reference owned by a laporan."""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from app.domain.enums import AttachmentCategory


@dataclass(frozen=True)
class Attachment:
    """Immutable record of one uploaded file.

    Keeps the raw-upload metadata (original name, field name, encoding) so the
    attachment can be described again without the original request. Never
    carries a URL; URLs are signed on read.
    """

    name: str
    storage_key: str
    size: int
    mime_type: str
    category: AttachmentCategory
    checksum: str | None = None
    original_name: str | None = None
    field_name: str | None = None
    encoding: str | None = None
    uploaded_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the JSON column (enum and datetime as strings)."""
        data = asdict(self)
        data["category"] = self.category.value
        data["uploaded_at"] = self.uploaded_at.isoformat() if self.uploaded_at else None
        return data

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], default_category: AttachmentCategory
    ) -> "Attachment":
        """Rebuild from the JSON column.

        Rows written before category/checksum were stored only carry
        name and path; default_category fills the gap.
        """
        uploaded_at = data.get("uploaded_at")
        return cls(
            name=data.get("name") or data.get("original_name") or "unnamed-file",
            storage_key=data.get("storage_key") or data["path"],
            size=int(data.get("size") or 0),
            mime_type=data.get("mime_type") or "application/octet-stream",
            category=AttachmentCategory(data.get("category") or default_category.value),
            checksum=data.get("checksum"),
            original_name=data.get("original_name"),
            field_name=data.get("field_name"),
            encoding=data.get("encoding"),
            uploaded_at=datetime.fromisoformat(uploaded_at) if uploaded_at else None,
        )
