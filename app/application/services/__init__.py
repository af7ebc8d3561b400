"""Application services: attachment storage and presentation."""

from app.application.services.attachment_mapper import (
    FIELD_NAMES,
    AttachmentMapper,
    StorageKeyClock,
)

__all__ = [
    "FIELD_NAMES",
    "AttachmentMapper",
    "StorageKeyClock",
]
