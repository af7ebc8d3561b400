"""Domain value objects and shared value types."""

from app.domain.value_objects.attachment import Attachment

__all__ = [
    "Attachment",
]
