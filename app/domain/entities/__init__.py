"""Domain entities and aggregates.

Pure domain models; no ORM or persistence concerns.
"""

from app.domain.entities.laporan import (
    DEFAULT_APPROVAL_FIELDS,
    EDITABLE_FIELDS,
    LaporanEntity,
)

__all__ = [
    "DEFAULT_APPROVAL_FIELDS",
    "EDITABLE_FIELDS",
    "LaporanEntity",
]
