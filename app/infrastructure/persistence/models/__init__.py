"""Persistence models: ORM entities and mixins."""

from app.infrastructure.persistence.models.laporan import Laporan
from app.infrastructure.persistence.models.mixins import (
    CuidMixin,
    TimestampMixin,
    VersionedMixin,
)
from app.infrastructure.persistence.models.user import User

__all__ = [
    "CuidMixin",
    "Laporan",
    "TimestampMixin",
    "User",
    "VersionedMixin",
]
