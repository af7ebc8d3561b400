"""Application DTOs: plain dataclasses passed between use cases and adapters."""

from app.application.dtos.attachment import AttachmentView, RawFile
from app.application.dtos.laporan import (
    LaporanCreate,
    LaporanFiles,
    LaporanUpdate,
    LaporanView,
)

__all__ = [
    "AttachmentView",
    "LaporanCreate",
    "LaporanFiles",
    "LaporanUpdate",
    "LaporanView",
    "RawFile",
]
