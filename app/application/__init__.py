"""Application layer: interfaces, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repositories, storage).
"""

from app.application.interfaces import (
    ILaporanRepository,
    IStorageService,
    IUserDirectory,
)
from app.application.services.attachment_mapper import AttachmentMapper
from app.application.use_cases.laporan import (
    LaporanQueryService,
    LaporanWorkflowService,
)

__all__ = [
    "AttachmentMapper",
    "ILaporanRepository",
    "IStorageService",
    "IUserDirectory",
    "LaporanQueryService",
    "LaporanWorkflowService",
]
