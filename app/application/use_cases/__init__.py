"""Application use cases: one entry point per workflow."""

from app.application.use_cases.laporan import (
    LaporanQueryService,
    LaporanWorkflowService,
)

__all__ = [
    "LaporanQueryService",
    "LaporanWorkflowService",
]
