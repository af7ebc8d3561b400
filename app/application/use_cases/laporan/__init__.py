"""Laporan use cases: workflow (write) and query (read)."""

from app.application.use_cases.laporan.laporan_query import LaporanQueryService
from app.application.use_cases.laporan.laporan_workflow import (
    LaporanWorkflowService,
    parse_approval_role,
)
from app.application.use_cases.laporan.presenter import present_laporan, present_many

__all__ = [
    "LaporanQueryService",
    "LaporanWorkflowService",
    "parse_approval_role",
    "present_laporan",
    "present_many",
]
