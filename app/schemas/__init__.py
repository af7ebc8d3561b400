"""Pydantic request/response schemas for the API."""

from app.schemas.health import HealthResponse, ReadinessErrorResponse, ReadinessResponse
from app.schemas.laporan import (
    AttachmentResponse,
    LaporanCreateRequest,
    LaporanFieldsRequest,
    LaporanResponse,
    LaporanUpdateRequest,
    RejectRequest,
)

__all__ = [
    "AttachmentResponse",
    "HealthResponse",
    "LaporanCreateRequest",
    "LaporanFieldsRequest",
    "LaporanResponse",
    "LaporanUpdateRequest",
    "ReadinessErrorResponse",
    "ReadinessResponse",
    "RejectRequest",
]
