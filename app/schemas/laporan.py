"""Laporan API schemas."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.domain.enums import AssetType, AttachmentCategory, LaporanStatus, PoType


class LaporanFieldsRequest(BaseModel):
    """Editable laporan fields; all optional (partial update semantics)."""

    model_config = ConfigDict(extra="forbid")

    request_id: str | None = Field(default=None, max_length=64)
    title: str | None = Field(default=None, min_length=1, max_length=255)
    request_name: str | None = Field(default=None, max_length=255)
    company_code: str | None = Field(default=None, max_length=32)
    request_objective: str | None = None
    request_background: str | None = None
    remarks: str | None = None
    department: str | None = Field(default=None, max_length=128)
    buyer: str | None = Field(default=None, max_length=128)
    currency: str | None = Field(default=None, max_length=8)
    po_type: PoType | None = None
    asset_type: AssetType | None = None
    total_amount_idr: Decimal | None = Field(default=None, ge=0)
    total_amount_original_currency: Decimal | None = Field(default=None, ge=0)
    request_date: date | None = None
    delivery_date: date | None = None
    assign_to: str | None = None


class LaporanCreateRequest(LaporanFieldsRequest):
    """JSON ``payload`` form field of POST /laporan."""

    title: str = Field(..., min_length=1, max_length=255)
    total_amount_idr: Decimal = Field(default=Decimal("0"), ge=0)
    total_amount_original_currency: Decimal = Field(default=Decimal("0"), ge=0)


class LaporanUpdateRequest(LaporanFieldsRequest):
    """JSON ``payload`` form field of PATCH /laporan/{id}.

    status is accepted only as the rejected -> resubmitted request.
    """

    status: LaporanStatus | None = None


class RejectRequest(BaseModel):
    """Request body for POST /laporan/{id}/reject."""

    reason: str = Field(..., min_length=1, max_length=2000)


class AttachmentResponse(BaseModel):
    """Stored attachment with a freshly signed download URL."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    storage_key: str
    size: int
    mime_type: str
    category: AttachmentCategory
    url: str | None
    expires_in_seconds: int
    checksum: str | None = None
    original_name: str | None = None
    field_name: str | None = None
    encoding: str | None = None
    uploaded_at: datetime | None = None


class LaporanResponse(BaseModel):
    """Laporan with workflow state and attachment views."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    request_id: str | None = None
    request_name: str | None = None
    company_code: str | None = None
    request_objective: str | None = None
    request_background: str | None = None
    remarks: str | None = None
    department: str | None = None
    buyer: str | None = None
    currency: str | None = None
    po_type: PoType | None = None
    asset_type: AssetType | None = None
    total_amount_idr: Decimal
    total_amount_original_currency: Decimal
    request_date: date | None = None
    delivery_date: date | None = None
    assign_to: str | None = None
    need_approve_files: list[AttachmentResponse] = Field(default_factory=list)
    no_need_approve_files: list[AttachmentResponse] = Field(default_factory=list)
    status: LaporanStatus
    em_approved: bool
    user_approved: bool
    vendor_approved: bool
    reject_reason: str | None = None
    rejected_at: datetime | None = None
    rejected_by: str | None = None
    resubmission_count: int
    version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
