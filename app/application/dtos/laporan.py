"""DTOs for laporan use cases (no dependency on ORM)."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from app.application.dtos.attachment import AttachmentView, RawFile
from app.domain.enums import AssetType, AttachmentCategory, LaporanStatus, PoType


@dataclass(frozen=True)
class LaporanCreate:
    """Input for creating a laporan (write-model). Workflow state is not part of it."""

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
    po_type: PoType | str | None = None
    asset_type: AssetType | str | None = None
    total_amount_idr: Decimal | int | str = Decimal("0")
    total_amount_original_currency: Decimal | int | str = Decimal("0")
    request_date: date | str | None = None
    delivery_date: date | str | None = None
    assign_to: str | None = None


@dataclass(frozen=True)
class LaporanUpdate:
    """Partial update: only keys present in ``fields`` are written.

    ``status`` is a transition request, honoured only for rejected -> resubmitted.
    """

    fields: dict[str, Any] = field(default_factory=dict)
    status: LaporanStatus | None = None


@dataclass(frozen=True)
class LaporanFiles:
    """Raw uploads per attachment category. Empty lists mean nothing to store."""

    need_approve_files: list[RawFile] = field(default_factory=list)
    no_need_approve_files: list[RawFile] = field(default_factory=list)

    def by_category(self) -> dict[AttachmentCategory, list[RawFile]]:
        return {
            AttachmentCategory.NEED_APPROVE: list(self.need_approve_files),
            AttachmentCategory.NO_NEED_APPROVE: list(self.no_need_approve_files),
        }

    def is_empty(self) -> bool:
        return not self.need_approve_files and not self.no_need_approve_files


@dataclass(frozen=True)
class LaporanView:
    """Laporan read-model returned to callers; attachments carry signed URLs."""

    id: str
    title: str
    request_id: str | None
    request_name: str | None
    company_code: str | None
    request_objective: str | None
    request_background: str | None
    remarks: str | None
    department: str | None
    buyer: str | None
    currency: str | None
    po_type: PoType | None
    asset_type: AssetType | None
    total_amount_idr: Decimal
    total_amount_original_currency: Decimal
    request_date: date | None
    delivery_date: date | None
    assign_to: str | None
    need_approve_files: list[AttachmentView]
    no_need_approve_files: list[AttachmentView]
    status: LaporanStatus
    em_approved: bool
    user_approved: bool
    vendor_approved: bool
    reject_reason: str | None
    rejected_at: datetime | None
    rejected_by: str | None
    resubmission_count: int
    version: int
    created_at: datetime | None
    updated_at: datetime | None
