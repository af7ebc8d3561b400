"""Laporan ORM model. Request fields, workflow state and attachment lists."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    CuidMixin,
    TimestampMixin,
    VersionedMixin,
)


class Laporan(CuidMixin, TimestampMixin, VersionedMixin, Base):
    """Laporan entity. Table: laporan. Attachment lists are JSON arrays of attachment dicts."""

    __tablename__ = "laporan"

    request_id: Mapped[str | None] = mapped_column(String, nullable=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    request_name: Mapped[str | None] = mapped_column(String, nullable=True)
    company_code: Mapped[str | None] = mapped_column(String, nullable=True)
    request_objective: Mapped[str | None] = mapped_column(Text, nullable=True)
    request_background: Mapped[str | None] = mapped_column(Text, nullable=True)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    department: Mapped[str | None] = mapped_column(String, nullable=True)
    buyer: Mapped[str | None] = mapped_column(String, nullable=True)
    currency: Mapped[str | None] = mapped_column(String(8), nullable=True)
    po_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    asset_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    total_amount_idr: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, server_default=text("0")
    )
    total_amount_original_currency: Mapped[Decimal] = mapped_column(
        Numeric(18, 2), nullable=False, server_default=text("0")
    )
    request_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    delivery_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    assign_to: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True, index=True
    )
    need_approve_files: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    no_need_approve_files: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, server_default=text("'entry'")
    )
    em_approved: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    user_approved: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    vendor_approved: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    reject_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    rejected_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    rejected_by: Mapped[str | None] = mapped_column(String, nullable=True)
    resubmission_count: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )

    __table_args__ = (
        Index("ix_laporan_status_created_at", "status", "created_at"),
        Index("ix_laporan_created_at", "created_at"),
        CheckConstraint(
            "status IN ('entry', 'submitted', 'approved', 'rejected', 'resubmitted')",
            name="ck_laporan_status",
        ),
        CheckConstraint("resubmission_count >= 0", name="ck_laporan_resubmission_count"),
        CheckConstraint(
            "status <> 'approved' OR (em_approved AND user_approved)",
            name="ck_laporan_approved_flags",
        ),
    )
