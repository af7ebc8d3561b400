"""Laporan domain entity (aggregate root of the approval workflow).

Holds every status transition rule so that use cases cannot leave a
laporan in a mixed state. Independent of persistence and file storage.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from types import MappingProxyType
from typing import Any

from app.domain.enums import (
    ApprovalRole,
    AssetType,
    AttachmentCategory,
    LaporanStatus,
    PoType,
)
from app.domain.exceptions import (
    UnknownApprovalRoleException,
    ValidationException,
    WorkflowRuleViolationException,
)
from app.domain.value_objects.attachment import Attachment

APPROVAL_FLAGS: tuple[str, ...] = ("em_approved", "user_approved", "vendor_approved")

# Both flags must be set before a laporan counts as approved.
REQUIRED_APPROVAL_FLAGS: tuple[str, ...] = ("em_approved", "user_approved")

DEFAULT_APPROVAL_FIELDS: Mapping[ApprovalRole, str] = MappingProxyType(
    {
        ApprovalRole.EM: "em_approved",
        ApprovalRole.USER: "user_approved",
        ApprovalRole.VENDOR: "vendor_approved",
    }
)

TEXT_FIELDS: frozenset[str] = frozenset(
    {
        "request_id",
        "title",
        "request_name",
        "company_code",
        "request_objective",
        "request_background",
        "remarks",
        "department",
        "buyer",
        "currency",
        "assign_to",
    }
)
AMOUNT_FIELDS: frozenset[str] = frozenset(
    {"total_amount_idr", "total_amount_original_currency"}
)
DATE_FIELDS: frozenset[str] = frozenset({"request_date", "delivery_date"})
ENUM_FIELDS: Mapping[str, type[Enum]] = MappingProxyType(
    {"po_type": PoType, "asset_type": AssetType}
)
NON_NULLABLE_FIELDS: frozenset[str] = frozenset({"title"} | AMOUNT_FIELDS)

# Fields a caller may set on create/update. Workflow state is never in here.
EDITABLE_FIELDS: frozenset[str] = (
    TEXT_FIELDS | AMOUNT_FIELDS | DATE_FIELDS | frozenset(ENUM_FIELDS)
)


def _to_enum(enum_cls: type[Enum], value: Any, name: str) -> Enum:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as e:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationException(
            f"Invalid {name}: {value!r}. Allowed: {allowed}", field=name
        ) from e


def _to_amount(value: Any, name: str) -> Decimal:
    if isinstance(value, bool):
        raise ValidationException(f"{name} must be numeric", field=name)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise ValidationException(f"{name} must be numeric", field=name) from e
    if not amount.is_finite():
        raise ValidationException(f"{name} must be numeric", field=name)
    if amount < 0:
        raise ValidationException(f"{name} must not be negative", field=name)
    return amount


def _to_date(value: Any, name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError as e:
            raise ValidationException(
                f"{name} must be an ISO date (YYYY-MM-DD)", field=name
            ) from e
    raise ValidationException(f"{name} must be an ISO date (YYYY-MM-DD)", field=name)


def coerce_field(name: str, value: Any) -> Any:
    """Normalize one editable field value; raise ValidationException if malformed."""
    if value is None:
        if name in NON_NULLABLE_FIELDS:
            raise ValidationException(f"{name} is required", field=name)
        return None
    if name in ENUM_FIELDS:
        return _to_enum(ENUM_FIELDS[name], value, name)
    if name in AMOUNT_FIELDS:
        return _to_amount(value, name)
    if name in DATE_FIELDS:
        return _to_date(value, name)
    if name in TEXT_FIELDS:
        if not isinstance(value, str):
            raise ValidationException(f"{name} must be a string", field=name)
        return value
    raise ValidationException(f"Unknown laporan field: {name}", field=name)


@dataclass
class LaporanEntity:
    """Procurement request moving through the EM/USER approval workflow.

    Invariants kept by the transition methods:
    - resubmission_count only grows, and only when leaving ``rejected``.
    - the three approval flags are cleared together whenever status becomes
      ``rejected`` or ``resubmitted``.
    - ``approved`` implies em_approved and user_approved.
    - attachment lists are append-only; attachments never move between them.
    """

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
    total_amount_idr: Decimal = Decimal("0")
    total_amount_original_currency: Decimal = Decimal("0")
    request_date: date | None = None
    delivery_date: date | None = None
    assign_to: str | None = None
    need_approve_files: list[Attachment] = field(default_factory=list)
    no_need_approve_files: list[Attachment] = field(default_factory=list)
    status: LaporanStatus = LaporanStatus.ENTRY
    em_approved: bool = False
    user_approved: bool = False
    vendor_approved: bool = False
    reject_reason: str | None = None
    rejected_at: datetime | None = None
    rejected_by: str | None = None
    resubmission_count: int = 0
    version: int = 1
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        for name in EDITABLE_FIELDS:
            setattr(self, name, coerce_field(name, getattr(self, name)))
        self.status = LaporanStatus(self.status)
        self.validate()

    def validate(self) -> None:
        """Validate laporan business rules. Raises ValidationException if invalid."""
        if not self.id:
            raise ValidationException("Laporan ID is required", field="id")
        if not self.title or not self.title.strip():
            raise ValidationException("title is required", field="title")
        if self.resubmission_count < 0:
            raise ValidationException(
                "resubmission_count must not be negative", field="resubmission_count"
            )

    # ---- Fields and attachments ----

    def apply_changes(self, changes: Mapping[str, Any]) -> None:
        """Set editable fields. Workflow state and unknown names are rejected."""
        not_editable = sorted(set(changes) - EDITABLE_FIELDS)
        if not_editable:
            raise ValidationException(
                f"Fields cannot be updated: {', '.join(not_editable)}",
                field=not_editable[0],
            )
        for name, value in changes.items():
            setattr(self, name, coerce_field(name, value))
        self.validate()

    def attachments(self, category: AttachmentCategory) -> list[Attachment]:
        """Return the attachment list of one category."""
        if category is AttachmentCategory.NEED_APPROVE:
            return self.need_approve_files
        return self.no_need_approve_files

    def all_attachments(self) -> list[Attachment]:
        """Return every attachment the laporan owns (both categories)."""
        return [*self.need_approve_files, *self.no_need_approve_files]

    def append_attachments(
        self, category: AttachmentCategory, new_attachments: Sequence[Attachment]
    ) -> None:
        """Append stored attachments to one category; existing ones are kept as-is."""
        for attachment in new_attachments:
            if attachment.category is not category:
                raise ValidationException(
                    f"Attachment {attachment.storage_key} belongs to {attachment.category.value}, "
                    f"not {category.value}",
                    field=category.value,
                )
        if category is AttachmentCategory.NEED_APPROVE:
            self.need_approve_files = [*self.need_approve_files, *new_attachments]
        else:
            self.no_need_approve_files = [*self.no_need_approve_files, *new_attachments]

    # ---- Workflow ----

    def has_required_approvals(self) -> bool:
        """Return True when every approval needed for ``approved`` is set."""
        return all(getattr(self, flag) for flag in REQUIRED_APPROVAL_FLAGS)

    def submit(self) -> None:
        """entry -> submitted; resubmitted -> submitted once EM and USER approved."""
        if self.status is LaporanStatus.RESUBMITTED:
            if not self.has_required_approvals():
                raise WorkflowRuleViolationException(
                    "Resubmitted laporan must be approved by EM and USER before submission",
                    self.id,
                    self.status.value,
                    "submit",
                )
        elif self.status is not LaporanStatus.ENTRY:
            raise WorkflowRuleViolationException(
                f"Laporan cannot be submitted with status {self.status.value}",
                self.id,
                self.status.value,
                "submit",
            )
        self.status = LaporanStatus.SUBMITTED

    def approve(
        self,
        role: ApprovalRole,
        approval_fields: Mapping[ApprovalRole, str] = DEFAULT_APPROVAL_FIELDS,
    ) -> None:
        """Set the approval flag mapped to role.

        Outside ``resubmitted``, EM and USER approval together move the laporan
        to ``approved``. A resubmitted laporan keeps its status until submit().
        """
        flag = approval_fields.get(role)
        if flag is None:
            raise UnknownApprovalRoleException(getattr(role, "value", str(role)))
        if flag not in APPROVAL_FLAGS:
            raise ValueError(f"Approval table maps {role} to unknown field {flag!r}")
        if self.status is LaporanStatus.REJECTED:
            raise WorkflowRuleViolationException(
                "Rejected laporan must be resubmitted before it can be approved",
                self.id,
                self.status.value,
                "approve",
            )
        setattr(self, flag, True)
        if self.status is not LaporanStatus.RESUBMITTED and self.has_required_approvals():
            self.status = LaporanStatus.APPROVED

    def reject(self, reason: str, actor_id: str, at: datetime) -> None:
        """Move to ``rejected``, record who/why/when and clear every approval."""
        if self.status is LaporanStatus.REJECTED:
            raise WorkflowRuleViolationException(
                "Laporan is already rejected",
                self.id,
                self.status.value,
                "reject",
            )
        if not reason or not reason.strip():
            raise ValidationException("Reject reason is required", field="reason")
        self.status = LaporanStatus.REJECTED
        self.reject_reason = reason
        self.rejected_by = actor_id
        self.rejected_at = at
        self._reset_approvals()

    def resubmit(self) -> bool:
        """Move to ``resubmitted`` from any status.

        Returns True when the resubmission counter was incremented, which
        happens only when the previous status was ``rejected``.
        """
        counted = self.status is LaporanStatus.REJECTED
        self.status = LaporanStatus.RESUBMITTED
        if counted:
            self.resubmission_count += 1
        self.reject_reason = None
        self.rejected_at = None
        self.rejected_by = None
        self._reset_approvals()
        return counted

    def request_status(self, requested: LaporanStatus) -> None:
        """Status change requested through a generic update.

        Only rejected -> resubmitted is honoured; asking for the current
        status is a no-op.
        """
        if requested is self.status:
            return
        if requested is LaporanStatus.RESUBMITTED and self.status is LaporanStatus.REJECTED:
            self.resubmit()
            return
        raise WorkflowRuleViolationException(
            f"Status cannot change from {self.status.value} to {requested.value} through update",
            self.id,
            self.status.value,
            "update",
        )

    def _reset_approvals(self) -> None:
        for flag in APPROVAL_FLAGS:
            setattr(self, flag, False)
