"""LaporanEntity state machine and field coercion."""

from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from app.domain.entities.laporan import LaporanEntity
from app.domain.enums import ApprovalRole, AssetType, AttachmentCategory, LaporanStatus, PoType
from app.domain.exceptions import (
    UnknownApprovalRoleException,
    ValidationException,
    WorkflowRuleViolationException,
)
from app.domain.value_objects.attachment import Attachment

REJECTED_AT = datetime(2024, 3, 1, 9, 30, tzinfo=UTC)


def _laporan(**overrides) -> LaporanEntity:
    return LaporanEntity(id=overrides.pop("id", "lap1"), title=overrides.pop("title", "Laptop"), **overrides)


def _attachment(key: str, category: AttachmentCategory) -> Attachment:
    return Attachment(name=key, storage_key=f"{category.value}/{key}", size=1, mime_type="text/plain", category=category)


def test_new_laporan_defaults() -> None:
    laporan = _laporan()
    assert laporan.status is LaporanStatus.ENTRY
    assert (laporan.em_approved, laporan.user_approved, laporan.vendor_approved) == (False, False, False)
    assert laporan.resubmission_count == 0
    assert laporan.total_amount_idr == Decimal("0")


def test_fields_are_coerced() -> None:
    laporan = _laporan(
        po_type="purchase_order",
        asset_type="consumable",
        total_amount_idr="1500000.50",
        request_date="2024-02-10",
        delivery_date="2024-02-20T08:00:00",
    )
    assert laporan.po_type is PoType.PURCHASE_ORDER
    assert laporan.asset_type is AssetType.CONSUMABLE
    assert laporan.total_amount_idr == Decimal("1500000.50")
    assert laporan.request_date == date(2024, 2, 10)
    assert laporan.delivery_date == date(2024, 2, 20)


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("po_type", "lease"),
        ("total_amount_idr", "abc"),
        ("total_amount_idr", -1),
        ("total_amount_original_currency", True),
        ("request_date", "10/02/2024"),
    ],
)
def test_invalid_field_values_raise_validation(field: str, value: object) -> None:
    with pytest.raises(ValidationException) as exc_info:
        _laporan(**{field: value})
    assert exc_info.value.details["field"] == field


def test_blank_title_is_rejected() -> None:
    with pytest.raises(ValidationException):
        _laporan(title="   ")


def test_apply_changes_rejects_workflow_state() -> None:
    laporan = _laporan()
    with pytest.raises(ValidationException) as exc_info:
        laporan.apply_changes({"status": "approved", "title": "New"})
    assert exc_info.value.details["field"] == "status"
    assert laporan.title == "Laptop"


def test_apply_changes_sets_editable_fields() -> None:
    laporan = _laporan()
    laporan.apply_changes({"buyer": "Andi", "total_amount_idr": 10, "remarks": None})
    assert laporan.buyer == "Andi"
    assert laporan.total_amount_idr == Decimal("10")


def test_submit_from_entry() -> None:
    laporan = _laporan()
    laporan.submit()
    assert laporan.status is LaporanStatus.SUBMITTED


def test_submit_twice_is_a_workflow_violation() -> None:
    laporan = _laporan(status=LaporanStatus.SUBMITTED)
    with pytest.raises(WorkflowRuleViolationException) as exc_info:
        laporan.submit()
    assert exc_info.value.details == {"laporan_id": "lap1", "status": "submitted", "action": "submit"}


def test_em_and_user_approval_moves_to_approved() -> None:
    laporan = _laporan(status=LaporanStatus.SUBMITTED)
    laporan.approve(ApprovalRole.EM)
    assert laporan.status is LaporanStatus.SUBMITTED
    laporan.approve(ApprovalRole.USER)
    assert laporan.status is LaporanStatus.APPROVED
    assert laporan.em_approved and laporan.user_approved


def test_vendor_approval_never_changes_status() -> None:
    laporan = _laporan(status=LaporanStatus.SUBMITTED)
    laporan.approve(ApprovalRole.VENDOR)
    laporan.approve(ApprovalRole.EM)
    assert laporan.vendor_approved
    assert laporan.status is LaporanStatus.SUBMITTED


def test_repeat_approval_is_idempotent() -> None:
    laporan = _laporan(status=LaporanStatus.SUBMITTED)
    laporan.approve(ApprovalRole.EM)
    laporan.approve(ApprovalRole.EM)
    assert laporan.em_approved
    assert not laporan.user_approved
    assert laporan.status is LaporanStatus.SUBMITTED


def test_approve_with_role_missing_from_table() -> None:
    laporan = _laporan(status=LaporanStatus.SUBMITTED)
    with pytest.raises(UnknownApprovalRoleException):
        laporan.approve(ApprovalRole.VENDOR, {ApprovalRole.EM: "em_approved"})
    assert not laporan.vendor_approved


def test_approve_rejected_laporan_is_refused() -> None:
    laporan = _laporan(status=LaporanStatus.REJECTED)
    with pytest.raises(WorkflowRuleViolationException):
        laporan.approve(ApprovalRole.EM)
    assert not laporan.em_approved


def test_reject_records_metadata_and_clears_flags() -> None:
    laporan = _laporan(status=LaporanStatus.SUBMITTED, em_approved=True, vendor_approved=True)
    laporan.reject("Budget exceeded", "user-em", REJECTED_AT)
    assert laporan.status is LaporanStatus.REJECTED
    assert laporan.reject_reason == "Budget exceeded"
    assert laporan.rejected_by == "user-em"
    assert laporan.rejected_at == REJECTED_AT
    assert not (laporan.em_approved or laporan.user_approved or laporan.vendor_approved)


def test_reject_twice_is_a_workflow_violation() -> None:
    laporan = _laporan(status=LaporanStatus.REJECTED, reject_reason="first")
    with pytest.raises(WorkflowRuleViolationException):
        laporan.reject("second", "user-user", REJECTED_AT)
    assert laporan.reject_reason == "first"


def test_reject_requires_reason() -> None:
    laporan = _laporan(status=LaporanStatus.SUBMITTED)
    with pytest.raises(ValidationException):
        laporan.reject("  ", "user-em", REJECTED_AT)
    assert laporan.status is LaporanStatus.SUBMITTED


def test_resubmit_from_rejected_counts_once() -> None:
    laporan = _laporan(status=LaporanStatus.SUBMITTED)
    laporan.reject("Missing quote", "user-user", REJECTED_AT)

    assert laporan.resubmit() is True
    assert laporan.status is LaporanStatus.RESUBMITTED
    assert laporan.resubmission_count == 1
    assert laporan.reject_reason is None and laporan.rejected_at is None and laporan.rejected_by is None

    assert laporan.resubmit() is False
    assert laporan.resubmission_count == 1


def test_resubmit_from_non_rejected_does_not_count() -> None:
    laporan = _laporan(status=LaporanStatus.APPROVED, em_approved=True, user_approved=True)
    assert laporan.resubmit() is False
    assert laporan.status is LaporanStatus.RESUBMITTED
    assert laporan.resubmission_count == 0
    assert not (laporan.em_approved or laporan.user_approved)


def test_resubmitted_needs_both_approvals_before_submit() -> None:
    laporan = _laporan(status=LaporanStatus.RESUBMITTED)
    laporan.approve(ApprovalRole.EM)
    with pytest.raises(WorkflowRuleViolationException) as exc_info:
        laporan.submit()
    assert "approved by EM and USER" in exc_info.value.message

    laporan.approve(ApprovalRole.USER)
    assert laporan.status is LaporanStatus.RESUBMITTED
    laporan.submit()
    assert laporan.status is LaporanStatus.SUBMITTED


def test_request_status_only_allows_rejected_to_resubmitted() -> None:
    laporan = _laporan(status=LaporanStatus.REJECTED)
    laporan.request_status(LaporanStatus.RESUBMITTED)
    assert laporan.status is LaporanStatus.RESUBMITTED
    assert laporan.resubmission_count == 1

    laporan.request_status(LaporanStatus.RESUBMITTED)
    assert laporan.resubmission_count == 1

    with pytest.raises(WorkflowRuleViolationException):
        laporan.request_status(LaporanStatus.APPROVED)


def test_append_attachments_keeps_existing_and_other_category() -> None:
    existing = _attachment("a.pdf", AttachmentCategory.NEED_APPROVE)
    other = _attachment("b.pdf", AttachmentCategory.NO_NEED_APPROVE)
    laporan = _laporan(need_approve_files=[existing], no_need_approve_files=[other])

    new = _attachment("c.pdf", AttachmentCategory.NEED_APPROVE)
    laporan.append_attachments(AttachmentCategory.NEED_APPROVE, [new])

    assert laporan.need_approve_files == [existing, new]
    assert laporan.no_need_approve_files == [other]
    assert laporan.all_attachments() == [existing, new, other]


def test_append_attachment_to_wrong_category() -> None:
    laporan = _laporan()
    with pytest.raises(ValidationException):
        laporan.append_attachments(
            AttachmentCategory.NEED_APPROVE,
            [_attachment("x.pdf", AttachmentCategory.NO_NEED_APPROVE)],
        )
    assert laporan.need_approve_files == []
