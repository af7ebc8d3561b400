"""Domain and storage exceptions (error_code, message, details)."""

from app.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    LaporanServiceException,
    LaporanVersionConflictException,
    PersistenceException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    UnknownApprovalRoleException,
    ValidationException,
    WorkflowRuleViolationException,
)
from app.infrastructure.exceptions import StorageException, StorageUploadError


def test_base_exception_default_error_code() -> None:
    """Base LaporanServiceException uses class name as error_code when not provided."""
    exc = LaporanServiceException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "LaporanServiceException"
    assert exc.details == {}
    assert exc.to_dict() == {
        "error": "LaporanServiceException",
        "message": "Something failed",
        "details": {},
    }


def test_validation_exception() -> None:
    exc = ValidationException("Invalid format", field="request_date")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "request_date"}
    assert ValidationException("Invalid").details == {}


def test_unknown_approval_role_is_a_validation_error() -> None:
    exc = UnknownApprovalRoleException("FINANCE")
    assert isinstance(exc, ValidationException)
    assert exc.details == {"field": "role", "role": "FINANCE"}


def test_authentication_exception() -> None:
    exc = AuthenticationException()
    assert exc.message == "Authentication failed"
    assert exc.error_code == "AUTHENTICATION_ERROR"


def test_authorization_exception_with_role_and_action() -> None:
    exc = AuthorizationException(role="VENDOR", action="reject laporan")
    assert exc.error_code == "PERMISSION_DENIED"
    assert exc.message == "Permission denied: role VENDOR cannot reject laporan"
    assert exc.details == {"role": "VENDOR", "action": "reject laporan"}


def test_resource_not_found() -> None:
    exc = ResourceNotFoundException("laporan", "lap1")
    assert exc.message == "laporan not found: lap1"
    assert exc.details == {"resource_type": "laporan", "resource_id": "lap1"}


def test_workflow_rule_violation_details() -> None:
    exc = WorkflowRuleViolationException("Laporan is already rejected", "lap1", "rejected", "reject")
    assert exc.error_code == "WORKFLOW_RULE_VIOLATION"
    assert exc.details == {"laporan_id": "lap1", "status": "rejected", "action": "reject"}


def test_version_conflict() -> None:
    exc = LaporanVersionConflictException("lap1", 3)
    assert exc.error_code == "LAPORAN_VERSION_CONFLICT"
    assert exc.details == {"laporan_id": "lap1", "expected_version": 3}


def test_persistence_and_sql_not_configured() -> None:
    assert PersistenceException("laporan.update", "OperationalError").details == {
        "operation": "laporan.update",
        "reason": "OperationalError",
    }
    assert SqlNotConfiguredException().error_code == "SERVICE_UNAVAILABLE"


def test_storage_errors_share_the_base() -> None:
    exc = StorageUploadError("need-approve/1-a.pdf", "timeout")
    assert isinstance(exc, StorageException)
    assert isinstance(exc, LaporanServiceException)
    assert exc.details == {"file_path": "need-approve/1-a.pdf", "reason": "timeout"}
