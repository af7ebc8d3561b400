"""Domain exceptions for the Laporan service.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class LaporanServiceException(Exception):
    """Base exception for all Laporan service errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body used by the HTTP exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(LaporanServiceException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class UnknownApprovalRoleException(ValidationException):
    """Raised when a role has no entry in the approval table."""

    def __init__(self, role: str) -> None:
        super().__init__(f"Role cannot approve a laporan: {role}", field="role")
        self.details["role"] = role


class AuthenticationException(LaporanServiceException):
    """Raised when authentication fails (e.g. invalid credentials or token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(LaporanServiceException):
    """Raised when the caller's role may not perform the operation."""

    def __init__(
        self,
        role: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional role, action, and message.

        Args:
            role: Optional role of the caller (e.g. 'EM').
            action: Optional action that was attempted (e.g. 'reject').
            message: Human-readable message; default used when role/action omitted.
        """
        if role and action:
            message = f"Permission denied: role {role} cannot {action}"
        details: dict[str, Any] = {}
        if role:
            details["role"] = role
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(LaporanServiceException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'laporan', 'user').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class WorkflowRuleViolationException(LaporanServiceException):
    """Raised when a status transition is not allowed from the current status."""

    def __init__(
        self,
        message: str,
        laporan_id: str,
        status: str,
        action: str,
    ) -> None:
        """Initialize with message and transition context.

        Args:
            message: Human-readable description.
            laporan_id: Laporan the transition was attempted on.
            status: Status the laporan was in.
            action: Attempted operation (e.g. 'submit', 'reject').
        """
        super().__init__(
            message,
            "WORKFLOW_RULE_VIOLATION",
            {"laporan_id": laporan_id, "status": status, "action": action},
        )


class LaporanVersionConflictException(LaporanServiceException):
    """Raised when a concurrent request updated the laporan first (optimistic lock)."""

    def __init__(self, laporan_id: str, expected_version: int) -> None:
        super().__init__(
            "Laporan was updated by another request; retry.",
            "LAPORAN_VERSION_CONFLICT",
            {"laporan_id": laporan_id, "expected_version": expected_version},
        )


class PersistenceException(LaporanServiceException):
    """Raised when the database rejects or fails a read/write."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            f"Persistence failure during {operation}",
            "PERSISTENCE_ERROR",
            {"operation": operation, "reason": reason},
        )


class SqlNotConfiguredException(LaporanServiceException):
    """Raised when an operation requires the database but it is not configured."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
