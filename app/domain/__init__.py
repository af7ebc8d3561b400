"""Domain layer: entities, value objects, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import DEFAULT_APPROVAL_FIELDS, LaporanEntity
from app.domain.enums import (
    ApprovalRole,
    AssetType,
    AttachmentCategory,
    LaporanStatus,
    PoType,
)
from app.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    LaporanServiceException,
    LaporanVersionConflictException,
    PersistenceException,
    ResourceNotFoundException,
    UnknownApprovalRoleException,
    ValidationException,
    WorkflowRuleViolationException,
)
from app.domain.value_objects import Attachment

__all__ = [
    # Entities
    "DEFAULT_APPROVAL_FIELDS",
    "LaporanEntity",
    # Enums
    "ApprovalRole",
    "AssetType",
    "AttachmentCategory",
    "LaporanStatus",
    "PoType",
    # Exceptions
    "AuthenticationException",
    "AuthorizationException",
    "LaporanServiceException",
    "LaporanVersionConflictException",
    "PersistenceException",
    "ResourceNotFoundException",
    "UnknownApprovalRoleException",
    "ValidationException",
    "WorkflowRuleViolationException",
    # Value objects
    "Attachment",
]
