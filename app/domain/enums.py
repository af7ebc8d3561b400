"""Domain enumerations for the Laporan service.

Enums represent fixed sets of domain values (status, classification,
approving roles, attachment categories).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class LaporanStatus(_ValuesMixin, str, Enum):
    """Laporan lifecycle status.

    entry -> submitted -> approved | rejected; rejected -> resubmitted -> submitted.
    """

    ENTRY = "entry"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    RESUBMITTED = "resubmitted"


class PoType(_ValuesMixin, str, Enum):
    """Procurement channel of the request."""

    PURCHASE_ORDER = "purchase_order"
    DIRECT_PURCHASE = "direct_purchase"


class AssetType(_ValuesMixin, str, Enum):
    """Accounting class of the requested goods."""

    FIXED_ASSET = "fixed_asset"
    CONSUMABLE = "consumable"


class ApprovalRole(_ValuesMixin, str, Enum):
    """Fixed actor roles supplied by the identity provider."""

    EM = "EM"
    USER = "USER"
    VENDOR = "VENDOR"


class AttachmentCategory(_ValuesMixin, str, Enum):
    """Attachment sequence on a laporan. Value is also the storage key prefix."""

    NEED_APPROVE = "need-approve"
    NO_NEED_APPROVE = "no-need-approve"
