"""
Core Enumerations for the Claim Lifecycle Engine.

Shared enums used by models, services and API schemas.
"""

from enum import Enum


# =============================================================================
# Claim Lifecycle
# =============================================================================


class LifecycleStage(str, Enum):
    """Claim lifecycle stage."""

    FILED = "FILED"
    ADJUSTER_REVIEW = "ADJUSTER_REVIEW"
    APPROVED = "APPROVED"
    DENIED = "DENIED"
    APPEAL = "APPEAL"
    BUILD = "BUILD"
    COMPLETED = "COMPLETED"
    DEPRECIATION = "DEPRECIATION"  # Terminal


class ClaimStatus(str, Enum):
    """Display status stored alongside the lifecycle stage."""

    NEW = "new"
    IN_PROGRESS = "in_progress"
    APPROVED = "approved"
    DENIED = "denied"
    APPEAL = "appeal"
    COMPLETED = "completed"
    ARCHIVED = "archived"


# =============================================================================
# Claim Ledger
# =============================================================================


class PaymentType(str, Enum):
    """Carrier disbursement type."""

    ACV = "ACV"  # Actual cash value
    RCV = "RCV"  # Replacement cost value
    DEPRECIATION = "DEPRECIATION"  # Recoverable depreciation release
    SUPPLEMENT = "SUPPLEMENT"
    OTHER = "OTHER"


class SupplementStatus(str, Enum):
    """Supplement request status."""

    REQUESTED = "requested"
    APPROVED = "approved"
    DENIED = "denied"


class ActivityType(str, Enum):
    """Claim audit trail entry type."""

    CLAIM_CREATED = "CLAIM_CREATED"
    CLAIM_UPDATED = "CLAIM_UPDATED"
    STATUS_CHANGE = "STATUS_CHANGE"
    CLAIM_ARCHIVED = "CLAIM_ARCHIVED"
    PAYMENT_RECORDED = "PAYMENT_RECORDED"
    SUPPLEMENT_CREATED = "SUPPLEMENT_CREATED"
    SUPPLEMENT_UPDATED = "SUPPLEMENT_UPDATED"
    NOTE_ADDED = "NOTE_ADDED"
    INVOICE_GENERATED = "INVOICE_GENERATED"
    TIMELINE_EVENT_ADDED = "TIMELINE_EVENT_ADDED"
    TIMELINE_VISIBILITY_CHANGED = "TIMELINE_VISIBILITY_CHANGED"
