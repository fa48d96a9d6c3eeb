"""
SQLAlchemy Models for the Claim Lifecycle Engine.

This module exports all database models for the application.
"""

from claimflow.models.base import Base, TimeStampedModel, UUIDModel
from claimflow.models.organization import Organization, Property
from claimflow.models.claim import (
    Claim,
    ClaimActivity,
    ClaimNote,
    ClaimPayment,
    ClaimSupplement,
    ClaimTimelineEvent,
    DepreciationInvoice,
)

__all__ = [
    # Base classes
    "Base",
    "TimeStampedModel",
    "UUIDModel",
    # Tenant models
    "Organization",
    "Property",
    # Claim models
    "Claim",
    "ClaimActivity",
    "ClaimNote",
    "ClaimPayment",
    "ClaimSupplement",
    "ClaimTimelineEvent",
    "DepreciationInvoice",
]
