"""
Claim Models for the Claim Lifecycle Engine.

Claim is the aggregate root; payments, supplements, notes, activities,
timeline events and issued depreciation invoices are owned by exactly one
claim. Monetary columns are integer cents.
"""

from datetime import date, datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from claimflow.core.enums import (
    ActivityType,
    ClaimStatus,
    LifecycleStage,
    PaymentType,
    SupplementStatus,
)
from claimflow.models.base import Base, TimeStampedModel, UUIDModel, enum_type

if TYPE_CHECKING:
    from claimflow.models.organization import Organization, Property


class Claim(Base, UUIDModel, TimeStampedModel):
    """
    Insurance claim filed by a contractor organization.

    The lifecycle stage only moves along the transition table in
    claimflow.services.claim_lifecycle; claims are archived, never deleted.
    """

    __tablename__ = "claims"

    # Multi-tenant Foreign Key
    org_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Owning organization ID",
    )
    property_id: Mapped[Optional[UUID]] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("properties.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="Insured property ID",
    )

    # Identification
    claim_number: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        index=True,
        comment="Human-readable claim number (e.g., CLM-2026-000001)",
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    damage_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Carrier / Policy
    carrier: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    policy_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    insured_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    date_of_loss: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Adjuster
    adjuster_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    adjuster_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    adjuster_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Financial Summary (cents)
    estimated_value_cents: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        nullable=True,
        comment="Contractor estimate in cents",
    )
    approved_value_cents: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        nullable=True,
        comment="Carrier approved value in cents",
    )
    deductible_cents: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        nullable=True,
        comment="Policy deductible in cents",
    )

    # Lifecycle
    lifecycle_stage: Mapped[LifecycleStage] = mapped_column(
        enum_type(LifecycleStage),
        default=LifecycleStage.FILED,
        nullable=False,
        index=True,
        comment="Current lifecycle stage",
    )
    status: Mapped[ClaimStatus] = mapped_column(
        enum_type(ClaimStatus),
        default=ClaimStatus.NEW,
        nullable=False,
        index=True,
        comment="Display status derived from the lifecycle stage",
    )
    archived_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_by: Mapped[Optional[UUID]] = mapped_column(
        PG_UUID(as_uuid=True),
        nullable=True,
    )

    # Relationships
    organization: Mapped["Organization"] = relationship(
        "Organization",
        back_populates="claims",
    )
    insured_property: Mapped[Optional["Property"]] = relationship(
        "Property",
        back_populates="claims",
    )
    payments: Mapped[list["ClaimPayment"]] = relationship(
        back_populates="claim",
        cascade="all, delete-orphan",
        order_by="ClaimPayment.paid_at",
    )
    supplements: Mapped[list["ClaimSupplement"]] = relationship(
        back_populates="claim",
        cascade="all, delete-orphan",
        order_by="ClaimSupplement.created_at",
    )
    activities: Mapped[list["ClaimActivity"]] = relationship(
        back_populates="claim",
        cascade="all, delete-orphan",
        order_by="ClaimActivity.created_at.desc()",
    )
    notes: Mapped[list["ClaimNote"]] = relationship(
        back_populates="claim",
        cascade="all, delete-orphan",
    )
    depreciation_invoices: Mapped[list["DepreciationInvoice"]] = relationship(
        back_populates="claim",
        cascade="all, delete-orphan",
    )
    timeline_events: Mapped[list["ClaimTimelineEvent"]] = relationship(
        back_populates="claim",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_claims_org_stage", "org_id", "lifecycle_stage"),
        Index("ix_claims_org_status", "org_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Claim(id={self.id}, number='{self.claim_number}', stage='{self.lifecycle_stage}')>"

    @property
    def is_archived(self) -> bool:
        return self.status == ClaimStatus.ARCHIVED


class ClaimPayment(Base, UUIDModel, TimeStampedModel):
    """
    Carrier disbursement recorded against a claim.

    Append-only: rows are never updated or deleted by the service layer.
    """

    __tablename__ = "claim_payments"

    claim_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("claims.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    payment_type: Mapped[PaymentType] = mapped_column(
        enum_type(PaymentType),
        nullable=False,
        comment="ACV, RCV, DEPRECIATION, SUPPLEMENT or OTHER",
    )
    paid_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    reference: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        comment="Check or transfer reference",
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    recorded_by: Mapped[Optional[UUID]] = mapped_column(
        PG_UUID(as_uuid=True),
        nullable=True,
    )

    claim: Mapped["Claim"] = relationship(back_populates="payments")

    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="amount_positive"),
        Index("ix_claim_payments_claim_paid", "claim_id", "paid_at"),
    )

    def __repr__(self) -> str:
        return f"<ClaimPayment(claim_id={self.claim_id}, type='{self.payment_type}', amount={self.amount_cents})>"


class ClaimSupplement(Base, UUIDModel, TimeStampedModel):
    """Request for additional claim value beyond the original estimate."""

    __tablename__ = "claim_supplements"

    claim_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("claims.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    total_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[SupplementStatus] = mapped_column(
        enum_type(SupplementStatus),
        default=SupplementStatus.REQUESTED,
        nullable=False,
        index=True,
    )
    submitted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_by: Mapped[Optional[UUID]] = mapped_column(
        PG_UUID(as_uuid=True),
        nullable=True,
    )

    claim: Mapped["Claim"] = relationship(back_populates="supplements")

    __table_args__ = (
        CheckConstraint("total_cents >= 0", name="total_non_negative"),
        Index("ix_claim_supplements_claim_status", "claim_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<ClaimSupplement(claim_id={self.claim_id}, status='{self.status}', total={self.total_cents})>"


class ClaimActivity(Base, UUIDModel):
    """Audit trail entry for a claim mutation."""

    __tablename__ = "claim_activities"

    claim_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("claims.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[Optional[UUID]] = mapped_column(
        PG_UUID(as_uuid=True),
        nullable=True,
    )
    activity_type: Mapped[ActivityType] = mapped_column(
        enum_type(ActivityType),
        nullable=False,
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    details: Mapped[Optional[dict]] = mapped_column(JSONB, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    claim: Mapped["Claim"] = relationship(back_populates="activities")

    __table_args__ = (
        Index("ix_claim_activities_claim_created", "claim_id", "created_at"),
    )


class ClaimNote(Base, UUIDModel, TimeStampedModel):
    """Free-text note on a claim, internal or visible to the client portal."""

    __tablename__ = "claim_notes"

    claim_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("claims.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    org_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_by: Mapped[Optional[UUID]] = mapped_column(
        PG_UUID(as_uuid=True),
        nullable=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_internal: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    claim: Mapped["Claim"] = relationship(back_populates="notes")


class ClaimTimelineEvent(Base, UUIDModel, TimeStampedModel):
    """
    Milestone entered by staff on the claim timeline.

    Unlike ClaimActivity rows these are written by hand and may be shown to
    the homeowner through the client portal.
    """

    __tablename__ = "claim_timeline_events"

    claim_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("claims.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    org_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_by: Mapped[Optional[UUID]] = mapped_column(
        PG_UUID(as_uuid=True),
        nullable=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    event_type: Mapped[str] = mapped_column(
        String(50),
        default="note",
        nullable=False,
        comment="Free-form category, e.g. note, inspection, build",
    )
    visible_to_client: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    claim: Mapped["Claim"] = relationship(back_populates="timeline_events")

    __table_args__ = (
        Index("ix_claim_timeline_events_claim_created", "claim_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<ClaimTimelineEvent(claim_id={self.claim_id}, title='{self.title}')>"


class DepreciationInvoice(Base, UUIDModel):
    """Issued depreciation invoice: a frozen snapshot of a depreciation draft."""

    __tablename__ = "depreciation_invoices"

    claim_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("claims.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    subtotal_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    depreciation_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    tax_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    total_due_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    line_items: Mapped[list] = mapped_column(JSONB, nullable=False)
    generated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    generated_by: Mapped[Optional[UUID]] = mapped_column(
        PG_UUID(as_uuid=True),
        nullable=True,
    )

    claim: Mapped["Claim"] = relationship(back_populates="depreciation_invoices")
