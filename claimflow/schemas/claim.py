"""
Pydantic Schemas for Claim Lifecycle Management.

Exposure and depreciation payloads are serialized in camelCase; all other
payloads use the snake_case field names.
"""

from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from claimflow.core.enums import (
    ActivityType,
    ClaimStatus,
    LifecycleStage,
    PaymentType,
    SupplementStatus,
)


# =============================================================================
# Claim Schemas
# =============================================================================


class ClaimBase(BaseModel):
    """Fields shared by claim create/update payloads."""

    property_id: Optional[UUID] = Field(None, description="Insured property ID")
    description: Optional[str] = Field(None, max_length=5000)
    damage_type: Optional[str] = Field(None, max_length=50, description="e.g. hail, wind, water")
    carrier: Optional[str] = Field(None, max_length=255, description="Insurance carrier")
    policy_number: Optional[str] = Field(None, max_length=100)
    insured_name: Optional[str] = Field(None, max_length=255)
    date_of_loss: Optional[date] = None
    adjuster_name: Optional[str] = Field(None, max_length=255)
    adjuster_email: Optional[str] = Field(None, max_length=255)
    adjuster_phone: Optional[str] = Field(None, max_length=50)
    estimated_value_cents: Optional[int] = Field(None, ge=0)
    approved_value_cents: Optional[int] = Field(None, ge=0)
    deductible_cents: Optional[int] = Field(None, ge=0)


class ClaimCreate(ClaimBase):
    """Schema for filing a claim."""

    title: str = Field(..., min_length=1, max_length=255)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v


class ClaimUpdate(ClaimBase):
    """Schema for updating claim fields. The stage is changed via /stage."""

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=1, max_length=255)


class ClaimResponse(BaseModel):
    """Schema for claim response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    org_id: UUID
    property_id: Optional[UUID] = None
    claim_number: str
    title: str
    description: Optional[str] = None
    damage_type: Optional[str] = None
    carrier: Optional[str] = None
    policy_number: Optional[str] = None
    insured_name: Optional[str] = None
    date_of_loss: Optional[date] = None
    adjuster_name: Optional[str] = None
    adjuster_email: Optional[str] = None
    adjuster_phone: Optional[str] = None
    estimated_value_cents: Optional[int] = None
    approved_value_cents: Optional[int] = None
    deductible_cents: Optional[int] = None
    lifecycle_stage: LifecycleStage
    status: ClaimStatus
    archived_at: Optional[datetime] = None
    created_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


class ClaimListResponse(BaseModel):
    """Paginated claim list response."""

    items: list[ClaimResponse]
    total: int
    page: int
    size: int


# =============================================================================
# Lifecycle Schemas
# =============================================================================


class StageTransitionRequest(BaseModel):
    """Request to move a claim to a new lifecycle stage."""

    stage: LifecycleStage
    notes: Optional[str] = Field(None, max_length=2000)


class StageTransitionsResponse(BaseModel):
    """Current stage and the stages reachable from it."""

    claim_id: UUID
    current_stage: LifecycleStage
    allowed_stages: list[LifecycleStage]
    is_terminal: bool


# =============================================================================
# Ledger Schemas
# =============================================================================


class PaymentCreate(BaseModel):
    """Schema for recording a payment."""

    amount_cents: int = Field(..., gt=0, description="Payment amount in cents")
    payment_type: PaymentType
    paid_at: Optional[datetime] = None
    reference: Optional[str] = Field(None, max_length=100, description="Check/ACH reference")
    notes: Optional[str] = Field(None, max_length=2000)


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    claim_id: UUID
    amount_cents: int
    payment_type: PaymentType
    paid_at: datetime
    reference: Optional[str] = None
    notes: Optional[str] = None
    recorded_by: Optional[UUID] = None
    created_at: datetime


class SupplementCreate(BaseModel):
    """Schema for requesting a supplement."""

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    total_cents: int = Field(..., ge=0, description="Supplement total in cents")
    status: SupplementStatus = SupplementStatus.REQUESTED


class SupplementStatusUpdate(BaseModel):
    status: SupplementStatus


class SupplementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    claim_id: UUID
    title: str
    description: Optional[str] = None
    total_cents: int
    status: SupplementStatus
    submitted_at: Optional[datetime] = None
    created_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


# =============================================================================
# Notes / Activity Schemas
# =============================================================================


class NoteCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=10000)
    is_internal: bool = Field(default=True, description="Hidden from client portal")


class NoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    claim_id: UUID
    content: str
    is_internal: bool
    created_by: Optional[UUID] = None
    created_at: datetime


class ActivityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    claim_id: UUID
    user_id: Optional[UUID] = None
    activity_type: ActivityType
    message: str
    details: Optional[dict[str, Any]] = None
    created_at: datetime


# =============================================================================
# Timeline Schemas
# =============================================================================


class TimelineEventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    event_type: str = Field(default="note", min_length=1, max_length=50)
    visible_to_client: bool = False


class TimelineEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    claim_id: UUID
    title: str
    description: Optional[str] = None
    event_type: str
    visible_to_client: bool
    created_by: Optional[UUID] = None
    created_at: datetime


class TimelineVisibilityUpdate(BaseModel):
    """Bulk show/hide of timeline events in the client portal."""

    event_ids: list[UUID] = Field(..., min_length=1)
    visible: bool


class TimelineVisibilityResponse(BaseModel):
    updated: int
    visible: bool


# =============================================================================
# Exposure / Depreciation Schemas (camelCase)
# =============================================================================


class CamelModel(BaseModel):
    """Base for payloads serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ExposureResponse(CamelModel):
    """Claim exposure in cents."""

    exposure_cents: int
    paid_cents: int
    approved_supplement_cents: int
    pending_supplement_cents: int


class DepreciationLineItemResponse(CamelModel):
    description: str
    cost: int
    depreciation_rate: float
    depreciation: int
    recoverable: int


class DepreciationDraftResponse(CamelModel):
    """Depreciation invoice draft in cents."""

    subtotal_cents: int
    depreciation_cents: int
    tax_cents: int
    total_due_cents: int
    line_items: list[DepreciationLineItemResponse]


class DepreciationInvoiceResponse(CamelModel):
    """Issued depreciation invoice."""

    id: UUID
    claim_id: UUID
    subtotal_cents: int
    depreciation_cents: int
    tax_cents: int
    total_due_cents: int
    line_items: list[DepreciationLineItemResponse]
    generated_at: datetime
    generated_by: Optional[UUID] = None
