"""
Pydantic Schemas for the Claim Lifecycle Engine.

This module exports all request/response schemas for the API.
"""

from claimflow.schemas.claim import (
    ActivityResponse,
    ClaimCreate,
    ClaimListResponse,
    ClaimResponse,
    ClaimUpdate,
    DepreciationDraftResponse,
    DepreciationInvoiceResponse,
    DepreciationLineItemResponse,
    ExposureResponse,
    NoteCreate,
    NoteResponse,
    PaymentCreate,
    PaymentResponse,
    StageTransitionRequest,
    StageTransitionsResponse,
    SupplementCreate,
    SupplementResponse,
    SupplementStatusUpdate,
    TimelineEventCreate,
    TimelineEventResponse,
    TimelineVisibilityResponse,
    TimelineVisibilityUpdate,
)

__all__ = [
    "ActivityResponse",
    "ClaimCreate",
    "ClaimListResponse",
    "ClaimResponse",
    "ClaimUpdate",
    "DepreciationDraftResponse",
    "DepreciationInvoiceResponse",
    "DepreciationLineItemResponse",
    "ExposureResponse",
    "NoteCreate",
    "NoteResponse",
    "PaymentCreate",
    "PaymentResponse",
    "StageTransitionRequest",
    "StageTransitionsResponse",
    "SupplementCreate",
    "SupplementResponse",
    "SupplementStatusUpdate",
    "TimelineEventCreate",
    "TimelineEventResponse",
    "TimelineVisibilityResponse",
    "TimelineVisibilityUpdate",
]
