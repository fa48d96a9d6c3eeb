"""
Claim Lifecycle API Endpoints.

Provides:
- Claim CRUD operations (delete archives)
- Lifecycle stage transitions
- Exposure and depreciation draft summaries
- Payment and supplement ledgers
- Notes, timeline events and activity trail

All routes are scoped to the caller's organization from the JWT.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from claimflow.api.deps import require_permission
from claimflow.core.config import get_claims_settings
from claimflow.core.enums import LifecycleStage, SupplementStatus
from claimflow.db.connection import get_session
from claimflow.schemas.auth import TokenClaims
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
from claimflow.services.claim_lifecycle import get_next_stages, is_terminal_stage
from claimflow.services.claims_service import (
    ClaimArchiveError,
    ClaimCreateDTO,
    ClaimNotFoundError,
    ClaimsService,
    ClaimStageTransitionError,
    ClaimUpdateDTO,
    ClaimValidationError,
    PaymentCreateDTO,
    SupplementCreateDTO,
    SupplementNotFoundError,
    TimelineEventCreateDTO,
)
from claimflow.services.depreciation import DepreciationDraft, DepreciationDraftBuilder
from claimflow.services.exposure import ExposureCalculator
from claimflow.utils.errors import (
    ConflictError,
    InternalServerError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

claims_settings = get_claims_settings()

router = APIRouter(
    prefix="/api/v1/claims",
    tags=["claims"],
)


# =============================================================================
# Helpers
# =============================================================================


@contextmanager
def _service_errors(action: str) -> Iterator[None]:
    """Translate service exceptions into HTTP errors."""
    try:
        yield
    except HTTPException:
        raise
    except (ClaimNotFoundError, SupplementNotFoundError) as e:
        raise NotFoundError(str(e)) from e
    except (ClaimStageTransitionError, ClaimArchiveError) as e:
        raise ConflictError(str(e)) from e
    except ClaimValidationError as e:
        raise ValidationError(str(e)) from e
    except Exception as e:
        logger.error(f"{action} error: {e}", exc_info=True)
        raise InternalServerError(f"{action} failed") from e


def _draft_to_response(draft: DepreciationDraft) -> DepreciationDraftResponse:
    return DepreciationDraftResponse(
        subtotal_cents=draft.subtotal_cents,
        depreciation_cents=draft.depreciation_cents,
        tax_cents=draft.tax_cents,
        total_due_cents=draft.total_due_cents,
        line_items=[
            DepreciationLineItemResponse(
                description=item.description,
                cost=item.cost,
                depreciation_rate=float(item.depreciation_rate),
                depreciation=item.depreciation,
                recoverable=item.recoverable,
            )
            for item in draft.line_items
        ],
    )


# =============================================================================
# Claim CRUD
# =============================================================================


@router.post(
    "/",
    response_model=ClaimResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_claim(
    claim_data: ClaimCreate,
    claims: TokenClaims = Depends(require_permission("claims:create")),
    session: AsyncSession = Depends(get_session),
) -> ClaimResponse:
    """File a new claim. New claims start at FILED."""
    with _service_errors("Claim creation"):
        service = ClaimsService(session)
        claim = await service.create_claim(
            ClaimCreateDTO(**claim_data.model_dump()),
            org_id=claims.org_uuid,
            created_by=claims.user_uuid,
        )
        return ClaimResponse.model_validate(claim)


@router.get("/", response_model=ClaimListResponse)
async def list_claims(
    page: int = Query(1, ge=1),
    page_size: int = Query(
        claims_settings.DEFAULT_PAGE_SIZE, ge=1, le=claims_settings.MAX_PAGE_SIZE
    ),
    stage: Optional[LifecycleStage] = None,
    include_archived: bool = False,
    claims: TokenClaims = Depends(require_permission("claims:read")),
    session: AsyncSession = Depends(get_session),
) -> ClaimListResponse:
    """List the organization's claims, newest first."""
    with _service_errors("Claim list"):
        service = ClaimsService(session)
        items, total = await service.list_claims(
            org_id=claims.org_uuid,
            skip=(page - 1) * page_size,
            limit=page_size,
            stage=stage,
            include_archived=include_archived,
        )
        return ClaimListResponse(
            items=[ClaimResponse.model_validate(c) for c in items],
            total=total,
            page=page,
            size=page_size,
        )


@router.get("/{claim_id}", response_model=ClaimResponse)
async def get_claim(
    claim_id: str,
    claims: TokenClaims = Depends(require_permission("claims:read")),
    session: AsyncSession = Depends(get_session),
) -> ClaimResponse:
    """Get a claim by ID or claim number."""
    with _service_errors("Get claim"):
        service = ClaimsService(session)
        claim = await service.get_claim(claim_id, claims.org_uuid)
        if claim is None:
            raise NotFoundError(f"Claim not found: {claim_id}")
        return ClaimResponse.model_validate(claim)


@router.patch("/{claim_id}", response_model=ClaimResponse)
async def update_claim(
    claim_id: str,
    update_data: ClaimUpdate,
    claims: TokenClaims = Depends(require_permission("claims:update")),
    session: AsyncSession = Depends(get_session),
) -> ClaimResponse:
    """Update claim fields."""
    with _service_errors("Claim update"):
        service = ClaimsService(session)
        claim = await service.update_claim(
            claim_id,
            claims.org_uuid,
            ClaimUpdateDTO.from_fields(**update_data.model_dump(exclude_unset=True)),
            updated_by=claims.user_uuid,
        )
        return ClaimResponse.model_validate(claim)


@router.delete("/{claim_id}", response_model=ClaimResponse)
async def archive_claim(
    claim_id: str,
    claims: TokenClaims = Depends(require_permission("claims:delete")),
    session: AsyncSession = Depends(get_session),
) -> ClaimResponse:
    """Archive a claim. Refused while it has payments or supplements."""
    with _service_errors("Claim archive"):
        service = ClaimsService(session)
        claim = await service.archive_claim(
            claim_id, claims.org_uuid, archived_by=claims.user_uuid
        )
        return ClaimResponse.model_validate(claim)


# =============================================================================
# Lifecycle
# =============================================================================


@router.get("/{claim_id}/transitions", response_model=StageTransitionsResponse)
async def get_claim_transitions(
    claim_id: str,
    claims: TokenClaims = Depends(require_permission("claims:read")),
    session: AsyncSession = Depends(get_session),
) -> StageTransitionsResponse:
    """Get the stages a claim can move to next."""
    with _service_errors("Get transitions"):
        service = ClaimsService(session)
        claim = await service.require_claim(claim_id, claims.org_uuid)
        return StageTransitionsResponse(
            claim_id=claim.id,
            current_stage=claim.lifecycle_stage,
            allowed_stages=get_next_stages(claim.lifecycle_stage),
            is_terminal=is_terminal_stage(claim.lifecycle_stage),
        )


@router.post("/{claim_id}/stage", response_model=ClaimResponse)
async def transition_claim_stage(
    claim_id: str,
    request: StageTransitionRequest,
    claims: TokenClaims = Depends(require_permission("claims:update")),
    session: AsyncSession = Depends(get_session),
) -> ClaimResponse:
    """Move a claim to a new lifecycle stage (409 if not allowed)."""
    with _service_errors("Stage transition"):
        service = ClaimsService(session)
        claim = await service.transition_stage(
            claim_id,
            claims.org_uuid,
            request.stage,
            changed_by=claims.user_uuid,
            notes=request.notes,
        )
        return ClaimResponse.model_validate(claim)


# =============================================================================
# Financial Summaries
# =============================================================================


@router.get("/{claim_id}/exposure", response_model=ExposureResponse)
async def get_claim_exposure(
    claim_id: str,
    claims: TokenClaims = Depends(require_permission("claims:read")),
    session: AsyncSession = Depends(get_session),
) -> ExposureResponse:
    """Get paid, approved and pending amounts for a claim."""
    with _service_errors("Exposure"):
        claim = await ClaimsService(session).require_claim(claim_id, claims.org_uuid)
        exposure = await ExposureCalculator(session).compute_exposure(claim.id)
        return ExposureResponse(
            exposure_cents=exposure.exposure_cents,
            paid_cents=exposure.paid_cents,
            approved_supplement_cents=exposure.approved_supplement_cents,
            pending_supplement_cents=exposure.pending_supplement_cents,
        )


@router.get("/{claim_id}/depreciation-draft", response_model=DepreciationDraftResponse)
async def get_depreciation_draft(
    claim_id: str,
    claims: TokenClaims = Depends(require_permission("claims:read")),
    session: AsyncSession = Depends(get_session),
) -> DepreciationDraftResponse:
    """Derive the depreciation invoice draft for a claim."""
    with _service_errors("Depreciation draft"):
        claim = await ClaimsService(session).require_claim(claim_id, claims.org_uuid)
        draft = await DepreciationDraftBuilder(session).build(claim.id, claims.org_uuid)
        return _draft_to_response(draft)


@router.post(
    "/{claim_id}/depreciation-invoices",
    response_model=DepreciationInvoiceResponse,
    status_code=status.HTTP_201_CREATED,
)
async def issue_depreciation_invoice(
    claim_id: str,
    claims: TokenClaims = Depends(require_permission("claims:update")),
    session: AsyncSession = Depends(get_session),
) -> DepreciationInvoiceResponse:
    """Persist the current depreciation draft as an invoice."""
    with _service_errors("Depreciation invoice"):
        claim = await ClaimsService(session).require_claim(claim_id, claims.org_uuid)
        invoice = await DepreciationDraftBuilder(session).issue_invoice(
            claim.id, claims.org_uuid, generated_by=claims.user_uuid
        )
        return DepreciationInvoiceResponse(
            id=invoice.id,
            claim_id=invoice.claim_id,
            subtotal_cents=invoice.subtotal_cents,
            depreciation_cents=invoice.depreciation_cents,
            tax_cents=invoice.tax_cents,
            total_due_cents=invoice.total_due_cents,
            line_items=[
                DepreciationLineItemResponse.model_validate(item)
                for item in invoice.line_items
            ],
            generated_at=invoice.generated_at,
            generated_by=invoice.generated_by,
        )


# =============================================================================
# Payments
# =============================================================================


@router.get("/{claim_id}/payments", response_model=list[PaymentResponse])
async def list_payments(
    claim_id: str,
    claims: TokenClaims = Depends(require_permission("claims:read")),
    session: AsyncSession = Depends(get_session),
) -> list[PaymentResponse]:
    with _service_errors("Payment list"):
        payments = await ClaimsService(session).list_payments(claim_id, claims.org_uuid)
        return [PaymentResponse.model_validate(p) for p in payments]


@router.post(
    "/{claim_id}/payments",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_payment(
    claim_id: str,
    payment_data: PaymentCreate,
    claims: TokenClaims = Depends(require_permission("payments:create")),
    session: AsyncSession = Depends(get_session),
) -> PaymentResponse:
    """Record a payment against a claim. Payments are append-only."""
    with _service_errors("Payment recording"):
        payment = await ClaimsService(session).record_payment(
            claim_id,
            claims.org_uuid,
            PaymentCreateDTO(**payment_data.model_dump()),
            recorded_by=claims.user_uuid,
        )
        return PaymentResponse.model_validate(payment)


# =============================================================================
# Supplements
# =============================================================================


@router.get("/{claim_id}/supplements", response_model=list[SupplementResponse])
async def list_supplements(
    claim_id: str,
    status_filter: Optional[SupplementStatus] = Query(None, alias="status"),
    claims: TokenClaims = Depends(require_permission("claims:read")),
    session: AsyncSession = Depends(get_session),
) -> list[SupplementResponse]:
    with _service_errors("Supplement list"):
        supplements = await ClaimsService(session).list_supplements(
            claim_id, claims.org_uuid, status=status_filter
        )
        return [SupplementResponse.model_validate(s) for s in supplements]


@router.post(
    "/{claim_id}/supplements",
    response_model=SupplementResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_supplement(
    claim_id: str,
    supplement_data: SupplementCreate,
    claims: TokenClaims = Depends(require_permission("supplements:create")),
    session: AsyncSession = Depends(get_session),
) -> SupplementResponse:
    with _service_errors("Supplement creation"):
        supplement = await ClaimsService(session).create_supplement(
            claim_id,
            claims.org_uuid,
            SupplementCreateDTO(**supplement_data.model_dump()),
            created_by=claims.user_uuid,
        )
        return SupplementResponse.model_validate(supplement)


@router.patch(
    "/{claim_id}/supplements/{supplement_id}",
    response_model=SupplementResponse,
)
async def update_supplement_status(
    claim_id: str,
    supplement_id: UUID,
    update: SupplementStatusUpdate,
    claims: TokenClaims = Depends(require_permission("supplements:update")),
    session: AsyncSession = Depends(get_session),
) -> SupplementResponse:
    """Set a supplement's status (requested, approved, denied)."""
    with _service_errors("Supplement update"):
        supplement = await ClaimsService(session).update_supplement_status(
            claim_id,
            claims.org_uuid,
            supplement_id,
            update.status,
            updated_by=claims.user_uuid,
        )
        return SupplementResponse.model_validate(supplement)


# =============================================================================
# Notes / Activity
# =============================================================================


@router.get("/{claim_id}/notes", response_model=list[NoteResponse])
async def list_notes(
    claim_id: str,
    include_internal: bool = True,
    claims: TokenClaims = Depends(require_permission("claims:read")),
    session: AsyncSession = Depends(get_session),
) -> list[NoteResponse]:
    with _service_errors("Note list"):
        notes = await ClaimsService(session).list_notes(
            claim_id, claims.org_uuid, include_internal=include_internal
        )
        return [NoteResponse.model_validate(n) for n in notes]


@router.post(
    "/{claim_id}/notes",
    response_model=NoteResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_note(
    claim_id: str,
    note_data: NoteCreate,
    claims: TokenClaims = Depends(require_permission("claims:update")),
    session: AsyncSession = Depends(get_session),
) -> NoteResponse:
    with _service_errors("Note creation"):
        note = await ClaimsService(session).add_note(
            claim_id,
            claims.org_uuid,
            note_data.content,
            is_internal=note_data.is_internal,
            created_by=claims.user_uuid,
        )
        return NoteResponse.model_validate(note)


@router.get("/{claim_id}/activities", response_model=list[ActivityResponse])
async def list_activities(
    claim_id: str,
    limit: int = Query(100, ge=1, le=500),
    claims: TokenClaims = Depends(require_permission("claims:read")),
    session: AsyncSession = Depends(get_session),
) -> list[ActivityResponse]:
    """Audit trail for a claim, most recent first."""
    with _service_errors("Activity list"):
        activities = await ClaimsService(session).list_activities(
            claim_id, claims.org_uuid, limit=limit
        )
        return [ActivityResponse.model_validate(a) for a in activities]


# =============================================================================
# Timeline
# =============================================================================


@router.get("/{claim_id}/timeline", response_model=list[TimelineEventResponse])
async def list_timeline_events(
    claim_id: str,
    client_visible_only: bool = False,
    claims: TokenClaims = Depends(require_permission("claims:read")),
    session: AsyncSession = Depends(get_session),
) -> list[TimelineEventResponse]:
    with _service_errors("Timeline list"):
        events = await ClaimsService(session).list_timeline_events(
            claim_id, claims.org_uuid, client_visible_only=client_visible_only
        )
        return [TimelineEventResponse.model_validate(e) for e in events]


@router.post(
    "/{claim_id}/timeline",
    response_model=TimelineEventResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_timeline_event(
    claim_id: str,
    event_data: TimelineEventCreate,
    claims: TokenClaims = Depends(require_permission("claims:update")),
    session: AsyncSession = Depends(get_session),
) -> TimelineEventResponse:
    with _service_errors("Timeline event creation"):
        event = await ClaimsService(session).add_timeline_event(
            claim_id,
            claims.org_uuid,
            TimelineEventCreateDTO(**event_data.model_dump()),
            created_by=claims.user_uuid,
        )
        return TimelineEventResponse.model_validate(event)


@router.patch(
    "/{claim_id}/timeline/visibility",
    response_model=TimelineVisibilityResponse,
)
async def set_timeline_visibility(
    claim_id: str,
    update: TimelineVisibilityUpdate,
    claims: TokenClaims = Depends(require_permission("claims:update")),
    session: AsyncSession = Depends(get_session),
) -> TimelineVisibilityResponse:
    """Show or hide timeline events in the client portal."""
    with _service_errors("Timeline visibility"):
        updated = await ClaimsService(session).set_timeline_visibility(
            claim_id,
            claims.org_uuid,
            update.event_ids,
            update.visible,
            updated_by=claims.user_uuid,
        )
        return TimelineVisibilityResponse(updated=updated, visible=update.visible)
