"""
Claims Service for the Claim Lifecycle Engine.

Provides:
- Claim CRUD operations with organization (tenant) isolation
- Lifecycle stage transitions
- Payment and supplement ledger management
- Notes, timeline events and activity trail
- Claim number generation

Every mutating operation appends a ClaimActivity row.
"""

import logging
from dataclasses import dataclass, field, fields
from datetime import date, datetime, timezone
from typing import Any, Optional, Union
from uuid import UUID, uuid4

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from claimflow.core.config import get_claims_settings
from claimflow.core.enums import (
    ActivityType,
    ClaimStatus,
    LifecycleStage,
    PaymentType,
    SupplementStatus,
)
from claimflow.models.claim import (
    Claim,
    ClaimActivity,
    ClaimNote,
    ClaimPayment,
    ClaimSupplement,
    ClaimTimelineEvent,
)
from claimflow.models.organization import Property
from claimflow.services.claim_lifecycle import (
    ClaimLifecycle,
    TransitionContext,
    get_claim_lifecycle,
    get_stage_display_name,
    is_valid_transition,
    status_for_stage,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Exceptions
# =============================================================================


class ClaimsServiceError(Exception):
    """Base exception for claims service errors."""

    pass


class ClaimNotFoundError(ClaimsServiceError):
    """Raised when claim is not found."""

    pass


class SupplementNotFoundError(ClaimsServiceError):
    """Raised when a supplement does not belong to the claim."""

    pass


class ClaimValidationError(ClaimsServiceError):
    """Raised when claim data validation fails."""

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        super().__init__(message)
        self.errors = errors or []


class ClaimStageTransitionError(ClaimsServiceError):
    """Raised when invalid stage transition is attempted."""

    pass


class ClaimArchiveError(ClaimsServiceError):
    """Raised when a claim cannot be archived."""

    pass


# =============================================================================
# Data Transfer Objects
# =============================================================================


@dataclass
class ClaimCreateDTO:
    """Data transfer object for creating a claim."""

    title: str
    property_id: Optional[UUID] = None
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
    initial_stage: LifecycleStage = LifecycleStage.FILED


@dataclass
class ClaimUpdateDTO:
    """
    Data transfer object for updating a claim.

    Built with from_fields, only the named fields are applied and an
    explicit None clears the column. Built directly, None means unchanged.
    """

    title: Optional[str] = None
    property_id: Optional[UUID] = None
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
    fields_set: frozenset[str] = field(default_factory=frozenset, repr=False)

    @classmethod
    def from_fields(cls, **values: Any) -> "ClaimUpdateDTO":
        return cls(**values, fields_set=frozenset(values))

    def changes(self) -> dict[str, Any]:
        if self.fields_set:
            return {name: getattr(self, name) for name in self.fields_set}
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "fields_set" and getattr(self, f.name) is not None
        }


@dataclass
class PaymentCreateDTO:
    """Data transfer object for recording a payment."""

    amount_cents: int
    payment_type: PaymentType
    paid_at: Optional[datetime] = None
    reference: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class SupplementCreateDTO:
    """Data transfer object for creating a supplement."""

    title: str
    total_cents: int
    description: Optional[str] = None
    status: SupplementStatus = SupplementStatus.REQUESTED


@dataclass
class TimelineEventCreateDTO:
    """Data transfer object for adding a timeline event."""

    title: str
    description: Optional[str] = None
    event_type: str = "note"
    visible_to_client: bool = False


def _parse_uuid(value: Union[UUID, str]) -> Optional[UUID]:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (ValueError, TypeError):
        return None


# =============================================================================
# Claims Service
# =============================================================================


class ClaimsService:
    """
    Service for claim management operations.

    All lookups are scoped by org_id; a claim from another organization is
    reported as not found.
    """

    def __init__(
        self,
        session: AsyncSession,
        lifecycle: Optional[ClaimLifecycle] = None,
    ):
        self.session = session
        self.lifecycle = lifecycle or get_claim_lifecycle()

    # =========================================================================
    # Claim Number Generation
    # =========================================================================

    async def _generate_claim_number(self) -> str:
        """
        Generate unique claim number.

        Format: {PREFIX}-{YEAR}-{SEQUENCE:06d}
        Example: CLM-2026-000001
        """
        prefix = get_claims_settings().CLAIM_NUMBER_PREFIX
        year = datetime.now(timezone.utc).year

        result = await self.session.execute(
            select(func.max(Claim.claim_number)).where(
                Claim.claim_number.like(f"{prefix}-{year}-%")
            )
        )
        max_number = result.scalar_one_or_none()

        next_seq = 1
        if max_number:
            try:
                next_seq = int(max_number.split("-")[-1]) + 1
            except (ValueError, IndexError):
                next_seq = 1

        return f"{prefix}-{year}-{next_seq:06d}"

    # =========================================================================
    # Activity Trail
    # =========================================================================

    def _log_activity(
        self,
        claim_id: UUID,
        user_id: Optional[UUID],
        activity_type: ActivityType,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> ClaimActivity:
        activity = ClaimActivity(
            id=uuid4(),
            claim_id=claim_id,
            user_id=user_id,
            activity_type=activity_type,
            message=message,
            details=details,
        )
        self.session.add(activity)
        return activity

    # =========================================================================
    # Guards
    # =========================================================================

    @staticmethod
    def _ensure_writable(claim: Claim) -> None:
        """Archived claims are read-only."""
        if claim.is_archived:
            raise ClaimValidationError(f"Claim {claim.claim_number} is archived")

    async def _ensure_property_in_org(self, property_id: UUID, org_id: UUID) -> None:
        result = await self.session.execute(
            select(Property.id).where(
                Property.id == property_id,
                Property.org_id == org_id,
            )
        )
        if result.scalar_one_or_none() is None:
            raise ClaimValidationError(
                f"Property not found: {property_id}",
                errors=["property_id"],
            )

    # =========================================================================
    # Read Operations
    # =========================================================================

    async def get_claim(
        self,
        claim_id: Union[UUID, str],
        org_id: UUID,
    ) -> Optional[Claim]:
        """
        Get claim by ID, falling back to the human-readable claim number.

        Returns None when no claim in the organization matches.
        """
        claim = None

        claim_uuid = _parse_uuid(claim_id)
        if claim_uuid is not None:
            result = await self.session.execute(
                select(Claim).where(Claim.id == claim_uuid, Claim.org_id == org_id)
            )
            claim = result.scalar_one_or_none()

        if claim is None:
            result = await self.session.execute(
                select(Claim).where(
                    Claim.claim_number == str(claim_id),
                    Claim.org_id == org_id,
                )
            )
            claim = result.scalar_one_or_none()

        return claim

    async def require_claim(
        self,
        claim_id: Union[UUID, str],
        org_id: UUID,
    ) -> Claim:
        """Get claim or raise ClaimNotFoundError."""
        claim = await self.get_claim(claim_id, org_id)
        if claim is None:
            raise ClaimNotFoundError(f"Claim not found: {claim_id}")
        return claim

    async def list_claims(
        self,
        org_id: UUID,
        skip: int = 0,
        limit: int = 20,
        stage: Optional[LifecycleStage] = None,
        include_archived: bool = False,
    ) -> tuple[list[Claim], int]:
        """List claims for an organization, newest first."""
        conditions = [Claim.org_id == org_id]
        if stage is not None:
            conditions.append(Claim.lifecycle_stage == stage)
        if not include_archived:
            conditions.append(Claim.status != ClaimStatus.ARCHIVED)

        count_result = await self.session.execute(
            select(func.count()).select_from(Claim).where(*conditions)
        )
        total = count_result.scalar_one()

        result = await self.session.execute(
            select(Claim)
            .where(*conditions)
            .order_by(Claim.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    # =========================================================================
    # Create / Update Operations
    # =========================================================================

    async def create_claim(
        self,
        claim_data: ClaimCreateDTO,
        org_id: UUID,
        created_by: Optional[UUID] = None,
    ) -> Claim:
        """
        Create a new claim.

        New claims enter the lifecycle at FILED; any other initial stage is
        rejected.
        """
        if not is_valid_transition(None, claim_data.initial_stage):
            raise ClaimStageTransitionError(
                f"New claims must start at {LifecycleStage.FILED.value}, "
                f"got {claim_data.initial_stage.value}"
            )

        if claim_data.property_id is not None:
            await self._ensure_property_in_org(claim_data.property_id, org_id)

        claim_number = await self._generate_claim_number()

        claim = Claim(
            id=uuid4(),
            org_id=org_id,
            property_id=claim_data.property_id,
            claim_number=claim_number,
            title=claim_data.title,
            description=claim_data.description,
            damage_type=claim_data.damage_type,
            carrier=claim_data.carrier,
            policy_number=claim_data.policy_number,
            insured_name=claim_data.insured_name,
            date_of_loss=claim_data.date_of_loss,
            adjuster_name=claim_data.adjuster_name,
            adjuster_email=claim_data.adjuster_email,
            adjuster_phone=claim_data.adjuster_phone,
            estimated_value_cents=claim_data.estimated_value_cents,
            approved_value_cents=claim_data.approved_value_cents,
            deductible_cents=claim_data.deductible_cents,
            lifecycle_stage=claim_data.initial_stage,
            status=status_for_stage(claim_data.initial_stage),
            created_by=created_by,
        )
        self.session.add(claim)
        await self.session.flush()

        self._log_activity(
            claim.id,
            created_by,
            ActivityType.CLAIM_CREATED,
            f"Claim {claim_number} filed",
            {"stage": claim.lifecycle_stage.value},
        )

        await self.session.commit()
        await self.session.refresh(claim)

        logger.info(f"Created claim {claim_number} (ID: {claim.id})")
        return claim

    async def update_claim(
        self,
        claim_id: Union[UUID, str],
        org_id: UUID,
        update_data: ClaimUpdateDTO,
        updated_by: Optional[UUID] = None,
    ) -> Claim:
        """Update claim fields. The lifecycle stage is changed via transition_stage."""
        claim = await self.require_claim(claim_id, org_id)
        self._ensure_writable(claim)

        changes = update_data.changes()
        if not changes:
            return claim

        if "title" in changes and not changes["title"]:
            raise ClaimValidationError("Claim title cannot be cleared", errors=["title"])

        new_property_id = changes.get("property_id")
        if new_property_id is not None and new_property_id != claim.property_id:
            await self._ensure_property_in_org(new_property_id, org_id)

        for name, value in changes.items():
            setattr(claim, name, value)

        self._log_activity(
            claim.id,
            updated_by,
            ActivityType.CLAIM_UPDATED,
            f"Claim {claim.claim_number} updated",
            {"fields": sorted(changes)},
        )

        await self.session.commit()
        await self.session.refresh(claim)

        logger.info(f"Updated claim {claim.claim_number}: {sorted(changes)}")
        return claim

    # =========================================================================
    # Lifecycle Operations
    # =========================================================================

    async def transition_stage(
        self,
        claim_id: Union[UUID, str],
        org_id: UUID,
        target_stage: LifecycleStage,
        changed_by: Optional[UUID] = None,
        notes: Optional[str] = None,
    ) -> Claim:
        """
        Move a claim to a new lifecycle stage.

        Raises:
            ClaimNotFoundError: claim does not exist in the organization
            ClaimStageTransitionError: transition not allowed; nothing is written
        """
        claim = await self.require_claim(claim_id, org_id)

        if claim.is_archived:
            raise ClaimStageTransitionError(
                f"Cannot change stage of archived claim {claim.claim_number}"
            )

        context = TransitionContext(
            claim_id=str(claim.id),
            current_stage=claim.lifecycle_stage,
            target_stage=target_stage,
            triggered_by=str(changed_by) if changed_by else None,
            notes=notes,
        )
        result = self.lifecycle.validate_transition(context)
        if not result.success:
            raise ClaimStageTransitionError(result.error)

        previous_stage = claim.lifecycle_stage
        claim.lifecycle_stage = target_stage
        claim.status = status_for_stage(target_stage)

        message = (
            f"Stage changed from {get_stage_display_name(previous_stage)} "
            f"to {get_stage_display_name(target_stage)}"
        )
        self._log_activity(
            claim.id,
            changed_by,
            ActivityType.STATUS_CHANGE,
            message,
            {
                "from": previous_stage.value,
                "to": target_stage.value,
                "notes": notes,
            },
        )

        await self.session.commit()
        await self.session.refresh(claim)

        logger.info(
            f"Claim {claim.claim_number} transitioned: "
            f"{previous_stage.value} -> {target_stage.value}"
        )
        return claim

    async def archive_claim(
        self,
        claim_id: Union[UUID, str],
        org_id: UUID,
        archived_by: Optional[UUID] = None,
    ) -> Claim:
        """
        Soft delete a claim.

        Claims with recorded payments or supplements keep their ledger and
        cannot be archived.
        """
        claim = await self.require_claim(claim_id, org_id)

        if claim.is_archived:
            return claim

        payments_count = (
            await self.session.execute(
                select(func.count()).select_from(ClaimPayment).where(
                    ClaimPayment.claim_id == claim.id
                )
            )
        ).scalar_one()
        supplements_count = (
            await self.session.execute(
                select(func.count()).select_from(ClaimSupplement).where(
                    ClaimSupplement.claim_id == claim.id
                )
            )
        ).scalar_one()

        if payments_count or supplements_count:
            raise ClaimArchiveError(
                f"Cannot archive claim {claim.claim_number} with existing "
                f"supplements or payments"
            )

        claim.status = ClaimStatus.ARCHIVED
        claim.archived_at = datetime.now(timezone.utc)

        self._log_activity(
            claim.id,
            archived_by,
            ActivityType.CLAIM_ARCHIVED,
            f"Claim {claim.claim_number} was archived",
        )

        await self.session.commit()
        await self.session.refresh(claim)

        logger.info(f"Archived claim {claim.claim_number}")
        return claim

    # =========================================================================
    # Payments
    # =========================================================================

    async def record_payment(
        self,
        claim_id: Union[UUID, str],
        org_id: UUID,
        payment_data: PaymentCreateDTO,
        recorded_by: Optional[UUID] = None,
    ) -> ClaimPayment:
        """Append a payment to the claim ledger."""
        claim = await self.require_claim(claim_id, org_id)
        self._ensure_writable(claim)

        if payment_data.amount_cents <= 0:
            raise ClaimValidationError(
                "Payment amount must be positive",
                errors=["amount_cents"],
            )

        payment = ClaimPayment(
            id=uuid4(),
            claim_id=claim.id,
            amount_cents=payment_data.amount_cents,
            payment_type=payment_data.payment_type,
            paid_at=payment_data.paid_at or datetime.now(timezone.utc),
            reference=payment_data.reference,
            notes=payment_data.notes,
            recorded_by=recorded_by,
        )
        self.session.add(payment)

        self._log_activity(
            claim.id,
            recorded_by,
            ActivityType.PAYMENT_RECORDED,
            f"{payment_data.payment_type.value} payment of "
            f"${payment_data.amount_cents / 100:,.2f} recorded",
            {
                "payment_id": str(payment.id),
                "amount_cents": payment_data.amount_cents,
                "payment_type": payment_data.payment_type.value,
            },
        )

        await self.session.commit()
        await self.session.refresh(payment)

        logger.info(
            f"Recorded {payment_data.payment_type.value} payment "
            f"({payment_data.amount_cents} cents) on claim {claim.claim_number}"
        )
        return payment

    async def list_payments(
        self,
        claim_id: Union[UUID, str],
        org_id: UUID,
    ) -> list[ClaimPayment]:
        """List claim payments, most recent first."""
        claim = await self.require_claim(claim_id, org_id)

        result = await self.session.execute(
            select(ClaimPayment)
            .where(ClaimPayment.claim_id == claim.id)
            .order_by(ClaimPayment.paid_at.desc())
        )
        return list(result.scalars().all())

    # =========================================================================
    # Supplements
    # =========================================================================

    async def create_supplement(
        self,
        claim_id: Union[UUID, str],
        org_id: UUID,
        supplement_data: SupplementCreateDTO,
        created_by: Optional[UUID] = None,
    ) -> ClaimSupplement:
        """Create a supplement request on a claim."""
        claim = await self.require_claim(claim_id, org_id)
        self._ensure_writable(claim)

        if supplement_data.total_cents < 0:
            raise ClaimValidationError(
                "Supplement total cannot be negative",
                errors=["total_cents"],
            )

        supplement = ClaimSupplement(
            id=uuid4(),
            claim_id=claim.id,
            title=supplement_data.title,
            description=supplement_data.description,
            total_cents=supplement_data.total_cents,
            status=supplement_data.status,
            submitted_at=datetime.now(timezone.utc),
            created_by=created_by,
        )
        self.session.add(supplement)

        self._log_activity(
            claim.id,
            created_by,
            ActivityType.SUPPLEMENT_CREATED,
            f"Supplement '{supplement_data.title}' for "
            f"${supplement_data.total_cents / 100:,.2f} created",
            {
                "supplement_id": str(supplement.id),
                "total_cents": supplement_data.total_cents,
                "status": supplement_data.status.value,
            },
        )

        await self.session.commit()
        await self.session.refresh(supplement)

        logger.info(f"Created supplement {supplement.id} on claim {claim.claim_number}")
        return supplement

    async def list_supplements(
        self,
        claim_id: Union[UUID, str],
        org_id: UUID,
        status: Optional[SupplementStatus] = None,
    ) -> list[ClaimSupplement]:
        """List claim supplements, most recent first."""
        claim = await self.require_claim(claim_id, org_id)

        query = select(ClaimSupplement).where(ClaimSupplement.claim_id == claim.id)
        if status is not None:
            query = query.where(ClaimSupplement.status == status)

        result = await self.session.execute(
            query.order_by(ClaimSupplement.created_at.desc())
        )
        return list(result.scalars().all())

    async def update_supplement_status(
        self,
        claim_id: Union[UUID, str],
        org_id: UUID,
        supplement_id: UUID,
        status: SupplementStatus,
        updated_by: Optional[UUID] = None,
    ) -> ClaimSupplement:
        """
        Set a supplement's status.

        Any status may follow any other; supplements have no transition table.
        """
        claim = await self.require_claim(claim_id, org_id)
        self._ensure_writable(claim)

        result = await self.session.execute(
            select(ClaimSupplement).where(
                ClaimSupplement.id == supplement_id,
                ClaimSupplement.claim_id == claim.id,
            )
        )
        supplement = result.scalar_one_or_none()
        if supplement is None:
            raise SupplementNotFoundError(f"Supplement not found: {supplement_id}")

        previous_status = supplement.status
        supplement.status = status

        self._log_activity(
            claim.id,
            updated_by,
            ActivityType.SUPPLEMENT_UPDATED,
            f"Supplement '{supplement.title}' marked {status.value}",
            {
                "supplement_id": str(supplement.id),
                "from": previous_status.value if previous_status else None,
                "to": status.value,
            },
        )

        await self.session.commit()
        await self.session.refresh(supplement)

        logger.info(
            f"Supplement {supplement.id} on claim {claim.claim_number}: "
            f"{previous_status} -> {status.value}"
        )
        return supplement

    # =========================================================================
    # Notes / Activity
    # =========================================================================

    async def add_note(
        self,
        claim_id: Union[UUID, str],
        org_id: UUID,
        content: str,
        is_internal: bool = True,
        created_by: Optional[UUID] = None,
    ) -> ClaimNote:
        """Add a note to a claim."""
        claim = await self.require_claim(claim_id, org_id)
        self._ensure_writable(claim)

        if not content or not content.strip():
            raise ClaimValidationError("Note content is required", errors=["content"])

        note = ClaimNote(
            id=uuid4(),
            claim_id=claim.id,
            org_id=org_id,
            created_by=created_by,
            content=content.strip(),
            is_internal=is_internal,
        )
        self.session.add(note)

        self._log_activity(
            claim.id,
            created_by,
            ActivityType.NOTE_ADDED,
            "Internal note added" if is_internal else "Client-visible note added",
            {"note_id": str(note.id)},
        )

        await self.session.commit()
        await self.session.refresh(note)
        return note

    async def list_notes(
        self,
        claim_id: Union[UUID, str],
        org_id: UUID,
        include_internal: bool = True,
    ) -> list[ClaimNote]:
        claim = await self.require_claim(claim_id, org_id)

        query = select(ClaimNote).where(ClaimNote.claim_id == claim.id)
        if not include_internal:
            query = query.where(ClaimNote.is_internal.is_(False))

        result = await self.session.execute(query.order_by(ClaimNote.created_at.desc()))
        return list(result.scalars().all())

    async def list_activities(
        self,
        claim_id: Union[UUID, str],
        org_id: UUID,
        limit: int = 100,
    ) -> list[ClaimActivity]:
        claim = await self.require_claim(claim_id, org_id)

        result = await self.session.execute(
            select(ClaimActivity)
            .where(ClaimActivity.claim_id == claim.id)
            .order_by(ClaimActivity.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    # =========================================================================
    # Timeline
    # =========================================================================

    async def add_timeline_event(
        self,
        claim_id: Union[UUID, str],
        org_id: UUID,
        event_data: TimelineEventCreateDTO,
        created_by: Optional[UUID] = None,
    ) -> ClaimTimelineEvent:
        """Add a hand-entered event to the claim timeline."""
        claim = await self.require_claim(claim_id, org_id)
        self._ensure_writable(claim)

        title = (event_data.title or "").strip()
        if not title:
            raise ClaimValidationError("Timeline event title is required", errors=["title"])

        event = ClaimTimelineEvent(
            id=uuid4(),
            claim_id=claim.id,
            org_id=org_id,
            created_by=created_by,
            title=title,
            description=event_data.description,
            event_type=event_data.event_type,
            visible_to_client=event_data.visible_to_client,
        )
        self.session.add(event)

        self._log_activity(
            claim.id,
            created_by,
            ActivityType.TIMELINE_EVENT_ADDED,
            f"Timeline event '{title}' added",
            {
                "event_id": str(event.id),
                "event_type": event_data.event_type,
                "visible_to_client": event_data.visible_to_client,
            },
        )

        await self.session.commit()
        await self.session.refresh(event)
        return event

    async def list_timeline_events(
        self,
        claim_id: Union[UUID, str],
        org_id: UUID,
        client_visible_only: bool = False,
    ) -> list[ClaimTimelineEvent]:
        claim = await self.require_claim(claim_id, org_id)

        query = select(ClaimTimelineEvent).where(ClaimTimelineEvent.claim_id == claim.id)
        if client_visible_only:
            query = query.where(ClaimTimelineEvent.visible_to_client.is_(True))

        result = await self.session.execute(
            query.order_by(ClaimTimelineEvent.created_at.desc())
        )
        return list(result.scalars().all())

    async def set_timeline_visibility(
        self,
        claim_id: Union[UUID, str],
        org_id: UUID,
        event_ids: list[UUID],
        visible: bool,
        updated_by: Optional[UUID] = None,
    ) -> int:
        """
        Show or hide timeline events in the client portal.

        Ids that do not belong to the claim are ignored. Returns the number
        of events updated.
        """
        claim = await self.require_claim(claim_id, org_id)
        self._ensure_writable(claim)

        if not event_ids:
            return 0

        result = await self.session.execute(
            update(ClaimTimelineEvent)
            .where(
                ClaimTimelineEvent.id.in_(event_ids),
                ClaimTimelineEvent.claim_id == claim.id,
            )
            .values(visible_to_client=visible)
        )
        updated = result.rowcount or 0
        if not updated:
            return 0

        self._log_activity(
            claim.id,
            updated_by,
            ActivityType.TIMELINE_VISIBILITY_CHANGED,
            f"{updated} timeline event(s) {'shown to' if visible else 'hidden from'} client",
            {"event_ids": [str(e) for e in event_ids], "visible": visible},
        )

        await self.session.commit()

        logger.info(
            f"Set visible_to_client={visible} on {updated} timeline events "
            f"of claim {claim.claim_number}"
        )
        return updated
