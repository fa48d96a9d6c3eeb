"""
Depreciation Draft Builder.

Provides:
- Configurable depreciation/tax rates (DepreciationRates)
- Pure draft derivation from payments and approved supplements
- Draft builder that loads the ledger for a claim
- Invoice issuing (persists a draft snapshot)

Derivation per line item:
    depreciation = round_half_up(cost * rate)
    recoverable  = cost - depreciation

Totals:
    tax       = round_half_up((subtotal - depreciation) * tax_rate)
    total_due = subtotal - depreciation + tax
"""

import logging
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Union
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from claimflow.core.config import ClaimsSettings, get_claims_settings
from claimflow.core.enums import ActivityType, PaymentType, SupplementStatus
from claimflow.models.claim import (
    Claim,
    ClaimActivity,
    ClaimPayment,
    ClaimSupplement,
    DepreciationInvoice,
)
from claimflow.services.claims_service import ClaimNotFoundError

logger = logging.getLogger(__name__)


# =============================================================================
# Rates
# =============================================================================


@dataclass(frozen=True)
class DepreciationRates:
    """Rates used to derive a depreciation draft."""

    acv_payment: Decimal = Decimal("0.25")
    other_payment: Decimal = Decimal("0.15")
    approved_supplement: Decimal = Decimal("0.20")
    tax: Decimal = Decimal("0.08")

    def rate_for_payment(self, payment_type: Union[PaymentType, str]) -> Decimal:
        if str(getattr(payment_type, "value", payment_type)).upper() == PaymentType.ACV.value:
            return self.acv_payment
        return self.other_payment

    def with_overrides(self, overrides: dict[str, Decimal]) -> "DepreciationRates":
        if not overrides:
            return self
        values = asdict(self)
        values.update({key: Decimal(str(rate)) for key, rate in overrides.items()})
        return DepreciationRates(**values)


DEFAULT_DEPRECIATION_RATES = DepreciationRates()


def rates_from_settings(
    settings: Optional[ClaimsSettings] = None,
    carrier: Optional[str] = None,
) -> DepreciationRates:
    """
    Resolve rates from configuration, applying carrier overrides if any.

    With default settings this equals DEFAULT_DEPRECIATION_RATES.
    """
    settings = settings or get_claims_settings()
    rates = DepreciationRates(
        acv_payment=settings.DEPRECIATION_ACV_RATE,
        other_payment=settings.DEPRECIATION_OTHER_PAYMENT_RATE,
        approved_supplement=settings.DEPRECIATION_SUPPLEMENT_RATE,
        tax=settings.DEPRECIATION_TAX_RATE,
    )
    return rates.with_overrides(settings.carrier_overrides(carrier))


def round_cents(value: Decimal) -> int:
    """Round to whole cents, halves away from zero."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# =============================================================================
# Draft
# =============================================================================


@dataclass(frozen=True)
class DepreciationLineItem:
    """One payment or supplement in a depreciation draft."""

    description: str
    cost: int
    depreciation_rate: Decimal
    depreciation: int
    recoverable: int

    @classmethod
    def from_cost(
        cls, description: str, cost: int, rate: Decimal
    ) -> "DepreciationLineItem":
        depreciation = round_cents(Decimal(cost) * rate)
        return cls(
            description=description,
            cost=cost,
            depreciation_rate=rate,
            depreciation=depreciation,
            recoverable=cost - depreciation,
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "cost": self.cost,
            "depreciationRate": float(self.depreciation_rate),
            "depreciation": self.depreciation,
            "recoverable": self.recoverable,
        }


@dataclass(frozen=True)
class DepreciationDraft:
    """Depreciation invoice draft, amounts in cents."""

    subtotal_cents: int
    depreciation_cents: int
    tax_cents: int
    total_due_cents: int
    line_items: list[DepreciationLineItem] = field(default_factory=list)


def _payment_description(payment: ClaimPayment) -> str:
    payment_type = getattr(payment.payment_type, "value", payment.payment_type)
    details = []
    if payment.paid_at is not None:
        details.append(payment.paid_at.date().isoformat())
    if payment.reference:
        details.append(payment.reference)
    suffix = f" ({', '.join(details)})" if details else ""
    return f"{payment_type} payment{suffix}"


def build_depreciation_draft(
    payments: Iterable[ClaimPayment],
    supplements: Iterable[ClaimSupplement],
    rates: DepreciationRates = DEFAULT_DEPRECIATION_RATES,
) -> DepreciationDraft:
    """
    Derive a depreciation draft.

    One line item per payment, then one per approved supplement. Supplements
    in any other status are ignored.
    """
    line_items: list[DepreciationLineItem] = []

    for payment in payments:
        line_items.append(
            DepreciationLineItem.from_cost(
                _payment_description(payment),
                int(payment.amount_cents),
                rates.rate_for_payment(payment.payment_type),
            )
        )

    for supplement in supplements:
        if SupplementStatus(supplement.status) != SupplementStatus.APPROVED:
            continue
        line_items.append(
            DepreciationLineItem.from_cost(
                f"Supplement: {supplement.title}",
                int(supplement.total_cents),
                rates.approved_supplement,
            )
        )

    subtotal = sum(item.cost for item in line_items)
    depreciation = sum(item.depreciation for item in line_items)
    tax = round_cents(Decimal(subtotal - depreciation) * rates.tax)

    return DepreciationDraft(
        subtotal_cents=subtotal,
        depreciation_cents=depreciation,
        tax_cents=tax,
        total_due_cents=subtotal - depreciation + tax,
        line_items=line_items,
    )


# =============================================================================
# Builder
# =============================================================================


class DepreciationDraftBuilder:
    """Loads a claim's ledger and derives its depreciation draft."""

    def __init__(
        self,
        session: AsyncSession,
        rates: Optional[DepreciationRates] = None,
    ):
        self.session = session
        self.rates = rates

    async def _load_claim(self, claim_id: UUID, org_id: Optional[UUID]) -> Claim:
        query = select(Claim).where(Claim.id == claim_id)
        if org_id is not None:
            query = query.where(Claim.org_id == org_id)

        result = await self.session.execute(query)
        claim = result.scalar_one_or_none()
        if claim is None:
            raise ClaimNotFoundError(f"Claim not found: {claim_id}")
        return claim

    async def build(
        self,
        claim_id: UUID,
        org_id: Optional[UUID] = None,
    ) -> DepreciationDraft:
        """
        Build the depreciation draft for a claim.

        Read-only; repeated calls without intervening writes return equal
        drafts.

        Raises:
            ClaimNotFoundError: claim does not exist (in the organization)
        """
        claim = await self._load_claim(claim_id, org_id)

        payments_result = await self.session.execute(
            select(ClaimPayment)
            .where(ClaimPayment.claim_id == claim.id)
            .order_by(ClaimPayment.paid_at, ClaimPayment.id)
        )
        supplements_result = await self.session.execute(
            select(ClaimSupplement)
            .where(
                ClaimSupplement.claim_id == claim.id,
                ClaimSupplement.status == SupplementStatus.APPROVED,
            )
            .order_by(ClaimSupplement.created_at, ClaimSupplement.id)
        )

        rates = self.rates or rates_from_settings(carrier=claim.carrier)
        return build_depreciation_draft(
            payments_result.scalars().all(),
            supplements_result.scalars().all(),
            rates,
        )

    async def issue_invoice(
        self,
        claim_id: UUID,
        org_id: Optional[UUID] = None,
        generated_by: Optional[UUID] = None,
    ) -> DepreciationInvoice:
        """Persist the current draft as a depreciation invoice."""
        draft = await self.build(claim_id, org_id)

        invoice = DepreciationInvoice(
            id=uuid4(),
            claim_id=claim_id,
            subtotal_cents=draft.subtotal_cents,
            depreciation_cents=draft.depreciation_cents,
            tax_cents=draft.tax_cents,
            total_due_cents=draft.total_due_cents,
            line_items=[item.to_json() for item in draft.line_items],
            generated_at=datetime.now(timezone.utc),
            generated_by=generated_by,
        )
        self.session.add(invoice)
        self.session.add(
            ClaimActivity(
                id=uuid4(),
                claim_id=claim_id,
                user_id=generated_by,
                activity_type=ActivityType.INVOICE_GENERATED,
                message=(
                    f"Depreciation invoice generated: "
                    f"${draft.total_due_cents / 100:,.2f} due"
                ),
                details={
                    "invoice_id": str(invoice.id),
                    "total_due_cents": draft.total_due_cents,
                },
            )
        )

        await self.session.commit()
        await self.session.refresh(invoice)

        logger.info(
            f"Issued depreciation invoice {invoice.id} for claim {claim_id}: "
            f"{draft.total_due_cents} cents due"
        )
        return invoice
