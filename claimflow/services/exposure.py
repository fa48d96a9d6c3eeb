"""
Exposure Calculator.

Aggregates the money already paid on a claim and the money still
claimable through supplements.

The two aggregates are read with separate queries and are not taken from a
single snapshot; a payment recorded between them can be missed by one read.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional, Union
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from claimflow.core.enums import SupplementStatus
from claimflow.models.claim import ClaimPayment, ClaimSupplement

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClaimExposure:
    """Exposure breakdown for one claim, in cents."""

    paid_cents: int = 0
    approved_supplement_cents: int = 0
    pending_supplement_cents: int = 0

    @property
    def exposure_cents(self) -> int:
        return (
            self.paid_cents
            + self.approved_supplement_cents
            + self.pending_supplement_cents
        )


def summarize_exposure(
    paid_cents: Optional[int],
    supplement_totals: Iterable[tuple[Union[SupplementStatus, str], Optional[int]]],
) -> ClaimExposure:
    """
    Build a ClaimExposure from raw aggregates.

    Args:
        paid_cents: Sum of all payment amounts (None when there are none)
        supplement_totals: (status, total_cents) pairs; a status may repeat

    Denied supplements and unknown statuses do not count toward exposure.
    """
    approved = 0
    pending = 0

    for status, total in supplement_totals:
        amount = int(total or 0)
        try:
            status = SupplementStatus(status)
        except ValueError:
            continue
        if status == SupplementStatus.APPROVED:
            approved += amount
        elif status == SupplementStatus.REQUESTED:
            pending += amount

    return ClaimExposure(
        paid_cents=int(paid_cents or 0),
        approved_supplement_cents=approved,
        pending_supplement_cents=pending,
    )


class ExposureCalculator:
    """Computes claim exposure from the payment and supplement ledgers."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def compute_exposure(self, claim_id: UUID) -> ClaimExposure:
        """
        Compute exposure for a claim.

        Read-only. A claim without ledger rows yields all zeros.
        """
        paid_result = await self.session.execute(
            select(func.coalesce(func.sum(ClaimPayment.amount_cents), 0)).where(
                ClaimPayment.claim_id == claim_id
            )
        )
        paid_cents = paid_result.scalar_one()

        supplement_result = await self.session.execute(
            select(
                ClaimSupplement.status,
                func.coalesce(func.sum(ClaimSupplement.total_cents), 0),
            )
            .where(ClaimSupplement.claim_id == claim_id)
            .group_by(ClaimSupplement.status)
        )

        exposure = summarize_exposure(paid_cents, supplement_result.all())
        logger.debug(
            f"Exposure for claim {claim_id}: {exposure.exposure_cents} cents "
            f"(paid={exposure.paid_cents}, "
            f"approved={exposure.approved_supplement_cents}, "
            f"pending={exposure.pending_supplement_cents})"
        )
        return exposure
