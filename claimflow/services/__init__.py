"""
Services Layer for the Claim Lifecycle Engine.

Exports lifecycle, exposure, depreciation and claim management services.
"""

from claimflow.services.claim_lifecycle import (
    ClaimLifecycle,
    TransitionContext,
    TransitionResult,
    get_claim_lifecycle,
    get_next_stages,
    is_terminal_stage,
    is_valid_transition,
    status_for_stage,
)
from claimflow.services.claims_service import (
    ClaimArchiveError,
    ClaimCreateDTO,
    ClaimNotFoundError,
    ClaimStageTransitionError,
    ClaimsService,
    ClaimsServiceError,
    ClaimUpdateDTO,
    ClaimValidationError,
    PaymentCreateDTO,
    SupplementCreateDTO,
    SupplementNotFoundError,
    TimelineEventCreateDTO,
)
from claimflow.services.exposure import (
    ClaimExposure,
    ExposureCalculator,
    summarize_exposure,
)
from claimflow.services.depreciation import (
    DEFAULT_DEPRECIATION_RATES,
    DepreciationDraft,
    DepreciationDraftBuilder,
    DepreciationLineItem,
    DepreciationRates,
    build_depreciation_draft,
    rates_from_settings,
)

__all__ = [
    # Lifecycle
    "ClaimLifecycle",
    "TransitionContext",
    "TransitionResult",
    "get_claim_lifecycle",
    "get_next_stages",
    "is_terminal_stage",
    "is_valid_transition",
    "status_for_stage",
    # Claims
    "ClaimsService",
    "ClaimsServiceError",
    "ClaimNotFoundError",
    "SupplementNotFoundError",
    "ClaimValidationError",
    "ClaimStageTransitionError",
    "ClaimArchiveError",
    "ClaimCreateDTO",
    "ClaimUpdateDTO",
    "PaymentCreateDTO",
    "SupplementCreateDTO",
    "TimelineEventCreateDTO",
    # Exposure
    "ClaimExposure",
    "ExposureCalculator",
    "summarize_exposure",
    # Depreciation
    "DEFAULT_DEPRECIATION_RATES",
    "DepreciationDraft",
    "DepreciationDraftBuilder",
    "DepreciationLineItem",
    "DepreciationRates",
    "build_depreciation_draft",
    "rates_from_settings",
]
