"""
Claim Lifecycle State Machine.

Provides:
- Stage transition table
- Transition validation
- Stage to display status mapping

State Diagram:
    (new) -> FILED
    FILED -> ADJUSTER_REVIEW
    ADJUSTER_REVIEW -> APPROVED | DENIED
    APPROVED -> BUILD
    DENIED -> APPEAL
    APPEAL -> APPROVED | DENIED
    BUILD -> COMPLETED
    COMPLETED -> DEPRECIATION
    DEPRECIATION (terminal)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Union

from claimflow.core.enums import ClaimStatus, LifecycleStage

logger = logging.getLogger(__name__)


# =============================================================================
# Transition Table
# =============================================================================


ENTRY_STAGE = LifecycleStage.FILED

STAGE_TRANSITIONS: dict[LifecycleStage, tuple[LifecycleStage, ...]] = {
    LifecycleStage.FILED: (LifecycleStage.ADJUSTER_REVIEW,),
    LifecycleStage.ADJUSTER_REVIEW: (LifecycleStage.APPROVED, LifecycleStage.DENIED),
    LifecycleStage.APPROVED: (LifecycleStage.BUILD,),
    LifecycleStage.DENIED: (LifecycleStage.APPEAL,),
    LifecycleStage.APPEAL: (LifecycleStage.APPROVED, LifecycleStage.DENIED),
    LifecycleStage.BUILD: (LifecycleStage.COMPLETED,),
    LifecycleStage.COMPLETED: (LifecycleStage.DEPRECIATION,),
    LifecycleStage.DEPRECIATION: (),
}

STAGE_STATUS_MAP: dict[LifecycleStage, ClaimStatus] = {
    LifecycleStage.FILED: ClaimStatus.NEW,
    LifecycleStage.ADJUSTER_REVIEW: ClaimStatus.IN_PROGRESS,
    LifecycleStage.APPROVED: ClaimStatus.APPROVED,
    LifecycleStage.DENIED: ClaimStatus.DENIED,
    LifecycleStage.APPEAL: ClaimStatus.APPEAL,
    LifecycleStage.BUILD: ClaimStatus.IN_PROGRESS,
    LifecycleStage.COMPLETED: ClaimStatus.COMPLETED,
    LifecycleStage.DEPRECIATION: ClaimStatus.COMPLETED,
}

StageLike = Union[LifecycleStage, str]


def _coerce_stage(value: Optional[StageLike]) -> Optional[LifecycleStage]:
    """Convert a stage or stage name to LifecycleStage; unknown values become None."""
    if value is None or isinstance(value, LifecycleStage):
        return value
    try:
        return LifecycleStage(str(value).upper())
    except ValueError:
        return None


def is_valid_transition(
    from_stage: Optional[StageLike],
    to_stage: StageLike,
) -> bool:
    """
    Check a proposed stage change against the transition table.

    A claim with no current stage may only enter at FILED. Unknown stage
    values are rejected rather than raising.
    """
    target = _coerce_stage(to_stage)
    if target is None:
        return False

    if from_stage is None:
        return target == ENTRY_STAGE

    current = _coerce_stage(from_stage)
    if current is None:
        return False

    return target in STAGE_TRANSITIONS.get(current, ())


def get_next_stages(stage: Optional[StageLike]) -> list[LifecycleStage]:
    """Get the stages reachable in one step from ``stage``."""
    if stage is None:
        return [ENTRY_STAGE]
    current = _coerce_stage(stage)
    if current is None:
        return []
    return list(STAGE_TRANSITIONS.get(current, ()))


def is_terminal_stage(stage: StageLike) -> bool:
    """Check if stage is terminal (no further transitions)."""
    current = _coerce_stage(stage)
    return current is not None and not STAGE_TRANSITIONS.get(current)


def status_for_stage(stage: LifecycleStage) -> ClaimStatus:
    """Display status written to the claim row for a lifecycle stage."""
    return STAGE_STATUS_MAP.get(stage, ClaimStatus.NEW)


def get_stage_display_name(stage: LifecycleStage) -> str:
    """Get human-readable stage name."""
    display_names = {
        LifecycleStage.FILED: "Filed",
        LifecycleStage.ADJUSTER_REVIEW: "Adjuster Review",
        LifecycleStage.APPROVED: "Approved",
        LifecycleStage.DENIED: "Denied",
        LifecycleStage.APPEAL: "Appeal",
        LifecycleStage.BUILD: "Build",
        LifecycleStage.COMPLETED: "Completed",
        LifecycleStage.DEPRECIATION: "Depreciation Release",
    }
    return display_names.get(stage, stage.value)


# =============================================================================
# Transition Context / Result
# =============================================================================


@dataclass
class TransitionContext:
    """Context for a transition attempt."""

    claim_id: str
    current_stage: Optional[LifecycleStage]
    target_stage: LifecycleStage
    triggered_by: Optional[str] = None
    notes: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class TransitionResult:
    """Result of a transition attempt."""

    success: bool
    from_stage: Optional[LifecycleStage]
    to_stage: Optional[LifecycleStage] = None
    error: Optional[str] = None


# =============================================================================
# State Machine
# =============================================================================


class ClaimLifecycle:
    """
    Lifecycle state machine for claims.

    Stateless apart from the lookup table; callers persist the result.
    """

    def __init__(
        self,
        transitions: Optional[dict[LifecycleStage, tuple[LifecycleStage, ...]]] = None,
    ):
        self._transitions = transitions or STAGE_TRANSITIONS

    def get_next_stages(self, stage: Optional[LifecycleStage]) -> list[LifecycleStage]:
        """Get all possible next stages from current stage."""
        if stage is None:
            return [ENTRY_STAGE]
        return list(self._transitions.get(stage, ()))

    def can_transition(
        self,
        from_stage: Optional[LifecycleStage],
        to_stage: LifecycleStage,
    ) -> bool:
        """Check if transition from one stage to another is valid."""
        if self._transitions is STAGE_TRANSITIONS:
            return is_valid_transition(from_stage, to_stage)
        return to_stage in self.get_next_stages(from_stage)

    def validate_transition(self, context: TransitionContext) -> TransitionResult:
        """
        Validate a transition attempt.

        Args:
            context: Transition context with all details

        Returns:
            TransitionResult indicating success/failure
        """
        if not self.can_transition(context.current_stage, context.target_stage):
            current = context.current_stage.value if context.current_stage else "none"
            allowed = ", ".join(s.value for s in self.get_next_stages(context.current_stage))
            logger.warning(
                f"Rejected transition for claim {context.claim_id}: "
                f"{current} -> {context.target_stage.value}"
            )
            return TransitionResult(
                success=False,
                from_stage=context.current_stage,
                error=(
                    f"Invalid transition: {current} -> {context.target_stage.value}"
                    f" (allowed: {allowed or 'none, stage is terminal'})"
                ),
            )

        return TransitionResult(
            success=True,
            from_stage=context.current_stage,
            to_stage=context.target_stage,
        )


# =============================================================================
# Singleton Instance
# =============================================================================


_lifecycle: Optional[ClaimLifecycle] = None


def get_claim_lifecycle() -> ClaimLifecycle:
    """Get singleton lifecycle instance."""
    global _lifecycle
    if _lifecycle is None:
        _lifecycle = ClaimLifecycle()
    return _lifecycle
