"""
Unit tests for core enumerations.
"""

import pytest

from claimflow.core.enums import (
    ActivityType,
    ClaimStatus,
    LifecycleStage,
    PaymentType,
    SupplementStatus,
)


@pytest.mark.unit
class TestEnumValues:
    """Stored values are part of the database and API contract."""

    def test_lifecycle_stages(self):
        assert [s.value for s in LifecycleStage] == [
            "FILED",
            "ADJUSTER_REVIEW",
            "APPROVED",
            "DENIED",
            "APPEAL",
            "BUILD",
            "COMPLETED",
            "DEPRECIATION",
        ]

    def test_claim_status_values(self):
        assert {s.value for s in ClaimStatus} == {
            "new",
            "in_progress",
            "approved",
            "denied",
            "appeal",
            "completed",
            "archived",
        }

    def test_payment_types(self):
        assert {p.value for p in PaymentType} == {
            "ACV",
            "RCV",
            "DEPRECIATION",
            "SUPPLEMENT",
            "OTHER",
        }

    def test_supplement_statuses(self):
        assert {s.value for s in SupplementStatus} == {"requested", "approved", "denied"}

    def test_activity_types_fit_column(self):
        assert all(len(a.value) <= 32 for a in ActivityType)

    @pytest.mark.parametrize("enum_cls", [LifecycleStage, ClaimStatus, PaymentType])
    def test_str_enums_compare_to_values(self, enum_cls):
        for member in enum_cls:
            assert member == member.value
