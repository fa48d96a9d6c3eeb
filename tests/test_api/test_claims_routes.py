"""API tests for claim routes.
Services are patched; authentication and the DB session are overridden.
"""

from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import UUID, uuid4

import jwt
import pytest
from fastapi.testclient import TestClient

from claimflow import __version__
from claimflow.api.config import get_settings
from claimflow.api.deps import DEV_ORG_UUID, DEV_USER_UUID, get_token_claims
from claimflow.api.main import app
from claimflow.core.enums import LifecycleStage, PaymentType
from claimflow.db.connection import get_session
from claimflow.schemas.auth import CLAIM_PERMISSIONS, TokenClaims
from claimflow.services.claims_service import (
    ClaimArchiveError,
    ClaimNotFoundError,
    ClaimStageTransitionError,
    ClaimValidationError,
)
from claimflow.services.depreciation import build_depreciation_draft
from claimflow.services.exposure import ClaimExposure

client = TestClient(app)

ROUTES = "claimflow.api.routes.claims"


async def _dummy_session():
    yield MagicMock()


@pytest.fixture(autouse=True)
def reset_dependency_overrides():
    """Ensure dependency overrides are isolated per test."""
    app.dependency_overrides.clear()
    app.dependency_overrides[get_session] = _dummy_session
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def token_claims(org_id, user_id):
    return TokenClaims(
        sub=str(user_id),
        org_id=str(org_id),
        roles=["project_manager"],
        permissions=list(CLAIM_PERMISSIONS),
    )


@pytest.fixture
def authenticated(token_claims):
    app.dependency_overrides[get_token_claims] = lambda: token_claims
    return token_claims


@pytest.mark.api
class TestAuthentication:
    """Permission and token checks."""

    def test_missing_token_returns_401(self):
        response = client.get("/api/v1/claims/")
        assert response.status_code == 401

    def test_invalid_token_returns_401(self):
        response = client.get(
            "/api/v1/claims/", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401

    def test_valid_jwt_is_accepted(self, make_claim, org_id, user_id):
        token = jwt.encode(
            {
                "sub": str(user_id),
                "org_id": str(org_id),
                "permissions": ["claims:read"],
            },
            get_settings().JWT_SECRET_KEY,
            algorithm=get_settings().JWT_ALGORITHM,
        )
        claim = make_claim()

        with patch(f"{ROUTES}.ClaimsService") as service_cls:
            service_cls.return_value.get_claim = AsyncMock(return_value=claim)
            response = client.get(
                f"/api/v1/claims/{claim.id}",
                headers={"Authorization": f"Bearer {token}"},
            )

        assert response.status_code == 200
        service_cls.return_value.get_claim.assert_awaited_once_with(str(claim.id), org_id)

    def test_missing_permission_returns_403(self, token_claims):
        token_claims.permissions = ["claims:read"]
        app.dependency_overrides[get_token_claims] = lambda: token_claims

        response = client.post("/api/v1/claims/", json={"title": "Hail"})

        assert response.status_code == 403
        assert response.json()["detail"]["required_permissions"] == ["claims:create"]

    def test_dev_user_header_in_development(self, make_claim):
        dev_settings = get_settings().model_copy(update={"ENVIRONMENT": "development"})
        claim = make_claim(org_id=UUID(DEV_ORG_UUID))

        with patch("claimflow.api.deps.get_settings", return_value=dev_settings), patch(
            f"{ROUTES}.ClaimsService"
        ) as service_cls:
            service_cls.return_value.get_claim = AsyncMock(return_value=claim)
            response = client.get(
                f"/api/v1/claims/{claim.id}", headers={"X-Dev-User": "estimator"}
            )

        assert response.status_code == 200
        service_cls.return_value.get_claim.assert_awaited_once_with(
            str(claim.id), UUID(DEV_ORG_UUID)
        )

    def test_dev_user_header_grants_all_claim_permissions(self, make_claim):
        dev_settings = get_settings().model_copy(update={"ENVIRONMENT": "development"})
        claim = make_claim(org_id=UUID(DEV_ORG_UUID))

        with patch("claimflow.api.deps.get_settings", return_value=dev_settings), patch(
            f"{ROUTES}.ClaimsService"
        ) as service_cls:
            service_cls.return_value.create_claim = AsyncMock(return_value=claim)
            response = client.post(
                "/api/v1/claims/",
                json={"title": "Hail"},
                headers={"X-Dev-User": "estimator"},
            )

        assert response.status_code == 201
        kwargs = service_cls.return_value.create_claim.await_args.kwargs
        assert kwargs["created_by"] == UUID(DEV_USER_UUID)

    def test_dev_user_header_ignored_outside_development(self):
        test_settings = get_settings().model_copy(update={"ENVIRONMENT": "testing"})

        with patch("claimflow.api.deps.get_settings", return_value=test_settings):
            response = client.get("/api/v1/claims/", headers={"X-Dev-User": "estimator"})

        assert response.status_code == 401


@pytest.mark.api
class TestClaimRoutes:
    """CRUD and lifecycle routes."""

    def test_create_claim(self, authenticated, make_claim, user_id):
        claim = make_claim(title="Hail")

        with patch(f"{ROUTES}.ClaimsService") as service_cls:
            service_cls.return_value.create_claim = AsyncMock(return_value=claim)
            response = client.post(
                "/api/v1/claims/",
                json={"title": "Hail", "carrier": "State Farm", "deductible_cents": 100000},
            )

        assert response.status_code == 201
        payload = response.json()
        assert payload["claim_number"] == "CLM-2026-000001"
        assert payload["lifecycle_stage"] == "FILED"
        assert payload["status"] == "new"

        dto = service_cls.return_value.create_claim.await_args.args[0]
        assert dto.title == "Hail"
        assert dto.deductible_cents == 100000
        assert service_cls.return_value.create_claim.await_args.kwargs["created_by"] == user_id

    def test_create_claim_validates_body(self, authenticated):
        response = client.post("/api/v1/claims/", json={"title": "   "})
        assert response.status_code == 422

    def test_list_claims(self, authenticated, make_claim):
        claims = [make_claim(), make_claim(claim_number="CLM-2026-000002")]

        with patch(f"{ROUTES}.ClaimsService") as service_cls:
            service_cls.return_value.list_claims = AsyncMock(return_value=(claims, 2))
            response = client.get("/api/v1/claims/?page=2&page_size=10&stage=FILED")

        assert response.status_code == 200
        payload = response.json()
        assert payload["total"] == 2
        assert payload["page"] == 2
        assert payload["size"] == 10
        kwargs = service_cls.return_value.list_claims.await_args.kwargs
        assert kwargs["skip"] == 10
        assert kwargs["stage"] == LifecycleStage.FILED

    def test_get_claim_not_found(self, authenticated):
        with patch(f"{ROUTES}.ClaimsService") as service_cls:
            service_cls.return_value.get_claim = AsyncMock(return_value=None)
            response = client.get("/api/v1/claims/CLM-2026-999999")

        assert response.status_code == 404
        assert "CLM-2026-999999" in response.json()["detail"]

    def test_update_claim_rejects_stage_field(self, authenticated):
        response = client.patch(
            f"/api/v1/claims/{uuid4()}", json={"lifecycle_stage": "APPROVED"}
        )
        assert response.status_code == 422

    def test_archive_claim_blocked(self, authenticated):
        with patch(f"{ROUTES}.ClaimsService") as service_cls:
            service_cls.return_value.archive_claim = AsyncMock(
                side_effect=ClaimArchiveError("Cannot archive claim with existing payments")
            )
            response = client.delete(f"/api/v1/claims/{uuid4()}")

        assert response.status_code == 409

    def test_transitions(self, authenticated, make_claim):
        claim = make_claim(lifecycle_stage=LifecycleStage.ADJUSTER_REVIEW)

        with patch(f"{ROUTES}.ClaimsService") as service_cls:
            service_cls.return_value.require_claim = AsyncMock(return_value=claim)
            response = client.get(f"/api/v1/claims/{claim.id}/transitions")

        assert response.status_code == 200
        payload = response.json()
        assert payload["current_stage"] == "ADJUSTER_REVIEW"
        assert payload["allowed_stages"] == ["APPROVED", "DENIED"]
        assert payload["is_terminal"] is False

    def test_stage_transition(self, authenticated, make_claim):
        claim = make_claim(lifecycle_stage=LifecycleStage.ADJUSTER_REVIEW)

        with patch(f"{ROUTES}.ClaimsService") as service_cls:
            service_cls.return_value.transition_stage = AsyncMock(return_value=claim)
            response = client.post(
                f"/api/v1/claims/{claim.id}/stage",
                json={"stage": "ADJUSTER_REVIEW", "notes": "Inspection scheduled"},
            )

        assert response.status_code == 200
        args = service_cls.return_value.transition_stage.await_args
        assert args.args[2] == LifecycleStage.ADJUSTER_REVIEW
        assert args.kwargs["notes"] == "Inspection scheduled"

    def test_invalid_stage_transition_returns_409(self, authenticated):
        with patch(f"{ROUTES}.ClaimsService") as service_cls:
            service_cls.return_value.transition_stage = AsyncMock(
                side_effect=ClaimStageTransitionError("Invalid transition: FILED -> APPROVED")
            )
            response = client.post(
                f"/api/v1/claims/{uuid4()}/stage", json={"stage": "APPROVED"}
            )

        assert response.status_code == 409
        assert "FILED -> APPROVED" in response.json()["detail"]

    def test_unknown_stage_returns_422(self, authenticated):
        response = client.post(f"/api/v1/claims/{uuid4()}/stage", json={"stage": "PAID"})
        assert response.status_code == 422

    def test_unexpected_error_returns_500(self, authenticated):
        with patch(f"{ROUTES}.ClaimsService") as service_cls:
            service_cls.return_value.get_claim = AsyncMock(side_effect=RuntimeError("boom"))
            response = client.get(f"/api/v1/claims/{uuid4()}")

        assert response.status_code == 500
        assert "boom" not in response.json()["detail"]


@pytest.mark.api
class TestFinancialRoutes:
    """Exposure, depreciation and ledger routes."""

    def test_exposure_is_camel_case(self, authenticated, make_claim):
        claim = make_claim()

        with patch(f"{ROUTES}.ClaimsService") as service_cls, patch(
            f"{ROUTES}.ExposureCalculator"
        ) as calculator_cls:
            service_cls.return_value.require_claim = AsyncMock(return_value=claim)
            calculator_cls.return_value.compute_exposure = AsyncMock(
                return_value=ClaimExposure(10000, 2000, 500)
            )
            response = client.get(f"/api/v1/claims/{claim.id}/exposure")

        assert response.status_code == 200
        assert response.json() == {
            "exposureCents": 12500,
            "paidCents": 10000,
            "approvedSupplementCents": 2000,
            "pendingSupplementCents": 500,
        }
        calculator_cls.return_value.compute_exposure.assert_awaited_once_with(claim.id)

    def test_exposure_claim_not_found(self, authenticated):
        with patch(f"{ROUTES}.ClaimsService") as service_cls:
            service_cls.return_value.require_claim = AsyncMock(
                side_effect=ClaimNotFoundError("Claim not found: x")
            )
            response = client.get("/api/v1/claims/x/exposure")

        assert response.status_code == 404

    def test_depreciation_draft(self, authenticated, make_claim):
        claim = make_claim()
        payment = SimpleNamespace(
            amount_cents=10000,
            payment_type=PaymentType.ACV,
            paid_at=None,
            reference=None,
        )
        draft = build_depreciation_draft([payment], [])

        with patch(f"{ROUTES}.ClaimsService") as service_cls, patch(
            f"{ROUTES}.DepreciationDraftBuilder"
        ) as builder_cls:
            service_cls.return_value.require_claim = AsyncMock(return_value=claim)
            builder_cls.return_value.build = AsyncMock(return_value=draft)
            response = client.get(f"/api/v1/claims/{claim.id}/depreciation-draft")

        assert response.status_code == 200
        assert response.json() == {
            "subtotalCents": 10000,
            "depreciationCents": 2500,
            "taxCents": 600,
            "totalDueCents": 8100,
            "lineItems": [
                {
                    "description": "ACV payment",
                    "cost": 10000,
                    "depreciationRate": 0.25,
                    "depreciation": 2500,
                    "recoverable": 7500,
                }
            ],
        }

    def test_issue_invoice(self, authenticated, make_claim, user_id):
        claim = make_claim()
        invoice = SimpleNamespace(
            id=uuid4(),
            claim_id=claim.id,
            subtotal_cents=10000,
            depreciation_cents=2500,
            tax_cents=600,
            total_due_cents=8100,
            line_items=[
                {
                    "description": "ACV payment",
                    "cost": 10000,
                    "depreciationRate": 0.25,
                    "depreciation": 2500,
                    "recoverable": 7500,
                }
            ],
            generated_at=datetime.now(timezone.utc),
            generated_by=user_id,
        )

        with patch(f"{ROUTES}.ClaimsService") as service_cls, patch(
            f"{ROUTES}.DepreciationDraftBuilder"
        ) as builder_cls:
            service_cls.return_value.require_claim = AsyncMock(return_value=claim)
            builder_cls.return_value.issue_invoice = AsyncMock(return_value=invoice)
            response = client.post(f"/api/v1/claims/{claim.id}/depreciation-invoices")

        assert response.status_code == 201
        payload = response.json()
        assert payload["totalDueCents"] == 8100
        assert payload["lineItems"][0]["depreciationRate"] == 0.25

    def test_record_payment(self, authenticated, make_claim):
        claim = make_claim()
        payment = SimpleNamespace(
            id=uuid4(),
            claim_id=claim.id,
            amount_cents=10000,
            payment_type=PaymentType.ACV,
            paid_at=datetime.now(timezone.utc),
            reference="CHK-1",
            notes=None,
            recorded_by=None,
            created_at=datetime.now(timezone.utc),
        )

        with patch(f"{ROUTES}.ClaimsService") as service_cls:
            service_cls.return_value.record_payment = AsyncMock(return_value=payment)
            response = client.post(
                f"/api/v1/claims/{claim.id}/payments",
                json={"amount_cents": 10000, "payment_type": "ACV", "reference": "CHK-1"},
            )

        assert response.status_code == 201
        assert response.json()["payment_type"] == "ACV"

    def test_record_payment_rejects_zero_amount(self, authenticated):
        response = client.post(
            f"/api/v1/claims/{uuid4()}/payments",
            json={"amount_cents": 0, "payment_type": "ACV"},
        )
        assert response.status_code == 422

    def test_update_supplement_status(self, authenticated, make_claim):
        claim = make_claim()
        now = datetime.now(timezone.utc)
        supplement = SimpleNamespace(
            id=uuid4(),
            claim_id=claim.id,
            title="Ridge vent",
            description=None,
            total_cents=45000,
            status="approved",
            submitted_at=now,
            created_by=None,
            created_at=now,
            updated_at=now,
        )

        with patch(f"{ROUTES}.ClaimsService") as service_cls:
            service_cls.return_value.update_supplement_status = AsyncMock(
                return_value=supplement
            )
            response = client.patch(
                f"/api/v1/claims/{claim.id}/supplements/{supplement.id}",
                json={"status": "approved"},
            )

        assert response.status_code == 200
        assert response.json()["status"] == "approved"


@pytest.mark.api
class TestPartialUpdates:
    """PATCH applies only the fields present in the body."""

    def test_null_clears_field(self, authenticated, make_claim):
        claim = make_claim(carrier=None)

        with patch(f"{ROUTES}.ClaimsService") as service_cls:
            service_cls.return_value.update_claim = AsyncMock(return_value=claim)
            response = client.patch(f"/api/v1/claims/{claim.id}", json={"carrier": None})

        assert response.status_code == 200
        dto = service_cls.return_value.update_claim.await_args.args[2]
        assert dto.changes() == {"carrier": None}

    def test_absent_fields_untouched(self, authenticated, make_claim):
        claim = make_claim()

        with patch(f"{ROUTES}.ClaimsService") as service_cls:
            service_cls.return_value.update_claim = AsyncMock(return_value=claim)
            client.patch(f"/api/v1/claims/{claim.id}", json={"adjuster_name": "Pat"})

        dto = service_cls.return_value.update_claim.await_args.args[2]
        assert dto.changes() == {"adjuster_name": "Pat"}

    def test_write_to_archived_claim_returns_422(self, authenticated):
        with patch(f"{ROUTES}.ClaimsService") as service_cls:
            service_cls.return_value.record_payment = AsyncMock(
                side_effect=ClaimValidationError("Claim CLM-2026-000001 is archived")
            )
            response = client.post(
                f"/api/v1/claims/{uuid4()}/payments",
                json={"amount_cents": 5000, "payment_type": "RCV"},
            )

        assert response.status_code == 422
        assert "archived" in response.json()["detail"]


@pytest.mark.api
class TestTimelineRoutes:
    """Timeline event routes."""

    @pytest.fixture
    def timeline_event(self, make_claim):
        return SimpleNamespace(
            id=uuid4(),
            claim_id=make_claim().id,
            title="Roof inspection",
            description=None,
            event_type="inspection",
            visible_to_client=False,
            created_by=None,
            created_at=datetime.now(timezone.utc),
        )

    def test_add_timeline_event(self, authenticated, timeline_event, user_id):
        with patch(f"{ROUTES}.ClaimsService") as service_cls:
            service_cls.return_value.add_timeline_event = AsyncMock(
                return_value=timeline_event
            )
            response = client.post(
                f"/api/v1/claims/{timeline_event.claim_id}/timeline",
                json={"title": "Roof inspection", "event_type": "inspection"},
            )

        assert response.status_code == 201
        assert response.json()["event_type"] == "inspection"
        args = service_cls.return_value.add_timeline_event.await_args
        assert args.args[2].title == "Roof inspection"
        assert args.args[2].visible_to_client is False
        assert args.kwargs["created_by"] == user_id

    def test_list_client_visible_events(self, authenticated, timeline_event):
        with patch(f"{ROUTES}.ClaimsService") as service_cls:
            service_cls.return_value.list_timeline_events = AsyncMock(
                return_value=[timeline_event]
            )
            response = client.get(
                f"/api/v1/claims/{timeline_event.claim_id}/timeline"
                "?client_visible_only=true"
            )

        assert response.status_code == 200
        assert [e["title"] for e in response.json()] == ["Roof inspection"]
        kwargs = service_cls.return_value.list_timeline_events.await_args.kwargs
        assert kwargs["client_visible_only"] is True

    def test_set_visibility(self, authenticated):
        event_ids = [str(uuid4()), str(uuid4())]

        with patch(f"{ROUTES}.ClaimsService") as service_cls:
            service_cls.return_value.set_timeline_visibility = AsyncMock(return_value=2)
            response = client.patch(
                f"/api/v1/claims/{uuid4()}/timeline/visibility",
                json={"event_ids": event_ids, "visible": True},
            )

        assert response.status_code == 200
        assert response.json() == {"updated": 2, "visible": True}
        args = service_cls.return_value.set_timeline_visibility.await_args
        assert args.args[2] == [UUID(e) for e in event_ids]
        assert args.args[3] is True

    def test_set_visibility_requires_ids(self, authenticated):
        response = client.patch(
            f"/api/v1/claims/{uuid4()}/timeline/visibility",
            json={"event_ids": [], "visible": True},
        )
        assert response.status_code == 422

    def test_timeline_requires_update_permission(self, token_claims):
        token_claims.permissions = ["claims:read"]
        app.dependency_overrides[get_token_claims] = lambda: token_claims

        response = client.post(
            f"/api/v1/claims/{uuid4()}/timeline", json={"title": "Inspection"}
        )

        assert response.status_code == 403


@pytest.mark.api
class TestHealthRoutes:
    def test_health(self):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["version"] == __version__

    def test_detailed_health_reports_database(self):
        with patch(
            "claimflow.api.routes.health.check_db_connection",
            AsyncMock(return_value=False),
        ):
            response = client.get("/health/detailed")

        assert response.status_code == 200
        payload = response.json()
        assert payload["status"] == "unhealthy"
        assert payload["checks"]["database"] == "unhealthy"
        assert payload["checks"]["database_latency_ms"] >= 0
