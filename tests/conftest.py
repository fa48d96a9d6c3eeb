"""
Pytest Configuration and Fixtures.
Shared test fixtures for all test modules.
"""

import os
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

# Settings are loaded at import time by claimflow.api.config
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-at-least-32-characters")
os.environ.setdefault("POSTGRES_PASSWORD", "test-password")

from claimflow.core.enums import ClaimStatus, LifecycleStage  # noqa: E402


@pytest.fixture
def org_id():
    return uuid4()


@pytest.fixture
def user_id():
    return uuid4()


@pytest.fixture
def make_claim(org_id):
    """Factory for claim-like objects."""

    def _make(**overrides):
        now = datetime.now(timezone.utc)
        values = {
            "id": uuid4(),
            "org_id": org_id,
            "property_id": None,
            "claim_number": "CLM-2026-000001",
            "title": "Hail damage - roof",
            "description": None,
            "damage_type": "hail",
            "carrier": "State Farm",
            "policy_number": "PL-12345",
            "insured_name": "Jane Homeowner",
            "date_of_loss": None,
            "adjuster_name": None,
            "adjuster_email": None,
            "adjuster_phone": None,
            "estimated_value_cents": 2500000,
            "approved_value_cents": None,
            "deductible_cents": 100000,
            "lifecycle_stage": LifecycleStage.FILED,
            "status": ClaimStatus.NEW,
            "archived_at": None,
            "created_by": None,
            "created_at": now,
            "updated_at": now,
        }
        values.update(overrides)
        claim = SimpleNamespace(**values)
        claim.is_archived = claim.status == ClaimStatus.ARCHIVED
        return claim

    return _make


@pytest.fixture
def make_result():
    """Factory for mock SQLAlchemy Result objects."""

    def _make(scalar=None, scalars=None, rows=None):
        result = MagicMock()
        result.scalar_one_or_none.return_value = scalar
        result.scalar_one.return_value = scalar
        result.scalars.return_value.all.return_value = scalars or []
        result.all.return_value = rows or []
        return result

    return _make


@pytest.fixture
def mock_db_session():
    """Create a mock database session."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.refresh = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# Configure pytest markers
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "api: mark test as an API test")
