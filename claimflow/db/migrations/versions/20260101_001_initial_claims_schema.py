"""Initial claim lifecycle schema.

Revision ID: 20260101_001
Revises:
Create Date: 2026-01-01
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# Revision identifiers
revision = "20260101_001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def _claim_fk() -> sa.Column:
    return sa.Column(
        "claim_id",
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey(
            "claims.id",
            ondelete="CASCADE",
        ),
        nullable=False,
        index=True,
    )


def upgrade() -> None:
    """Create organization, property, claim and ledger tables."""

    # NOTE: Enumerations are stored as VARCHAR(32) values, not PostgreSQL
    # ENUM types. The Python models validate them.

    op.create_table(
        "organizations",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False, unique=True, index=True),
        *_timestamps(),
    )

    op.create_table(
        "properties",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "org_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column("street", sa.String(255), nullable=False),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(50), nullable=True),
        sa.Column("zip_code", sa.String(20), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "claims",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "org_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column(
            "property_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("properties.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
        sa.Column("claim_number", sa.String(50), nullable=False, unique=True, index=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("damage_type", sa.String(50), nullable=True),
        # Carrier / Policy
        sa.Column("carrier", sa.String(255), nullable=True),
        sa.Column("policy_number", sa.String(100), nullable=True),
        sa.Column("insured_name", sa.String(255), nullable=True),
        sa.Column("date_of_loss", sa.Date, nullable=True),
        # Adjuster
        sa.Column("adjuster_name", sa.String(255), nullable=True),
        sa.Column("adjuster_email", sa.String(255), nullable=True),
        sa.Column("adjuster_phone", sa.String(50), nullable=True),
        # Financial summary (cents)
        sa.Column("estimated_value_cents", sa.BigInteger, nullable=True),
        sa.Column("approved_value_cents", sa.BigInteger, nullable=True),
        sa.Column("deductible_cents", sa.BigInteger, nullable=True),
        # Lifecycle
        sa.Column(
            "lifecycle_stage",
            sa.String(32),
            nullable=False,
            server_default="FILED",
            index=True,
        ),
        sa.Column("status", sa.String(32), nullable=False, server_default="new", index=True),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_claims_org_stage", "claims", ["org_id", "lifecycle_stage"])
    op.create_index("ix_claims_org_status", "claims", ["org_id", "status"])

    op.create_table(
        "claim_payments",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _claim_fk(),
        sa.Column("amount_cents", sa.BigInteger, nullable=False),
        sa.Column("payment_type", sa.String(32), nullable=False),
        sa.Column(
            "paid_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("reference", sa.String(100), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("recorded_by", postgresql.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("amount_cents > 0", name="ck_claim_payments_amount_positive"),
    )
    op.create_index(
        "ix_claim_payments_claim_paid", "claim_payments", ["claim_id", "paid_at"]
    )

    op.create_table(
        "claim_supplements",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _claim_fk(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("total_cents", sa.BigInteger, nullable=False),
        sa.Column(
            "status",
            sa.String(32),
            nullable=False,
            server_default="requested",
            index=True,
        ),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "total_cents >= 0", name="ck_claim_supplements_total_non_negative"
        ),
    )
    op.create_index(
        "ix_claim_supplements_claim_status", "claim_supplements", ["claim_id", "status"]
    )

    op.create_table(
        "claim_activities",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _claim_fk(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("activity_type", sa.String(32), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("details", postgresql.JSONB, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index(
        "ix_claim_activities_claim_created", "claim_activities", ["claim_id", "created_at"]
    )

    op.create_table(
        "claim_notes",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _claim_fk(),
        sa.Column(
            "org_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("is_internal", sa.Boolean, nullable=False, server_default="true"),
        *_timestamps(),
    )

    op.create_table(
        "depreciation_invoices",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _claim_fk(),
        sa.Column("subtotal_cents", sa.BigInteger, nullable=False),
        sa.Column("depreciation_cents", sa.BigInteger, nullable=False),
        sa.Column("tax_cents", sa.BigInteger, nullable=False),
        sa.Column("total_due_cents", sa.BigInteger, nullable=False),
        sa.Column("line_items", postgresql.JSONB, nullable=False),
        sa.Column(
            "generated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("generated_by", postgresql.UUID(as_uuid=True), nullable=True),
    )


def downgrade() -> None:
    """Drop claim lifecycle tables."""

    # Drop tables (order matters due to foreign keys)
    op.drop_table("depreciation_invoices")
    op.drop_table("claim_notes")
    op.drop_table("claim_activities")
    op.drop_table("claim_supplements")
    op.drop_table("claim_payments")
    op.drop_table("claims")
    op.drop_table("properties")
    op.drop_table("organizations")
