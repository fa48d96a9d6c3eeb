"""Add claim timeline events.

Revision ID: 20260201_002
Revises: 20260101_001
Create Date: 2026-02-01
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# Revision identifiers
revision = "20260201_002"
down_revision = "20260101_001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create claim_timeline_events table."""

    op.create_table(
        "claim_timeline_events",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "claim_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("claims.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        sa.Column(
            "org_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("organizations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("event_type", sa.String(50), nullable=False, server_default="note"),
        sa.Column(
            "visible_to_client",
            sa.Boolean,
            nullable=False,
            server_default="false",
        ),
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
    )
    op.create_index(
        "ix_claim_timeline_events_claim_created",
        "claim_timeline_events",
        ["claim_id", "created_at"],
    )


def downgrade() -> None:
    """Drop claim_timeline_events table."""

    op.drop_index(
        "ix_claim_timeline_events_claim_created", table_name="claim_timeline_events"
    )
    op.drop_table("claim_timeline_events")
