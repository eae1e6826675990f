"""Add seats, committee_memberships and audit_logs tables.

The partial unique index ``uq_membership_active_seat`` allows one ACTIVE
membership per committee+term+seat, so a lost seat race fails the write.

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "seats",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("committee_id", UUID(as_uuid=True), sa.ForeignKey("committees.id"), nullable=False),
        sa.Column("term_id", UUID(as_uuid=True), sa.ForeignKey("terms.id"), nullable=False),
        sa.Column("seat_number", sa.Integer, nullable=False),
        sa.Column("is_petitioned", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("weight", sa.Numeric(14, 8), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("committee_id", "term_id", "seat_number", name="uq_seat_committee_term_number"),
    )
    op.create_index("ix_seats_committee_id", "seats", ["committee_id"])

    op.create_table(
        "committee_memberships",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("voter_id", UUID(as_uuid=True), sa.ForeignKey("voters.id"), nullable=False),
        sa.Column("committee_id", UUID(as_uuid=True), sa.ForeignKey("committees.id"), nullable=False),
        sa.Column("term_id", UUID(as_uuid=True), sa.ForeignKey("terms.id"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("membership_type", sa.String(20), nullable=False),
        sa.Column("seat_number", sa.Integer, nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("activated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejection_note", sa.Text, nullable=True),
        sa.Column("override_reason", sa.Text, nullable=True),
        sa.Column("removed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resigned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("removal_reason", sa.String(50), nullable=True),
        sa.Column("removal_notes", sa.Text, nullable=True),
        sa.Column("resignation_method", sa.String(10), nullable=True),
        sa.Column("resignation_date_received", sa.Date, nullable=True),
        sa.Column("petition_seat_number", sa.Integer, nullable=True),
        sa.Column("petition_primary_date", sa.Date, nullable=True),
        sa.Column("petition_vote_count", sa.Integer, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("voter_id", "committee_id", "term_id", name="uq_membership_voter_committee_term"),
    )
    op.create_index("ix_committee_memberships_voter_id", "committee_memberships", ["voter_id"])
    op.create_index("ix_committee_memberships_committee_id", "committee_memberships", ["committee_id"])
    op.create_index("ix_committee_memberships_status", "committee_memberships", ["status"])
    op.create_index("ix_committee_memberships_resigned_at", "committee_memberships", ["resigned_at"])
    op.create_index(
        "ix_memberships_committee_term_status",
        "committee_memberships",
        ["committee_id", "term_id", "status"],
    )
    op.create_index(
        "uq_membership_active_seat",
        "committee_memberships",
        ["committee_id", "term_id", "seat_number"],
        unique=True,
        postgresql_where=sa.text("status = 'ACTIVE'"),
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("actor_id", UUID(as_uuid=True), nullable=False),
        sa.Column("action", sa.String(40), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", UUID(as_uuid=True), nullable=False),
        sa.Column("before_value", JSONB, nullable=True),
        sa.Column("after_value", JSONB, nullable=True),
        sa.Column("event_metadata", JSONB, nullable=True),
    )
    op.create_index("ix_audit_logs_timestamp", "audit_logs", ["timestamp"])
    op.create_index("ix_audit_logs_actor_id", "audit_logs", ["actor_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_entity_type", "audit_logs", ["entity_type"])
    op.create_index("ix_audit_logs_entity_id", "audit_logs", ["entity_id"])


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_index("uq_membership_active_seat", table_name="committee_memberships")
    op.drop_table("committee_memberships")
    op.drop_index("ix_seats_committee_id", table_name="seats")
    op.drop_table("seats")
