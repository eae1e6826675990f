"""Initial migration: voters, terms, committees, LTED crosswalk and governance config.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "voters",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("voter_registration_number", sa.String(20), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("party", sa.String(10), nullable=True),
        sa.Column("election_district", sa.Integer, nullable=True),
        sa.Column("state_assembly_district", sa.String(10), nullable=True),
        sa.Column("latest_entry_year", sa.Integer, nullable=False),
        sa.Column("latest_entry_number", sa.Integer, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_voters_voter_registration_number", "voters", ["voter_registration_number"], unique=True)
    op.create_index("ix_voters_party", "voters", ["party"])
    op.create_index("ix_voters_import_version", "voters", ["latest_entry_year", "latest_entry_number"])

    op.create_table(
        "terms",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("label", sa.String(50), nullable=False, unique=True),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("end_date", sa.Date, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="false"),
        *_timestamps(),
    )
    # Exactly one active term
    op.create_index(
        "uq_terms_single_active",
        "terms",
        ["is_active"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )

    op.create_table(
        "committees",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("city_town", sa.String(100), nullable=False),
        sa.Column("leg_district", sa.Integer, nullable=False),
        sa.Column("election_district", sa.Integer, nullable=False),
        sa.Column("term_id", UUID(as_uuid=True), sa.ForeignKey("terms.id"), nullable=False),
        sa.Column("lted_weight", sa.Numeric(14, 8), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("city_town", "leg_district", "election_district", "term_id", name="uq_committee_lted_term"),
    )
    op.create_index("ix_committees_term_id", "committees", ["term_id"])

    op.create_table(
        "lted_crosswalks",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("city_town", sa.String(100), nullable=False),
        sa.Column("leg_district", sa.Integer, nullable=False),
        sa.Column("election_district", sa.Integer, nullable=False),
        sa.Column("state_assembly_district", sa.String(10), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("city_town", "leg_district", "election_district", name="uq_lted_crosswalk_key"),
    )

    op.create_table(
        "governance_configs",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("required_party_code", sa.String(10), nullable=False),
        sa.Column("require_assembly_district_match", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("max_seats_per_lted", sa.Integer, nullable=False, server_default="4"),
        sa.Column("non_overridable_ineligibility_reasons", JSONB, nullable=False, server_default="[]"),
        *_timestamps(),
        sa.CheckConstraint("max_seats_per_lted > 0", name="ck_governance_max_seats_positive"),
    )


def downgrade() -> None:
    op.drop_table("governance_configs")
    op.drop_table("lted_crosswalks")
    op.drop_index("ix_committees_term_id", table_name="committees")
    op.drop_table("committees")
    op.drop_index("uq_terms_single_active", table_name="terms")
    op.drop_table("terms")
    op.drop_table("voters")
