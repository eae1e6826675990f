"""Voter model — registered voter sourced from the county voter file.

Read-only from this engine's perspective except for the import version pair
``(latest_entry_year, latest_entry_number)``, which only the external voter-file
import advances.
"""

from sqlalchemy import Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from committee_engine.models.base import Base, TimestampMixin, UUIDMixin


class Voter(Base, UUIDMixin, TimestampMixin):
    """Individual voter record from the voter file."""

    __tablename__ = "voters"

    voter_registration_number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)

    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)

    party: Mapped[str | None] = mapped_column(String(10), nullable=True, index=True)
    election_district: Mapped[int | None] = mapped_column(Integer, nullable=True)
    state_assembly_district: Mapped[str | None] = mapped_column(String(10), nullable=True)

    # Import versioning: the most recent voter-file batch that touched this record
    latest_entry_year: Mapped[int] = mapped_column(Integer, nullable=False)
    latest_entry_number: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (Index("ix_voters_import_version", "latest_entry_year", "latest_entry_number"),)
