"""Committee and LtedCrosswalk models.

A committee is identified by its LTED key (city/town, legislative district,
election district) within one term. The crosswalk maps the same key to a
state assembly district and is consulted only when the governance config
requires an assembly-district match.
"""

import uuid
from decimal import Decimal

from sqlalchemy import ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from committee_engine.models.base import Base, TimestampMixin, UUIDMixin


class Committee(Base, UUIDMixin, TimestampMixin):
    """A party committee for one LTED in one term.

    Attributes:
        city_town: City or town name.
        leg_district: Legislative district number.
        election_district: Election district number.
        term_id: FK to the owning term.
        lted_weight: Jurisdiction-level weight split evenly across seats; null until set.
    """

    __tablename__ = "committees"

    city_town: Mapped[str] = mapped_column(String(100), nullable=False)
    leg_district: Mapped[int] = mapped_column(Integer, nullable=False)
    election_district: Mapped[int] = mapped_column(Integer, nullable=False)
    term_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("terms.id"), nullable=False, index=True)
    lted_weight: Mapped[Decimal | None] = mapped_column(Numeric(14, 8), nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "city_town",
            "leg_district",
            "election_district",
            "term_id",
            name="uq_committee_lted_term",
        ),
    )


class LtedCrosswalk(Base, UUIDMixin, TimestampMixin):
    """Maps an LTED key to its state assembly district."""

    __tablename__ = "lted_crosswalks"

    city_town: Mapped[str] = mapped_column(String(100), nullable=False)
    leg_district: Mapped[int] = mapped_column(Integer, nullable=False)
    election_district: Mapped[int] = mapped_column(Integer, nullable=False)
    state_assembly_district: Mapped[str] = mapped_column(String(10), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "city_town",
            "leg_district",
            "election_district",
            name="uq_lted_crosswalk_key",
        ),
    )
