"""GovernanceConfig model — jurisdiction-wide committee rules.

One row per deployment. Administrators edit it elsewhere; the engine only reads it.
"""

from sqlalchemy import JSON, Boolean, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from committee_engine.models.base import Base, TimestampMixin, UUIDMixin


class GovernanceConfig(Base, UUIDMixin, TimestampMixin):
    """Eligibility and capacity rules.

    Attributes:
        required_party_code: Party a voter must be enrolled in (e.g. "DEM").
        require_assembly_district_match: Enforce voter AD == committee AD via the crosswalk.
        max_seats_per_lted: Seat cap per committee+term.
        non_overridable_ineligibility_reasons: Reason codes a force-add may not bypass.
    """

    __tablename__ = "governance_configs"

    required_party_code: Mapped[str] = mapped_column(String(10), nullable=False)
    require_assembly_district_match: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="true"
    )
    max_seats_per_lted: Mapped[int] = mapped_column(Integer, nullable=False, default=4, server_default="4")
    non_overridable_ineligibility_reasons: Mapped[list[str]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=list,
    )
