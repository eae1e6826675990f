"""ORM model registry — import all models so Alembic autogenerate discovers them."""

from committee_engine.models.audit_log import AuditLog
from committee_engine.models.committee import Committee, LtedCrosswalk
from committee_engine.models.governance_config import GovernanceConfig
from committee_engine.models.membership import Membership, MembershipStatus, MembershipType
from committee_engine.models.seat import Seat
from committee_engine.models.term import Term
from committee_engine.models.voter import Voter

__all__ = [
    "AuditLog",
    "Committee",
    "GovernanceConfig",
    "LtedCrosswalk",
    "Membership",
    "MembershipStatus",
    "MembershipType",
    "Seat",
    "Term",
    "Voter",
]
