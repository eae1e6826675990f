"""Error taxonomy for the eligibility, seat and designation-weight engine.

Configuration, capacity, race and integrity failures are distinct types so the
caller can tell "ineligible by policy" from "lost the seat race" from "the data
is broken".
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from committee_engine.services.eligibility_service import EligibilityResult


class ConfigurationError(RuntimeError):
    """A required singleton (governance config, active term) is missing."""


class SeatCapacityError(ValueError):
    """Every seat number in ``1..max_seats_per_lted`` is held by an ACTIVE membership."""

    def __init__(self, committee_id: uuid.UUID, term_id: uuid.UUID, max_seats: int) -> None:
        self.committee_id = committee_id
        self.term_id = term_id
        self.max_seats = max_seats
        super().__init__(f"All {max_seats} seats are occupied for committee {committee_id} term {term_id}")


class SeatClaimConflictError(RuntimeError):
    """A concurrent writer claimed the same seat first. Retry the whole unit of work."""


class DataIntegrityError(RuntimeError):
    """Persisted state violates an invariant (e.g. two ACTIVE memberships on one seat)."""

    def __init__(self, committee_id: uuid.UUID, term_id: uuid.UUID, seat_number: int) -> None:
        self.committee_id = committee_id
        self.term_id = term_id
        self.seat_number = seat_number
        super().__init__(
            f"Data integrity error: duplicate active memberships on seat {seat_number} "
            f"for committee {committee_id} term {term_id}"
        )


class NotFoundError(ValueError):
    """A referenced committee, seat or membership does not exist."""


class MembershipStateError(ValueError):
    """A membership is not in the status required for the requested transition."""


class IneligibleError(ValueError):
    """Eligibility evaluation rejected the voter for the committee."""

    def __init__(self, result: EligibilityResult) -> None:
        self.result = result
        detail = result.validation_error or ", ".join(result.hard_stops)
        super().__init__(f"Voter is not eligible: {detail}")
