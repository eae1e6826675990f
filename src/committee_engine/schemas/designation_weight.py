"""Pydantic v2 schemas for designation weight results.

Decimal fields serialize as strings in JSON so weights round-trip exactly.
"""

import uuid
from decimal import Decimal

from pydantic import BaseModel


class SeatContributionResponse(BaseModel):
    """Per-seat contribution row."""

    model_config = {"from_attributes": True}

    seat_number: int
    is_petitioned: bool
    is_occupied: bool
    occupant_membership_type: str | None = None
    seat_weight: Decimal | None = None
    contributes: bool
    contribution_weight: Decimal
    occupant_voter_id: uuid.UUID | None = None


class DesignationWeightResponse(BaseModel):
    """Committee designation weight with per-seat breakdown."""

    model_config = {"from_attributes": True}

    total_weight: Decimal
    total_contributing_seats: int
    seats: list[SeatContributionResponse]
    missing_weight_seat_numbers: list[int]
