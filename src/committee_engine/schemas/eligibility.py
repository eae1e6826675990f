"""Pydantic v2 schemas for eligibility verdicts."""

from pydantic import BaseModel, Field

from committee_engine.services.eligibility_service import get_ineligibility_messages


class EligibilityWarningResponse(BaseModel):
    """A non-blocking warning."""

    model_config = {"from_attributes": True}

    code: str
    message: str


class EligibilityResponse(BaseModel):
    """Serialized EligibilityResult with display messages for hard stops."""

    model_config = {"from_attributes": True}

    eligible: bool
    hard_stops: list[str] = Field(default_factory=list)
    warnings: list[EligibilityWarningResponse] = Field(default_factory=list)
    bypassed_reasons: list[str] | None = None
    validation_error: str | None = None

    @property
    def hard_stop_messages(self) -> list[str]:
        """Display text for each hard stop (empty when eligible)."""
        if not self.hard_stops:
            return []
        return get_ineligibility_messages(self.hard_stops)
