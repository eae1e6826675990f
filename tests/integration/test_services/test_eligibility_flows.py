"""Integration tests for validate_eligibility on SQLite."""

import uuid
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from committee_engine.models.committee import Committee
from committee_engine.models.governance_config import GovernanceConfig
from committee_engine.models.membership import Membership, MembershipStatus
from committee_engine.models.voter import Voter
from committee_engine.services.eligibility_service import (
    EligibilityOptions,
    EligibilityWarningCode,
    IneligibilityReason,
    validate_eligibility,
)

R = IneligibilityReason


async def _membership(
    session: AsyncSession,
    voter: Voter,
    committee: Committee,
    status: MembershipStatus,
    seat_number: int | None = None,
    **fields,
) -> Membership:
    membership = Membership(
        voter_id=voter.id,
        committee_id=committee.id,
        term_id=committee.term_id,
        status=status,
        seat_number=seat_number,
        **fields,
    )
    session.add(membership)
    await session.commit()
    return membership


class TestValidateEligibilityScenarios:
    """End-to-end eligibility scenarios."""

    @pytest.mark.asyncio
    async def test_eligible_voter(
        self,
        async_session: AsyncSession,
        governance_config: GovernanceConfig,
        committee: Committee,
        voters: list[Voter],
    ) -> None:
        result = await validate_eligibility(async_session, "NY000001", committee.id, committee.term_id)
        assert result.eligible is True
        assert result.hard_stops == []
        assert result.warnings == []

    @pytest.mark.asyncio
    async def test_unknown_voter(
        self, async_session: AsyncSession, governance_config: GovernanceConfig, committee: Committee
    ) -> None:
        result = await validate_eligibility(async_session, "NY999999", committee.id, committee.term_id)
        assert result.eligible is False
        assert result.hard_stops == [R.NOT_REGISTERED]

    @pytest.mark.asyncio
    async def test_wrong_party_and_district(
        self,
        async_session: AsyncSession,
        governance_config: GovernanceConfig,
        committee: Committee,
        voters: list[Voter],
        voter_factory,
    ) -> None:
        async_session.add(voter_factory("NY100000", party="REP", state_assembly_district="135"))
        await async_session.commit()
        result = await validate_eligibility(async_session, "NY100000", committee.id, committee.term_id)
        assert result.hard_stops == [R.PARTY_MISMATCH, R.ASSEMBLY_DISTRICT_MISMATCH]

    @pytest.mark.asyncio
    async def test_party_mismatch_cannot_be_overridden(
        self,
        async_session: AsyncSession,
        governance_config: GovernanceConfig,
        committee: Committee,
        voter_factory,
    ) -> None:
        async_session.add(voter_factory("NY100001", party="REP"))
        await async_session.commit()
        options = EligibilityOptions(force_add=True, override_reason="chair approved")
        result = await validate_eligibility(async_session, "NY100001", committee.id, committee.term_id, options)
        assert result.eligible is False
        assert result.hard_stops == [R.PARTY_MISMATCH]

    @pytest.mark.asyncio
    async def test_capacity_only_at_cap(
        self,
        async_session: AsyncSession,
        governance_config: GovernanceConfig,
        committee: Committee,
        voters: list[Voter],
    ) -> None:
        for n, voter in enumerate(voters[:3], start=1):
            await _membership(async_session, voter, committee, MembershipStatus.ACTIVE, n)
        below = await validate_eligibility(async_session, "NY000005", committee.id, committee.term_id)
        assert below.eligible is True

        await _membership(async_session, voters[3], committee, MembershipStatus.ACTIVE, 4)
        at_cap = await validate_eligibility(async_session, "NY000005", committee.id, committee.term_id)
        assert at_cap.hard_stops == [R.CAPACITY]

    @pytest.mark.asyncio
    async def test_capacity_override(
        self,
        async_session: AsyncSession,
        governance_config: GovernanceConfig,
        committee: Committee,
        voters: list[Voter],
    ) -> None:
        for n, voter in enumerate(voters[:4], start=1):
            await _membership(async_session, voter, committee, MembershipStatus.ACTIVE, n)
        options = EligibilityOptions(force_add=True, override_reason="vacancy pending")
        result = await validate_eligibility(async_session, "NY000005", committee.id, committee.term_id, options)
        assert result.eligible is True
        assert result.bypassed_reasons == [R.CAPACITY]

    @pytest.mark.asyncio
    async def test_active_in_another_committee(
        self,
        async_session: AsyncSession,
        governance_config: GovernanceConfig,
        committee: Committee,
        other_committee: Committee,
        voters: list[Voter],
    ) -> None:
        await _membership(async_session, voters[0], other_committee, MembershipStatus.ACTIVE, 1)
        result = await validate_eligibility(async_session, "NY000001", committee.id, committee.term_id)
        assert result.hard_stops == [R.ALREADY_IN_ANOTHER_COMMITTEE]

    @pytest.mark.asyncio
    async def test_pending_elsewhere_is_a_warning(
        self,
        async_session: AsyncSession,
        governance_config: GovernanceConfig,
        committee: Committee,
        other_committee: Committee,
        voters: list[Voter],
    ) -> None:
        await _membership(async_session, voters[0], other_committee, MembershipStatus.SUBMITTED)
        result = await validate_eligibility(async_session, "NY000001", committee.id, committee.term_id)
        assert result.eligible is True
        assert [w.code for w in result.warnings] == [EligibilityWarningCode.PENDING_IN_ANOTHER_COMMITTEE]

    @pytest.mark.asyncio
    async def test_stale_import_is_a_warning(
        self,
        async_session: AsyncSession,
        governance_config: GovernanceConfig,
        committee: Committee,
        voters: list[Voter],
        voter_factory,
    ) -> None:
        async_session.add(voter_factory("NY100002", latest_entry_number=2))
        await async_session.commit()
        result = await validate_eligibility(async_session, "NY100002", committee.id, committee.term_id)
        assert result.eligible is True
        assert [w.code for w in result.warnings] == [EligibilityWarningCode.POSSIBLY_INACTIVE]

    @pytest.mark.asyncio
    async def test_recent_resignation_window(
        self,
        async_session: AsyncSession,
        governance_config: GovernanceConfig,
        committee: Committee,
        other_committee: Committee,
        voters: list[Voter],
    ) -> None:
        resigned_at = datetime(2026, 3, 1, tzinfo=UTC)
        await _membership(
            async_session, voters[0], other_committee, MembershipStatus.RESIGNED, resigned_at=resigned_at
        )

        within = await validate_eligibility(
            async_session, "NY000001", committee.id, committee.term_id, now=resigned_at + timedelta(days=30)
        )
        assert [w.code for w in within.warnings] == [EligibilityWarningCode.RECENT_RESIGNATION]

        outside = await validate_eligibility(
            async_session, "NY000001", committee.id, committee.term_id, now=resigned_at + timedelta(days=120)
        )
        assert outside.warnings == []

    @pytest.mark.asyncio
    async def test_committee_without_crosswalk_fails_district_check(
        self,
        async_session: AsyncSession,
        governance_config: GovernanceConfig,
        other_committee: Committee,
        voters: list[Voter],
    ) -> None:
        result = await validate_eligibility(async_session, "NY000001", other_committee.id, other_committee.term_id)
        assert result.hard_stops == [R.ASSEMBLY_DISTRICT_MISMATCH]

    @pytest.mark.asyncio
    async def test_unknown_committee_fails_district_check(
        self, async_session: AsyncSession, governance_config: GovernanceConfig, voters: list[Voter]
    ) -> None:
        result = await validate_eligibility(async_session, "NY000001", uuid.uuid4(), uuid.uuid4())
        assert result.hard_stops == [R.ASSEMBLY_DISTRICT_MISMATCH]
