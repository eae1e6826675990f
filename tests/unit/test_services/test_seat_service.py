"""Unit tests for seat service functions."""

import uuid
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from committee_engine.core.exceptions import SeatCapacityError
from committee_engine.models.governance_config import GovernanceConfig
from committee_engine.models.seat import Seat
from committee_engine.services.seat_service import (
    assign_next_available_seat,
    compute_seat_weight,
    ensure_seats_exist,
    next_available_seat_number,
    recompute_seat_weights,
)


def _config(max_seats: int = 4) -> GovernanceConfig:
    return GovernanceConfig(
        required_party_code="DEM",
        require_assembly_district_match=False,
        max_seats_per_lted=max_seats,
        non_overridable_ineligibility_reasons=[],
    )


def _mock_session(*results: MagicMock) -> AsyncMock:
    session = AsyncMock()
    session.add = MagicMock()
    session.add_all = MagicMock()
    session.execute.side_effect = list(results)
    return session


def _scalar_result(value: object) -> MagicMock:
    result = MagicMock()
    result.scalar_one.return_value = value
    result.scalar_one_or_none.return_value = value
    return result


def _scalars_result(values: list) -> MagicMock:
    result = MagicMock()
    result.scalars.return_value.all.return_value = values
    return result


class TestNextAvailableSeatNumber:
    """Tests for the lowest-free-seat allocator."""

    def test_empty_committee_gets_seat_one(self) -> None:
        assert next_available_seat_number([], 4) == 1

    def test_fills_lowest_gap(self) -> None:
        assert next_available_seat_number([1, 3], 4) == 2

    def test_after_contiguous_block(self) -> None:
        assert next_available_seat_number([1, 2, 3], 4) == 4

    def test_full_returns_none(self) -> None:
        assert next_available_seat_number([4, 2, 3, 1], 4) is None

    def test_ignores_null_seat_numbers(self) -> None:
        assert next_available_seat_number([None, 1], 2) == 2

    def test_seats_above_cap_do_not_count(self) -> None:
        """An out-of-range seat number never frees or fills a slot inside the cap."""
        assert next_available_seat_number([5, 6], 2) == 1


class TestComputeSeatWeight:
    """Tests for the exact decimal weight split."""

    def test_even_split(self) -> None:
        assert compute_seat_weight(Decimal("1"), 4) == Decimal("0.25000000")

    def test_repeating_split_is_quantized(self) -> None:
        assert compute_seat_weight(Decimal("1"), 3) == Decimal("0.33333333")

    def test_accepts_string_weight(self) -> None:
        assert compute_seat_weight("2.5", 2) == Decimal("1.25000000")

    def test_null_weight_stays_null(self) -> None:
        assert compute_seat_weight(None, 4) is None

    def test_no_binary_float_artifacts(self) -> None:
        """0.1 / 1 is exactly 0.1, not 0.1000000000000000055..."""
        assert compute_seat_weight(Decimal("0.1"), 1) == Decimal("0.1")


class TestEnsureSeatsExist:
    """Tests for ensure_seats_exist."""

    @pytest.mark.asyncio
    async def test_noop_when_already_materialized(self) -> None:
        """A committee with a full set of seats needs exactly one query."""
        session = _mock_session(_scalar_result(4))
        created = await ensure_seats_exist(session, uuid.uuid4(), uuid.uuid4(), config=_config())
        assert created == 0
        assert session.execute.await_count == 1
        session.add_all.assert_not_called()

    @pytest.mark.asyncio
    async def test_creates_only_missing_numbers(self) -> None:
        session = _mock_session(_scalar_result(2), _scalars_result([1, 3]))
        committee_id, term_id = uuid.uuid4(), uuid.uuid4()

        created = await ensure_seats_exist(session, committee_id, term_id, config=_config())

        assert created == 2
        seats = session.add_all.call_args[0][0]
        assert sorted(s.seat_number for s in seats) == [2, 4]
        assert all(isinstance(s, Seat) for s in seats)
        assert all(s.committee_id == committee_id and s.term_id == term_id for s in seats)
        assert all(s.is_petitioned is False and s.weight is None for s in seats)
        session.flush.assert_awaited_once()
        session.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_reads_config_when_not_given(self) -> None:
        session = _mock_session(_scalar_result(_config(2)), _scalar_result(0), _scalars_result([]))
        created = await ensure_seats_exist(session, uuid.uuid4(), uuid.uuid4())
        assert created == 2


class TestAssignNextAvailableSeat:
    """Tests for assign_next_available_seat."""

    @pytest.mark.asyncio
    async def test_returns_lowest_free_seat(self) -> None:
        session = _mock_session(_scalars_result([2, 1, 4]))
        seat = await assign_next_available_seat(session, uuid.uuid4(), uuid.uuid4(), config=_config())
        assert seat == 3

    @pytest.mark.asyncio
    async def test_full_committee_raises_capacity_error(self) -> None:
        session = _mock_session(_scalars_result([1, 2, 3, 4]))
        with pytest.raises(SeatCapacityError, match="All 4 seats are occupied"):
            await assign_next_available_seat(session, uuid.uuid4(), uuid.uuid4(), config=_config())


class TestRecomputeSeatWeights:
    """Tests for recompute_seat_weights."""

    @pytest.mark.asyncio
    async def test_missing_committee_is_noop(self) -> None:
        session = _mock_session(_scalar_result(None))
        await recompute_seat_weights(session, uuid.uuid4(), config=_config())
        assert session.execute.await_count == 1
        session.flush.assert_not_called()

    @pytest.mark.asyncio
    async def test_issues_update_and_flushes(self) -> None:
        committee = MagicMock(lted_weight=Decimal("2"))
        session = _mock_session(_scalar_result(committee), MagicMock())
        await recompute_seat_weights(session, uuid.uuid4(), config=_config())
        assert session.execute.await_count == 2
        session.flush.assert_awaited_once()
        session.commit.assert_not_called()
