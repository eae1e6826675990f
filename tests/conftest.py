"""Shared test fixtures for the async database, sessions and seeded governance data."""

import uuid
from collections.abc import AsyncGenerator
from datetime import date

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

import committee_engine.models  # noqa: F401
from committee_engine.core.config import Settings
from committee_engine.models.base import Base
from committee_engine.models.committee import Committee, LtedCrosswalk
from committee_engine.models.governance_config import GovernanceConfig
from committee_engine.models.term import Term
from committee_engine.models.voter import Voter


@pytest.fixture
def settings() -> Settings:
    """Test application settings."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        _env_file=None,  # type: ignore[call-arg]
    )


@pytest.fixture
async def async_engine(settings: Settings) -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory async SQLite engine for testing."""
    engine = create_async_engine(settings.database_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def async_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create a per-test async session."""
    session_factory = async_sessionmaker(async_engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
async def governance_config(async_session: AsyncSession) -> GovernanceConfig:
    """Four seats per LTED, DEM only, AD match required, party mismatch not overridable."""
    config = GovernanceConfig(
        id=uuid.uuid4(),
        required_party_code="DEM",
        require_assembly_district_match=True,
        max_seats_per_lted=4,
        non_overridable_ineligibility_reasons=["PARTY_MISMATCH"],
    )
    async_session.add(config)
    await async_session.commit()
    return config


@pytest.fixture
async def active_term(async_session: AsyncSession) -> Term:
    """The active 2025-2027 term."""
    term = Term(
        id=uuid.uuid4(),
        label="2025-2027",
        start_date=date(2025, 1, 1),
        end_date=date(2027, 12, 31),
        is_active=True,
    )
    async_session.add(term)
    await async_session.commit()
    return term


@pytest.fixture
async def committee(async_session: AsyncSession, active_term: Term) -> Committee:
    """Rochester LD 16 ED 5, with a crosswalk entry to AD 136."""
    committee = Committee(
        id=uuid.uuid4(),
        city_town="Rochester",
        leg_district=16,
        election_district=5,
        term_id=active_term.id,
    )
    crosswalk = LtedCrosswalk(
        city_town="Rochester",
        leg_district=16,
        election_district=5,
        state_assembly_district="136",
    )
    async_session.add_all([committee, crosswalk])
    await async_session.commit()
    return committee


@pytest.fixture
async def other_committee(async_session: AsyncSession, active_term: Term) -> Committee:
    """Rochester LD 16 ED 6 in the same term."""
    committee = Committee(
        id=uuid.uuid4(),
        city_town="Rochester",
        leg_district=16,
        election_district=6,
        term_id=active_term.id,
    )
    async_session.add(committee)
    await async_session.commit()
    return committee


def make_voter(registration_number: str, **overrides) -> Voter:
    """Build an eligible voter for the ``committee`` fixture."""
    fields = {
        "id": uuid.uuid4(),
        "voter_registration_number": registration_number,
        "first_name": "Test",
        "last_name": registration_number,
        "party": "DEM",
        "state_assembly_district": "136",
        "latest_entry_year": 2026,
        "latest_entry_number": 3,
    }
    fields.update(overrides)
    return Voter(**fields)


@pytest.fixture
async def voters(async_session: AsyncSession) -> list[Voter]:
    """Six eligible voters, all present in the latest import."""
    rows = [make_voter(f"NY{n:06d}") for n in range(1, 7)]
    async_session.add_all(rows)
    await async_session.commit()
    return rows


@pytest.fixture
def voter_factory():
    """Return the ``make_voter`` builder for tests that need custom voters."""
    return make_voter
