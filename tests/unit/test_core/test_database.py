"""Tests for the database engine and session management module."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

import committee_engine.core.database as db_module
from committee_engine.core.database import (
    dispose_engine,
    engine_session,
    get_engine,
    get_session_factory,
    init_engine,
)


class TestGetEngine:
    """Tests for get_engine."""

    def test_raises_when_not_initialized(self) -> None:
        original_engine = db_module._engine
        db_module._engine = None
        try:
            with pytest.raises(RuntimeError, match="Database engine not initialized"):
                get_engine()
        finally:
            db_module._engine = original_engine

    @pytest.mark.asyncio
    async def test_returns_engine_when_initialized(self) -> None:
        engine = init_engine("sqlite+aiosqlite:///:memory:")
        try:
            assert get_engine() is engine
        finally:
            await dispose_engine()


class TestGetSessionFactory:
    """Tests for get_session_factory."""

    def test_raises_when_not_initialized(self) -> None:
        original_factory = db_module._session_factory
        db_module._session_factory = None
        try:
            with pytest.raises(RuntimeError, match="Session factory not initialized"):
                get_session_factory()
        finally:
            db_module._session_factory = original_factory


class TestInitEngine:
    """Tests for init_engine."""

    def test_rejects_non_dict_connect_args(self) -> None:
        with pytest.raises(TypeError, match="connect_args must be a dict"):
            init_engine("sqlite+aiosqlite:///:memory:", schema="pr_1", connect_args="bad")

    @pytest.mark.asyncio
    async def test_dispose_clears_state(self) -> None:
        init_engine("sqlite+aiosqlite:///:memory:")
        await dispose_engine()
        assert db_module._engine is None
        assert db_module._session_factory is None


class TestEngineSession:
    """Tests for the engine_session context manager."""

    @pytest.mark.asyncio
    async def test_yields_session_and_disposes(self) -> None:
        async with engine_session("sqlite+aiosqlite:///:memory:") as session:
            assert isinstance(session, AsyncSession)
            assert db_module._engine is not None
        assert db_module._engine is None
