"""Governance config and active-term lookups.

Both are fatal preconditions: without a governance config the engine cannot
judge eligibility or capacity, and without an active term it cannot scope
seats. Missing rows raise ConfigurationError rather than falling back to
defaults that could admit ineligible members.
"""

import uuid

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from committee_engine.core.exceptions import ConfigurationError
from committee_engine.models.governance_config import GovernanceConfig
from committee_engine.models.term import Term


async def get_governance_config(session: AsyncSession) -> GovernanceConfig:
    """Return the active governance configuration row.

    When more than one row exists the most recently updated wins.

    Args:
        session: Database session.

    Returns:
        The active GovernanceConfig.

    Raises:
        ConfigurationError: If no configuration row exists.
    """
    result = await session.execute(
        select(GovernanceConfig).order_by(GovernanceConfig.updated_at.desc()).limit(1)
    )
    config = result.scalar_one_or_none()
    if config is None:
        logger.error("No governance config found; eligibility and capacity cannot be evaluated")
        msg = "Committee governance config not found. Create one before managing memberships."
        raise ConfigurationError(msg)
    return config


async def get_active_term_id(session: AsyncSession) -> uuid.UUID:
    """Return the id of the active term.

    Raises:
        ConfigurationError: If no term is marked active.
    """
    result = await session.execute(select(Term.id).where(Term.is_active.is_(True)).limit(1))
    term_id = result.scalar_one_or_none()
    if term_id is None:
        msg = "No active term configured"
        raise ConfigurationError(msg)
    return term_id
