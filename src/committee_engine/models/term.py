"""Term model — a bounded committee-election cycle. Exactly one term is active."""

from datetime import date

from sqlalchemy import Boolean, Date, String
from sqlalchemy.orm import Mapped, mapped_column

from committee_engine.models.base import Base, TimestampMixin, UUIDMixin


class Term(Base, UUIDMixin, TimestampMixin):
    """Committee term (e.g. 2025-2027)."""

    __tablename__ = "terms"

    label: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
