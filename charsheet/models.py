"""SQLAlchemy ORM models for charsheet."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from charsheet.database import Base


class SharedRoll(Base):
    """A roll broadcast to the shared log. Timestamps are stored as UTC."""

    __tablename__ = "shared_rolls"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    character_name: Mapped[str] = mapped_column(String(200), nullable=False, default="Unknown")
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    formula: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    rolls: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)
    modifier: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total: Mapped[int] = mapped_column(Integer, nullable=False)
    breakdown: Mapped[str] = mapped_column(Text, nullable=False, default="")
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
