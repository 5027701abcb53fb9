"""Shared roll log.

Sheets post every roll here and poll for rolls made by other players. The log
is bounded: once it holds ``limit`` rolls the oldest is evicted. Rolls are
returned newest first, in insertion order; the log does not deduplicate.

The store is an injected object rather than module state so the HTTP layer
can be pointed at an in-memory fake in tests.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from charsheet.config import Settings
from charsheet.database import AsyncSessionLocal
from charsheet.models import SharedRoll
from charsheet.rolls import SharedRollResult


def as_utc(ts: datetime) -> datetime:
    """Treat naive timestamps as UTC and convert aware ones to UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


class RollStore(Protocol):
    async def append(self, roll: SharedRollResult) -> None: ...

    async def query(self, since: datetime | None = None) -> list[SharedRollResult]: ...


class InMemoryRollStore:
    """Roll log held in process memory, lost on restart."""

    def __init__(self, limit: int = 100) -> None:
        self.limit = limit
        self._rolls: list[SharedRollResult] = []

    async def append(self, roll: SharedRollResult) -> None:
        self._rolls.insert(0, roll)
        del self._rolls[self.limit :]

    async def query(self, since: datetime | None = None) -> list[SharedRollResult]:
        if since is None:
            return list(self._rolls)
        cutoff = as_utc(since)
        return [r for r in self._rolls if as_utc(r.timestamp) > cutoff]


class DatabaseRollStore:
    """Roll log persisted in the shared_rolls table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], limit: int = 100) -> None:
        self.limit = limit
        self._session_factory = session_factory

    async def append(self, roll: SharedRollResult) -> None:
        async with self._session_factory() as db:
            await db.merge(
                SharedRoll(
                    id=roll.id,
                    character_name=roll.character_name,
                    type=roll.type.value,
                    name=roll.name,
                    formula=roll.formula,
                    rolls=list(roll.rolls),
                    modifier=roll.modifier,
                    total=roll.total,
                    breakdown=roll.breakdown,
                    timestamp=as_utc(roll.timestamp),
                )
            )
            await db.flush()
            keep = (
                select(SharedRoll.id)
                .order_by(SharedRoll.timestamp.desc(), SharedRoll.created_at.desc())
                .limit(self.limit)
            )
            await db.execute(
                delete(SharedRoll)
                .where(SharedRoll.id.not_in(keep))
                .execution_options(synchronize_session=False)
            )
            await db.commit()

    async def query(self, since: datetime | None = None) -> list[SharedRollResult]:
        stmt = select(SharedRoll).order_by(
            SharedRoll.timestamp.desc(), SharedRoll.created_at.desc()
        )
        if since is not None:
            stmt = stmt.where(SharedRoll.timestamp > as_utc(since))
        async with self._session_factory() as db:
            result = await db.execute(stmt.limit(self.limit))
            return [_to_result(row) for row in result.scalars().all()]


def _to_result(row: SharedRoll) -> SharedRollResult:
    return SharedRollResult(
        id=row.id,
        type=row.type,
        name=row.name,
        formula=row.formula,
        rolls=tuple(row.rolls),
        modifier=row.modifier,
        total=row.total,
        breakdown=row.breakdown,
        timestamp=as_utc(row.timestamp),
        character_name=row.character_name,
    )


def build_roll_store(settings: Settings) -> RollStore:
    """Create the roll store selected by ``settings.roll_store_backend``."""
    if settings.roll_store_backend == "memory":
        return InMemoryRollStore(limit=settings.shared_roll_limit)
    if settings.roll_store_backend == "database":
        return DatabaseRollStore(AsyncSessionLocal, limit=settings.shared_roll_limit)
    raise ValueError(f"Unknown roll store backend: {settings.roll_store_backend!r}")
