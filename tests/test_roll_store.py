"""Tests for the in-memory and database-backed shared roll logs."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from charsheet.config import Settings
from charsheet.database import Base
from charsheet.roll_store import (
    DatabaseRollStore,
    InMemoryRollStore,
    build_roll_store,
)
from charsheet.rolls import RollType, SharedRollResult

_BASE = datetime(2024, 6, 1, 18, 0, tzinfo=timezone.utc)


def _roll(n: int, **overrides) -> SharedRollResult:
    fields = {
        "id": f"roll-{n}",
        "type": RollType.damage,
        "name": "Longsword (Damage)",
        "formula": "1d8+3",
        "rolls": (n % 8 + 1,),
        "modifier": 3,
        "total": n % 8 + 4,
        "breakdown": "",
        "timestamp": _BASE + timedelta(seconds=n),
        "character_name": "Vex",
    }
    fields.update(overrides)
    return SharedRollResult(**fields)


@pytest_asyncio.fixture(params=["memory", "database"])
async def any_store(request):
    if request.param == "memory":
        yield InMemoryRollStore(limit=5)
        return
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield DatabaseRollStore(async_sessionmaker(engine, expire_on_commit=False), limit=5)
    await engine.dispose()


async def test_newest_first(any_store):
    for n in range(3):
        await any_store.append(_roll(n))
    assert [r.id for r in await any_store.query()] == ["roll-2", "roll-1", "roll-0"]


async def test_evicts_oldest_beyond_limit(any_store):
    for n in range(8):
        await any_store.append(_roll(n))
    rolls = await any_store.query()
    assert len(rolls) == 5
    assert [r.id for r in rolls] == ["roll-7", "roll-6", "roll-5", "roll-4", "roll-3"]


async def test_since_is_exclusive(any_store):
    for n in range(4):
        await any_store.append(_roll(n))
    rolls = await any_store.query(_BASE + timedelta(seconds=1))
    assert [r.id for r in rolls] == ["roll-3", "roll-2"]


async def test_since_accepts_other_timezones(any_store):
    await any_store.append(_roll(10))
    plus_two = timezone(timedelta(hours=2))
    since = (_BASE + timedelta(seconds=5)).astimezone(plus_two)
    assert [r.id for r in await any_store.query(since)] == ["roll-10"]


async def test_round_trips_fields(any_store):
    original = _roll(1, rolls=(4, 2), total=9, breakdown="[4 + 2] + 3 = 9")
    await any_store.append(original)
    (stored,) = await any_store.query()
    assert stored.rolls == (4, 2)
    assert stored.total == 9
    assert stored.type is RollType.damage
    assert stored.character_name == "Vex"
    assert stored.timestamp == original.timestamp


async def test_memory_store_keeps_duplicates():
    store = InMemoryRollStore()
    await store.append(_roll(1))
    await store.append(_roll(1))
    assert len(await store.query()) == 2


def test_build_roll_store_memory():
    store = build_roll_store(Settings(roll_store_backend="memory", shared_roll_limit=7))
    assert isinstance(store, InMemoryRollStore)
    assert store.limit == 7


def test_build_roll_store_database():
    store = build_roll_store(Settings(roll_store_backend="database"))
    assert isinstance(store, DatabaseRollStore)


def test_build_roll_store_unknown_backend():
    with pytest.raises(ValueError, match="Unknown roll store backend"):
        build_roll_store(Settings(roll_store_backend="redis"))
