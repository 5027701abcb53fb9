"""Shared test fixtures for the charsheet test suite.

store  (function scope)
    A fresh InMemoryRollStore per test.

client  (function scope)
    AsyncClient wired to the FastAPI app with get_roll_store overridden to
    return ``store``, so HTTP tests never touch the process-wide log.

For pure tests (dice, stats, bonus damage) no fixture is needed.
"""

from __future__ import annotations

import unittest.mock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from charsheet.character import CharacterClass, CharacterData
from charsheet.dependencies import get_roll_store
from charsheet.main import app
from charsheet.roll_store import InMemoryRollStore


@pytest.fixture(autouse=True, scope="session")
def block_real_ai():
    """Fail fast if any test reaches the real Anthropic client."""

    def _blocked():
        raise RuntimeError(
            "Real Anthropic API call attempted in tests — "
            "add a mock for this function in conftest.mock_ai"
        )

    with unittest.mock.patch("charsheet.ai.client.get_instructor_client", new=_blocked):
        yield


@pytest.fixture(autouse=True)
def mock_ai(monkeypatch):
    """Stub character generation so tests never hit the Anthropic API."""

    async def _generate_character(prompt):
        return CharacterData(
            character_name="Grukk",
            race="Half-Orc",
            classes=[CharacterClass(name="Barbarian", subclass="Berserker", level=9)],
            strength="18",
        )

    monkeypatch.setattr("charsheet.ai.client.generate_character", _generate_character)


@pytest.fixture
def store() -> InMemoryRollStore:
    return InMemoryRollStore(limit=100)


@pytest_asyncio.fixture
async def client(store):
    """AsyncClient wired to the app with an isolated roll store."""
    app.dependency_overrides[get_roll_store] = lambda: store

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.pop(get_roll_store, None)
