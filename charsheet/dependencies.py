"""FastAPI dependencies for charsheet."""

from __future__ import annotations

from charsheet.config import settings
from charsheet.roll_store import RollStore, build_roll_store

_roll_store: RollStore | None = None


def get_roll_store() -> RollStore:
    """Return the process-wide shared roll log, created on first use.

    Tests override this dependency with their own store.
    """
    global _roll_store
    if _roll_store is None:
        _roll_store = build_roll_store(settings)
    return _roll_store
