"""Per-sheet roll history and its merge with the shared roll log."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass

from charsheet.config import settings
from charsheet.roll_store import as_utc
from charsheet.rolls import RollResult, SharedRollResult


@dataclass(frozen=True)
class DisplayRoll:
    roll: SharedRollResult
    is_remote: bool


class RollHistory:
    """The sheet's own recent rolls, newest first, capped at ``limit``."""

    def __init__(self, limit: int | None = None) -> None:
        self._rolls: deque[RollResult] = deque(maxlen=limit or settings.roll_history_limit)

    def __len__(self) -> int:
        return len(self._rolls)

    def __iter__(self):
        return iter(self._rolls)

    @property
    def limit(self) -> int | None:
        return self._rolls.maxlen

    def add(self, roll: RollResult) -> None:
        self._rolls.appendleft(roll)

    def clear(self) -> None:
        self._rolls.clear()

    def ids(self) -> set[str]:
        return {r.id for r in self._rolls}


def merge_shared(
    existing: list[SharedRollResult], incoming: Iterable[SharedRollResult], limit: int = 100
) -> list[SharedRollResult]:
    """Prepend newly polled rolls, skipping ids already seen."""
    seen = {r.id for r in existing}
    fresh = [r for r in incoming if r.id not in seen]
    if not fresh:
        return existing
    return (fresh + existing)[:limit]


def combined_rolls(
    history: RollHistory,
    shared: Iterable[SharedRollResult],
    character_name: str,
    limit: int = 100,
) -> list[DisplayRoll]:
    """Interleave local and remote rolls by time, newest first.

    A local roll echoed back by the shared log is shown once, as local.
    """
    local_ids = history.ids()
    local = [DisplayRoll(r.share(character_name), is_remote=False) for r in history]
    remote = [DisplayRoll(r, is_remote=True) for r in shared if r.id not in local_ids]
    merged = sorted(local + remote, key=lambda d: as_utc(d.roll.timestamp), reverse=True)
    return merged[:limit]
