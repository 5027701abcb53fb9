"""Client side of the shared roll log: post local rolls, poll for others.

Both directions are best effort. A failed post or poll is logged at debug
level and otherwise ignored; the local roll has already happened.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from charsheet.config import settings
from charsheet.history import merge_shared
from charsheet.rolls import SharedRollResult

logger = logging.getLogger(__name__)

ROLLS_PATH = "/api/rolls"


class SharedRollClient:
    """Mirror of the shared roll log for one sheet.

    Pass an ``httpx.AsyncClient`` to reuse a connection pool (or an ASGI
    transport in tests); otherwise one is created against ``base_url``.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        base_url: str | None = None,
        poll_interval: float | None = None,
        limit: int | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            base_url=base_url or settings.shared_roll_base_url,
            timeout=settings.shared_roll_timeout,
        )
        self.poll_interval = poll_interval or settings.shared_roll_poll_interval
        self.limit = limit or settings.shared_roll_limit
        self.rolls: list[SharedRollResult] = []
        self.latest_timestamp: str | None = None

    async def submit(self, roll: SharedRollResult) -> bool:
        """Post a roll to the shared log. Returns False if it did not land."""
        try:
            response = await self._client.post(
                ROLLS_PATH, json=roll.model_dump(mode="json", by_alias=True)
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.debug("Failed to submit roll %s: %s", roll.id, exc)
            return False
        return True

    async def poll(self) -> list[SharedRollResult]:
        """Fetch rolls newer than the last poll and merge them in.

        Returns:
            The rolls that were not already known.
        """
        params = {"since": self.latest_timestamp} if self.latest_timestamp else None
        try:
            response = await self._client.get(ROLLS_PATH, params=params)
            response.raise_for_status()
            body = response.json()
            if not isinstance(body, dict) or not isinstance(body.get("rolls", []), list):
                raise ValueError(f"Unexpected shared roll payload: {body!r:.80}")
            raw = body.get("rolls") or []
            incoming = [SharedRollResult.model_validate(r) for r in raw]
        except (httpx.HTTPError, ValueError) as exc:
            logger.debug("Failed to poll shared rolls: %s", exc)
            return []

        if not incoming:
            return []
        known = {r.id for r in self.rolls}
        self.rolls = merge_shared(self.rolls, incoming, limit=self.limit)
        self.latest_timestamp = raw[0]["timestamp"]
        return [r for r in incoming if r.id not in known]

    async def run(self, stop: asyncio.Event) -> None:
        """Poll until ``stop`` is set."""
        while not stop.is_set():
            await self.poll()
            try:
                await asyncio.wait_for(stop.wait(), timeout=self.poll_interval)
            except asyncio.TimeoutError:
                continue

    async def aclose(self) -> None:
        await self._client.aclose()
