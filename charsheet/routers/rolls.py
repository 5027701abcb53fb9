"""Shared roll log routes, polled by every open sheet."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from charsheet.dependencies import get_roll_store
from charsheet.roll_store import RollStore
from charsheet.rolls import SharedRollResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/rolls")

_REQUIRED_FIELDS = ("id", "timestamp")


def _invalid() -> JSONResponse:
    return JSONResponse({"error": "Invalid roll data"}, status_code=400)


@router.get("")
async def list_rolls(
    since: datetime | None = None,
    store: RollStore = Depends(get_roll_store),
) -> JSONResponse:
    """Return shared rolls newest first, optionally only those after ``since``."""
    rolls = await store.query(since)
    return JSONResponse({"rolls": [r.model_dump(mode="json", by_alias=True) for r in rolls]})


@router.post("")
async def submit_roll(
    payload: dict[str, Any] = Body(...),
    store: RollStore = Depends(get_roll_store),
) -> JSONResponse:
    """Append a roll to the shared log."""
    if any(not payload.get(field) for field in _REQUIRED_FIELDS) or payload.get("total") is None:
        return _invalid()
    payload = {**payload, "characterName": payload.get("characterName") or "Unknown"}
    try:
        roll = SharedRollResult.model_validate(payload)
    except ValidationError as exc:
        logger.info("Rejected shared roll %r: %s", payload.get("id"), exc)
        return _invalid()
    await store.append(roll)
    return JSONResponse({"success": True})
