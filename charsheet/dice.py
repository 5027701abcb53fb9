"""Dice formula parsing and the dice engine.

Supports standard notation: XdY, XdY+Z, XdY-Z, optionally followed by a
damage type word ("1d8 + 2 piercing").

Two parsers share the same normalization but differ in failure policy:

- ``parse_damage_formula`` is lenient. Formulas on a character sheet usually
  come from generated data, so a malformed one logs a warning and falls back
  to a single d20 instead of breaking the roll.
- ``parse`` is strict. It is used for formulas typed in by a user and raises
  ``DiceError`` so the caller can report the bad input.
"""

from __future__ import annotations

import logging
import random
import re
from typing import NamedTuple

logger = logging.getLogger(__name__)

DAMAGE_TYPES: tuple[str, ...] = (
    "piercing",
    "slashing",
    "bludgeoning",
    "fire",
    "cold",
    "acid",
    "poison",
    "psychic",
    "radiant",
    "necrotic",
    "force",
    "thunder",
    "lightning",
)

_DAMAGE_TYPE_RE = re.compile(rf"({'|'.join(DAMAGE_TYPES)})$")
_WHITESPACE_RE = re.compile(r"\s")

_FORMULA_RE = re.compile(r"^(?P<count>\d+)d(?P<sides>\d+)(?P<mod>[+-]\d+)?$")
_NOTATION_RE = re.compile(r"^(?P<count>[1-9]\d*)?d(?P<sides>[1-9]\d*)(?P<mod>[+-]\d+)?$")

_MAX_DICE = 100
_MAX_SIDES = 1000

FALLBACK_COUNT = 1
FALLBACK_SIDES = 20


class DiceError(ValueError):
    """Raised when a dice notation is invalid."""


class FormulaParts(NamedTuple):
    dice_count: int
    dice_sides: int
    modifier: int


def normalize(formula: str) -> str:
    """Drop whitespace, lowercase, and strip a trailing damage type word."""
    normalized = _WHITESPACE_RE.sub("", formula).lower()
    return _DAMAGE_TYPE_RE.sub("", normalized)


def parse_damage_formula(formula: str) -> FormulaParts:
    """Parse a damage or healing formula, falling back to 1d20 on failure.

    Args:
        formula: Formula such as "1d8 + 2 piercing", "2d6-1" or "1d4".

    Returns:
        FormulaParts with dice count, sides and signed modifier. A formula
        without a modifier yields modifier 0.
    """
    m = _FORMULA_RE.match(normalize(formula))
    if not m or int(m.group("sides")) == 0:
        logger.warning("Could not parse damage formula %r, using d20 as fallback", formula)
        return FormulaParts(FALLBACK_COUNT, FALLBACK_SIDES, 0)
    return FormulaParts(int(m.group("count")), int(m.group("sides")), int(m.group("mod") or 0))


def parse(notation: str) -> FormulaParts:
    """Parse dice notation into (count, sides, modifier).

    Args:
        notation: Dice notation string, e.g. "2d6+3" or "d20".

    Returns:
        FormulaParts of (number of dice, sides per die, flat modifier).

    Raises:
        DiceError: If the notation is invalid or out of range.
    """
    m = _NOTATION_RE.match(normalize(notation))
    if not m:
        raise DiceError(f"Invalid dice notation: {notation!r}")

    count = int(m.group("count") or 1)
    sides = int(m.group("sides"))
    modifier = int(m.group("mod") or 0)

    return check_bounds(FormulaParts(count, sides, modifier))


def check_bounds(parts: FormulaParts) -> FormulaParts:
    """Reject formulas with more dice or bigger dice than a table would roll.

    Raises:
        DiceError: If the dice count or die size is over the limit.
    """
    if parts.dice_count > _MAX_DICE:
        raise DiceError(f"Too many dice: {parts.dice_count} (max {_MAX_DICE})")
    if parts.dice_sides > _MAX_SIDES:
        raise DiceError(f"Too many sides: {parts.dice_sides} (max {_MAX_SIDES})")
    return parts


def roll_die(sides: int) -> int:
    """Roll a single die, uniform over [1, sides]."""
    return random.randint(1, sides)


def roll_n(count: int, sides: int) -> list[int]:
    """Roll ``count`` dice and return each result in draw order."""
    return [roll_die(sides) for _ in range(count)]


def roll(notation: str) -> int:
    """Roll dice described by notation and return the total.

    Raises:
        DiceError: If the notation is invalid.
    """
    count, sides, modifier = parse(notation)
    return sum(roll_n(count, sides)) + modifier
