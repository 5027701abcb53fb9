"""Roll factory: one constructor per kind of roll on the character sheet.

Every constructor draws from the dice engine and returns a frozen RollResult
with a fresh id and a UTC timestamp. For every result,
``total == sum(rolls) + modifier``.
"""

from __future__ import annotations

import enum
import random
import re
import string
import time
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from charsheet.dice import DiceError, parse, parse_damage_formula, roll_die, roll_n

_ID_ALPHABET = string.ascii_lowercase + string.digits
_FIRST_DIE_RE = re.compile(r"d\d+", re.IGNORECASE)
_MODIFIER_RE = re.compile(r"([+-]?\d+)")


class RollType(str, enum.Enum):
    """Kind of roll, used for grouping and colouring in the history."""

    ability_check = "ability-check"
    saving_throw = "saving-throw"
    skill_check = "skill-check"
    attack = "attack"
    damage = "damage"
    healing = "healing"
    custom = "custom"


class RollResult(BaseModel):
    """Immutable record of one executed roll."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    type: RollType = RollType.custom
    name: str = ""
    formula: str = ""
    rolls: tuple[int, ...] = ()
    modifier: int = 0
    total: int
    breakdown: str = ""
    timestamp: datetime

    def share(self, character_name: str | None) -> SharedRollResult:
        """Attach the roller's name for broadcast on the shared roll log."""
        return SharedRollResult(
            **self.model_dump(exclude={"character_name"}),
            character_name=character_name or "Unknown",
        )


class SharedRollResult(RollResult):
    """A roll as stored and served by the shared roll log."""

    character_name: str = Field(default="Unknown", alias="characterName")


def _generate_id() -> str:
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"roll-{int(time.time() * 1000)}-{suffix}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _signed(modifier: int) -> str:
    return f"+{modifier}" if modifier >= 0 else str(modifier)


def _canonical(count: int, sides: int, modifier: int) -> str:
    return f"{count}d{sides}{_signed(modifier) if modifier else ''}"


def _modifier_part(modifier: int) -> str:
    if modifier > 0:
        return f" + {modifier}"
    if modifier < 0:
        return f" - {abs(modifier)}"
    return ""


def _d20_roll(roll_type: RollType, name: str, modifier: int) -> RollResult:
    rolled = roll_die(20)
    total = rolled + modifier
    op = "+" if modifier >= 0 else "-"
    return RollResult(
        id=_generate_id(),
        type=roll_type,
        name=name,
        formula=f"d20{_signed(modifier)}",
        rolls=(rolled,),
        modifier=modifier,
        total=total,
        breakdown=f"{rolled} {op} {abs(modifier)} = {total}",
        timestamp=_now(),
    )


def _dice_roll(
    roll_type: RollType, name: str, formula: str, count: int, sides: int, modifier: int
) -> RollResult:
    rolls = roll_n(count, sides)
    total = sum(rolls) + modifier
    return RollResult(
        id=_generate_id(),
        type=roll_type,
        name=name,
        formula=formula,
        rolls=tuple(rolls),
        modifier=modifier,
        total=total,
        breakdown=f"[{' + '.join(str(r) for r in rolls)}]{_modifier_part(modifier)} = {total}",
        timestamp=_now(),
    )


def roll_ability_check(ability_name: str, modifier: int) -> RollResult:
    return _d20_roll(RollType.ability_check, ability_name, modifier)


def roll_saving_throw(throw_name: str, modifier: int) -> RollResult:
    return _d20_roll(RollType.saving_throw, throw_name, modifier)


def roll_skill_check(skill_name: str, modifier: int) -> RollResult:
    return _d20_roll(RollType.skill_check, skill_name, modifier)


def roll_attack(weapon_name: str, attack_bonus: int) -> RollResult:
    return _d20_roll(RollType.attack, f"{weapon_name} (To Hit)", attack_bonus)


def roll_damage(
    weapon_name: str, damage_formula: str, override_sides: int | None = None
) -> RollResult:
    """Roll weapon or spell damage from a sheet formula.

    Args:
        weapon_name: Weapon, spell or feature being rolled.
        damage_formula: Formula as written on the sheet, e.g. "1d8 + 2 piercing".
        override_sides: Die size to use instead of the formula's (Toll the Dead
            rolls d12 against a wounded target). The displayed formula shows
            the overridden die.
    """
    count, sides, modifier = parse_damage_formula(damage_formula)
    formula = damage_formula
    if override_sides is not None:
        sides = override_sides
        formula, replaced = _FIRST_DIE_RE.subn(f"d{sides}", damage_formula, count=1)
        if not replaced:
            formula = _canonical(count, sides, modifier)
    return _dice_roll(RollType.damage, f"{weapon_name} (Damage)", formula, count, sides, modifier)


def roll_healing(
    spell_name: str,
    healing_formula: str,
    ability_modifier: int = 0,
    *,
    apply_modifier: bool = True,
) -> RollResult:
    """Roll healing from a sheet formula.

    When ``apply_modifier`` is set, the spellcasting ability modifier replaces
    any modifier written in the formula. Spells such as Heal that do not add
    the modifier pass ``apply_modifier=False``.
    """
    count, sides, modifier = parse_damage_formula(healing_formula)
    if apply_modifier:
        modifier = ability_modifier
    return _dice_roll(
        RollType.healing, f"{spell_name} (Healing)", healing_formula, count, sides, modifier
    )


def roll_custom_formula(formula: str) -> RollResult | None:
    """Roll a formula typed in by the user.

    Returns:
        A custom RollResult, or None if the input is not a dice formula.
    """
    if not formula or not formula.strip():
        return None
    try:
        count, sides, modifier = parse(formula)
    except DiceError:
        return None
    return _dice_roll(
        RollType.custom, "Custom", _canonical(count, sides, modifier), count, sides, modifier
    )


def parse_modifier(modifier: str) -> int:
    """Extract a signed integer from sheet text such as "+3" or "-1 (DEX)"."""
    m = _MODIFIER_RE.search(modifier or "")
    return int(m.group(1)) if m else 0


def format_roll_result(roll: RollResult) -> str:
    return f"{roll.name}: {roll.breakdown}"


def format_timestamp(timestamp: datetime, now: datetime | None = None) -> str:
    """Describe how long ago a roll happened ("just now", "5m ago", "2h ago")."""
    now = now or _now()
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    seconds = (now - timestamp).total_seconds()
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{int(seconds // 60)}m ago"
    if seconds < 86400:
        return f"{int(seconds // 3600)}h ago"
    return timestamp.strftime("%H:%M")
