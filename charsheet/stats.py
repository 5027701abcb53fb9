"""Derived character statistics.

Pure functions over ability scores, levels and class entries. Nothing here
mutates the character passed in.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from charsheet.character import CharacterData, class_entries, parse_int

ABILITIES: tuple[str, ...] = (
    "strength",
    "dexterity",
    "constitution",
    "intelligence",
    "wisdom",
    "charisma",
)

_ABILITY_CODES: dict[str, str] = {ability[:3]: ability for ability in ABILITIES}

DEFAULT_ABILITY_SCORE = 10

CLASS_HIT_DICE: dict[str, int] = {
    "barbarian": 12,
    "fighter": 10,
    "paladin": 10,
    "ranger": 10,
    "bard": 8,
    "cleric": 8,
    "druid": 8,
    "monk": 8,
    "rogue": 8,
    "warlock": 8,
    "artificer": 8,
    "sorcerer": 6,
    "wizard": 6,
}

SKILL_TO_ABILITY: dict[str, str] = {
    "acrobatics": "DEX",
    "animalHandling": "WIS",
    "arcana": "INT",
    "athletics": "STR",
    "deception": "CHA",
    "history": "INT",
    "insight": "WIS",
    "intimidation": "CHA",
    "investigation": "INT",
    "medicine": "WIS",
    "nature": "INT",
    "perception": "WIS",
    "performance": "CHA",
    "persuasion": "CHA",
    "religion": "INT",
    "sleightOfHand": "DEX",
    "stealth": "DEX",
    "survival": "WIS",
}

ABILITY_TO_SKILLS: dict[str, list[str]] = {
    "Strength": ["athletics"],
    "Dexterity": ["acrobatics", "sleightOfHand", "stealth"],
    "Constitution": [],
    "Intelligence": ["arcana", "history", "investigation", "nature", "religion"],
    "Wisdom": ["animalHandling", "insight", "medicine", "perception", "survival"],
    "Charisma": ["deception", "intimidation", "performance", "persuasion"],
}

SPELL_LEVEL_LABELS: tuple[str, ...] = (
    "1st", "2nd", "3rd", "4th", "5th", "6th", "7th", "8th", "9th",
)  # fmt: skip

# Slot counts per spell level (1st..9th), indexed by caster level - 1.
FULL_CASTER_SPELL_SLOTS: tuple[tuple[int, ...], ...] = (
    (2, 0, 0, 0, 0, 0, 0, 0, 0),
    (3, 0, 0, 0, 0, 0, 0, 0, 0),
    (4, 2, 0, 0, 0, 0, 0, 0, 0),
    (4, 3, 0, 0, 0, 0, 0, 0, 0),
    (4, 3, 2, 0, 0, 0, 0, 0, 0),
    (4, 3, 3, 0, 0, 0, 0, 0, 0),
    (4, 3, 3, 1, 0, 0, 0, 0, 0),
    (4, 3, 3, 2, 0, 0, 0, 0, 0),
    (4, 3, 3, 3, 1, 0, 0, 0, 0),
    (4, 3, 3, 3, 2, 0, 0, 0, 0),
    (4, 3, 3, 3, 2, 1, 0, 0, 0),
    (4, 3, 3, 3, 2, 1, 0, 0, 0),
    (4, 3, 3, 3, 2, 1, 1, 0, 0),
    (4, 3, 3, 3, 2, 1, 1, 0, 0),
    (4, 3, 3, 3, 2, 1, 1, 1, 0),
    (4, 3, 3, 3, 2, 1, 1, 1, 0),
    (4, 3, 3, 3, 2, 1, 1, 1, 1),
    (4, 3, 3, 3, 3, 1, 1, 1, 1),
    (4, 3, 3, 3, 3, 2, 1, 1, 1),
    (4, 3, 3, 3, 3, 2, 2, 1, 1),
)

# (slot count, slot level) by warlock level - 1.
WARLOCK_PACT_MAGIC: tuple[tuple[int, int], ...] = (
    (1, 1), (2, 1), (2, 2), (2, 2), (2, 3), (2, 3), (2, 4), (2, 4), (2, 5), (2, 5),
    (3, 5), (3, 5), (3, 5), (3, 5), (3, 5), (3, 5), (4, 5), (4, 5), (4, 5), (4, 5),
)  # fmt: skip

_FULL_CASTERS = frozenset({"bard", "cleric", "druid", "sorcerer", "wizard"})
_HALF_CASTERS = frozenset({"paladin", "ranger"})
_THIRD_CASTER_SUBCLASSES = frozenset({"eldritch knight", "arcane trickster"})


@dataclass(frozen=True)
class HitDieGroup:
    die_sides: int
    total: int
    remaining: int


@dataclass(frozen=True)
class PactSlots:
    count: int
    level: int


@dataclass(frozen=True)
class SpellSlotInfo:
    slots: tuple[int, ...]
    warlock_slots: PactSlots | None = None


# ---------------------------------------------------------------------------
# Core formulas
# ---------------------------------------------------------------------------


def ability_modifier(score: int) -> int:
    return math.floor((score - 10) / 2)


def proficiency_bonus(total_level: int) -> int:
    """Proficiency bonus for a total character level: +2 at 1-4 up to +6 at 17-20."""
    if total_level <= 4:
        return 2
    if total_level <= 8:
        return 3
    if total_level <= 12:
        return 4
    if total_level <= 16:
        return 5
    return 6


def proficiency_bonus_from_level(level: str) -> int:
    """Proficiency bonus for a level typed on the sheet; unreadable levels get +2."""
    parsed = parse_int(level)
    if not parsed:
        return 2
    return proficiency_bonus(parsed)


def spell_save_dc(ability_score: int, prof_bonus: int) -> int:
    return 8 + ability_modifier(ability_score) + prof_bonus


def spell_attack_bonus(ability_score: int, prof_bonus: int) -> int:
    return ability_modifier(ability_score) + prof_bonus


def format_bonus(bonus: int) -> str:
    """Format a modifier for display, e.g. "+4" or "-2"."""
    return f"+{bonus}" if bonus >= 0 else str(bonus)


# ---------------------------------------------------------------------------
# Character-level derivations
# ---------------------------------------------------------------------------


def total_level(character: CharacterData) -> int:
    """Sum of class levels, else the legacy level field, else 1."""
    if character.classes:
        return sum(c.level for c in character.classes)
    return parse_int(character.level) or 1


def ability_score(character: CharacterData, ability: str) -> int:
    """Numeric score for a full ability name; blank or unreadable scores count as 10."""
    return parse_int(getattr(character, ability)) or DEFAULT_ABILITY_SCORE


def ability_modifiers(character: CharacterData) -> dict[str, int]:
    return {ability: ability_modifier(ability_score(character, ability)) for ability in ABILITIES}


def spellcasting_ability_score(character: CharacterData) -> int:
    """Score behind the character's spellcasting ability code (str, dex, ... cha)."""
    ability = _ABILITY_CODES.get(character.spellcasting_ability.lower().strip())
    if ability is None:
        return DEFAULT_ABILITY_SCORE
    return ability_score(character, ability)


def hit_dice_by_class(character: CharacterData) -> str:
    """Describe hit dice per class, e.g. "5d10 + 3d8"; falls back to the sheet text."""
    parts: list[str] = []
    for c in class_entries(character):
        sides = CLASS_HIT_DICE.get(c.name.lower().strip())
        if sides is not None:
            parts.append(f"{c.level}d{sides}")
    if not parts:
        return character.hit_dice
    return " + ".join(parts)


def hit_dice_groups(character: CharacterData) -> list[HitDieGroup]:
    """Hit dice pooled by die size, with what is left after spent dice."""
    totals: dict[int, int] = {}
    for c in class_entries(character):
        sides = CLASS_HIT_DICE.get(c.name.lower().strip())
        if sides is None:
            continue
        totals[sides] = totals.get(sides, 0) + c.level

    spent = character.spent_hit_dice
    return [
        HitDieGroup(
            die_sides=sides,
            total=total,
            remaining=max(0, total - spent.get(str(sides), 0)),
        )
        for sides, total in totals.items()
    ]


def caster_level(class_name: str, subclass: str, class_level: int) -> int:
    name = class_name.lower().strip()
    sub = (subclass or "").lower().strip()
    if name in _FULL_CASTERS:
        return class_level
    if name in _HALF_CASTERS:
        return class_level // 2
    if name == "artificer":
        return math.ceil(class_level / 2)
    if name in ("fighter", "rogue") and sub in _THIRD_CASTER_SUBCLASSES:
        return class_level // 3
    return 0


def spell_slots(character: CharacterData) -> SpellSlotInfo:
    """Multiclass spell slots plus warlock pact magic, tracked separately."""
    combined = 0
    warlock_level = 0
    for c in class_entries(character):
        if c.name.lower().strip() == "warlock":
            warlock_level += c.level
        else:
            combined += caster_level(c.name, c.subclass, c.level)

    slots = FULL_CASTER_SPELL_SLOTS[min(combined, 20) - 1] if combined >= 1 else (0,) * 9

    pact = None
    if warlock_level >= 1:
        count, level = WARLOCK_PACT_MAGIC[min(warlock_level, 20) - 1]
        pact = PactSlots(count=count, level=level)

    return SpellSlotInfo(slots=slots, warlock_slots=pact)
