"""Character sheet data model.

Field names are snake_case in Python and camelCase on the wire, matching the
JSON the sheet exports and the generator returns. Sheets saved before
multiclassing carry a single ``class``/``level`` pair; ``normalize_character``
folds those into the ``classes`` list.
"""

from __future__ import annotations

import enum
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_CLASS_LEVEL_RE = re.compile(r"\s+(\d+)$")
_SUBCLASS_RE = re.compile(r"\s+\(([^)]+)\)$")
_CLASS_SEPARATOR_RE = re.compile(r"\s*/\s*")

MIN_LEVEL = 1
MAX_LEVEL = 20


def parse_int(value: str | int | None) -> int | None:
    """Read the leading integer from sheet text ("15", "+2", "3rd"), else None."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    m = _LEADING_INT_RE.match(value)
    return int(m.group(1)) if m else None


def clamp_level(level: int) -> int:
    return max(MIN_LEVEL, min(MAX_LEVEL, level))


class _SheetModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AttackType(str, enum.Enum):
    """How a spell resolves against its target."""

    attack = "attack"
    save = "save"
    auto_hit = "auto-hit"
    none = "none"


class Feature(_SheetModel):
    name: str
    description: str = ""
    category: str | None = None


class CharacterClass(_SheetModel):
    name: str
    subclass: str = ""
    level: int = MIN_LEVEL
    description: str | None = None

    @field_validator("level", mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> int:
        parsed = parse_int(value) if isinstance(value, str | int) else None
        return clamp_level(parsed or MIN_LEVEL)


class Proficiency(_SheetModel):
    proficient: bool = False
    value: str = ""


class Attack(_SheetModel):
    name: str
    atk_bonus: str = ""
    damage: str = ""


class Spell(_SheetModel):
    name: str
    level: str = ""
    school: str = ""
    casting_time: str = ""
    range: str = ""
    duration: str = ""
    description: str = ""
    damage: str | None = None
    save_dc: str | None = Field(default=None, alias="saveDC")
    concentration: bool = False
    ritual: bool = False
    components: str | None = None
    attack_type: AttackType | None = None
    alt_damage: str | None = None
    higher_levels: str | None = None


class CharacterData(_SheetModel):
    character_name: str = ""
    player_name: str = ""
    race: str = ""
    race_description: str = ""
    classes: list[CharacterClass] = []
    class_name: str | None = Field(default=None, alias="class")
    class_description: str | None = None
    level: str | None = None
    subclass: str | None = None
    subclass_description: str | None = None
    background: str = ""
    alignment: str = ""
    experience_points: str = ""

    strength: str = "10"
    strength_mod: str = ""
    dexterity: str = "10"
    dexterity_mod: str = ""
    constitution: str = "10"
    constitution_mod: str = ""
    intelligence: str = "10"
    intelligence_mod: str = ""
    wisdom: str = "10"
    wisdom_mod: str = ""
    charisma: str = "10"
    charisma_mod: str = ""

    armor_class: str = ""
    initiative: str = ""
    speed: str = ""
    hit_point_maximum: str = ""
    current_hit_points: str = ""
    temporary_hit_points: str = ""
    hit_dice: str = ""
    spent_hit_dice: dict[str, int] = {}
    proficiency_bonus: str = ""

    personality_traits: str = ""
    ideals: str = ""
    bonds: str = ""
    flaws: str = ""
    features: list[Feature] = []
    features_and_traits: str = ""
    equipment: str = ""
    attacks: list[Attack] = []
    skills: dict[str, Proficiency] = {}
    saving_throws: dict[str, Proficiency] = {}

    cantrips: list[Spell] = []
    spells: list[Spell] = []
    spellcasting_ability: str = ""
    spell_save_dc: str = Field(default="", alias="spellSaveDC")
    spell_attack_bonus: str = ""
    used_spell_slots: dict[str, int] = {}

    cp: str = ""
    sp: str = ""
    ep: str = ""
    gp: str = ""
    pp: str = ""


def class_entries(character: CharacterData) -> list[CharacterClass]:
    """Return the class list, synthesizing one entry from legacy fields if needed."""
    if character.classes:
        return list(character.classes)
    if character.class_name:
        return [
            CharacterClass(
                name=character.class_name,
                subclass=character.subclass or "",
                level=parse_int(character.level) or MIN_LEVEL,
                description=character.class_description,
            )
        ]
    return []


def normalize_character(character: CharacterData) -> CharacterData:
    """Return a copy whose ``classes`` list is populated from legacy fields."""
    if character.classes:
        return character
    return character.model_copy(update={"classes": class_entries(character)})


def migrate_character_data(data: dict[str, Any]) -> CharacterData:
    """Load a saved or generated sheet in any historical shape."""
    return normalize_character(CharacterData.model_validate(data))


def primary_class_name(character: CharacterData) -> str:
    if character.classes:
        return character.classes[0].name
    return character.class_name or ""


def class_display_text(character: CharacterData) -> str:
    """Render classes as "Fighter (Champion) 5 / Rogue 2"."""
    if character.classes:
        if len(character.classes) == 1 and not character.classes[0].name.strip():
            return ""
        return " / ".join(
            f"{c.name}{f' ({c.subclass})' if c.subclass else ''} {c.level}"
            for c in character.classes
        )
    subclass = f" ({character.subclass})" if character.subclass else ""
    return f"{character.class_name or ''}{subclass}".strip()


def parse_class_display_string(text: str) -> list[CharacterClass]:
    """Inverse of class_display_text; segments without a level default to 1."""
    segments = [s.strip() for s in _CLASS_SEPARATOR_RE.split(text) if s.strip()]
    result: list[CharacterClass] = []
    for segment in segments:
        level_match = _CLASS_LEVEL_RE.search(segment)
        if not level_match:
            result.append(CharacterClass(name=segment))
            continue
        level = clamp_level(int(level_match.group(1)))
        before = segment[: level_match.start()].strip()
        sub_match = _SUBCLASS_RE.search(before)
        if sub_match:
            result.append(
                CharacterClass(
                    name=before[: sub_match.start()].strip(),
                    subclass=sub_match.group(1),
                    level=level,
                )
            )
        else:
            result.append(CharacterClass(name=before, level=level))
    return result
