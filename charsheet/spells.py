"""Offensive and healing spell lookup.

Known spells are keyed by lowercase name. Spells outside the tables resolve to
``AttackType.none``; healing can also be inferred from a spell description.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from charsheet.character import AttackType


@dataclass(frozen=True)
class VariableDamageOption:
    label: str
    dice_sides: int
    condition: str


@dataclass(frozen=True)
class SpellAttackConfig:
    name: str
    attack_type: AttackType
    damage_dice: str | None = None
    variable_damage: tuple[VariableDamageOption, ...] = field(default_factory=tuple)
    save_type: str | None = None


@dataclass(frozen=True)
class HealingSpellConfig:
    name: str
    healing_dice: str
    applies_ability_modifier: bool


@dataclass(frozen=True)
class HealingDetection:
    is_healing: bool
    applies_modifier: bool


def _attack(name: str, dice: str) -> SpellAttackConfig:
    return SpellAttackConfig(name=name, attack_type=AttackType.attack, damage_dice=dice)


def _save(name: str, dice: str, save_type: str) -> SpellAttackConfig:
    return SpellAttackConfig(
        name=name, attack_type=AttackType.save, damage_dice=dice, save_type=save_type
    )


OFFENSIVE_SPELLS: dict[str, SpellAttackConfig] = {
    # Cantrips
    "fire bolt": _attack("Fire Bolt", "1d10"),
    "eldritch blast": _attack("Eldritch Blast", "1d10"),
    "ray of frost": _attack("Ray of Frost", "1d8"),
    "shocking grasp": _attack("Shocking Grasp", "1d8"),
    "frost bolt": _attack("Frost Bolt", "1d8"),
    "booming blade": _attack("Booming Blade", "1d8"),
    "green-flame blade": _attack("Green-Flame Blade", "1d8"),
    "sword burst": _save("Sword Burst", "1d6", "DEX"),
    "thunderwave": _save("Thunderwave", "2d8", "STR"),
    "toll the dead": SpellAttackConfig(
        name="Toll the Dead",
        attack_type=AttackType.save,
        damage_dice="1d8",
        variable_damage=(
            VariableDamageOption(label="d8", dice_sides=8, condition="Target has max HP"),
            VariableDamageOption(label="d12", dice_sides=12, condition="Target missing HP"),
        ),
        save_type="WIS",
    ),
    "sacred flame": _save("Sacred Flame", "1d8", "DEX"),
    "scorching ray": _attack("Scorching Ray", "2d6"),
    "magic missile": SpellAttackConfig(
        name="Magic Missile", attack_type=AttackType.auto_hit, damage_dice="1d4+1"
    ),
    "true strike": SpellAttackConfig(
        name="True Strike", attack_type=AttackType.auto_hit, damage_dice="0"
    ),
    # 1st level
    "guiding bolt": _attack("Guiding Bolt", "4d6"),
    "chromatic orb": _attack("Chromatic Orb", "3d8"),
    "burning hands": _save("Burning Hands", "3d6", "DEX"),
    # 2nd level and up
    "fireball": _save("Fireball", "8d6", "DEX"),
    "shatter": _save("Shatter", "3d8", "CON"),
    "fireball (3rd)": _save("Fireball", "8d6", "DEX"),
    "lightning bolt": _save("Lightning Bolt", "8d6", "DEX"),
    "meteor swarm": _save("Meteor Swarm", "40d6", "DEX"),
    "prismatic spray": _save("Prismatic Spray", "10d6", "DEX"),
}

HEALING_SPELLS: dict[str, HealingSpellConfig] = {
    "healing word": HealingSpellConfig("Healing Word", "1d4", True),
    "cure wounds": HealingSpellConfig("Cure Wounds", "1d8", True),
    "prayer of healing": HealingSpellConfig("Prayer of Healing", "1d4", True),
    "mass cure wounds": HealingSpellConfig("Mass Cure Wounds", "3d8", True),
    "cure disease": HealingSpellConfig("Cure Disease", "0", False),
    "lesser restoration": HealingSpellConfig("Lesser Restoration", "0", False),
    "greater restoration": HealingSpellConfig("Greater Restoration", "0", False),
    "regenerate": HealingSpellConfig("Regenerate", "4", False),
    "mass healing word": HealingSpellConfig("Mass Healing Word", "1d4", True),
    "heal": HealingSpellConfig("Heal", "70", False),
}

_NO_MODIFIER_KEYWORDS = (
    "regenerate",
    "restore",
    "cure disease",
    "lesser restoration",
    "greater restoration",
    "remove",
    "cleanse",
)
_MODIFIER_PATTERNS = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"gain.*hit points",
        r"restore.*hit points",
        r"heal",
        r"regain.*hit points",
        r"recover.*hit point",
    )
)
_HEALING_DICE_RE = re.compile(r"(\d+)d(\d+)", re.IGNORECASE)


def _key(spell_name: str) -> str:
    return spell_name.lower().strip()


def spell_attack_config(spell_name: str) -> SpellAttackConfig:
    """Return the attack config for a spell, or a non-offensive placeholder."""
    config = OFFENSIVE_SPELLS.get(_key(spell_name))
    if config is not None:
        return config
    return SpellAttackConfig(name=spell_name, attack_type=AttackType.none)


def has_variable_damage(spell_name: str) -> bool:
    return bool(spell_attack_config(spell_name).variable_damage)


def variable_damage_options(spell_name: str) -> list[VariableDamageOption]:
    return list(spell_attack_config(spell_name).variable_damage)


def healing_spell(spell_name: str) -> HealingSpellConfig | None:
    return HEALING_SPELLS.get(_key(spell_name))


def detect_healing_spell(spell_name: str, description: str | None = None) -> HealingDetection:
    """Decide whether a spell heals, and whether the caster's modifier is added.

    Known healing spells win. Otherwise the description is scanned: restoration
    style wording means healing without a modifier, hit point wording means
    healing with one.
    """
    config = healing_spell(spell_name)
    if config is not None:
        return HealingDetection(is_healing=True, applies_modifier=config.applies_ability_modifier)

    if description:
        lower = description.lower()
        if any(keyword in lower for keyword in _NO_MODIFIER_KEYWORDS):
            return HealingDetection(is_healing=True, applies_modifier=False)
        if any(pattern.search(lower) for pattern in _MODIFIER_PATTERNS):
            return HealingDetection(is_healing=True, applies_modifier=True)

    return HealingDetection(is_healing=False, applies_modifier=False)


def healing_formula_from_description(description: str | None) -> str | None:
    """Pull the first XdY out of a spell description, without any modifier."""
    if not description:
        return None
    m = _HEALING_DICE_RE.search(description)
    if m is None:
        return None
    return f"{m.group(1)}d{m.group(2)}"
