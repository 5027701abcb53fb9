"""Bonus damage features granted by class, subclass and race.

Given a character's primary class, total level, feature list and race, work
out which extra damage dice a weapon card should offer. Triggers are checked
in a fixed order (Rogue, Paladin, Ranger features, Eldritch Smite, Barbarian,
Half-Orc) and all matching is case-insensitive substring containment.

Slot-scaled smites are "pickers": one option per spell slot level the
character can expend.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from charsheet.character import CharacterData, Feature, parse_int, primary_class_name
from charsheet.stats import total_level


class BonusDamageOption(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    label: str
    dice: str
    damage_type: str | None = None


class BonusDamageFeature(BaseModel):
    """Either a fixed ``dice`` formula or a list of ``options`` to pick from."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    label: str
    condition: str | None = None
    crit_only: bool = False
    dice: str | None = None
    damage_type: str | None = None
    options: list[BonusDamageOption] | None = None


_SMITE_DICE_CAP = 5


def ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def has_feature(features: Iterable[Feature], name: str) -> bool:
    needle = name.lower()
    return any(needle in f.name.lower() for f in features)


def sneak_attack_dice(level: int) -> str:
    return f"{math.ceil(level / 2)}d6"


def paladin_max_slot_level(level: int) -> int:
    if level < 2:
        return 0
    if level <= 4:
        return 1
    if level <= 8:
        return 2
    if level <= 12:
        return 3
    if level <= 16:
        return 4
    return 5


def warlock_max_slot_level(level: int) -> int:
    if level <= 2:
        return 1
    if level <= 4:
        return 2
    if level <= 6:
        return 3
    if level <= 8:
        return 4
    return 5


def brutal_critical_dice(level: int) -> int:
    if level >= 17:
        return 3
    if level >= 13:
        return 2
    if level >= 9:
        return 1
    return 0


def divine_smite_options(level: int) -> list[BonusDamageOption]:
    options = []
    for slot in range(1, paladin_max_slot_level(level) + 1):
        dice = min(1 + slot, _SMITE_DICE_CAP)
        options.append(
            BonusDamageOption(
                label=f"{ordinal(slot)} level ({dice}d8)",
                dice=f"{dice}d8",
                damage_type="radiant",
            )
        )
    return options


def eldritch_smite_options(level: int) -> list[BonusDamageOption]:
    options = []
    for slot in range(1, warlock_max_slot_level(level) + 1):
        dice = 1 + slot
        options.append(
            BonusDamageOption(
                label=f"{ordinal(slot)} level ({dice}d8)",
                dice=f"{dice}d8",
                damage_type="force",
            )
        )
    return options


def _ranger_features(features: list[Feature], level: int) -> list[BonusDamageFeature]:
    result = []
    if has_feature(features, "Colossus Slayer"):
        result.append(
            BonusDamageFeature(
                name="Colossus Slayer",
                label="Colossus Slayer (1d8)",
                dice="1d8",
                condition="Once per turn vs creature below max HP",
            )
        )
    if has_feature(features, "Dread Ambusher"):
        result.append(
            BonusDamageFeature(
                name="Dread Ambusher",
                label="Dread Ambusher (1d8)",
                dice="1d8",
                condition="Extra damage on first attack of first turn in combat",
            )
        )
    if has_feature(features, "Planar Warrior"):
        dice = "2d8" if level >= 11 else "1d8"
        result.append(
            BonusDamageFeature(
                name="Planar Warrior",
                label=f"Planar Warrior ({dice})",
                dice=dice,
                damage_type="force",
                condition="Bonus action to mark creature, once per turn",
            )
        )
    return result


def bonus_damage_features(
    class_name: str,
    level: str,
    features: list[Feature],
    race: str,
) -> list[BonusDamageFeature]:
    """Resolve the bonus damage options available to a character.

    Args:
        class_name: Primary class name, e.g. "Paladin".
        level: Total character level as sheet text; unreadable values count as 1.
        features: The character's features and traits.
        race: Race name, e.g. "Half-Orc".

    Returns:
        Features in trigger order, each appearing at most once.
    """
    result: list[BonusDamageFeature] = []
    level_num = parse_int(level) or 1
    cls = class_name.lower().strip()
    race_lower = race.lower().strip()

    if "rogue" in cls:
        dice = sneak_attack_dice(level_num)
        result.append(
            BonusDamageFeature(
                name="Sneak Attack",
                label=f"Sneak Attack ({dice})",
                dice=dice,
                condition="Once per turn with advantage or ally within 5ft of target",
            )
        )

    if "paladin" in cls:
        smite_options = divine_smite_options(level_num)
        if smite_options:
            result.append(
                BonusDamageFeature(
                    name="Divine Smite",
                    label="Divine Smite",
                    condition="On melee hit, expend a spell slot (+1d8 vs undead/fiends)",
                    options=smite_options,
                )
            )
        if level_num >= 11:
            result.append(
                BonusDamageFeature(
                    name="Improved Divine Smite",
                    label="Imp. Smite (1d8)",
                    dice="1d8",
                    damage_type="radiant",
                    condition="Automatic on every melee weapon hit",
                )
            )

    result.extend(_ranger_features(features, level_num))

    if has_feature(features, "Eldritch Smite"):
        result.append(
            BonusDamageFeature(
                name="Eldritch Smite",
                label="Eldritch Smite",
                condition=(
                    "On pact weapon hit, expend warlock spell slot. "
                    "Knocks prone if Huge or smaller."
                ),
                options=eldritch_smite_options(level_num),
            )
        )

    if "barbarian" in cls:
        extra = brutal_critical_dice(level_num)
        if extra > 0:
            # The extra die matches the weapon; d6 stands in on the card.
            result.append(
                BonusDamageFeature(
                    name="Brutal Critical",
                    label=f"Brutal Crit (+{extra} die)",
                    dice=f"{extra}d6",
                    crit_only=True,
                    condition=(
                        f"On critical hit, roll {extra} extra weapon damage "
                        f"{'die' if extra == 1 else 'dice'}"
                    ),
                )
            )

    if "half-orc" in race_lower:
        result.append(
            BonusDamageFeature(
                name="Savage Attacks",
                label="Savage Attacks (+1 die)",
                dice="1d6",
                crit_only=True,
                condition="On critical hit with melee weapon, roll 1 extra weapon damage die",
            )
        )

    return result


def character_bonus_damage_features(character: CharacterData) -> list[BonusDamageFeature]:
    return bonus_damage_features(
        primary_class_name(character),
        str(total_level(character)),
        character.features,
        character.race,
    )
