"""Tests for derived character statistics."""

from __future__ import annotations

import pytest

from charsheet.character import CharacterClass, CharacterData
from charsheet.stats import (
    ability_modifier,
    ability_modifiers,
    format_bonus,
    hit_dice_by_class,
    hit_dice_groups,
    proficiency_bonus,
    proficiency_bonus_from_level,
    spell_attack_bonus,
    spell_save_dc,
    spell_slots,
    spellcasting_ability_score,
    total_level,
)


@pytest.mark.parametrize(
    ("score", "expected"), [(10, 0), (15, 2), (8, -1), (20, 5), (1, -5), (11, 0), (9, -1)]
)
def test_ability_modifier(score, expected):
    assert ability_modifier(score) == expected


@pytest.mark.parametrize(
    ("level", "expected"),
    [(1, 2), (4, 2), (5, 3), (8, 3), (9, 4), (12, 4), (13, 5), (16, 5), (17, 6), (20, 6)],
)
def test_proficiency_bonus(level, expected):
    assert proficiency_bonus(level) == expected


def test_proficiency_bonus_from_level_text():
    assert proficiency_bonus_from_level("9") == 4
    assert proficiency_bonus_from_level("") == 2
    assert proficiency_bonus_from_level("unknown") == 2


def test_spell_save_dc_and_attack_bonus():
    assert spell_save_dc(16, 3) == 14
    assert spell_attack_bonus(16, 3) == 6
    assert spell_attack_bonus(8, 2) == 1


def test_format_bonus():
    assert format_bonus(4) == "+4"
    assert format_bonus(0) == "+0"
    assert format_bonus(-2) == "-2"


class TestTotalLevel:
    def test_sums_multiclass(self):
        character = CharacterData(
            classes=[CharacterClass(name="Fighter", level=5), CharacterClass(name="Rogue", level=3)]
        )
        assert total_level(character) == 8

    def test_legacy_level(self):
        assert total_level(CharacterData(class_name="Wizard", level="7")) == 7

    def test_defaults_to_one(self):
        assert total_level(CharacterData(level="")) == 1
        assert total_level(CharacterData()) == 1


class TestSpellcastingAbility:
    def test_maps_code_to_score(self):
        character = CharacterData(spellcasting_ability="WIS", wisdom="16")
        assert spellcasting_ability_score(character) == 16

    def test_unknown_code_defaults_to_ten(self):
        assert spellcasting_ability_score(CharacterData(spellcasting_ability="")) == 10
        assert spellcasting_ability_score(CharacterData(spellcasting_ability="luck")) == 10

    def test_unreadable_score_defaults_to_ten(self):
        character = CharacterData(spellcasting_ability="cha", charisma="")
        assert spellcasting_ability_score(character) == 10


def test_ability_modifiers():
    character = CharacterData(strength="18", dexterity="7", constitution="14")
    mods = ability_modifiers(character)
    assert mods["strength"] == 4
    assert mods["dexterity"] == -2
    assert mods["constitution"] == 2
    assert mods["wisdom"] == 0


def test_blank_ability_scores_count_as_ten():
    character = CharacterData(strength="", dexterity="n/a", constitution="12abc")
    mods = ability_modifiers(character)
    assert mods["strength"] == 0
    assert mods["dexterity"] == 0
    assert mods["constitution"] == 1


class TestHitDice:
    def test_multiclass_hit_dice(self):
        character = CharacterData(
            classes=[CharacterClass(name="Paladin", level=5), CharacterClass(name="Warlock", level=3)]
        )
        assert hit_dice_by_class(character) == "5d10 + 3d8"

    def test_unknown_class_falls_back_to_sheet(self):
        character = CharacterData(classes=[CharacterClass(name="Gunslinger")], hit_dice="1d10")
        assert hit_dice_by_class(character) == "1d10"

    def test_groups_pool_die_sizes_and_track_spent(self):
        character = CharacterData(
            classes=[
                CharacterClass(name="Rogue", level=3),
                CharacterClass(name="Bard", level=2),
                CharacterClass(name="Fighter", level=1),
            ],
            spent_hit_dice={"8": 4},
        )
        groups = {g.die_sides: g for g in hit_dice_groups(character)}
        assert groups[8].total == 5
        assert groups[8].remaining == 1
        assert groups[10].remaining == 1


class TestSpellSlots:
    def test_full_caster(self):
        info = spell_slots(CharacterData(classes=[CharacterClass(name="Wizard", level=5)]))
        assert info.slots[:3] == (4, 3, 2)
        assert info.warlock_slots is None

    def test_half_caster_rounds_down(self):
        info = spell_slots(CharacterData(classes=[CharacterClass(name="Paladin", level=1)]))
        assert info.slots == (0,) * 9

    def test_third_caster_subclass(self):
        character = CharacterData(
            classes=[CharacterClass(name="Fighter", subclass="Eldritch Knight", level=3)]
        )
        assert spell_slots(character).slots[0] == 2

    def test_warlock_pact_magic_is_separate(self):
        character = CharacterData(
            classes=[CharacterClass(name="Cleric", level=2), CharacterClass(name="Warlock", level=5)]
        )
        info = spell_slots(character)
        assert info.slots[0] == 3
        assert info.warlock_slots is not None
        assert (info.warlock_slots.count, info.warlock_slots.level) == (2, 3)
