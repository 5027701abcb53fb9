"""Character generation, derived stats and sheet roll routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from charsheet.ai import client as ai_client
from charsheet.bonus_damage import BonusDamageFeature, character_bonus_damage_features
from charsheet.character import CharacterData, class_display_text, normalize_character
from charsheet.dependencies import get_roll_store
from charsheet.dice import DiceError, check_bounds, parse_damage_formula
from charsheet.roll_store import RollStore
from charsheet.rolls import RollResult, SharedRollResult, roll_custom_formula, roll_healing
from charsheet.stats import (
    ability_modifier,
    ability_modifiers,
    hit_dice_by_class,
    hit_dice_groups,
    proficiency_bonus,
    spell_attack_bonus,
    spell_save_dc,
    spell_slots,
    spellcasting_ability_score,
    total_level,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/character")


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateRequest(_ApiModel):
    prompt: str = Field(min_length=1)


class HitDieGroupOut(_ApiModel):
    die_sides: int
    total: int
    remaining: int


class PactSlotsOut(_ApiModel):
    count: int
    level: int


class DerivedStats(_ApiModel):
    class_display: str
    total_level: int
    proficiency_bonus: int
    ability_modifiers: dict[str, int]
    spellcasting_ability_score: int
    spell_save_dc: int = Field(alias="spellSaveDC")
    spell_attack_bonus: int
    hit_dice: str
    hit_dice_groups: list[HitDieGroupOut]
    spell_slots: list[int]
    warlock_slots: PactSlotsOut | None = None
    bonus_damage_features: list[BonusDamageFeature]


class CustomRollRequest(_ApiModel):
    formula: str
    character_name: str | None = None


class HealingRollRequest(_ApiModel):
    character: CharacterData
    spell_name: str
    formula: str
    apply_modifier: bool = True


def derive_stats(character: CharacterData) -> DerivedStats:
    character = normalize_character(character)
    level = total_level(character)
    prof = proficiency_bonus(level)
    casting_score = spellcasting_ability_score(character)
    slots = spell_slots(character)
    pact = slots.warlock_slots
    return DerivedStats(
        class_display=class_display_text(character),
        total_level=level,
        proficiency_bonus=prof,
        ability_modifiers=ability_modifiers(character),
        spellcasting_ability_score=casting_score,
        spell_save_dc=spell_save_dc(casting_score, prof),
        spell_attack_bonus=spell_attack_bonus(casting_score, prof),
        hit_dice=hit_dice_by_class(character),
        hit_dice_groups=[
            HitDieGroupOut(die_sides=g.die_sides, total=g.total, remaining=g.remaining)
            for g in hit_dice_groups(character)
        ],
        spell_slots=list(slots.slots),
        warlock_slots=PactSlotsOut(count=pact.count, level=pact.level) if pact else None,
        bonus_damage_features=character_bonus_damage_features(character),
    )


async def _share(
    roll: RollResult, character_name: str | None, store: RollStore
) -> SharedRollResult:
    shared = roll.share(character_name)
    await store.append(shared)
    return shared


@router.post("", response_model=CharacterData, response_model_by_alias=True)
async def generate(body: GenerateRequest) -> CharacterData:
    """Generate a new character sheet from a free-text description."""
    try:
        return await ai_client.generate_character(body.prompt)
    except Exception:
        logger.exception("Failed to generate character")
        raise HTTPException(status_code=502, detail="Character generation failed")


@router.post("/derived", response_model=DerivedStats, response_model_by_alias=True)
async def derived(character: CharacterData) -> DerivedStats:
    """Compute level, proficiency, spell DCs, hit dice, slots and bonus damage."""
    return derive_stats(character)


@router.post("/rolls/custom", response_model=SharedRollResult, response_model_by_alias=True)
async def custom_roll(
    body: CustomRollRequest,
    store: RollStore = Depends(get_roll_store),
) -> SharedRollResult:
    """Roll a formula typed in by the player and post it to the shared log."""
    roll = roll_custom_formula(body.formula)
    if roll is None:
        raise HTTPException(status_code=400, detail="Invalid dice formula")
    return await _share(roll, body.character_name, store)


@router.post("/rolls/healing", response_model=SharedRollResult, response_model_by_alias=True)
async def healing_roll(
    body: HealingRollRequest,
    store: RollStore = Depends(get_roll_store),
) -> SharedRollResult:
    """Roll a healing spell using the character's spellcasting modifier."""
    try:
        check_bounds(parse_damage_formula(body.formula))
    except DiceError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    modifier = ability_modifier(spellcasting_ability_score(body.character))
    roll = roll_healing(
        body.spell_name, body.formula, modifier, apply_modifier=body.apply_modifier
    )
    return await _share(roll, body.character.character_name, store)
