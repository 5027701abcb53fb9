"""Spell lookup routes used to decide which roll buttons a spell card shows."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from charsheet.spells import (
    detect_healing_spell,
    healing_formula_from_description,
    spell_attack_config,
)

router = APIRouter(prefix="/api/spells")


@router.get("/{spell_name}")
async def spell_info(spell_name: str, description: str | None = None) -> JSONResponse:
    config = spell_attack_config(spell_name)
    healing = detect_healing_spell(spell_name, description)
    return JSONResponse(
        {
            "name": config.name,
            "attackType": config.attack_type.value,
            "damageDice": config.damage_dice,
            "saveType": config.save_type,
            "variableDamage": [
                {"label": o.label, "diceSides": o.dice_sides, "condition": o.condition}
                for o in config.variable_damage
            ],
            "isHealing": healing.is_healing,
            "appliesModifier": healing.applies_modifier,
            "healingFormula": healing_formula_from_description(description),
        }
    )
