"""Pydantic response models for AI functions.

Format constraints live here, not in prompt text.
"""

from __future__ import annotations

from pydantic import Field

from charsheet.character import CharacterData


class GeneratedCharacter(CharacterData):
    """A full character sheet as produced by the generator."""

    character_name: str = Field(min_length=1, description="The character's name.")
    race: str = Field(min_length=1, description="Race or species, e.g. 'Half-Orc'.")
    spellcasting_ability: str = Field(
        default="",
        description="Three-letter spellcasting ability code (str, dex, con, int, wis, cha), "
        "or empty for non-casters.",
    )
