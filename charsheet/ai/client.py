"""Character generation through the Anthropic Messages API."""

from __future__ import annotations

import logging
from functools import lru_cache

import anthropic
import instructor

from charsheet.ai.schemas import GeneratedCharacter
from charsheet.character import CharacterData, normalize_character
from charsheet.config import settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You create complete, rules-legal Dungeons & Dragons 5th edition characters. "
    "Fill every field of the sheet; ability scores, modifiers and spell save DC "
    "must be consistent with each other."
)


@lru_cache(maxsize=1)
def get_instructor_client() -> instructor.AsyncInstructor:
    """Anthropic client patched for structured output, built on first use.

    Built lazily so the app starts without an API key.
    """
    return instructor.from_anthropic(
        anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)
    )


async def generate_character(prompt: str) -> CharacterData:
    """Generate a complete level-appropriate D&D 5e character sheet.

    Args:
        prompt: The player's description of the character they want.

    Returns:
        The generated sheet, with its class list normalized.
    """
    model = settings.ai_model_generation
    response, completion = await get_instructor_client().messages.create_with_completion(
        model=model,
        max_tokens=settings.ai_max_tokens,
        system=SYSTEM_PROMPT,
        messages=[{"role": "user", "content": prompt}],
        response_model=GeneratedCharacter,
    )
    logger.info(
        "Generated character %r with %s (%d in / %d out tokens)",
        response.character_name,
        model,
        completion.usage.input_tokens,
        completion.usage.output_tokens,
    )
    return normalize_character(CharacterData.model_validate(response.model_dump()))
