"""Tests for the character generator's use of the Anthropic client."""

from __future__ import annotations

import logging
from types import SimpleNamespace

from charsheet.ai.client import SYSTEM_PROMPT, generate_character
from charsheet.ai.schemas import GeneratedCharacter
from charsheet.config import settings


class _FakeMessages:
    def __init__(self, response: GeneratedCharacter) -> None:
        self.response = response
        self.calls: list[dict] = []

    async def create_with_completion(self, **kwargs):
        self.calls.append(kwargs)
        completion = SimpleNamespace(usage=SimpleNamespace(input_tokens=120, output_tokens=900))
        return self.response, completion


def _use_fake(monkeypatch, response: GeneratedCharacter) -> _FakeMessages:
    messages = _FakeMessages(response)
    monkeypatch.setattr(
        "charsheet.ai.client.get_instructor_client",
        lambda: SimpleNamespace(messages=messages),
    )
    return messages


async def test_generate_character_normalizes_legacy_class(monkeypatch):
    messages = _use_fake(
        monkeypatch,
        GeneratedCharacter(character_name="Lira", race="Elf", class_name="Wizard", level="3"),
    )

    character = await generate_character("An elven wizard who collects maps")

    assert character.character_name == "Lira"
    assert [(c.name, c.level) for c in character.classes] == [("Wizard", 3)]
    (call,) = messages.calls
    assert call["messages"] == [{"role": "user", "content": "An elven wizard who collects maps"}]
    assert call["system"] == SYSTEM_PROMPT
    assert call["model"] == settings.ai_model_generation
    assert call["max_tokens"] == settings.ai_max_tokens
    assert call["response_model"] is GeneratedCharacter


async def test_generate_character_logs_usage(monkeypatch, caplog):
    _use_fake(monkeypatch, GeneratedCharacter(character_name="Pike", race="Gnome"))

    with caplog.at_level(logging.INFO, logger="charsheet.ai.client"):
        await generate_character("A gnome cleric")

    assert "Pike" in caplog.text
    assert "120 in / 900 out tokens" in caplog.text
