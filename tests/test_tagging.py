from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest
from rich.console import Console

from reelstack.config.settings import Settings
from reelstack.services.tagging import TagGenerator

from conftest import StubAgent


def _generator(settings: Settings, console: Console, agent: object = None, **kwargs: object) -> TagGenerator:
    return TagGenerator(settings=settings, console=console, agent=agent, backoff_base_seconds=0, **kwargs)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("platform", "expected"),
    [
        ("YouTube", ["youtube", "video", "entertainment"]),
        ("instagram", ["instagram", "reel", "social"]),
        ("TikTok", ["tiktok", "short-form", "viral"]),
        ("Vimeo", ["video", "content", "media"]),
    ],
)
def test_without_credentials_uses_static_platform_tags(
    settings: Settings, console: Console, platform: str, expected: list[str]
) -> None:
    generator = _generator(settings, console)

    assert generator.ai_enabled is False
    assert asyncio.run(generator.generate("t", "d", "https://example.com", platform)) == expected


def test_model_output_is_parsed_and_capped(settings: Settings, console: Console) -> None:
    agent = StubAgent(" Cooking, #Pasta , , \"Italian\", quick recipe, food, dinner, easy, weeknight, extra")
    generator = _generator(settings, console, agent)

    tags = asyncio.run(generator.generate("Pasta", "Quick pasta", "https://youtube.com/shorts/abcd1234567", "YouTube"))

    assert tags == ["cooking", "pasta", "italian", "quick recipe", "food", "dinner", "easy"]


def test_overlong_tags_are_discarded(settings: Settings, console: Console) -> None:
    agent = StubAgent("a" * 30 + ", fine, " + "b" * 29)

    tags = asyncio.run(_generator(settings, console, agent).generate("t", "d", "https://vimeo.com/1", "Vimeo"))

    assert tags == ["fine", "b" * 29]


def test_unusable_output_falls_back_to_generic_triple(settings: Settings, console: Console) -> None:
    agent = StubAgent(" , ,, ")

    tags = asyncio.run(_generator(settings, console, agent).generate("t", "d", "https://vimeo.com/1", "Vimeo"))

    assert tags == ["vimeo", "video", "content"]


def test_model_errors_retry_then_use_platform_tags(settings: Settings, console: Console) -> None:
    agent = StubAgent(RuntimeError("rate limited"))
    generator = _generator(settings, console, agent, max_attempts=3)

    tags = asyncio.run(generator.generate("t", "d", "https://www.tiktok.com/@u/video/1", "TikTok"))

    assert tags == ["tiktok", "short-form", "viral"]
    assert len(agent.prompts) == 3


def test_retry_recovers_after_transient_error(settings: Settings, console: Console) -> None:
    agent = StubAgent(RuntimeError("503"), "travel, beach, sunset")
    generator = _generator(settings, console, agent, max_attempts=2)

    tags = asyncio.run(generator.generate("t", "d", "https://www.instagram.com/reel/x/", "Instagram"))

    assert tags == ["travel", "beach", "sunset"]
    assert len(agent.prompts) == 2


def test_slow_model_times_out(settings: Settings, console: Console) -> None:
    class SlowAgent:
        calls = 0

        async def run(self, user_prompt: str) -> SimpleNamespace:
            SlowAgent.calls += 1
            await asyncio.sleep(5)
            return SimpleNamespace(output="never")

    generator = _generator(settings, console, SlowAgent(), max_attempts=1, timeout_seconds=0.01)

    tags = asyncio.run(generator.generate("t", "d", "https://youtu.be/abcd1234567", "YouTube"))

    assert tags == ["youtube", "video", "entertainment"]
    assert SlowAgent.calls == 1


def test_prompt_embeds_context_and_form_hint(settings: Settings, console: Console) -> None:
    generator = _generator(settings, console)

    short_prompt = generator.build_prompt("My Clip", "About cats", "https://youtube.com/shorts/abcd1234567", "YouTube")
    long_prompt = generator.build_prompt("My Clip", "About cats", "https://www.youtube.com/watch?v=abcd1234567", "YouTube")

    assert "short-form" in short_prompt
    assert "long-form" in long_prompt
    for fragment in ("My Clip", "About cats", "https://youtube.com/shorts/abcd1234567", "Platform: YouTube", "5-7"):
        assert fragment in short_prompt


def test_generic_tags_drop_unusable_platform_label() -> None:
    assert TagGenerator.generic_tags("A" * 40) == ["video", "content"]
    assert TagGenerator.generic_tags("Web") == ["web", "video", "content"]


def test_generate_step_without_agent_reports_error(settings: Settings, console: Console) -> None:
    generator = _generator(settings, console)

    state = asyncio.run(generator._generate_node({"prompt": "tags please"}))

    assert state == {"attempt": 1, "output": None, "error": "no tagging agent configured"}
