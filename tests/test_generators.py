"""Tests for generation strategies (LLM mocked)."""

from __future__ import annotations

import json
import random
import re
from unittest.mock import AsyncMock, patch

import pytest

from stationv.errors import GenerationError
from stationv.generators import GenerationStrategy, generate, generate_nickname, get_generator
from stationv.generators.ai import (
    AIGenerator,
    _strip_code_fences,
    dedupe_nicknames,
    sanitize_nickname,
)
from stationv.generators.archetypes import load_archetypes
from stationv.generators.randomized import RandomGenerator, random_nickname
from stationv.generators.retry import with_retry
from stationv.generators.template import TemplateGenerator
from stationv.llm import LLMConfig
from stationv.models import UserDraft

_RANDOM_NICK_RE = re.compile(r"^(Cool|Silly|Clever|Lazy|Happy|Angry)(Cat|Dog|Coder|Ghost|Ninja|Rider)\d{3}$")


def _make_mock_response(content: str) -> AsyncMock:
    """Create a mock litellm response."""
    mock = AsyncMock()
    mock.choices = [AsyncMock()]
    mock.choices[0].message.content = content
    return mock


@pytest.fixture()
def delays(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Replace the backoff sleep with a recorder."""
    recorded: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        recorded.append(seconds)

    monkeypatch.setattr("stationv.generators.retry.asyncio.sleep", fake_sleep)
    return recorded


# ---------------------------------------------------------------------------
# Random / Template
# ---------------------------------------------------------------------------


class TestRandomNickname:
    def test_shape(self) -> None:
        assert _RANDOM_NICK_RE.match(random_nickname((), random.Random(1)))

    def test_avoids_existing(self) -> None:
        rng = random.Random(5)
        taken = random_nickname((), random.Random(5))
        assert random_nickname({taken}, rng) != taken


class TestRandomGenerator:
    @pytest.mark.asyncio
    async def test_count_and_distinct_nicknames(self) -> None:
        drafts = await generate(3, "random", [], rng=random.Random(42))
        assert len(drafts) == 3
        assert len({d.nickname for d in drafts}) == 3

    @pytest.mark.asyncio
    async def test_fields_populated(self) -> None:
        (draft,) = await RandomGenerator(random.Random(1)).generate(1, [])
        assert _RANDOM_NICK_RE.match(draft.nickname)
        assert len(draft.language_skills) == 1
        assert draft.language_skills[0].accent == ""
        assert draft.personality in {a.description for a in load_archetypes()}

    @pytest.mark.asyncio
    async def test_returns_drafts_without_ids(self) -> None:
        drafts = await generate(2, GenerationStrategy.RANDOM, ["x"])
        assert all(type(d) is UserDraft for d in drafts)


class TestTemplateGenerator:
    @pytest.mark.asyncio
    async def test_personality_from_catalog(self) -> None:
        drafts = await TemplateGenerator(random.Random(9)).generate(10, [])
        descriptions = {a.description for a in load_archetypes()}
        assert all(d.personality in descriptions for d in drafts)

    def test_catalog_loaded(self) -> None:
        names = [a.name for a in load_archetypes()]
        assert "Sarcastic Gamer" in names
        assert len(names) == 8

    def test_catalog_path_traversal_blocked(self) -> None:
        with pytest.raises(ValueError, match="escapes"):
            load_archetypes("../../etc/passwd")


def test_get_generator() -> None:
    assert isinstance(get_generator("ai"), AIGenerator)
    assert isinstance(get_generator("template"), TemplateGenerator)
    assert isinstance(get_generator("random"), RandomGenerator)
    with pytest.raises(ValueError):
        get_generator("psychic")


@pytest.mark.asyncio
async def test_generate_rejects_zero_count() -> None:
    with pytest.raises(ValueError):
        await generate(0, "random", [])


# ---------------------------------------------------------------------------
# Retry
# ---------------------------------------------------------------------------


class TestWithRetry:
    @pytest.mark.asyncio
    async def test_succeeds_after_failures(self, delays: list[float]) -> None:
        calls = 0

        async def flaky() -> str:
            nonlocal calls
            calls += 1
            if calls < 3:
                raise ConnectionError("rate limited")
            return "ok"

        assert await with_retry(flaky) == "ok"
        assert calls == 3
        assert delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_gives_up_after_three_retries(self, delays: list[float]) -> None:
        async def broken() -> str:
            raise ConnectionError("down")

        with pytest.raises(GenerationError) as excinfo:
            await with_retry(broken)
        assert excinfo.value.attempts == 4
        assert isinstance(excinfo.value.__cause__, ConnectionError)
        assert delays == [1.0, 2.0, 4.0]


# ---------------------------------------------------------------------------
# AI
# ---------------------------------------------------------------------------


_AI_USERS = [
    {
        "nickname": "Glitch King",
        "personality": "Breaks things for fun.",
        "languageSkills": [{"language": "English", "fluency": "Native"}],
        "writingStyle": {
            "formality": "Informal",
            "verbosity": "Terse",
            "humor": "Sarcastic",
            "emojiUsage": "Low",
            "punctuation": "Minimal",
        },
    },
    {
        "nickname": "neo!",
        "personality": "The One.",
        "languageSkills": [{"language": "English", "fluency": "Fluent", "accent": "Zion"}],
        "writingStyle": {
            "formality": "Neutral",
            "verbosity": "Neutral",
            "humor": "None",
            "emojiUsage": "None",
            "punctuation": "Standard",
        },
    },
]


class TestSanitize:
    def test_whitespace_and_symbols(self) -> None:
        assert sanitize_nickname(" Glitch King! ") == "Glitch_King"

    def test_keeps_hyphen_underscore(self) -> None:
        assert sanitize_nickname("echo-sphere_9") == "echo-sphere_9"

    def test_strip_code_fences(self) -> None:
        assert _strip_code_fences('```json\n[1]\n```') == "[1]"


class TestDedupeNicknames:
    def test_collision_with_existing(self) -> None:
        drafts = [UserDraft(nickname="neo")]
        (out,) = dedupe_nicknames(drafts, ["neo"], random.Random(0))
        assert re.match(r"^neo_\d{1,2}$", out.nickname)

    def test_collision_within_response(self) -> None:
        drafts = [UserDraft(nickname="neo"), UserDraft(nickname="neo")]
        first, second = dedupe_nicknames(drafts, [], random.Random(0))
        assert first.nickname == "neo"
        assert second.nickname.startswith("neo_")


class TestAIGenerator:
    @pytest.mark.asyncio
    async def test_generates_sanitized_drafts(self) -> None:
        captured: dict[str, object] = {}

        async def mock_acompletion(**kwargs: object) -> AsyncMock:
            captured.update(kwargs)
            return _make_mock_response(json.dumps({"users": _AI_USERS}))

        with patch("stationv.generators.ai.litellm.acompletion", side_effect=mock_acompletion):
            drafts = await AIGenerator(LLMConfig(model="test/model")).generate(2, ["neo"])

        assert captured["model"] == "test/model"
        assert captured["response_format"]["type"] == "json_schema"
        assert "neo" in captured["messages"][0]["content"]
        assert drafts[0].nickname == "Glitch_King"
        assert drafts[1].nickname.startswith("neo_")
        assert drafts[1].language_skills[0].accent == "Zion"

    @pytest.mark.asyncio
    async def test_accepts_bare_array_in_fences(self) -> None:
        fenced = f"```json\n{json.dumps(_AI_USERS)}\n```"
        with patch(
            "stationv.generators.ai.litellm.acompletion",
            new=AsyncMock(return_value=_make_mock_response(fenced)),
        ):
            drafts = await generate(2, "ai", [], llm=LLMConfig())
        assert [d.nickname for d in drafts] == ["Glitch_King", "neo"]

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self, delays: list[float]) -> None:
        responses = ["not json", json.dumps({"users": _AI_USERS})]

        async def mock_acompletion(**kwargs: object) -> AsyncMock:
            return _make_mock_response(responses.pop(0))

        with patch("stationv.generators.ai.litellm.acompletion", side_effect=mock_acompletion):
            drafts = await AIGenerator().generate(2, [])

        assert len(drafts) == 2
        assert delays == [1.0]

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise(self, delays: list[float]) -> None:
        with patch(
            "stationv.generators.ai.litellm.acompletion",
            new=AsyncMock(side_effect=ConnectionError("503")),
        ):
            with pytest.raises(GenerationError, match="503"):
                await AIGenerator().generate(2, [])
        assert len(delays) == 3


class TestGenerateNickname:
    @pytest.mark.asyncio
    async def test_from_model(self) -> None:
        with patch(
            "stationv.generators.ai.litellm.acompletion",
            new=AsyncMock(return_value=_make_mock_response("  Echo Sphere!\n")),
        ):
            assert await generate_nickname(LLMConfig()) == "Echo_Sphere"

    @pytest.mark.asyncio
    async def test_falls_back_to_random(self, delays: list[float]) -> None:
        with patch(
            "stationv.generators.ai.litellm.acompletion",
            new=AsyncMock(side_effect=ConnectionError("down")),
        ):
            nickname = await generate_nickname(LLMConfig(), random.Random(3))
        assert _RANDOM_NICK_RE.match(nickname)
        assert delays == []
