"""AI-backed strategy: users and nicknames from an LLM via litellm."""

from __future__ import annotations

import json
import logging
import random
import re
from collections.abc import Sequence
from typing import Any

import litellm

from stationv.constants import (
    EMOJI_LEVELS,
    FORMALITY_LEVELS,
    HUMOR_LEVELS,
    PUNCTUATION_LEVELS,
    VERBOSITY_LEVELS,
)
from stationv.generators.base import BaseGenerator
from stationv.generators.randomized import random_nickname
from stationv.generators.retry import with_retry
from stationv.llm import LLMConfig
from stationv.models import FLUENCY_LEVELS, UserDraft

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Structured-output schema
# ---------------------------------------------------------------------------

USER_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "nickname": {
            "type": "string",
            "description": (
                "A creative and unique nickname. Should not contain spaces or "
                "special characters other than underscores or hyphens."
            ),
        },
        "personality": {
            "type": "string",
            "description": (
                "A detailed description of the user's personality, quirks, and "
                "interests. Should be 2-3 sentences long."
            ),
        },
        "languageSkills": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "language": {"type": "string", "description": "A language the user speaks."},
                    "fluency": {
                        "type": "string",
                        "enum": [f.value for f in FLUENCY_LEVELS],
                        "description": "The user's fluency level in this language.",
                    },
                    "accent": {
                        "type": "string",
                        "description": 'An optional accent or dialect. e.g., "British", "Southern American".',
                    },
                },
                "required": ["language", "fluency"],
            },
        },
        "writingStyle": {
            "type": "object",
            "properties": {
                "formality": {"type": "string", "enum": FORMALITY_LEVELS},
                "verbosity": {"type": "string", "enum": VERBOSITY_LEVELS},
                "humor": {"type": "string", "enum": HUMOR_LEVELS},
                "emojiUsage": {"type": "string", "enum": EMOJI_LEVELS},
                "punctuation": {"type": "string", "enum": PUNCTUATION_LEVELS},
            },
            "required": ["formality", "verbosity", "humor", "emojiUsage", "punctuation"],
        },
    },
    "required": ["nickname", "personality", "languageSkills", "writingStyle"],
}

# Providers with strict JSON-schema mode want an object at the top level.
RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {"users": {"type": "array", "items": USER_SCHEMA}},
    "required": ["users"],
}

_NICKNAME_PROMPT = (
    "Generate a single, creative, and unique IRC-style nickname. It should be one "
    "word, alphanumeric, and may contain underscores or hyphens. "
    'Examples: "CyberNinja", "Glitch_King", "EchoSphere".'
)

_CODE_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*\n(.*?)\n\s*```\s*$", re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s")
_DISALLOWED_RE = re.compile(r"[^a-zA-Z0-9_-]")


def _strip_code_fences(content: str) -> str:
    """Remove wrapping ```json fences if the LLM added them."""
    match = _CODE_FENCE_RE.match(content.strip())
    if match:
        return match.group(1).strip()
    return content.strip()


def sanitize_nickname(raw: str) -> str:
    """Whitespace becomes ``_``; anything outside ``[A-Za-z0-9_-]`` is dropped."""
    return _DISALLOWED_RE.sub("", _WHITESPACE_RE.sub("_", raw.strip()))


def _build_users_prompt(count: int, existing_nicknames: Sequence[str]) -> str:
    return (
        f"Generate {count} unique virtual user profiles for an IRC simulation.\n"
        "Each user must have a unique nickname that is not in this list: "
        f"[{', '.join(existing_nicknames)}].\n"
        "Provide detailed and creative personalities.\n"
        'Return a JSON object of the form {"users": [...]} where each item matches '
        "the provided schema.\n"
        "Do not include markdown backticks in the response. Just the raw JSON."
    )


# ---------------------------------------------------------------------------
# LLM call helper
# ---------------------------------------------------------------------------


async def _llm_call(prompt: str, llm: LLMConfig, **extra: Any) -> str:
    """Send a single-turn completion request and return the stripped content."""
    kwargs: dict[str, Any] = dict(llm.to_litellm_kwargs())
    kwargs.update({
        "messages": [{"role": "user", "content": prompt}],
        "timeout": 120,
        **extra,
    })
    response = await litellm.acompletion(**kwargs)
    if not response.choices:
        raise RuntimeError("LLM returned empty choices list")
    content = response.choices[0].message.content
    if content is None:
        raise RuntimeError("LLM returned None content (possibly content-filtered)")
    return _strip_code_fences(content)


def _extract_user_items(payload: Any) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("users"), list):
        return payload["users"]
    raise ValueError("LLM response is neither a user array nor an object with 'users'")


def dedupe_nicknames(
    drafts: Sequence[UserDraft],
    existing_nicknames: Sequence[str],
    rng: random.Random,
) -> list[UserDraft]:
    """Sanitize nicknames and suffix any that collide with *existing_nicknames*
    or with one accepted earlier in *drafts*."""
    used = set(existing_nicknames)
    out: list[UserDraft] = []
    for draft in drafts:
        nickname = sanitize_nickname(draft.nickname) or random_nickname(used, rng)
        base = nickname
        while nickname in used:
            nickname = f"{base}_{rng.randrange(100)}"
        used.add(nickname)
        out.append(draft.model_copy(update={"nickname": nickname}))
    return out


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


class AIGenerator(BaseGenerator):
    """Asks the configured model for complete user profiles."""

    def __init__(self, llm: LLMConfig | None = None, rng: random.Random | None = None) -> None:
        super().__init__(rng)
        self.llm = llm or LLMConfig()

    async def _request(self, count: int, existing_nicknames: Sequence[str]) -> list[UserDraft]:
        content = await _llm_call(
            _build_users_prompt(count, existing_nicknames),
            self.llm,
            response_format={
                "type": "json_schema",
                "json_schema": {"name": "virtual_users", "schema": RESPONSE_SCHEMA},
            },
        )
        items = _extract_user_items(json.loads(content))
        return [UserDraft.model_validate(item) for item in items]

    async def generate(self, count: int, existing_nicknames: Sequence[str]) -> list[UserDraft]:
        drafts = await with_retry(lambda: self._request(count, existing_nicknames))
        return dedupe_nicknames(drafts, existing_nicknames, self.rng)


async def generate_nickname(
    llm: LLMConfig | None = None,
    rng: random.Random | None = None,
) -> str:
    """One IRC-style nickname from the model, or a random one if the model fails."""
    llm = llm or LLMConfig()
    rng = rng or random.Random()
    try:
        raw = await _llm_call(_NICKNAME_PROMPT, llm)
    except Exception as exc:
        logger.warning("AI nickname generation failed, falling back to random: %s", exc)
        return random_nickname((), rng)
    return sanitize_nickname(raw) or random_nickname((), rng)
