"""Offline strategy: users assembled from random vocabulary picks."""

from __future__ import annotations

import random
from collections.abc import Collection, Sequence

from stationv.constants import (
    EMOJI_LEVELS,
    FORMALITY_LEVELS,
    HUMOR_LEVELS,
    LANGUAGES,
    NICK_ADJECTIVES,
    NICK_NOUNS,
    PUNCTUATION_LEVELS,
    VERBOSITY_LEVELS,
)
from stationv.generators.base import BaseGenerator
from stationv.generators.archetypes import load_archetypes
from stationv.models import FLUENCY_LEVELS, LanguageSkill, UserDraft, WritingStyle


def random_nickname(existing: Collection[str], rng: random.Random) -> str:
    """Adjective + noun + 3-digit suffix, re-rolled while it is in *existing*."""
    while True:
        nickname = (
            f"{rng.choice(NICK_ADJECTIVES)}{rng.choice(NICK_NOUNS)}{rng.randint(100, 999)}"
        )
        if nickname not in existing:
            return nickname


def random_writing_style(rng: random.Random) -> WritingStyle:
    return WritingStyle(
        formality=rng.choice(FORMALITY_LEVELS),
        verbosity=rng.choice(VERBOSITY_LEVELS),
        humor=rng.choice(HUMOR_LEVELS),
        emoji_usage=rng.choice(EMOJI_LEVELS),
        punctuation=rng.choice(PUNCTUATION_LEVELS),
    )


def random_user(existing: Collection[str], rng: random.Random) -> UserDraft:
    archetype = rng.choice(load_archetypes())
    return UserDraft(
        nickname=random_nickname(existing, rng),
        personality=archetype.description,
        language_skills=[
            LanguageSkill(language=rng.choice(LANGUAGES), fluency=rng.choice(FLUENCY_LEVELS))
        ],
        writing_style=random_writing_style(rng),
    )


class RandomGenerator(BaseGenerator):
    """Each user is drawn independently.

    Nicknames are only checked against *existing_nicknames*, not against
    other users of the same batch.
    """

    async def generate(self, count: int, existing_nicknames: Sequence[str]) -> list[UserDraft]:
        existing = set(existing_nicknames)
        return [random_user(existing, self.rng) for _ in range(count)]
