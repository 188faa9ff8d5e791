"""Strategy that stamps a catalog archetype onto random users."""

from __future__ import annotations

from collections.abc import Sequence

from stationv.generators.archetypes import load_archetypes
from stationv.generators.base import BaseGenerator
from stationv.generators.randomized import random_user
from stationv.models import UserDraft


class TemplateGenerator(BaseGenerator):
    """Like :class:`RandomGenerator`, but the personality is re-drawn from
    the archetype catalog for every user."""

    async def generate(self, count: int, existing_nicknames: Sequence[str]) -> list[UserDraft]:
        existing = set(existing_nicknames)
        archetypes = load_archetypes()
        drafts: list[UserDraft] = []
        for _ in range(count):
            draft = random_user(existing, self.rng)
            archetype = self.rng.choice(archetypes)
            drafts.append(draft.model_copy(update={"personality": archetype.description}))
        return drafts
