"""Generation strategies for candidate users."""

from __future__ import annotations

import random
from collections.abc import Sequence
from enum import Enum

from stationv.generators.ai import AIGenerator, generate_nickname
from stationv.generators.base import BaseGenerator
from stationv.generators.randomized import RandomGenerator
from stationv.generators.template import TemplateGenerator
from stationv.llm import LLMConfig
from stationv.models import UserDraft


class GenerationStrategy(str, Enum):
    RANDOM = "random"
    TEMPLATE = "template"
    AI = "ai"


def get_generator(
    strategy: GenerationStrategy | str,
    *,
    llm: LLMConfig | None = None,
    rng: random.Random | None = None,
) -> BaseGenerator:
    strategy = GenerationStrategy(strategy)
    if strategy is GenerationStrategy.AI:
        return AIGenerator(llm=llm, rng=rng)
    if strategy is GenerationStrategy.TEMPLATE:
        return TemplateGenerator(rng=rng)
    return RandomGenerator(rng=rng)


async def generate(
    count: int,
    strategy: GenerationStrategy | str,
    existing_nicknames: Sequence[str],
    *,
    llm: LLMConfig | None = None,
    rng: random.Random | None = None,
) -> list[UserDraft]:
    """Produce *count* candidate users with the chosen strategy.

    Nothing is committed; pass the result to ``WorldRepository.add_users``.
    """
    if count < 1:
        raise ValueError("count must be at least 1")
    generator = get_generator(strategy, llm=llm, rng=rng)
    return await generator.generate(count, existing_nicknames)


__all__: list[str] = [
    "AIGenerator",
    "BaseGenerator",
    "GenerationStrategy",
    "RandomGenerator",
    "TemplateGenerator",
    "generate",
    "generate_nickname",
    "get_generator",
]
